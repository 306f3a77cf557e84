import os
from typing import List

from dotenv import load_dotenv

load_dotenv()

DEFAULT_GEMINI_MODELS = "gemini-2.0-flash,gemini-1.5-flash,gemini-1.5-pro"


def _model_candidates() -> List[str]:
    models: List[str] = []

    preferred = os.getenv("GEMINI_MODEL")
    if preferred:
        models.append(preferred.strip())

    for name in os.getenv("GEMINI_MODELS", DEFAULT_GEMINI_MODELS).split(","):
        name = name.strip()
        if name and name not in models:
            models.append(name)

    return models


class Settings:
    ENV = os.getenv("ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
    GEMINI_MODELS = _model_candidates()
    GEMINI_TIMEOUT_SECONDS = float(os.getenv("GEMINI_TIMEOUT_SECONDS", "30"))

    SPEECH_LANGUAGE = os.getenv("SPEECH_LANGUAGE", "en-US")
    VOSK_MODEL_PATH = os.getenv("VOSK_MODEL_PATH", "models/vosk/en/vosk-model-small-en-us-0.15")
    VOSK_SAMPLE_RATE = int(os.getenv("VOSK_SAMPLE_RATE", "16000"))

    CHECKIN_DATA_DIR = os.getenv("CHECKIN_DATA_DIR", "data/checkins")


settings = Settings()
