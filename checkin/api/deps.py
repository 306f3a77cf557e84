import logging
from pathlib import Path
from typing import Optional

from checkin.asr.vosk_adapter import VoskRecognitionEngine
from checkin.config import settings
from checkin.pipeline.extract import TranscriptExtractor, build_extractor

logger = logging.getLogger(__name__)


def get_extractor() -> TranscriptExtractor:
    return build_extractor()


def get_recognition_engine() -> Optional[VoskRecognitionEngine]:
    """
    Server-side capture needs a Vosk model on disk; without one the
    capability is reported as unsupported.
    """
    if not Path(settings.VOSK_MODEL_PATH).exists():
        logger.warning("[ASR] vosk model not found at %s", settings.VOSK_MODEL_PATH)
        return None
    return VoskRecognitionEngine()
