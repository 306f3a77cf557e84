import json
import logging
from functools import lru_cache
from typing import List, Optional

from vosk import Model, KaldiRecognizer

from checkin.asr.capture import RecognitionEngine, RecognitionEvent, RecognitionResult
from checkin.config import settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=4)
def load_model(model_path: str) -> Model:
    logger.info("[ASR] loading vosk model from %s", model_path)
    return Model(model_path)


class VoskRecognitionEngine(RecognitionEngine):
    """
    Continuous recognition over raw 16-bit mono PCM pushed by the caller.
    Completed utterances become final results; the running partial
    hypothesis is published as a single trailing interim result.
    """

    def __init__(
        self,
        model_path: Optional[str] = None,
        sample_rate: Optional[int] = None,
        language: Optional[str] = None,
    ) -> None:
        super().__init__(language or settings.SPEECH_LANGUAGE)
        self.model_path = model_path or settings.VOSK_MODEL_PATH
        self.sample_rate = sample_rate or settings.VOSK_SAMPLE_RATE

        self._recognizer: Optional[KaldiRecognizer] = None
        self._finals: List[RecognitionResult] = []
        self._partial = ""

    @property
    def running(self) -> bool:
        return self._recognizer is not None

    def start(self) -> None:
        if self._recognizer is not None:
            raise RuntimeError("recognition already started")

        recognizer = KaldiRecognizer(load_model(self.model_path), self.sample_rate)
        recognizer.SetPartialWords(True)

        self._recognizer = recognizer
        self._finals = []
        self._partial = ""

    def accept_audio(self, data: bytes) -> None:
        if self._recognizer is None:
            self._emit_error("not-started")
            return

        if self._recognizer.AcceptWaveform(data):
            result = json.loads(self._recognizer.Result())
            self._commit(result.get("text", "").strip())
            return

        partial = json.loads(self._recognizer.PartialResult()).get("partial", "")
        if partial == self._partial:
            return

        self._partial = partial
        results = list(self._finals)
        if partial:
            results.append(RecognitionResult(transcript=partial, is_final=False))

        self._emit_result(
            RecognitionEvent(result_index=len(self._finals), results=results)
        )

    def stop(self) -> None:
        if self._recognizer is None:
            return

        result = json.loads(self._recognizer.FinalResult())
        self._recognizer = None
        self._commit(result.get("text", "").strip())
        self._emit_end()

    def _commit(self, text: str) -> None:
        had_partial = bool(self._partial)
        self._partial = ""

        if not text:
            if had_partial:
                self._emit_result(
                    RecognitionEvent(result_index=len(self._finals), results=list(self._finals))
                )
            return

        index = len(self._finals)
        self._finals.append(RecognitionResult(transcript=text, is_final=True))
        self._emit_result(RecognitionEvent(result_index=index, results=list(self._finals)))
