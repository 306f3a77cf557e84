"""
Live transcription capture.

A TranscriptionSession turns a streaming recognition engine (browser-style:
continuous, interim results enabled) into a restartable text buffer with
finalized text, interim text, recording status and error state.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional

from checkin.core.errors import CaptureErrorKind

logger = logging.getLogger(__name__)

UNSUPPORTED_MESSAGE = (
    "Speech recognition is not supported in this environment. "
    "Please use a browser or client with speech capture enabled."
)
UNAVAILABLE_MESSAGE = "Speech recognition is not available."
START_FAILURE_MESSAGE = "Failed to start recording. Please try again."
STOP_FAILURE_MESSAGE = "Error: stop-failed. Please try again."


@dataclass(frozen=True)
class RecognitionResult:
    transcript: str
    is_final: bool


@dataclass(frozen=True)
class RecognitionEvent:
    """
    Cumulative results for the current engine run.
    Entries before result_index were already delivered in earlier events.
    """

    result_index: int
    results: List[RecognitionResult]


ResultHandler = Callable[[RecognitionEvent], None]
ErrorHandler = Callable[[str], None]
EndHandler = Callable[[], None]


class RecognitionEngine(ABC):
    continuous = True
    interim_results = True

    def __init__(self, language: str = "en-US") -> None:
        self.language = language
        self._result_handler: Optional[ResultHandler] = None
        self._error_handler: Optional[ErrorHandler] = None
        self._end_handler: Optional[EndHandler] = None

    def on_result(self, handler: ResultHandler) -> None:
        self._result_handler = handler

    def on_error(self, handler: ErrorHandler) -> None:
        self._error_handler = handler

    def on_end(self, handler: EndHandler) -> None:
        self._end_handler = handler

    def _emit_result(self, event: RecognitionEvent) -> None:
        if self._result_handler:
            self._result_handler(event)

    def _emit_error(self, code: str) -> None:
        if self._error_handler:
            self._error_handler(code)

    def _emit_end(self) -> None:
        if self._end_handler:
            self._end_handler()

    @abstractmethod
    def start(self) -> None: ...

    @abstractmethod
    def stop(self) -> None: ...


@dataclass(frozen=True)
class CaptureSnapshot:
    is_recording: bool
    finalized_text: str
    interim_text: str
    supported: bool
    last_error: Optional[str]
    last_error_kind: Optional[CaptureErrorKind]


class TranscriptionSession:
    def __init__(self, engine: Optional[RecognitionEngine]) -> None:
        self._engine = engine
        self._lock = threading.RLock()
        self._closed = False

        self.supported = engine is not None
        self.is_recording = False
        self.finalized_text = ""
        self.interim_text = ""
        self.last_error: Optional[str] = None
        self.last_error_kind: Optional[CaptureErrorKind] = None

        if engine is None:
            self.last_error = UNSUPPORTED_MESSAGE
            self.last_error_kind = CaptureErrorKind.UNAVAILABLE
            return

        engine.on_result(self._handle_result)
        engine.on_error(self._handle_error)
        engine.on_end(self._handle_end)

    # --------------------
    # PUBLIC CONTROLS
    # --------------------

    def start_recording(self) -> None:
        with self._lock:
            if self._engine is None:
                self.last_error = UNAVAILABLE_MESSAGE
                self.last_error_kind = CaptureErrorKind.UNAVAILABLE
                return

            if self.is_recording:
                return

            self.finalized_text = ""
            self.interim_text = ""
            self.last_error = None
            self.last_error_kind = None
            self.is_recording = True

            try:
                self._engine.start()
            except Exception as e:
                logger.warning("[ASR] engine failed to start: %s", e)
                self.is_recording = False
                self.last_error = START_FAILURE_MESSAGE
                self.last_error_kind = CaptureErrorKind.START_FAILURE

    def stop_recording(self) -> None:
        with self._lock:
            self._stop_engine()
            self.is_recording = False
            self.interim_text = ""

    def reset_transcript(self) -> None:
        with self._lock:
            self.finalized_text = ""
            self.interim_text = ""
            self.last_error = None
            self.last_error_kind = None

    def transcript(self) -> str:
        with self._lock:
            return self.finalized_text.strip()

    def harvest(self) -> Optional[str]:
        """
        Stop recording and hand over the finalized transcript.
        Returns None when nothing was recognized.
        """
        with self._lock:
            self.stop_recording()
            text = self.finalized_text.strip()
        return text or None

    def snapshot(self) -> CaptureSnapshot:
        with self._lock:
            return CaptureSnapshot(
                is_recording=self.is_recording,
                finalized_text=self.finalized_text,
                interim_text=self.interim_text,
                supported=self.supported,
                last_error=self.last_error,
                last_error_kind=self.last_error_kind,
            )

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._stop_engine()
            self.is_recording = False
            self.interim_text = ""

    def _stop_engine(self) -> None:
        if self._engine is None:
            return
        try:
            self._engine.stop()
        except Exception as e:
            logger.warning("[ASR] engine failed to stop: %s", e)
            self.last_error = STOP_FAILURE_MESSAGE
            self.last_error_kind = CaptureErrorKind.ENGINE_ERROR

    # --------------------
    # ENGINE CALLBACKS
    # --------------------

    def _handle_result(self, event: RecognitionEvent) -> None:
        finalized = ""
        interim = ""

        for result in event.results[event.result_index:]:
            if result.is_final:
                finalized += result.transcript + " "
            else:
                interim += result.transcript

        with self._lock:
            self.finalized_text += finalized
            self.interim_text = interim

    def _handle_error(self, code: str) -> None:
        logger.warning("[ASR] engine error: %s", code)
        with self._lock:
            self.is_recording = False
            self.last_error = f"Error: {code}. Please try again."
            self.last_error_kind = CaptureErrorKind.ENGINE_ERROR

    def _handle_end(self) -> None:
        with self._lock:
            self.is_recording = False
