from dataclasses import dataclass
from enum import Enum
from typing import List, Literal


class CaptureErrorKind(str, Enum):
    """
    Capture failures are kept in session state, never raised.
    UNAVAILABLE is permanent for the session; the others clear on the next start.
    """

    UNAVAILABLE = "capture_unavailable"
    START_FAILURE = "capture_start_failure"
    ENGINE_ERROR = "capture_engine_error"


FailureReason = Literal["transport", "timeout", "status", "empty", "malformed"]


@dataclass(frozen=True)
class CandidateFailure:
    model: str
    reason: FailureReason
    detail: str = ""


class ExtractionError(RuntimeError):
    """Base class for failures surfaced by the transcript extractor."""


class MissingCredentialError(ExtractionError):
    def __init__(self, message: str = "Gemini API key is missing"):
        super().__init__(message)


class ExtractionExhaustedError(ExtractionError):
    def __init__(self, failures: List[CandidateFailure]):
        super().__init__("AI extraction failed")
        self.failures = list(failures)

    @property
    def models_tried(self) -> List[str]:
        return [f.model for f in self.failures]


class ExtractionCancelledError(ExtractionError):
    def __init__(self, message: str = "AI extraction cancelled"):
        super().__init__(message)


class MalformedResponseError(ValueError):
    """
    Model text that is not a JSON object after fence stripping.
    Only ever converted into a CandidateFailure by the fallback chain.
    """

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text
