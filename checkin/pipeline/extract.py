import asyncio
import logging
from typing import Optional, Sequence

from checkin.config import settings
from checkin.core.errors import MissingCredentialError
from checkin.llm.fallback import FallbackPolicy
from checkin.llm.gemini import GeminiTextClient, TextGenerator, make_attempt
from checkin.llm.prompt import build_extraction_prompt
from checkin.pipeline.schema import ExtractionResult, coerce_extraction

logger = logging.getLogger(__name__)


class TranscriptExtractor:
    """
    Narrative-to-record extraction:
    transcript -> prompt -> candidate models in order -> canonical record.

    Raises MissingCredentialError before any request when no API key is
    configured, and ExtractionExhaustedError when every candidate fails.
    """

    def __init__(
        self,
        api_key: Optional[str],
        candidates: Sequence[str],
        timeout_seconds: float = 30.0,
        client: Optional[TextGenerator] = None,
    ):
        self.api_key = api_key
        self.policy = FallbackPolicy(candidates)
        self.timeout_seconds = timeout_seconds
        self._client = client

    def _get_client(self) -> TextGenerator:
        if self._client is None:
            self._client = GeminiTextClient(self.api_key, self.timeout_seconds)
        return self._client

    async def extract(
        self,
        transcript: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ExtractionResult:
        if not self.api_key:
            raise MissingCredentialError()

        transcript = (transcript or "").strip()
        if not transcript:
            raise ValueError("transcript is empty")

        prompt = build_extraction_prompt(transcript)
        attempt = make_attempt(self._get_client(), prompt, validate=coerce_extraction)

        result = await self.policy.run(attempt, cancel_event=cancel_event)
        logger.info("[LLM] extraction succeeded with %s", result.model)

        return coerce_extraction(result.payload)


def build_extractor() -> TranscriptExtractor:
    return TranscriptExtractor(
        api_key=settings.GEMINI_API_KEY,
        candidates=settings.GEMINI_MODELS,
        timeout_seconds=settings.GEMINI_TIMEOUT_SECONDS,
    )
