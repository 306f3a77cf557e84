import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Protocol

from google import genai
from google.genai import errors as genai_errors

from checkin.core.errors import CandidateFailure, MalformedResponseError
from checkin.llm.fallback import Attempt, AttemptResult
from checkin.llm.parsing import parse_json_object

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    async def generate(self, model: str, prompt: str) -> Optional[str]: ...


class GeminiTextClient:
    """
    Text-in / text-out access to Gemini models.
    Each call is bounded by timeout_seconds.
    """

    def __init__(self, api_key: str, timeout_seconds: float = 30.0):
        self._client = genai.Client(api_key=api_key)
        self.timeout_seconds = timeout_seconds

    async def generate(self, model: str, prompt: str) -> Optional[str]:
        response = await asyncio.wait_for(
            self._client.aio.models.generate_content(
                model=model,
                contents=prompt,
                config={"temperature": 0.0},
            ),
            timeout=self.timeout_seconds,
        )
        return response.text


def make_attempt(
    client: TextGenerator,
    prompt: str,
    validate: Optional[Callable[[Dict[str, Any]], Any]] = None,
) -> Attempt:
    """
    Build the uniform attempt function used by FallbackPolicy:
    generate -> strip fences -> parse JSON object -> optional validation.
    Every failure becomes a CandidateFailure; nothing is raised.
    """

    async def attempt(model: str) -> AttemptResult:
        try:
            raw_text = await client.generate(model, prompt)
        except asyncio.TimeoutError:
            return AttemptResult.failed(CandidateFailure(model, "timeout", "request timed out"))
        except genai_errors.APIError as e:
            return AttemptResult.failed(CandidateFailure(model, "status", f"{e.code}: {e.message}"))
        except Exception as e:
            return AttemptResult.failed(CandidateFailure(model, "transport", str(e)))

        if not raw_text or not raw_text.strip():
            return AttemptResult.failed(CandidateFailure(model, "empty", "response had no text"))

        try:
            parsed = parse_json_object(raw_text)
            if validate is not None:
                validate(parsed)
        except (MalformedResponseError, ValueError, TypeError) as e:
            logger.debug("[LLM] malformed output from %s: %r", model, raw_text)
            return AttemptResult.failed(CandidateFailure(model, "malformed", str(e)))

        return AttemptResult.ok(model, parsed)

    return attempt
