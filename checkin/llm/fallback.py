import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from checkin.core.errors import (
    CandidateFailure,
    ExtractionCancelledError,
    ExtractionExhaustedError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttemptResult:
    model: str
    payload: Optional[Dict[str, Any]] = None
    failure: Optional[CandidateFailure] = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None and self.payload is not None

    @classmethod
    def ok(cls, model: str, payload: Dict[str, Any]) -> "AttemptResult":
        return cls(model=model, payload=payload)

    @classmethod
    def failed(cls, failure: CandidateFailure) -> "AttemptResult":
        return cls(model=failure.model, failure=failure)


Attempt = Callable[[str], Awaitable[AttemptResult]]


class FallbackPolicy:
    """
    Try candidate models one at a time, in priority order.
    The first successful attempt wins; a failed candidate is never retried.
    """

    def __init__(self, candidates: Sequence[str]):
        ordered: List[str] = []
        for name in candidates:
            if name and name not in ordered:
                ordered.append(name)

        if not ordered:
            raise ValueError("at least one candidate model is required")

        self.candidates = ordered

    async def run(
        self,
        attempt: Attempt,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AttemptResult:
        failures: List[CandidateFailure] = []

        for model in self.candidates:
            if cancel_event is not None and cancel_event.is_set():
                raise ExtractionCancelledError()

            result = await self._attempt_once(attempt, model, cancel_event)

            if result.succeeded:
                if failures:
                    logger.info(
                        "[LLM] %s succeeded after %d failed candidate(s)",
                        model,
                        len(failures),
                    )
                return result

            failure = result.failure or CandidateFailure(model, "empty", "no payload")
            logger.warning(
                "[LLM] candidate %s failed (%s): %s",
                failure.model,
                failure.reason,
                failure.detail,
            )
            failures.append(failure)

        logger.error("[LLM] all %d candidate models failed", len(failures))
        raise ExtractionExhaustedError(failures)

    async def _attempt_once(
        self,
        attempt: Attempt,
        model: str,
        cancel_event: Optional[asyncio.Event],
    ) -> AttemptResult:
        if cancel_event is None:
            return await attempt(model)

        attempt_task = asyncio.ensure_future(attempt(model))
        cancel_task = asyncio.ensure_future(cancel_event.wait())

        try:
            await asyncio.wait(
                {attempt_task, cancel_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            attempt_task.cancel()
            raise
        finally:
            cancel_task.cancel()

        if not attempt_task.done():
            attempt_task.cancel()
            raise ExtractionCancelledError()

        return attempt_task.result()
