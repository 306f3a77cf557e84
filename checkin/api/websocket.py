import asyncio
import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, WebSocket

from checkin.asr.capture import CaptureSnapshot, TranscriptionSession
from checkin.asr.vosk_adapter import VoskRecognitionEngine
from checkin.core.errors import ExtractionExhaustedError, MissingCredentialError
from checkin.llm.prompt import PROMPT_VERSION
from checkin.pipeline.extract import TranscriptExtractor
from checkin.api.deps import get_extractor, get_recognition_engine

logger = logging.getLogger(__name__)

ws_router = APIRouter()


def _is_stop(msg: Dict[str, Any]) -> bool:
    raw = (msg.get("text") or "").strip()
    if not raw:
        return False

    # frontend sends raw "stop" or JSON {"type": "stop"}
    if raw == "stop":
        return True
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        return False
    return isinstance(payload, dict) and payload.get("type") == "stop"


def _error_message(snapshot: CaptureSnapshot) -> Dict[str, Any]:
    return {
        "type": "error",
        "kind": snapshot.last_error_kind.value if snapshot.last_error_kind else None,
        "message": snapshot.last_error,
    }


async def _send_progress(
    ws: WebSocket,
    before: CaptureSnapshot,
    after: CaptureSnapshot,
) -> None:
    committed = after.finalized_text[len(before.finalized_text):].strip()
    if committed:
        await ws.send_json({
            "type": "transcript",
            "time": datetime.now().strftime("%H:%M:%S"),
            "text": committed,
        })

    # a committed utterance already replaces the partial on the client
    if after.interim_text != before.interim_text and (after.interim_text or not committed):
        await ws.send_json({"type": "partial", "text": after.interim_text})

    if after.last_error and after.last_error != before.last_error:
        await ws.send_json(_error_message(after))


async def _extract_unless_disconnected(
    ws: WebSocket,
    extractor: TranscriptExtractor,
    transcript: str,
) -> bool:
    """
    Run extraction while watching the socket.
    Returns False when the client disconnected and the extraction was aborted.
    """
    extraction = asyncio.create_task(extractor.extract(transcript))

    while True:
        watcher = asyncio.create_task(ws.receive())
        done, _ = await asyncio.wait(
            {extraction, watcher},
            return_when=asyncio.FIRST_COMPLETED,
        )

        if extraction in done:
            watcher.cancel()
            break

        if watcher.result()["type"] == "websocket.disconnect":
            extraction.cancel()
            await asyncio.wait({extraction})
            logger.info("[LLM] extraction cancelled by client disconnect")
            return False

    try:
        record = extraction.result()
    except MissingCredentialError as e:
        await ws.send_json({
            "type": "error",
            "kind": "missing_credential",
            "message": str(e),
            "transcript": transcript,
        })
        return True
    except ExtractionExhaustedError as e:
        await ws.send_json({
            "type": "error",
            "kind": "extraction_exhausted",
            "message": str(e),
            "models_tried": e.models_tried,
            "transcript": transcript,
        })
        return True

    await ws.send_json({
        "type": "structured",
        "transcript": transcript,
        "prompt_version": PROMPT_VERSION,
        **record.model_dump(mode="json"),
    })
    return True


@ws_router.websocket("/ws/checkin")
async def checkin_websocket(
    ws: WebSocket,
    engine: Optional[VoskRecognitionEngine] = Depends(get_recognition_engine),
    extractor: TranscriptExtractor = Depends(get_extractor),
):
    await ws.accept()

    session = TranscriptionSession(engine)

    try:
        session.start_recording()
        snapshot = session.snapshot()

        if not snapshot.is_recording:
            await ws.send_json(_error_message(snapshot))
            await ws.close()
            return

        await ws.send_json({"type": "recording", "language": engine.language})

        while True:
            msg = await ws.receive()

            if msg["type"] == "websocket.disconnect":
                return

            if _is_stop(msg):
                transcript = session.harvest()
                if transcript is None:
                    await ws.send_json({"type": "empty"})
                elif not await _extract_unless_disconnected(ws, extractor, transcript):
                    return
                break

            data = msg.get("bytes")
            if not data:
                continue

            before = session.snapshot()
            engine.accept_audio(data)
            await _send_progress(ws, before, session.snapshot())

        await ws.close()

    finally:
        session.close()
