import json
import re
from typing import Any, Dict

from checkin.core.errors import MalformedResponseError

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """
    Remove markdown code fences (```json / ```) the model may add
    despite being told not to.
    """
    return _FENCE_RE.sub("", text or "").strip()


def parse_json_object(text: str) -> Dict[str, Any]:
    raw_text = strip_code_fences(text)

    if not raw_text:
        raise MalformedResponseError("empty_llm_response", raw_text)

    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"invalid_json: {e}", raw_text) from e

    if not isinstance(parsed, dict):
        raise MalformedResponseError("invalid_schema: expected a JSON object", raw_text)

    return parsed
