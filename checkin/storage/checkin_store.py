import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from checkin.config import settings
from checkin.pipeline.schema import (
    FLAT_RECORD_KEYS,
    ExtractionResult,
    upgrade_legacy_record,
)

logger = logging.getLogger(__name__)


def _base_dir() -> Path:
    return Path(settings.CHECKIN_DATA_DIR)


def _checkin_path(checkin_id: str, created_at: datetime) -> Path:
    date_dir = _base_dir() / created_at.strftime("%Y-%m-%d")
    date_dir.mkdir(parents=True, exist_ok=True)
    return date_dir / f"{checkin_id}.json"


def _find_path(checkin_id: str) -> Path:
    try:
        uuid.UUID(checkin_id)
    except ValueError:
        raise KeyError(checkin_id) from None

    for path in _base_dir().glob(f"*/{checkin_id}.json"):
        return path
    raise KeyError(checkin_id)


def _load(path: Path) -> Dict[str, Any]:
    record = json.loads(path.read_text(encoding="utf-8"))
    upgraded = upgrade_legacy_record(record)
    structured = ExtractionResult.model_validate(
        {
            "patient_data": upgraded.get("patient_data") or {},
            "symptoms": upgraded.get("symptoms") or [],
        }
    )
    return {
        **upgraded,
        **structured.model_dump(mode="json"),
    }


def save_checkin(
    transcript: str,
    record: ExtractionResult,
    source: str = "voice",
) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    checkin_id = str(uuid.uuid4())

    stored = {
        "id": checkin_id,
        "created_at": now.isoformat(),
        "raw_transcript": transcript,
        "source": source,
        **record.model_dump(mode="json"),
    }

    path = _checkin_path(checkin_id, now)
    path.write_text(json.dumps(stored, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("[STORE] saved check-in %s", checkin_id)
    return stored


def recent_checkins(limit: int = 10) -> List[Dict[str, Any]]:
    base = _base_dir()
    if not base.exists():
        return []

    records = []
    for path in base.glob("*/*.json"):
        try:
            records.append(_load(path))
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning("[STORE] skipping unreadable check-in %s: %s", path.name, e)

    records.sort(key=lambda r: r.get("created_at", ""), reverse=True)
    return records[:limit]


def get_checkin(checkin_id: str) -> Dict[str, Any]:
    return _load(_find_path(checkin_id))


def update_checkin(
    checkin_id: str,
    transcript: Optional[str],
    record: ExtractionResult,
) -> Dict[str, Any]:
    """
    Replace the structured record of a saved check-in.
    id, created_at and source are kept; the transcript only changes when given.
    """
    path = _find_path(checkin_id)
    stored = json.loads(path.read_text(encoding="utf-8"))
    for legacy_key in ("symptoms_data", *FLAT_RECORD_KEYS):
        stored.pop(legacy_key, None)

    if transcript is not None:
        stored["raw_transcript"] = transcript
    stored.update(record.model_dump(mode="json"))
    stored["updated_at"] = datetime.now(timezone.utc).isoformat()

    path.write_text(json.dumps(stored, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("[STORE] updated check-in %s", checkin_id)
    return _load(path)


def delete_checkin(checkin_id: str) -> None:
    path = _find_path(checkin_id)
    path.unlink()
    logger.info("[STORE] deleted check-in %s", checkin_id)
