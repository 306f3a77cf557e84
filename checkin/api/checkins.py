from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from checkin.core.errors import ExtractionExhaustedError, MissingCredentialError
from checkin.llm.prompt import PROMPT_VERSION
from checkin.pipeline.extract import TranscriptExtractor
from checkin.pipeline.schema import ExtractionResult, PatientData, Symptom
from checkin.storage.checkin_store import (
    delete_checkin,
    get_checkin,
    recent_checkins,
    save_checkin,
    update_checkin,
)
from checkin.api.deps import get_extractor

router = APIRouter(prefix="/checkins", tags=["checkins"])

MISSING_KEY_DETAIL = "Gemini API key is not configured"
EXTRACTION_FAILED_DETAIL = "AI extraction failed"


class ExtractRequest(BaseModel):
    transcript: str


class CheckinCreate(BaseModel):
    transcript: str = ""
    patient_data: PatientData = Field(default_factory=PatientData)
    symptoms: List[Symptom] = Field(default_factory=list)
    source: Literal["voice", "manual"] = "voice"


class CheckinUpdate(BaseModel):
    transcript: Optional[str] = None
    patient_data: PatientData = Field(default_factory=PatientData)
    symptoms: List[Symptom] = Field(default_factory=list)


async def run_extraction(extractor: TranscriptExtractor, transcript: str) -> ExtractionResult:
    """
    Shared error mapping for HTTP callers of the extractor.
    """
    try:
        return await extractor.extract(transcript)
    except MissingCredentialError:
        raise HTTPException(status_code=503, detail=MISSING_KEY_DETAIL)
    except ExtractionExhaustedError:
        raise HTTPException(status_code=502, detail=EXTRACTION_FAILED_DETAIL)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/extract")
async def extract_checkin(
    request: ExtractRequest,
    extractor: TranscriptExtractor = Depends(get_extractor),
):
    """
    Structure a finished transcript for receptionist review.
    Nothing is saved here.
    """
    record = await run_extraction(extractor, request.transcript)
    return {
        "transcript": request.transcript.strip(),
        "prompt_version": PROMPT_VERSION,
        **record.model_dump(mode="json"),
    }


@router.post("", status_code=201)
async def create_checkin(checkin: CheckinCreate):
    record = ExtractionResult(
        patient_data=checkin.patient_data,
        symptoms=checkin.symptoms,
    )
    return save_checkin(checkin.transcript.strip(), record, source=checkin.source)


@router.get("")
async def list_checkins(limit: int = Query(10, ge=1, le=100)):
    return recent_checkins(limit)


@router.get("/{checkin_id}")
async def fetch_checkin(checkin_id: str):
    try:
        return get_checkin(checkin_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Check-in not found")


@router.put("/{checkin_id}")
async def edit_checkin(checkin_id: str, update: CheckinUpdate):
    record = ExtractionResult(
        patient_data=update.patient_data,
        symptoms=update.symptoms,
    )
    transcript = update.transcript.strip() if update.transcript is not None else None
    try:
        return update_checkin(checkin_id, transcript, record)
    except KeyError:
        raise HTTPException(status_code=404, detail="Check-in not found")


@router.delete("/{checkin_id}")
async def remove_checkin(checkin_id: str):
    try:
        delete_checkin(checkin_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Check-in not found")

    return {"status": "ok"}
