"""
Canonical check-in record schema and the adapters that coerce model output
and older stored revisions into it.

Canonical shape:
    {
      "patient_data": {"name": str|null, "age": str|null, "gender": str|null},
      "symptoms": [{"name": str, "duration": str|null, "severity": "Low|Medium|High"}]
    }
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class Severity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


SEVERITY_ALIASES: Dict[str, Severity] = {
    "low": Severity.LOW,
    "mild": Severity.LOW,
    "medium": Severity.MEDIUM,
    "moderate": Severity.MEDIUM,
    "high": Severity.HIGH,
    "severe": Severity.HIGH,
}

DEFAULT_SEVERITY = Severity.MEDIUM


def normalize_severity(value: Any) -> Severity:
    if isinstance(value, Severity):
        return value
    if isinstance(value, str):
        return SEVERITY_ALIASES.get(value.strip().lower(), DEFAULT_SEVERITY)
    return DEFAULT_SEVERITY


def _clean_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        value = value.strip()
        if not value or value.lower() in ("null", "none", "unknown"):
            return None
        return value
    return None


class PatientData(BaseModel):
    name: Optional[str] = None
    age: Optional[str] = None
    gender: Optional[str] = None

    @field_validator("name", "age", "gender", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        return _clean_text(value)

    @field_validator("name")
    @classmethod
    def _title_case(cls, value: Optional[str]) -> Optional[str]:
        return value.title() if value else value


class Symptom(BaseModel):
    name: str
    duration: Optional[str] = None
    severity: Severity = DEFAULT_SEVERITY

    @field_validator("name", mode="before")
    @classmethod
    def _require_name(cls, value: Any) -> str:
        cleaned = _clean_text(value)
        if not cleaned:
            raise ValueError("symptom name is required")
        return cleaned

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_duration(cls, value: Any) -> Optional[str]:
        return _clean_text(value)

    @field_validator("severity", mode="before")
    @classmethod
    def _coerce_severity(cls, value: Any) -> Severity:
        return normalize_severity(value)


class ExtractionResult(BaseModel):
    patient_data: PatientData = Field(default_factory=PatientData)
    symptoms: List[Symptom] = Field(default_factory=list)


# --------------------
# MODEL OUTPUT
# --------------------

def _symptom_entries(raw: Any) -> List[Dict[str, Any]]:
    if raw is None:
        return []
    if isinstance(raw, dict):
        raw = [raw]
    if not isinstance(raw, list):
        raise ValueError("symptoms must be a list")

    entries: List[Dict[str, Any]] = []
    for item in raw:
        if isinstance(item, str):
            item = {"name": item}
        if not isinstance(item, dict):
            continue
        if not _clean_text(item.get("name")):
            continue
        entries.append(
            {
                "name": item.get("name"),
                "duration": item.get("duration"),
                "severity": item.get("severity"),
            }
        )
    return entries


def coerce_extraction(payload: Dict[str, Any]) -> ExtractionResult:
    """
    Map one parsed model response into the canonical record.
    Missing sections fall back to empty defaults; a structurally wrong
    payload raises ValueError.
    """
    if not isinstance(payload, dict):
        raise ValueError("extraction payload must be an object")

    patient = payload.get("patient_data")
    if patient is None:
        patient = {}
    if not isinstance(patient, dict):
        raise ValueError("patient_data must be an object")

    return ExtractionResult(
        patient_data=PatientData(
            name=patient.get("name"),
            age=patient.get("age"),
            gender=patient.get("gender"),
        ),
        symptoms=[Symptom(**s) for s in _symptom_entries(payload.get("symptoms"))],
    )


# --------------------
# LEGACY REVISIONS
# --------------------

def _upgrade_symptoms_data(symptoms_data: Any) -> List[Dict[str, Any]]:
    if isinstance(symptoms_data, list):
        return _symptom_entries(symptoms_data)

    if not isinstance(symptoms_data, dict):
        return []

    if "primary_symptom" in symptoms_data:
        return _symptom_entries(
            [
                {
                    "name": symptoms_data.get("primary_symptom"),
                    "duration": symptoms_data.get("duration"),
                    "severity": symptoms_data.get("severity"),
                }
            ]
        )

    names = symptoms_data.get("symptoms") or []
    if isinstance(names, str):
        names = [names]
    return _symptom_entries(
        [
            {
                "name": name,
                "duration": symptoms_data.get("duration"),
                "severity": symptoms_data.get("severity"),
            }
            for name in names
        ]
    )


FLAT_RECORD_KEYS = ("patient_name", "age", "gender", "duration")


def _upgrade_flat_record(upgraded: Dict[str, Any]) -> None:
    """
    Earliest revision kept everything at the top level:
    {"patient_name", "age", "symptoms": [str], "duration"}.
    """
    patient = upgraded["patient_data"]
    name = upgraded.pop("patient_name", None)
    if name and not patient.get("name"):
        patient["name"] = name
    for field in ("age", "gender"):
        value = upgraded.pop(field, None)
        if value is not None and patient.get(field) is None:
            patient[field] = value

    duration = upgraded.pop("duration", None)
    symptoms = upgraded.get("symptoms")
    if isinstance(symptoms, str):
        symptoms = [symptoms]
    if isinstance(symptoms, list):
        upgraded["symptoms"] = [
            {"name": s, "duration": duration} if isinstance(s, str) else s
            for s in symptoms
        ]


def upgrade_legacy_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Rewrite older record revisions into the canonical keys:
    - top-level patient_name/age/symptoms/duration -> patient_data + symptoms
    - patient_data.patient_name -> patient_data.name
    - symptoms_data (single primary symptom, list of names, or list of
      symptom objects) -> symptoms
    - symptoms given as plain strings -> symptom objects
    Canonical records pass through unchanged.
    """
    upgraded = dict(record)

    patient = dict(upgraded.get("patient_data") or {})
    if "patient_name" in patient:
        legacy_name = patient.pop("patient_name")
        if not patient.get("name"):
            patient["name"] = legacy_name
    upgraded["patient_data"] = patient

    if any(key in upgraded for key in FLAT_RECORD_KEYS):
        _upgrade_flat_record(upgraded)

    if "symptoms_data" in upgraded:
        legacy = upgraded.pop("symptoms_data")
        if not upgraded.get("symptoms"):
            upgraded["symptoms"] = _upgrade_symptoms_data(legacy)

    if upgraded.get("symptoms") is not None:
        upgraded["symptoms"] = _symptom_entries(upgraded["symptoms"])

    return upgraded
