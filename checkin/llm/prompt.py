import json
from typing import Dict

PROMPT_VERSION = "checkin_v3"

# Literal phrase -> English clinical term, for code-mixed (Roman Urdu) speech.
ROMAN_URDU_GLOSSARY: Dict[str, str] = {
    "ulti": "vomiting",
    "ultiyan": "vomiting",
    "jee matlana": "nausea",
    "bukhar": "fever",
    "tez bukhar": "high fever",
    "sar dard": "headache",
    "sir dard": "headache",
    "pait dard": "abdominal pain",
    "pet dard": "abdominal pain",
    "seene mein dard": "chest pain",
    "kamar dard": "back pain",
    "khansi": "cough",
    "sookhi khansi": "dry cough",
    "gala kharab": "sore throat",
    "zukam": "common cold / runny nose",
    "naak behna": "runny nose",
    "chakkar": "dizziness",
    "saans phoolna": "shortness of breath",
    "saans lene mein takleef": "difficulty breathing",
    "dast": "diarrhea",
    "qabz": "constipation",
    "kamzori": "weakness",
    "thakawat": "fatigue",
    "jism dard": "body aches",
    "kharish": "itching",
    "neend nahi aati": "insomnia",
    "bhook nahi lagti": "loss of appetite",
}


def _format_glossary() -> str:
    return "\n".join(
        f'- "{phrase}" means "{term}"'
        for phrase, term in ROMAN_URDU_GLOSSARY.items()
    )


def build_extraction_prompt(transcript: str) -> str:
    """
    Build the single extraction instruction sent to every candidate model.
    The transcript is embedded verbatim.
    """

    return f"""
You are a medical data structuring engine for a clinic front desk.
You must NOT provide medical advice.
You must NOT invent information.

Analyze this patient check-in transcript:
{json.dumps(transcript, ensure_ascii=False)}

The speech may be English, Roman Urdu, or a mix of both.
Translate any non-English content to English BEFORE structuring it.

Glossary (Roman Urdu phrase to English medical term):
{_format_glossary()}

Rules:
- Return EXACTLY one JSON object.
- Do NOT include markdown or code fences (no ``` blocks).
- Do NOT include explanations or any text outside the JSON.
- Write the patient name in Title Case (e.g. "Ali Khan").
- Extract EVERY symptom mentioned as a separate entry in "symptoms".
- Classify each symptom severity as exactly one of: "Low", "Medium", "High".
- If a value is not stated, use null. Do NOT guess.

JSON FORMAT:
{{
  "patient_data": {{
    "name": "string or null",
    "age": "string or null",
    "gender": "string or null"
  }},
  "symptoms": [
    {{
      "name": "string",
      "duration": "string or null",
      "severity": "Low | Medium | High"
    }}
  ]
}}
"""
