import pytest

from checkin.core.errors import MalformedResponseError
from checkin.llm.parsing import parse_json_object, strip_code_fences


def test_strip_code_fences_removes_json_tagged_fence() -> None:
    raw = '```json\n{"symptoms": []}\n```'
    assert strip_code_fences(raw) == '{"symptoms": []}'


def test_strip_code_fences_handles_untagged_and_uppercase_fences() -> None:
    assert strip_code_fences('```\n{"a": 1}\n```  ') == '{"a": 1}'
    assert strip_code_fences('```JSON {"a": 1}```') == '{"a": 1}'


def test_strip_code_fences_leaves_plain_json_alone() -> None:
    assert strip_code_fences('  {"a": 1}\n') == '{"a": 1}'


def test_parse_json_object_returns_dict_from_fenced_output() -> None:
    parsed = parse_json_object('```json\n{"patient_data": {"name": "Ali"}}\n```')
    assert parsed == {"patient_data": {"name": "Ali"}}


def test_parse_json_object_rejects_prose() -> None:
    with pytest.raises(MalformedResponseError):
        parse_json_object("Patient is Ali, 34 year old male, fever for 3 days")


def test_parse_json_object_rejects_non_object_json() -> None:
    with pytest.raises(MalformedResponseError) as exc:
        parse_json_object('[{"name": "fever"}]')
    assert "invalid_schema" in str(exc.value)


def test_parse_json_object_rejects_empty_text() -> None:
    with pytest.raises(MalformedResponseError):
        parse_json_object("```json\n```")
