from checkin.asr.capture import (
    START_FAILURE_MESSAGE,
    UNAVAILABLE_MESSAGE,
    TranscriptionSession,
)
from checkin.core.errors import CaptureErrorKind

from fakes import FakeEngine


def test_finalized_text_is_space_joined_concatenation_of_final_segments(fake_engine) -> None:
    session = TranscriptionSession(fake_engine)
    session.start_recording()

    fake_engine.push("my name is ali")
    fake_engine.push("i have fever", "for three days")
    fake_engine.push("and headache")

    assert session.finalized_text == "my name is ali i have fever for three days and headache "
    assert session.transcript() == "my name is ali i have fever for three days and headache"


def test_segments_before_result_index_are_not_appended_again(fake_engine) -> None:
    session = TranscriptionSession(fake_engine)
    session.start_recording()

    fake_engine.push("first")
    # cumulative event: entry 0 already delivered, result_index points at 1
    fake_engine.push("second", interim="thi")

    assert session.finalized_text == "first second "
    assert session.interim_text == "thi"


def test_interim_only_event_replaces_interim_and_leaves_finalized_untouched(fake_engine) -> None:
    session = TranscriptionSession(fake_engine)
    session.start_recording()

    fake_engine.push("bukhar hai")
    fake_engine.push(interim="do din")
    fake_engine.push(interim="do din se")

    assert session.finalized_text == "bukhar hai "
    assert session.interim_text == "do din se"

    fake_engine.push("do din se")
    assert session.interim_text == ""
    assert session.finalized_text == "bukhar hai do din se "


def test_stop_clears_interim_but_keeps_finalized(fake_engine) -> None:
    session = TranscriptionSession(fake_engine)
    session.start_recording()
    fake_engine.push("cough", interim="since mon")

    session.stop_recording()

    assert session.is_recording is False
    assert session.interim_text == ""
    assert session.finalized_text == "cough "
    assert fake_engine.stop_calls == 1


def test_start_resets_previous_session_state(fake_engine) -> None:
    session = TranscriptionSession(fake_engine)
    session.start_recording()
    fake_engine.push("old text")
    fake_engine.fail("no-speech")

    session.start_recording()

    assert session.is_recording is True
    assert session.finalized_text == ""
    assert session.interim_text == ""
    assert session.last_error is None
    assert fake_engine.start_calls == 2


def test_start_while_recording_is_a_noop(fake_engine) -> None:
    session = TranscriptionSession(fake_engine)
    session.start_recording()
    fake_engine.push("keep me")

    session.start_recording()

    assert fake_engine.start_calls == 1
    assert session.finalized_text == "keep me "


def test_start_failure_is_absorbed_into_state() -> None:
    engine = FakeEngine(fail_on_start=True)
    session = TranscriptionSession(engine)

    session.start_recording()

    assert session.is_recording is False
    assert session.last_error == START_FAILURE_MESSAGE
    assert session.last_error_kind == CaptureErrorKind.START_FAILURE


def test_engine_error_stops_recording_with_retry_message(fake_engine) -> None:
    session = TranscriptionSession(fake_engine)
    session.start_recording()
    fake_engine.push("partial capture")

    fake_engine.fail("audio-capture")

    assert session.is_recording is False
    assert session.last_error == "Error: audio-capture. Please try again."
    assert session.last_error_kind == CaptureErrorKind.ENGINE_ERROR
    assert session.finalized_text == "partial capture "


def test_spontaneous_end_keeps_text_for_harvest(fake_engine) -> None:
    session = TranscriptionSession(fake_engine)
    session.start_recording()
    fake_engine.push("pait dard", interim="aur")

    fake_engine.end()

    assert session.is_recording is False
    assert session.finalized_text == "pait dard "
    assert session.harvest() == "pait dard"


def test_harvest_with_no_segments_returns_none(fake_engine) -> None:
    session = TranscriptionSession(fake_engine)
    session.start_recording()

    assert session.harvest() is None
    assert session.finalized_text == ""
    assert session.is_recording is False


def test_reset_transcript_does_not_touch_recording_flag(fake_engine) -> None:
    session = TranscriptionSession(fake_engine)
    session.start_recording()
    fake_engine.push("discard this", interim="and this")

    session.reset_transcript()

    assert session.is_recording is True
    assert session.finalized_text == ""
    assert session.interim_text == ""
    assert session.last_error is None


def test_unsupported_session_never_records() -> None:
    session = TranscriptionSession(None)

    assert session.supported is False
    assert session.last_error_kind == CaptureErrorKind.UNAVAILABLE

    session.start_recording()

    assert session.is_recording is False
    assert session.last_error == UNAVAILABLE_MESSAGE
    assert session.harvest() is None


def test_close_stops_engine_once(fake_engine) -> None:
    session = TranscriptionSession(fake_engine)
    session.start_recording()

    session.close()
    session.close()

    assert fake_engine.stop_calls == 1
    assert session.is_recording is False


def test_snapshot_is_consistent_copy(fake_engine) -> None:
    session = TranscriptionSession(fake_engine)
    session.start_recording()
    fake_engine.push("one", interim="tw")

    snap = session.snapshot()
    fake_engine.push("two")

    assert snap.finalized_text == "one "
    assert snap.interim_text == "tw"
    assert session.finalized_text == "one two "


def test_stop_failure_still_ends_recording_and_keeps_text() -> None:
    engine = FakeEngine(fail_on_stop=True)
    session = TranscriptionSession(engine)
    session.start_recording()
    engine.push("sar dard", interim="aur")

    assert session.harvest() == "sar dard"
    assert session.is_recording is False
    assert session.interim_text == ""
    assert session.last_error == "Error: stop-failed. Please try again."
    assert session.last_error_kind == CaptureErrorKind.ENGINE_ERROR


def test_close_survives_engine_stop_failure() -> None:
    engine = FakeEngine(fail_on_stop=True)
    session = TranscriptionSession(engine)
    session.start_recording()

    session.close()
    session.close()

    assert engine.stop_calls == 1
    assert session.is_recording is False
    assert session.last_error_kind == CaptureErrorKind.ENGINE_ERROR
