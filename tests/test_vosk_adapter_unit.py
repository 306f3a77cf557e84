import json

import pytest

from checkin.asr import vosk_adapter
from checkin.asr.capture import TranscriptionSession
from checkin.asr.vosk_adapter import VoskRecognitionEngine


class ScriptedRecognizer:
    """
    Stands in for KaldiRecognizer. Each audio chunk is a utf-8 command:
    "p:<text>" partial hypothesis, "f:<text>" finished utterance.
    """

    def __init__(self, model, sample_rate):
        self.sample_rate = sample_rate
        self.partial_words = False
        self._last = ""
        self._pending_final = ""

    def SetPartialWords(self, enabled):
        self.partial_words = enabled

    def AcceptWaveform(self, data):
        kind, _, text = data.decode("utf-8").partition(":")
        self._last = text
        if kind == "p":
            self._pending_final = text
        return kind == "f"

    def Result(self):
        self._pending_final = ""
        return json.dumps({"text": self._last})

    def PartialResult(self):
        return json.dumps({"partial": self._last})

    def FinalResult(self):
        return json.dumps({"text": self._pending_final})


@pytest.fixture
def engine(monkeypatch):
    monkeypatch.setattr(vosk_adapter, "KaldiRecognizer", ScriptedRecognizer)
    monkeypatch.setattr(vosk_adapter, "load_model", lambda path: object())
    return VoskRecognitionEngine(model_path="unused", sample_rate=8000, language="ur-PK")


def test_partials_become_interim_and_utterances_become_final(engine) -> None:
    session = TranscriptionSession(engine)
    session.start_recording()

    engine.accept_audio(b"p:mujhe")
    assert session.interim_text == "mujhe"

    engine.accept_audio(b"p:mujhe bukhar")
    assert session.interim_text == "mujhe bukhar"

    engine.accept_audio(b"f:mujhe bukhar hai")
    assert session.interim_text == ""
    assert session.finalized_text == "mujhe bukhar hai "

    engine.accept_audio(b"f:do din se")
    assert session.finalized_text == "mujhe bukhar hai do din se "


def test_stop_flushes_pending_speech_and_ends_session(engine) -> None:
    session = TranscriptionSession(engine)
    session.start_recording()

    engine.accept_audio(b"f:sar dard")
    engine.accept_audio(b"p:aur chakkar")

    assert session.harvest() == "sar dard aur chakkar"
    assert engine.running is False
    assert session.is_recording is False


def test_audio_before_start_reports_engine_error(engine) -> None:
    session = TranscriptionSession(engine)

    engine.accept_audio(b"p:hello")

    assert session.last_error == "Error: not-started. Please try again."


def test_missing_model_surfaces_as_start_failure(monkeypatch) -> None:
    def broken_model(path):
        raise Exception(f"Failed to create a model from {path}")

    monkeypatch.setattr(vosk_adapter, "load_model", broken_model)
    session = TranscriptionSession(VoskRecognitionEngine(model_path="missing"))

    session.start_recording()

    assert session.is_recording is False
    assert session.last_error == "Failed to start recording. Please try again."


def test_engine_uses_configured_language(engine) -> None:
    assert engine.language == "ur-PK"
    assert engine.continuous is True
    assert engine.interim_results is True
