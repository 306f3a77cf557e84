import pytest

from checkin.config import settings

from fakes import FakeEngine


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def checkin_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "CHECKIN_DATA_DIR", str(tmp_path / "checkins"))
    return tmp_path / "checkins"
