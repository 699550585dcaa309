import smtplib

import pytest

from fakes import FakeNotifier, FakeStore, RecordingTransport
from leadcapture.config.settings import Settings
from leadcapture.submissions.notifier import Notifier
from leadcapture.submissions.store import SubmissionStore


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def fake_notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def notifier(transport: RecordingTransport) -> Notifier:
    return Notifier(transport, from_email="noreply@meatfest.test", to_email="staff@meatfest.test")


@pytest.fixture
def sqlite_store(tmp_path) -> SubmissionStore:
    """File-backed SQLite store in a throwaway directory."""
    store = SubmissionStore.from_url(f"sqlite:///{tmp_path / 'leads.db'}", "submissions")
    store.create_tables()
    yield store
    store.close()


@pytest.fixture
def settings(monkeypatch) -> Settings:
    monkeypatch.setenv("STRICT_VALIDATION", "true")
    monkeypatch.setenv("TO_EMAIL", "staff@meatfest.test")
    monkeypatch.setenv("FROM_EMAIL", "noreply@meatfest.test")
    return Settings()


@pytest.fixture
def smtp_error() -> Exception:
    return smtplib.SMTPException("connection lost")
