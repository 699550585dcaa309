"""Tests for the submission endpoint contract."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from leadcapture.api.endpoints import create_app
from leadcapture.config.settings import Settings
from leadcapture.submissions.models import SubmissionKind
from leadcapture.submissions.notifier import Notifier
from fakes import FakeNotifier, FakeStore, RecordingTransport


CORS = {
    "access-control-allow-origin": "*",
    "access-control-allow-headers": "Content-Type",
    "access-control-allow-methods": "OPTIONS,POST",
}


def valid_payload(**overrides):
    """Return a valid contact payload."""
    payload = {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "message": "need catering for 50",
    }
    payload.update(overrides)
    return payload


def make_client(settings, store=None, notifier=None) -> TestClient:
    return TestClient(create_app(settings, store=store, notifier=notifier))


def assert_cors(response):
    for header, value in CORS.items():
        assert response.headers[header] == value


def test_preflight_returns_204_with_cors(settings):
    client = make_client(settings, FakeStore(), FakeNotifier())

    response = client.options("/submit")

    assert response.status_code == 204
    assert response.content == b""
    assert_cors(response)


def test_invalid_json_returns_400(settings, fake_store):
    client = make_client(settings, fake_store, FakeNotifier())

    response = client.post("/submit", content=b"{not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json() == {"message": "Invalid JSON"}
    assert_cors(response)
    assert fake_store.calls == 0


@pytest.mark.parametrize("body", [
    b"[" * 100000 + b"]" * 100000,
    b'{"name": NaN, "email": "jane@example.com"}',
    b'{"name": "Jane", "email": "jane@example.com", "headcount": Infinity}',
    b'{"name": "Jane", "email": "jane@example.com", "headcount": -Infinity}',
])
def test_unparseable_or_non_standard_json_returns_400(settings, fake_store, body):
    client = make_client(settings, fake_store, FakeNotifier())

    response = client.post("/submit", content=body, headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json() == {"message": "Invalid JSON"}
    assert_cors(response)
    assert fake_store.calls == 0


def test_empty_body_is_missing_fields(settings, fake_store):
    client = make_client(settings, fake_store, FakeNotifier())

    response = client.post("/submit", content=b"")

    assert response.status_code == 400
    assert response.json() == {"message": "Name and email are required."}


def test_non_object_json_is_missing_fields(settings, fake_store):
    client = make_client(settings, fake_store, FakeNotifier())

    response = client.post("/submit", json=["Jane", "jane@example.com"])

    assert response.status_code == 400
    assert fake_store.calls == 0


@pytest.mark.parametrize("overrides", [
    {"name": ""},
    {"email": ""},
    {"name": "\x00\x01  \t"},
    {"email": 12345},
    {"name": None},
])
def test_missing_name_or_email_returns_400_without_store_write(settings, fake_store, overrides):
    client = make_client(settings, fake_store, FakeNotifier())

    response = client.post("/submit", json=valid_payload(**overrides))

    assert response.status_code == 400
    assert response.json() == {"message": "Name and email are required."}
    assert_cors(response)
    assert fake_store.calls == 0


def test_invalid_email_in_strict_mode(settings, fake_store):
    client = make_client(settings, fake_store, FakeNotifier())

    response = client.post("/submit", json=valid_payload(email="not-an-email"))

    assert response.status_code == 400
    assert response.json() == {"message": "Please enter a valid email address."}
    assert fake_store.calls == 0


def test_missing_message_in_strict_mode(settings, fake_store):
    client = make_client(settings, fake_store, FakeNotifier())

    response = client.post("/submit", json=valid_payload(message=""))

    assert response.status_code == 400
    assert response.json() == {"message": "Please provide a message."}


def test_lenient_mode_only_requires_name_and_email(monkeypatch, fake_store):
    monkeypatch.setenv("STRICT_VALIDATION", "false")
    client = make_client(Settings(), fake_store, FakeNotifier())

    response = client.post("/submit", json={"name": "Jane", "email": "not-an-email"})

    assert response.status_code == 200
    assert fake_store.calls == 1


def test_address_list_rejected_in_strict_mode(settings, fake_store):
    client = make_client(settings, fake_store, FakeNotifier())

    response = client.post("/submit", json=valid_payload(email="root,victim@evil.test"))

    assert response.status_code == 400
    assert response.json() == {"message": "Please enter a valid email address."}
    assert fake_store.calls == 0


def test_address_list_in_lenient_mode_gets_no_auto_reply(monkeypatch, fake_store):
    monkeypatch.setenv("STRICT_VALIDATION", "false")
    transport = RecordingTransport()
    notifier = Notifier(transport, from_email="noreply@meatfest.test", to_email="staff@meatfest.test")
    client = make_client(Settings(), fake_store, notifier)

    response = client.post("/submit", json={
        "name": "Jane",
        "email": "a@b.co, victim1@evil.test, victim2@evil.test",
    })

    assert response.status_code == 200
    assert fake_store.calls == 1
    # Only the staff alert goes out, and it has no Reply-To
    assert [m["To"] for m in transport.sent] == ["staff@meatfest.test"]
    assert transport.sent[0]["Reply-To"] is None


def test_honeypot_returns_fake_success(settings, fake_store, fake_notifier):
    client = make_client(settings, fake_store, fake_notifier)

    response = client.post("/submit", json=valid_payload(website="http://spam.example"))

    assert response.status_code == 200
    assert response.json() == {"message": "Submitted"}
    assert_cors(response)
    assert fake_store.calls == 0
    assert fake_notifier.staff == []
    assert fake_notifier.replies == []


def test_successful_submission(settings, fake_store, fake_notifier):
    client = make_client(settings, fake_store, fake_notifier)

    response = client.post("/submit", json=valid_payload())

    assert response.status_code == 200
    assert response.json() == {"message": "Submitted"}
    assert_cors(response)
    assert len(fake_store.records) == 1
    stored = fake_store.records[0]
    assert stored.kind is SubmissionKind.CONTACT
    assert fake_notifier.staff == [stored]
    assert fake_notifier.replies == [stored]


def test_control_characters_removed_before_store(settings, fake_store, fake_notifier):
    client = make_client(settings, fake_store, fake_notifier)

    client.post("/submit", json=valid_payload(name=" Ja\x00ne\x1b Doe\n", phone="\t614\x7f "))

    stored = fake_store.records[0]
    assert stored.name == "Jane Doe"
    assert stored.phone == "614"
    assert fake_notifier.staff[0].name == "Jane Doe"


def test_store_failure_returns_500_without_notifications(settings, fake_notifier):
    store = FakeStore(fail=True)
    client = make_client(settings, store, fake_notifier)

    response = client.post("/submit", json=valid_payload())

    assert response.status_code == 500
    assert response.json() == {"message": "Could not save your request."}
    assert "db.internal" not in response.text
    assert_cors(response)
    assert fake_notifier.staff == []
    assert fake_notifier.replies == []


def test_missing_store_returns_500(settings, fake_notifier):
    client = make_client(settings, None, fake_notifier)

    response = client.post("/submit", json=valid_payload())

    assert response.status_code == 500
    assert response.json() == {"message": "Could not save your request."}


@pytest.mark.parametrize("fail_staff,fail_reply", [(True, False), (False, True), (True, True)])
def test_notification_failure_still_succeeds(settings, fake_store, fail_staff, fail_reply):
    notifier = FakeNotifier(fail_staff=fail_staff, fail_reply=fail_reply)
    client = make_client(settings, fake_store, notifier)

    response = client.post("/submit", json=valid_payload())

    assert response.status_code == 200
    assert response.json() == {"message": "Submitted"}
    assert len(fake_store.records) == 1
    # A failed staff alert does not skip the auto-reply
    assert len(notifier.staff) == 1
    assert len(notifier.replies) == 1


def test_unexpected_notifier_exception_is_swallowed(settings, fake_store):
    class ExplodingNotifier(FakeNotifier):
        def notify_staff(self, submission):
            raise RuntimeError("template bug")

    client = make_client(settings, fake_store, ExplodingNotifier())

    response = client.post("/submit", json=valid_payload())

    assert response.status_code == 200


def test_missing_notifier_still_succeeds(settings, fake_store):
    client = make_client(settings, fake_store, None)

    response = client.post("/submit", json=valid_payload())

    assert response.status_code == 200
    assert len(fake_store.records) == 1


def test_unexpected_store_exception_returns_generic_500(settings, fake_notifier):
    class BrokenStore(FakeStore):
        def save(self, fields):
            raise RuntimeError("boom at 10.0.0.5")

    client = make_client(settings, BrokenStore(), fake_notifier)

    response = client.post("/submit", json=valid_payload())

    assert response.status_code == 500
    assert response.json() == {"message": "Could not save your request."}
    assert fake_notifier.staff == []


def test_duplicate_payloads_create_distinct_records(settings, fake_store, fake_notifier):
    client = make_client(settings, fake_store, fake_notifier)

    client.post("/submit", json=valid_payload())
    client.post("/submit", json=valid_payload())

    assert len(fake_store.records) == 2
    assert fake_store.records[0].id != fake_store.records[1].id


def test_catering_request_scenario(settings, fake_store):
    transport = RecordingTransport()
    notifier = Notifier(transport, from_email="noreply@meatfest.test", to_email="staff@meatfest.test")
    client = make_client(settings, fake_store, notifier)

    response = client.post("/submit", json=valid_payload(type="request", eventDate="2024-06-01", headcount=50))

    assert response.status_code == 200
    staff, reply = transport.sent
    assert staff["Subject"] == "New Catering Request from Jane Doe"
    assert "Headcount: 50" in staff.get_content()
    assert reply["To"] == "jane@example.com"
    assert "We'll be in touch soon about your event on 2024-06-01." in reply.get_content()


def test_type_absent_defaults_to_contact(settings, fake_store):
    transport = RecordingTransport()
    notifier = Notifier(transport, from_email="noreply@meatfest.test", to_email="staff@meatfest.test")
    client = make_client(settings, fake_store, notifier)

    client.post("/submit", json=valid_payload())

    assert fake_store.records[0].kind is SubmissionKind.CONTACT
    assert transport.sent[0]["Subject"] == "New Contact from Jane Doe"


def test_created_at_not_before_request(settings, sqlite_store, fake_notifier):
    client = make_client(settings, sqlite_store, fake_notifier)
    received = datetime.now(timezone.utc)
    received = received.replace(microsecond=received.microsecond // 1000 * 1000)

    response = client.post("/submit", json=valid_payload())

    assert response.status_code == 200
    stored = fake_notifier.staff[0]
    assert sqlite_store.get(stored.id) == stored
    assert datetime.fromisoformat(stored.created_at.replace("Z", "+00:00")) >= received


def test_health_reports_collaborators(settings, fake_store):
    client = make_client(settings, fake_store, None)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "store_configured": True,
        "notifier_configured": False,
        "email_configured": True,
    }
