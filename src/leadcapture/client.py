"""HTTP client that submits contact and catering-request forms."""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import httpx

from leadcapture.submissions.models import SubmissionKind
from leadcapture.submissions.validation import EMAIL_REGEX, INVALID_EMAIL, MESSAGE_REQUIRED

NOT_CONFIGURED = "Form backend not configured yet. See README to connect forms."
NAME_EMAIL_PROMPT = "Please provide your name and email."
SUCCESS_TEXT = "Thanks! We received your request and will reach out soon."
FALLBACK_ERROR = "Something went wrong. Please try again."

SENDING_TEXT = {
    SubmissionKind.CONTACT: "Sending...",
    SubmissionKind.REQUEST: "Sending your request...",
}

# Form field names sent as-is in the payload
FORM_FIELDS = (
    "name", "email", "phone", "eventDate", "eventLocation",
    "eventType", "headcount", "message", "website",
)


@dataclass(frozen=True)
class FormStatus:
    """What the status area under a form shows."""

    state: str  # none | sending | success | error
    text: str = ""

    @property
    def ok(self) -> bool:
        return self.state == "success"


class SubmissionClient:
    """
    Client for the ``/submit`` endpoint.

    Runs the same checks as the browser forms before any network call and
    reports progress through ``FormStatus`` values.
    """

    def __init__(
        self,
        api_base_url: Optional[str],
        strict: bool = True,
        timeout: float = 10,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_base_url = (api_base_url or "").rstrip("/")
        self.strict = strict
        self.timeout = timeout
        self.transport = transport

    def build_payload(self, form: Mapping[str, Any], kind: SubmissionKind) -> dict:
        payload = {"type": kind.value}
        for field in FORM_FIELDS:
            value = form.get(field)
            payload[field] = "" if value is None else value
        return payload

    def check(self, payload: dict) -> Optional[str]:
        """Return the first client-side error message, if any."""
        name = str(payload["name"]).strip()
        email = str(payload["email"]).strip()
        if not name or not email:
            return NAME_EMAIL_PROMPT
        if self.strict:
            if not EMAIL_REGEX.match(email):
                return INVALID_EMAIL
            if not str(payload["message"]).strip():
                return MESSAGE_REQUIRED
        return None

    def submit(
        self,
        form: Mapping[str, Any],
        kind: SubmissionKind = SubmissionKind.CONTACT,
        on_status: Optional[Callable[[FormStatus], None]] = None,
    ) -> FormStatus:
        """
        Submit one form.

        Args:
            form: Field values keyed by form field name
            kind: Which form the values came from
            on_status: Called with every status change, including the final one

        Returns:
            Final FormStatus (success or error)
        """
        def report(status: FormStatus) -> FormStatus:
            if on_status is not None:
                on_status(status)
            return status

        kind = SubmissionKind.parse(kind.value if isinstance(kind, SubmissionKind) else str(kind))
        payload = self.build_payload(form, kind)

        if not self.api_base_url:
            return report(FormStatus("error", NOT_CONFIGURED))

        # Bots get a quiet success and nothing is sent
        if str(payload["website"]).strip():
            return report(FormStatus("success", SUCCESS_TEXT))

        error = self.check(payload)
        if error:
            return report(FormStatus("error", error))

        report(FormStatus("sending", SENDING_TEXT[kind]))
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(f"{self.api_base_url}/submit", json=payload)
        except httpx.HTTPError as e:
            return report(FormStatus("error", str(e).strip() or FALLBACK_ERROR))

        if response.is_success:
            return report(FormStatus("success", SUCCESS_TEXT))

        try:
            data = response.json()
        except ValueError:
            data = {}
        message = data.get("message") if isinstance(data, dict) else None
        text = str(message).strip() if message else f"Request failed with {response.status_code}"
        return report(FormStatus("error", text or FALLBACK_ERROR))
