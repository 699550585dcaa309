"""Sanitization of untrusted form values."""

import re
from typing import Any, Mapping

from leadcapture.submissions.models import SubmissionFields, SubmissionKind

CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

# Payload keys accepted for the hidden bot-trap field
HONEYPOT_KEYS = ("website", "honeypot")


def sanitize(value: Any) -> str:
    """
    Strip ASCII control characters and surrounding whitespace.

    Args:
        value: Any value taken from a parsed request body

    Returns:
        Cleaned string, or "" for non-string input
    """
    if not isinstance(value, str):
        return ""
    return CONTROL_CHARS.sub("", value).strip()


def sanitize_headcount(value: Any) -> str:
    """
    Coerce a scalar headcount to text before sanitizing.

    Falsy values (0, false) become "", true becomes "true", and a float
    with no fractional part is written as an integer: 50.0 -> "50".
    """
    if isinstance(value, bool):
        value = "true" if value else ""
    elif isinstance(value, (int, float)):
        if not value:
            value = ""
        elif isinstance(value, float) and value.is_integer():
            value = str(int(value))
        else:
            value = str(value)
    return sanitize(value)


def sanitize_payload(payload: Mapping[str, Any]) -> SubmissionFields:
    """
    Build sanitized submission fields from a decoded JSON payload.

    An absent or unknown ``type`` becomes ``contact``.

    Args:
        payload: Decoded request body

    Returns:
        SubmissionFields with every value sanitized
    """
    honeypot = ""
    for key in HONEYPOT_KEYS:
        honeypot = honeypot or sanitize(payload.get(key))

    return SubmissionFields(
        kind=SubmissionKind.parse(sanitize(payload.get("type"))),
        name=sanitize(payload.get("name")),
        email=sanitize(payload.get("email")),
        phone=sanitize(payload.get("phone")),
        event_date=sanitize(payload.get("eventDate")),
        event_location=sanitize(payload.get("eventLocation")),
        event_type=sanitize(payload.get("eventType")),
        headcount=sanitize_headcount(payload.get("headcount")),
        message=sanitize(payload.get("message")),
        honeypot=honeypot,
    )
