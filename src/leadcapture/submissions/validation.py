"""Validation functions for form submissions."""

import re
from dataclasses import dataclass
from typing import Optional

from leadcapture.lib.exceptions import ValidationError, HoneypotTriggered
from leadcapture.submissions.models import SubmissionFields

# One mailbox only: list separators and angle brackets are rejected
EMAIL_REGEX = re.compile(r'^[^\s@,;<>"]+@[^\s@,;<>"]+\.[^\s@,;<>"]+$')

NAME_EMAIL_REQUIRED = "Name and email are required."
INVALID_EMAIL = "Please enter a valid email address."
MESSAGE_REQUIRED = "Please provide a message."


def validate_honeypot(honeypot: str) -> None:
    """
    Check honeypot field for bot detection.

    Args:
        honeypot: Sanitized honeypot value (empty for humans)

    Raises:
        HoneypotTriggered: If honeypot contains any value
    """
    if honeypot:
        raise HoneypotTriggered("Honeypot field was filled")


def validate_required_fields(name: str, email: str) -> None:
    """
    Validate that name and email are present.

    Raises:
        ValidationError: If either is empty
    """
    if not name or not email:
        raise ValidationError(NAME_EMAIL_REQUIRED)


def validate_email(email: str) -> str:
    """
    Validate email shape (local@domain.tld).

    Args:
        email: Sanitized email address

    Returns:
        The email, unchanged

    Raises:
        ValidationError: If email format is invalid
    """
    if not EMAIL_REGEX.match(email):
        raise ValidationError(INVALID_EMAIL)
    return email


def validate_message(message: str) -> str:
    """Require a non-empty message."""
    if not message:
        raise ValidationError(MESSAGE_REQUIRED)
    return message


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one submission."""

    accepted: bool
    bot: bool = False
    reason: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(accepted=True)

    @classmethod
    def rejected(cls, reason: str) -> "ValidationResult":
        return cls(accepted=False, reason=reason)

    @classmethod
    def bot_suspected(cls) -> "ValidationResult":
        return cls(accepted=False, bot=True)


def validate(fields: SubmissionFields, strict: bool = True) -> ValidationResult:
    """
    Apply all submission rules in order; the first failure wins.

    Order: honeypot, name/email presence, then (strict only) email shape
    and message presence.

    Args:
        fields: Sanitized submission fields
        strict: Also enforce email shape and message presence

    Returns:
        ValidationResult
    """
    try:
        validate_honeypot(fields.honeypot)
    except HoneypotTriggered:
        return ValidationResult.bot_suspected()

    try:
        validate_required_fields(fields.name, fields.email)
        if strict:
            validate_email(fields.email)
            validate_message(fields.message)
    except ValidationError as e:
        return ValidationResult.rejected(e.message)

    return ValidationResult.ok()
