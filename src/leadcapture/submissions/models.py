"""Pydantic models for submission handling."""

from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict


class SubmissionKind(str, Enum):
    """Submission category driving subject lines and auto-reply wording."""

    CONTACT = "contact"
    REQUEST = "request"

    @classmethod
    def parse(cls, value: str) -> "SubmissionKind":
        """Return the matching kind, falling back to contact."""
        try:
            return cls(value)
        except ValueError:
            return cls.CONTACT


class SubmissionFields(BaseModel):
    """Sanitized form fields as received from the client."""

    model_config = ConfigDict(frozen=True)

    kind: SubmissionKind = SubmissionKind.CONTACT
    name: str = ""
    email: str = ""
    phone: str = ""
    event_date: str = ""
    event_location: str = ""
    event_type: str = ""
    headcount: str = ""
    message: str = ""
    honeypot: str = ""


class StoredSubmission(SubmissionFields):
    """A submission after it has been persisted."""

    id: str
    created_at: str

    def to_record(self) -> Dict[str, str]:
        """Flat string record in storage column names (honeypot excluded)."""
        return {
            "id": self.id,
            "createdAt": self.created_at,
            "type": self.kind.value,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "eventDate": self.event_date,
            "eventLocation": self.event_location,
            "eventType": self.event_type,
            "headcount": self.headcount,
            "message": self.message,
        }

    @classmethod
    def from_record(cls, record: Dict[str, str]) -> "StoredSubmission":
        return cls(
            id=record["id"],
            created_at=record["createdAt"],
            kind=SubmissionKind.parse(record.get("type", "")),
            name=record.get("name", ""),
            email=record.get("email", ""),
            phone=record.get("phone", ""),
            event_date=record.get("eventDate", ""),
            event_location=record.get("eventLocation", ""),
            event_type=record.get("eventType", ""),
            headcount=record.get("headcount", ""),
            message=record.get("message", ""),
        )


class SubmitResponse(BaseModel):
    """Response body for every submission outcome."""
    message: str
