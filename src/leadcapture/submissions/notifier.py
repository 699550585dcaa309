"""Email notifications for stored submissions."""

import smtplib
import ssl
from email.errors import HeaderParseError
from email.headerregistry import Address
from email.message import EmailMessage
from typing import Optional

from leadcapture.lib.exceptions import NotifyError
from leadcapture.submissions.models import StoredSubmission, SubmissionKind
from leadcapture.utils.logger import get_logger

notifier_logger = get_logger("notifier")

AUTO_REPLY_TEMPLATE = """Hi {name},

Thanks for reaching out to {business}! We've received your {received} and will get back to you within 1 business day.
{event_paragraph}
In the meantime, if you have urgent questions, feel free to call us at {phone} ({hours}).

Thanks for considering {business} for your event!

Best regards,
The {business} Team
{city}

---
This is an automated confirmation. Please do not reply to this email."""


def sanitize_header_value(s: str) -> str:
    # Prevent header injection
    return (s or "").replace("\r", "").replace("\n", "").strip()


def single_address(value: str) -> Address:
    """
    Parse exactly one ``local@domain`` mailbox.

    Raises:
        ValueError: If the value is empty, lists several addresses, or has no domain
    """
    try:
        address = Address(addr_spec=sanitize_header_value(value))
    except (HeaderParseError, IndexError, ValueError) as e:
        raise ValueError(f"Not a single email address: {value!r}") from e
    if not address.username or not address.domain:
        raise ValueError(f"Not a single email address: {value!r}")
    return address


class SmtpTransport:
    """Sends prepared messages over SMTP, one connection per message."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str = "",
        password: str = "",
        tls_mode: str = "starttls",
        timeout: float = 10,
    ):
        if tls_mode not in ("starttls", "ssl", "none"):
            raise ValueError(f"Invalid SMTP TLS mode: {tls_mode}")
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.tls_mode = tls_mode
        self.timeout = timeout

    def send(self, message: EmailMessage) -> None:
        """
        Deliver a single message.

        Raises:
            smtplib.SMTPException: On protocol errors
            OSError: On connection errors
        """
        context = ssl.create_default_context()
        if self.tls_mode == "ssl":
            server = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout, context=context)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)

        with server:
            if self.tls_mode == "starttls":
                server.starttls(context=context)
            if self.username:
                server.login(self.username, self.password)
            server.send_message(message)


class Notifier:
    """Composes and sends the staff alert and the submitter auto-reply."""

    def __init__(
        self,
        transport: SmtpTransport,
        from_email: str,
        to_email: str,
        business_name: str = "Meatfest Catering",
        business_phone: str = "(614) 555-1234",
        business_hours: str = "Mon-Fri 9am-6pm EST",
        business_city: str = "Columbus, Ohio",
    ):
        self.transport = transport
        self.from_email = from_email
        self.to_email = to_email
        self.business_name = business_name
        self.business_phone = business_phone
        self.business_hours = business_hours
        self.business_city = business_city

    @classmethod
    def from_settings(cls, settings, transport: Optional[SmtpTransport] = None) -> "Notifier":
        transport = transport or SmtpTransport(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            tls_mode=settings.SMTP_TLS_MODE,
            timeout=settings.SMTP_TIMEOUT,
        )
        return cls(
            transport,
            from_email=settings.FROM_EMAIL,
            to_email=settings.TO_EMAIL,
            business_name=settings.BUSINESS_NAME,
            business_phone=settings.BUSINESS_PHONE,
            business_hours=settings.BUSINESS_HOURS,
            business_city=settings.BUSINESS_CITY,
        )

    def staff_subject(self, submission: StoredSubmission) -> str:
        if submission.kind is SubmissionKind.REQUEST:
            return f"New Catering Request from {submission.name}"
        return f"New Contact from {submission.name}"

    def staff_body(self, submission: StoredSubmission) -> str:
        """Line-oriented summary; optional fields appear only when set."""
        lines = [
            f"Type: {submission.kind.value}",
            f"Created: {submission.created_at}",
            f"Name: {submission.name}",
            f"Email: {submission.email}",
        ]
        optional = [
            ("Phone", submission.phone),
            ("Event Date", submission.event_date),
            ("Event Location", submission.event_location),
            ("Event Type", submission.event_type),
            ("Headcount", submission.headcount),
        ]
        lines.extend(f"{label}: {value}" for label, value in optional if value)
        lines.extend(["", "Message:", submission.message or "(none)"])
        return "\n".join(lines)

    def auto_reply_subject(self, submission: StoredSubmission) -> str:
        if submission.kind is SubmissionKind.REQUEST:
            return "Thanks for your catering request!"
        return f"Thanks for contacting {self.business_name}!"

    def auto_reply_body(self, submission: StoredSubmission) -> str:
        is_request = submission.kind is SubmissionKind.REQUEST
        event_paragraph = ""
        if is_request and submission.event_date:
            event_paragraph = f"\nWe'll be in touch soon about your event on {submission.event_date}.\n"
        return AUTO_REPLY_TEMPLATE.format(
            name=submission.name,
            business=self.business_name,
            received="catering request" if is_request else "message",
            event_paragraph=event_paragraph,
            phone=self.business_phone,
            hours=self.business_hours,
            city=self.business_city,
        )

    def _message(self, to_address: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = single_address(self.from_email)
        msg["To"] = single_address(to_address)
        msg["Subject"] = sanitize_header_value(subject)
        msg.set_content(body)
        return msg

    def compose_staff_message(self, submission: StoredSubmission) -> EmailMessage:
        message = self._message(self.to_email, self.staff_subject(submission), self.staff_body(submission))
        # A malformed submitter address drops Reply-To but still alerts staff
        try:
            message["Reply-To"] = single_address(submission.email)
        except ValueError:
            notifier_logger.warning("reply_to_skipped", extra={"data": {"id": submission.id}})
        return message

    def compose_auto_reply(self, submission: StoredSubmission) -> EmailMessage:
        """
        Build the confirmation for the submitter.

        Raises:
            ValueError: If the submitter email is not exactly one address
        """
        return self._message(
            submission.email,
            self.auto_reply_subject(submission),
            self.auto_reply_body(submission),
        )

    def _send(self, event: str, submission: StoredSubmission, compose) -> None:
        if not self.from_email:
            raise NotifyError("Sender address is not configured", {"id": submission.id})

        try:
            message = compose(submission)
            self.transport.send(message)
        except (smtplib.SMTPException, OSError, ValueError) as e:
            raise NotifyError(f"{event} failed: {e}", {"id": submission.id}) from e

        notifier_logger.info(event, extra={"data": {"id": submission.id}})

    def notify_staff(self, submission: StoredSubmission) -> None:
        """
        Send the new-submission alert to the staff address.

        Raises:
            NotifyError: If the message could not be sent
        """
        if not self.to_email:
            raise NotifyError("Staff address is not configured", {"id": submission.id})
        self._send("staff_notified", submission, self.compose_staff_message)

    def auto_reply(self, submission: StoredSubmission) -> None:
        """
        Send the confirmation message to the submitter.

        Raises:
            NotifyError: If the message could not be sent
        """
        self._send("auto_reply_sent", submission, self.compose_auto_reply)
