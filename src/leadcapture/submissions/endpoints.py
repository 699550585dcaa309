"""FastAPI endpoints for contact and catering-request submissions."""

import asyncio
import json
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from leadcapture.config.settings import Settings
from leadcapture.lib.exceptions import StoreError
from leadcapture.submissions.models import StoredSubmission, SubmitResponse
from leadcapture.submissions.notifier import Notifier
from leadcapture.submissions.sanitize import sanitize_payload
from leadcapture.submissions.store import SubmissionStore
from leadcapture.submissions.validation import validate
from leadcapture.utils.logger import get_logger


router = APIRouter()

submission_logger = get_logger("submissions")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "OPTIONS,POST",
}

SUBMITTED = "Submitted"
INVALID_JSON = "Invalid JSON"
SAVE_FAILED = "Could not save your request."


def get_store(request: Request) -> Optional[SubmissionStore]:
    return getattr(request.app.state, "store", None)


def get_notifier(request: Request) -> Optional[Notifier]:
    return getattr(request.app.state, "notifier", None)


def get_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    return settings or Settings()


def json_response(status_code: int, message: str) -> JSONResponse:
    """JSON ``{"message": ...}`` body with the CORS headers attached."""
    return JSONResponse(
        status_code=status_code,
        content=SubmitResponse(message=message).model_dump(),
        headers=CORS_HEADERS,
    )


def _reject_constant(name: str):
    raise ValueError(f"Invalid JSON constant: {name}")


def parse_body(raw: bytes):
    """
    Decode a request body as strict JSON; an empty body is ``{}``.

    Raises:
        ValueError: On malformed JSON or NaN/Infinity literals
        RecursionError: On pathologically nested input
    """
    return json.loads(raw or b"{}", parse_constant=_reject_constant)


async def send_notifications(notifier: Optional[Notifier], submission: StoredSubmission) -> None:
    """
    Send the staff alert, then the auto-reply.

    Both sends are best-effort: each failure is logged and swallowed on its
    own, so a failed staff alert still lets the auto-reply go out.
    """
    if notifier is None:
        submission_logger.warning("notifier_not_configured", extra={"data": {"id": submission.id}})
        return

    for event, send in (("notify_staff", notifier.notify_staff), ("auto_reply", notifier.auto_reply)):
        try:
            await asyncio.to_thread(send, submission)
        except Exception as e:
            submission_logger.error(f"{event}_failed", extra={
                "data": {"id": submission.id, "error_type": type(e).__name__, "error": str(e)}
            })


@router.options("/submit")
async def submit_preflight() -> Response:
    """CORS preflight: empty 204 with permissive headers."""
    return Response(status_code=204, headers=CORS_HEADERS)


@router.post("/submit", response_model=SubmitResponse)
async def submit(
    request: Request,
    store: Optional[SubmissionStore] = Depends(get_store),
    notifier: Optional[Notifier] = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
):
    """
    Record a contact or catering-request submission.

    Flow: parse JSON, sanitize, validate, store, then notify staff and the
    submitter. Once the record is stored the response is a success no
    matter what happens to the emails.

    Returns:
        200 on success or silent bot drop, 400 for malformed or invalid
        input, 500 when the record could not be stored
    """
    try:
        raw = await request.body()
        try:
            payload = parse_body(raw)
        except (ValueError, UnicodeDecodeError, RecursionError):
            return json_response(400, INVALID_JSON)

        if not isinstance(payload, dict):
            payload = {}

        fields = sanitize_payload(payload)
        result = validate(fields, strict=settings.STRICT_VALIDATION)

        if result.bot:
            # Indistinguishable from a real success for the caller
            submission_logger.warning("honeypot_triggered", extra={
                "data": {"type": fields.kind.value}
            })
            return json_response(200, SUBMITTED)

        if not result.accepted:
            submission_logger.info("submission_rejected", extra={
                "data": {"reason": result.reason}
            })
            return json_response(400, result.reason)

        if store is None:
            submission_logger.error("store_not_configured")
            return json_response(500, SAVE_FAILED)

        try:
            stored = await asyncio.to_thread(store.save, fields)
        except StoreError as e:
            submission_logger.error("store_failed", extra={
                "data": {"error": e.message, "details": e.details}
            })
            return json_response(500, SAVE_FAILED)

        await send_notifications(notifier, stored)

        submission_logger.info("submission_completed", extra={
            "data": {"id": stored.id, "type": stored.kind.value}
        })
        return json_response(200, SUBMITTED)

    except Exception as e:
        submission_logger.error("unexpected_error", extra={
            "data": {"error_type": type(e).__name__, "error": str(e)}
        })
        return json_response(500, SAVE_FAILED)
