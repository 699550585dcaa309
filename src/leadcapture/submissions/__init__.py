"""Submission handling: sanitize, validate, store, notify."""

from leadcapture.submissions.endpoints import router as submissions_router

__all__ = ['submissions_router']
