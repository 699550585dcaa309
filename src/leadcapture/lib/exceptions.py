"""
Exception Hierarchy

Custom exceptions for the lead capture service.
"""


class LeadCaptureException(Exception):
    """Base exception for the lead capture service"""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# Validation Exceptions
class ValidationError(LeadCaptureException):
    """Raised when a submission fails a user-correctable check"""
    pass


class HoneypotTriggered(LeadCaptureException):
    """Raised when the honeypot field is filled (bot detected)"""
    pass


# Collaborator Exceptions
class StoreError(LeadCaptureException):
    """Raised when a submission cannot be persisted"""
    pass


class NotifyError(LeadCaptureException):
    """Raised when a notification email cannot be sent"""
    pass
