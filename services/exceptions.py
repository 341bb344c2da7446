"""
Application-level exceptions raised by services.email_service and mapped to
HTTP errors in api.main.
"""


class SpamDetectorError(Exception):
    """Base class for service errors."""


class EmailNotFoundError(SpamDetectorError):
    def __init__(self, email_id: str):
        super().__init__(f"Email not found: {email_id}")
        self.email_id = email_id


class InvalidStatusError(SpamDetectorError):
    def __init__(self, status: str):
        super().__init__(f"Invalid email status: {status}")
        self.status = status
