import os

from dotenv import load_dotenv

from services import db
from services.exceptions import EmailNotFoundError, InvalidStatusError
from services.logging_utils import get_logger
from services.spam_detection import EmailInput, analyze_spam

load_dotenv()

DEFAULT_USER_ID = os.getenv("DEFAULT_USER_ID", "00000000-0000-0000-0000-000000000000")

VALID_STATUSES = {"inbox", "spam", "archived"}

logger = get_logger(__name__)


def analyze_and_store(
    sender_email: str,
    sender_name: str,
    subject: str,
    body: str,
    user_id: str = DEFAULT_USER_ID,
):
    """
    Score an email and store it together with its indicators in one
    transaction. Returns (stored email row, SpamAnalysisResult).
    """
    analysis = analyze_spam(
        EmailInput(
            sender_email=sender_email,
            sender_name=sender_name,
            subject=subject,
            body=body,
        )
    )

    email = db.insert_email_with_indicators(
        {
            "user_id": user_id,
            "sender_email": sender_email,
            "sender_name": sender_name,
            "subject": subject,
            "body": body,
            "is_spam": analysis.is_spam,
            "spam_score": analysis.spam_score,
            "status": "spam" if analysis.is_spam else "inbox",
        },
        [i.to_dict() for i in analysis.indicators],
    )

    logger.info(
        "analyzed and saved email",
        extra={
            "email_id": email["id"],
            "spam_score": analysis.spam_score,
            "is_spam": analysis.is_spam,
            "indicator_count": len(analysis.indicators),
        },
    )
    return email, analysis


def analyze_and_save_email(
    sender_email: str,
    sender_name: str,
    subject: str,
    body: str,
    user_id: str = DEFAULT_USER_ID,
) -> dict:
    """Score and store an email. Returns the stored email row."""
    email, _ = analyze_and_store(sender_email, sender_name, subject, body, user_id)
    return email


def fetch_emails(filter_name: str = "all"):
    return db.list_emails(filter_name)


def fetch_email_by_id(email_id: str):
    """Return {"email": ..., "indicators": [...]} or None if the email doesn't exist."""
    email = db.get_email(email_id)
    if not email:
        return None
    return {"email": email, "indicators": db.list_indicators(email_id)}


def update_email_status(email_id: str, status: str, is_spam=None) -> dict:
    if status not in VALID_STATUSES:
        raise InvalidStatusError(status)
    if not db.update_email(email_id, status, is_spam):
        raise EmailNotFoundError(email_id)

    logger.info(
        "updated email status",
        extra={"email_id": email_id, "status": status, "is_spam": is_spam},
    )
    return db.get_email(email_id)


def mark_as_spam(email_id: str) -> dict:
    return update_email_status(email_id, "spam", True)


def mark_as_not_spam(email_id: str) -> dict:
    return update_email_status(email_id, "inbox", False)


def archive_email(email_id: str) -> dict:
    return update_email_status(email_id, "archived")


def delete_email(email_id: str) -> None:
    if not db.delete_email(email_id):
        raise EmailNotFoundError(email_id)
    logger.info("deleted email", extra={"email_id": email_id})


def get_stats() -> dict:
    return db.get_dashboard_stats()
