import asyncio
import os

import httpx
from dotenv import load_dotenv

from services.db import init_db
from services.email_service import analyze_and_save_email
from services.logging_utils import get_logger

load_dotenv()

# If set, samples are posted to a running API instead of written directly
SEED_API_URL = os.getenv("SEED_API_URL")

logger = get_logger(__name__)

SAMPLE_EMAILS = [
    {
        "sender_email": "newsletter@techcompany.com",
        "sender_name": "Tech Company Weekly",
        "subject": "Your Weekly Tech Newsletter",
        "body": (
            "Hello,\n\nHere are this week's top stories in technology:\n\n"
            "1. New AI breakthrough announced\n2. Cloud computing trends for 2024\n"
            "3. Cybersecurity best practices\n\nStay informed!\n\nBest regards,\nTech Company Team"
        ),
    },
    {
        "sender_email": "winner9999@tempmail.com",
        "sender_name": "",
        "subject": "CONGRATULATIONS!!! YOU WON $5,000,000 LOTTERY!!!",
        "body": (
            "URGENT! ACT NOW! You are the LUCKY WINNER of our international lottery! "
            "Claim your $5,000,000 prize NOW!\n\n"
            "Click here: http://fake-lottery-site.com/claim\n"
            "Click here: http://suspicious-winner.com/prize\n"
            "Click here: http://scam-alert.com/money\n\n"
            "Limited time offer! FREE MONEY! No risk! Satisfaction guaranteed!\n\n"
            "Don't miss this once in lifetime opportunity!"
        ),
    },
    {
        "sender_email": "security@paypal-verify.net",
        "sender_name": "",
        "subject": "URGENT: Account Suspended - Verify Identity NOW!!!",
        "body": (
            "Your PayPal account has been suspended due to unusual activity!!!\n\n"
            "Verify your identity immediately or your account will be permanently deleted!\n\n"
            "Click here to verify: http://fake-paypal.com/verify\n\n"
            "ACT NOW! Time is running out!"
        ),
    },
    {
        "sender_email": "business-opportunity@workfromhome.biz",
        "sender_name": "Financial Freedom Team",
        "subject": "Make $10,000 per week from home! No experience needed!",
        "body": (
            "Earn extra cash working from home! Make money fast! Increase your income today!\n\n"
            "Guaranteed $10,000 per week! No risk! Free consultation available!\n\n"
            "Click here to get started: http://make-money-now.com\n\n"
            "Limited time offer! Call now! Apply now! Become a member today!"
        ),
    },
    {
        "sender_email": "sarah.johnson@company.com",
        "sender_name": "Sarah Johnson",
        "subject": "Project update and next steps",
        "body": (
            "Hi team,\n\nI wanted to share a quick update on our current project. "
            "We've completed phase 1 and are moving into phase 2 next week.\n\n"
            "Key accomplishments:\n- Feature A is complete\n- Testing is underway\n"
            "- Documentation updated\n\nNext steps:\n- Begin phase 2 implementation\n"
            "- Schedule review meeting\n- Update stakeholders\n\n"
            "Let me know if you have any questions.\n\nBest,\nSarah"
        ),
    },
    {
        "sender_email": "pharmacy-deals-4321@guerrillamail.com",
        "sender_name": "",
        "subject": "Cheap Viagra and prescription medication - 90% OFF!!!",
        "body": (
            "Get your prescription medication at unbelievable prices!\n\n"
            "Viagra - 90% OFF\nPills and pharmacy products - FREE SHIPPING\n\n"
            "No prescription needed! Order now!\n\n"
            "http://cheap-pharmacy.com\nhttp://discount-meds.com\nhttp://buy-pills-now.com"
        ),
    },
    {
        "sender_email": "support@github.com",
        "sender_name": "GitHub Support",
        "subject": "Your pull request has been merged",
        "body": (
            'Hello,\n\nYour pull request #1234 "Fix authentication bug" has been '
            "successfully merged into the main branch.\n\n"
            "Thank you for your contribution!\n\nGitHub Team"
        ),
    },
    {
        "sender_email": "prince-abdullah@nigeria-royalty.com",
        "sender_name": "",
        "subject": "Urgent Business Proposal - $25 Million Inheritance",
        "body": (
            "Dear Friend,\n\nI am Prince Abdullah from Nigeria. I have an urgent business "
            "proposal involving $25 million dollars inheritance that I need to transfer out "
            "of the country.\n\nI need your help as a trusted partner. You will receive 40% "
            "of the total amount ($10 million dollars) for your assistance.\n\n"
            "Please send your bank account details immediately.\n\n"
            "This is a limited time offer! Act now!\n\nPrince Abdullah"
        ),
    },
    {
        "sender_email": "alerts@bank.com",
        "sender_name": "Bank Security Team",
        "subject": "Monthly statement available",
        "body": (
            "Dear Customer,\n\nYour monthly bank statement for January 2024 is now available "
            "in your online banking portal.\n\nTo view your statement, please log in to your "
            "account.\n\nThank you for banking with us.\n\nBank Security Team"
        ),
    },
    {
        "sender_email": "amazing-deals-xyz@10minutemail.com",
        "sender_name": "Casino Promotions",
        "subject": "FREE $1000 Casino Bonus - Play Now and Win!!!",
        "body": (
            "Get your FREE $1000 casino bonus today! No deposit required!\n\n"
            "Play slots, poker, and more! Guaranteed wins! Easy money!\n\n"
            "Click here: http://free-casino.com\nClick here: http://bonus-slots.com\n"
            "Click here: http://win-money-now.com\n\n"
            "Limited time! Act now! Don't miss out! Free gift! Special promotion!"
        ),
    },
]


def seed_emails(samples=SAMPLE_EMAILS) -> int:
    """Analyze and store every sample. Returns how many were saved."""
    init_db()
    saved = 0
    for index, sample in enumerate(samples, start=1):
        logger.info(
            "seeding email %d/%d: %s",
            index,
            len(samples),
            sample["subject"][:50],
        )
        try:
            analyze_and_save_email(**sample)
            saved += 1
        except Exception:
            logger.exception("error seeding email %d", index)

    logger.info("email seeding completed", extra={"saved": saved})
    return saved


async def seed_via_api(base_url: str, samples=SAMPLE_EMAILS, transport=None) -> int:
    """Post every sample to POST /api/emails of a running API."""
    saved = 0
    async with httpx.AsyncClient(base_url=base_url, timeout=30.0, transport=transport) as client:
        for index, sample in enumerate(samples, start=1):
            try:
                resp = await client.post("/api/emails", json=sample)
                resp.raise_for_status()
                saved += 1
            except httpx.HTTPError:
                logger.exception("error seeding email %d via %s", index, base_url)

    logger.info("email seeding completed", extra={"saved": saved, "api": base_url})
    return saved


def main():
    if SEED_API_URL:
        asyncio.run(seed_via_api(SEED_API_URL))
    else:
        seed_emails()


if __name__ == "__main__":
    main()
