from contextlib import asynccontextmanager
from typing import Optional
import os
import secrets

from dotenv import load_dotenv
from fastapi import FastAPI, Request, Depends, Form, HTTPException, status
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from services import email_service
from services.classifier import legacy_score
from services.db import init_db
from services.exceptions import EmailNotFoundError, InvalidStatusError
from services.logging_utils import get_logger
from services.seed import SAMPLE_EMAILS
from services.spam_detection import EmailInput, analyze_spam

load_dotenv()

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
ADMIN_USER = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASS = os.getenv("ADMIN_PASSWORD", "admin")

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("spam detector API started")
    yield


app = FastAPI(title="Spam Detector", lifespan=lifespan)
templates = Jinja2Templates(directory=os.path.join(BASE_DIR, "templates"))

security = HTTPBasic()


class EmailIn(BaseModel):
    sender_email: str
    sender_name: str = ""
    subject: str
    body: str


class StatusUpdate(BaseModel):
    status: str
    is_spam: Optional[bool] = None


def get_current_username(credentials: HTTPBasicCredentials = Depends(security)):
    """
    Verify Basic Auth credentials.
    Using secrets.compare_digest to prevent timing attacks.
    """
    correct_username = secrets.compare_digest(credentials.username, ADMIN_USER)
    correct_password = secrets.compare_digest(credentials.password, ADMIN_PASS)

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/analyze-email")
async def analyze_email_legacy(payload: dict):
    """
    Legacy endpoint kept for old clients. Uses the simplified keyword count,
    not the indicator engine; see services.classifier.
    """
    subject = payload.get("subject")
    body = payload.get("body")
    if not isinstance(subject, str) or not isinstance(body, str) or not subject or not body:
        return JSONResponse(status_code=400, content={"error": "Missing fields"})

    return legacy_score(subject, body)


# ---------- JSON API ----------

@app.post("/api/analyze")
async def analyze(email: EmailIn):
    """Score an email without storing it."""
    result = analyze_spam(
        EmailInput(
            sender_email=email.sender_email,
            sender_name=email.sender_name,
            subject=email.subject,
            body=email.body,
        )
    )
    return result.to_dict()


@app.get("/api/emails")
async def list_emails(filter: str = "all"):
    try:
        emails = email_service.fetch_emails(filter)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"emails": emails}


@app.post("/api/emails", status_code=status.HTTP_201_CREATED)
async def create_email(email: EmailIn):
    saved, analysis = email_service.analyze_and_store(
        sender_email=email.sender_email,
        sender_name=email.sender_name,
        subject=email.subject,
        body=email.body,
    )
    return {"email": saved, "analysis": analysis.to_dict()}


@app.get("/api/emails/{email_id}")
async def get_email(email_id: str):
    detail = email_service.fetch_email_by_id(email_id)
    if detail is None:
        raise HTTPException(status_code=404, detail="Email not found")
    return detail


@app.patch("/api/emails/{email_id}")
async def update_email(email_id: str, update: StatusUpdate):
    try:
        return email_service.update_email_status(email_id, update.status, update.is_spam)
    except InvalidStatusError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except EmailNotFoundError:
        raise HTTPException(status_code=404, detail="Email not found")


@app.delete("/api/emails/{email_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_email(email_id: str):
    try:
        email_service.delete_email(email_id)
    except EmailNotFoundError:
        raise HTTPException(status_code=404, detail="Email not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get("/api/stats")
async def stats():
    return email_service.get_stats()


# ---------- Admin HTML Dashboard ----------

ADMIN_ACTIONS = {
    "spam": email_service.mark_as_spam,
    "not-spam": email_service.mark_as_not_spam,
    "archive": email_service.archive_email,
    "delete": email_service.delete_email,
}


@app.get("/admin/emails", response_class=HTMLResponse)
async def admin_emails(
    request: Request,
    filter: str = "all",
    username: str = Depends(get_current_username),
):
    """
    HTML dashboard: stats cards plus the email list for one filter.
    Protected by Basic Auth.
    """
    try:
        emails = email_service.fetch_emails(filter)
    except ValueError:
        return RedirectResponse(url="/admin/emails", status_code=303)

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "emails": emails,
            "stats": email_service.get_stats(),
            "filter": filter,
            "user": username,
            "samples": SAMPLE_EMAILS,
        },
    )


@app.post("/admin/emails")
async def admin_add_email(
    sender_email: str = Form(...),
    sender_name: str = Form(""),
    subject: str = Form(...),
    body: str = Form(...),
    username: str = Depends(get_current_username),
):
    """Analyze and store an email from the dashboard form, then show its detail page."""
    saved = email_service.analyze_and_save_email(
        sender_email=sender_email,
        sender_name=sender_name,
        subject=subject,
        body=body,
    )
    logger.info("admin added email", extra={"email_id": saved["id"], "admin": username})
    return RedirectResponse(url=f"/admin/emails/{saved['id']}", status_code=303)


@app.get("/admin/emails/{email_id}", response_class=HTMLResponse)
async def admin_email_detail(
    email_id: str,
    request: Request,
    username: str = Depends(get_current_username),
):
    detail = email_service.fetch_email_by_id(email_id)
    if detail is None:
        logger.warning("email not found", extra={"email_id": email_id})
        return RedirectResponse(url="/admin/emails", status_code=303)

    return templates.TemplateResponse(
        request,
        "email_detail.html",
        {"email": detail["email"], "indicators": detail["indicators"], "user": username},
    )


@app.get("/admin/emails/{email_id}/{action}")
async def admin_email_action(
    email_id: str,
    action: str,
    username: str = Depends(get_current_username),
):
    """
    Apply a dashboard action (spam, not-spam, archive, delete) and go back to the list.
    Protected by Basic Auth.
    """
    handler = ADMIN_ACTIONS.get(action)
    if handler is None:
        raise HTTPException(status_code=404, detail=f"Unknown action: {action}")

    logger.info("admin action requested", extra={"email_id": email_id, "action": action, "admin": username})
    try:
        handler(email_id)
    except EmailNotFoundError:
        logger.warning("email not found", extra={"email_id": email_id})

    return RedirectResponse(url="/admin/emails", status_code=303)
