import os
import sqlite3
import uuid
from datetime import datetime, timezone
from threading import Lock

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DB_PATH = os.getenv("SPAM_DB_PATH", os.path.join(BASE_DIR, "data", "spam_detector.db"))

EMAIL_COLUMNS = (
    "id",
    "user_id",
    "sender_email",
    "sender_name",
    "subject",
    "body",
    "received_at",
    "is_spam",
    "spam_score",
    "status",
    "created_at",
)
INDICATOR_COLUMNS = (
    "id",
    "email_id",
    "indicator_type",
    "indicator_value",
    "weight",
    "created_at",
)

# filter name -> (WHERE clause, params)
EMAIL_FILTERS = {
    "all": ("", ()),
    "inbox": ("WHERE status = ? AND is_spam = 0", ("inbox",)),
    "spam": ("WHERE is_spam = 1", ()),
    "archived": ("WHERE status = ?", ("archived",)),
}

_db_lock = Lock()


def _now() -> str:
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"


def _connect() -> sqlite3.Connection:
    conn = sqlite3.connect(DB_PATH)
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def _email_from_row(row) -> dict:
    email = dict(zip(EMAIL_COLUMNS, row))
    email["is_spam"] = bool(email["is_spam"])
    return email


def init_db():
    """Create the SQLite database and tables if they don't exist."""
    db_dir = os.path.dirname(DB_PATH)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)
    with _db_lock:
        conn = _connect()
        cur = conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS emails (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                sender_email TEXT NOT NULL,
                sender_name TEXT DEFAULT '',
                subject TEXT NOT NULL,
                body TEXT NOT NULL,
                received_at TEXT,
                is_spam INTEGER DEFAULT 0,
                spam_score INTEGER DEFAULT 0,
                status TEXT DEFAULT 'inbox',
                created_at TEXT
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS spam_indicators (
                id TEXT PRIMARY KEY,
                email_id TEXT NOT NULL REFERENCES emails(id) ON DELETE CASCADE,
                indicator_type TEXT NOT NULL,
                indicator_value TEXT NOT NULL,
                weight INTEGER DEFAULT 0,
                created_at TEXT
            )
            """
        )
        conn.commit()
        conn.close()


def _email_row(email: dict, now: str) -> dict:
    return {
        "id": email.get("id") or str(uuid.uuid4()),
        "user_id": email["user_id"],
        "sender_email": email["sender_email"],
        "sender_name": email.get("sender_name") or "",
        "subject": email["subject"],
        "body": email["body"],
        "received_at": email.get("received_at") or now,
        "is_spam": bool(email.get("is_spam", False)),
        "spam_score": int(email.get("spam_score", 0)),
        "status": email.get("status") or "inbox",
        "created_at": now,
    }


def _write_email(cur: sqlite3.Cursor, row: dict):
    cur.execute(
        """
        INSERT INTO emails
            (id, user_id, sender_email, sender_name, subject, body,
             received_at, is_spam, spam_score, status, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            row["id"],
            row["user_id"],
            row["sender_email"],
            row["sender_name"],
            row["subject"],
            row["body"],
            row["received_at"],
            int(row["is_spam"]),
            row["spam_score"],
            row["status"],
            row["created_at"],
        ),
    )


def _write_indicators(cur: sqlite3.Cursor, email_id: str, indicators: list, now: str):
    cur.executemany(
        """
        INSERT INTO spam_indicators
            (id, email_id, indicator_type, indicator_value, weight, created_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        [
            (str(uuid.uuid4()), email_id, i["type"], i["value"], int(i["weight"]), now)
            for i in indicators
        ],
    )


def insert_email(email: dict) -> dict:
    """Insert an email row and return it as stored."""
    return insert_email_with_indicators(email, [])


def insert_email_with_indicators(email: dict, indicators: list) -> dict:
    """
    Insert an email row and its indicator rows in one transaction.
    Nothing is stored if any row fails. Returns the email row as stored.
    """
    now = _now()
    row = _email_row(email, now)

    with _db_lock:
        conn = _connect()
        try:
            cur = conn.cursor()
            _write_email(cur, row)
            if indicators:
                _write_indicators(cur, row["id"], indicators, now)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    return row


def insert_indicators(email_id: str, indicators: list):
    """
    Insert indicator rows for an email. Each item needs "type", "value" and
    "weight" keys. Rows keep the given order for equal weights.
    """
    if not indicators:
        return
    with _db_lock:
        conn = _connect()
        cur = conn.cursor()
        _write_indicators(cur, email_id, indicators, _now())
        conn.commit()
        conn.close()


def list_emails(filter_name: str = "all"):
    """Return emails matching a filter, newest first."""
    if filter_name not in EMAIL_FILTERS:
        raise ValueError(f"Unknown email filter: {filter_name}")
    where, params = EMAIL_FILTERS[filter_name]

    with _db_lock:
        conn = _connect()
        cur = conn.cursor()
        cur.execute(
            f"""
            SELECT {", ".join(EMAIL_COLUMNS)}
            FROM emails
            {where}
            ORDER BY received_at DESC, rowid DESC
            """,
            params,
        )
        rows = cur.fetchall()
        conn.close()

    return [_email_from_row(row) for row in rows]


def get_email(email_id: str):
    """Fetch a single email by ID."""
    with _db_lock:
        conn = _connect()
        cur = conn.cursor()
        cur.execute(
            f"SELECT {', '.join(EMAIL_COLUMNS)} FROM emails WHERE id = ?",
            (email_id,),
        )
        row = cur.fetchone()
        conn.close()

    if not row:
        return None
    return _email_from_row(row)


def list_indicators(email_id: str):
    """Indicators for an email, heaviest first."""
    with _db_lock:
        conn = _connect()
        cur = conn.cursor()
        cur.execute(
            f"""
            SELECT {", ".join(INDICATOR_COLUMNS)}
            FROM spam_indicators
            WHERE email_id = ?
            ORDER BY weight DESC, rowid ASC
            """,
            (email_id,),
        )
        rows = cur.fetchall()
        conn.close()

    return [dict(zip(INDICATOR_COLUMNS, row)) for row in rows]


def update_email(email_id: str, status: str, is_spam=None) -> bool:
    """Set status (and optionally the spam flag). Returns False if no such email."""
    with _db_lock:
        conn = _connect()
        cur = conn.cursor()
        if is_spam is None:
            cur.execute(
                "UPDATE emails SET status = ? WHERE id = ?",
                (status, email_id),
            )
        else:
            cur.execute(
                "UPDATE emails SET status = ?, is_spam = ? WHERE id = ?",
                (status, int(is_spam), email_id),
            )
        updated = cur.rowcount > 0
        conn.commit()
        conn.close()
    return updated


def delete_email(email_id: str) -> bool:
    """Delete an email and its indicators. Returns False if no such email."""
    with _db_lock:
        conn = _connect()
        cur = conn.cursor()
        cur.execute("DELETE FROM spam_indicators WHERE email_id = ?", (email_id,))
        cur.execute("DELETE FROM emails WHERE id = ?", (email_id,))
        deleted = cur.rowcount > 0
        conn.commit()
        conn.close()
    return deleted


def get_dashboard_stats():
    """
    Get simple statistics for the dashboard:
    - Total emails stored
    - Flagged as spam
    - Clean emails still in the inbox
    - Archived
    """
    with _db_lock:
        conn = _connect()
        cur = conn.cursor()
        cur.execute(
            """
            SELECT
                COUNT(*) AS total,
                SUM(is_spam) AS spam,
                SUM(CASE WHEN status = 'inbox' AND is_spam = 0 THEN 1 ELSE 0 END) AS inbox,
                SUM(CASE WHEN status = 'archived' THEN 1 ELSE 0 END) AS archived
            FROM emails
            """
        )
        row = cur.fetchone()
        conn.close()

    return {
        "total": row[0] or 0,
        "spam": row[1] or 0,
        "inbox": row[2] or 0,
        "archived": row[3] or 0,
    }
