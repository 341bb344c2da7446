"""
Tests for the SQLite store (services.db). Uses the store_db fixture (temporary DB).
"""

from __future__ import annotations

import sqlite3

import pytest


def _row(**overrides):
    row = {
        "user_id": "u1",
        "sender_email": "a@example.com",
        "sender_name": "A",
        "subject": "Hi",
        "body": "Body",
    }
    row.update(overrides)
    return row


def test_insert_and_get_email(store_db):
    saved = store_db.insert_email(_row(is_spam=True, spam_score=55, status="spam"))
    loaded = store_db.get_email(saved["id"])
    assert loaded == saved
    assert loaded["is_spam"] is True
    assert loaded["created_at"].endswith("Z")


def test_insert_defaults(store_db):
    saved = store_db.insert_email(_row(sender_name=None))
    assert saved["sender_name"] == ""
    assert saved["status"] == "inbox"
    assert saved["is_spam"] is False
    assert saved["spam_score"] == 0


def test_get_missing_email(store_db):
    assert store_db.get_email("nope") is None


def test_indicators_sorted_by_weight_then_insertion(store_db):
    email = store_db.insert_email(_row())
    store_db.insert_indicators(
        email["id"],
        [
            {"type": "spam_phrase", "value": "first", "weight": 10},
            {"type": "suspicious_domain", "value": "heavy", "weight": 25},
            {"type": "spam_phrase", "value": "second", "weight": 10},
        ],
    )
    values = [i["indicator_value"] for i in store_db.list_indicators(email["id"])]
    assert values == ["heavy", "first", "second"]


def test_insert_no_indicators(store_db):
    email = store_db.insert_email(_row())
    store_db.insert_indicators(email["id"], [])
    assert store_db.list_indicators(email["id"]) == []


def test_insert_email_with_indicators(store_db):
    saved = store_db.insert_email_with_indicators(
        _row(),
        [
            {"type": "spam_phrase", "value": "first", "weight": 10},
            {"type": "suspicious_domain", "value": "heavy", "weight": 25},
        ],
    )
    assert store_db.get_email(saved["id"]) == saved
    values = [i["indicator_value"] for i in store_db.list_indicators(saved["id"])]
    assert values == ["heavy", "first"]


def test_insert_email_with_indicators_is_all_or_nothing(store_db):
    with pytest.raises(sqlite3.IntegrityError):
        store_db.insert_email_with_indicators(
            _row(),
            [
                {"type": "spam_phrase", "value": "ok", "weight": 10},
                {"type": "spam_phrase", "value": None, "weight": 10},
            ],
        )
    assert store_db.list_emails() == []
    assert store_db.get_dashboard_stats()["total"] == 0


def test_list_emails_filters(store_db):
    clean = store_db.insert_email(_row(subject="clean"))
    spam = store_db.insert_email(_row(subject="spam", is_spam=True, status="spam"))
    archived = store_db.insert_email(_row(subject="old", status="archived"))

    def ids(name):
        return {e["id"] for e in store_db.list_emails(name)}

    assert ids("all") == {clean["id"], spam["id"], archived["id"]}
    assert ids("inbox") == {clean["id"]}
    assert ids("spam") == {spam["id"]}
    assert ids("archived") == {archived["id"]}


def test_list_emails_newest_first(store_db):
    store_db.insert_email(_row(subject="older", received_at="2024-01-01T00:00:00Z"))
    store_db.insert_email(_row(subject="newer", received_at="2024-02-01T00:00:00Z"))
    assert [e["subject"] for e in store_db.list_emails()] == ["newer", "older"]


def test_list_emails_unknown_filter(store_db):
    with pytest.raises(ValueError):
        store_db.list_emails("starred")


def test_update_email(store_db):
    email = store_db.insert_email(_row())
    assert store_db.update_email(email["id"], "spam", True) is True
    loaded = store_db.get_email(email["id"])
    assert loaded["status"] == "spam"
    assert loaded["is_spam"] is True

    assert store_db.update_email(email["id"], "archived") is True
    loaded = store_db.get_email(email["id"])
    assert loaded["status"] == "archived"
    assert loaded["is_spam"] is True


def test_update_missing_email(store_db):
    assert store_db.update_email("nope", "inbox") is False


def test_delete_email_removes_indicators(store_db):
    email = store_db.insert_email(_row())
    store_db.insert_indicators(email["id"], [{"type": "spam_phrase", "value": "x", "weight": 10}])
    assert store_db.delete_email(email["id"]) is True
    assert store_db.get_email(email["id"]) is None
    assert store_db.list_indicators(email["id"]) == []
    assert store_db.delete_email(email["id"]) is False


def test_dashboard_stats(store_db):
    assert store_db.get_dashboard_stats() == {"total": 0, "spam": 0, "inbox": 0, "archived": 0}

    store_db.insert_email(_row())
    store_db.insert_email(_row(is_spam=True, status="spam"))
    store_db.insert_email(_row(status="archived"))
    assert store_db.get_dashboard_stats() == {"total": 3, "spam": 1, "inbox": 1, "archived": 1}
