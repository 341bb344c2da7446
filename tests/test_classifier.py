"""
Tests for the legacy /analyze-email scorer (services.classifier).
"""

from __future__ import annotations

from services.classifier import legacy_score


def test_clean_message():
    assert legacy_score("Hello", "see you tomorrow") == {
        "isSpam": False,
        "score": 0,
        "message": "Email is safe",
    }


def test_keywords_links_and_upper_subject():
    result = legacy_score("WIN NOW", "click http://a.example http://b.example")
    # win + click, two links, upper-case subject
    assert result["score"] == 1 + 1 + 2 + 2
    assert result["isSpam"] is True
    assert result["message"] == "Spam detected"


def test_keyword_counted_once():
    result = legacy_score("Hello", "urgent urgent urgent")
    assert result["score"] == 1
    assert result["isSpam"] is False


def test_two_keywords_reach_threshold():
    # Two plain keywords are enough for the legacy threshold
    result = legacy_score("Special offer", "Get it free")
    assert result["score"] == 2
    assert result["isSpam"] is True
