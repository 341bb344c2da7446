"""
Tests for URL extraction and density helpers (services.url_analysis).
"""

from __future__ import annotations

import pytest

from services.url_analysis import extract_urls, url_density, word_count


def test_extract_urls_keeps_order_and_duplicates():
    text = "a http://x.example/1 b https://y.example c http://x.example/1"
    assert extract_urls(text) == ["http://x.example/1", "https://y.example", "http://x.example/1"]


def test_extract_urls_runs_to_whitespace():
    assert extract_urls("go (http://x.example/a?b=1), now") == ["http://x.example/a?b=1),"]


def test_extract_urls_empty():
    assert extract_urls("") == []
    assert extract_urls("no links here, www.example.com either") == []


@pytest.mark.parametrize(
    "text, expected",
    [
        ("", 1),
        ("one", 1),
        ("one two  three", 3),
        ("one\n\ttwo", 2),
        (" leading", 2),
    ],
)
def test_word_count(text, expected):
    assert word_count(text) == expected


def test_url_density():
    text = "see http://a.example and http://b.example"
    assert url_density(text, extract_urls(text)) == pytest.approx(2 / 4)


def test_url_density_empty_text():
    assert url_density("", []) == 0
