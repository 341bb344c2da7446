import re
from typing import List

# Scheme is matched case-sensitively; the URL runs to the next whitespace
URL_REGEX = re.compile(r"https?://\S+")

WHITESPACE_REGEX = re.compile(r"\s+")


def extract_urls(text: str) -> List[str]:
    """
    Return every http/https URL in text, in order of appearance.
    Duplicates are kept: each occurrence counts towards URL density.
    """
    if not text:
        return []
    return URL_REGEX.findall(text)


def word_count(text: str) -> int:
    # Splitting an empty or whitespace-padded string still yields pieces,
    # so this never returns 0
    return len(WHITESPACE_REGEX.split(text or ""))


def url_density(text: str, urls: List[str]) -> float:
    return len(urls) / max(word_count(text), 1)
