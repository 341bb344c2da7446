"""
Rule-based spam scoring.

analyze_spam() normalizes an email once, runs every rule in RULES against the
normalized view and aggregates the resulting indicators into a 0-100 score.
Rules are plain functions returning a list of indicators, so a new check is
added by writing a function and appending it to RULES.

Keyword and phrase matching is substring based: "claim" also matches
"reclaimed". Counts are of non-overlapping occurrences.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from services.url_analysis import extract_urls, url_density

MAX_SCORE = 100
SPAM_THRESHOLD = 40

SPAM_KEYWORDS = (
    "winner", "congratulations", "claim", "prize", "lottery", "casino",
    "viagra", "pharmacy", "prescription", "medication", "pills",
    "urgent", "act now", "limited time", "expires", "hurry",
    "free money", "cash bonus", "earn money", "work from home",
    "click here", "click below", "unsubscribe", "opt out",
    "guarantee", "no risk", "risk free", "satisfaction guaranteed",
    "debt", "credit", "loan", "refinance", "mortgage",
    "nigerian prince", "inheritance", "beneficiary",
    "account suspended", "verify account", "confirm identity",
    "password reset", "unusual activity", "security alert",
)

SPAM_PHRASES = (
    "act now", "apply now", "become a member", "call now",
    "click here", "get it now", "do it today", "dont delete",
    "earn extra cash", "extra income", "financial freedom",
    "free access", "free consultation", "free gift", "free preview",
    "get paid", "increase sales", "increase traffic", "lose weight",
    "make money", "million dollars", "once in lifetime", "order now",
    "please read", "special promotion", "while supplies last",
)

SUSPICIOUS_DOMAINS = (
    "tempmail.com", "guerrillamail.com", "mailinator.com",
    "throwaway.email", "10minutemail.com", "yopmail.com",
)

_KEYWORD_PATTERNS = tuple(
    (keyword, re.compile(re.escape(keyword), re.IGNORECASE)) for keyword in SPAM_KEYWORDS
)
_UPPERCASE_REGEX = re.compile(r"[A-Z]")
_RANDOM_LOCAL_PART_REGEX = re.compile(r"[0-9]{5,}|[a-z]{15,}", re.IGNORECASE)
_MONEY_REGEX = re.compile(r"\$[0-9,]+|\d+\s*(?:dollars|USD|EUR|GBP)", re.IGNORECASE)


class IndicatorType(str, Enum):
    KEYWORD_SUBJECT = "keyword_subject"
    KEYWORD_BODY = "keyword_body"
    SPAM_PHRASE = "spam_phrase"
    SUSPICIOUS_DOMAIN = "suspicious_domain"
    EXCESSIVE_CAPS = "excessive_caps"
    EXCESSIVE_PUNCTUATION = "excessive_punctuation"
    HIGH_URL_DENSITY = "high_url_density"
    MISSING_SENDER_NAME = "missing_sender_name"
    SUSPICIOUS_EMAIL = "suspicious_email"
    SHORT_WITH_LINKS = "short_with_links"
    MONEY_MENTIONS = "money_mentions"


@dataclass(frozen=True)
class EmailInput:
    sender_email: str
    sender_name: str
    subject: str
    body: str


@dataclass(frozen=True)
class SpamIndicator:
    type: IndicatorType
    value: str
    weight: int

    def to_dict(self) -> dict:
        return {"type": self.type.value, "value": self.value, "weight": self.weight}


@dataclass(frozen=True)
class SpamAnalysisResult:
    is_spam: bool
    spam_score: int
    indicators: Tuple[SpamIndicator, ...]

    def to_dict(self) -> dict:
        return {
            "is_spam": self.is_spam,
            "spam_score": self.spam_score,
            "indicators": [i.to_dict() for i in self.indicators],
        }


@dataclass(frozen=True)
class NormalizedEmail:
    """Values derived once from an EmailInput and shared by every rule."""

    subject: str
    body: str
    sender_name: str
    lower_subject: str
    lower_body: str
    full_text: str
    url_matches: Tuple[str, ...]
    url_density: float
    sender_domain: str
    sender_local_part: str
    # None for an empty subject
    caps_ratio: Optional[float]
    exclamation_count: int


def normalize_email(email: EmailInput) -> NormalizedEmail:
    lower_subject = email.subject.lower()
    lower_body = email.body.lower()
    urls = extract_urls(email.body)

    local_part, at, domain = email.sender_email.partition("@")

    caps_ratio = None
    if email.subject:
        caps_ratio = len(_UPPERCASE_REGEX.findall(email.subject)) / len(email.subject)

    return NormalizedEmail(
        subject=email.subject,
        body=email.body,
        sender_name=email.sender_name,
        lower_subject=lower_subject,
        lower_body=lower_body,
        full_text=f"{lower_subject} {lower_body}",
        url_matches=tuple(urls),
        url_density=url_density(email.body, urls),
        sender_domain=domain.lower() if at else "",
        sender_local_part=local_part,
        caps_ratio=caps_ratio,
        exclamation_count=email.subject.count("!"),
    )


# ---------- Rules ----------

def keyword_subject_rule(email: NormalizedEmail) -> List[SpamIndicator]:
    indicators = []
    for keyword, pattern in _KEYWORD_PATTERNS:
        matches = len(pattern.findall(email.lower_subject))
        if matches:
            indicators.append(
                SpamIndicator(
                    IndicatorType.KEYWORD_SUBJECT,
                    f'Spam keyword in subject: "{keyword}"',
                    8 * matches,
                )
            )
    return indicators


def keyword_body_rule(email: NormalizedEmail) -> List[SpamIndicator]:
    indicators = []
    for keyword, pattern in _KEYWORD_PATTERNS:
        matches = len(pattern.findall(email.lower_body))
        if matches:
            indicators.append(
                SpamIndicator(
                    IndicatorType.KEYWORD_BODY,
                    f'Spam keyword in body: "{keyword}" ({matches}x)',
                    3 * matches,
                )
            )
    return indicators


def spam_phrase_rule(email: NormalizedEmail) -> List[SpamIndicator]:
    return [
        SpamIndicator(IndicatorType.SPAM_PHRASE, f'Common spam phrase: "{phrase}"', 10)
        for phrase in SPAM_PHRASES
        if phrase in email.full_text
    ]


def suspicious_domain_rule(email: NormalizedEmail) -> List[SpamIndicator]:
    if any(domain in email.sender_domain for domain in SUSPICIOUS_DOMAINS):
        return [
            SpamIndicator(
                IndicatorType.SUSPICIOUS_DOMAIN,
                f"Suspicious sender domain: {email.sender_domain}",
                25,
            )
        ]
    return []


def excessive_caps_rule(email: NormalizedEmail) -> List[SpamIndicator]:
    if email.caps_ratio is None:
        return []
    if email.caps_ratio > 0.5 and len(email.subject) > 5:
        # Round half up for the displayed percentage
        percent = math.floor(email.caps_ratio * 100 + 0.5)
        return [
            SpamIndicator(
                IndicatorType.EXCESSIVE_CAPS,
                f"Excessive capitals in subject ({percent}%)",
                15,
            )
        ]
    return []


def excessive_punctuation_rule(email: NormalizedEmail) -> List[SpamIndicator]:
    if email.exclamation_count >= 3:
        return [
            SpamIndicator(
                IndicatorType.EXCESSIVE_PUNCTUATION,
                f"Multiple exclamation marks ({email.exclamation_count})",
                5 * email.exclamation_count,
            )
        ]
    return []


def high_url_density_rule(email: NormalizedEmail) -> List[SpamIndicator]:
    url_count = len(email.url_matches)
    if email.url_density > 0.1 and url_count > 3:
        return [
            SpamIndicator(
                IndicatorType.HIGH_URL_DENSITY,
                f"High URL density: {url_count} URLs",
                20,
            )
        ]
    return []


def missing_sender_name_rule(email: NormalizedEmail) -> List[SpamIndicator]:
    if not email.sender_name.strip():
        return [SpamIndicator(IndicatorType.MISSING_SENDER_NAME, "No sender name provided", 8)]
    return []


def suspicious_email_rule(email: NormalizedEmail) -> List[SpamIndicator]:
    if _RANDOM_LOCAL_PART_REGEX.search(email.sender_local_part):
        return [
            SpamIndicator(
                IndicatorType.SUSPICIOUS_EMAIL,
                "Suspicious email format (random characters)",
                12,
            )
        ]
    return []


def short_with_links_rule(email: NormalizedEmail) -> List[SpamIndicator]:
    if len(email.body) < 50 and email.url_matches:
        return [SpamIndicator(IndicatorType.SHORT_WITH_LINKS, "Very short message with links", 15)]
    return []


def money_mentions_rule(email: NormalizedEmail) -> List[SpamIndicator]:
    mentions = len(_MONEY_REGEX.findall(email.body))
    if mentions > 2:
        return [
            SpamIndicator(
                IndicatorType.MONEY_MENTIONS,
                f"Multiple money mentions ({mentions})",
                5 * mentions,
            )
        ]
    return []


Rule = Callable[[NormalizedEmail], List[SpamIndicator]]

# Evaluation order only decides the order of equal-weight indicators
RULES: Tuple[Rule, ...] = (
    keyword_subject_rule,
    keyword_body_rule,
    spam_phrase_rule,
    suspicious_domain_rule,
    excessive_caps_rule,
    excessive_punctuation_rule,
    high_url_density_rule,
    missing_sender_name_rule,
    suspicious_email_rule,
    short_with_links_rule,
    money_mentions_rule,
)


# ---------- Aggregation ----------

def aggregate(indicators: List[SpamIndicator]) -> SpamAnalysisResult:
    total = sum(i.weight for i in indicators)
    spam_score = min(round(total), MAX_SCORE)
    # sorted() is stable, so equal weights keep rule emission order
    ordered = sorted(indicators, key=lambda i: i.weight, reverse=True)
    return SpamAnalysisResult(
        is_spam=spam_score >= SPAM_THRESHOLD,
        spam_score=spam_score,
        indicators=tuple(ordered),
    )


def analyze_spam(email: EmailInput, rules: Tuple[Rule, ...] = RULES) -> SpamAnalysisResult:
    normalized = normalize_email(email)
    indicators: List[SpamIndicator] = []
    for rule in rules:
        indicators.extend(rule(normalized))
    return aggregate(indicators)
