LEGACY_KEYWORDS = [
    "free",
    "win",
    "winner",
    "cash",
    "offer",
    "urgent",
    "click",
    "prize",
    "money",
    "limited time",
    "act now",
    "verify",
    "suspended",
    "congratulations",
]


def legacy_score(subject: str, body: str) -> dict:
    """
    Simplified scorer behind the old /analyze-email endpoint.

    Deprecated: it counts keywords without weights and uses a threshold of 2,
    so its verdict can disagree with services.spam_detection.analyze_spam.
    Kept only so existing clients of that endpoint keep working.
    """
    text = (subject + " " + body).lower()
    links = body.count("http")

    score = 0
    for word in LEGACY_KEYWORDS:
        if word in text:
            score += 1

    if links >= 2:
        score += 2
    if subject == subject.upper():
        score += 2

    is_spam = score >= 2
    return {
        "isSpam": is_spam,
        "score": score,
        "message": "Spam detected" if is_spam else "Email is safe",
    }
