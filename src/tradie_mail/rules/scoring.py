from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

from tradie_mail.rules.core import MailContext, matched_terms
from tradie_mail.rules.corpus import WeightedTerm

SCORE_MIN = 0
SCORE_MAX = 100

# Priority bands over the clamped score
URGENT_THRESHOLD = 70
HIGH_THRESHOLD = 50
MEDIUM_THRESHOLD = 25

OVERRIDE_BONUS: Dict[str, int] = {
    "urgent": 30,
    "high": 20,
    "medium": 10,
    "low": -10,
}

RECENT_WINDOW = timedelta(hours=2)
RECENCY_BONUS = 5
UNREAD_BONUS = 5


def clamp(score: float, low: int = SCORE_MIN, high: int = SCORE_MAX) -> int:
    return int(max(low, min(high, round(score))))


def weighted_hits(content: str, terms: Tuple[WeightedTerm, ...]) -> int:
    """Sum the weight of every term present in content (substring match)."""
    return sum(entry.weight for entry in terms if entry.term in content)


def is_recent(received: Optional[datetime], now: datetime) -> bool:
    # An absent date is never recent.
    if received is None:
        return False
    return now - received <= RECENT_WINDOW


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def score_urgency(ctx: MailContext, now: Optional[datetime] = None) -> int:
    """
    Additive lexical urgency score on the 0-100 scale.

    Keyword weights from the general and industry tables stack, user
    urgent keywords add a fixed increment each, sender and subject
    overrides add or subtract a tier bonus, recent and unread mail get a
    small flat bump. The total is clamped to [0, 100].
    """
    now = now or utcnow()
    content = ctx.content
    corpus = ctx.corpus

    score = weighted_hits(content, corpus.general_urgent_terms)
    score += weighted_hits(content, corpus.industry_urgent_terms)
    score += corpus.custom_urgent_weight * len(matched_terms(content, ctx.preferences.urgent_keywords))

    sender_rule = ctx.sender_rule()
    if sender_rule is not None:
        score += OVERRIDE_BONUS[sender_rule.priority]

    subject_rule = ctx.subject_rule()
    if subject_rule is not None:
        score += OVERRIDE_BONUS[subject_rule.priority]

    if is_recent(ctx.email.date, now):
        score += RECENCY_BONUS

    if not ctx.email.is_read:
        score += UNREAD_BONUS

    return clamp(score)


def determine_priority(urgency_score: int) -> str:
    """Monotonic step function from score to priority tier."""
    if urgency_score >= URGENT_THRESHOLD:
        return "urgent"
    if urgency_score >= HIGH_THRESHOLD:
        return "high"
    if urgency_score >= MEDIUM_THRESHOLD:
        return "medium"
    return "low"
