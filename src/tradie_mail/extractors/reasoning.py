from __future__ import annotations

from typing import List, Sequence

from tradie_mail.rules.scoring import HIGH_THRESHOLD, URGENT_THRESHOLD

DEFAULT_REASONING = "Standard email with normal priority"
HIGH_RELEVANCE = 70


def build_reasoning(fragments: Sequence[str], default: str = DEFAULT_REASONING) -> str:
    """Join triggered explanations with period separators."""
    parts = [f.strip().rstrip(".") for f in fragments if f and f.strip()]
    if not parts:
        parts = [default]
    return ". ".join(parts) + "."


def analysis_reasons(
    *,
    urgency_score: int,
    category: str,
    action_required: bool,
    business_relevance: int,
) -> List[str]:
    reasons: List[str] = []

    if urgency_score >= URGENT_THRESHOLD:
        reasons.append("Contains urgent keywords or emergency indicators")
    elif urgency_score >= HIGH_THRESHOLD:
        reasons.append("Shows high priority indicators")

    if category == "urgent":
        reasons.append("Categorized as urgent due to emergency or critical keywords")
    elif category == "spam":
        reasons.append("Matches spam indicators")

    if action_required:
        reasons.append("Requires action or response from recipient")

    if business_relevance >= HIGH_RELEVANCE:
        reasons.append("High business relevance with trade-specific content")

    return reasons


def urgency_reasons(*, urgency_score: int, keywords: Sequence[str], business_impact: str) -> List[str]:
    reasons: List[str] = []

    if urgency_score >= URGENT_THRESHOLD:
        reasons.append(f"High urgency score ({urgency_score}%)")

    if keywords:
        reasons.append(f"Urgent keywords detected: {', '.join(keywords[:3])}")

    if business_impact == "high":
        reasons.append("High business impact indicated")

    return reasons
