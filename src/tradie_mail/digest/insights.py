from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from tradie_mail.assistant.base import DEFAULT_TIMEOUT_SECONDS, Assistant, Attempt, call_with_timeout, ensure_available
from tradie_mail.models import AnalyzedEmail, DigestSummary

logger = logging.getLogger(__name__)

AI_EMAIL_LIMIT = 15
MAX_AI_INSIGHTS = 3
MAX_AI_RECOMMENDATIONS = 4
AI_PREFIX = "🤖 "

INSIGHT_MARKERS = ("insight", "pattern", "trend")
RECOMMENDATION_MARKERS = ("recommend", "suggest", "should", "consider")

HIGH_VOLUME = 30
LOW_VOLUME = 5
BUSY_DAY = 20
MANY_ACTIONS = 10
HIGH_RELEVANCE = 70
BUSINESS_SHARE = 0.7
POSITIVE_SHARE = 0.3

_BULLET = re.compile(r"^\s*(?:[•\-*]|\d+[.)])\s*")

EMPTY_INSIGHT = "📭 No new emails in this period."
EMPTY_RECOMMENDATION = "✅ Great job staying on top of your inbox!"


@dataclass(frozen=True)
class DigestNarrative:
    business_insights: List[str]
    recommendations: List[str]


def rule_based_insights(summary: DigestSummary, emails: Sequence[AnalyzedEmail]) -> List[str]:
    insights: List[str] = []
    total = summary.total_emails

    if total > HIGH_VOLUME:
        insights.append(f"📈 High email volume ({total} emails). Consider email management strategies.")
    elif total < LOW_VOLUME:
        insights.append(f"📉 Low email volume ({total} emails). Good inbox management!")

    business = [e for e in emails if e.analysis.business_relevance >= HIGH_RELEVANCE]
    if total and len(business) > total * BUSINESS_SHARE:
        share = round(len(business) / total * 100)
        insights.append(f"💼 High business engagement ({share}% business-related emails).")

    positive = [e for e in emails if e.analysis.sentiment == "positive"]
    if total and len(positive) > total * POSITIVE_SHARE:
        insights.append(f"😊 Positive customer sentiment detected in {len(positive)} emails.")

    return insights or ["📊 Email patterns look normal for your business."]


def rule_based_recommendations(summary: DigestSummary) -> List[str]:
    recommendations: List[str] = []

    if summary.urgent_count > 0:
        plural = "s" if summary.urgent_count > 1 else ""
        recommendations.append(f"🔥 Address {summary.urgent_count} urgent email{plural} first")

    if summary.action_required_count > MANY_ACTIONS:
        recommendations.append(
            f"📋 Block 2-3 hours today for email responses "
            f"({summary.action_required_count} emails need action)"
        )

    if summary.total_emails > BUSY_DAY:
        recommendations.append("⏰ Consider batching email responses at set times (9 AM, 2 PM, 5 PM)")

    return recommendations or ["✅ Your inbox looks manageable today!"]


def _marked_lines(text: str, markers: Sequence[str], limit: int) -> List[str]:
    picked: List[str] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        if any(m in line.lower() for m in markers):
            cleaned = _BULLET.sub("", line).strip()
            if cleaned:
                picked.append(f"{AI_PREFIX}{cleaned}")
        if len(picked) >= limit:
            break
    return picked


def attempt_ai_narrative(
    emails: Sequence[AnalyzedEmail],
    assistant: Optional[Assistant],
    *,
    user_context: Optional[Dict[str, Any]] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Attempt[str]:
    if assistant is None:
        return Attempt.failure("no assistant configured")

    payload = [
        {"subject": e.email.subject, "snippet": e.email.snippet, "priority": e.analysis.priority}
        for e in emails[:AI_EMAIL_LIMIT]
    ]
    try:
        available = ensure_available(assistant)
        text = call_with_timeout(available.generate_digest, payload, user_context, timeout=timeout)
    except Exception as exc:
        logger.warning("Assistant digest failed, using rule-based insights: %s", exc)
        return Attempt.failure(f"{type(exc).__name__}: {exc}")

    if not isinstance(text, str) or not text.strip():
        logger.warning("Assistant digest was empty, using rule-based insights")
        return Attempt.failure("empty digest text")
    return Attempt.success(text)


def build_narrative(
    summary: DigestSummary,
    emails: Sequence[AnalyzedEmail],
    *,
    assistant: Optional[Assistant] = None,
    user_context: Optional[Dict[str, Any]] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> DigestNarrative:
    """
    Insights and recommendations for the digest.

    One assistant call serves both lists. A list for which the assistant
    text has no recognizable lines falls back to its rule-based version.
    """
    if summary.total_emails == 0:
        return DigestNarrative(business_insights=[EMPTY_INSIGHT], recommendations=[EMPTY_RECOMMENDATION])

    text = attempt_ai_narrative(emails, assistant, user_context=user_context, timeout=timeout).or_else(str)

    insights = _marked_lines(text, INSIGHT_MARKERS, MAX_AI_INSIGHTS)
    recommendations = _marked_lines(text, RECOMMENDATION_MARKERS, MAX_AI_RECOMMENDATIONS)

    if assistant is not None and text and not (insights and recommendations):
        logger.info("Assistant digest lacked insight or recommendation lines, filling in with rules")

    return DigestNarrative(
        business_insights=insights or rule_based_insights(summary, emails),
        recommendations=recommendations or rule_based_recommendations(summary),
    )
