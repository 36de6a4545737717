from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from tradie_mail.assistant.base import DEFAULT_TIMEOUT_SECONDS, Assistant
from tradie_mail.digest.insights import build_narrative
from tradie_mail.models import (
    AnalyzedEmail,
    CategoryCounts,
    DateRange,
    DigestSummary,
    EmailSummary,
    MorningDigest,
    UserEmailPreferences,
)
from tradie_mail.pipeline.orchestrator import analyze_emails
from tradie_mail.rules.corpus import DEFAULT_CORPUS, KeywordCorpus
from tradie_mail.rules.scoring import utcnow

logger = logging.getLogger(__name__)

URGENT_LIMIT = 5
HIGH_PRIORITY_LIMIT = 8
ACTION_REQUIRED_LIMIT = 10


def summarize_batch(emails: Sequence[AnalyzedEmail]) -> DigestSummary:
    categories = Counter(e.analysis.category for e in emails)
    return DigestSummary(
        total_emails=len(emails),
        urgent_count=sum(1 for e in emails if e.analysis.priority == "urgent"),
        high_priority_count=sum(1 for e in emails if e.analysis.priority == "high"),
        action_required_count=sum(1 for e in emails if e.analysis.action_required),
        category_counts=CategoryCounts(
            urgent=categories["urgent"],
            standard=categories["standard"],
            follow_up=categories["follow-up"],
            admin=categories["admin"],
            spam=categories["spam"],
        ),
    )


def top_by_urgency(
    emails: Sequence[AnalyzedEmail],
    predicate: Callable[[AnalyzedEmail], bool],
    limit: int,
) -> List[AnalyzedEmail]:
    # sorted() is stable, so equal scores keep batch order.
    selected = [e for e in emails if predicate(e)]
    return sorted(selected, key=lambda e: e.analysis.urgency_score, reverse=True)[:limit]


def generate_morning_digest(
    analyzed: Sequence[AnalyzedEmail],
    date_range: DateRange,
    *,
    assistant: Optional[Assistant] = None,
    user_context: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> MorningDigest:
    """
    Aggregate a fully analysed batch into a morning digest.

    Counts cover the whole batch; the urgent, high-priority and
    action-required lists are ranked by urgency score and capped at 5, 8
    and 10 entries.
    """
    emails = list(analyzed)
    summary = summarize_batch(emails)

    narrative = build_narrative(
        summary,
        emails,
        assistant=assistant,
        user_context=user_context,
        timeout=timeout,
    )

    digest = MorningDigest(
        generated_at=now or utcnow(),
        date_range=date_range,
        summary=summary,
        urgent_emails=top_by_urgency(emails, lambda e: e.analysis.priority == "urgent", URGENT_LIMIT),
        high_priority_emails=top_by_urgency(emails, lambda e: e.analysis.priority == "high", HIGH_PRIORITY_LIMIT),
        action_required_emails=top_by_urgency(emails, lambda e: e.analysis.action_required, ACTION_REQUIRED_LIMIT),
        business_insights=narrative.business_insights,
        recommendations=narrative.recommendations,
    )
    logger.info(
        "Morning digest generated total=%d urgent=%d action_required=%d",
        summary.total_emails,
        summary.urgent_count,
        summary.action_required_count,
    )
    return digest


def select_window(emails: Sequence[EmailSummary], date_range: DateRange) -> List[EmailSummary]:
    """Emails received inside the range. Emails without a date are left out."""
    return [e for e in emails if date_range.contains(e.date)]


def digest_for_window(
    emails: Sequence[EmailSummary],
    date_range: DateRange,
    preferences: Optional[UserEmailPreferences] = None,
    *,
    assistant: Optional[Assistant] = None,
    corpus: KeywordCorpus = DEFAULT_CORPUS,
    user_context: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> MorningDigest:
    """Select the window, analyse every email, then aggregate."""
    now = now or utcnow()
    window = select_window(emails, date_range)
    logger.debug("Digest window holds %d of %d emails", len(window), len(emails))

    # analyze_emails returns only once every email has an analysis.
    analyzed = analyze_emails(
        window,
        preferences,
        assistant=assistant,
        corpus=corpus,
        now=now,
        timeout=timeout,
    )
    return generate_morning_digest(
        analyzed,
        date_range,
        assistant=assistant,
        user_context=user_context,
        now=now,
        timeout=timeout,
    )
