from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import List, Optional, Sequence

from tradie_mail.assistant.base import DEFAULT_TIMEOUT_SECONDS, Assistant, Attempt, call_with_timeout, ensure_available
from tradie_mail.assistant.reconcile import parse_remote_analysis, reconcile
from tradie_mail.extractors.reasoning import analysis_reasons, build_reasoning
from tradie_mail.extractors.suggestions import ActionSignals, keyword_families, suggest_actions
from tradie_mail.models import AnalyzedEmail, EmailAnalysis, EmailSummary, UserEmailPreferences
from tradie_mail.rules.classification import analyze_sentiment, business_relevance, categorize, requires_action
from tradie_mail.rules.core import MailContext
from tradie_mail.rules.corpus import DEFAULT_CORPUS, KeywordCorpus
from tradie_mail.rules.scoring import determine_priority, score_urgency, utcnow

logger = logging.getLogger(__name__)


def rule_based_analysis(
    email: EmailSummary,
    preferences: Optional[UserEmailPreferences] = None,
    *,
    corpus: KeywordCorpus = DEFAULT_CORPUS,
    now: Optional[datetime] = None,
) -> EmailAnalysis:
    """Pure, deterministic analysis from the keyword corpus and preferences."""
    ctx = MailContext(email=email, preferences=preferences or UserEmailPreferences(), corpus=corpus)
    settings = ctx.preferences.analysis_settings

    urgency_score = score_urgency(ctx, now=now)
    category = categorize(ctx).category
    # Spam pre-empts the action flag as well as the category.
    action_required = category != "spam" and requires_action(ctx)
    relevance = business_relevance(ctx)

    suggested: List[str] = []
    if settings.enable_action_suggestions:
        suggested = suggest_actions(
            ActionSignals(
                category=category,
                action_required=action_required,
                families=keyword_families(ctx),
            )
        )

    reasoning = build_reasoning(
        analysis_reasons(
            urgency_score=urgency_score,
            category=category,
            action_required=action_required,
            business_relevance=relevance,
        )
    )

    logger.debug("Rule-based analysis for %s: %s (%d)", email.id, category, urgency_score)
    return EmailAnalysis(
        id=email.id,
        priority=determine_priority(urgency_score),
        category=category,
        urgency_score=urgency_score,
        action_required=action_required,
        suggested_actions=suggested,
        reasoning=reasoning,
        business_relevance=relevance,
        sentiment=analyze_sentiment(ctx),
    )


def attempt_assisted(
    email: EmailSummary,
    preferences: Optional[UserEmailPreferences],
    assistant: Optional[Assistant],
    *,
    corpus: KeywordCorpus = DEFAULT_CORPUS,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Attempt[EmailAnalysis]:
    """
    Ask the assistant for an analysis and reconcile it with the user's
    preferences. Never raises: every failure comes back as a failed Attempt.
    """
    if assistant is None:
        return Attempt.failure("no assistant configured")

    ctx = MailContext(email=email, preferences=preferences or UserEmailPreferences(), corpus=corpus)
    try:
        available = ensure_available(assistant)
        payload = call_with_timeout(available.analyze_email, f"{email.subject} {email.snippet}", timeout=timeout)
        analysis = reconcile(parse_remote_analysis(payload), ctx)
    except Exception as exc:
        logger.warning("Assistant analysis failed for %s, falling back to rules: %s", email.id, exc)
        return Attempt.failure(f"{type(exc).__name__}: {exc}")

    logger.info(
        "Email analyzed using assistant id=%s urgency_score=%s category=%s",
        email.id,
        analysis.urgency_score,
        analysis.category,
    )
    return Attempt.success(analysis)


def safe_default_analysis(email: EmailSummary) -> EmailAnalysis:
    return EmailAnalysis(
        id=email.id,
        priority="low",
        category="standard",
        urgency_score=0,
        action_required=False,
        suggested_actions=["Review email content"],
        reasoning="Analysis failed - manual review required.",
        business_relevance=50,
        sentiment="neutral",
    )


def analyze_email(
    email: EmailSummary,
    preferences: Optional[UserEmailPreferences] = None,
    *,
    assistant: Optional[Assistant] = None,
    corpus: KeywordCorpus = DEFAULT_CORPUS,
    now: Optional[datetime] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> EmailAnalysis:
    """
    Exactly one analysis per email: the assisted result when the assistant
    is configured and answers in time with a complete analysis, the
    rule-based result otherwise.
    """
    now = now or utcnow()

    def fallback() -> EmailAnalysis:
        try:
            return rule_based_analysis(email, preferences, corpus=corpus, now=now)
        except Exception:
            # Triage is best-effort; a broken email never fails the batch.
            logger.exception("Rule-based analysis failed for %s", email.id)
            return safe_default_analysis(email)

    if assistant is None:
        return fallback()

    return attempt_assisted(email, preferences, assistant, corpus=corpus, timeout=timeout).or_else(fallback)


def analyze_emails(
    emails: Sequence[EmailSummary],
    preferences: Optional[UserEmailPreferences] = None,
    *,
    assistant: Optional[Assistant] = None,
    corpus: KeywordCorpus = DEFAULT_CORPUS,
    now: Optional[datetime] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    max_workers: Optional[int] = None,
) -> List[AnalyzedEmail]:
    """
    Analyse a batch. Results keep input order; emails are independent of
    each other, so with an assistant they are analysed in a thread pool.
    """
    now = now or utcnow()

    def one(email: EmailSummary) -> AnalyzedEmail:
        analysis = analyze_email(
            email,
            preferences,
            assistant=assistant,
            corpus=corpus,
            now=now,
            timeout=timeout,
        )
        return AnalyzedEmail(email=email, analysis=analysis)

    if assistant is None or max_workers == 1 or len(emails) <= 1:
        return [one(e) for e in emails]

    with ThreadPoolExecutor(max_workers=max_workers or 4, thread_name_prefix="analyze") as pool:
        return list(pool.map(one, emails))
