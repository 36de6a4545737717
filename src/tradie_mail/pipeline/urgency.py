from __future__ import annotations

import logging
import re
from typing import List, Optional

from tradie_mail.extractors.job_value import detect_customer_type, extract_job_value
from tradie_mail.extractors.reasoning import build_reasoning, urgency_reasons
from tradie_mail.extractors.suggestions import ActionSignals, keyword_families, suggest_actions
from tradie_mail.models import EmailSummary, UrgencyAnalysis, UserEmailPreferences
from tradie_mail.rules.classification import categorize, requires_action
from tradie_mail.rules.core import MailContext
from tradie_mail.rules.corpus import DEFAULT_CORPUS, KeywordCorpus
from tradie_mail.rules.scoring import clamp, determine_priority, weighted_hits

logger = logging.getLogger(__name__)

EXCLAMATION_BONUS = 20
SHOUTING_BONUS = 30
HIGH_IMPACT_SCORE = 80
MEDIUM_IMPACT_SCORE = 50


def extract_keywords(ctx: MailContext) -> List[str]:
    content = ctx.content
    return [entry.term for entry in ctx.corpus.impact_terms if entry.term in content]


def assess_business_impact(ctx: MailContext, urgency_score: int, keywords: List[str]) -> str:
    if any(k in ctx.corpus.high_impact_terms for k in keywords) or urgency_score > HIGH_IMPACT_SCORE:
        return "high"
    if any(k in ctx.corpus.medium_impact_terms for k in keywords) or urgency_score > MEDIUM_IMPACT_SCORE:
        return "medium"
    return "low"


def impact_score(ctx: MailContext) -> int:
    """
    Additive score over the weighted impact terms plus time indicators and
    emphasis (exclamation marks, words in capitals), clamped to 0-100.
    """
    raw = f"{ctx.email.subject} {ctx.email.snippet}"
    content = raw.lower()

    score = weighted_hits(content, ctx.corpus.impact_terms)
    score += weighted_hits(content, ctx.corpus.time_indicators)

    if raw.count("!") > 2:
        score += EXCLAMATION_BONUS
    # Capitals are counted on the original text, before lowercasing.
    if len(re.findall(r"\b[A-Z]{3,}\b", raw)) > 2:
        score += SHOUTING_BONUS

    return clamp(score)


def calculate_confidence(keyword_count: int, text_length: int) -> int:
    confidence = 50
    confidence += min(keyword_count * 10, 30)
    if text_length > 100:
        confidence += 10
    if text_length > 500:
        confidence += 10
    return clamp(confidence)


def detect_urgency(
    email: EmailSummary,
    preferences: Optional[UserEmailPreferences] = None,
    *,
    corpus: KeywordCorpus = DEFAULT_CORPUS,
) -> UrgencyAnalysis:
    """
    Extended urgency detection: matched keywords, business impact,
    customer type and an estimated job value on top of the category.
    """
    ctx = MailContext(email=email, preferences=preferences or UserEmailPreferences(), corpus=corpus)

    urgency_score = impact_score(ctx)
    keywords = extract_keywords(ctx)
    business_impact = assess_business_impact(ctx, urgency_score, keywords)
    category = categorize(ctx).category
    action_required = category != "spam" and requires_action(ctx)

    suggested_actions = suggest_actions(
        ActionSignals(
            category=category,
            action_required=action_required,
            business_impact=business_impact,
            families=keyword_families(ctx),
        )
    )
    reasoning = build_reasoning(
        urgency_reasons(urgency_score=urgency_score, keywords=keywords, business_impact=business_impact),
        default="Standard email with no urgent indicators",
    )

    analysis = UrgencyAnalysis(
        id=email.id,
        urgency_score=urgency_score,
        priority=determine_priority(urgency_score),
        category=category,
        keywords=keywords,
        business_impact=business_impact,
        customer_type=detect_customer_type(ctx),
        job_value=extract_job_value(ctx.content),
        confidence=calculate_confidence(len(keywords), len(ctx.content)),
        suggested_actions=suggested_actions,
        reasoning=reasoning,
    )
    logger.debug("Urgency detection for %s: %s (%d)", email.id, category, urgency_score)
    return analysis
