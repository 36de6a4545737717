from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from tradie_mail.rules.BaseRule import BaseRule, RuleMatch
from tradie_mail.rules.builtins import SpamRule, default_rules
from tradie_mail.rules.core import MailContext, contains_any, matched_terms
from tradie_mail.rules.scoring import SCORE_MAX, clamp

NEUTRAL_RELEVANCE = 50


@dataclass(frozen=True)
class RuleResult:
    category: str
    rule_name: str
    reason: str


def categorize(ctx: MailContext, rules: Optional[Iterable[BaseRule]] = None) -> RuleResult:
    """
    Assign the category of the first matching rule.

    Order is spam, urgent keyword, follow-up, admin, standard. Once a
    rule matches no later rule is evaluated.
    """
    ordered = sorted(rules, key=lambda r: r.priority, reverse=True) if rules is not None else default_rules()

    fallback: Optional[RuleMatch] = None
    for rule in ordered:
        info = rule.match_info(ctx)
        if info.matched:
            if rule.stop_processing:
                return RuleResult(category=info.category, rule_name=rule.name, reason=info.reason)
            fallback = fallback or info

    if fallback is not None:
        return RuleResult(category=fallback.category, rule_name="", reason=fallback.reason)
    return RuleResult(category="standard", rule_name="", reason="no rule matched")


def is_spam(ctx: MailContext) -> bool:
    matched, _reason = SpamRule().match(ctx)
    return matched


def requires_action(ctx: MailContext) -> bool:
    """
    Keyword presence test against the action verb list.

    Not negation-aware: "no action required" still counts as requiring
    action.
    """
    return contains_any(ctx.content, ctx.corpus.action_terms)


def business_relevance(ctx: MailContext) -> int:
    if not ctx.preferences.analysis_settings.enable_business_relevance_scoring:
        return NEUTRAL_RELEVANCE

    content = ctx.content
    corpus = ctx.corpus
    score = NEUTRAL_RELEVANCE
    score += corpus.business_term_weight * len(matched_terms(content, corpus.business_terms))
    score += corpus.custom_business_weight * len(matched_terms(content, ctx.preferences.business_keywords))
    return clamp(score, high=SCORE_MAX)


def analyze_sentiment(ctx: MailContext) -> str:
    if not ctx.preferences.analysis_settings.enable_sentiment_analysis:
        return "neutral"

    content = ctx.content
    positive = len(matched_terms(content, ctx.corpus.positive_terms))
    negative = len(matched_terms(content, ctx.corpus.negative_terms))
    if positive > negative:
        return "positive"
    if negative > positive:
        return "negative"
    return "neutral"
