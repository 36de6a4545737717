from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from tradie_mail.assistant.errors import MalformedAssistantResponse
from tradie_mail.extractors.suggestions import DEFAULT_SUGGESTION, MAX_SUGGESTIONS
from tradie_mail.models import CATEGORIES, SENTIMENTS, EmailAnalysis
from tradie_mail.rules.classification import NEUTRAL_RELEVANCE, is_spam
from tradie_mail.rules.core import MailContext, matched_terms
from tradie_mail.rules.scoring import clamp, determine_priority

REQUIRED_FIELDS = (
    "urgencyScore",
    "category",
    "actionRequired",
    "suggestedActions",
    "reasoning",
    "businessRelevance",
    "sentiment",
)

# Sender/subject overrides never lower an urgent/high/medium score below
# these floors, and a "low" override caps the score.
OVERRIDE_FLOORS = {"urgent": 80, "high": 60, "medium": 40}
LOW_OVERRIDE_CEILING = 30
CUSTOM_KEYWORD_FLOOR = 75


@dataclass(frozen=True)
class RemoteAnalysis:
    urgency_score: int
    category: str
    action_required: bool
    suggested_actions: List[str]
    reasoning: str
    business_relevance: int
    sentiment: str


def _number(payload: Dict[str, Any], key: str) -> int:
    value = payload[key]
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedAssistantResponse(f"{key} must be a number, got {value!r}")
    return clamp(value)


def parse_remote_analysis(payload: Any) -> RemoteAnalysis:
    """Validate the assistant's raw answer. Anything missing or mistyped is a failure."""
    if not isinstance(payload, dict):
        raise MalformedAssistantResponse(f"expected an object, got {type(payload).__name__}")

    missing = [k for k in REQUIRED_FIELDS if k not in payload or payload[k] is None]
    if missing:
        raise MalformedAssistantResponse(f"missing fields: {', '.join(missing)}")

    category = str(payload["category"]).strip().lower().replace("_", "-")
    if category not in CATEGORIES:
        raise MalformedAssistantResponse(f"unknown category {payload['category']!r}")

    sentiment = str(payload["sentiment"]).strip().lower()
    if sentiment not in SENTIMENTS:
        raise MalformedAssistantResponse(f"unknown sentiment {payload['sentiment']!r}")

    action_required = payload["actionRequired"]
    if not isinstance(action_required, bool):
        raise MalformedAssistantResponse("actionRequired must be a boolean")

    actions = payload["suggestedActions"]
    if not isinstance(actions, list) or not all(isinstance(a, str) for a in actions):
        raise MalformedAssistantResponse("suggestedActions must be a list of strings")

    reasoning = payload["reasoning"]
    if not isinstance(reasoning, str):
        raise MalformedAssistantResponse("reasoning must be a string")

    return RemoteAnalysis(
        urgency_score=_number(payload, "urgencyScore"),
        category=category,
        action_required=action_required,
        suggested_actions=[a.strip() for a in actions if a.strip()],
        reasoning=reasoning.strip(),
        business_relevance=_number(payload, "businessRelevance"),
        sentiment=sentiment,
    )


def adjust_score(remote_score: int, ctx: MailContext) -> int:
    """Apply the user's sender, subject and keyword preferences to a remote score."""
    score = remote_score

    for rule in (ctx.sender_rule(), ctx.subject_rule()):
        if rule is None:
            continue
        if rule.priority == "low":
            score = min(score, LOW_OVERRIDE_CEILING)
        else:
            score = max(score, OVERRIDE_FLOORS[rule.priority])

    if matched_terms(ctx.content, ctx.preferences.urgent_keywords):
        score = max(score, CUSTOM_KEYWORD_FLOOR)

    return clamp(score)


def reconcile(remote: RemoteAnalysis, ctx: MailContext) -> EmailAnalysis:
    """
    Merge a validated remote analysis with local preferences.

    Preferences only move the score; category and sentiment stay the
    assistant's, except that a local spam hit always wins.
    """
    settings = ctx.preferences.analysis_settings
    score = adjust_score(remote.urgency_score, ctx)
    spam = is_spam(ctx)
    category = "spam" if spam else remote.category

    actions: List[str] = []
    if settings.enable_action_suggestions:
        for action in ["Mark as spam"] if spam else remote.suggested_actions:
            if action not in actions:
                actions.append(action)
        actions = actions[:MAX_SUGGESTIONS] or [DEFAULT_SUGGESTION]

    return EmailAnalysis(
        id=ctx.email.id,
        priority=determine_priority(score),
        category=category,
        urgency_score=score,
        action_required=remote.action_required and not spam,
        suggested_actions=actions,
        reasoning=remote.reasoning or "Analysed by assistant.",
        business_relevance=(
            remote.business_relevance if settings.enable_business_relevance_scoring else NEUTRAL_RELEVANCE
        ),
        sentiment=remote.sentiment if settings.enable_sentiment_analysis else "neutral",
        source="assistant",
    )
