from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, List, Optional

from tradie_mail.rules.core import MailContext, contains_any

MAX_SUGGESTIONS = 3
DEFAULT_SUGGESTION = "Review email and respond within 24 hours"


@dataclass(frozen=True)
class ActionSignals:
    category: str
    action_required: bool
    business_impact: Optional[str] = None
    # Keyword families present in the text: emergency, quote, invoice, schedule
    families: FrozenSet[str] = frozenset()


def keyword_families(ctx: MailContext) -> FrozenSet[str]:
    content = ctx.content
    corpus = ctx.corpus
    found = set()
    if contains_any(content, corpus.emergency_terms):
        found.add("emergency")
    if contains_any(content, corpus.quote_terms):
        found.add("quote")
    if contains_any(content, corpus.invoice_terms):
        found.add("invoice")
    if contains_any(content, corpus.schedule_terms):
        found.add("schedule")
    return frozenset(found)


def suggest_actions(signals: ActionSignals, max_items: int = MAX_SUGGESTIONS) -> List[str]:
    """
    Deterministic suggestions, ordered by importance.

    Spam only ever gets "Mark as spam". Duplicates are dropped and the list
    is capped; an empty result is replaced by the generic review step.
    """
    if signals.category == "spam":
        return ["Mark as spam"]

    actions: List[str] = []

    if signals.category == "urgent":
        actions.append("Review immediately")
        actions.append("Contact customer if needed")

    if "emergency" in signals.families:
        actions.append("Offer emergency service rate")

    if signals.action_required:
        actions.append("Respond to email")

    if signals.business_impact == "high":
        actions.append("Prioritize in schedule")

    if "quote" in signals.families:
        actions.append("Prepare quote/estimate")
        actions.append("Schedule site visit if needed")

    if "invoice" in signals.families:
        actions.append("Process payment")
        actions.append("Update accounting records")

    if "schedule" in signals.families:
        actions.append("Check calendar availability")
        actions.append("Confirm appointment")

    if signals.category == "follow-up":
        actions.append("Provide status update")

    if signals.category == "admin":
        actions.append("File for reference")

    unique: List[str] = []
    for action in actions:
        if action not in unique:
            unique.append(action)

    return unique[:max_items] or [DEFAULT_SUGGESTION]
