from __future__ import annotations

import re
from dataclasses import dataclass, field
from email.utils import parseaddr
from typing import Optional, Tuple

from tradie_mail.models import EmailSummary, PriorityRule, UserEmailPreferences
from tradie_mail.rules.corpus import DEFAULT_CORPUS, KeywordCorpus


def contains_any(text: str, needles: Tuple[str, ...]) -> bool:
    """True if any needle is a substring of text. Both sides are compared lowercased."""
    t = (text or "").lower()
    return any(n.lower() in t for n in needles if n)


def matched_terms(text: str, needles: Tuple[str, ...]) -> Tuple[str, ...]:
    t = (text or "").lower()
    return tuple(n for n in needles if n and n.lower() in t)


def sender_address(value: str) -> str:
    # Parse "Name <mail@domain>" safely and normalize for exact comparisons.
    return parseaddr(value or "")[1].strip().lower()


def subject_matches(pattern: str, subject: str) -> bool:
    try:
        return re.search(pattern, subject, flags=re.IGNORECASE) is not None
    except re.error:
        return pattern.lower() in subject.lower()


@dataclass(frozen=True)
class MailContext:
    """Everything a rule needs to look at one email."""

    email: EmailSummary
    preferences: UserEmailPreferences = field(default_factory=UserEmailPreferences)
    corpus: KeywordCorpus = DEFAULT_CORPUS

    @property
    def content(self) -> str:
        """Lowercased subject + snippet, the text every keyword test runs on."""
        return f"{self.email.subject} {self.email.snippet}".lower()

    @property
    def subject(self) -> str:
        return (self.email.subject or "").lower()

    @property
    def sender(self) -> str:
        return sender_address(self.email.from_email)

    def sender_rule(self) -> Optional[PriorityRule]:
        sender = self.sender
        if not sender:
            return None
        for rule in self.preferences.sender_rules:
            if sender_address(rule.match) == sender:
                return rule
        return None

    def subject_rule(self) -> Optional[PriorityRule]:
        for rule in self.preferences.subject_rules:
            if subject_matches(rule.match, self.email.subject or ""):
                return rule
        return None

