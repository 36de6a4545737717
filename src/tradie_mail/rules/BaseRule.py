from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence, Tuple

from tradie_mail.models import Category
from tradie_mail.rules.core import MailContext


@dataclass(frozen=True)
class RuleMatch:
    """Result of a rule match."""
    matched: bool
    category: Category
    reason: str = ""


class BaseRule(ABC):
    """
    Base class for the category rules.

    Rules are evaluated in descending ``priority``; the first rule that
    matches decides the category and, with ``stop_processing`` set, no
    later rule is evaluated.
    """

    # Human-/debug-friendly unique name
    name: str = "base_rule"

    # Category assigned when the rule matches
    category: Category = "standard"

    # Higher runs earlier
    priority: int = 0

    stop_processing: bool = True

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, priority={self.priority})"

    # --- Helpers (None-safe, case-insensitive) ---

    def norm(self, s: str | None) -> str:
        """Normalize text for matching (None-safe, lowercased)."""
        return (s or "").lower()

    def first_hit(self, text: str | None, needles: Sequence[str]) -> str:
        t = self.norm(text)
        for n in needles:
            if n and n.lower() in t:
                return n
        return ""

    def regex(self, text: str | None, pattern: str) -> bool:
        """Regex search on text (case-insensitive)."""
        return bool(re.search(pattern, self.norm(text), flags=re.IGNORECASE))

    # --- Rule API ---

    @abstractmethod
    def match(self, ctx: MailContext) -> Tuple[bool, str]:
        """Return (matched, reason)."""
        raise NotImplementedError

    def match_info(self, ctx: MailContext) -> RuleMatch:
        """Default implementation: wrap match() in RuleMatch."""
        matched, reason = self.match(ctx)
        return RuleMatch(matched=matched, category=self.category, reason=reason)
