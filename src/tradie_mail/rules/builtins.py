from __future__ import annotations

from typing import List, Tuple

from tradie_mail.rules.BaseRule import BaseRule
from tradie_mail.rules.core import MailContext


class SpamRule(BaseRule):
    name = "spam"
    category = "spam"
    priority = 100

    def match(self, ctx: MailContext) -> Tuple[bool, str]:
        terms = ctx.corpus.spam_terms + ctx.preferences.spam_keywords
        hit = self.first_hit(ctx.content, terms)
        if hit:
            return True, f"spam term '{hit}'"

        if ctx.preferences.analysis_settings.strict_spam_filtering:
            hit = self.first_hit(ctx.email.from_email, terms)
            if hit:
                return True, f"spam term '{hit}' in sender"

        return False, ""


class UrgentKeywordRule(BaseRule):
    name = "urgent_keyword"
    category = "urgent"
    priority = 80

    def match(self, ctx: MailContext) -> Tuple[bool, str]:
        hit = self.first_hit(ctx.content, ctx.corpus.urgent_terms())
        return bool(hit), f"urgent term '{hit}'" if hit else ""


class FollowUpRule(BaseRule):
    name = "follow_up"
    category = "follow-up"
    priority = 60

    # Reply prefixes across the mail clients we see (Re, AW, SV).
    REPLY_MARKER = r"^\s*(re|aw|sv)\s*:"

    def match(self, ctx: MailContext) -> Tuple[bool, str]:
        hit = self.first_hit(ctx.content, ctx.corpus.follow_up_terms)
        if hit:
            return True, f"follow-up phrase '{hit}'"
        if self.regex(ctx.email.subject, self.REPLY_MARKER):
            return True, "reply subject"
        return False, ""


class AdminRule(BaseRule):
    name = "admin"
    category = "admin"
    priority = 40

    def match(self, ctx: MailContext) -> Tuple[bool, str]:
        hit = self.first_hit(ctx.content, ctx.corpus.admin_terms)
        return bool(hit), f"admin term '{hit}'" if hit else ""


class StandardRule(BaseRule):
    name = "standard"
    category = "standard"
    priority = 0

    def match(self, ctx: MailContext) -> Tuple[bool, str]:
        return True, "no other rule matched"


def default_rules() -> List[BaseRule]:
    # Higher priority rules win when multiple could match.
    rules: List[BaseRule] = [
        AdminRule(),
        FollowUpRule(),
        SpamRule(),
        StandardRule(),
        UrgentKeywordRule(),
    ]
    return sorted(rules, key=lambda r: r.priority, reverse=True)
