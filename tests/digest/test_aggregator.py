from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

from tradie_mail.assistant.errors import AssistantTimeout
from tradie_mail.digest.aggregator import digest_for_window, generate_morning_digest
from tradie_mail.digest.insights import build_narrative
from tradie_mail.models import AnalyzedEmail, DateRange, EmailAnalysis, EmailSummary
from tradie_mail.rules.scoring import determine_priority

NOW = datetime(2026, 3, 10, 7, 0, tzinfo=timezone.utc)
WINDOW = DateRange(start=NOW - timedelta(hours=24), end=NOW)


def _analyzed(
    idx: int,
    score: int = 10,
    *,
    category: str = "standard",
    action: bool = False,
    relevance: int = 50,
    sentiment: str = "neutral",
) -> AnalyzedEmail:
    email = EmailSummary(id=f"m{idx}", subject=f"Email {idx}", from_email="", snippet="")
    analysis = EmailAnalysis(
        id=email.id,
        priority=determine_priority(score),
        category=category,
        urgency_score=score,
        action_required=action,
        suggested_actions=[],
        reasoning="",
        business_relevance=relevance,
        sentiment=sentiment,
    )
    return AnalyzedEmail(email=email, analysis=analysis)


class DigestAssistant:
    def __init__(self, text: str = "", error: Optional[Exception] = None) -> None:
        self.text = text
        self.error = error
        self.seen: List[Sequence[Dict[str, str]]] = []

    def is_available(self) -> bool:
        return True

    def analyze_email(self, text: str) -> Dict[str, Any]:
        raise AssistantTimeout("not used here")

    def generate_digest(self, emails: List[Dict[str, str]], user_context: Optional[Dict[str, Any]] = None) -> str:
        self.seen.append(emails)
        if self.error is not None:
            raise self.error
        return self.text


def test_ten_email_batch() -> None:
    batch = [_analyzed(i) for i in range(10)]
    batch[3] = _analyzed(3, 80, category="urgent")
    batch[7] = _analyzed(7, 90, category="urgent", action=True)
    batch[1] = _analyzed(1, 10, action=True)
    batch[5] = _analyzed(5, 30, category="follow-up", action=True)

    digest = generate_morning_digest(batch, WINDOW, now=NOW)

    assert digest.summary.total_emails == 10
    assert digest.summary.urgent_count == 2
    assert digest.summary.action_required_count == 3
    assert [e.email.id for e in digest.urgent_emails] == ["m7", "m3"]
    assert [e.email.id for e in digest.action_required_emails] == ["m7", "m5", "m1"]
    assert digest.summary.category_counts.total() == 10
    assert digest.summary.category_counts.follow_up == 1
    assert digest.recommendations == ["🔥 Address 2 urgent emails first"]
    assert digest.business_insights == ["📊 Email patterns look normal for your business."]


def test_lists_are_capped_and_stably_sorted() -> None:
    scores = [70, 95, 80, 95, 71, 90, 75]
    batch = [_analyzed(i, s, category="urgent", action=True) for i, s in enumerate(scores)]
    batch += [_analyzed(10 + i, 55, action=True) for i in range(9)]

    digest = generate_morning_digest(batch, WINDOW, now=NOW)

    assert digest.summary.urgent_count == 7
    assert [e.email.id for e in digest.urgent_emails] == ["m1", "m3", "m5", "m2", "m6"]
    assert len(digest.high_priority_emails) == 8
    assert [e.email.id for e in digest.high_priority_emails] == [f"m{10 + i}" for i in range(8)]
    assert len(digest.action_required_emails) == 10
    assert digest.summary.category_counts.total() == digest.summary.total_emails


def test_empty_batch_gets_its_own_message() -> None:
    assistant = DigestAssistant("- Insight: should never be asked")
    digest = generate_morning_digest([], WINDOW, assistant=assistant, now=NOW)

    assert digest.summary.total_emails == 0
    assert digest.urgent_emails == []
    assert digest.business_insights == ["📭 No new emails in this period."]
    assert digest.recommendations == ["✅ Great job staying on top of your inbox!"]
    assert assistant.seen == []


def test_busy_day_rules() -> None:
    batch = [_analyzed(i, action=True, relevance=80, sentiment="positive") for i in range(31)]

    digest = generate_morning_digest(batch, WINDOW, now=NOW)

    assert digest.business_insights == [
        "📈 High email volume (31 emails). Consider email management strategies.",
        "💼 High business engagement (100% business-related emails).",
        "😊 Positive customer sentiment detected in 31 emails.",
    ]
    assert digest.recommendations == [
        "📋 Block 2-3 hours today for email responses (31 emails need action)",
        "⏰ Consider batching email responses at set times (9 AM, 2 PM, 5 PM)",
    ]


def test_single_urgent_email_is_singular() -> None:
    digest = generate_morning_digest([_analyzed(0, 85, category="urgent")], WINDOW, now=NOW)
    assert digest.recommendations == ["🔥 Address 1 urgent email first"]


def test_assistant_lines_are_picked_by_marker() -> None:
    text = "\n".join(
        [
            "- Insight: most emails are quote requests",
            "",
            "2. Trend: more hot water jobs this week",
            "* You should call back the plumber first",
            "- Recommend batching replies after lunch",
            "Have a good day",
        ]
    )
    assistant = DigestAssistant(text)
    batch = [_analyzed(i) for i in range(20)]

    digest = generate_morning_digest(batch, WINDOW, assistant=assistant, now=NOW)

    assert digest.business_insights == [
        "🤖 Insight: most emails are quote requests",
        "🤖 Trend: more hot water jobs this week",
    ]
    assert digest.recommendations == [
        "🤖 You should call back the plumber first",
        "🤖 Recommend batching replies after lunch",
    ]
    # Only the first 15 emails are sent to the assistant.
    assert len(assistant.seen[0]) == 15


def test_each_list_falls_back_on_its_own() -> None:
    assistant = DigestAssistant("Pattern: lots of invoices\nAnother pattern: fewer complaints")
    batch = [_analyzed(0, 85, category="urgent")]

    digest = generate_morning_digest(batch, WINDOW, assistant=assistant, now=NOW)

    assert digest.business_insights == ["🤖 Pattern: lots of invoices", "🤖 Another pattern: fewer complaints"]
    assert digest.recommendations == ["🔥 Address 1 urgent email first"]


def test_failing_assistant_gives_rule_based_narrative() -> None:
    batch = [_analyzed(i) for i in range(10)]
    summary = generate_morning_digest(batch, WINDOW, now=NOW).summary

    failing = build_narrative(summary, batch, assistant=DigestAssistant(error=AssistantTimeout("slow")))
    unmarked = build_narrative(summary, batch, assistant=DigestAssistant("Nothing notable today."))
    rules = build_narrative(summary, batch)

    assert failing == rules
    assert unmarked == rules


def test_digest_for_window_selects_then_analyses() -> None:
    emails = [
        EmailSummary(id="in", subject="URGENT: no power", from_email="", snippet="", date=NOW - timedelta(hours=1)),
        EmailSummary(id="old", subject="URGENT: no power", from_email="", snippet="", date=NOW - timedelta(days=2)),
        EmailSummary(id="undated", subject="Receipt", from_email="", snippet=""),
        EmailSummary(id="edge", subject="Receipt", from_email="", snippet="", date=WINDOW.start),
    ]

    digest = digest_for_window(emails, WINDOW, now=NOW)

    assert digest.summary.total_emails == 2
    assert [e.email.id for e in digest.urgent_emails] == ["in"]
    assert digest.summary.category_counts.admin == 1
    assert digest.generated_at == NOW


def test_digest_serializes_to_json() -> None:
    digest = generate_morning_digest([_analyzed(0, 85, category="urgent")], WINDOW, now=NOW)
    payload = json.loads(json.dumps(digest.to_dict(), ensure_ascii=False))

    assert payload["dateRange"] == {"from": "2026-03-09T07:00:00+00:00", "to": "2026-03-10T07:00:00+00:00"}
    assert payload["summary"]["categoryCounts"]["followUp"] == 0
    assert payload["urgentEmails"][0]["analysis"]["urgencyScore"] == 85
