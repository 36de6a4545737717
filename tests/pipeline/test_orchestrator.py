from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from tradie_mail.assistant.errors import AssistantTimeout
from tradie_mail.models import AnalysisSettings, EmailAnalysis, EmailSummary, UserEmailPreferences
from tradie_mail.pipeline import orchestrator
from tradie_mail.pipeline.orchestrator import analyze_email, analyze_emails, rule_based_analysis

NOW = datetime(2026, 3, 10, 8, 0, tzinfo=timezone.utc)


class TimingOutAssistant:
    def __init__(self) -> None:
        self.calls = 0

    def is_available(self) -> bool:
        return True

    def analyze_email(self, text: str) -> Dict[str, Any]:
        self.calls += 1
        raise AssistantTimeout("no answer in time")

    def generate_digest(self, emails: List[Dict[str, str]], user_context: Optional[Dict[str, Any]] = None) -> str:
        raise AssistantTimeout("no answer in time")


def _outage() -> EmailSummary:
    return EmailSummary(
        id="e1",
        subject="URGENT: power outage at site",
        from_email="site.manager@example.com",
        snippet="no power since this morning",
        date=NOW - timedelta(minutes=10),
        is_read=False,
    )


def _newsletter() -> EmailSummary:
    return EmailSummary(
        id="e2",
        subject="Weekly Newsletter",
        from_email="news@supplier.com.au",
        snippet="here are this week's updates",
        date=NOW - timedelta(days=3),
        is_read=True,
    )


def test_power_outage_is_urgent() -> None:
    analysis = analyze_email(_outage(), now=NOW)

    assert analysis.id == "e1"
    assert analysis.urgency_score == 75
    assert analysis.priority == "urgent"
    assert analysis.category == "urgent"
    assert analysis.action_required is False
    assert "urgent keywords" in analysis.reasoning
    assert analysis.suggested_actions == [
        "Review immediately",
        "Contact customer if needed",
        "Offer emergency service rate",
    ]
    assert analysis.sentiment == "neutral"
    assert analysis.source == "rules"


def test_newsletter_is_low_priority_admin() -> None:
    analysis = analyze_email(_newsletter(), now=NOW)

    assert analysis.urgency_score == 0
    assert analysis.priority == "low"
    assert analysis.category == "admin"
    assert analysis.suggested_actions == ["File for reference"]


def test_rule_based_analysis_is_idempotent() -> None:
    first = rule_based_analysis(_outage(), now=NOW)
    second = rule_based_analysis(_outage(), now=NOW)

    assert first == second
    assert first.to_dict() == second.to_dict()


def test_wire_shape_has_every_field() -> None:
    payload = analyze_email(_outage(), now=NOW).to_dict()
    assert set(payload) == {
        "id",
        "priority",
        "category",
        "urgencyScore",
        "actionRequired",
        "suggestedActions",
        "reasoning",
        "businessRelevance",
        "sentiment",
    }


def test_spam_never_requires_action() -> None:
    email = EmailSummary(id="s1", subject="Limited time offer", from_email="", snippet="please reply to claim")
    analysis = analyze_email(email, now=NOW)

    assert analysis.category == "spam"
    assert analysis.action_required is False
    assert analysis.suggested_actions == ["Mark as spam"]


def test_analysis_toggles() -> None:
    prefs = UserEmailPreferences(
        analysis_settings=AnalysisSettings(
            enable_sentiment_analysis=False,
            enable_business_relevance_scoring=False,
            enable_action_suggestions=False,
        )
    )
    email = EmailSummary(id="t1", subject="Great quote, thanks", from_email="", snippet="please book the installation")
    analysis = analyze_email(email, prefs, now=NOW)

    assert analysis.sentiment == "neutral"
    assert analysis.business_relevance == 50
    assert analysis.suggested_actions == []
    assert analysis.action_required is True


def test_timeouts_fall_back_to_rule_output() -> None:
    emails = [_outage(), _newsletter()]
    assistant = TimingOutAssistant()

    analyzed = analyze_emails(emails, assistant=assistant, now=NOW)

    assert assistant.calls == 2
    assert [a.analysis for a in analyzed] == [rule_based_analysis(e, now=NOW) for e in emails]
    assert all(a.analysis.source == "rules" for a in analyzed)


def test_batch_keeps_input_order() -> None:
    emails = [
        EmailSummary(id=f"m{i}", subject=subject, from_email="", snippet="")
        for i, subject in enumerate(["hello", "URGENT leak", "Re: quote", "receipt"])
    ]

    analyzed = analyze_emails(emails, assistant=TimingOutAssistant(), now=NOW, max_workers=3)

    assert [a.email.id for a in analyzed] == ["m0", "m1", "m2", "m3"]
    assert [a.analysis.id for a in analyzed] == ["m0", "m1", "m2", "m3"]
    assert [a.analysis.category for a in analyzed] == ["standard", "urgent", "follow-up", "admin"]


def test_broken_rule_engine_yields_safe_default(monkeypatch) -> None:
    def boom(*args: Any, **kwargs: Any) -> EmailAnalysis:
        raise RuntimeError("corpus exploded")

    monkeypatch.setattr(orchestrator, "rule_based_analysis", boom)
    analysis = analyze_email(_outage(), now=NOW)

    assert analysis.id == "e1"
    assert analysis.priority == "low"
    assert analysis.category == "standard"
    assert "manual review" in analysis.reasoning
