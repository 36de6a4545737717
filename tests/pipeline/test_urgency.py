from __future__ import annotations

from tradie_mail.models import EmailSummary
from tradie_mail.pipeline.urgency import calculate_confidence, detect_urgency
from tradie_mail.rules.corpus import corpus_for, general_corpus


def _email(subject: str, snippet: str = "", sender: str = "jane@gmail.com") -> EmailSummary:
    return EmailSummary(id="u1", subject=subject, from_email=sender, snippet=snippet)


def test_gas_leak_emergency() -> None:
    result = detect_urgency(
        _email(
            "URGENT: Gas leak emergency at job site",
            "Emergency situation requires immediate attention. Gas leak detected.",
            sender="site.manager@construction.com",
        )
    )

    assert result.urgency_score == 100
    assert result.priority == "urgent"
    assert result.category == "urgent"
    assert result.keywords[:2] == ["emergency", "urgent"]
    assert result.business_impact == "high"
    assert result.customer_type == "unknown"
    assert result.job_value is None
    assert result.suggested_actions == [
        "Review immediately",
        "Contact customer if needed",
        "Offer emergency service rate",
    ]
    assert "High urgency score (100%)" in result.reasoning
    assert "Urgent keywords detected: emergency, urgent" in result.reasoning
    assert 70 <= result.confidence <= 100


def test_capitals_are_counted_on_original_text() -> None:
    shouting = detect_urgency(_email("HELP NOW PLEASE FIX"))
    calm = detect_urgency(_email("help now please fix"))

    assert shouting.urgency_score == 60
    assert shouting.priority == "high"
    assert calm.urgency_score == 30
    assert calm.business_impact == "low"


def test_exclamation_marks_add_emphasis() -> None:
    assert detect_urgency(_email("Call me back!!!")).urgency_score == 20
    assert detect_urgency(_email("Call me back!!")).urgency_score == 0


def test_job_value_and_customer_type() -> None:
    result = detect_urgency(_email("Quote for new hot water system at my house", "budget around $2,400"))

    assert result.job_value == 2400.0
    assert result.customer_type == "residential"
    assert result.to_dict()["jobValue"] == 2400.0


def test_quiet_email_has_no_job_value() -> None:
    result = detect_urgency(_email("Lunch Friday?"))

    assert result.job_value is None
    assert result.keywords == []
    assert result.business_impact == "low"
    assert result.reasoning == "Standard email with no urgent indicators."


def test_spam_gets_only_mark_as_spam() -> None:
    result = detect_urgency(_email("Congratulations you won", "click here now"))

    assert result.category == "spam"
    assert result.suggested_actions == ["Mark as spam"]


def test_general_corpus_drops_trade_terms() -> None:
    email = _email("no power at the office")

    assert "no power" in detect_urgency(email).keywords
    assert "no power" not in detect_urgency(email, corpus=general_corpus()).keywords


def test_corpus_lookup_falls_back() -> None:
    assert corpus_for("trade", "en-AU").name == "trade/en-AU"
    assert corpus_for("general", "en-GB").name == "general/en"
    assert corpus_for("dentistry", "fr").name == "trade/en-AU"


def test_confidence_grows_with_evidence() -> None:
    assert calculate_confidence(0, 10) == 50
    assert calculate_confidence(2, 150) == 80
    assert calculate_confidence(5, 600) == 100
