from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Tuple

Priority = Literal["urgent", "high", "medium", "low"]
Category = Literal["urgent", "standard", "follow-up", "admin", "spam"]
Sentiment = Literal["positive", "neutral", "negative"]
BusinessImpact = Literal["high", "medium", "low"]
CustomerType = Literal["business", "residential", "unknown"]

PRIORITIES: Tuple[str, ...] = ("urgent", "high", "medium", "low")
CATEGORIES: Tuple[str, ...] = ("urgent", "standard", "follow-up", "admin", "spam")
SENTIMENTS: Tuple[str, ...] = ("positive", "neutral", "negative")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (or datetime). Unparseable input yields None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        # fromisoformat() on older interpreters rejects the "Z" suffix.
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _str_list(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(v) for v in value if isinstance(v, str) and v.strip())


@dataclass(frozen=True)
class EmailSummary:
    id: str
    subject: str
    from_email: str
    snippet: str
    date: Optional[datetime] = None
    is_read: bool = True

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "EmailSummary":
        # Best-effort triage: missing or malformed fields degrade to defaults.
        is_read = payload.get("isRead", payload.get("is_read", True))
        return cls(
            id=str(payload.get("id") or ""),
            subject=str(payload.get("subject") or ""),
            from_email=str(payload.get("from") or payload.get("from_email") or ""),
            snippet=str(payload.get("snippet") or ""),
            date=parse_timestamp(payload.get("date")),
            is_read=is_read if isinstance(is_read, bool) else True,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "subject": self.subject,
            "from": self.from_email,
            "snippet": self.snippet,
            "date": _iso(self.date),
            "isRead": self.is_read,
        }


@dataclass(frozen=True)
class PriorityRule:
    # Sender address or subject pattern, depending on which list holds the rule.
    match: str
    priority: Priority


@dataclass(frozen=True)
class DigestSettings:
    enabled: bool = True
    frequency: Literal["daily", "weekly", "on-demand"] = "daily"
    time_of_day: str = "09:00"
    include_weekends: bool = False


@dataclass(frozen=True)
class AnalysisSettings:
    enable_sentiment_analysis: bool = True
    enable_business_relevance_scoring: bool = True
    enable_action_suggestions: bool = True
    strict_spam_filtering: bool = False


@dataclass(frozen=True)
class UserEmailPreferences:
    user_id: str = ""
    urgent_keywords: Tuple[str, ...] = ()
    business_keywords: Tuple[str, ...] = ()
    spam_keywords: Tuple[str, ...] = ()
    sender_rules: Tuple[PriorityRule, ...] = ()
    subject_rules: Tuple[PriorityRule, ...] = ()
    digest_settings: DigestSettings = field(default_factory=DigestSettings)
    analysis_settings: AnalysisSettings = field(default_factory=AnalysisSettings)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "UserEmailPreferences":
        """Build preferences from the camelCase wire shape, ignoring unknown keys."""
        rules = _section(payload, "priorityRules")
        digest = _section(payload, "digestSettings")
        analysis = _section(payload, "analysisSettings")
        defaults_digest = DigestSettings()
        defaults_analysis = AnalysisSettings()

        frequency = digest.get("frequency", defaults_digest.frequency)
        if frequency not in ("daily", "weekly", "on-demand"):
            frequency = defaults_digest.frequency

        return cls(
            user_id=str(payload.get("userId") or ""),
            urgent_keywords=_str_list(payload.get("urgentKeywords")),
            business_keywords=_str_list(payload.get("businessKeywords")),
            spam_keywords=_str_list(payload.get("spamKeywords")),
            sender_rules=_priority_rules(rules.get("fromAddresses"), key="email"),
            subject_rules=_priority_rules(rules.get("subjectPatterns"), key="pattern"),
            digest_settings=DigestSettings(
                enabled=bool(digest.get("enabled", defaults_digest.enabled)),
                frequency=frequency,
                time_of_day=str(digest.get("timeOfDay") or defaults_digest.time_of_day),
                include_weekends=bool(digest.get("includeWeekends", defaults_digest.include_weekends)),
            ),
            analysis_settings=AnalysisSettings(
                enable_sentiment_analysis=bool(
                    analysis.get("enableSentimentAnalysis", defaults_analysis.enable_sentiment_analysis)
                ),
                enable_business_relevance_scoring=bool(
                    analysis.get(
                        "enableBusinessRelevanceScoring",
                        defaults_analysis.enable_business_relevance_scoring,
                    )
                ),
                enable_action_suggestions=bool(
                    analysis.get("enableActionSuggestions", defaults_analysis.enable_action_suggestions)
                ),
                strict_spam_filtering=bool(
                    analysis.get("strictSpamFiltering", defaults_analysis.strict_spam_filtering)
                ),
            ),
        )


def _section(payload: Dict[str, Any], key: str) -> Dict[str, Any]:
    # A malformed section falls back to its defaults.
    value = payload.get(key)
    return value if isinstance(value, dict) else {}


def _priority_rules(items: Any, *, key: str) -> Tuple[PriorityRule, ...]:
    if not isinstance(items, list):
        return ()
    rules: List[PriorityRule] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        match = item.get(key)
        priority = item.get("priority")
        if isinstance(match, str) and match.strip() and priority in PRIORITIES:
            rules.append(PriorityRule(match=match.strip(), priority=priority))
    return tuple(rules)


@dataclass(frozen=True)
class EmailAnalysis:
    id: str
    priority: Priority
    category: Category
    urgency_score: int
    action_required: bool
    suggested_actions: List[str]
    reasoning: str
    business_relevance: int
    sentiment: Sentiment
    # Which path produced the result; not part of the wire contract.
    source: Literal["rules", "assistant"] = field(default="rules", compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "priority": self.priority,
            "category": self.category,
            "urgencyScore": self.urgency_score,
            "actionRequired": self.action_required,
            "suggestedActions": list(self.suggested_actions),
            "reasoning": self.reasoning,
            "businessRelevance": self.business_relevance,
            "sentiment": self.sentiment,
        }


@dataclass(frozen=True)
class AnalyzedEmail:
    email: EmailSummary
    analysis: EmailAnalysis

    def to_dict(self) -> Dict[str, Any]:
        payload = self.email.to_dict()
        payload["analysis"] = self.analysis.to_dict()
        return payload


@dataclass(frozen=True)
class UrgencyAnalysis:
    """Extended urgency detection result.

    ``job_value`` and ``customer_type`` are best-effort heuristics:
    ``None`` and ``"unknown"`` mean nothing was found.
    """

    id: str
    urgency_score: int
    priority: Priority
    category: Category
    keywords: List[str]
    business_impact: BusinessImpact
    customer_type: CustomerType
    job_value: Optional[float]
    confidence: int
    suggested_actions: List[str]
    reasoning: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "urgencyScore": self.urgency_score,
            "priority": self.priority,
            "category": self.category,
            "keywords": list(self.keywords),
            "businessImpact": self.business_impact,
            "customerType": self.customer_type,
            "jobValue": self.job_value,
            "confidence": self.confidence,
            "suggestedActions": list(self.suggested_actions),
            "reasoning": self.reasoning,
        }


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        # Naive bounds are UTC, like naive email dates.
        for name in ("start", "end"):
            value = getattr(self, name)
            if value.tzinfo is None:
                object.__setattr__(self, name, value.replace(tzinfo=timezone.utc))

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "DateRange":
        start = parse_timestamp(payload.get("from"))
        end = parse_timestamp(payload.get("to"))
        if start is None or end is None:
            raise ValueError("date range needs ISO-8601 'from' and 'to'")
        return cls(start=start, end=end)

    def contains(self, moment: Optional[datetime]) -> bool:
        if moment is None:
            return False
        return self.start <= moment <= self.end

    def to_dict(self) -> Dict[str, Any]:
        return {"from": _iso(self.start), "to": _iso(self.end)}


@dataclass(frozen=True)
class CategoryCounts:
    urgent: int = 0
    standard: int = 0
    follow_up: int = 0
    admin: int = 0
    spam: int = 0

    def total(self) -> int:
        return self.urgent + self.standard + self.follow_up + self.admin + self.spam

    def to_dict(self) -> Dict[str, int]:
        return {
            "urgent": self.urgent,
            "standard": self.standard,
            "followUp": self.follow_up,
            "admin": self.admin,
            "spam": self.spam,
        }


@dataclass(frozen=True)
class DigestSummary:
    total_emails: int
    urgent_count: int
    high_priority_count: int
    action_required_count: int
    category_counts: CategoryCounts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalEmails": self.total_emails,
            "urgentCount": self.urgent_count,
            "highPriorityCount": self.high_priority_count,
            "actionRequiredCount": self.action_required_count,
            "categoryCounts": self.category_counts.to_dict(),
        }


@dataclass(frozen=True)
class MorningDigest:
    generated_at: datetime
    date_range: DateRange
    summary: DigestSummary
    urgent_emails: List[AnalyzedEmail]
    high_priority_emails: List[AnalyzedEmail]
    action_required_emails: List[AnalyzedEmail]
    business_insights: List[str]
    recommendations: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generatedAt": _iso(self.generated_at),
            "dateRange": self.date_range.to_dict(),
            "summary": self.summary.to_dict(),
            "urgentEmails": [e.to_dict() for e in self.urgent_emails],
            "highPriorityEmails": [e.to_dict() for e in self.high_priority_emails],
            "actionRequiredEmails": [e.to_dict() for e in self.action_required_emails],
            "businessInsights": list(self.business_insights),
            "recommendations": list(self.recommendations),
        }
