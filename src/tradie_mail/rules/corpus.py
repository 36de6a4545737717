from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Dict, NamedTuple, Tuple


class WeightedTerm(NamedTuple):
    term: str
    weight: int


def _weighted(weight: int, terms: Tuple[str, ...]) -> Tuple[WeightedTerm, ...]:
    return tuple(WeightedTerm(t, weight) for t in terms)


@dataclass(frozen=True)
class KeywordCorpus:
    """
    Static term tables used by the scorer and classifier.

    All terms are lowercase and matched as plain substrings of the
    lowercased subject + snippet. Instances are immutable; build variants
    with ``dataclasses.replace``.
    """

    name: str
    general_urgent_terms: Tuple[WeightedTerm, ...]
    industry_urgent_terms: Tuple[WeightedTerm, ...]
    business_terms: Tuple[str, ...]
    spam_terms: Tuple[str, ...]
    positive_terms: Tuple[str, ...]
    negative_terms: Tuple[str, ...]
    action_terms: Tuple[str, ...]
    follow_up_terms: Tuple[str, ...]
    admin_terms: Tuple[str, ...]

    # Extended urgency detector
    impact_terms: Tuple[WeightedTerm, ...] = ()
    high_impact_terms: Tuple[str, ...] = ()
    medium_impact_terms: Tuple[str, ...] = ()
    time_indicators: Tuple[WeightedTerm, ...] = ()
    business_customer_terms: Tuple[str, ...] = ()
    residential_customer_terms: Tuple[str, ...] = ()

    # Keyword families for suggested actions
    emergency_terms: Tuple[str, ...] = ()
    quote_terms: Tuple[str, ...] = ("quote", "estimate")
    invoice_terms: Tuple[str, ...] = ("invoice", "payment")
    schedule_terms: Tuple[str, ...] = ("schedule", "booking")

    # Per-hit increments
    custom_urgent_weight: int = 20
    business_term_weight: int = 10
    custom_business_weight: int = 15

    def urgent_terms(self) -> Tuple[str, ...]:
        """Every urgent term across both tables (order kept, duplicates dropped)."""
        seen: Dict[str, None] = {}
        for entry in self.general_urgent_terms + self.industry_urgent_terms:
            seen.setdefault(entry.term, None)
        return tuple(seen)


GENERAL_URGENT = (
    "urgent", "asap", "emergency", "critical", "immediate", "priority",
    "deadline", "overdue", "final notice", "action required",
)

# Trade business terms for the Australian market
TRADE_URGENT = (
    "emergency", "urgent", "asap", "breakdown", "leak", "flooding",
    "no power", "electrical fault", "gas leak", "heating failure",
    "air con not working", "plumbing emergency", "blocked drain",
    "sparking", "short circuit", "fuse blown", "hot water failure",
)

TRADE_BUSINESS = (
    "quote", "estimate", "invoice", "payment", "service", "repair",
    "maintenance", "installation", "inspection", "certification",
    "compliance", "warranty", "guarantee", "schedule", "booking",
    "site visit", "materials", "labour", "gst", "abn",
)

GENERAL_BUSINESS = (
    "quote", "estimate", "invoice", "payment", "contract", "proposal",
    "meeting", "schedule", "booking", "order", "client", "customer",
)

SPAM = (
    "congratulations you won", "click here now", "limited time offer",
    "act now", "free money", "make money fast", "work from home",
    "guarantee", "no obligation", "risk free",
)

POSITIVE = ("thank", "great", "excellent", "satisfied", "happy", "pleased", "good")
NEGATIVE = ("problem", "issue", "complaint", "unhappy", "dissatisfied", "poor", "bad", "terrible")

ACTION = (
    "please", "can you", "could you", "need you to", "required",
    "action required", "respond", "reply", "confirm", "approve",
    "review", "sign", "complete", "provide", "send", "submit",
)

FOLLOW_UP = ("follow up", "following up", "checking in", "any update", "status update")

# Newsletter markers ride along with the system mail terms.
ADMIN = (
    "invoice", "receipt", "statement", "notification", "system",
    "automated", "newsletter", "unsubscribe",
)

# Extended detector weights, on the same 0-100 scale as the score.
TRADE_IMPACT = (
    # Emergency / safety
    WeightedTerm("emergency", 100),
    WeightedTerm("urgent", 90),
    WeightedTerm("asap", 90),
    WeightedTerm("power out", 100),
    WeightedTerm("power outage", 100),
    WeightedTerm("no power", 100),
    WeightedTerm("electrical fire", 100),
    WeightedTerm("sparks", 90),
    WeightedTerm("burning smell", 90),
    WeightedTerm("smoke", 90),
    WeightedTerm("shock", 80),
    WeightedTerm("electrocuted", 100),
    WeightedTerm("dangerous", 80),
    WeightedTerm("safety", 70),
    WeightedTerm("hazard", 70),
    # Business impact
    WeightedTerm("business down", 90),
    WeightedTerm("can't operate", 80),
    WeightedTerm("losing money", 80),
    WeightedTerm("customers waiting", 70),
    WeightedTerm("production stopped", 80),
    WeightedTerm("equipment down", 70),
    WeightedTerm("system failure", 80),
    WeightedTerm("critical", 80),
    # Time sensitive
    WeightedTerm("today", 60),
    WeightedTerm("immediately", 90),
    WeightedTerm("right now", 80),
    WeightedTerm("this morning", 70),
    WeightedTerm("this afternoon", 60),
    WeightedTerm("deadline", 70),
    WeightedTerm("overdue", 60),
    # Customer complaints
    WeightedTerm("complaint", 60),
    WeightedTerm("not working", 50),
    WeightedTerm("broken", 50),
    WeightedTerm("fault", 60),
    WeightedTerm("problem", 40),
    WeightedTerm("issue", 30),
    WeightedTerm("help", 30),
    WeightedTerm("stuck", 50),
    WeightedTerm("won't start", 50),
    WeightedTerm("tripping", 70),
    WeightedTerm("flickering", 60),
)

TIME_INDICATORS = (
    WeightedTerm("today", 30),
    WeightedTerm("this morning", 30),
    WeightedTerm("tonight", 40),
    WeightedTerm("after hours", 40),
    WeightedTerm("weekend", 50),
    WeightedTerm("saturday", 50),
    WeightedTerm("sunday", 50),
)

BUSINESS_CUSTOMER = (
    "office", "shop", "store", "factory", "warehouse", "commercial", "business",
    "pty ltd", "company", "corp", "restaurant", "cafe", "retail", "industrial",
)
RESIDENTIAL_CUSTOMER = ("home", "house", "apartment", "unit", "residence", "domestic")


def trade_corpus() -> KeywordCorpus:
    return KeywordCorpus(
        name="trade/en-AU",
        general_urgent_terms=_weighted(15, GENERAL_URGENT),
        industry_urgent_terms=_weighted(25, TRADE_URGENT),
        business_terms=TRADE_BUSINESS,
        spam_terms=SPAM,
        positive_terms=POSITIVE,
        negative_terms=NEGATIVE,
        action_terms=ACTION,
        follow_up_terms=FOLLOW_UP,
        admin_terms=ADMIN,
        impact_terms=TRADE_IMPACT,
        high_impact_terms=("emergency", "power out", "business down", "losing money", "critical"),
        medium_impact_terms=("urgent", "asap", "equipment down", "customers waiting"),
        time_indicators=TIME_INDICATORS,
        business_customer_terms=BUSINESS_CUSTOMER,
        residential_customer_terms=RESIDENTIAL_CUSTOMER,
        emergency_terms=("emergency", "power out", "no power", "gas leak", "flooding"),
    )


def general_corpus() -> KeywordCorpus:
    """Industry-neutral tables: no trade urgent terms, office-style business terms."""
    return replace(
        trade_corpus(),
        name="general/en",
        industry_urgent_terms=(),
        business_terms=GENERAL_BUSINESS,
        impact_terms=tuple(t for t in TRADE_IMPACT if t.term not in _TRADE_ONLY_IMPACT),
        emergency_terms=("emergency",),
    )


_TRADE_ONLY_IMPACT = frozenset({
    "power out", "power outage", "no power", "electrical fire", "sparks",
    "burning smell", "electrocuted", "tripping", "flickering", "won't start",
})


_REGISTRY: Dict[Tuple[str, str], Callable[[], KeywordCorpus]] = {
    ("trade", "en-AU"): trade_corpus,
    ("general", "en"): general_corpus,
}

DEFAULT_CORPUS = trade_corpus()


def corpus_for(industry: str = "trade", locale: str = "en-AU") -> KeywordCorpus:
    """
    Resolve the corpus for an industry/locale pair.

    Falls back to any locale of the same industry, then to the default
    trade corpus.
    """
    factory = _REGISTRY.get((industry, locale))
    if factory is None:
        for (ind, _loc), candidate in _REGISTRY.items():
            if ind == industry:
                factory = candidate
                break
    if factory is None:
        return DEFAULT_CORPUS
    return factory()
