from __future__ import annotations

import re
from typing import Optional

from tradie_mail.rules.core import MailContext, contains_any

# Anything at or above this is treated as parsing noise (phone numbers, ABNs).
MAX_PLAUSIBLE_JOB_VALUE = 100_000

_AMOUNT = r"(\d{1,3}(?:,\d{3})+(?:\.\d{2})?|\d+(?:\.\d{2})?)"

JOB_VALUE_PATTERNS = (
    re.compile(r"\$\s?" + _AMOUNT),
    re.compile(_AMOUNT + r"\s*(?:aud|dollars?)\b", re.IGNORECASE),
    re.compile(r"\bquote\b[^$\d]{0,40}?" + _AMOUNT, re.IGNORECASE),
)


def extract_job_value(text: str) -> Optional[float]:
    """
    Best-effort estimate of the job value mentioned in the text.

    Returns the largest plausible amount, or None when no amount was found.
    """
    best: Optional[float] = None
    for pattern in JOB_VALUE_PATTERNS:
        for m in pattern.finditer(text or ""):
            try:
                value = float(m.group(1).replace(",", ""))
            except ValueError:
                continue
            if 0 < value < MAX_PLAUSIBLE_JOB_VALUE and (best is None or value > best):
                best = value
    return best


def detect_customer_type(ctx: MailContext) -> str:
    """Best-effort: business, residential, or unknown."""
    corpus = ctx.corpus
    if contains_any(ctx.email.from_email, corpus.business_customer_terms) or contains_any(
        ctx.content, corpus.business_customer_terms
    ):
        return "business"
    if contains_any(ctx.content, corpus.residential_customer_terms):
        return "residential"
    return "unknown"
