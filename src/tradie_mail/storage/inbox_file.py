from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List

from tradie_mail.models import EmailSummary, UserEmailPreferences


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def load_emails(path: Path) -> List[EmailSummary]:
    """
    Load an inbox export: a JSON list of email summaries, or an object with
    an "emails" list. Non-object entries are skipped.
    """
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get("emails") or []
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain a list of emails")
    return [EmailSummary.from_dict(item) for item in data if isinstance(item, dict)]


def load_preferences(path: Path) -> UserEmailPreferences:
    if not path.exists():
        return UserEmailPreferences()
    data = _read_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a preferences object")
    # Keep load resilient to legacy/extra fields.
    return UserEmailPreferences.from_dict(data)
