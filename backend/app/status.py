from __future__ import annotations

from dataclasses import asdict, dataclass, field
from threading import Lock
from time import time
from typing import Any, Dict, List, Optional

MAX_RECENT_ERRORS = 20


@dataclass
class DigestStatus:
    state: str = "idle"
    detail: Optional[str] = None
    runs: int = 0
    emails_in_last_run: int = 0
    used_assistant: bool = False
    started_at: Optional[float] = None
    finished_at: Optional[float] = None
    summary: Optional[Dict[str, Any]] = None
    # Most recent first.
    recent_errors: List[str] = field(default_factory=list)


class DigestStatusStore:
    """Progress of the latest digest run, polled by the UI."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._status = DigestStatus()

    def begin(self, email_count: int, *, used_assistant: bool) -> None:
        with self._lock:
            s = self._status
            s.state = "running"
            s.detail = f"Analysing {email_count} emails"
            s.emails_in_last_run = email_count
            s.used_assistant = used_assistant
            s.started_at = time()
            s.finished_at = None

    def finish(self, summary: Dict[str, Any]) -> None:
        with self._lock:
            s = self._status
            s.state = "done"
            s.detail = "Digest generated"
            s.summary = summary
            s.runs += 1
            s.finished_at = time()

    def fail(self, error: str) -> None:
        with self._lock:
            s = self._status
            s.state = "error"
            s.detail = error
            s.recent_errors = ([error] + s.recent_errors)[:MAX_RECENT_ERRORS]
            s.finished_at = time()

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            data = asdict(self._status)
        if data["started_at"] is not None and data["finished_at"] is not None:
            data["duration_s"] = round(data["finished_at"] - data["started_at"], 3)
        return data


digest_status_store = DigestStatusStore()
