from __future__ import annotations

from concurrent.futures import Future
from concurrent.futures import TimeoutError as FuturesTimeout
from dataclasses import dataclass
from threading import Thread
from typing import Any, Callable, Dict, Generic, List, Optional, Protocol, TypeVar, runtime_checkable

from tradie_mail.assistant.errors import AssistantTimeout, AssistantUnavailable

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 10.0
ASSISTANT_THREAD_NAME = "assistant-call"


@runtime_checkable
class Assistant(Protocol):
    """Interface of the optional language-model collaborator."""

    def is_available(self) -> bool:
        ...

    def analyze_email(self, text: str) -> Dict[str, Any]:
        """
        Return a raw analysis with at least: urgencyScore, category,
        actionRequired, suggestedActions, reasoning, businessRelevance,
        sentiment.
        """
        ...

    def generate_digest(self, emails: List[Dict[str, str]], user_context: Optional[Dict[str, Any]] = None) -> str:
        """Return free-form digest text, one insight or recommendation per line."""
        ...


@dataclass(frozen=True)
class Attempt(Generic[T]):
    """Outcome of an assisted computation: a value, or the reason it failed."""

    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: T) -> "Attempt[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "Attempt[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None and self.value is not None

    def or_else(self, fallback: Callable[[], T]) -> T:
        if self.ok:
            return self.value  # type: ignore[return-value]
        return fallback()


def ensure_available(assistant: Optional[Assistant]) -> Assistant:
    if assistant is None:
        raise AssistantUnavailable("no assistant configured")
    if not assistant.is_available():
        raise AssistantUnavailable(f"{type(assistant).__name__} is not available")
    return assistant


def call_with_timeout(fn: Callable[..., T], *args: Any, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> T:
    """
    Run one assistant call in a worker thread and wait at most ``timeout``
    seconds for it. A late call is abandoned, not retried.

    The worker is a daemon thread, so an abandoned call never keeps the
    process alive at exit.
    """
    future: Future = Future()

    def run() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(fn(*args))
        except BaseException as exc:
            future.set_exception(exc)

    Thread(target=run, name=ASSISTANT_THREAD_NAME, daemon=True).start()
    try:
        return future.result(timeout=timeout)
    except FuturesTimeout as exc:
        future.cancel()
        raise AssistantTimeout(f"assistant call exceeded {timeout:.1f}s") from exc

