# backend/app/api/emails.py
from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from backend.app.status import digest_status_store
from tradie_mail.assistant.base import Assistant
from tradie_mail.assistant.openai_assistant import OpenAIAssistant
from tradie_mail.config.settings import Settings, load_settings
from tradie_mail.digest.aggregator import digest_for_window
from tradie_mail.models import DateRange, EmailSummary, UserEmailPreferences
from tradie_mail.pipeline.orchestrator import analyze_emails
from tradie_mail.rules.corpus import corpus_for

router = APIRouter()


class EmailIn(BaseModel):
    id: str
    subject: str = ""
    from_: str = Field(default="", alias="from")
    snippet: str = ""
    # Parsed leniently later; a bad date only means "not recent".
    date: Optional[str] = None
    isRead: bool = True

    def to_summary(self) -> EmailSummary:
        return EmailSummary.from_dict(
            {
                "id": self.id,
                "subject": self.subject,
                "from": self.from_,
                "snippet": self.snippet,
                "date": self.date,
                "isRead": self.isRead,
            }
        )


class AnalyzeRequest(BaseModel):
    emails: List[EmailIn]
    preferences: Optional[Dict[str, Any]] = None
    use_assistant: bool = True


class DateRangeIn(BaseModel):
    from_: datetime = Field(alias="from")
    to: datetime


class DigestRequest(AnalyzeRequest):
    dateRange: DateRangeIn
    userContext: Optional[Dict[str, Any]] = None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def get_assistant(settings: Settings = Depends(get_settings)) -> Optional[Assistant]:
    return OpenAIAssistant.from_settings(settings)


def _preferences(raw: Optional[Dict[str, Any]]) -> Optional[UserEmailPreferences]:
    return UserEmailPreferences.from_dict(raw) if raw else None


@router.post("/emails/analyze")
async def analyze_endpoint(
    request: AnalyzeRequest,
    settings: Settings = Depends(get_settings),
    assistant: Optional[Assistant] = Depends(get_assistant),
) -> dict:
    analyzed = await run_in_threadpool(
        analyze_emails,
        [e.to_summary() for e in request.emails],
        _preferences(request.preferences),
        assistant=assistant if request.use_assistant else None,
        corpus=corpus_for(settings.industry, settings.locale),
        timeout=settings.assistant_timeout,
    )
    return {"ok": True, "emails": [a.to_dict() for a in analyzed]}


@router.post("/emails/digest")
async def digest_endpoint(
    request: DigestRequest,
    settings: Settings = Depends(get_settings),
    assistant: Optional[Assistant] = Depends(get_assistant),
) -> dict:
    # Naive bounds become UTC here, before they are compared.
    date_range = DateRange(start=request.dateRange.from_, end=request.dateRange.to)
    if date_range.start > date_range.end:
        raise HTTPException(status_code=400, detail="dateRange.from must not be after dateRange.to")

    assistant = assistant if request.use_assistant else None
    digest_status_store.begin(len(request.emails), used_assistant=assistant is not None)

    def run() -> dict:
        # Only emails dated inside the range are analysed and counted.
        digest = digest_for_window(
            [e.to_summary() for e in request.emails],
            date_range,
            _preferences(request.preferences),
            assistant=assistant,
            corpus=corpus_for(settings.industry, settings.locale),
            user_context=request.userContext,
            timeout=settings.assistant_timeout,
        )
        return digest.to_dict()

    try:
        digest = await run_in_threadpool(run)
    except Exception as exc:
        digest_status_store.fail(f"{type(exc).__name__}: {exc}")
        raise

    digest_status_store.finish(digest["summary"])
    return {"ok": True, "digest": digest}


@router.get("/digest/status")
async def digest_status() -> dict:
    return {"ok": True, "status": digest_status_store.snapshot()}
