from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI

from tradie_mail.assistant.base import DEFAULT_TIMEOUT_SECONDS
from tradie_mail.assistant.errors import AssistantUnavailable, MalformedAssistantResponse
from tradie_mail.config.settings import Settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an email triage assistant for Australian trade businesses "
    "(plumbing, electrical, carpentry and similar). Score how urgent the email is "
    "from 0 to 100, categorize it, and say whether the recipient has to act. "
    "Return ONLY JSON that matches the provided schema."
)

DIGEST_PROMPT = (
    "You write the morning email digest for a trade business owner. "
    "Answer with short bullet lines only. Write up to three lines describing an insight, "
    "pattern or trend in the emails, then up to four lines that recommend or suggest "
    "what the owner should do or consider today."
)

# Structured Outputs (JSON Schema) so parsing is reliable
ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "urgencyScore": {"type": "number", "minimum": 0, "maximum": 100},
        "category": {
            "type": "string",
            "enum": ["urgent", "standard", "follow-up", "admin", "spam"],
        },
        "actionRequired": {"type": "boolean"},
        "suggestedActions": {"type": "array", "items": {"type": "string"}, "maxItems": 3},
        "reasoning": {"type": "string"},
        "businessRelevance": {"type": "number", "minimum": 0, "maximum": 100},
        "sentiment": {"type": "string", "enum": ["positive", "neutral", "negative"]},
    },
    "required": [
        "urgencyScore",
        "category",
        "actionRequired",
        "suggestedActions",
        "reasoning",
        "businessRelevance",
        "sentiment",
    ],
}


def _clean_json_text(raw: str) -> str:
    """Strip ```json ... ``` wrappers before json.loads."""
    text = raw.strip()
    if text.startswith("```"):
        text = text.strip("`").strip()
        if text.lower().startswith("json"):
            text = text[4:].lstrip()
    return text


class OpenAIAssistant:
    """
    Assistant backed by the OpenAI Responses API.

    Retries are disabled: a failed or slow call falls back to the rule
    engine instead.
    """

    def __init__(
        self,
        api_key: Optional[str],
        *,
        model: str = "gpt-4.1-mini",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[OpenAI] = None,
    ) -> None:
        self.model = model
        self.timeout = timeout
        if client is None and api_key:
            client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["OpenAIAssistant"]:
        if not settings.openai_api_key:
            logger.info("OPENAI_API_KEY not set - assistant disabled, using rule-based analysis")
            return None
        return cls(settings.openai_api_key, model=settings.model, timeout=settings.assistant_timeout)

    def is_available(self) -> bool:
        return self._client is not None

    def _require_client(self) -> OpenAI:
        if self._client is None:
            raise AssistantUnavailable("OpenAI client not initialized - API key required")
        return self._client

    def analyze_email(self, text: str) -> Dict[str, Any]:
        client = self._require_client()
        resp = client.responses.create(
            model=self.model,
            input=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f"Email (subject and snippet):\n{text}"},
            ],
            text={
                "format": {
                    "type": "json_schema",
                    "name": "email_analysis",
                    "strict": True,
                    "schema": ANALYSIS_SCHEMA,
                }
            },
        )
        content = resp.output_text or ""
        try:
            return json.loads(_clean_json_text(content))
        except json.JSONDecodeError as e:
            raise MalformedAssistantResponse(f"Assistant returned invalid JSON: {content[:200]}") from e

    def generate_digest(
        self,
        emails: List[Dict[str, str]],
        user_context: Optional[Dict[str, Any]] = None,
    ) -> str:
        client = self._require_client()
        lines = [f"- [{e.get('priority', '')}] {e.get('subject', '')}: {e.get('snippet', '')}" for e in emails]
        user_prompt = "Emails:\n" + "\n".join(lines)
        if user_context:
            user_prompt += "\n\nBusiness context:\n" + json.dumps(user_context, indent=2, default=str)

        resp = client.responses.create(
            model=self.model,
            input=[
                {"role": "system", "content": DIGEST_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
        )
        return resp.output_text or ""
