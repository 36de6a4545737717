from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from tradie_mail.assistant.errors import AssistantUnavailable, MalformedAssistantResponse
from tradie_mail.assistant.openai_assistant import OpenAIAssistant
from tradie_mail.config.settings import Settings


class FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.requests: List[Dict[str, Any]] = []

    def create(self, **kwargs: Any) -> SimpleNamespace:
        self.requests.append(kwargs)
        return SimpleNamespace(output_text=self.output_text)


def _assistant(output_text: str) -> tuple[OpenAIAssistant, FakeResponses]:
    responses = FakeResponses(output_text)
    client = SimpleNamespace(responses=responses)
    return OpenAIAssistant(None, model="test-model", client=client), responses


def _settings(api_key: str | None) -> Settings:
    return Settings(
        openai_api_key=api_key,
        model="test-model",
        assistant_timeout=5.0,
        industry="trade",
        locale="en-AU",
        log_level="INFO",
        logs_dir=Path("logs"),
    )


def test_from_settings_without_key_disables_assistant() -> None:
    assert OpenAIAssistant.from_settings(_settings(None)) is None


def test_from_settings_with_key() -> None:
    assistant = OpenAIAssistant.from_settings(_settings("sk-test"))

    assert assistant is not None
    assert assistant.is_available()
    assert assistant.model == "test-model"


def test_analyze_email_uses_structured_output() -> None:
    body = {"urgencyScore": 80, "category": "urgent"}
    assistant, responses = _assistant("```json\n" + json.dumps(body) + "\n```")

    assert assistant.analyze_email("URGENT: no hot water") == body

    request = responses.requests[0]
    assert request["model"] == "test-model"
    assert request["text"]["format"]["type"] == "json_schema"
    assert "URGENT: no hot water" in request["input"][1]["content"]


def test_invalid_json_is_malformed() -> None:
    assistant, _ = _assistant("I think this one is urgent")

    with pytest.raises(MalformedAssistantResponse):
        assistant.analyze_email("anything")


def test_generate_digest_includes_context() -> None:
    assistant, responses = _assistant("- Insight: mostly quotes")

    text = assistant.generate_digest(
        [{"subject": "Quote", "snippet": "kitchen", "priority": "medium"}],
        {"businessName": "Sparky Co"},
    )

    assert text == "- Insight: mostly quotes"
    prompt = responses.requests[0]["input"][1]["content"]
    assert "[medium] Quote: kitchen" in prompt
    assert "Sparky Co" in prompt


def test_missing_client_is_unavailable() -> None:
    assistant = OpenAIAssistant(None)

    assert not assistant.is_available()
    with pytest.raises(AssistantUnavailable):
        assistant.analyze_email("anything")
