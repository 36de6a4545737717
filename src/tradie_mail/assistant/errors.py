from __future__ import annotations


class AssistantError(RuntimeError):
    """Base class for failures of the optional language-model assistant."""


class AssistantUnavailable(AssistantError):
    pass


class AssistantTimeout(AssistantError):
    pass


class MalformedAssistantResponse(AssistantError):
    """The assistant answered, but not with a usable analysis."""
