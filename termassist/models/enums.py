"""Enums for conversation roles, AI response kinds and LLM providers."""

from enum import Enum


class MessageRole(str, Enum):
    """Author of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


class CommandType(str, Enum):
    """Kind of answer returned by the command generator."""

    COMMAND = "command"
    TEXT = "text"


class LLMProviderName(str, Enum):
    """Supported language-model providers."""

    OLLAMA = "ollama"
    CLAUDE = "claude"
    OPENAI = "openai"

    @classmethod
    def list_all(cls) -> list[str]:
        """Return all provider names as plain strings."""
        return [p.value for p in cls]


class ProgressType(str, Enum):
    """Stage reported by a streaming command generation."""

    CONNECTING = "connecting"
    STREAMING = "streaming"
    COMPLETE = "complete"
    ERROR = "error"
