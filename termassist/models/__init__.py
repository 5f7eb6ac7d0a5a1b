"""Models module."""

from termassist.models.llm_response import (
    AICommand,
    CommandInterpretation,
    ConversationMessage,
    StreamingProgress,
)
from termassist.models.config import AppConfig, ProviderConfig
from termassist.models.enums import CommandType, LLMProviderName, MessageRole, ProgressType

__all__ = [
    "AICommand",
    "CommandInterpretation",
    "ConversationMessage",
    "StreamingProgress",
    "AppConfig",
    "ProviderConfig",
    "CommandType",
    "LLMProviderName",
    "MessageRole",
    "ProgressType",
]
