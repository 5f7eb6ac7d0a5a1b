"""LLM request and response models."""

from dataclasses import dataclass, field
from typing import Optional, List

from termassist.models.enums import CommandType, MessageRole, ProgressType


@dataclass
class CommandInterpretation:
    """Structured reading of a command's terminal output."""
    summary: str
    key_findings: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    successful: bool = True


@dataclass
class ConversationMessage:
    """One turn of the conversation sent to the LLM as context."""
    role: MessageRole
    content: str
    command: Optional[str] = None  # shell command that was executed
    output: Optional[str] = None  # raw output of that command
    interpretation: Optional[CommandInterpretation] = None


@dataclass
class AICommand:
    """
    Answer of the command generator.

    A ``text`` answer only carries ``content``; a ``command`` answer carries
    the shell command together with its intent and explanation.
    """
    type: CommandType
    content: Optional[str] = None
    intent: Optional[str] = None
    command: Optional[str] = None
    explanation: Optional[str] = None
    confidence: Optional[float] = None

    @classmethod
    def text(cls, content: str) -> "AICommand":
        return cls(type=CommandType.TEXT, content=content)

    @classmethod
    def shell(
        cls,
        command: str,
        intent: str = "Execute command",
        explanation: str = "",
        confidence: float = 0.5,
    ) -> "AICommand":
        return cls(
            type=CommandType.COMMAND,
            command=command,
            intent=intent,
            explanation=explanation,
            confidence=confidence,
        )

    @property
    def is_command(self) -> bool:
        return self.type == CommandType.COMMAND

    def __repr__(self):
        if self.is_command:
            return f"<AICommand command | {self.command} ({self.confidence})>"
        return f"<AICommand text | {(self.content or '')[:50]}>"


@dataclass
class StreamingProgress:
    """Progress event emitted while a command is being streamed."""
    type: ProgressType
    content: Optional[str] = None  # partial text received so far
    partial_command: Optional[AICommand] = None
    error: Optional[str] = None
