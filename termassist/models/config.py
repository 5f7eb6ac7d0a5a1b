"""Provider configuration passed to backends on initialization."""

from dataclasses import dataclass, field
from typing import Optional

from termassist.models.enums import LLMProviderName


@dataclass
class ProviderConfig:
    """Connection and sampling settings for one LLM provider."""
    model: str
    url: Optional[str] = None  # only local providers (Ollama) need it
    api_key: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 1000


@dataclass
class AppConfig:
    """Provider selection plus the configuration of every known provider."""
    llm_provider: LLMProviderName = LLMProviderName.OLLAMA
    ollama: ProviderConfig = field(
        default_factory=lambda: ProviderConfig(model="llama3.2", url="http://localhost:11434")
    )
    claude: ProviderConfig = field(
        default_factory=lambda: ProviderConfig(model="claude-3-5-haiku-latest")
    )
    openai: ProviderConfig = field(
        default_factory=lambda: ProviderConfig(model="gpt-4o-mini")
    )

    @property
    def active(self) -> ProviderConfig:
        """Configuration of the currently selected provider."""
        return getattr(self, LLMProviderName(self.llm_provider).value)
