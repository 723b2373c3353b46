"""Abstract base class for LLM provider adapters.

Defines the consistent async interface that all adapters must implement:
structured generation, plain text generation, search-grounded generation
and media (image/audio) analysis.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Type, TypeVar

from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class MediaPart:
    """Inline media attached to a request (base64 is applied by adapters)."""

    data: bytes
    mime_type: str


@dataclass(frozen=True)
class SearchSource:
    title: str
    uri: str


@dataclass
class GroundedText:
    """Text answer plus the web sources the model cited."""

    text: str
    sources: list[SearchSource] = field(default_factory=list)


class LLMAdapter(ABC):
    """Abstract base class for LLM provider adapters.

    Every stage talks to the model only through these methods, so a stage
    can be exercised in tests with a fake adapter.
    """

    @abstractmethod
    async def generate_text(
        self,
        prompt: str,
        schema: Type[ModelT],
        *,
        temperature: float = 0.7,
        system_prompt: Optional[str] = None,
        thinking_budget: Optional[int] = None,
        max_retries: Optional[int] = None,
    ) -> ModelT:
        """Generate structured output from a prompt.

        Args:
            prompt: The user prompt to send to the model.
            schema: Pydantic model class defining the expected output structure.
            temperature: Sampling temperature (0.0-1.0). Lower = more deterministic.
            system_prompt: Optional system/instruction prompt.
            thinking_budget: Optional reasoning token budget, where supported.
            max_retries: Maximum number of attempts on transient failure;
                defaults to the attempts the adapter was built with.

        Returns:
            Validated instance of the supplied schema class.
        """
        ...

    @abstractmethod
    async def generate_plain(
        self,
        prompt: str,
        *,
        temperature: float = 0.7,
        top_p: Optional[float] = None,
        system_prompt: Optional[str] = None,
        max_retries: Optional[int] = None,
    ) -> str:
        """Generate free-form text. Returns an empty string for empty replies."""
        ...

    @abstractmethod
    async def generate_grounded(
        self,
        prompt: str,
        *,
        temperature: float = 0.7,
        max_retries: Optional[int] = None,
    ) -> GroundedText:
        """Generate text using a web search capability.

        Raises when the search capability itself is unavailable so callers
        can fall back to generate_plain().
        """
        ...

    @abstractmethod
    async def analyze_media(
        self,
        prompt: str,
        media: list[MediaPart],
        *,
        system_prompt: Optional[str] = None,
        temperature: float = 0.4,
        max_retries: Optional[int] = None,
    ) -> str:
        """Describe images/audio in text form for downstream stages."""
        ...
