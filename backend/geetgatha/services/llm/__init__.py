"""LLM provider abstraction layer.

Provides a unified async interface for structured, plain, grounded and
multimodal generation across providers (Gemini, Ollama).

Usage:
    from geetgatha.services.llm import get_adapter, LLMAdapter

    adapter = get_adapter("gemini-3-pro-preview", api_key)
    result = await adapter.generate_text(prompt, MySchema)

    adapter = get_adapter("ollama/llama3.1", api_key)
    text = await adapter.generate_plain(prompt)
"""

from geetgatha.services.llm.base import GroundedText, LLMAdapter, MediaPart, SearchSource
from geetgatha.services.llm.registry import get_adapter

__all__ = ["GroundedText", "LLMAdapter", "MediaPart", "SearchSource", "get_adapter"]
