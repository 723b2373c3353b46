"""Provider registry for LLM adapters.

Routes model IDs to the correct adapter implementation based on the model
ID prefix. Supports Gemini (gemini- prefix) and Ollama (ollama/ prefix).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from geetgatha.services.llm.base import LLMAdapter

if TYPE_CHECKING:
    from geetgatha.config import Settings

logger = logging.getLogger(__name__)


def _is_ollama_model(model_id: str) -> bool:
    """Return True if the model ID uses the ollama/ prefix."""
    return model_id.startswith("ollama/")


def get_adapter(
    model_id: str,
    credential: str,
    app_settings: Optional["Settings"] = None,
) -> LLMAdapter:
    """Return the appropriate LLM adapter for the given model ID.

    Routing logic:
    - "ollama/*"  → OllamaAdapter (cloud endpoint with the credential as
                    bearer token if ollama.use_cloud, else local/custom endpoint)
    - "gemini-*"  → GeminiAdapter
    - anything else → GeminiAdapter (fallback)

    Args:
        model_id: Model identifier string (e.g., "gemini-3-pro-preview",
                  "ollama/llama3.1").
        credential: Opaque credential passed through to the provider.
        app_settings: Settings to read provider endpoints from; defaults to
                      the module singleton.

    Returns:
        Configured LLMAdapter instance ready for use.
    """
    if app_settings is None:
        from geetgatha.config import settings as app_settings

    if _is_ollama_model(model_id):
        from geetgatha.services.llm.ollama_adapter import OllamaAdapter

        ollama = app_settings.ollama
        if ollama.use_cloud:
            base_url = ollama.endpoint or "https://ollama.com"
            api_key = credential
        else:
            base_url = ollama.endpoint or "http://localhost:11434"
            api_key = None

        logger.debug(
            "Routing %s to OllamaAdapter (base_url=%s, has_key=%s)",
            model_id,
            base_url,
            bool(api_key),
        )
        return OllamaAdapter(
            model_id=model_id,
            base_url=base_url,
            api_key=api_key,
            max_retries=app_settings.pipeline.retry_max_attempts,
        )

    # Default: Gemini (handles gemini- models and anything else)
    from geetgatha.services.llm.gemini_adapter import GeminiAdapter

    logger.debug("Routing %s to GeminiAdapter", model_id)
    return GeminiAdapter(
        model_id=model_id,
        api_key=credential,
        max_retries=app_settings.pipeline.retry_max_attempts,
    )
