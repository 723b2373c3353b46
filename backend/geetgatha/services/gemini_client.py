"""Gemini client wrapper using google-genai SDK.

Clients are created either in API-key mode (one client per credential) or,
when ``gemini.use_vertex_ai`` is set, in Vertex AI mode with location-aware
routing. Vertex authentication uses Application Default Credentials.

Usage:
    from geetgatha.services.gemini_client import get_gemini_client

    client = get_gemini_client(api_key)
    client = get_gemini_client(api_key, location="global")
"""

import hashlib
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from google import genai

from geetgatha.config import settings

# Load .env for GOOGLE_APPLICATION_CREDENTIALS (ADC)
load_dotenv(Path.cwd() / ".env")

# Per-credential / per-location client cache
_clients: dict[str, genai.Client] = {}

# Models that must use the global endpoint on Vertex AI
GLOBAL_REGION_MODELS = {
    "gemini-3-flash-preview",
    "gemini-3-pro-preview",
    "gemini-3-pro-image-preview",
}


def location_for_model(model_id: str) -> str:
    """Return the Vertex AI location needed for a given model ID."""
    if model_id in GLOBAL_REGION_MODELS:
        return "global"
    return settings.gemini.location


def _cache_key(api_key: str, location: Optional[str]) -> str:
    # Keys are hashed so raw credentials never sit in a dict key
    digest = hashlib.sha256(api_key.encode("utf-8")).hexdigest()[:16]
    return f"{digest}:{location or '-'}"


def get_gemini_client(api_key: str, location: Optional[str] = None) -> genai.Client:
    """Get or create a Gemini client for the given credential.

    Args:
        api_key: Gemini API key. In Vertex AI mode it is only used as the
                 cache key, authentication comes from ADC.
        location: GCP region for Vertex AI mode (e.g., "us-central1", "global").

    Returns:
        genai.Client: Configured client instance
    """
    use_vertex = settings.gemini.use_vertex_ai
    loc = (location or settings.gemini.location) if use_vertex else None
    key = _cache_key(api_key, loc)

    if key not in _clients:
        if use_vertex:
            os.environ["GOOGLE_GENAI_USE_VERTEXAI"] = "true"
            if settings.gemini.project_id:
                os.environ["GOOGLE_CLOUD_PROJECT"] = settings.gemini.project_id
            _clients[key] = genai.Client(
                vertexai=True,
                project=settings.gemini.project_id,
                location=loc,
            )
        else:
            _clients[key] = genai.Client(api_key=api_key)

    return _clients[key]


def clear_clients() -> None:
    """Drop cached clients (used when credentials are rotated)."""
    _clients.clear()
