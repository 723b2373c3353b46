"""Ollama adapter for the LLM abstraction layer.

Connects via ollama.AsyncClient with optional auth headers, structured JSON
output via format='json' with schema instructions, and vision support via
base64-encoded images.

Note: We use format='json' instead of format=schema_dict because Ollama Cloud
does not reliably enforce JSON schema constraints. Instead, we append a
concise schema description to the system prompt and rely on format='json'
to guarantee valid JSON output.

Ollama has no built-in search tool, so generate_grounded() runs a web
search first and folds the results into the prompt.
"""

import base64
import json
import logging
from typing import Optional, Type

from ollama import AsyncClient

from geetgatha.services.json_utils import clean_and_parse_json
from geetgatha.services.llm.base import GroundedText, LLMAdapter, MediaPart, ModelT
from geetgatha.services.llm.retrying import model_retry
from geetgatha.services.web_search import web_search

logger = logging.getLogger(__name__)


def _schema_instruction(schema: Type[ModelT]) -> str:
    """Build a concise JSON schema instruction to append to the system prompt."""
    schema_json = json.dumps(schema.model_json_schema(), indent=2)
    return (
        "\n\nIMPORTANT: You MUST respond with a single JSON object (no markdown, "
        "no commentary, no code fences). The JSON must conform to this schema:\n"
        f"```json\n{schema_json}\n```\n"
        "All string fields must be strings (not arrays). Return ONLY the JSON object."
    )


class OllamaAdapter(LLMAdapter):
    """LLM adapter backed by a local or cloud Ollama instance.

    Strips the "ollama/" prefix from model IDs before passing to the ollama
    library. Always passes stream=False to avoid async generator responses.
    """

    def __init__(
        self,
        model_id: str,
        base_url: str = "http://localhost:11434",
        api_key: Optional[str] = None,
        max_retries: int = 3,
    ) -> None:
        """Initialize adapter for the given Ollama model.

        Args:
            model_id: Model identifier, optionally prefixed with "ollama/"
                      (e.g., "ollama/llama3.1" or "llama3.1").
            base_url: Base URL of the Ollama server.
            api_key: Optional API key for authentication (cloud deployments).
            max_retries: Default attempts per call.
        """
        # Strip ollama/ prefix; the library uses bare model names
        self._ollama_model = model_id.removeprefix("ollama/")
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._client = AsyncClient(host=base_url, headers=headers)
        self._max_retries = max_retries

    async def _chat(self, messages: list[dict], *, temperature: float, top_p: Optional[float] = None,
                    json_mode: bool = False) -> str:
        options = {"temperature": temperature}
        if top_p is not None:
            options["top_p"] = top_p
        response = await self._client.chat(
            model=self._ollama_model,
            messages=messages,
            format="json" if json_mode else None,
            options=options,
            stream=False,
        )
        return response.message.content or ""

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
        """Generate structured text using an Ollama model.

        thinking_budget is accepted for interface parity and ignored.
        """
        schema_suffix = _schema_instruction(schema)

        @model_retry(max_retries or self._max_retries)
        async def _call() -> ModelT:
            messages = []
            if system_prompt:
                messages.append({"role": "system", "content": system_prompt + schema_suffix})
            else:
                messages.append({"role": "system", "content": schema_suffix.lstrip()})
            messages.append({"role": "user", "content": prompt})

            raw = await self._chat(messages, temperature=temperature, json_mode=True)
            return clean_and_parse_json(raw, schema)

        return await _call()

    async def generate_plain(
        self,
        prompt: str,
        *,
        temperature: float = 0.7,
        top_p: Optional[float] = None,
        system_prompt: Optional[str] = None,
        max_retries: Optional[int] = None,
    ) -> str:
        @model_retry(max_retries or self._max_retries)
        async def _call() -> str:
            messages = []
            if system_prompt:
                messages.append({"role": "system", "content": system_prompt})
            messages.append({"role": "user", "content": prompt})
            return await self._chat(messages, temperature=temperature, top_p=top_p)

        return await _call()

    async def generate_grounded(
        self,
        prompt: str,
        *,
        temperature: float = 0.7,
        max_retries: Optional[int] = None,
    ) -> GroundedText:
        """Search the web for the prompt's first line, then answer with the results.

        A search failure propagates so the research stage can fall back to a
        plain call.
        """
        query = prompt.strip().splitlines()[0][:200] if prompt.strip() else prompt
        digest, sources = await web_search(query)

        grounded_prompt = prompt
        if digest:
            grounded_prompt = f"{prompt}\n\nWEB SEARCH RESULTS:\n{digest}"

        text = await self.generate_plain(
            grounded_prompt,
            temperature=temperature,
            max_retries=max_retries,
        )
        return GroundedText(text=text, sources=sources)

    async def analyze_media(
        self,
        prompt: str,
        media: list[MediaPart],
        *,
        system_prompt: Optional[str] = None,
        temperature: float = 0.4,
        max_retries: Optional[int] = None,
    ) -> str:
        """Analyze images using an Ollama vision model.

        Only image parts are sent; Ollama chat models do not take audio.
        Works with vision-capable models (e.g., llava, moondream).
        """
        images = [
            base64.b64encode(item.data).decode()
            for item in media
            if item.mime_type.startswith("image/")
        ]
        skipped = len(media) - len(images)
        if skipped:
            logger.warning("Ollama adapter skipped %d non-image media part(s)", skipped)

        @model_retry(max_retries or self._max_retries)
        async def _call() -> str:
            messages = []
            if system_prompt:
                messages.append({"role": "system", "content": system_prompt})
            user_message = {"role": "user", "content": prompt}
            if images:
                user_message["images"] = images
            messages.append(user_message)
            return await self._chat(messages, temperature=temperature)

        return await _call()
