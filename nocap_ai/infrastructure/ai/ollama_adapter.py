"""Ollama implementation of the oracle interface."""

import logging
from typing import Optional

import httpx
from pydantic import BaseModel, Field

from ...domain.errors import MalformedResponseError, NetworkError, NonSuccessStatusError
from ...domain.ports.oracle import OracleProvider

logger = logging.getLogger(__name__)


class OllamaConfig(BaseModel):
    """Configuration for the Ollama adapter."""

    base_url: str = Field(default="http://127.0.0.1:11434", description="Ollama server URL")
    model: str = Field(default="llama3:latest", description="Default model")
    timeout: float = Field(default=120.0, description="Request timeout in seconds")


class OllamaAdapter(OracleProvider):
    """Local Ollama server used as the language-model oracle."""

    def __init__(self, config: Optional[OllamaConfig] = None):
        """Initialize the adapter."""
        self._config = config or OllamaConfig()
        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        """Create the HTTP client.

        The server is not probed here; an unreachable model degrades each
        call instead of blocking startup.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=self._config.timeout,
                headers={"Content-Type": "application/json"},
            )

    async def generate(
        self,
        prompt: str,
        json_mode: bool = False,
        model: Optional[str] = None,
    ) -> str:
        """Run a prompt through /api/generate and return the completion."""
        await self.initialize()

        payload = {
            "model": model or self._config.model,
            "prompt": prompt,
            "stream": False,
        }
        if json_mode:
            payload["format"] = "json"

        try:
            response = await self._client.post("/api/generate", json=payload)
        except httpx.HTTPError as e:
            raise NetworkError(f"Failed connecting to Ollama: {e}") from e

        if response.status_code >= 400:
            raise NonSuccessStatusError("Ollama", response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Ollama returned invalid JSON: {e}") from e

        completion = data.get("response") if isinstance(data, dict) else None
        if not isinstance(completion, str):
            raise MalformedResponseError("Ollama response has no completion text")

        logger.debug(f"🤖 Ollama returned {len(completion)} chars")
        return completion

    async def shutdown(self) -> None:
        """Clean up resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def provider_name(self) -> str:
        """Get the name of the oracle provider."""
        return "Ollama"

    @property
    def model(self) -> str:
        """Get the default model."""
        return self._config.model
