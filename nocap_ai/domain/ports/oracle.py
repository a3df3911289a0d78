"""Protocol for language-model oracles."""

from typing import Optional, Protocol


class OracleProvider(Protocol):
    """Protocol defining the interface for language-model oracles."""

    async def initialize(self) -> None:
        """Initialize the oracle."""
        ...

    async def generate(
        self,
        prompt: str,
        json_mode: bool = False,
        model: Optional[str] = None,
    ) -> str:
        """Run a prompt and return the raw completion text.

        Raises:
            NetworkError: If the oracle cannot be reached
            NonSuccessStatusError: If the oracle answers with an error status
            MalformedResponseError: If the answer has no completion text
        """
        ...

    async def shutdown(self) -> None:
        """Clean up resources."""
        ...

    @property
    def provider_name(self) -> str:
        """Get the provider name."""
        ...
