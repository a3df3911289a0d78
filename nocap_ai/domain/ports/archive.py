"""Ports for the content-addressed archive."""

from typing import Optional, Protocol, Union

from ..models.asset import RetrievedContent


class ArchiveProvider(Protocol):
    """Protocol for uploading content to a content-addressed archive."""

    async def initialize(self) -> None:
        """Initialize the archive client."""
        ...

    async def upload(self, data: Union[bytes, str], file_name: str = "text") -> str:
        """Upload a blob or text and return its content identifier.

        Raises:
            MissingCredentialsError: If no API key is configured
            NetworkError: If the archive cannot be reached
            NonSuccessStatusError: If the archive rejects the upload
            MalformedResponseError: If the response carries no identifier
        """
        ...

    async def shutdown(self) -> None:
        """Clean up resources."""
        ...

    @property
    def is_configured(self) -> bool:
        """Check whether credentials are present."""
        ...


class ContentGateway(Protocol):
    """Protocol for reading archived content back through public gateways."""

    async def retrieve(self, cid: str) -> Optional[RetrievedContent]:
        """Fetch content by identifier, or None when every attempt failed."""
        ...

    async def shutdown(self) -> None:
        """Clean up resources."""
        ...
