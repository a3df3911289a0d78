"""Error taxonomy shared by the domain services and adapters."""

from typing import Optional


class NocapError(Exception):
    """Base class for all nocap-ai errors."""


class ValidationError(NocapError):
    """Raised when caller input is missing or malformed."""


class NotFoundError(NocapError):
    """Raised when a claim id does not exist in the store."""

    def __init__(self, claim_id: str):
        super().__init__(f"Claim not found: {claim_id}")
        self.claim_id = claim_id


class ClaimStoreError(NocapError):
    """Raised when the claim store cannot complete a request."""


class DependencyError(NocapError):
    """Raised when an external collaborator is unreachable or misbehaves.

    Lifecycle transitions never surface these to their caller; they are
    replaced with a fallback value or the side effect is skipped.
    """


class MissingCredentialsError(DependencyError):
    """Raised when a dependency is called without its API key."""


class NetworkError(DependencyError):
    """Raised when a dependency could not be reached."""


class NonSuccessStatusError(DependencyError):
    """Raised when a dependency answers with an error status."""

    def __init__(self, service: str, status_code: int, body: Optional[str] = None):
        message = f"{service} returned HTTP {status_code}"
        if body:
            message += f": {body[:200]}"
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class MalformedResponseError(DependencyError):
    """Raised when a dependency response lacks the expected fields."""


class BroadcastLogError(DependencyError):
    """Raised when the broadcast log cannot be appended to."""
