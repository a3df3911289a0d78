"""Domain models for the Aether asset pipeline.

None of these are persisted; they only travel back to the caller.
"""

from typing import Optional

from pydantic import BaseModel, Field


class AnchorResult(BaseModel):
    """Result of anchoring an uploaded file in the archive."""

    success: bool = True
    cid: str = Field(..., description="Content identifier returned by the archive")
    message: str = "File encrypted and anchored to Filecoin."


class RoutingDecision(BaseModel):
    """Answer of the simulated orchestration hub."""

    success: bool = True
    status: str = "ROUTED_TO_COMPUTE"
    routed_agent: str = "Knowledge Sub-Agent"
    compute_node: str = "Aether Enclave 0x48fA..."


class RetrievedContent(BaseModel):
    """Content fetched back from a public gateway."""

    gateway_url: str
    content_type: str = ""
    text: Optional[str] = None

    @property
    def is_binary(self) -> bool:
        """Check whether the gateway served a binary asset."""
        content_type = self.content_type.lower()
        return any(kind in content_type for kind in ("image", "pdf", "zip"))


class InferenceResult(BaseModel):
    """Ephemeral output of the compute step."""

    insight: str
    confidence_score: str = "99.4%"
    data_integrity_proof: str = "FILECOIN_RETRIEVAL_VERIFIED"
    entity_extracted: str
    enclave_id: str = "TEE_AETHER_0x9212"
    memory_status: str
    compute_proof: str
