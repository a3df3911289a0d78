"""Domain model for fact-check claims and their lifecycle status."""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

PLACEHOLDER_CID_PREFIX = "pending-ipfs-"


class ClaimStatus(str, Enum):
    """Lifecycle states of a claim."""

    PENDING = "PENDING"  # Stored, verification not started
    ANALYZING = "ANALYZING"  # Oracle call in flight
    VERIFIED = "VERIFIED"  # Truth score >= 50
    DEBUNKED = "DEBUNKED"  # Truth score < 50
    BROADCASTED = "BROADCASTED"  # Report logged and announced (terminal)


class AnalysisResults(BaseModel):
    """Oracle verdict attached to a claim once verification completes."""

    truth_score: int = Field(..., ge=0, le=100, description="0-100, where 100 is completely true")
    propaganda_flags: List[str] = Field(default_factory=list, description="Recognized propaganda techniques")
    summary: str = Field(default="", description="Factual summary of the analysis")

    @field_validator("truth_score", mode="before")
    @classmethod
    def normalize_score(cls, value):
        """Round numeric scores and clamp them into 0-100."""
        if isinstance(value, bool):
            raise ValueError("truth_score must be a number")
        if isinstance(value, str):
            value = float(value.strip())
        if isinstance(value, (int, float)):
            if not math.isfinite(value):
                raise ValueError("truth_score must be finite")
            return max(0, min(100, int(round(value))))
        return value

    @field_validator("propaganda_flags", mode="before")
    @classmethod
    def normalize_flags(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if not isinstance(value, (list, tuple)):
            raise ValueError("propaganda_flags must be a list")
        return [str(flag) for flag in value]

    @field_validator("summary", mode="before")
    @classmethod
    def normalize_summary(cls, value):
        return "" if value is None else str(value)


class Claim(BaseModel):
    """A single fact-check submission and its verification state."""

    id: str = Field(default_factory=lambda: str(uuid4()), description="Unique claim identifier")
    claim_text: str = Field(..., min_length=1, description="Trimmed claim text")
    source_url: Optional[str] = Field(None, description="Where the claim was seen")
    cid: str = Field(..., min_length=1, description="Content identifier of the archived record")
    status: ClaimStatus = Field(default=ClaimStatus.PENDING, description="Lifecycle status")
    analysis_results: Optional[AnalysisResults] = Field(None, description="Oracle verdict")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation time, the feed sort key",
    )

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "example": {
                "id": "3f1c2a9e-8d7b-4c6a-9e2f-1a2b3c4d5e6f",
                "claim_text": "The Great Wall of China is visible from space.",
                "source_url": "https://example.com/post/42",
                "cid": "pending-ipfs-3f1c2a9e",
                "status": "PENDING",
                "created_at": "2026-02-21T23:38:00+00:00",
            }
        }

    @property
    def has_placeholder_cid(self) -> bool:
        """Check whether the claim has not been archived yet."""
        return self.cid.startswith(PLACEHOLDER_CID_PREFIX)


class ClaimUpdate(BaseModel):
    """Partial update applied by the lifecycle engine."""

    status: Optional[ClaimStatus] = None
    cid: Optional[str] = None
    analysis_results: Optional[AnalysisResults] = None

    def to_fields(self) -> dict:
        """Serialize only the fields that were explicitly set."""
        return self.model_dump(mode="json", exclude_unset=True)


def placeholder_cid(claim_id: str) -> str:
    """Derive the placeholder CID from the first segment of a claim id."""
    return f"{PLACEHOLDER_CID_PREFIX}{claim_id.split('-')[0]}"
