"""Domain models for lifecycle transitions and retry policies."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, FrozenSet, List

from pydantic import BaseModel, Field, field_validator

from .claim import ClaimStatus


class TransitionStage(str, Enum):
    """Lifecycle stages that can be requested for a claim."""

    VERIFY = "verify"
    BROADCAST = "broadcast"


# Statuses from which a queued job may run its stage
STAGE_PRECONDITIONS: Dict[TransitionStage, FrozenSet[ClaimStatus]] = {
    TransitionStage.VERIFY: frozenset({ClaimStatus.PENDING, ClaimStatus.ANALYZING}),
    TransitionStage.BROADCAST: frozenset({ClaimStatus.VERIFIED, ClaimStatus.DEBUNKED}),
}


@dataclass(frozen=True)
class TransitionJob:
    """A request to run one lifecycle stage for one claim."""

    stage: TransitionStage
    claim_id: str
    attempt: int = 1

    def next_attempt(self) -> "TransitionJob":
        """Copy of this job for redelivery."""
        return replace(self, attempt=self.attempt + 1)


class BackoffPolicy(BaseModel):
    """Bounded retry policy with an explicit delay sequence.

    The delay before attempt ``n`` (1-based) is ``delays[n - 1]``; attempts
    beyond the sequence reuse its last value.
    """

    max_attempts: int = Field(default=5, ge=1, description="Total attempts including the first")
    delays: List[float] = Field(
        default_factory=lambda: [1.0, 4.0, 8.0, 12.0],
        description="Delays in seconds, one per attempt",
    )

    @field_validator("delays")
    @classmethod
    def validate_delays(cls, value: List[float]) -> List[float]:
        if not value:
            raise ValueError("delays must not be empty")
        if any(delay < 0 for delay in value):
            raise ValueError("delays must be non-negative")
        return value

    def delay_for(self, attempt: int) -> float:
        """Get the delay to wait before the given attempt."""
        index = min(max(attempt, 1), len(self.delays)) - 1
        return self.delays[index]
