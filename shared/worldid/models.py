"""
World ID Data Models
====================

Pydantic models and tagged results for proof verification.

Version: 0.1.0
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from shared.logging import mask_hash


REQUIRED_FIELDS: tuple[str, ...] = (
    "merkle_root",
    "nullifier_hash",
    "proof",
    "verification_level",
    "action",
)

DEFAULT_REJECTION_MESSAGE = "World ID verification failed"
DEFAULT_REJECTION_CODE = "VERIFICATION_FAILED"


class VerificationLevel(str, Enum):
    """Assurance tier of a proof."""

    ORB = "orb"
    DEVICE = "device"


class VerificationRequest(BaseModel):
    """A proof payload that passed boundary validation."""

    model_config = ConfigDict(frozen=True)

    merkle_root: str = Field(..., min_length=1, description="Identity set commitment")
    nullifier_hash: str = Field(..., min_length=1, description="Per identity+action key")
    proof: str = Field(..., min_length=1, description="Opaque zero-knowledge proof")
    verification_level: VerificationLevel
    action: str = Field(..., min_length=1, description="Verification purpose")


# ============================================================================
# Validation Results
# ============================================================================


@dataclass(frozen=True)
class MissingField:
    """One or more required fields are absent or empty."""

    fields: tuple[str, ...]

    @property
    def message(self) -> str:
        return "Missing required fields for verification: " + ", ".join(self.fields)


@dataclass(frozen=True)
class InvalidField:
    """A field is present but has the wrong shape."""

    field: str
    reason: str

    @property
    def message(self) -> str:
        return f"Invalid field '{self.field}': {self.reason}"


ValidationFailure = MissingField | InvalidField


# ============================================================================
# Upstream Outcomes
# ============================================================================


@dataclass(frozen=True)
class Verified:
    """The authority accepted the proof."""

    nullifier_hash: str
    verification_level: VerificationLevel
    action: str
    app_id: str


@dataclass(frozen=True)
class Rejected:
    """The authority answered and refused the proof."""

    reason: str = DEFAULT_REJECTION_MESSAGE
    code: str = DEFAULT_REJECTION_CODE


@dataclass(frozen=True)
class TransportError:
    """The authority could not be reached or answered unintelligibly."""

    reason: str


VerificationOutcome = Verified | Rejected | TransportError


# ============================================================================
# Records
# ============================================================================


class VerificationRecord(BaseModel):
    """
    Proof that a human was verified for an action.

    Built only after a successful round trip with the authority. The
    verification_id is generated locally, never taken from upstream.
    """

    model_config = ConfigDict(frozen=True)

    verification_id: str
    nullifier_hash: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    verification_level: VerificationLevel
    action: str
    app_id: str
    verified: Literal[True] = True

    @property
    def nullifier_preview(self) -> str:
        """Nullifier hash safe to hand back to clients."""
        return mask_hash(self.nullifier_hash)
