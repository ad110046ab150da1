"""
World ID Module
===============

Server-side relay for World ID proofs.

Features:
- Boundary validation of proof payloads
- One-shot verification with the World ID authority
- Verification records with locally generated IDs
- Pluggable record storage

Usage:
    from shared.worldid import (
        VerificationRecorder,
        get_worldid_verifier,
        validate_payload,
    )

    request = validate_payload(body)
    outcome = await get_worldid_verifier().verify(request)
    if isinstance(outcome, Verified):
        record = VerificationRecorder().record(outcome)
"""

from shared.worldid.models import (
    DEFAULT_REJECTION_CODE,
    DEFAULT_REJECTION_MESSAGE,
    REQUIRED_FIELDS,
    InvalidField,
    MissingField,
    Rejected,
    TransportError,
    ValidationFailure,
    Verified,
    VerificationLevel,
    VerificationOutcome,
    VerificationRecord,
    VerificationRequest,
)
from shared.worldid.recorder import (
    VERIFICATION_ID_PATTERN,
    VerificationRecorder,
    generate_verification_id,
)
from shared.worldid.store import (
    InMemoryVerificationStore,
    VerificationStore,
    get_verification_store,
    reset_verification_store,
    set_verification_store,
)
from shared.worldid.validation import is_valid_hash, validate_payload
from shared.worldid.verifier import (
    WorldIDVerifier,
    close_worldid_verifier,
    get_worldid_verifier,
    set_worldid_verifier,
)

__all__ = [
    # Models
    "VerificationLevel",
    "VerificationRequest",
    "VerificationRecord",
    "REQUIRED_FIELDS",
    # Results
    "MissingField",
    "InvalidField",
    "ValidationFailure",
    "Verified",
    "Rejected",
    "TransportError",
    "VerificationOutcome",
    "DEFAULT_REJECTION_CODE",
    "DEFAULT_REJECTION_MESSAGE",
    # Validation
    "validate_payload",
    "is_valid_hash",
    # Upstream
    "WorldIDVerifier",
    "get_worldid_verifier",
    "set_worldid_verifier",
    "close_worldid_verifier",
    # Records
    "VerificationRecorder",
    "generate_verification_id",
    "VERIFICATION_ID_PATTERN",
    # Storage
    "VerificationStore",
    "InMemoryVerificationStore",
    "get_verification_store",
    "set_verification_store",
    "reset_verification_store",
]
