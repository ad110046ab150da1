"""
Request Validation
==================

Boundary checks for inbound proof payloads. Returns tagged results so the
route can branch without using exceptions for control flow.
"""

import re
from typing import Any

from pydantic import ValidationError

from shared.worldid.models import (
    REQUIRED_FIELDS,
    InvalidField,
    MissingField,
    ValidationFailure,
    VerificationLevel,
    VerificationRequest,
)


HASH_PATTERN = re.compile(r"^0x[a-fA-F0-9]{64}$")
HASH_FIELDS = ("merkle_root", "nullifier_hash")


def is_valid_hash(value: Any) -> bool:
    """Check for a 0x-prefixed 32-byte hex string."""
    return isinstance(value, str) and HASH_PATTERN.match(value) is not None


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def validate_payload(
    payload: Any,
    enforce_hash_format: bool = True,
) -> VerificationRequest | ValidationFailure:
    """
    Turn a decoded JSON body into a VerificationRequest.

    Args:
        payload: Decoded request body
        enforce_hash_format: Require merkle_root/nullifier_hash to be 0x + 64 hex

    Returns:
        VerificationRequest, or MissingField / InvalidField describing the problem
    """
    if not isinstance(payload, dict):
        return MissingField(fields=REQUIRED_FIELDS)

    missing = tuple(f for f in REQUIRED_FIELDS if _is_blank(payload.get(f)))
    if missing:
        return MissingField(fields=missing)

    for name in REQUIRED_FIELDS:
        if not isinstance(payload[name], str):
            return InvalidField(field=name, reason="must be a string")

    levels = [level.value for level in VerificationLevel]
    if payload["verification_level"] not in levels:
        return InvalidField(
            field="verification_level",
            reason="must be one of " + ", ".join(levels),
        )

    if enforce_hash_format:
        for name in HASH_FIELDS:
            if not is_valid_hash(payload[name]):
                return InvalidField(field=name, reason="must be 0x followed by 64 hex characters")

    try:
        return VerificationRequest.model_validate({f: payload[f] for f in REQUIRED_FIELDS})
    except ValidationError as e:
        error = e.errors()[0]
        location = error["loc"][0] if error["loc"] else "payload"
        return InvalidField(field=str(location), reason=error["msg"])
