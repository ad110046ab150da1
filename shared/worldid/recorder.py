"""
Verification Recorder
=====================

Builds VerificationRecords from successful upstream outcomes.
"""

import re
import secrets
from collections.abc import Callable
from datetime import UTC, datetime

from shared.worldid.models import Verified, VerificationRecord


VERIFICATION_ID_PREFIX = "wid_"
VERIFICATION_ID_PATTERN = re.compile(r"^wid_[0-9a-f]{32}$")


def generate_verification_id() -> str:
    """Random 128-bit identifier, hex encoded, with the wid_ prefix."""
    return VERIFICATION_ID_PREFIX + secrets.token_hex(16)


class VerificationRecorder:
    """
    Turns a Verified outcome into an immutable record.

    No I/O happens here; handing the record to a VerificationStore is the
    caller's job.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(UTC))

    def record(self, outcome: Verified) -> VerificationRecord:
        return VerificationRecord(
            verification_id=generate_verification_id(),
            nullifier_hash=outcome.nullifier_hash,
            timestamp=self._clock(),
            verification_level=outcome.verification_level,
            action=outcome.action,
            app_id=outcome.app_id,
        )
