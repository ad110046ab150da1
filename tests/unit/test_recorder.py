"""
Unit tests for verification records and their store.
"""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from shared.worldid import (
    VERIFICATION_ID_PATTERN,
    InMemoryVerificationStore,
    Verified,
    VerificationLevel,
    VerificationRecord,
    VerificationRecorder,
    generate_verification_id,
)


NULLIFIER = "0x" + "5d" * 32


@pytest.fixture
def verified() -> Verified:
    return Verified(
        nullifier_hash=NULLIFIER,
        verification_level=VerificationLevel.DEVICE,
        action="verify-human",
        app_id="app_staging_test",
    )


class TestVerificationId:
    """Tests for ID generation."""

    def test_format(self) -> None:
        assert VERIFICATION_ID_PATTERN.match(generate_verification_id())

    def test_ids_are_unique(self) -> None:
        ids = {generate_verification_id() for _ in range(1000)}

        assert len(ids) == 1000


class TestVerificationRecorder:
    """Tests for VerificationRecorder."""

    def test_record_fields(self, verified: Verified) -> None:
        fixed = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)
        recorder = VerificationRecorder(clock=lambda: fixed)

        record = recorder.record(verified)

        assert VERIFICATION_ID_PATTERN.match(record.verification_id)
        assert record.nullifier_hash == NULLIFIER
        assert record.timestamp == fixed
        assert record.verification_level == VerificationLevel.DEVICE
        assert record.action == "verify-human"
        assert record.app_id == "app_staging_test"
        assert record.verified is True

    def test_same_outcome_gets_new_id(self, verified: Verified) -> None:
        """Replayed nullifiers are not deduplicated here."""
        recorder = VerificationRecorder()

        first = recorder.record(verified)
        second = recorder.record(verified)

        assert first.verification_id != second.verification_id
        assert first.nullifier_hash == second.nullifier_hash

    def test_record_is_immutable(self, verified: Verified) -> None:
        record = VerificationRecorder().record(verified)

        with pytest.raises(ValidationError):
            record.verified = False  # type: ignore[misc]

    def test_nullifier_preview(self, verified: Verified) -> None:
        record = VerificationRecorder().record(verified)

        assert record.nullifier_preview == NULLIFIER[:10] + "..."

    def test_verified_cannot_be_false(self) -> None:
        with pytest.raises(ValidationError):
            VerificationRecord(
                verification_id="wid_" + "0" * 32,
                nullifier_hash=NULLIFIER,
                verification_level=VerificationLevel.ORB,
                action="verify-human",
                app_id="app_staging_test",
                verified=False,  # type: ignore[arg-type]
            )


class TestInMemoryVerificationStore:
    """Tests for InMemoryVerificationStore."""

    @pytest.mark.asyncio
    async def test_store_and_get(self, verified: Verified) -> None:
        store = InMemoryVerificationStore()
        record = VerificationRecorder().record(verified)

        assert await store.store(record) is True
        assert await store.get(record.verification_id) == record
        assert await store.get("wid_missing") is None

    @pytest.mark.asyncio
    async def test_keeps_duplicate_nullifiers(self, verified: Verified) -> None:
        store = InMemoryVerificationStore()
        recorder = VerificationRecorder()

        await store.store(recorder.record(verified))
        await store.store(recorder.record(verified))

        assert len(await store.find_by_nullifier(NULLIFIER)) == 2

    @pytest.mark.asyncio
    async def test_evicts_oldest_beyond_capacity(self, verified: Verified) -> None:
        store = InMemoryVerificationStore(max_records=2)
        recorder = VerificationRecorder()
        records = [recorder.record(verified) for _ in range(3)]

        for record in records:
            await store.store(record)

        assert len(store) == 2
        assert await store.get(records[0].verification_id) is None
        assert await store.get(records[2].verification_id) == records[2]

    @pytest.mark.asyncio
    async def test_clear_all(self, verified: Verified) -> None:
        store = InMemoryVerificationStore()
        await store.store(VerificationRecorder().record(verified))

        store.clear_all()

        assert len(store) == 0
