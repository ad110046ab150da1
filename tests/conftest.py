"""
Test Configuration
==================

Pytest fixtures for relay tests.
"""

import os
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment
os.environ["ENVIRONMENT"] = "testing"
os.environ["RATE_LIMIT_BACKEND"] = "memory"
os.environ.setdefault("WORLDCOIN_APP_ID", "app_staging_test")

from shared.ratelimit import InMemoryRateLimiter  # noqa: E402
from shared.worldid import InMemoryVerificationStore, WorldIDVerifier  # noqa: E402


NULLIFIER_HASH = "0x2bf8406809dcefb1a3521e4e1f5c0f0b1bd7e9d4a1d2c3b4a5968778695a4b3c"
MERKLE_ROOT = "0x1f38b57f3bdf96f05ea62fa68814871bf0ca8ce4dbe073d8497d5a6b0a53e5e0"


class FakeAuthority:
    """
    Stand-in for the World ID verify endpoint.

    Set `response` to an httpx.Response to answer, or to an exception to
    simulate a transport failure.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.response: httpx.Response | Exception = httpx.Response(
            200,
            json={"success": True, "nullifier_hash": NULLIFIER_HASH},
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.response, Exception):
            raise self.response
        # Fresh copy: a Response object must not be sent twice.
        return httpx.Response(
            self.response.status_code,
            headers=self.response.headers,
            content=self.response.content,
        )


@pytest.fixture
def valid_payload() -> dict[str, Any]:
    """Well-formed proof payload as sent by the widget."""
    return {
        "merkle_root": MERKLE_ROOT,
        "nullifier_hash": NULLIFIER_HASH,
        "proof": "0x" + "ab" * 256,
        "verification_level": "orb",
        "action": "verify-human",
    }


@pytest.fixture
def authority() -> FakeAuthority:
    """Fresh fake authority for each test."""
    return FakeAuthority()


@pytest_asyncio.fixture
async def verifier(authority: FakeAuthority) -> AsyncGenerator[WorldIDVerifier, None]:
    """Verifier wired to the fake authority."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(authority.handler))
    verifier = WorldIDVerifier(
        app_id="app_staging_test",
        api_key="sk_test_key",
        api_url="https://authority.test/api/v1/verify",
        timeout_seconds=5.0,
        client=client,
    )
    yield verifier
    await verifier.aclose()


@pytest.fixture
def rate_limiter() -> InMemoryRateLimiter:
    """Fresh limiter so request counts never leak between tests."""
    return InMemoryRateLimiter()


@pytest.fixture
def verification_store() -> InMemoryVerificationStore:
    """Fresh record store."""
    return InMemoryVerificationStore()


@pytest_asyncio.fixture
async def verification_client(
    verifier: WorldIDVerifier,
    rate_limiter: InMemoryRateLimiter,
    verification_store: InMemoryVerificationStore,
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client for the Verification Service."""
    from services.verification.main import app
    from shared.ratelimit import get_rate_limiter
    from shared.worldid import get_verification_store, get_worldid_verifier

    app.dependency_overrides[get_worldid_verifier] = lambda: verifier
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    app.dependency_overrides[get_verification_store] = lambda: verification_store

    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
