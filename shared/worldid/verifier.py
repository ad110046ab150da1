"""
World ID Upstream Verifier
==========================

Forwards a validated proof to the World ID verification authority and maps
its answer to Verified / Rejected / TransportError.

One attempt per request. Retrying is left to the user (the UI re-submits).

Version: 0.1.0
"""

import asyncio
from typing import Any

import httpx
from pydantic import SecretStr

from shared.config import settings
from shared.logging import get_logger
from shared.worldid.models import (
    DEFAULT_REJECTION_CODE,
    DEFAULT_REJECTION_MESSAGE,
    Rejected,
    TransportError,
    Verified,
    VerificationOutcome,
    VerificationRequest,
)


logger = get_logger(__name__)


class WorldIDVerifier:
    """
    Client for the World ID verify endpoint.

    Configuration is fixed at construction; nothing is read from the
    environment while a request is being handled.
    """

    def __init__(
        self,
        app_id: str,
        api_key: SecretStr | str,
        api_url: str = "https://developer.worldcoin.org/api/v1/verify",
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the verifier.

        Args:
            app_id: Application identifier registered with World ID
            api_key: Bearer credential for the authority
            api_url: Verify endpoint
            timeout_seconds: Upper bound for the whole upstream call
            client: Pre-built HTTP client (tests inject a mock transport)
        """
        self.app_id = app_id
        self._api_key = api_key if isinstance(api_key, SecretStr) else SecretStr(api_key)
        self.api_url = api_url
        self.timeout_seconds = timeout_seconds
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
        )

        if not self._api_key.get_secret_value():
            logger.warning(
                "worldid_api_key_missing",
                app_id=app_id,
                detail="upstream calls will fail authentication",
            )

        logger.debug(
            "worldid_verifier_initialized",
            app_id=app_id,
            api_url=api_url,
            timeout_seconds=timeout_seconds,
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        key = self._api_key.get_secret_value()
        if key:
            headers["Authorization"] = f"Bearer {key}"
        return headers

    def build_body(self, request: VerificationRequest) -> dict[str, str]:
        """Body sent to the authority."""
        return {
            "app_id": self.app_id,
            "nullifier_hash": request.nullifier_hash,
            "merkle_root": request.merkle_root,
            "proof": request.proof,
            "verification_level": request.verification_level.value,
            "action": request.action,
        }

    async def verify(self, request: VerificationRequest) -> VerificationOutcome:
        """
        Verify a proof with the authority.

        Args:
            request: Validated proof payload

        Returns:
            Verified, Rejected, or TransportError
        """
        logger.info(
            "worldid_verification_started",
            action=request.action,
            verification_level=request.verification_level.value,
            nullifier_hash=request.nullifier_hash,
        )

        try:
            # httpx timeouts are per phase; the deadline covers the whole call.
            async with asyncio.timeout(self.timeout_seconds):
                response = await self._client.post(
                    self.api_url,
                    json=self.build_body(request),
                    headers=self._headers(),
                    timeout=self.timeout_seconds,
                )
        except (httpx.TimeoutException, TimeoutError) as e:
            logger.error("worldid_timeout", timeout_seconds=self.timeout_seconds, error=str(e))
            return TransportError(reason="Verification authority timed out")
        except httpx.HTTPError as e:
            logger.error("worldid_transport_error", error=str(e), error_type=type(e).__name__)
            return TransportError(reason=f"Could not reach verification authority: {e}")

        try:
            result: Any = response.json()
        except ValueError as e:
            logger.error(
                "worldid_malformed_response",
                status_code=response.status_code,
                error=str(e),
            )
            return TransportError(reason="Verification authority returned a non-JSON response")

        if not isinstance(result, dict):
            logger.error("worldid_unexpected_body", status_code=response.status_code)
            return TransportError(reason="Verification authority returned an unexpected body")

        # A 5xx means the proof was never judged, so it is not a rejection.
        if response.is_server_error:
            logger.error(
                "worldid_server_error",
                status_code=response.status_code,
                code=result.get("code"),
            )
            return TransportError(
                reason=f"Verification authority failed with status {response.status_code}",
            )

        if response.is_success and result.get("success") is True:
            logger.info(
                "worldid_verification_succeeded",
                action=request.action,
                nullifier_hash=request.nullifier_hash,
            )
            return Verified(
                nullifier_hash=request.nullifier_hash,
                verification_level=request.verification_level,
                action=request.action,
                app_id=self.app_id,
            )

        detail = result.get("detail") or DEFAULT_REJECTION_MESSAGE
        code = result.get("code") or DEFAULT_REJECTION_CODE
        logger.warning(
            "worldid_verification_rejected",
            status_code=response.status_code,
            code=code,
            detail=detail,
        )
        return Rejected(reason=str(detail), code=str(code))

    async def aclose(self) -> None:
        """Release the HTTP connection pool."""
        await self._client.aclose()


_verifier: WorldIDVerifier | None = None


def get_worldid_verifier() -> WorldIDVerifier:
    """
    Get the process-wide verifier, building it from settings on first use.

    Returns:
        WorldIDVerifier instance
    """
    global _verifier

    if _verifier is None:
        config = settings.worldid
        _verifier = WorldIDVerifier(
            app_id=config.app_id,
            api_key=config.api_key,
            api_url=config.api_url,
            timeout_seconds=config.timeout_seconds,
        )
        logger.info("worldid_verifier_created", app_id=config.app_id)

    return _verifier


def set_worldid_verifier(verifier: WorldIDVerifier) -> None:
    """
    Set a custom verifier.

    Args:
        verifier: WorldIDVerifier instance
    """
    global _verifier
    _verifier = verifier


async def close_worldid_verifier() -> None:
    """Close and forget the process-wide verifier."""
    global _verifier

    if _verifier is not None:
        await _verifier.aclose()
        _verifier = None
        logger.info("worldid_verifier_closed")
