from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import httpx

from .config import API_ROUTES, ClientConfig
from .credential_store import CredentialStore
from .envelope import extract_result, parse_body

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshOutcome:
    success: bool
    token: str | None = None
    error: str | None = None


class RefreshCoordinator:
    """Single-flight token refresh.

    While a refresh is running every caller awaits the same task, so the
    backend sees at most one ``/auth/refresh`` call per expiry.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        config: ClientConfig,
        store: CredentialStore,
        refresh_path: str = API_ROUTES.auth.refresh,
    ) -> None:
        self._client = client
        self._config = config
        self._store = store
        self._refresh_path = refresh_path
        self._inflight: asyncio.Task[RefreshOutcome] | None = None
        self.calls = 0

    @property
    def is_refreshing(self) -> bool:
        return self._inflight is not None

    async def refresh(self, current_token: str) -> RefreshOutcome:
        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._run(current_token))
        # shield: a cancelled caller must not cancel the refresh other callers share
        return await asyncio.shield(self._inflight)

    async def _run(self, current_token: str) -> RefreshOutcome:
        self.calls += 1
        try:
            return await self._exchange(current_token)
        finally:
            self._inflight = None

    async def _exchange(self, current_token: str) -> RefreshOutcome:
        try:
            response = await self._client.post(
                self._config.url(self._refresh_path),
                json={"token": current_token},
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            logger.warning("token_refresh_transport_error", extra={"error": type(exc).__name__})
            return RefreshOutcome(success=False, error=str(exc) or type(exc).__name__)

        data = parse_body(response.text, response.headers.get("content-type"), response.status_code).to_data()
        result = extract_result(data) if response.is_success else None
        new_token = result.get("token") if isinstance(result, dict) else None
        if not new_token:
            message = data.get("message") if isinstance(data, dict) else None
            logger.warning("token_refresh_rejected", extra={"status": response.status_code})
            return RefreshOutcome(success=False, error=str(message or "Token refresh failed"))

        tiers = self._store.replace_token(str(new_token))
        logger.info("token_refresh_success", extra={"tiers": [tier.value for tier in tiers]})
        return RefreshOutcome(success=True, token=str(new_token))
