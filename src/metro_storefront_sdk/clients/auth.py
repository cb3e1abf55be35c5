from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from ..config import API_ROUTES
from ..credential_store import REFRESH_TOKEN_KEY, TOKEN_KEY, PersistenceTier
from ..envelope import ApiResult, extract_result
from ..events import TOKEN_UPDATED
from ..models import AuthenticationResult, LoginCredentials
from .base import BaseClient

logger = logging.getLogger(__name__)


class AuthClient(BaseClient):
    async def login(
        self,
        credentials: LoginCredentials | Mapping[str, Any],
        remember: bool = False,
    ) -> ApiResult:
        payload = credentials.model_dump() if isinstance(credentials, LoginCredentials) else dict(credentials)
        result = await self.http.request(
            API_ROUTES.auth.login, method="POST", body=payload, skip_auth_check=True
        )
        if not result.ok:
            logger.info("login_failure", extra={"status": result.status})
            return result

        data = extract_result(result.data)
        try:
            auth = AuthenticationResult.model_validate(data)
        except ValidationError:
            logger.warning("login_response_without_token", extra={"status": result.status})
            return ApiResult(ok=result.ok, status=result.status, data=data)

        tier = PersistenceTier.from_remember(remember)
        self.http.store.save_login(auth.token, tier, refresh_token=auth.refresh_token)
        self.http.store.events.emit(TOKEN_UPDATED, {"tier": tier.value})
        logger.info("login_success", extra={"tier": tier.value})
        return ApiResult(ok=True, status=result.status, data=data)

    async def register(self, user_data: Mapping[str, Any]) -> ApiResult:
        result = await self.http.request(
            API_ROUTES.auth.register, method="POST", body=dict(user_data), skip_auth_check=True
        )
        if result.ok:
            return ApiResult(ok=True, status=result.status, data=extract_result(result.data))
        return result

    async def refresh_token(self, token: str | None = None) -> ApiResult:
        store = self.http.store
        token_to_use = token or store.read(TOKEN_KEY) or store.read(REFRESH_TOKEN_KEY)
        if not token_to_use:
            return ApiResult(ok=False, status=0, data={"message": "No token available to refresh"})

        result = await self.http.request(
            API_ROUTES.auth.refresh,
            method="POST",
            body={"token": token_to_use},
            skip_auth_check=True,
        )
        data = extract_result(result.data)
        if result.ok and isinstance(data, dict) and data.get("token"):
            store.replace_token(str(data["token"]))
        return ApiResult(ok=result.ok, status=result.status, data=data)

    async def change_password(self, password_data: Mapping[str, Any]) -> ApiResult:
        return await self._request(API_ROUTES.auth.change_password, method="POST", body=dict(password_data))
