from __future__ import annotations

import json
import logging
import time
from collections.abc import Mapping
from typing import Any

import httpx

from .config import API_ROUTES, ClientConfig
from .credential_store import TOKEN_KEY, CredentialStore
from .envelope import ApiResult, parse_body
from .exceptions import SESSION_EXPIRED_MESSAGE, RequestArgumentError
from .logout import AutoLogoutController
from .observability import log_json
from .refresh import RefreshCoordinator

logger = logging.getLogger(__name__)

TOKEN_INVALID_MARKERS = ("Token invalid", "expired", "Unauthorized", "UNAUTHENTICATED")
_METHODS = {"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"}


def is_token_invalid(error_data: Any) -> bool:
    message: Any = None
    if isinstance(error_data, Mapping):
        message = error_data.get("message") or error_data.get("error")
    text = str(message) if message else "Token invalid"
    return any(marker in text for marker in TOKEN_INVALID_MARKERS)


def session_expired_result() -> ApiResult:
    return ApiResult(
        ok=False,
        status=401,
        data={"message": SESSION_EXPIRED_MESSAGE, "autoLoggedOut": True},
    )


def _split_form(body: Mapping[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    fields: dict[str, Any] = {}
    files: dict[str, Any] = {}
    for key, value in body.items():
        if isinstance(value, (str, int, float, bool)):
            fields[key] = str(value)
        else:
            files[key] = value
    return fields, files


class HttpClient:
    """Authenticated request executor.

    Failures reachable by callers (network, parse, auth) come back as
    ``ApiResult(ok=False, ...)``. A recognised 401 is recovered once through
    the refresh coordinator; a second 401 on the retried call is returned as is.
    """

    def __init__(
        self,
        config: ClientConfig,
        store: CredentialStore,
        client: httpx.AsyncClient | None = None,
        refresher: RefreshCoordinator | None = None,
        logout: AutoLogoutController | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self._client = client or httpx.AsyncClient(timeout=config.timeout_seconds, verify=config.verify_ssl)
        self.refresher = refresher or RefreshCoordinator(self._client, config, store)
        self.logout_controller = logout or AutoLogoutController(store, config)
        self.refresh_path = API_ROUTES.auth.refresh

    async def aclose(self) -> None:
        await self._client.aclose()

    def _build_headers(self, token: str | None, is_form_data: bool) -> dict[str, str]:
        headers: dict[str, str] = {"Accept": "application/json"}
        if not is_form_data:
            headers["Content-Type"] = "application/json"
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _body_kwargs(self, body: Any, is_form_data: bool) -> dict[str, Any]:
        if body is None:
            return {}
        if not is_form_data:
            return {"content": json.dumps(body).encode("utf-8")}
        if not isinstance(body, Mapping):
            raise RequestArgumentError("form data body must be a mapping of field name to value")
        fields, files = _split_form(body)
        kwargs: dict[str, Any] = {}
        if fields:
            kwargs["data"] = fields
        if files:
            kwargs["files"] = files
        return kwargs

    async def request(
        self,
        path: str,
        *,
        method: str = "GET",
        body: Any = None,
        token: str | None = None,
        is_form_data: bool = False,
        skip_auth_check: bool = False,
        is_retry: bool = False,
        params: Mapping[str, Any] | None = None,
    ) -> ApiResult:
        if not isinstance(path, str) or not path:
            raise RequestArgumentError("path must be a non-empty string")
        normalized_method = method.upper()
        if normalized_method not in _METHODS:
            raise RequestArgumentError(f"Unsupported HTTP method: {method!r}")

        token_to_use = token or self.store.read(TOKEN_KEY)
        headers = self._build_headers(token_to_use, is_form_data)
        body_kwargs = self._body_kwargs(body, is_form_data)

        started = time.monotonic()
        try:
            response = await self._client.request(
                normalized_method,
                self.config.url(path),
                headers=headers,
                params=dict(params) if params else None,
                **body_kwargs,
            )
        except httpx.HTTPError as exc:
            logger.error(
                "api_request_failed",
                extra={"method": normalized_method, "endpoint": path, "error": type(exc).__name__},
            )
            return ApiResult(ok=False, status=0, data={}, error=exc)

        if response.status_code == 401 and not skip_auth_check and token_to_use and not is_retry:
            return await self._handle_unauthorized(
                response,
                path,
                method=normalized_method,
                body=body,
                token=token_to_use,
                is_form_data=is_form_data,
                params=params,
            )

        data = self._read_data(response, path)
        log_json(
            logger,
            {
                "event": "api_request",
                "method": normalized_method,
                "endpoint": path,
                "status": response.status_code,
                "retry": is_retry,
                "duration_ms": int((time.monotonic() - started) * 1000),
            },
            level=logging.DEBUG,
        )
        return ApiResult(ok=response.is_success, status=response.status_code, data=data)

    async def _handle_unauthorized(
        self,
        response: httpx.Response,
        path: str,
        *,
        method: str,
        body: Any,
        token: str,
        is_form_data: bool,
        params: Mapping[str, Any] | None,
    ) -> ApiResult:
        error_data: Any = {}
        content_type = response.headers.get("content-type") or ""
        if "application/json" in content_type and response.text.strip():
            try:
                error_data = json.loads(response.text)
            except ValueError:
                error_data = {}

        if not is_token_invalid(error_data):
            return ApiResult(ok=False, status=401, data=error_data)

        if path == self.refresh_path:
            logger.warning("refresh_endpoint_unauthorized")
            self.logout_controller.logout()
            return session_expired_result()

        logger.info("token_expired_refreshing", extra={"endpoint": path})
        outcome = await self.refresher.refresh(token)
        if outcome.success and outcome.token:
            logger.info("token_refreshed_retrying", extra={"endpoint": path})
            return await self.request(
                path,
                method=method,
                body=body,
                token=outcome.token,
                is_form_data=is_form_data,
                is_retry=True,
                params=params,
            )

        logger.warning("token_refresh_failed_logging_out", extra={"endpoint": path, "reason": outcome.error})
        self.logout_controller.logout()
        return session_expired_result()

    @staticmethod
    def _read_data(response: httpx.Response, path: str) -> Any:
        try:
            text = response.text
        except (UnicodeDecodeError, httpx.HTTPError):
            logger.warning("api_response_unreadable", extra={"endpoint": path})
            return {}
        parsed = parse_body(text, response.headers.get("content-type"), response.status_code)
        return parsed.to_data()
