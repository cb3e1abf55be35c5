from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import httpx
import pytest

BASE_DIR = Path(__file__).resolve().parents[1]
SDK_SRC = BASE_DIR / "src"

sys.path.insert(0, str(SDK_SRC))

from metro_storefront_sdk.config import ClientConfig  # noqa: E402
from metro_storefront_sdk.credential_store import CredentialStore  # noqa: E402
from metro_storefront_sdk.events import SessionEvents  # noqa: E402
from metro_storefront_sdk.http_client import HttpClient  # noqa: E402
from metro_storefront_sdk.logout import AutoLogoutController, RecordingNavigator  # noqa: E402
from metro_storefront_sdk.storage import MemoryStorage  # noqa: E402

API_BASE = "https://api.example.test/lumina_book"


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        api_base_url=API_BASE,
        logout_redirect_delay_seconds=0,
        logout_guard_reset_seconds=1.0,
    )


@pytest.fixture
def store() -> CredentialStore:
    return CredentialStore(durable=MemoryStorage(), session=MemoryStorage(), events=SessionEvents())


class FakeBackend:
    """Minimal storefront API behind ``httpx.MockTransport``."""

    prefix = "/lumina_book"

    def __init__(self, valid_tokens: set[str] | None = None, refresh_delay: float = 0.01) -> None:
        self.valid_tokens = set(valid_tokens or {"fresh"})
        self.refresh_delay = refresh_delay
        self.refresh_status = 200
        self.accept_refreshed = True
        self.issued_token = "fresh"
        self.role: object = {"name": "ADMIN"}
        self.refresh_calls = 0
        self.requests: list[httpx.Request] = []

    def calls_to(self, path: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.url.path == f"{self.prefix}{path}"]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix(self.prefix)
        if path == "/auth/refresh":
            return await self._refresh(request)
        if path == "/auth/token":
            payload = json.loads(request.content or b"{}")
            if payload.get("password") != "secret":
                return httpx.Response(401, json={"code": 1005, "message": "Unauthenticated"})
            return httpx.Response(200, json={"code": 1000, "result": {"token": "fresh", "authenticated": True}})

        if path == "/account/locked":
            return httpx.Response(401, json={"code": 1007, "message": "Account locked"})

        token = request.headers.get("Authorization", "").removeprefix("Bearer ")
        if token not in self.valid_tokens:
            return httpx.Response(401, json={"code": 1006, "message": "Unauthenticated: Token invalid"})
        if path == "/users/my-info":
            return httpx.Response(
                200,
                json={"code": 1000, "result": {"id": "u-1", "email": "an@metro.vn", "fullName": "An", "role": self.role}},
            )
        return httpx.Response(200, json={"code": 1000, "result": {"path": path, "token": token}})

    async def _refresh(self, request: httpx.Request) -> httpx.Response:
        self.refresh_calls += 1
        await asyncio.sleep(self.refresh_delay)
        if self.refresh_status != 200:
            return httpx.Response(self.refresh_status, json={"code": 1006, "message": "Token invalid"})
        if self.accept_refreshed:
            self.valid_tokens.add(self.issued_token)
        return httpx.Response(200, json={"code": 1000, "result": {"token": self.issued_token, "authenticated": True}})


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator(path="/admin/orders")


@pytest.fixture
def make_http(config, store, navigator):
    def _make(backend: FakeBackend) -> HttpClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(backend))
        return HttpClient(
            config,
            store,
            client=client,
            logout=AutoLogoutController(store, config, navigator=navigator),
        )

    return _make
