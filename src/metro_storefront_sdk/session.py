from __future__ import annotations

import logging

import httpx

from .clients.auth import AuthClient
from .clients.users import UsersClient
from .config import ClientConfig, load_config
from .credential_store import CredentialStore
from .events import SessionEvents
from .http_client import HttpClient
from .logout import AutoLogoutController, Navigator
from .refresh import RefreshCoordinator
from .session_context import SessionContext
from .storage import FileStorage, KeyValueStorage, MemoryStorage

logger = logging.getLogger(__name__)


class StorefrontSession:
    """One instance per process: wires storage, executor, refresh and logout together."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        durable: KeyValueStorage | None = None,
        session_storage: KeyValueStorage | None = None,
        navigator: Navigator | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_config()
        self.events = SessionEvents()
        self.store = CredentialStore(
            durable=durable if durable is not None else FileStorage(app_name=self.config.app_name),
            session=session_storage if session_storage is not None else MemoryStorage(),
            events=self.events,
        )
        self._client = httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            verify=self.config.verify_ssl,
            transport=transport,
        )
        self.refresher = RefreshCoordinator(self._client, self.config, self.store)
        self.logout_controller = AutoLogoutController(self.store, self.config, navigator=navigator)
        self.http = HttpClient(
            self.config,
            self.store,
            client=self._client,
            refresher=self.refresher,
            logout=self.logout_controller,
        )
        self.auth = AuthClient(http=self.http)
        self.users = UsersClient(http=self.http)
        self.context = SessionContext(
            self.store,
            fetch_role=self.users.get_user_role,
            logout_controller=self.logout_controller,
        )
        logger.info("storefront_session_ready", extra={"has_token": self.context.token is not None})

    async def aclose(self) -> None:
        self.context.close()
        await self.http.aclose()

    async def __aenter__(self) -> "StorefrontSession":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
