from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .credential_store import TOKEN_KEY, CredentialStore, PersistenceTier, normalize_token
from .events import AUTH_CHANGE, TOKEN_UPDATED
from .logout import AutoLogoutController

logger = logging.getLogger(__name__)

RoleFetcher = Callable[[str], Awaitable[str | None]]

LOGIN_STEP = "login"


class SessionContext:
    """Process-wide auth state read by UI consumers.

    ``token`` changes schedule a role lookup. Results that arrive after the
    token moved on, or after ``close()``, are dropped.
    """

    def __init__(
        self,
        store: CredentialStore,
        fetch_role: RoleFetcher,
        logout_controller: AutoLogoutController,
    ) -> None:
        self._store = store
        self._fetch_role = fetch_role
        self._logout_controller = logout_controller
        self._generation = 0
        self._role_task: asyncio.Task[None] | None = None
        self._role_pending = False
        self._closed = False

        self.token: str | None = store.read(TOKEN_KEY)
        self.role: str | None = None
        self.is_loading = self.token is not None
        self.auth_step: str | None = None
        self.auth_redirect_path: str | None = None

        self._unsubscribe = store.events.subscribe(TOKEN_UPDATED, self._on_token_updated)
        if self.token:
            self._schedule_role_fetch()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def is_auth_modal_open(self) -> bool:
        return self.auth_step is not None

    def snapshot(self) -> dict[str, Any]:
        return {
            "token": self.token,
            "role": self.role,
            "isLoading": self.is_loading,
            "authStep": self.auth_step,
            "authRedirectPath": self.auth_redirect_path,
        }

    def login(self, token: str, role: str | None = None, remember: bool = False) -> None:
        normalized = normalize_token(token)
        if not normalized:
            raise ValueError("login requires a non-empty token")
        token = normalized
        self._store.save_login(token, PersistenceTier.from_remember(remember))
        self._generation += 1
        self.token = token
        if role:
            self.role = role
            self.is_loading = False
        else:
            self.role = None
            self._schedule_role_fetch()
        self._store.events.emit(TOKEN_UPDATED, {"source": "login"})
        self._store.events.emit(AUTH_CHANGE, {"authenticated": True})

    def logout(self) -> None:
        self._logout_controller.clear_session()
        self._apply_token(None)
        self._store.events.emit(AUTH_CHANGE, {"authenticated": False})

    def open_login_modal(self, redirect_path: str | None = None) -> None:
        self.auth_step = LOGIN_STEP
        self.auth_redirect_path = redirect_path

    def close_auth_modal(self) -> str | None:
        redirect = self.auth_redirect_path
        self.auth_step = None
        self.auth_redirect_path = None
        return redirect

    async def wait_ready(self) -> None:
        """Resolve a role lookup that could not be scheduled at construction time."""
        if self._role_pending and self._role_task is None:
            await self._resolve_role(self._generation, self.token)
        elif self._role_task is not None:
            await asyncio.shield(self._role_task)

    def close(self) -> None:
        self._closed = True
        self._unsubscribe()
        if self._role_task is not None and not self._role_task.done():
            self._role_task.cancel()
        self._role_task = None

    def _on_token_updated(self, _payload: Any) -> None:
        if self._closed:
            return
        stored = self._store.read(TOKEN_KEY)
        if stored != self.token:
            self._apply_token(stored)

    def _apply_token(self, token: str | None) -> None:
        self._generation += 1
        self.token = token
        self.role = None
        if token:
            self._schedule_role_fetch()
        else:
            self._role_pending = False
            self.is_loading = False

    def _schedule_role_fetch(self) -> None:
        self.is_loading = True
        generation, token = self._generation, self.token
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._role_pending = True
            self._role_task = None
            return
        self._role_pending = False
        self._role_task = loop.create_task(self._resolve_role(generation, token))

    async def _resolve_role(self, generation: int, token: str | None) -> None:
        self._role_pending = False
        if not token:
            self.is_loading = False
            return
        try:
            role = await self._fetch_role(token)
        except Exception:
            logger.exception("role_fetch_failed")
            if self._is_current(generation):
                self.is_loading = False
            return
        if not self._is_current(generation):
            logger.debug("role_fetch_discarded", extra={"generation": generation})
            return
        self.role = role
        self.is_loading = False

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation
