from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Protocol

from .config import ClientConfig
from .credential_store import CREDENTIAL_KEYS, CredentialStore
from .events import DISPLAY_NAME_UPDATED, TOKEN_UPDATED

logger = logging.getLogger(__name__)

AUTH_ENTRY_MARKER = "/login"


class Navigator(Protocol):
    def current_path(self) -> str | None: ...

    def navigate(self, path: str) -> None: ...


class RecordingNavigator:
    """Navigator for headless use: remembers where it was sent."""

    def __init__(self, path: str = "/") -> None:
        self.path = path
        self.visited: list[str] = []

    def current_path(self) -> str | None:
        return self.path

    def navigate(self, path: str) -> None:
        self.visited.append(path)
        self.path = path


class AutoLogoutController:
    """Clears credentials and sends the user home when the session is exhausted.

    Concurrent callers are collapsed into one clear/redirect cycle; the guard
    re-opens once ``logout_guard_reset_seconds`` have passed.
    """

    def __init__(
        self,
        store: CredentialStore,
        config: ClientConfig,
        navigator: Navigator | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._config = config
        self._navigator = navigator
        self._clock = clock
        self._guard_until: float | None = None
        self._pending_redirect: asyncio.TimerHandle | None = None
        self.cycles = 0

    @property
    def in_progress(self) -> bool:
        if self._guard_until is None:
            return False
        if self._clock() >= self._guard_until:
            self._guard_until = None
            return False
        return True

    def logout(self) -> bool:
        if self.in_progress:
            logger.info("auto_logout_skipped", extra={"reason": "already_in_progress"})
            return False
        self._guard_until = self._clock() + self._config.logout_guard_reset_seconds
        self.cycles += 1
        logger.warning("auto_logout")
        self.clear_session()
        self._schedule_redirect()
        return True

    def clear_session(self) -> None:
        self._store.clear(CREDENTIAL_KEYS)
        self._store.events.emit(TOKEN_UPDATED, {"loggedOut": True})
        self._store.events.emit(DISPLAY_NAME_UPDATED, None)

    def _schedule_redirect(self) -> None:
        navigator = self._navigator
        if navigator is None:
            return
        current = navigator.current_path() or ""
        home = self._config.home_path
        if AUTH_ENTRY_MARKER in current or current == home:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            navigator.navigate(home)
            return
        if self._pending_redirect is not None:
            self._pending_redirect.cancel()
        self._pending_redirect = loop.call_later(
            self._config.logout_redirect_delay_seconds, self._redirect, navigator, home
        )

    def _redirect(self, navigator: Navigator, home: str) -> None:
        self._pending_redirect = None
        logger.info("auto_logout_redirect", extra={"path": home})
        navigator.navigate(home)
