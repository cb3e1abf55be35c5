from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from enum import Enum

from .events import DISPLAY_NAME_UPDATED, TOKEN_UPDATED, SessionEvents
from .storage import FileStorage, KeyValueStorage, MemoryStorage

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
REFRESH_TOKEN_KEY = "refreshToken"
DISPLAY_NAME_KEY = "displayName"
CREDENTIAL_KEYS = (TOKEN_KEY, REFRESH_TOKEN_KEY, DISPLAY_NAME_KEY)

_BEARER_PREFIX = "bearer "


class PersistenceTier(str, Enum):
    DURABLE = "durable"
    SESSION = "session"

    @classmethod
    def from_remember(cls, remember: bool) -> "PersistenceTier":
        return cls.DURABLE if remember else cls.SESSION


def normalize_token(raw: object) -> str | None:
    """Strip quoting, JSON string wrapping and a ``Bearer`` prefix from a stored value."""
    if raw is None:
        return None
    text = str(raw).strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {'"', "'"}:
        text = text[1:-1]
    if text[:1] in {"{", "[", '"'}:
        try:
            parsed = json.loads(text)
        except ValueError:
            pass
        else:
            text = parsed if isinstance(parsed, str) else ""
    text = text.strip()
    if text.lower().startswith(_BEARER_PREFIX):
        text = text[len(_BEARER_PREFIX):]
    return text.strip() or None


class CredentialStore:
    """Token, refresh token and display name spread over two storage tiers.

    Reads prefer the session tier over the durable one. Backend failures are
    logged and reported as "absent", never raised.
    """

    def __init__(
        self,
        durable: KeyValueStorage | None = None,
        session: KeyValueStorage | None = None,
        events: SessionEvents | None = None,
    ) -> None:
        self.durable = durable if durable is not None else FileStorage()
        self.session = session if session is not None else MemoryStorage()
        self.events = events or SessionEvents()

    def _backend(self, tier: PersistenceTier) -> KeyValueStorage:
        return self.durable if tier is PersistenceTier.DURABLE else self.session

    def _get_raw(self, tier: PersistenceTier, key: str) -> str | None:
        try:
            return self._backend(tier).get_item(key)
        except Exception:
            logger.warning("credential_read_failed", extra={"key": key, "tier": tier.value}, exc_info=True)
            return None

    def read(self, key: str = TOKEN_KEY) -> str | None:
        for tier in (PersistenceTier.SESSION, PersistenceTier.DURABLE):
            value = normalize_token(self._get_raw(tier, key))
            if value:
                return value
        return None

    def has_raw(self, key: str, tier: PersistenceTier) -> bool:
        return bool(self._get_raw(tier, key))

    def write(self, key: str, value: str, tier: PersistenceTier = PersistenceTier.SESSION) -> None:
        try:
            self._backend(tier).set_item(key, value)
        except Exception:
            logger.warning("credential_write_failed", extra={"key": key, "tier": tier.value}, exc_info=True)

    def _remove(self, tier: PersistenceTier, key: str) -> None:
        try:
            self._backend(tier).remove_item(key)
        except Exception:
            logger.warning("credential_clear_failed", extra={"key": key, "tier": tier.value}, exc_info=True)

    def clear(self, keys: Iterable[str] = CREDENTIAL_KEYS) -> None:
        for key in keys:
            for tier in PersistenceTier:
                self._remove(tier, key)

    def save_login(self, token: str, tier: PersistenceTier, refresh_token: str | None = None) -> None:
        other = PersistenceTier.SESSION if tier is PersistenceTier.DURABLE else PersistenceTier.DURABLE
        self._remove(other, TOKEN_KEY)
        self._remove(other, REFRESH_TOKEN_KEY)
        self.write(TOKEN_KEY, token, tier)
        self.write(REFRESH_TOKEN_KEY, refresh_token or token, tier)

    def replace_token(self, token: str) -> list[PersistenceTier]:
        """Store a refreshed token in every tier that already held one."""
        updated: list[PersistenceTier] = []
        if self.has_raw(TOKEN_KEY, PersistenceTier.DURABLE):
            self.write(TOKEN_KEY, token, PersistenceTier.DURABLE)
            self.write(REFRESH_TOKEN_KEY, token, PersistenceTier.DURABLE)
            updated.append(PersistenceTier.DURABLE)
        if self.has_raw(TOKEN_KEY, PersistenceTier.SESSION):
            self.write(TOKEN_KEY, token, PersistenceTier.SESSION)
            updated.append(PersistenceTier.SESSION)
        self.events.emit(TOKEN_UPDATED, {"tiers": [tier.value for tier in updated]})
        return updated

    def read_display_name(self) -> str | None:
        for tier in (PersistenceTier.SESSION, PersistenceTier.DURABLE):
            raw = self._get_raw(tier, DISPLAY_NAME_KEY)
            if raw and raw.strip():
                return raw.strip()
        return None

    def save_display_name(self, name: str, tier: PersistenceTier = PersistenceTier.DURABLE) -> None:
        self.write(DISPLAY_NAME_KEY, name, tier)
        self.events.emit(DISPLAY_NAME_UPDATED, {"displayName": name})
