from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .exceptions import ConfigError

API_BASE_URL_FALLBACK = "http://localhost:8080/lumina_book"


@dataclass(frozen=True)
class AuthRoutes:
    login: str = "/auth/token"
    register: str = "/users"
    refresh: str = "/auth/refresh"
    change_password: str = "/auth/change-password"


@dataclass(frozen=True)
class UserRoutes:
    root: str = "/users"
    my_info: str = "/users/my-info"


@dataclass(frozen=True)
class ApiRoutes:
    auth: AuthRoutes = AuthRoutes()
    users: UserRoutes = UserRoutes()


API_ROUTES = ApiRoutes()


@dataclass(frozen=True)
class ClientConfig:
    api_base_url: str = API_BASE_URL_FALLBACK
    timeout_seconds: float = 15.0
    verify_ssl: bool = True
    logout_redirect_delay_seconds: float = 0.1
    logout_guard_reset_seconds: float = 1.0
    home_path: str = "/"
    app_name: str = "metro-storefront"

    def url(self, path: str) -> str:
        normalized = path if path.startswith("/") else f"/{path}"
        return f"{self.api_base_url.rstrip('/')}{normalized}"


def _coerce_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _read_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected a number, got {raw!r}") from exc


def _validate(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigError(message)


def resolve_api_base_url() -> str:
    """Environment value first, hardcoded fallback otherwise."""
    env_url = (os.getenv("METRO_API_BASE_URL") or "").strip()
    return (env_url or API_BASE_URL_FALLBACK).rstrip("/")


def load_config(env_file: str | None = None) -> ClientConfig:
    """Load config from environment with optional .env override."""
    load_dotenv(env_file)

    timeout_seconds = _read_float("METRO_TIMEOUT_SECONDS", "15")
    _validate(
        timeout_seconds > 0,
        f"Invalid METRO_TIMEOUT_SECONDS: expected > 0, got {timeout_seconds}",
    )

    redirect_delay = _read_float("METRO_LOGOUT_REDIRECT_DELAY_SECONDS", "0.1")
    _validate(
        redirect_delay >= 0,
        f"Invalid METRO_LOGOUT_REDIRECT_DELAY_SECONDS: expected >= 0, got {redirect_delay}",
    )

    guard_reset = _read_float("METRO_LOGOUT_GUARD_RESET_SECONDS", "1.0")
    _validate(
        guard_reset >= redirect_delay,
        (
            "Invalid METRO_LOGOUT_GUARD_RESET_SECONDS: "
            f"expected >= redirect delay ({redirect_delay}), got {guard_reset}"
        ),
    )

    return ClientConfig(
        api_base_url=resolve_api_base_url(),
        timeout_seconds=timeout_seconds,
        verify_ssl=_coerce_bool(os.getenv("METRO_VERIFY_SSL"), True),
        logout_redirect_delay_seconds=redirect_delay,
        logout_guard_reset_seconds=guard_reset,
        home_path=(os.getenv("METRO_HOME_PATH") or "/").strip() or "/",
        app_name=(os.getenv("METRO_APP_NAME") or "metro-storefront").strip() or "metro-storefront",
    )
