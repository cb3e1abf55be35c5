from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .envelope import ApiResult

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please sign in again."
NETWORK_ERROR_MESSAGE = "Cannot reach the server. Check your connection and try again."


class ConfigError(ValueError):
    pass


class RequestArgumentError(ValueError):
    """Raised for programmer errors in request arguments, never for I/O failures."""


@dataclass
class ApiError(Exception):
    code: str
    message: str
    status_code: int
    details: Any = None
    session_expired: bool = False

    def __str__(self) -> str:
        return f"[{self.status_code}] {self.code}: {self.message}"

    @classmethod
    def from_result(cls, result: "ApiResult") -> "ApiError":
        data = result.data if isinstance(result.data, dict) else {}
        if result.auto_logged_out:
            code = "SESSION_EXPIRED"
        elif result.status == 0:
            code = "NETWORK_ERROR"
        else:
            code = str(data.get("code") or "HTTP_ERROR")
        return cls(
            code=code,
            message=user_message(result),
            status_code=result.status,
            details=result.data,
            session_expired=result.auto_logged_out,
        )


def user_message(result: "ApiResult") -> str:
    if result.auto_logged_out:
        return SESSION_EXPIRED_MESSAGE
    if result.status == 0:
        return NETWORK_ERROR_MESSAGE
    data = result.data if isinstance(result.data, dict) else {}
    message = data.get("message") or data.get("error")
    return str(message) if message else f"Request failed with status {result.status}"
