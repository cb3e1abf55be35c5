"""Response shapes returned by the storefront backend.

Successful payloads arrive either wrapped (``{"result": ...}``) or bare, and
bodies may be JSON, plain text or empty. Both ambiguities are resolved here.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from .exceptions import ApiError


@dataclass(frozen=True)
class JsonBody:
    value: Any

    def to_data(self) -> Any:
        return self.value


@dataclass(frozen=True)
class TextBody:
    text: str

    def to_data(self) -> dict[str, str]:
        return {"message": self.text, "raw": self.text}


@dataclass(frozen=True)
class EmptyBody:
    def to_data(self) -> dict[str, Any]:
        return {}


ParsedBody = Union[JsonBody, TextBody, EmptyBody]


def looks_like_json(text: str) -> bool:
    stripped = text.strip()
    return stripped.startswith("{") or stripped.startswith("[")


def parse_body(raw: str | None, content_type: str | None = None, status: int = 200) -> ParsedBody:
    if status == 204 or not raw or not raw.strip():
        return EmptyBody()
    if "application/json" in (content_type or "").lower() or looks_like_json(raw):
        try:
            return JsonBody(json.loads(raw))
        except ValueError:
            return TextBody(raw)
    return TextBody(raw)


@dataclass(frozen=True)
class ApiResult:
    ok: bool
    status: int
    data: Any = field(default_factory=dict)
    error: Exception | None = None

    @property
    def auto_logged_out(self) -> bool:
        return isinstance(self.data, Mapping) and bool(self.data.get("autoLoggedOut"))

    @property
    def message(self) -> str | None:
        if isinstance(self.data, Mapping) and self.data.get("message"):
            return str(self.data["message"])
        return None

    def result(self, many: bool = False) -> Any:
        return extract_result(self.data, many=many)

    def raise_for_error(self) -> "ApiResult":
        if not self.ok:
            raise ApiError.from_result(self)
        return self


def extract_result(data: Any, many: bool = False) -> Any:
    if many:
        if isinstance(data, Mapping) and isinstance(data.get("result"), list):
            return data["result"]
        return data if isinstance(data, list) else []
    if isinstance(data, Mapping) and "result" in data and data["result"]:
        return data["result"]
    return data or None


def _first_authority(source: Any) -> Any:
    if not isinstance(source, Mapping):
        return None
    authorities = source.get("authorities")
    if isinstance(authorities, list) and authorities and isinstance(authorities[0], Mapping):
        return authorities[0].get("authority")
    return None


def _role_name(source: Any) -> Any:
    if not isinstance(source, Mapping):
        return None
    role = source.get("role")
    if isinstance(role, Mapping):
        return role.get("name")
    return None


def _role_value(source: Any) -> Any:
    if not isinstance(source, Mapping):
        return None
    role = source.get("role")
    return role if isinstance(role, str) else None


def extract_role(data: Any) -> str | None:
    result = data.get("result") if isinstance(data, Mapping) else None
    for probe in (
        _role_name(result),
        _role_name(data),
        _role_value(result),
        _role_value(data),
        _first_authority(result),
        _first_authority(data),
    ):
        if probe:
            return str(probe)
    return None
