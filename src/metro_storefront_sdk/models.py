from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .envelope import extract_role


class LoginCredentials(BaseModel):
    email: str
    password: str


class AuthenticationResult(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    token: str
    refresh_token: str | None = Field(default=None, alias="refreshToken")
    authenticated: bool = True


class UserInfo(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | None = None
    email: str | None = None
    username: str | None = None
    full_name: str | None = Field(default=None, alias="fullName")
    phone_number: str | None = Field(default=None, alias="phoneNumber")
    role: Any = None
    authorities: list[dict[str, Any]] | None = None

    @property
    def role_name(self) -> str | None:
        return extract_role(self.model_dump(include={"role", "authorities"}))

    @property
    def display_name(self) -> str | None:
        return self.full_name or self.username or self.email
