from __future__ import annotations

from dataclasses import dataclass

from ..http_client import HttpClient


@dataclass
class BaseClient:
    http: HttpClient
    access_token: str | None = None

    async def _request(self, path: str, **kwargs):
        kwargs.setdefault("token", self.access_token)
        return await self.http.request(path, **kwargs)
