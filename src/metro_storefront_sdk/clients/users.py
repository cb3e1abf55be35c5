from __future__ import annotations

import logging

from pydantic import ValidationError

from ..config import API_ROUTES
from ..envelope import extract_result, extract_role
from ..models import UserInfo
from .base import BaseClient

logger = logging.getLogger(__name__)


class UsersClient(BaseClient):
    async def my_info(self, token: str | None = None) -> UserInfo | None:
        result = await self._request(API_ROUTES.users.my_info, token=token or self.access_token)
        if not result.ok:
            return None
        data = extract_result(result.data)
        if not isinstance(data, dict):
            return None
        try:
            return UserInfo.model_validate(data)
        except ValidationError:
            logger.warning("my_info_unexpected_shape")
            return None

    async def get_user_role(self, token: str | None = None) -> str | None:
        result = await self._request(API_ROUTES.users.my_info, token=token or self.access_token)
        return extract_role(result.data)

    async def list_users(self) -> list:
        result = await self._request(API_ROUTES.users.root)
        return extract_result(result.data, many=True)
