from .auth import AuthClient
from .users import UsersClient

__all__ = ["AuthClient", "UsersClient"]
