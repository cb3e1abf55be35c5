from .clients import AuthClient, UsersClient
from .config import API_BASE_URL_FALLBACK, API_ROUTES, ClientConfig, load_config
from .credential_store import CredentialStore, PersistenceTier, normalize_token
from .envelope import ApiResult, EmptyBody, JsonBody, TextBody, extract_result, extract_role, parse_body
from .events import DISPLAY_NAME_UPDATED, TOKEN_UPDATED, SessionEvents
from .exceptions import ApiError, ConfigError, RequestArgumentError, user_message
from .filters import Debouncer, FilterSpec, filter_records, newest_first, sort_records
from .http_client import HttpClient
from .logout import AutoLogoutController, Navigator, RecordingNavigator
from .models import AuthenticationResult, LoginCredentials, UserInfo
from .observability import configure_logging, log_json
from .refresh import RefreshCoordinator, RefreshOutcome
from .session import StorefrontSession
from .session_context import SessionContext
from .storage import FileStorage, KeyValueStorage, MemoryStorage

__all__ = [
    "API_BASE_URL_FALLBACK",
    "API_ROUTES",
    "ApiError",
    "ApiResult",
    "AuthClient",
    "AuthenticationResult",
    "AutoLogoutController",
    "ClientConfig",
    "ConfigError",
    "CredentialStore",
    "DISPLAY_NAME_UPDATED",
    "Debouncer",
    "EmptyBody",
    "FileStorage",
    "FilterSpec",
    "HttpClient",
    "JsonBody",
    "KeyValueStorage",
    "LoginCredentials",
    "MemoryStorage",
    "Navigator",
    "PersistenceTier",
    "RecordingNavigator",
    "RefreshCoordinator",
    "RefreshOutcome",
    "RequestArgumentError",
    "SessionContext",
    "SessionEvents",
    "StorefrontSession",
    "TOKEN_UPDATED",
    "TextBody",
    "UserInfo",
    "UsersClient",
    "configure_logging",
    "extract_result",
    "extract_role",
    "filter_records",
    "load_config",
    "log_json",
    "newest_first",
    "normalize_token",
    "parse_body",
    "sort_records",
    "user_message",
]
