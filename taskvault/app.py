"""Application container: builds every component once from Settings"""

from typing import Optional

from .auth.credentials import CredentialStore
from .auth.resolver import IdentityResolver
from .auth.tokens import TokenService
from .safety.throttler import Throttler
from .storage import DocumentStore
from .todos.repository import TodoRepository
from .utils.config import Settings, load_settings
from .utils.logger import get_logger, setup_logger

logger = get_logger(__name__)


class TaskVaultApp:
    """Holds the wired components shared by all request handlers"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings
        self.store = None
        self.credentials = None
        self.tokens = None
        self.resolver = None
        self.todos = None
        self.auth_throttler = None

    def initialize(self, configure_logging: bool = True) -> "TaskVaultApp":
        """Initialize the application"""
        if self.settings is None:
            self.settings = load_settings()
        settings = self.settings

        if configure_logging:
            setup_logger(
                log_level=settings.logging.level,
                log_format=settings.logging.format,
                file_path=settings.logging.file_path,
                max_bytes=settings.logging.max_bytes,
                backup_count=settings.logging.backup_count,
            )

        self.store = DocumentStore(settings.store.path)
        self.credentials = CredentialStore(self.store, bcrypt_rounds=settings.auth.bcrypt_rounds)
        self.tokens = TokenService(
            secret_key=settings.auth.token_secret,
            ttl_seconds=settings.auth.token_ttl_seconds,
        )
        self.resolver = IdentityResolver(self.tokens, self.credentials)
        self.todos = TodoRepository(self.store)

        if settings.rate_limit.enabled:
            self.auth_throttler = Throttler(
                max_requests=settings.rate_limit.max_requests,
                window_seconds=settings.rate_limit.window_seconds,
            )

        logger.info(
            "TaskVault initialized",
            store_path=settings.store.path,
            token_ttl_seconds=settings.auth.token_ttl_seconds,
            auth_rate_limit=settings.rate_limit.enabled,
        )
        return self
