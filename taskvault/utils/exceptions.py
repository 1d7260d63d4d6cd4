"""Custom exceptions for TaskVault"""

from typing import Optional


class TaskVaultError(Exception):
    """Base exception for TaskVault"""

    status_code: int = 500
    public_message: Optional[str] = None

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message or self.__class__.__name__)

    @property
    def message(self) -> str:
        return str(self)


class ConfigError(TaskVaultError):
    """Configuration error"""
    pass


class ValidationError(TaskVaultError):
    """Malformed or missing client input"""

    status_code = 400
    public_message = "Invalid request"


class ConflictError(TaskVaultError):
    """Uniqueness violation (e.g. email already registered)"""

    status_code = 400
    public_message = "Email already in use"


class InvalidCredentialsError(TaskVaultError):
    """Login with an unknown email or a wrong password"""

    status_code = 400
    public_message = "Invalid credentials"


class NotFoundError(TaskVaultError):
    """Resource absent, or not owned by the requesting principal"""

    status_code = 404
    public_message = "Not found"


class AuthenticationError(TaskVaultError):
    """
    Identity could not be established or trusted.

    Every subclass is surfaced to clients with the same message so callers
    cannot tell which check failed.
    """

    status_code = 401
    public_message = "Invalid or expired token"


class MissingCredentialsError(AuthenticationError):
    """Authorization header absent or not of the form 'Bearer <token>'"""
    pass


class InvalidTokenError(AuthenticationError):
    """Token signature or structure is invalid"""
    pass


class ExpiredTokenError(AuthenticationError):
    """Token is older than the configured TTL"""
    pass


class UnauthorizedError(AuthenticationError):
    """Token is valid but its account no longer exists"""
    pass


class RateLimitError(TaskVaultError):
    """Rate limit exceeded error"""

    status_code = 429
    public_message = "Too many requests, please try again later."

    def __init__(self, message: Optional[str] = None, retry_after: Optional[int] = None):
        self.retry_after = retry_after
        super().__init__(message)
