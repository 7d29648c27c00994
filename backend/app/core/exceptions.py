from typing import List, Optional


class BaseAppException(Exception):
    """Base exception for the application."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class ConfigurationError(BaseAppException):
    """Raised when a required setting (API key, VAPID key) is missing."""
    pass


class SocialAnalyticsAPIError(BaseAppException):
    """Exception raised when a social analytics API call fails."""

    def __init__(
        self,
        message: str,
        response_body: Optional[str] = None,
        status_code: Optional[int] = None,
        is_timeout: bool = False,
    ):
        super().__init__(message, response_body)
        self.response_body = response_body
        self.status_code = status_code
        self.is_timeout = is_timeout


class InvalidIdentifierError(BaseAppException):
    """Raised when no username can be extracted from a handle or profile URL."""
    pass


class UnsupportedPlatformError(BaseAppException):
    """Raised when the analytics provider has no endpoint for a platform."""

    def __init__(self, platform: str):
        super().__init__(f"Profile lookup is not available for platform '{platform}'")
        self.platform = platform


class ProfileNotFoundError(BaseAppException):
    """Raised when every lookup candidate came back empty (404)."""

    def __init__(self, message: str, username: Optional[str] = None):
        super().__init__(message, username)
        self.username = username


class PlatformMismatchError(BaseAppException):
    """Raised when the provider only ever returned another platform's account."""

    def __init__(self, message: str, found_type: Optional[str] = None):
        super().__init__(message, found_type)
        self.found_type = found_type


class MalformedProfileError(BaseAppException):
    """Raised when a provider payload lacks a required field."""

    def __init__(self, message: str, received_keys: Optional[List[str]] = None):
        self.received_keys = received_keys or []
        super().__init__(message, ", ".join(self.received_keys) or None)


class CreatorNotFoundError(BaseAppException):
    """Raised when a creator id doesn't match a user with the creator role."""
    pass


class ProfileVerificationError(BaseAppException):
    """Raised when a submitted profile could not be verified (not found, wrong platform, ...)."""

    def __init__(self, message: str, error_kind: Optional[str] = None):
        super().__init__(message, error_kind)
        self.error_kind = error_kind


class PushDeliveryError(BaseAppException):
    """Raised when the push service rejects a notification."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def subscription_expired(self) -> bool:
        """404/410 from the push service: the subscription should be deleted."""
        return self.status_code in (404, 410)
