"""
Error taxonomy surfaced to the presentation layer.

Every error carries a short ``title`` and a human-readable ``message`` so the
console can render it as an alert. Callers branch on the exception type, never
on the message text.
"""
from src.domain.enums.validation_failure import ValidationFailure


class MarketplaceError(Exception):
    """Base class for every recoverable failure shown to the user."""

    title: str = "Error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(MarketplaceError):
    """Required startup configuration is missing. The only fatal error."""

    title = "Configuration Error"


class ValidationError(MarketplaceError):
    title = "Validation Error"

    _MESSAGES: dict[ValidationFailure, str] = {
        ValidationFailure.NOMENCLATURE_REQUIRED: "Nomenclature is required",
        ValidationFailure.IMAGE_REQUIRED: "At least one image is required",
        ValidationFailure.INVALID_PRICE: "Valid price is required (must be >= 0)",
        ValidationFailure.NARRATIVE_TOO_LONG: "Narrative must be 500 characters or less",
        ValidationFailure.MISSING_FIELDS: "Please fill in all fields",
        ValidationFailure.PASSWORD_TOO_SHORT: "Password must be at least 6 characters",
        ValidationFailure.TERMS_NOT_ACCEPTED: "Please agree to the terms of cultivation",
    }

    def __init__(self, failure: ValidationFailure) -> None:
        self.failure = failure
        super().__init__(self._MESSAGES[failure])


class LimitReachedError(MarketplaceError):
    title = "Limit Reached"

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"You can only add up to {limit} images.")


class AuthenticationRequiredError(MarketplaceError):
    """No signed-in user; the alert offers navigation to the login screen."""

    title = "Authentication Required"

    def __init__(self, message: str = "Please log in to publish listings") -> None:
        super().__init__(message)


class PublishInProgressError(MarketplaceError):
    title = "Publishing"

    def __init__(self) -> None:
        super().__init__("A publish is already in progress.")


# ---- Remote failures -------------------------------------------------------


class RemoteServiceError(MarketplaceError):
    """Base for failures reported by (or on the way to) the backend."""


class UnauthenticatedError(RemoteServiceError):
    title = "Session Expired"

    def __init__(self, message: str = "User not authenticated. Please log in again.") -> None:
        super().__init__(message)


class AuthError(RemoteServiceError):
    """The auth provider rejected sign-in, sign-up or token refresh."""

    title = "Authentication Failed"


class NetworkError(RemoteServiceError):
    title = "Network Error"


class StorageError(RemoteServiceError):
    title = "Upload Failed"


class PermissionDeniedError(StorageError):
    title = "Permission Denied"


class BucketNotFoundError(StorageError):
    title = "Storage Not Found"

    def __init__(self, bucket: str) -> None:
        self.bucket = bucket
        super().__init__(f'Storage bucket "{bucket}" not found.')


class ImageReadError(StorageError):
    title = "Image Unavailable"

    def __init__(self, locator: str) -> None:
        self.locator = locator
        super().__init__("Cannot access the selected image. Please try selecting it again.")


class PersistenceError(RemoteServiceError):
    title = "Save Failed"

    def __init__(self, operation: str, backend_message: str) -> None:
        self.operation = operation
        self.backend_message = backend_message
        super().__init__(f"Failed to {operation}: {backend_message}")
