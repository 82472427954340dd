"""Custom exception classes."""


class MixMasterException(Exception):
    """Base exception for MixMaster application."""

    code = "UNKNOWN_ERROR"


class ValidationError(MixMasterException):
    """Raised when input validation fails."""

    code = "VALIDATION_ERROR"


class EmptyInputError(ValidationError):
    """Raised when no ingredients were supplied."""

    code = "EMPTY_INPUT"


class OfflineUnavailableError(MixMasterException):
    """Raised when the service cannot reach the network before a call."""

    code = "OFFLINE"


class InvalidCredentialError(MixMasterException):
    """Raised when Gemini rejects the configured API key."""

    code = "API_KEY_INVALID"


class QuotaExceededError(MixMasterException):
    """Raised when image generation quota is exhausted."""

    code = "QUOTA_EXCEEDED"


class GenerationFailedError(MixMasterException):
    """Raised when cocktail generation fails after all retries."""

    code = "GENERATION_FAILED"


class ImageGenerationFailedError(MixMasterException):
    """Raised when image generation fails after all retries."""

    code = "IMAGE_GENERATION_FAILED"


class IdentificationFailedError(MixMasterException):
    """Raised when ingredient identification fails after all retries."""

    code = "IDENTIFICATION_FAILED"


class NotFoundError(MixMasterException):
    """Raised when a shared cocktail or batch does not exist."""

    code = "NOT_FOUND"


class ShareStoreError(MixMasterException):
    """Raised when a share record cannot be persisted."""

    code = "SHARE_STORE_ERROR"


class ImageProcessingError(MixMasterException):
    """Raised when image processing fails."""

    code = "IMAGE_PROCESSING_ERROR"


class StatusTransitionError(MixMasterException):
    """Raised on an illegal image state transition."""

    code = "STATUS_TRANSITION_ERROR"


class GeminiError(MixMasterException):
    """Raised when a single Gemini response is empty or malformed."""

    code = "GEMINI_ERROR"
