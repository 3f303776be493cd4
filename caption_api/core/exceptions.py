"""
Application-specific exception classes.

Only CaptionGenerationError is recovered inside a batch (it becomes an
error entry for that one image); the others surface as HTTP errors before
a batch starts.
"""


class CaptionServiceError(Exception):
    """Base exception for all caption service errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class CaptionGenerationError(CaptionServiceError):
    """Raised when a provider could not produce a caption for one image."""
    pass


class ProviderConfigError(CaptionServiceError):
    """Raised when a provider cannot be built (missing API key, unknown service, no model)."""
    pass


class UnknownPresetError(CaptionServiceError):
    """Raised when a prompt style or caption template id does not exist."""
    pass


class ProviderUnavailableError(CaptionServiceError):
    """Raised when a provider endpoint cannot be reached for status/model listing."""
    pass
