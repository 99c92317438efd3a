"""Application-specific exceptions.

Every error carries an `error_code` which lambda handlers copy into
JSON error responses. Data store errors live in `snaplink.dao.exceptions`.
"""


class SnaplinkError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:snaplink_error'


class ValidationError(SnaplinkError):
    """Base exception for rejected client input."""

    error_code = 'validation:validation_error'


class InvalidURLError(ValidationError):
    """Raised when the destination URL is not an absolute http(s) URL."""

    error_code = 'validation:invalid_url'


class InvalidShortCodeFormatError(ValidationError):
    """Raised when a short code violates the alphabet or length rules."""

    error_code = 'validation:invalid_shortcode_format'


class InvalidExpiryError(ValidationError):
    """Raised when an expiry date is not in the future."""

    error_code = 'validation:invalid_expiry'


class ShortCodeUnavailableError(SnaplinkError):
    """Raised when a caller-chosen short code is already taken."""

    error_code = 'shortcode:unavailable'


class GenerationExhaustedError(SnaplinkError):
    """Raised when neither random attempts nor the fallback code are unique."""

    error_code = 'shortcode:generation_exhausted'


class ShortCodeCollisionRetryFailedError(SnaplinkError):
    """Raised when an insert collides on the short code twice in a row.

    This is transient. Clients may retry the request.
    """

    error_code = 'shortcode:collision_retry_failed'


class ConfigurationError(SnaplinkError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'
