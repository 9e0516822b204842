"""Operator exceptions and error sanitization utilities."""

import re


class StoreError(Exception):
    """A resource store call failed."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class NotFoundError(StoreError):
    """The requested object does not exist."""


class ConflictError(StoreError):
    """A write was rejected because the stored object changed since it was read."""


class VerificationError(Exception):
    """The remote identity endpoint rejected a credential or could not be reached."""


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"\b(gh[pousr]_)[A-Za-z0-9]{20,}",
    r"\b(github_pat_)[A-Za-z0-9_]{20,}",
    r"(bearer)\s+[A-Za-z0-9\-\._~\+/]+=*",
    r"(token)\s+[A-Za-z0-9\-\._~\+/]{20,}=*",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "password",
    "secret",
    "credentials",
    "token",
    "authorization",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, r"\1 [REDACTED]", sanitized, flags=re.IGNORECASE)

    for field in SENSITIVE_FIELDS:
        sanitized = re.sub(
            rf"\b{field}[:=]\s*([^\s,;\)]+)",
            rf"{field}: [REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message.

    Args:
        error: Exception object

    Returns:
        Sanitized error message
    """
    return sanitize_error_message(str(error))
