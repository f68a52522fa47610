"""
Error taxonomy for bloggen.

Configuration errors are fatal, generation errors carry a classified kind so the
model fallback chain can decide how to report them, and filesystem errors keep the
underlying message.
"""

import re
from enum import Enum
from typing import Optional

import httpx


class BloggenError(Exception):
    """Base class for all bloggen errors."""
    pass


class ConfigurationError(BloggenError):
    """Missing or invalid configuration (e.g. no API key). Never retried."""
    pass


class PostStoreError(BloggenError):
    """Reading or writing a post record failed."""
    pass


class ErrorKind(str, Enum):
    INVALID_CREDENTIAL = "invalid-credential"
    QUOTA_EXCEEDED = "quota-exceeded"
    RATE_LIMITED = "rate-limited"
    MODEL_UNAVAILABLE = "model-unavailable"
    OTHER = "other"


REMEDIES = {
    ErrorKind.INVALID_CREDENTIAL: (
        "Check your API key or set GEMINI_API_KEY. "
        "Get a free key at https://makersuite.google.com/app/apikey"
    ),
    ErrorKind.QUOTA_EXCEEDED: 'Consider using your own Gemini API key: export GEMINI_API_KEY="your-key"',
    ErrorKind.RATE_LIMITED: "Rate limit exceeded on all models. Please try again later.",
    ErrorKind.MODEL_UNAVAILABLE: "Some models may not be available in your region.",
    ErrorKind.OTHER: "Try again in a few minutes or use your own API key.",
}


class GenerationError(BloggenError):
    """A classified failure from the external text-generation service."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.OTHER, model: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.model = model

    @property
    def remedy(self) -> str:
        return REMEDIES[self.kind]

    def __repr__(self):
        return f"GenerationError(kind={self.kind.value!r}, model={self.model!r}, message={str(self)!r})"


# Message patterns checked in order; the first hit wins.
_KIND_PATTERNS = [
    (ErrorKind.INVALID_CREDENTIAL, [r'API_KEY_INVALID', r'invalid.?api.?key', r'PERMISSION_DENIED', r'UNAUTHENTICATED']),
    (ErrorKind.QUOTA_EXCEEDED, [r'QUOTA', r'RESOURCE_EXHAUSTED']),
    (ErrorKind.RATE_LIMITED, [r'RATE.?LIMIT', r'Too Many Requests']),
    (ErrorKind.MODEL_UNAVAILABLE, [r'NOT.?FOUND', r'not supported', r'UNAVAILABLE']),
]


def extract_http_status_code(error: Exception) -> Optional[int]:
    """Extract HTTP status code from various exception types."""
    code = getattr(error, "code", None)
    if isinstance(code, int):
        return code

    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code

    error_str = str(error)

    # Google API error payload: "{'code': 429, ...}"
    match = re.search(r"'code':\s*(\d+)", error_str)
    if match:
        return int(match.group(1))

    # Status code at the start of the message: "429 RESOURCE_EXHAUSTED"
    match = re.search(r'^(\d{3})\s', error_str)
    if match:
        return int(match.group(1))

    return None


def classify_error(error: Exception) -> ErrorKind:
    """Map an exception raised by a generation backend onto an ErrorKind."""
    if isinstance(error, GenerationError):
        return error.kind

    error_msg = str(error)
    for kind, patterns in _KIND_PATTERNS:
        for pattern in patterns:
            if re.search(pattern, error_msg, re.IGNORECASE):
                return kind

    status_code = extract_http_status_code(error)
    if status_code in (401, 403):
        return ErrorKind.INVALID_CREDENTIAL
    if status_code == 429:
        return ErrorKind.RATE_LIMITED
    if status_code == 404:
        return ErrorKind.MODEL_UNAVAILABLE

    return ErrorKind.OTHER
