"""Categorized failures raised by the lyric pipeline.

Upstream model SDKs report failures with free-form text, so classification
lower-cases the raw message and looks for kind-specific keywords in a fixed
priority order: AUTH, QUOTA, SERVER, NETWORK. Anything else is UNKNOWN.
Misses fall through to UNKNOWN and that is acceptable; the keyword lists
track the wording of the providers actually in use.
"""

import enum


class ErrorKind(str, enum.Enum):
    """Failure categories surfaced to callers."""

    AUTH = "AUTH"
    QUOTA = "QUOTA"
    SERVER = "SERVER"
    NETWORK = "NETWORK"
    UNKNOWN = "UNKNOWN"


class PipelineError(Exception):
    """A classified pipeline failure with a user-facing message."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.UNKNOWN) -> None:
        super().__init__(message)
        self.message = message
        self.kind = ErrorKind(kind)

    def __repr__(self) -> str:
        return f"PipelineError(kind={self.kind.value}, message={self.message!r})"


class MissingCredentialError(PipelineError):
    """Raised before any network call when no credential is available."""

    def __init__(self, message: str = "API key is missing. Please add one in settings.") -> None:
        super().__init__(message, ErrorKind.AUTH)


# Ordered: the first matching kind wins.
_CLASSIFICATION_RULES: tuple[tuple[ErrorKind, tuple[str, ...], str], ...] = (
    (
        ErrorKind.AUTH,
        ("api key", "403", "unauthenticated", "key not valid", "permission denied"),
        "Invalid API Key. Please check your settings.",
    ),
    (
        ErrorKind.QUOTA,
        ("429", "quota", "exhausted", "rate limit"),
        "Usage limit exceeded. Please try again later.",
    ),
    (
        ErrorKind.SERVER,
        ("503", "overloaded", "500"),
        "AI Service is currently overloaded. Please retry.",
    ),
    (
        ErrorKind.NETWORK,
        ("fetch", "network", "connection"),
        "Network connection failed. Check your internet.",
    ),
)

_UNKNOWN_MESSAGE = "Something went wrong. Please try again."


def classify_error(error: BaseException) -> PipelineError:
    """Wrap a raw failure into a categorized PipelineError.

    Already-classified errors are returned unchanged.

    Args:
        error: Exception raised by a model SDK, HTTP client, or parser.

    Returns:
        PipelineError carrying the matched kind and a friendly message.
    """
    if isinstance(error, PipelineError):
        return error

    raw = f"{error} {getattr(error, 'message', None) or ''}".lower()

    for kind, keywords, friendly in _CLASSIFICATION_RULES:
        if any(keyword in raw for keyword in keywords):
            return PipelineError(friendly, kind)

    return PipelineError(_UNKNOWN_MESSAGE, ErrorKind.UNKNOWN)
