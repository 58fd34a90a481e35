"""
Error taxonomy for secondlook description generation.

Failures are carried as tagged values rather than exception subclasses, so
callers can switch on ``code`` without relying on class identity across
module or process boundaries.
"""

from enum import Enum
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Closed set of description generation failure codes."""

    NO_IMAGE = "NO_IMAGE"
    INVALID_IMAGE = "INVALID_IMAGE"
    INVALID_PARAMS = "INVALID_PARAMS"
    RATE_LIMIT = "RATE_LIMIT"
    TIMEOUT = "TIMEOUT"
    OPENAI_ERROR = "OPENAI_ERROR"
    VALIDATION_FAILED = "VALIDATION_FAILED"


AI_ERROR_KIND = "ai_error"


class AIError(BaseModel):
    """
    A classified description generation failure.

    Instances are created at the failure site and never mutated afterwards.
    """

    kind: Literal["ai_error"] = Field(
        default=AI_ERROR_KIND, description="Discriminant tag for this taxonomy"
    )

    code: ErrorCode = Field(..., description="Failure code")

    message: str = Field(default="", description="Developer-facing detail")

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    class Config:
        """Pydantic configuration."""

        frozen = True
        extra = "forbid"


def create_no_image_error() -> AIError:
    return AIError(code=ErrorCode.NO_IMAGE, message="No image URL provided")


def create_invalid_image_error(
    message: str = "Invalid or inaccessible image URL",
) -> AIError:
    return AIError(code=ErrorCode.INVALID_IMAGE, message=message)


def create_invalid_params_error(message: str) -> AIError:
    return AIError(code=ErrorCode.INVALID_PARAMS, message=message)


def create_rate_limit_error(retry_after: Optional[int] = None) -> AIError:
    if retry_after:
        message = f"Rate limit exceeded. Retry after {retry_after} seconds."
    else:
        message = "Rate limit exceeded. Please try again later."
    return AIError(code=ErrorCode.RATE_LIMIT, message=message)


def create_timeout_error(seconds: float = 30) -> AIError:
    return AIError(
        code=ErrorCode.TIMEOUT, message=f"Request timed out after {seconds:g} seconds"
    )


def create_openai_error(message: str) -> AIError:
    return AIError(code=ErrorCode.OPENAI_ERROR, message=message)


def create_validation_error(message: str) -> AIError:
    return AIError(code=ErrorCode.VALIDATION_FAILED, message=message)


def is_ai_error(value: Any) -> bool:
    """
    Check whether a value belongs to this error taxonomy.

    Accepts ``AIError`` instances as well as their serialized mapping form
    (for example a ``model_dump()`` that crossed a process boundary).
    """
    if isinstance(value, AIError):
        return True

    if isinstance(value, Mapping):
        code = value.get("code")
        return (
            value.get("kind") == AI_ERROR_KIND
            and isinstance(code, str)
            and code in _KNOWN_CODES
        )

    return getattr(value, "kind", None) == AI_ERROR_KIND and isinstance(
        getattr(value, "code", None), ErrorCode
    )


_KNOWN_CODES = frozenset(code.value for code in ErrorCode)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again."

_USER_MESSAGES = {
    ErrorCode.NO_IMAGE: "Please upload an image to generate a description.",
    ErrorCode.INVALID_IMAGE: (
        "Image could not be processed. Please upload a different photo."
    ),
    ErrorCode.INVALID_PARAMS: (
        "Please choose a valid category and condition for your item."
    ),
    ErrorCode.RATE_LIMIT: "Too many requests. Please wait a moment and try again.",
    ErrorCode.TIMEOUT: "Request took too long. Please try again.",
    ErrorCode.OPENAI_ERROR: "Failed to generate description. Please try again.",
    ErrorCode.VALIDATION_FAILED: (
        "Generated description did not meet quality standards. Please try again."
    ),
}


def get_user_friendly_message(error: Any) -> str:
    """
    Translate an error into a message suitable for end users.

    Never raises: anything that is not a known code falls back to a generic
    message.
    """
    if isinstance(error, Mapping):
        code = error.get("code")
    else:
        code = getattr(error, "code", None)

    try:
        return _USER_MESSAGES[ErrorCode(code)]
    except (ValueError, KeyError, TypeError):
        return GENERIC_ERROR_MESSAGE
