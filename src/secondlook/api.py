"""
AI service integration for secondlook package.

This module provides integration with Google's Generative AI service for
describing product photos, including resilient API calls with retry logic
and classification of service failures.
"""

import asyncio
import logging
import mimetypes
from typing import Optional
from urllib.parse import urlsplit

import google.genai as genai
import httpx
from google.genai import errors as genai_errors
from google.genai import types
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

# Configure logging for this module
logger = logging.getLogger(__name__)

ACCEPTED_FINISH_REASONS = ("STOP", "MAX_TOKENS")


class APIError(Exception):
    """Base exception for API-related errors."""

    pass


class QuotaExceededError(APIError):
    """Raised when API quota is exceeded."""

    def __init__(self, message: str, retry_after: Optional[int] = None):
        super().__init__(message)
        self.retry_after = retry_after


class InvalidResponseError(APIError):
    """Raised when API returns an invalid response."""

    pass


class NetworkError(APIError):
    """Raised for network-related errors."""

    pass


class RequestTimeoutError(NetworkError):
    """Raised when the service or transport gives up waiting for a response."""

    pass


def _retry_after(exc: Exception) -> Optional[int]:
    """Read a Retry-After header from an SDK error, if one is present."""
    headers = getattr(getattr(exc, "response", None), "headers", None)
    if not headers:
        return None
    try:
        value = headers.get("retry-after")
        return int(value) if value is not None else None
    except (AttributeError, TypeError, ValueError):
        return None


def _classify_exception(exc: Exception) -> Exception:
    """
    Classify exceptions into appropriate error types for better handling.

    Args:
        exc: The original exception

    Returns:
        Exception: Classified exception
    """
    if isinstance(exc, APIError):
        return exc

    if isinstance(exc, httpx.TimeoutException):
        return RequestTimeoutError(f"Request timed out: {exc}")

    if isinstance(exc, genai_errors.APIError):
        if exc.code == 504 or getattr(exc, "status", None) == "DEADLINE_EXCEEDED":
            return RequestTimeoutError(f"Request timed out: {exc}")
        if exc.code == 429:
            return QuotaExceededError(
                f"API quota exceeded: {exc}", retry_after=_retry_after(exc)
            )
        if exc.code >= 500:
            return NetworkError(f"Service unavailable: {exc}")
        # Rejected requests (400, 403, 404) are not worth retrying.
        return APIError(f"API error: {exc}")

    exc_str = str(exc).lower()

    # Check for quota/rate limit errors
    quota_keywords = ["quota", "rate limit", "too many requests", "resource_exhausted"]
    if any(keyword in exc_str for keyword in quota_keywords):
        return QuotaExceededError(f"API quota exceeded: {exc}")

    if any(keyword in exc_str for keyword in ["timed out", "timeout", "deadline"]):
        return RequestTimeoutError(f"Request timed out: {exc}")

    # Check for network errors
    if any(keyword in exc_str for keyword in ["network", "connection"]):
        return NetworkError(f"Network error: {exc}")

    # Check for invalid response errors
    if any(keyword in exc_str for keyword in ["invalid", "malformed", "parse"]):
        return InvalidResponseError(f"Invalid API response: {exc}")

    # Default to generic API error
    return APIError(f"API error: {exc}")


def _guess_mime_type(image_url: str) -> str:
    mime_type, _ = mimetypes.guess_type(urlsplit(image_url).path)
    if mime_type and mime_type.startswith("image/"):
        return mime_type
    return "image/jpeg"


def _extract_text(response: object) -> str:
    """Pull the generated text out of a generate_content response."""
    if not response or not hasattr(response, "candidates"):
        raise InvalidResponseError("API response missing candidates")

    if not response.candidates:
        raise InvalidResponseError("API response contains no candidates")

    candidate = response.candidates[0]

    finish_reason = getattr(candidate, "finish_reason", None)
    if finish_reason is not None and finish_reason not in ACCEPTED_FINISH_REASONS:
        if finish_reason == "SAFETY":
            raise APIError("Content was blocked due to safety policies")
        raise APIError(f"Generation stopped with reason: {finish_reason}")

    content = getattr(candidate, "content", None)
    if not content:
        raise InvalidResponseError("API response missing content")

    chunks = []
    for part in getattr(content, "parts", None) or []:
        text = getattr(part, "text", None)
        if isinstance(text, str):
            chunks.append(text)

    text = "".join(chunks).strip()
    if not text:
        raise InvalidResponseError("No description text found in API response")
    return text


@retry(
    wait=wait_random_exponential(multiplier=1, max=10),
    stop=stop_after_attempt(3),
    retry=retry_if_exception_type((NetworkError, QuotaExceededError)),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def describe_image(
    image_url: str,
    system_prompt: str,
    user_prompt: str,
    api_key: str,
    model: str = "gemini-2.5-flash",
    temperature: float = 0.7,
    max_output_tokens: int = 400,
    timeout: Optional[float] = None,
) -> str:
    """
    Ask the generation service to describe the product shown at ``image_url``.

    Rate limits and transient network issues are retried with exponential
    backoff.

    Args:
        image_url: Absolute URL of the product photo
        system_prompt: System instruction for the model
        user_prompt: Request text sent alongside the image
        api_key: Google Generative AI API key
        model: AI model to use
        temperature: Sampling temperature
        max_output_tokens: Output token budget
        timeout: Per-request HTTP timeout in seconds

    Returns:
        str: Generated text

    Raises:
        QuotaExceededError: When API quota is exceeded
        InvalidResponseError: When API returns invalid response
        RequestTimeoutError: When the request exceeds its deadline
        NetworkError: For network-related issues
        APIError: For other API errors
        ValueError: For invalid parameters
    """
    if not image_url.strip():
        raise ValueError("Image URL cannot be empty")

    if not api_key.strip():
        raise ValueError("API key cannot be empty")

    try:
        if timeout:
            client = genai.Client(
                api_key=api_key,
                http_options=types.HttpOptions(timeout=int(timeout * 1000)),
            )
        else:
            client = genai.Client(api_key=api_key)

        logger.info(
            f"Describing image with model {model}, prompt length: {len(user_prompt)}"
        )

        response = await asyncio.to_thread(
            client.models.generate_content,
            model=model,
            contents=[
                types.Part.from_uri(
                    file_uri=image_url, mime_type=_guess_mime_type(image_url)
                ),
                user_prompt,
            ],
            config=types.GenerateContentConfig(
                system_instruction=system_prompt,
                temperature=temperature,
                max_output_tokens=max_output_tokens,
                top_p=0.9,
            ),
        )

        text = _extract_text(response)

        logger.info(f"Successfully generated description, length: {len(text)}")
        return text

    except Exception as exc:
        # Classify and re-raise the exception
        classified_exc = _classify_exception(exc)
        logger.error(f"Description generation failed: {classified_exc}")
        if classified_exc is exc:
            raise
        raise classified_exc from exc
