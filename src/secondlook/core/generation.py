"""
Core orchestration layer for secondlook package.

This module validates description requests, calls the generation service
and turns every failure into a classified :class:`~secondlook.errors.AIError`.
Nothing raised by the service escapes these functions.
"""

import asyncio
import logging
import re
import time
from typing import Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlsplit

from ..api import (
    InvalidResponseError,
    QuotaExceededError,
    RequestTimeoutError,
    describe_image,
)
from ..config import Settings
from ..errors import (
    AIError,
    create_invalid_image_error,
    create_invalid_params_error,
    create_no_image_error,
    create_openai_error,
    create_rate_limit_error,
    create_timeout_error,
    create_validation_error,
)
from ..models import (
    Category,
    Condition,
    DescriptionAttributes,
    DescriptionOutcome,
    DescriptionRequest,
    DescriptionResult,
    DescriptionStyle,
)
from ..prompts import generate_prompt, validate_description
from .enhancement import enhance_or_original
from .limits import TokenBucketRateLimiter

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_CHARACTERS = 2000
MIN_DESCRIPTION_WORDS = 20

_TITLE_RE = re.compile(r"^TITLE:\s*(.+?)\n\n?")

_COLOR_RE = re.compile(
    r"\b(black|white|grey|gray|blue|red|green|yellow|orange|purple|pink|brown"
    r"|beige|navy|silver|gold|cream|khaki|maroon)\b",
    re.IGNORECASE,
)
_MATERIAL_RE = re.compile(
    r"\b(cotton|polyester|leather|metal|plastic|wood|glass|ceramic|steel|aluminium"
    r"|aluminum|fabric|denim|silk|wool|suede|canvas|rubber)\b",
    re.IGNORECASE,
)
_BRAND_RE = re.compile(
    r"\b(Nike|Adidas|Samsung|Apple|Sony|LG|HP|Dell|Lenovo|Asus|Ikea|Zara|H&M"
    r"|Levi's|Puma|Reebok|Canon|Nikon|Bosch|Philips)\b"
)
_STYLE_RE = re.compile(
    r"\b(modern|vintage|classic|contemporary|traditional|minimalist|rustic"
    r"|industrial|bohemian|casual|formal|sporty|elegant)\b",
    re.IGNORECASE,
)


class _RequestFailed(Exception):
    """Carries a classified error out of the generation steps."""

    def __init__(self, error: AIError):
        super().__init__(str(error))
        self.error = error


def is_valid_image_url(url: str) -> bool:
    """Syntactic check for an absolute http(s) URL."""
    if any(ch.isspace() for ch in url):
        return False
    try:
        split = urlsplit(url)
    except ValueError:
        return False
    return split.scheme in ("http", "https") and bool(split.hostname)


def validate_request(request: DescriptionRequest) -> Optional[AIError]:
    """
    Validate a request without touching the network.

    Checks run in a fixed order and the first failure wins: missing image,
    malformed image URL, then unknown category, condition or style.

    Returns:
        Optional[AIError]: The first failure, or None when the request is valid
    """
    image_url = (request.image_url or "").strip()
    if not image_url:
        return create_no_image_error()

    if not is_valid_image_url(image_url):
        return create_invalid_image_error("Invalid image URL format")

    if request.category not in {c.value for c in Category}:
        return create_invalid_params_error(f"Invalid category: {request.category}")

    if request.condition not in {c.value for c in Condition}:
        return create_invalid_params_error(f"Invalid condition: {request.condition}")

    if request.style is not None and request.style not in {
        s.value for s in DescriptionStyle
    }:
        return create_invalid_params_error(f"Invalid style: {request.style}")

    return None


def truncate_description(description: str, max_chars: int) -> str:
    """
    Shorten a description to ``max_chars``.

    Cuts at the last sentence end when it falls in the final 30% of the
    limit, otherwise at the last space with an ellipsis.
    """
    if len(description) <= max_chars:
        return description

    truncated = description[:max_chars]
    last_sentence_end = max(
        truncated.rfind("."), truncated.rfind("!"), truncated.rfind("?")
    )

    if last_sentence_end > 0 and last_sentence_end > max_chars * 0.7:
        return truncated[: last_sentence_end + 1].strip()

    last_space = truncated.rfind(" ")
    if last_space > 0:
        return truncated[:last_space].strip() + "..."

    return truncated.strip() + "..."


def extract_attributes(description: str) -> DescriptionAttributes:
    """Spot common colour, material, brand and style keywords."""
    color = _COLOR_RE.search(description)
    material = _MATERIAL_RE.search(description)
    brand = _BRAND_RE.search(description)
    style = _STYLE_RE.search(description)

    return DescriptionAttributes(
        color=color.group(1).lower() if color else None,
        material=material.group(1).lower() if material else None,
        brand=brand.group(1) if brand else None,
        style=style.group(1).lower() if style else None,
    )


def _split_title(content: str) -> Tuple[Optional[str], str]:
    match = _TITLE_RE.match(content)
    if not match:
        return None, content
    return match.group(1).strip(), content[match.end() :].strip()


async def _call_service(
    image_url: str,
    request: DescriptionRequest,
    style: DescriptionStyle,
    config: Settings,
) -> str:
    rendered = generate_prompt(
        Category(request.category),
        Condition(request.condition),
        style=style,
        title=request.title,
    )
    timeout = config.defaults.request_timeout_seconds

    try:
        return await asyncio.wait_for(
            describe_image(
                image_url=image_url,
                system_prompt=rendered.system_prompt,
                user_prompt=rendered.user_prompt,
                api_key=config.auth.google_api_key,
                model=config.defaults.text_model,
                temperature=rendered.temperature,
                max_output_tokens=rendered.max_output_tokens,
                timeout=timeout,
            ),
            timeout=timeout,
        )
    except (asyncio.TimeoutError, RequestTimeoutError) as e:
        raise _RequestFailed(create_timeout_error(timeout)) from e
    except QuotaExceededError as e:
        raise _RequestFailed(create_rate_limit_error(e.retry_after)) from e
    except InvalidResponseError as e:
        raise _RequestFailed(create_validation_error(str(e))) from e
    except Exception as e:
        raise _RequestFailed(
            create_openai_error(f"Generation service error: {e}")
        ) from e


def _build_result(
    content: str,
    request: DescriptionRequest,
    style: DescriptionStyle,
    config: Settings,
) -> DescriptionResult:
    suggested_title, description = _split_title(content)
    description = truncate_description(description, MAX_DESCRIPTION_CHARACTERS)

    word_count = len(description.split())
    if word_count < MIN_DESCRIPTION_WORDS:
        raise _RequestFailed(
            create_validation_error("Generated description is too short")
        )

    return DescriptionResult(
        description=description,
        suggested_title=suggested_title,
        word_count=word_count,
        character_count=len(description),
        attributes=extract_attributes(description),
        metadata={
            "model": config.defaults.text_model,
            "style": style.value,
            "category": request.category,
            "condition": request.condition,
            "quality_issues": validate_description(description, style),
        },
    )


async def generate_description(
    request: DescriptionRequest,
    config: Settings,
    rate_limiter: Optional[TokenBucketRateLimiter] = None,
) -> DescriptionOutcome:
    """
    Generate a listing description for one request.

    Local validation runs first and never reaches the network. Service
    failures are mapped to RATE_LIMIT, TIMEOUT, VALIDATION_FAILED or
    OPENAI_ERROR.

    Args:
        request: The description request
        config: Application configuration
        rate_limiter: Optional limiter acquired before the service call

    Returns:
        DescriptionOutcome: Success with a result, or failure with an AIError
    """
    start_time = time.time()

    error = validate_request(request)
    if error is not None:
        logger.info(f"Request {request.id} rejected: {error}")
        return DescriptionOutcome.failure(
            request.id, error, processing_time_seconds=time.time() - start_time
        )

    style = DescriptionStyle(request.style or config.defaults.default_style.value)

    try:
        if rate_limiter is not None:
            await rate_limiter.acquire()
        image_url = request.image_url.strip()
        content = await _call_service(image_url, request, style, config)
        result = _build_result(content, request, style, config)
    except _RequestFailed as e:
        logger.error(f"Request {request.id} failed: {e.error}")
        return DescriptionOutcome.failure(
            request.id, e.error, processing_time_seconds=time.time() - start_time
        )
    except Exception as e:
        logger.exception(f"Unexpected error while describing request {request.id}")
        return DescriptionOutcome.failure(
            request.id,
            create_openai_error(f"Unexpected error while generating description: {e}"),
            processing_time_seconds=time.time() - start_time,
        )

    elapsed = time.time() - start_time
    result.add_metadata("generation_time_seconds", elapsed)
    return DescriptionOutcome.success(
        request.id, result, processing_time_seconds=elapsed
    )


async def generate_multiple_descriptions(
    requests: Iterable[DescriptionRequest],
    config: Settings,
    max_concurrent: Optional[int] = None,
) -> List[DescriptionOutcome]:
    """
    Generate descriptions for a batch of requests.

    Outcomes are returned in input order. Each request succeeds or fails on
    its own; a failure never cancels the other requests.
    """
    requests = list(requests)
    semaphore = asyncio.Semaphore(
        max_concurrent or config.defaults.max_concurrent_requests
    )
    rate_limiter = None
    if config.defaults.requests_per_minute:
        rate_limiter = TokenBucketRateLimiter(config.defaults.requests_per_minute)

    async def _run(request: DescriptionRequest) -> DescriptionOutcome:
        async with semaphore:
            return await generate_description(request, config, rate_limiter)

    outcomes = await asyncio.gather(
        *(_run(request) for request in requests), return_exceptions=True
    )

    results: List[DescriptionOutcome] = []
    for request, outcome in zip(requests, outcomes):
        if isinstance(outcome, BaseException):
            logger.error(f"Request {request.id} crashed: {outcome}")
            outcome = DescriptionOutcome.failure(
                request.id, create_openai_error(f"Unexpected failure: {outcome}")
            )
        results.append(outcome)

    logger.info(
        f"Batch finished: {sum(o.ok for o in results)}/{len(results)} succeeded"
    )
    return results


async def generate_style_variants(
    request: DescriptionRequest, config: Settings
) -> Dict[str, DescriptionOutcome]:
    """Generate one description per style so a seller can pick a favourite."""
    styles = list(DescriptionStyle)
    variants = [
        request.model_copy(
            update={"id": f"{request.id}-{style.value}", "style": style.value}
        )
        for style in styles
    ]
    outcomes = await generate_multiple_descriptions(variants, config)
    return {style.value: outcome for style, outcome in zip(styles, outcomes)}


async def describe_listing_photo(
    request: DescriptionRequest, config: Settings, enhance: bool = True
) -> DescriptionOutcome:
    """
    Describe a listing photo, enhancing CDN URLs first when asked to.

    Enhancement is best effort: URLs that are not CDN delivery URLs are
    described as they are.
    """
    if enhance and request.image_url:
        request = request.model_copy(
            update={"image_url": enhance_or_original(request.image_url)}
        )
    return await generate_description(request, config)
