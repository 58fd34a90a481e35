"""
Product image enhancement through CDN delivery transformations.

Enhancement inserts a fixed directive chain into the delivery URL:

- e_background_removal: remove the background
- b_white: fill the removed background with white
- c_pad,w_1000,h_1000: pad to a 1000x1000 square (after compositing)
- q_auto:best: automatic quality, best effort
- f_auto: automatic delivery format

Reversion strips exactly that chain and nothing else, so the original URL
can be recovered without any stored state.
"""

import logging
from typing import Any, Iterable, List

from ..models import EnhancedImage
from .cdn import MalformedAssetUrlError, build_url, parse_asset_url

logger = logging.getLogger(__name__)

ENHANCEMENT_SIZE = 1000

ENHANCEMENT_CHAIN = (
    "e_background_removal",
    "b_white",
    "c_pad",
    f"w_{ENHANCEMENT_SIZE}",
    f"h_{ENHANCEMENT_SIZE}",
    "q_auto:best",
    "f_auto",
)

ENHANCEMENT_SEGMENT = ",".join(ENHANCEMENT_CHAIN)

SQUARE_SEGMENT = "w_1000,h_1000,c_fill,g_auto,q_auto:good,f_auto"
PORTRAIT_SEGMENT = "w_750,h_1000,c_fill,g_auto,q_auto:good,f_auto"
THUMBNAIL_SEGMENT = "w_400,h_400,c_fill,g_auto,q_auto:good,f_auto"


class EnhancementError(Exception):
    """Raised when a product image cannot be enhanced."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def generate_enhanced_url(url: str) -> str:
    """
    Return ``url`` with the enhancement chain as its transformation segment.

    Any existing transformation segment is replaced, so enhancing an already
    enhanced URL returns it unchanged.

    Raises:
        MalformedAssetUrlError: If ``url`` is not a recognized delivery URL
    """
    parts = parse_asset_url(url)
    return build_url(parts.with_transformations((ENHANCEMENT_SEGMENT,)))


def revert_to_original(enhanced_url: str) -> str:
    """
    Remove the enhancement chain from a delivery URL.

    URLs whose transformation segment is not exactly the enhancement chain,
    including URLs that cannot be parsed at all, are returned unchanged.
    """
    try:
        parts = parse_asset_url(enhanced_url)
    except MalformedAssetUrlError:
        return enhanced_url

    if parts.transformations != (ENHANCEMENT_SEGMENT,):
        return enhanced_url

    return build_url(parts.with_transformations(()))


def enhance_or_original(url: str) -> str:
    """Enhance ``url`` when possible, otherwise hand it back untouched."""
    try:
        return generate_enhanced_url(url)
    except MalformedAssetUrlError as e:
        logger.warning(f"Skipping enhancement, not a CDN asset URL: {e}")
        return url


def enhance_product_image(image_url: Any) -> EnhancedImage:
    """
    Enhance a product photo for use in a listing.

    Args:
        image_url: URL returned by the upload step

    Returns:
        EnhancedImage: Original and enhanced URLs with output dimensions

    Raises:
        EnhancementError: ``INVALID_URL`` for empty input, ``NOT_CDN`` for
            URLs that are not CDN delivery URLs
    """
    if not image_url or not isinstance(image_url, str):
        raise EnhancementError("INVALID_URL", "Image URL must be a non-empty string")

    try:
        enhanced_url = generate_enhanced_url(image_url)
    except MalformedAssetUrlError as e:
        raise EnhancementError(
            "NOT_CDN", f"Image URL must be a CDN delivery URL: {e}"
        ) from e

    return EnhancedImage(
        original_url=image_url,
        enhanced_url=enhanced_url,
        width=ENHANCEMENT_SIZE,
        height=ENHANCEMENT_SIZE,
        format="auto",
    )


def enhance_product_images(image_urls: Iterable[Any]) -> List[EnhancedImage]:
    """Enhance several product photos, failing on the first invalid URL."""
    return [enhance_product_image(url) for url in image_urls]


def _with_preset(url: str, segment: str) -> str:
    try:
        parts = parse_asset_url(url)
    except MalformedAssetUrlError:
        return url
    return build_url(parts.with_transformations((segment,)))


def square_url(url: str) -> str:
    """1000x1000 smart-cropped delivery URL."""
    return _with_preset(url, SQUARE_SEGMENT)


def portrait_url(url: str) -> str:
    """750x1000 (3:4) smart-cropped delivery URL."""
    return _with_preset(url, PORTRAIT_SEGMENT)


def thumbnail_url(url: str) -> str:
    """400x400 smart-cropped delivery URL."""
    return _with_preset(url, THUMBNAIL_SEGMENT)
