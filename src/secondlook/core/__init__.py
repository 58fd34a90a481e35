"""
Core functionality for secondlook package.

This package contains the CDN URL codec, the enhancement pipeline, batch
input parsing and the description generation orchestrator.
"""

from .batch_parser import BatchParseError, parse_batch_input
from .cdn import (
    MalformedAssetUrlError,
    build_url,
    extract_public_id,
    is_recognized_asset_url,
    parse_asset_url,
)
from .enhancement import (
    ENHANCEMENT_CHAIN,
    EnhancementError,
    enhance_or_original,
    enhance_product_image,
    generate_enhanced_url,
    revert_to_original,
)
from .generation import (
    generate_description,
    generate_multiple_descriptions,
    generate_style_variants,
)

__all__ = [
    "MalformedAssetUrlError",
    "build_url",
    "extract_public_id",
    "is_recognized_asset_url",
    "parse_asset_url",
    "ENHANCEMENT_CHAIN",
    "EnhancementError",
    "enhance_or_original",
    "enhance_product_image",
    "generate_enhanced_url",
    "revert_to_original",
    "generate_description",
    "generate_multiple_descriptions",
    "generate_style_variants",
    "BatchParseError",
    "parse_batch_input",
]
