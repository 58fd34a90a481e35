"""
Secondlook - product photo enhancement and AI listing descriptions for a
second-hand marketplace.

This package rewrites CDN delivery URLs to apply (and remove) a fixed
enhancement chain, and generates listing descriptions from product photos
with validated inputs and a closed error taxonomy.
"""

# Runtime guard to ensure Pydantic v2 is installed
import pydantic

# Essential package-level exports for public API
from .config import Settings, load_config
from .errors import AIError, ErrorCode, get_user_friendly_message, is_ai_error
from .models import DescriptionOutcome, DescriptionRequest, DescriptionResult

assert pydantic.VERSION.startswith("2."), (
    f"Pydantic v2 or greater is required, but found version {pydantic.VERSION}. "
    "Please upgrade with: pip install 'pydantic>=2.0,<3.0'"
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Settings",
    "load_config",
    "AIError",
    "ErrorCode",
    "get_user_friendly_message",
    "is_ai_error",
    "DescriptionRequest",
    "DescriptionResult",
    "DescriptionOutcome",
]
