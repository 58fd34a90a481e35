"""
CDN delivery URL codec.

Parses image delivery URLs of the form::

    https://host/[account/]<resource_type>/<delivery_type>/[transformations/][v<version>/]<public_id>[.<format>]

into :class:`AssetUrlParts` and serializes them back. Everything here is
purely syntactic; no network I/O is performed.
"""

import re
from typing import Any, List, Optional, Sequence, Tuple
from urllib.parse import urlsplit

from ..models import AssetUrlParts

RESOURCE_TYPES = frozenset({"image", "video", "raw"})

DELIVERY_TYPES = frozenset({"upload", "private", "authenticated", "fetch", "list"})

# Parameter keys that can open a directive, e.g. "c" in "c_pad".
TRANSFORMATION_KEYS = frozenset(
    {
        "a", "ac", "af", "ar", "b", "bo", "br", "c", "co", "cs", "d", "dl",
        "dn", "dpr", "du", "e", "eo", "f", "fl", "fn", "fps", "g", "h", "if",
        "ki", "l", "o", "p", "pg", "q", "r", "so", "sp", "t", "u", "vc", "vs",
        "w", "x", "y", "z",
    }
)  # fmt: skip

_VERSION_RE = re.compile(r"^v\d+$")
_DIRECTIVE_RE = re.compile(r"^([a-z]{1,3})_(\S+)$")
_NUMERIC_VALUE_RE = re.compile(r"^-?\d+(\.\d+)?(p|px)?$")

# Non-numeric values accepted when a URL carries no version token. Anything
# after a ":" is a parameter of the keyword, e.g. "auto:best" or "rgb:ffffff".
KNOWN_VALUES = frozenset(
    {
        # crop modes
        "crop", "fill", "fill_pad", "fit", "imagga_crop", "imagga_scale",
        "lfill", "limit", "lpad", "mfit", "mpad", "pad", "scale", "thumb",
        # gravity
        "auto", "center", "custom", "east", "face", "faces", "north",
        "north_east", "north_west", "south", "south_east", "south_west",
        "west",
        # effects
        "background_removal", "blur", "enhance", "gen_restore", "grayscale",
        "improve", "sharpen", "trim", "upscale", "vibrance",
        # formats and flags
        "avif", "gif", "jpg", "png", "progressive", "webp",
        # colours
        "black", "rgb", "transparent", "white",
    }
)  # fmt: skip


class MalformedAssetUrlError(ValueError):
    """Raised when a URL does not have the shape of a CDN delivery URL."""

    pass


def _is_directive(directive: str, strict: bool = False) -> bool:
    match = _DIRECTIVE_RE.match(directive)
    if not match or match.group(1) not in TRANSFORMATION_KEYS:
        return False
    if not strict:
        return True
    value = match.group(2)
    return bool(_NUMERIC_VALUE_RE.match(value)) or (
        value.split(":", 1)[0] in KNOWN_VALUES
    )


def _is_transformation(component: str, strict: bool = False) -> bool:
    """
    Check whether a path component is a comma-joined list of directives.

    In strict mode every directive value must also be a number or a known
    keyword, so folders such as ``t_shirts`` are not mistaken for directives.
    """
    return all(
        _is_directive(directive, strict) for directive in component.split(",")
    )


def _split_transformations(
    rest: Sequence[str],
) -> Tuple[Tuple[str, ...], Optional[str], List[str]]:
    """
    Separate transformation components, version token and public id segments.

    With a version token, everything between the delivery type and the
    version must be a transformation. Without one, only the leading
    components whose directives all carry recognizable values are taken.
    """
    for index, component in enumerate(rest):
        if _VERSION_RE.match(component):
            leading = rest[:index]
            if all(_is_transformation(c) for c in leading):
                return tuple(leading), component, list(rest[index + 1 :])
            break

    count = 0
    while count < len(rest) and _is_transformation(rest[count], strict=True):
        count += 1
    return tuple(rest[:count]), None, list(rest[count:])


def parse_asset_url(url: str) -> AssetUrlParts:
    """
    Parse a CDN delivery URL into its structural parts.

    Args:
        url: The delivery URL

    Returns:
        AssetUrlParts: Parsed representation

    Raises:
        MalformedAssetUrlError: If the URL is not a recognized delivery URL
    """
    if not isinstance(url, str) or not url:
        raise MalformedAssetUrlError("Asset URL must be a non-empty string")

    if any(ch.isspace() for ch in url):
        raise MalformedAssetUrlError("Asset URL must not contain whitespace")

    try:
        split = urlsplit(url)
    except ValueError as e:
        raise MalformedAssetUrlError(f"Could not parse asset URL: {e}") from e

    if split.scheme.lower() not in ("http", "https") or not split.netloc:
        raise MalformedAssetUrlError("Asset URL must be an absolute http(s) URL")

    # urlsplit lowercases the scheme, so slice the original string instead.
    origin = url[: len(split.scheme) + 3 + len(split.netloc)]
    if not url.startswith(origin + split.path) or not split.path.startswith("/"):
        raise MalformedAssetUrlError("Asset URL has an unsupported layout")
    suffix = url[len(origin) + len(split.path) :]

    segments = split.path[1:].split("/")
    for index in range(len(segments) - 1):
        if segments[index] in RESOURCE_TYPES and segments[index + 1] in DELIVERY_TYPES:
            break
    else:
        raise MalformedAssetUrlError("No delivery type segment found in asset URL")

    rest = segments[index + 2 :]
    if any(not segment for segment in rest):
        raise MalformedAssetUrlError("Asset URL contains empty path segments")

    transformations, version, id_segments = _split_transformations(rest)
    if not id_segments:
        raise MalformedAssetUrlError("Asset URL has no public ID")

    stem, dot, extension = id_segments[-1].rpartition(".")
    file_format = None
    if dot and stem and extension:
        id_segments[-1] = stem
        file_format = extension

    return AssetUrlParts(
        origin=origin,
        path_prefix=tuple(segments[:index]),
        resource_type=segments[index],
        delivery_type=segments[index + 1],
        transformations=transformations,
        version=version,
        public_id="/".join(id_segments),
        format=file_format,
        suffix=suffix,
    )


def is_recognized_asset_url(url: Any) -> bool:
    """Return True if ``url`` has the structure of a CDN delivery URL."""
    try:
        parse_asset_url(url)
    except MalformedAssetUrlError:
        return False
    return True


def extract_public_id(url: str) -> str:
    """
    Extract the public ID (folder path + base name) from a delivery URL.

    Example:
        >>> extract_public_id(
        ...     "https://cdn.example.com/image/upload/v1700000000/second-hand/listings/chair.jpg"
        ... )
        'second-hand/listings/chair'
    """
    return parse_asset_url(url).public_id


def build_url(parts: AssetUrlParts) -> str:
    """Serialize URL parts back into a delivery URL."""
    segments = [*parts.path_prefix, parts.resource_type, parts.delivery_type]
    segments.extend(parts.transformations)
    if parts.version:
        segments.append(parts.version)

    name = parts.public_id
    if parts.format:
        name = f"{name}.{parts.format}"
    segments.append(name)

    return f"{parts.origin}/{'/'.join(segments)}{parts.suffix}"
