"""
Core data models for secondlook package.

This module defines Pydantic models for asset URLs, description requests,
results and other data structures used throughout the application.
"""

import uuid
from enum import Enum
from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import BaseModel, Field, validator

from .errors import AIError


class Category(str, Enum):
    """Listing categories the description generator understands."""

    ELECTRONICS = "ELECTRONICS"
    CLOTHING = "CLOTHING"
    HOME_GARDEN = "HOME_GARDEN"
    SPORTS = "SPORTS"
    BOOKS = "BOOKS"
    TOYS = "TOYS"
    VEHICLES = "VEHICLES"
    COLLECTIBLES = "COLLECTIBLES"
    BABY_KIDS = "BABY_KIDS"
    PET_SUPPLIES = "PET_SUPPLIES"


class Condition(str, Enum):
    """Item conditions a seller can pick."""

    NEW = "NEW"
    LIKE_NEW = "LIKE_NEW"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"


class DescriptionStyle(str, Enum):
    """Prompt template flavours."""

    DETAILED = "detailed"
    CONCISE = "concise"
    SEO = "seo"


class AssetUrlParts(BaseModel):
    """
    Structural breakdown of a CDN delivery URL.

    ``origin`` and ``suffix`` are kept verbatim so that serializing an
    unchanged instance reproduces the parsed URL exactly.
    """

    origin: str = Field(
        ..., description="Scheme and network location, e.g. https://host", min_length=1
    )

    path_prefix: Tuple[str, ...] = Field(
        default=(), description="Path segments before the resource type"
    )

    resource_type: str = Field(..., description="Resource type segment", min_length=1)

    delivery_type: str = Field(..., description="Delivery type segment", min_length=1)

    transformations: Tuple[str, ...] = Field(
        default=(),
        description="Transformation components, each a comma-joined directive list",
    )

    version: Optional[str] = Field(
        default=None, description="Version token such as v1700000000", pattern=r"^v\d+$"
    )

    public_id: str = Field(
        ..., description="Folder path and base name of the asset", min_length=1
    )

    format: Optional[str] = Field(default=None, description="File extension")

    suffix: str = Field(default="", description="Verbatim query and fragment tail")

    @validator("transformations")
    def validate_transformations(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        """Reject empty or slash-containing components."""
        for component in v:
            if not component or "/" in component:
                raise ValueError(f"Invalid transformation component: {component!r}")
        return v

    @property
    def directives(self) -> Tuple[str, ...]:
        """All directive strings of the transformation segment, in order."""
        return tuple(
            directive
            for component in self.transformations
            for directive in component.split(",")
        )

    def with_transformations(self, transformations: Tuple[str, ...]) -> "AssetUrlParts":
        """Return a copy carrying a different transformation segment."""
        return self.model_copy(update={"transformations": tuple(transformations)})

    class Config:
        """Pydantic configuration."""

        frozen = True
        extra = "forbid"


class EnhancedImage(BaseModel):
    """Result of enhancing a product photo for a listing."""

    original_url: str = Field(..., description="URL returned by the upload step")

    enhanced_url: str = Field(..., description="URL with the enhancement chain")

    width: int = Field(default=1000, ge=1)

    height: int = Field(default=1000, ge=1)

    format: str = Field(
        default="auto", description="Delivery format, chosen by the CDN when auto"
    )


class DescriptionRequest(BaseModel):
    """
    A single description generation request.

    Category, condition and style are kept as plain strings: membership
    checks happen in the orchestrator so that they fail in a fixed order.
    """

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique identifier for this request",
    )

    image_url: Optional[str] = Field(
        default=None, description="Absolute URL of the product photo"
    )

    category: Optional[str] = Field(default=None, description="Listing category code")

    condition: Optional[str] = Field(default=None, description="Item condition code")

    title: Optional[str] = Field(
        default=None, description="Seller supplied title", max_length=200
    )

    style: Optional[str] = Field(
        default=None, description="Prompt template style, configured default if unset"
    )

    row_number: Optional[int] = Field(
        default=None, description="Source line number when loaded from a batch file"
    )

    @validator("title")
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        """Treat blank titles as missing."""
        if v is None:
            return v
        cleaned = v.strip()
        return cleaned or None

    class Config:
        """Pydantic configuration."""

        extra = "forbid"


class DescriptionAttributes(BaseModel):
    """Attributes spotted in a generated description."""

    color: Optional[str] = None
    material: Optional[str] = None
    brand: Optional[str] = None
    style: Optional[str] = None


class DescriptionResult(BaseModel):
    """
    Represents a successfully generated listing description.
    """

    description: str = Field(..., description="Generated description text")

    suggested_title: Optional[str] = Field(
        default=None, description="Title proposed by the model, when requested"
    )

    word_count: int = Field(default=0, ge=0)

    character_count: int = Field(default=0, ge=0)

    attributes: DescriptionAttributes = Field(default_factory=DescriptionAttributes)

    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional metadata about the generation process",
    )

    def add_metadata(self, key: str, value: Any) -> None:
        """Add a metadata entry to the result."""
        self.metadata[key] = value

    def get_metadata(self, key: str, default: Any = None) -> Any:
        """Get a metadata value with optional default."""
        return self.metadata.get(key, default)

    class Config:
        """Pydantic configuration."""

        validate_assignment = True
        extra = "forbid"


class DescriptionOutcome(BaseModel):
    """
    Outcome of one description request: either a result or a classified error.
    """

    request_id: str = Field(..., description="ID of the originating request")

    status: Literal["success", "failure"] = Field(...)

    result: Optional[DescriptionResult] = Field(default=None)

    error: Optional[AIError] = Field(default=None)

    processing_time_seconds: Optional[float] = Field(default=None, ge=0.0)

    @validator("error", always=True)
    def validate_error_matches_status(
        cls, v: Optional[AIError], values: Dict[str, Any]
    ) -> Optional[AIError]:
        """A failure carries an error, a success carries none."""
        status = values.get("status")
        if status == "failure" and v is None:
            raise ValueError("Failed outcome requires an error")
        if status == "success" and v is not None:
            raise ValueError("Successful outcome cannot carry an error")
        return v

    @property
    def ok(self) -> bool:
        return self.status == "success"

    @classmethod
    def success(
        cls,
        request_id: str,
        result: DescriptionResult,
        processing_time_seconds: Optional[float] = None,
    ) -> "DescriptionOutcome":
        return cls(
            request_id=request_id,
            status="success",
            result=result,
            processing_time_seconds=processing_time_seconds,
        )

    @classmethod
    def failure(
        cls,
        request_id: str,
        error: AIError,
        processing_time_seconds: Optional[float] = None,
    ) -> "DescriptionOutcome":
        return cls(
            request_id=request_id,
            status="failure",
            error=error,
            processing_time_seconds=processing_time_seconds,
        )
