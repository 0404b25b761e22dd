"""
Pydantic schemas for property requests and responses.
Handles listing create/update payloads, search filters and paginated results.
"""

from pydantic import EmailStr, Field, ValidationInfo, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime
from app.models.property import PropertyType, ListingStatus
from app.schemas.common import CamelModel
from app.config import settings
import uuid

# Filter value meaning "do not filter on this field"
ANY_VALUE = "all"

# Public sort keys mapped to model attributes
SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "price": "price",
    "views": "views",
    "title": "title",
    "area": "area",
}


def _strip_required(v: str, label: str) -> str:
    if not v or not v.strip():
        raise ValueError(f"{label} cannot be empty")
    return v.strip()


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class PropertyBase(CamelModel):
    """Base property schema with common fields."""

    title: str = Field(
        ...,
        min_length=3,
        max_length=200,
        description="Listing title",
        examples=["Spacious 2BHK near Vasai station"]
    )

    description: str = Field(
        "",
        max_length=5000,
        description="Detailed description"
    )

    type: PropertyType = Field(
        ...,
        description="Kind of unit",
        examples=["flat"]
    )

    bhk: Optional[str] = Field(
        None,
        max_length=20,
        description="Bedroom configuration",
        examples=["2"]
    )

    location: str = Field(
        ...,
        min_length=2,
        max_length=255,
        description="Locality or address",
        examples=["Vasai West"]
    )

    price: int = Field(
        ...,
        ge=0,
        description="Asking price or monthly rent",
        examples=[4500000]
    )

    area: Optional[int] = Field(
        None,
        gt=0,
        le=1000000,
        description="Carpet area in square feet"
    )

    status: ListingStatus = Field(
        ListingStatus.SALE,
        description="Offered for sale or rent"
    )

    amenities: List[str] = Field(default_factory=list)

    owner_name: Optional[str] = Field(None, max_length=100)
    owner_email: Optional[EmailStr] = Field(None)
    owner_phone: Optional[str] = Field(None, max_length=20)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _strip_required(v, "Title")

    @field_validator("location")
    @classmethod
    def validate_location(cls, v):
        return _strip_required(v, "Location")

    @field_validator("owner_email", "bhk", mode="before")
    @classmethod
    def blank_optional_strings(cls, v):
        return _blank_to_none(v)


class PropertyCreate(PropertyBase):
    """Schema for creating a new listing."""

    image: Optional[str] = Field(
        None,
        max_length=2048,
        description="Single image URL"
    )
    images: Optional[List[str]] = Field(
        None,
        description="Ordered image URLs; takes precedence over image"
    )

    def resolve_images(self, placeholder: str) -> List[str]:
        """Images to store: explicit list, else the single image, else the placeholder."""
        if self.images:
            return list(self.images)
        if self.image:
            return [self.image]
        return [placeholder]


class PropertyUpdate(CamelModel):
    """
    Schema for updating an existing listing.
    Only fields present in the payload are applied.
    """

    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    type: Optional[PropertyType] = None
    bhk: Optional[str] = Field(None, max_length=20)
    location: Optional[str] = Field(None, min_length=2, max_length=255)
    price: Optional[int] = Field(None, ge=0)
    area: Optional[int] = Field(None, gt=0, le=1000000)
    status: Optional[ListingStatus] = None
    amenities: Optional[List[str]] = None
    images: Optional[List[str]] = None
    owner_name: Optional[str] = Field(None, max_length=100)
    owner_email: Optional[EmailStr] = None
    owner_phone: Optional[str] = Field(None, max_length=20)
    is_active: Optional[bool] = None
    is_approved: Optional[bool] = None

    @field_validator(
        "title", "description", "type", "location", "price", "status",
        "amenities", "images", "is_active", "is_approved",
        mode="before"
    )
    @classmethod
    def reject_null(cls, v, info: ValidationInfo):
        # These columns are NOT NULL; omit a field to leave it unchanged
        if v is None:
            raise ValueError(f"{to_camel(info.field_name)} cannot be null")
        return v

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if v is None:
            return v
        return _strip_required(v, "Title")

    @field_validator("location")
    @classmethod
    def validate_location(cls, v):
        if v is None:
            return v
        return _strip_required(v, "Location")

    @field_validator("owner_email", mode="before")
    @classmethod
    def blank_email(cls, v):
        return _blank_to_none(v)


class OwnerSummary(CamelModel):
    """Owner identity fields projected into listings."""

    id: uuid.UUID
    name: str
    email: Optional[str] = None
    phone: str


class PropertyResponse(CamelModel):
    """Listing as returned by the API."""

    id: uuid.UUID
    title: str
    description: str
    type: PropertyType
    bhk: Optional[str] = None
    location: str
    price: int
    area: Optional[int] = None
    status: ListingStatus
    amenities: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    owner_name: Optional[str] = None
    owner_email: Optional[str] = None
    owner_phone: Optional[str] = None
    is_approved: bool
    is_active: bool
    views: int
    owner: Optional[OwnerSummary] = None
    created_at: datetime
    updated_at: datetime


class PropertyData(CamelModel):
    property: PropertyResponse


class PaginationMeta(CamelModel):
    """Pagination metadata for search results."""

    current_page: int
    total_pages: int
    total_properties: int
    has_next: bool
    has_prev: bool


class PropertyListData(CamelModel):
    """Paginated search results."""

    properties: List[PropertyResponse]
    pagination: PaginationMeta


class PropertyCollection(CamelModel):
    """Unpaginated list used by the admin management view."""

    properties: List[PropertyResponse]


class PropertySearchFilters(CamelModel):
    """Public search filters; every supplied filter narrows the result."""

    page: int = Field(1, ge=1, description="Page number (starts from 1)")
    limit: int = Field(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Listings per page"
    )
    location: Optional[str] = Field(None, max_length=255, description="Case-insensitive substring")
    type: Optional[str] = Field(None, description="Property type or 'all'")
    bhk: Optional[str] = Field(None, max_length=20, description="Bedroom configuration or 'all'")
    status: Optional[ListingStatus] = Field(None, description="sale or rent")
    min_price: Optional[int] = Field(None, ge=0)
    max_price: Optional[int] = Field(None, ge=0)
    search: Optional[str] = Field(None, max_length=255, description="Full-text query")
    sort_by: str = Field("createdAt", description="Sort field")
    sort_order: str = Field("desc", description="asc or desc")

    @field_validator("location", "type", "bhk", "search", "status", mode="before")
    @classmethod
    def blank_filters(cls, v):
        """Empty query parameters mean no filter."""
        return _blank_to_none(v)

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        if v is None or v == ANY_VALUE:
            return v
        allowed = [t.value for t in PropertyType]
        if v not in allowed:
            raise ValueError(f"Type must be one of: {', '.join(allowed + [ANY_VALUE])}")
        return v

    @field_validator("sort_by")
    @classmethod
    def validate_sort_by(cls, v):
        if v not in SORT_FIELDS:
            raise ValueError(f"Sort field must be one of: {', '.join(SORT_FIELDS)}")
        return v

    @field_validator("sort_order")
    @classmethod
    def validate_sort_order(cls, v):
        if v.lower() not in ["asc", "desc"]:
            raise ValueError("Sort order must be 'asc' or 'desc'")
        return v.lower()

    @model_validator(mode="after")
    def validate_price_range(self):
        if self.min_price is not None and self.max_price is not None:
            if self.min_price > self.max_price:
                raise ValueError("Minimum price cannot be greater than maximum price")
        return self

    @property
    def type_filter(self) -> Optional[PropertyType]:
        """Concrete type to match, or None when not filtering."""
        if self.type is None or self.type == ANY_VALUE:
            return None
        return PropertyType(self.type)

    @property
    def bhk_filter(self) -> Optional[str]:
        if self.bhk is None or self.bhk == ANY_VALUE:
            return None
        return self.bhk

    @property
    def sort_column(self) -> str:
        return SORT_FIELDS[self.sort_by]

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
