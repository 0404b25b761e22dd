"""
Property model for sale and rental listings.
Handles listing data, visibility flags, view counting and the owner relationship.
"""

from sqlalchemy import String, Text, Integer, Boolean, JSON, Enum as SQLEnum, Index, ForeignKey, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
from typing import List, Optional, TYPE_CHECKING
import enum
import uuid

if TYPE_CHECKING:
    from app.models.user import User


class PropertyType(str, enum.Enum):
    """Kind of real-estate unit."""
    FLAT = "flat"
    HOUSE = "house"
    VILLA = "villa"
    PLOT = "plot"
    SHOP = "shop"
    OFFICE = "office"


class ListingStatus(str, enum.Enum):
    """Whether the unit is offered for sale or for rent."""
    SALE = "sale"
    RENT = "rent"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Property(Base):
    """
    Property listing.
    A listing is publicly visible only when both is_approved and is_active are set.
    """

    __tablename__ = "properties"

    title: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment="Listing title"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Free-text description"
    )

    type: Mapped[PropertyType] = mapped_column(
        SQLEnum(PropertyType, values_callable=_enum_values),
        nullable=False,
        index=True
    )

    bhk: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        index=True,
        comment="Bedroom/hall/kitchen configuration, e.g. 2 or 1RK"
    )

    location: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True
    )

    price: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
        comment="Asking price or monthly rent"
    )

    area: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Carpet area in square feet"
    )

    status: Mapped[ListingStatus] = mapped_column(
        SQLEnum(ListingStatus, values_callable=_enum_values),
        nullable=False,
        default=ListingStatus.SALE,
        index=True
    )

    amenities: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list
    )

    images: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list
    )

    # Contact details shown on the listing
    owner_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    owner_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    owner_phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    is_approved: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True
    )

    views: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0
    )

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
        index=True
    )

    owner: Mapped["User"] = relationship(
        "User",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title[:30]}, price={self.price})>"

    @property
    def is_visible(self) -> bool:
        """Whether the listing may be shown to the public."""
        return self.is_approved and self.is_active


# Visibility filter used by every public query, newest first
visibility_index = Index(
    "idx_properties_visibility_created",
    Property.is_approved,
    Property.is_active,
    Property.created_at.desc()
)

# Common filter combination on the search page
type_bhk_price_index = Index(
    "idx_properties_type_bhk_price",
    Property.type,
    Property.bhk,
    Property.price
)

# Full-text search over the text fields (PostgreSQL only)
search_text_index = Index(
    "idx_properties_search_text",
    func.to_tsvector(
        "english",
        Property.title + " " + Property.description + " " + Property.location
    ),
    postgresql_using="gin"
).ddl_if(dialect="postgresql")
