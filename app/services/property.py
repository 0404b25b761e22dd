"""
Property service for listing search, public detail views and admin management.
Applies visibility, approval and image rules on top of the repository.
"""

from typing import Optional, List, Tuple, Union
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.repositories.property import PropertyRepository
from app.models.property import Property
from app.models.user import User
from app.schemas.property import PropertyCreate, PropertyUpdate, PropertySearchFilters
from app.utils.exceptions import PropertyNotFoundError
import uuid
import logging

logger = logging.getLogger(__name__)


def parse_property_id(property_id: Union[str, uuid.UUID]) -> Optional[uuid.UUID]:
    """Parse a listing ID from a path segment; None when it is not a UUID."""
    if isinstance(property_id, uuid.UUID):
        return property_id
    try:
        return uuid.UUID(str(property_id))
    except (ValueError, AttributeError):
        return None


class PropertyService:
    """
    Property service for the public catalogue and admin listing management.
    Hidden listings and malformed IDs are reported exactly like missing ones.
    """

    def __init__(self, db_session: AsyncSession, placeholder_image_url: Optional[str] = None):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)
        self.placeholder_image_url = placeholder_image_url or settings.placeholder_image_url

    async def search(self, filters: PropertySearchFilters) -> Tuple[List[Property], int]:
        """
        Search publicly visible listings.

        Args:
            filters: Validated search filters

        Returns:
            Tuple of (page of properties, total matching count)
        """
        return await self.property_repo.search_properties(filters)

    async def get_public_property(self, property_id: Union[str, uuid.UUID]) -> Property:
        """
        Fetch a visible listing and count the view.

        Args:
            property_id: Listing ID as received in the path

        Returns:
            Listing with owner loaded, reflecting the incremented view count

        Raises:
            PropertyNotFoundError: If the ID is malformed, unknown, or not visible
        """
        parsed_id = parse_property_id(property_id)
        if parsed_id is None:
            raise PropertyNotFoundError()

        property_obj = await self.property_repo.get_property_with_owner(parsed_id)
        if not property_obj or not property_obj.is_visible:
            raise PropertyNotFoundError()

        await self.property_repo.increment_views(parsed_id)

        property_obj = await self.property_repo.get_property_with_owner(parsed_id)
        if not property_obj:
            # Deleted between the read and the increment
            raise PropertyNotFoundError()
        return property_obj

    async def create_property(self, property_data: PropertyCreate, admin: User) -> Property:
        """
        Create a listing owned by the acting admin.
        Listings go live immediately: approval and activity are forced on.

        Args:
            property_data: Validated listing payload
            admin: Administrator creating the listing

        Returns:
            Created listing with owner loaded
        """
        create_data = property_data.model_dump(exclude={"image", "images"})
        create_data.update({
            "images": property_data.resolve_images(self.placeholder_image_url),
            "is_approved": True,
            "is_active": True,
            "owner_id": admin.id,
        })

        property_obj = await self.property_repo.create_property(create_data)
        logger.info(f"Property created by admin {admin.phone}: {property_obj.title} (ID: {property_obj.id})")
        return property_obj

    async def update_property(
        self,
        property_id: Union[str, uuid.UUID],
        property_data: PropertyUpdate
    ) -> Property:
        """
        Apply the supplied fields to a listing and re-approve it.

        Args:
            property_id: Listing ID
            property_data: Fields to change; omitted fields are left as-is

        Returns:
            Updated listing with owner loaded

        Raises:
            PropertyNotFoundError: If the listing does not exist
        """
        parsed_id = parse_property_id(property_id)
        if parsed_id is None:
            raise PropertyNotFoundError()

        update_data = property_data.model_dump(exclude_unset=True)
        update_data["is_approved"] = True

        updated = await self.property_repo.update(parsed_id, update_data)
        if not updated:
            raise PropertyNotFoundError()

        logger.info(f"Property updated: {parsed_id} ({', '.join(sorted(update_data))})")
        return updated

    async def delete_property(self, property_id: Union[str, uuid.UUID]) -> None:
        """
        Permanently remove a listing.

        Raises:
            PropertyNotFoundError: If the listing does not exist
        """
        parsed_id = parse_property_id(property_id)
        if parsed_id is None or not await self.property_repo.delete(parsed_id):
            raise PropertyNotFoundError()

        logger.info(f"Property deleted: {parsed_id}")

    async def list_all(self) -> List[Property]:
        """All listings for the admin view, including hidden ones."""
        return await self.property_repo.list_all()
