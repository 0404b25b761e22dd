"""
Property repository for listings with search, filtering and view counting.
Builds the public search query and keeps view increments atomic.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_, or_, func, desc, asc
from sqlalchemy.orm import selectinload
from app.repositories.base import BaseRepository
from app.models.property import Property
from app.schemas.property import PropertySearchFilters
from typing import Optional, List, Dict, Any, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for property listings.
    Public queries only ever see approved and active listings.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def create_property(self, property_data: Dict[str, Any]) -> Property:
        """
        Create a listing and return it with its owner loaded.

        Args:
            property_data: Column values, including owner_id

        Returns:
            Created property instance
        """
        created = await self.create(property_data)
        logger.info(f"Created property: {created.title} (ID: {created.id})")
        return await self.get_property_with_owner(created.id)

    async def get_property_with_owner(self, property_id: uuid.UUID) -> Optional[Property]:
        """
        Get a listing with its owner, bypassing visibility rules.

        Args:
            property_id: UUID of the property

        Returns:
            Property with owner loaded or None if not found
        """
        query = (
            select(Property)
            .options(selectinload(Property.owner))
            .where(Property.id == property_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def increment_views(self, property_id: uuid.UUID) -> bool:
        """
        Add one to the view counter in a single UPDATE statement.

        Returns:
            True if a row was updated
        """
        try:
            result = await self.db.execute(
                update(Property)
                .where(Property.id == property_id)
                .values(views=Property.views + 1)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            return result.rowcount > 0
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to increment views for property {property_id}: {e}")
            raise

    async def search_properties(self, filters: PropertySearchFilters) -> Tuple[List[Property], int]:
        """
        Search visible listings with filtering, sorting and pagination.

        Args:
            filters: Validated search filters

        Returns:
            Tuple of (properties on the requested page, total matching count)
        """
        conditions = self._build_filter_conditions(filters)

        count_query = select(func.count(Property.id)).where(and_(*conditions))
        total_count = (await self.db.execute(count_query)).scalar() or 0

        order_field = getattr(Property, filters.sort_column)
        direction = desc if filters.sort_order == "desc" else asc

        query = (
            select(Property)
            .options(selectinload(Property.owner))
            .where(and_(*conditions))
            .order_by(direction(order_field), direction(Property.id))
            .offset(filters.offset)
            .limit(filters.limit)
        )

        result = await self.db.execute(query)
        properties = list(result.scalars().all())

        logger.debug(f"Property search returned {len(properties)} of {total_count} total results")
        return properties, total_count

    def _build_filter_conditions(self, filters: PropertySearchFilters) -> List:
        """
        Build SQLAlchemy filter conditions from search filters.

        Args:
            filters: Validated search filters

        Returns:
            List of SQLAlchemy conditions, combined conjunctively by the caller
        """
        conditions = [
            Property.is_approved.is_(True),
            Property.is_active.is_(True),
        ]

        # Location filter (case-insensitive partial match)
        if filters.location:
            conditions.append(Property.location.icontains(filters.location, autoescape=True))

        if filters.type_filter is not None:
            conditions.append(Property.type == filters.type_filter)

        if filters.bhk_filter is not None:
            conditions.append(Property.bhk == filters.bhk_filter)

        if filters.status is not None:
            conditions.append(Property.status == filters.status)

        # Price range filters (inclusive)
        if filters.min_price is not None:
            conditions.append(Property.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Property.price <= filters.max_price)

        if filters.search:
            conditions.append(self._text_search_condition(filters.search))

        return conditions

    def _text_search_condition(self, search: str):
        """
        Full-text match over title, description and location.
        PostgreSQL uses the tsvector index; other engines fall back to substring matching.
        """
        if self.db.bind.dialect.name == "postgresql":
            document = func.to_tsvector(
                "english",
                Property.title + " " + Property.description + " " + Property.location
            )
            return document.op("@@")(func.plainto_tsquery("english", search))

        terms = [term for term in search.split() if term]
        return and_(*[
            or_(
                Property.title.icontains(term, autoescape=True),
                Property.description.icontains(term, autoescape=True),
                Property.location.icontains(term, autoescape=True),
            )
            for term in terms
        ])

    async def list_all(self) -> List[Property]:
        """Every listing regardless of approval or activity, newest first."""
        query = (
            select(Property)
            .options(selectinload(Property.owner))
            .order_by(desc(Property.created_at))
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())
