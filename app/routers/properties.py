"""
Property API endpoints: public search and detail views, admin listing management.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, status, Query, Path
from typing import Optional
import logging
import math

from app.config import settings
from app.models.user import User
from app.services.property import PropertyService
from app.services.notification import NotificationService, dispatch_notification
from app.schemas.common import APIResponse
from app.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyData,
    PropertyListData,
    PropertyCollection,
    PropertySearchFilters,
    PaginationMeta,
)
from app.utils.dependencies import (
    get_notification_service,
    get_property_service,
    require_permission,
)
from app.utils.permissions import Permission
from app.utils.exceptions import APIException, InternalServerError
from app.services.error_handler import ERROR_RESPONSES

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/properties", tags=["Properties"])

_ADMIN_ERRORS = {code: ERROR_RESPONSES[code] for code in (400, 401, 403, 404)}


def build_pagination(page: int, limit: int, total: int) -> PaginationMeta:
    total_pages = math.ceil(total / limit)
    return PaginationMeta(
        current_page=page,
        total_pages=total_pages,
        total_properties=total,
        has_next=page < total_pages,
        has_prev=page > 1
    )


@router.get(
    "",
    response_model=APIResponse[PropertyListData],
    status_code=status.HTTP_200_OK,
    summary="Search properties",
    description="Paginated search over approved, active listings"
)
async def list_properties(
    page: int = Query(1, description="Page number (starts from 1)"),
    limit: int = Query(settings.default_page_size, description="Listings per page"),
    location: Optional[str] = Query(None, description="Case-insensitive location match"),
    type: Optional[str] = Query(None, description="Property type, or 'all'"),
    bhk: Optional[str] = Query(None, description="Bedroom configuration, or 'all'"),
    listing_status: Optional[str] = Query(None, alias="status", description="sale or rent"),
    min_price: Optional[int] = Query(None, alias="minPrice", description="Inclusive lower price bound"),
    max_price: Optional[int] = Query(None, alias="maxPrice", description="Inclusive upper price bound"),
    search: Optional[str] = Query(None, description="Full-text query over title, description and location"),
    sort_by: str = Query("createdAt", alias="sortBy", description="Sort field"),
    sort_order: str = Query("desc", alias="sortOrder", description="asc or desc"),
    property_service: PropertyService = Depends(get_property_service)
) -> APIResponse[PropertyListData]:
    """
    Search visible listings.

    Every supplied filter narrows the result; 'all' disables the type and bhk filters.
    """
    # Invalid combinations surface as 400 validation errors
    filters = PropertySearchFilters(
        page=page,
        limit=limit,
        location=location,
        type=type,
        bhk=bhk,
        status=listing_status,
        min_price=min_price,
        max_price=max_price,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order
    )

    try:
        properties, total = await property_service.search(filters)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Property search failed: {e}", exc_info=True)
        raise InternalServerError("Server error while fetching properties")

    return APIResponse(
        data=PropertyListData(
            properties=[PropertyResponse.model_validate(p) for p in properties],
            pagination=build_pagination(filters.page, filters.limit, total)
        )
    )


@router.get(
    "/admin/all-properties",
    response_model=APIResponse[PropertyCollection],
    status_code=status.HTTP_200_OK,
    summary="List all properties",
    description="Every listing regardless of approval or activity. Admin only.",
    responses=_ADMIN_ERRORS
)
async def list_all_properties(
    current_user: User = Depends(require_permission(Permission.VIEW_ALL_PROPERTIES)),
    property_service: PropertyService = Depends(get_property_service)
) -> APIResponse[PropertyCollection]:
    try:
        properties = await property_service.list_all()
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Listing all properties failed: {e}", exc_info=True)
        raise InternalServerError("Server error while fetching all properties")

    return APIResponse(
        data=PropertyCollection(
            properties=[PropertyResponse.model_validate(p) for p in properties]
        )
    )


@router.get(
    "/{property_id}",
    response_model=APIResponse[PropertyData],
    status_code=status.HTTP_200_OK,
    summary="Get property details",
    description="Fetch a visible listing; each fetch counts one view",
    responses={404: ERROR_RESPONSES[404]}
)
async def get_property(
    property_id: str = Path(..., description="Property ID"),
    property_service: PropertyService = Depends(get_property_service)
) -> APIResponse[PropertyData]:
    """
    Raises:
        PropertyNotFoundError: If the ID is malformed, unknown, or the listing is hidden
    """
    try:
        property_obj = await property_service.get_public_property(property_id)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Fetching property {property_id} failed: {e}", exc_info=True)
        raise InternalServerError("Server error while fetching property")

    return APIResponse(data=PropertyData(property=PropertyResponse.model_validate(property_obj)))


@router.post(
    "",
    response_model=APIResponse[PropertyData],
    status_code=status.HTTP_201_CREATED,
    summary="Create property",
    description="Create a listing that is live immediately. Admin only.",
    responses=_ADMIN_ERRORS
)
async def create_property(
    property_data: PropertyCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(require_permission(Permission.CREATE_PROPERTY)),
    property_service: PropertyService = Depends(get_property_service),
    notifications: NotificationService = Depends(get_notification_service)
) -> APIResponse[PropertyData]:
    """
    Create a listing owned by the acting admin.
    Confirmation and admin emails are sent after the response; their failures are only logged.
    """
    try:
        property_obj = await property_service.create_property(property_data, current_user)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Creating property failed: {e}", exc_info=True)
        raise InternalServerError("Server error while creating property listing")

    listing = PropertyResponse.model_validate(property_obj)

    if listing.owner_email:
        background_tasks.add_task(
            dispatch_notification,
            notifications.send_property_listed_email,
            listing,
            listing.owner_email,
            listing.owner_name
        )
    background_tasks.add_task(
        dispatch_notification,
        notifications.send_admin_notification,
        listing,
        listing.owner_name,
        listing.owner_email
    )

    return APIResponse(
        message="Property listed successfully and is now live on the website!",
        data=PropertyData(property=listing)
    )


@router.put(
    "/{property_id}",
    response_model=APIResponse[PropertyData],
    status_code=status.HTTP_200_OK,
    summary="Update property",
    description="Apply the supplied fields; the listing is re-approved. Admin only.",
    responses=_ADMIN_ERRORS
)
async def update_property(
    property_data: PropertyUpdate,
    property_id: str = Path(..., description="Property ID"),
    current_user: User = Depends(require_permission(Permission.UPDATE_PROPERTY)),
    property_service: PropertyService = Depends(get_property_service)
) -> APIResponse[PropertyData]:
    try:
        property_obj = await property_service.update_property(property_id, property_data)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Updating property {property_id} failed: {e}", exc_info=True)
        raise InternalServerError("Server error while updating property")

    return APIResponse(
        message="Property updated successfully!",
        data=PropertyData(property=PropertyResponse.model_validate(property_obj))
    )


@router.delete(
    "/{property_id}",
    response_model=APIResponse[None],
    status_code=status.HTTP_200_OK,
    summary="Delete property",
    description="Permanently delete a listing. Admin only.",
    responses=_ADMIN_ERRORS
)
async def delete_property(
    property_id: str = Path(..., description="Property ID"),
    current_user: User = Depends(require_permission(Permission.DELETE_PROPERTY)),
    property_service: PropertyService = Depends(get_property_service)
) -> APIResponse[None]:
    try:
        await property_service.delete_property(property_id)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Deleting property {property_id} failed: {e}", exc_info=True)
        raise InternalServerError("Server error while deleting property")

    return APIResponse(message="Property deleted successfully")
