"""
API tests for listing search, detail views and admin listing management.
"""

import pytest
import uuid
from httpx import AsyncClient
from fastapi import status

from app.config import settings
from app.models.user import User
from app.models.property import Property, PropertyType, ListingStatus
from app.repositories.property import PropertyRepository
from tests.conftest import PropertyFactory


NEW_LISTING = {
    "title": "Sea-facing 3BHK Flat",
    "description": "Corner flat with two balconies",
    "type": "flat",
    "bhk": "3",
    "location": "Vasai West",
    "price": 8500000,
    "status": "sale",
    "area": 1200,
    "amenities": ["Lift", "Parking"],
    "ownerName": "Suresh Dsouza",
    "ownerEmail": "suresh@example.com",
    "ownerPhone": "9812345678"
}


class TestSearchProperties:
    """GET /api/properties"""

    @pytest.mark.asyncio
    async def test_only_visible_listings(
        self,
        async_client: AsyncClient,
        property_repository: PropertyRepository,
        test_property: Property,
        test_unapproved_property: Property,
        test_admin: User
    ):
        await PropertyFactory.create_property(
            property_repository, test_admin.id, title="Withdrawn Shop", is_active=False
        )

        response = await async_client.get("/api/properties")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["success"] is True
        ids = [p["id"] for p in body["data"]["properties"]]
        assert ids == [str(test_property.id)]
        assert body["data"]["pagination"]["totalProperties"] == 1

    @pytest.mark.asyncio
    async def test_second_page_of_twenty_five(
        self,
        async_client: AsyncClient,
        property_repository: PropertyRepository,
        test_admin: User
    ):
        for i in range(25):
            await PropertyFactory.create_property(
                property_repository, test_admin.id, title=f"Listing {i + 1}", price=1000000 + i
            )

        response = await async_client.get(
            "/api/properties",
            params={"page": 2, "limit": 12, "sortBy": "price", "sortOrder": "asc"}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert [p["price"] for p in data["properties"]] == [1000000 + i for i in range(12, 24)]
        assert data["pagination"] == {
            "currentPage": 2,
            "totalPages": 3,
            "totalProperties": 25,
            "hasNext": True,
            "hasPrev": True
        }

    @pytest.mark.asyncio
    async def test_type_filter_with_any_bhk(
        self,
        async_client: AsyncClient,
        property_repository: PropertyRepository,
        test_admin: User
    ):
        await PropertyFactory.create_property(property_repository, test_admin.id, bhk="1")
        await PropertyFactory.create_property(property_repository, test_admin.id, bhk="3")
        await PropertyFactory.create_property(
            property_repository, test_admin.id, type=PropertyType.HOUSE, bhk="3"
        )

        response = await async_client.get("/api/properties", params={"type": "flat", "bhk": "all"})

        properties = response.json()["data"]["properties"]
        assert len(properties) == 2
        assert {p["type"] for p in properties} == {"flat"}
        assert {p["bhk"] for p in properties} == {"1", "3"}

    @pytest.mark.asyncio
    async def test_type_all_means_no_filter(
        self,
        async_client: AsyncClient,
        property_repository: PropertyRepository,
        test_admin: User
    ):
        await PropertyFactory.create_property(property_repository, test_admin.id)
        await PropertyFactory.create_property(property_repository, test_admin.id, type=PropertyType.PLOT, bhk=None)

        response = await async_client.get("/api/properties", params={"type": "all"})

        assert response.json()["data"]["pagination"]["totalProperties"] == 2

    @pytest.mark.asyncio
    async def test_location_is_case_insensitive_substring(
        self,
        async_client: AsyncClient,
        property_repository: PropertyRepository,
        test_admin: User
    ):
        await PropertyFactory.create_property(property_repository, test_admin.id, location="Vasai West")
        await PropertyFactory.create_property(property_repository, test_admin.id, location="Nalasopara East")

        response = await async_client.get("/api/properties", params={"location": "vasai"})

        properties = response.json()["data"]["properties"]
        assert [p["location"] for p in properties] == ["Vasai West"]

    @pytest.mark.asyncio
    async def test_price_bounds_are_inclusive(
        self,
        async_client: AsyncClient,
        property_repository: PropertyRepository,
        test_admin: User
    ):
        for price in (1000000, 2000000, 3000000):
            await PropertyFactory.create_property(property_repository, test_admin.id, price=price)

        response = await async_client.get(
            "/api/properties",
            params={"minPrice": 1000000, "maxPrice": 2000000, "sortBy": "price", "sortOrder": "asc"}
        )

        assert [p["price"] for p in response.json()["data"]["properties"]] == [1000000, 2000000]

    @pytest.mark.asyncio
    async def test_status_filter(
        self,
        async_client: AsyncClient,
        property_repository: PropertyRepository,
        test_admin: User
    ):
        await PropertyFactory.create_property(property_repository, test_admin.id, status=ListingStatus.RENT, price=15000)
        await PropertyFactory.create_property(property_repository, test_admin.id)

        response = await async_client.get("/api/properties", params={"status": "rent"})

        properties = response.json()["data"]["properties"]
        assert [p["status"] for p in properties] == ["rent"]

    @pytest.mark.asyncio
    async def test_text_search(
        self,
        async_client: AsyncClient,
        property_repository: PropertyRepository,
        test_admin: User
    ):
        await PropertyFactory.create_property(
            property_repository, test_admin.id, title="Garden Villa", description="Private garden and pool"
        )
        await PropertyFactory.create_property(
            property_repository, test_admin.id, title="Compact Studio", description="Near the market"
        )

        response = await async_client.get("/api/properties", params={"search": "garden"})

        properties = response.json()["data"]["properties"]
        assert [p["title"] for p in properties] == ["Garden Villa"]

    @pytest.mark.asyncio
    async def test_empty_result(self, async_client: AsyncClient):
        response = await async_client.get("/api/properties")

        data = response.json()["data"]
        assert data["properties"] == []
        assert data["pagination"] == {
            "currentPage": 1,
            "totalPages": 0,
            "totalProperties": 0,
            "hasNext": False,
            "hasPrev": False
        }

    @pytest.mark.asyncio
    async def test_min_price_above_max_price(self, async_client: AsyncClient):
        response = await async_client.get(
            "/api/properties", params={"minPrice": 5000000, "maxPrice": 1000000}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Minimum price cannot be greater than maximum price"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [
        {"limit": 101},
        {"page": 0},
        {"sortBy": "owner"},
        {"sortOrder": "sideways"},
        {"type": "castle"},
        {"status": "lease"},
    ])
    async def test_invalid_query(self, async_client: AsyncClient, params):
        response = await async_client.get("/api/properties", params=params)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"]


class TestGetProperty:
    """GET /api/properties/{id}"""

    @pytest.mark.asyncio
    async def test_each_fetch_counts_one_view(self, async_client: AsyncClient, test_property: Property, test_admin: User):
        first = await async_client.get(f"/api/properties/{test_property.id}")
        second = await async_client.get(f"/api/properties/{test_property.id}")

        assert first.status_code == status.HTTP_200_OK
        assert first.json()["data"]["property"]["views"] == 1
        assert second.json()["data"]["property"]["views"] == 2

        owner = first.json()["data"]["property"]["owner"]
        assert owner["id"] == str(test_admin.id)
        assert owner["name"] == test_admin.name
        assert owner["phone"] == test_admin.phone

    @pytest.mark.asyncio
    async def test_unapproved_looks_like_missing(
        self, async_client: AsyncClient, test_unapproved_property: Property
    ):
        hidden = await async_client.get(f"/api/properties/{test_unapproved_property.id}")
        missing = await async_client.get(f"/api/properties/{uuid.uuid4()}")
        malformed = await async_client.get("/api/properties/not-an-id")

        for response in (hidden, missing, malformed):
            assert response.status_code == status.HTTP_404_NOT_FOUND
            assert response.json() == {"success": False, "message": "Property not found"}

    @pytest.mark.asyncio
    async def test_hidden_listing_views_unchanged(
        self,
        async_client: AsyncClient,
        property_repository: PropertyRepository,
        test_unapproved_property: Property
    ):
        await async_client.get(f"/api/properties/{test_unapproved_property.id}")

        stored = await property_repository.get_property_with_owner(test_unapproved_property.id)
        assert stored.views == 0


class TestCreateProperty:
    """POST /api/properties"""

    @pytest.mark.asyncio
    async def test_admin_creates_live_listing(
        self, async_client: AsyncClient, test_admin: User, admin_headers, notifications
    ):
        response = await async_client.post("/api/properties", json=NEW_LISTING, headers=admin_headers)

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["message"] == "Property listed successfully and is now live on the website!"

        listing = body["data"]["property"]
        assert listing["isApproved"] is True
        assert listing["isActive"] is True
        assert listing["views"] == 0
        assert listing["amenities"] == ["Lift", "Parking"]
        assert listing["owner"]["id"] == str(test_admin.id)
        assert listing["images"] == [settings.placeholder_image_url]

        assert notifications.recipients() == ["suresh@example.com", settings.admin_email]

        public = await async_client.get(f"/api/properties/{listing['id']}")
        assert public.status_code == status.HTTP_200_OK

    @pytest.mark.asyncio
    async def test_single_image(self, async_client: AsyncClient, admin_headers):
        payload = {**NEW_LISTING, "image": "https://cdn.example.com/a.jpg"}

        response = await async_client.post("/api/properties", json=payload, headers=admin_headers)

        assert response.json()["data"]["property"]["images"] == ["https://cdn.example.com/a.jpg"]

    @pytest.mark.asyncio
    async def test_image_list_wins(self, async_client: AsyncClient, admin_headers):
        payload = {
            **NEW_LISTING,
            "image": "https://cdn.example.com/a.jpg",
            "images": ["https://cdn.example.com/b.jpg", "https://cdn.example.com/c.jpg"]
        }

        response = await async_client.post("/api/properties", json=payload, headers=admin_headers)

        assert response.json()["data"]["property"]["images"] == [
            "https://cdn.example.com/b.jpg",
            "https://cdn.example.com/c.jpg"
        ]

    @pytest.mark.asyncio
    async def test_without_owner_email_only_admin_notified(
        self, async_client: AsyncClient, admin_headers, notifications
    ):
        payload = {k: v for k, v in NEW_LISTING.items() if k != "ownerEmail"}

        response = await async_client.post("/api/properties", json=payload, headers=admin_headers)

        assert response.status_code == status.HTTP_201_CREATED
        assert notifications.recipients() == [settings.admin_email]

    @pytest.mark.asyncio
    async def test_notification_failure_still_creates(
        self, async_client: AsyncClient, admin_headers, notifications
    ):
        notifications.fail = True

        response = await async_client.post("/api/properties", json=NEW_LISTING, headers=admin_headers)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["success"] is True

    @pytest.mark.asyncio
    async def test_regular_user_forbidden(self, async_client: AsyncClient, user_headers):
        response = await async_client.post("/api/properties", json=NEW_LISTING, headers=user_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_requires_token(self, async_client: AsyncClient):
        response = await async_client.post("/api/properties", json=NEW_LISTING)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_missing_title(self, async_client: AsyncClient, admin_headers):
        payload = {k: v for k, v in NEW_LISTING.items() if k != "title"}

        response = await async_client.post("/api/properties", json=payload, headers=admin_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"][0]["field"] == "title"


class TestUpdateProperty:
    """PUT /api/properties/{id}"""

    @pytest.mark.asyncio
    async def test_update_reapproves(
        self, async_client: AsyncClient, test_unapproved_property: Property, admin_headers
    ):
        response = await async_client.put(
            f"/api/properties/{test_unapproved_property.id}",
            json={"price": 9900000},
            headers=admin_headers
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["message"] == "Property updated successfully!"
        listing = body["data"]["property"]
        assert listing["price"] == 9900000
        assert listing["isApproved"] is True
        assert listing["title"] == "Pending Villa"

        public = await async_client.get(f"/api/properties/{test_unapproved_property.id}")
        assert public.status_code == status.HTTP_200_OK

    @pytest.mark.asyncio
    async def test_deactivate(self, async_client: AsyncClient, test_property: Property, admin_headers):
        response = await async_client.put(
            f"/api/properties/{test_property.id}",
            json={"isActive": False},
            headers=admin_headers
        )

        assert response.json()["data"]["property"]["isActive"] is False
        public = await async_client.get(f"/api/properties/{test_property.id}")
        assert public.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["title", "price", "isActive", "type", "images"])
    async def test_null_for_required_field(
        self, async_client: AsyncClient, test_property: Property, admin_headers, field
    ):
        response = await async_client.put(
            f"/api/properties/{test_property.id}",
            json={field: None},
            headers=admin_headers
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["success"] is False
        assert body["message"] == f"{field} cannot be null"
        assert body["errors"][0]["field"] == field

        public = await async_client.get(f"/api/properties/{test_property.id}")
        assert public.json()["data"]["property"]["title"] == test_property.title

    @pytest.mark.asyncio
    async def test_null_clears_optional_field(
        self, async_client: AsyncClient, test_property: Property, admin_headers
    ):
        response = await async_client.put(
            f"/api/properties/{test_property.id}",
            json={"bhk": None},
            headers=admin_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["property"]["bhk"] is None

    @pytest.mark.asyncio
    async def test_update_missing(self, async_client: AsyncClient, admin_headers):
        response = await async_client.put(
            f"/api/properties/{uuid.uuid4()}", json={"price": 1}, headers=admin_headers
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["message"] == "Property not found"

    @pytest.mark.asyncio
    async def test_regular_user_forbidden(
        self, async_client: AsyncClient, test_property: Property, user_headers
    ):
        response = await async_client.put(
            f"/api/properties/{test_property.id}", json={"price": 1}, headers=user_headers
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestDeleteProperty:
    """DELETE /api/properties/{id}"""

    @pytest.mark.asyncio
    async def test_delete(self, async_client: AsyncClient, test_property: Property, admin_headers):
        response = await async_client.delete(f"/api/properties/{test_property.id}", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Property deleted successfully"

        gone = await async_client.get(f"/api/properties/{test_property.id}")
        assert gone.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_delete_missing(self, async_client: AsyncClient, admin_headers):
        response = await async_client.delete(f"/api/properties/{uuid.uuid4()}", headers=admin_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_regular_user_forbidden(
        self, async_client: AsyncClient, test_property: Property, user_headers
    ):
        response = await async_client.delete(f"/api/properties/{test_property.id}", headers=user_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestAdminAllProperties:
    """GET /api/properties/admin/all-properties"""

    @pytest.mark.asyncio
    async def test_includes_hidden_listings(
        self,
        async_client: AsyncClient,
        test_property: Property,
        test_unapproved_property: Property,
        admin_headers
    ):
        response = await async_client.get("/api/properties/admin/all-properties", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        ids = {p["id"] for p in response.json()["data"]["properties"]}
        assert ids == {str(test_property.id), str(test_unapproved_property.id)}

    @pytest.mark.asyncio
    async def test_regular_user_forbidden(self, async_client: AsyncClient, user_headers):
        response = await async_client.get("/api/properties/admin/all-properties", headers=user_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["message"] == "Insufficient permissions to view all properties"
