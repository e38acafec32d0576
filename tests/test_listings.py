"""
Tests for listing endpoints.
"""

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from realty.core.config import settings
from realty.models.activity import Activity, ActivityAction
from realty.models.listing import Listing
from realty.models.user import User
from realty.services.listing_service import ListingService

LISTINGS_URL = f"{settings.API_PREFIX}/listings"


def _listing(session: Session, owner: User, title: str = "Sea view condo", published: bool = False) -> Listing:
    listing = Listing(
        property_id=ListingService.unique_property_id(session),
        title=title,
        description="Two bedrooms near the beach",
        price=5_500_000,
        city="Cebu",
        is_published=published,
        user_id=owner.id,
    )
    session.add(listing)
    session.commit()
    session.refresh(listing)
    return listing


def test_create_listing(sign_in, agent_user: User, session: Session) -> None:
    client = sign_in(agent_user)
    response = client.post(
        LISTINGS_URL,
        json={
            "title": "Corner townhouse",
            "description": "Three storeys, two parking slots",
            "price": 12_000_000,
            "property_type": "townhouse",
            "listing_type": "sale",
            "bedrooms": 3,
            "amenities": ["Pool", "Gym"],
        },
    )
    assert response.status_code == 201
    listing = response.json()["listing"]
    assert listing["title"] == "Corner townhouse"
    assert listing["is_published"] is False
    assert listing["property_id"].startswith("TSR-")
    assert listing["owner"]["name"] == "Alice Agent"

    activity = session.exec(select(Activity)).one()
    assert activity.action == ActivityAction.CREATE
    assert activity.details["title"] == "Corner townhouse"


def test_create_listing_requires_session(client: TestClient) -> None:
    response = client.post(LISTINGS_URL, json={"title": "x", "description": "y"})
    assert response.status_code == 401
    assert response.json() == {"detail": "Unauthorized"}


def test_create_listing_validates_ranges(sign_in, agent_user: User) -> None:
    client = sign_in(agent_user)
    response = client.post(
        LISTINGS_URL, json={"title": "Mansion", "description": "Big", "bedrooms": 51}
    )
    assert response.status_code == 422

    response = client.post(
        LISTINGS_URL, json={"title": "Future", "description": "Not yet", "year_built": 3000}
    )
    assert response.status_code == 422


def test_list_listings_visibility(
    client: TestClient, sign_in, session: Session, agent_user: User, writer_user: User
) -> None:
    _listing(session, agent_user, "Published", published=True)
    _listing(session, agent_user, "Agent draft")
    _listing(session, writer_user, "Writer draft")

    anonymous = [item["title"] for item in client.get(LISTINGS_URL).json()["listings"]]
    assert anonymous == ["Published"]

    sign_in(agent_user)
    own = {item["title"] for item in client.get(LISTINGS_URL).json()["listings"]}
    assert own == {"Published", "Agent draft"}

    published_only = client.get(LISTINGS_URL, params={"published": "true"}).json()["listings"]
    assert [item["title"] for item in published_only] == ["Published"]


def test_get_listing(client: TestClient, session: Session, agent_user: User) -> None:
    listing = _listing(session, agent_user)
    response = client.get(f"{LISTINGS_URL}/{listing.id}")
    assert response.status_code == 200
    assert response.json()["listing"]["id"] == listing.id

    assert client.get(f"{LISTINGS_URL}/missing").status_code == 404


def test_owner_can_update_but_not_publish(sign_in, session: Session, agent_user: User) -> None:
    listing = _listing(session, agent_user)
    client = sign_in(agent_user)

    response = client.put(
        f"{LISTINGS_URL}/{listing.id}",
        json={"title": "Renovated condo", "description": "Fresh paint", "is_published": True},
    )

    assert response.status_code == 200
    body = response.json()["listing"]
    assert body["title"] == "Renovated condo"
    assert body["is_published"] is False


def test_admin_can_publish_via_update(
    sign_in, session: Session, agent_user: User, admin_user: User
) -> None:
    listing = _listing(session, agent_user)
    client = sign_in(admin_user)

    response = client.put(
        f"{LISTINGS_URL}/{listing.id}",
        json={"title": listing.title, "description": listing.description, "is_published": True},
    )

    assert response.status_code == 200
    assert response.json()["listing"]["is_published"] is True
    session.refresh(listing)
    assert listing.approved_by == admin_user.id


def test_other_agent_cannot_update(
    sign_in, session: Session, agent_user: User, writer_user: User
) -> None:
    listing = _listing(session, agent_user)
    client = sign_in(writer_user)
    response = client.put(
        f"{LISTINGS_URL}/{listing.id}", json={"title": "Mine now", "description": "No"}
    )
    assert response.status_code == 403


def test_owner_deletes_listing(sign_in, session: Session, agent_user: User) -> None:
    listing = _listing(session, agent_user)
    listing_id, property_id = listing.id, listing.property_id
    client = sign_in(agent_user)

    response = client.post(f"{LISTINGS_URL}/{listing_id}/delete")

    assert response.status_code == 200
    assert response.json() == {"success": True}
    session.expire_all()
    assert session.get(Listing, listing_id) is None

    activity = session.exec(select(Activity)).one()
    assert activity.action == ActivityAction.DELETE
    assert activity.details["propertyId"] == property_id
    assert activity.details["uploadedByName"] == "Alice Agent"


def test_non_owner_cannot_delete(sign_in, session: Session, agent_user: User, admin_user: User) -> None:
    listing = _listing(session, agent_user)
    client = sign_in(admin_user)
    # Admins delete through the admin endpoint
    assert client.post(f"{LISTINGS_URL}/{listing.id}/delete").status_code == 403
