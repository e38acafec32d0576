"""
Tests for the server-rendered pages.
"""

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from realty.models.blog_post import BlogPost
from realty.models.listing import Listing
from realty.models.user import User
from realty.services.listing_service import ListingService

CONTACT_FORM = {
    "fullName": "Maria Santos",
    "email": "maria@example.com",
    "phone": "+63 917 000 0000",
    "interest": "buy",
    "message": "I would like to view the condo this weekend.",
    "consent": "on",
}


def _listing(session: Session, owner: User, title: str, published: bool, city: str = "Cebu") -> Listing:
    listing = Listing(
        property_id=ListingService.unique_property_id(session),
        title=title,
        description="Walking distance to the mall",
        price=3_200_000,
        city=city,
        is_published=published,
        user_id=owner.id,
    )
    session.add(listing)
    session.commit()
    session.refresh(listing)
    return listing


@pytest.mark.parametrize("path", ["/", "/listings", "/blog", "/contact", "/login"])
def test_public_pages_render(client: TestClient, path: str) -> None:
    response = client.get(path)
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]


def test_home_shows_only_published(client: TestClient, session: Session, agent_user: User) -> None:
    _listing(session, agent_user, "Bayside loft", published=True)
    _listing(session, agent_user, "Secret draft", published=False)

    page = client.get("/").text
    assert "Bayside loft" in page
    assert "Secret draft" not in page


def test_listings_page_filters(client: TestClient, session: Session, agent_user: User) -> None:
    _listing(session, agent_user, "Cebu condo", published=True, city="Cebu")
    _listing(session, agent_user, "Davao house", published=True, city="Davao")

    page = client.get("/listings", params={"city": "davao", "listing_type": "", "property_type": ""}).text
    assert "Davao house" in page
    assert "Cebu condo" not in page


def test_listing_detail(client: TestClient, session: Session, agent_user: User) -> None:
    live = _listing(session, agent_user, "Garden villa", published=True)
    draft = _listing(session, agent_user, "Hidden villa", published=False)

    response = client.get(f"/listings/{live.id}")
    assert response.status_code == 200
    assert "Garden villa" in response.text

    assert client.get(f"/listings/{draft.id}").status_code == 404
    assert client.get("/listings/unknown").status_code == 404


def test_blog_post_page(client: TestClient, session: Session, writer_user: User) -> None:
    session.add(BlogPost(title="Market outlook", slug="market-outlook", content="Prices hold.",
                         is_published=True, user_id=writer_user.id))
    session.commit()

    response = client.get("/blog/market-outlook")
    assert response.status_code == 200
    assert "Market outlook" in response.text
    assert client.get("/blog/not-here").status_code == 404


def test_contact_success(client: TestClient) -> None:
    response = client.post("/contact", data=CONTACT_FORM)
    assert response.status_code == 200
    assert "Thank you" in response.text


def test_contact_requires_consent(client: TestClient) -> None:
    form = {k: v for k, v in CONTACT_FORM.items() if k != "consent"}
    response = client.post("/contact", data=form)
    assert response.status_code == 400
    assert "consent" in response.text
    # The visitor's input is kept
    assert "Maria Santos" in response.text


def test_contact_rejects_short_message(client: TestClient) -> None:
    response = client.post("/contact", data={**CONTACT_FORM, "message": "hi"})
    assert response.status_code == 400


def test_login_page_error_message(client: TestClient) -> None:
    assert "Invalid email or password." in client.get("/login?error=credentials").text
    assert "Invalid email or password." not in client.get("/login").text


def test_forbidden_page(client: TestClient) -> None:
    response = client.get("/403")
    assert response.status_code == 403
    assert "Access denied" in response.text


@pytest.mark.parametrize(
    "path", ["/dashboard", "/dashboard/listings", "/dashboard/listings/new", "/dashboard/blogs",
             "/dashboard/blogs/new", "/dashboard/activity", "/dashboard/settings"]
)
def test_dashboard_pages_for_agent(sign_in, agent_user: User, path: str) -> None:
    client = sign_in(agent_user)
    response = client.get(path)
    assert response.status_code == 200


def test_dashboard_greets_user(sign_in, writer_user: User) -> None:
    client = sign_in(writer_user)
    assert "Welcome, Wes Writer" in client.get("/dashboard").text


def test_admin_is_sent_to_admin_dashboard(sign_in, admin_user: User) -> None:
    client = sign_in(admin_user)
    response = client.get("/dashboard")
    assert response.status_code == 303
    assert response.headers["location"] == "/admin/dashboard"


def test_edit_listing_page_only_for_owner(
    sign_in, session: Session, agent_user: User, writer_user: User
) -> None:
    listing = _listing(session, agent_user, "Owned flat", published=False)

    client = sign_in(agent_user)
    response = client.get(f"/dashboard/listings/{listing.id}/edit")
    assert response.status_code == 200
    assert "Owned flat" in response.text

    client = sign_in(writer_user)
    assert client.get(f"/dashboard/listings/{listing.id}/edit").status_code == 404


@pytest.mark.parametrize(
    "path",
    ["/admin/dashboard", "/admin/listings", "/admin/listings?pending=true", "/admin/blogs",
     "/admin/users", "/admin/users/new", "/admin/logs"],
)
def test_admin_pages(sign_in, admin_user: User, path: str) -> None:
    client = sign_in(admin_user)
    assert client.get(path).status_code == 200


def test_admin_edit_user_page(sign_in, admin_user: User, agent_user: User) -> None:
    client = sign_in(admin_user)
    response = client.get(f"/admin/users/{agent_user.id}/edit")
    assert response.status_code == 200
    assert "Alice Agent" in response.text
    assert client.get("/admin/users/missing/edit").status_code == 404


def test_admin_logs_tolerates_empty_filters(sign_in, admin_user: User) -> None:
    client = sign_in(admin_user)
    for limit in ("", "50", "lots", "-3"):
        response = client.get(
            "/admin/logs", params={"action": "", "item_type": "", "limit": limit}
        )
        assert response.status_code == 200
        assert "Activity log" in response.text


def test_admin_logs_blank_limit_uses_default(sign_in, admin_user: User) -> None:
    client = sign_in(admin_user)
    page = client.get("/admin/logs", params={"limit": ""}).text
    assert 'name="limit" value="200"' in page
