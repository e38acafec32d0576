"""
Tests for blog post endpoints.
"""

from fastapi.testclient import TestClient
from sqlmodel import Session

from realty.core.config import settings
from realty.models.blog_post import BlogPost
from realty.models.user import User

POSTS_URL = f"{settings.API_PREFIX}/blog-posts"


def _post(session: Session, owner: User, slug: str = "first-post", published: bool = False) -> BlogPost:
    post = BlogPost(
        title=slug.replace("-", " ").title(),
        slug=slug,
        content="Market notes for the quarter.",
        is_published=published,
        user_id=owner.id,
    )
    session.add(post)
    session.commit()
    session.refresh(post)
    return post


def test_create_post(sign_in, writer_user: User) -> None:
    client = sign_in(writer_user)
    response = client.post(
        POSTS_URL,
        json={"title": "Buying your first condo", "slug": "buying-your-first-condo", "content": "Tips."},
    )
    assert response.status_code == 201
    blog = response.json()["blog"]
    assert blog["slug"] == "buying-your-first-condo"
    assert blog["is_published"] is False
    assert blog["owner"]["email"] == "writer@example.com"


def test_create_post_rejects_duplicate_slug(sign_in, session: Session, writer_user: User) -> None:
    _post(session, writer_user, "market-update")
    client = sign_in(writer_user)
    response = client.post(POSTS_URL, json={"title": "Again", "slug": "market-update", "content": "x"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Slug already exists"


def test_create_post_rejects_malformed_slug(sign_in, writer_user: User) -> None:
    client = sign_in(writer_user)
    response = client.post(POSTS_URL, json={"title": "Bad", "slug": "Not A Slug", "content": "x"})
    assert response.status_code == 422


def test_slug_lookup_only_serves_published(
    client: TestClient, session: Session, writer_user: User
) -> None:
    _post(session, writer_user, "live-post", published=True)
    _post(session, writer_user, "draft-post")

    assert client.get(f"{POSTS_URL}/slug/live-post").status_code == 200
    assert client.get(f"{POSTS_URL}/slug/draft-post").status_code == 404


def test_list_posts_for_anonymous_and_owner(
    client: TestClient, sign_in, session: Session, writer_user: User
) -> None:
    _post(session, writer_user, "live-post", published=True)
    _post(session, writer_user, "draft-post")

    assert [b["slug"] for b in client.get(POSTS_URL).json()["blogs"]] == ["live-post"]

    sign_in(writer_user)
    assert {b["slug"] for b in client.get(POSTS_URL).json()["blogs"]} == {"live-post", "draft-post"}


def test_update_post_keeps_slug_unique(sign_in, session: Session, writer_user: User) -> None:
    _post(session, writer_user, "taken-slug")
    post = _post(session, writer_user, "my-post")
    client = sign_in(writer_user)

    response = client.put(f"{POSTS_URL}/{post.id}", json={"slug": "taken-slug"})
    assert response.status_code == 400

    response = client.put(f"{POSTS_URL}/{post.id}", json={"title": "Renamed", "excerpt": "Short"})
    assert response.status_code == 200
    blog = response.json()["blog"]
    assert blog["title"] == "Renamed"
    assert blog["slug"] == "my-post"
    assert blog["excerpt"] == "Short"


def test_update_post_by_stranger_is_forbidden(
    sign_in, session: Session, writer_user: User, agent_user: User
) -> None:
    post = _post(session, writer_user)
    client = sign_in(agent_user)
    assert client.put(f"{POSTS_URL}/{post.id}", json={"title": "Hijack"}).status_code == 403


def test_owner_deletes_post(sign_in, session: Session, writer_user: User) -> None:
    post = _post(session, writer_user)
    post_id = post.id
    client = sign_in(writer_user)

    response = client.post(f"{settings.API_PREFIX}/blogs/{post_id}/delete")

    assert response.status_code == 200
    session.expire_all()
    assert session.get(BlogPost, post_id) is None


def test_missing_post(client: TestClient) -> None:
    assert client.get(f"{POSTS_URL}/does-not-exist").status_code == 404
