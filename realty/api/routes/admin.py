"""
Admin-only routes: content approval, user management and the audit log.
Every endpoint depends on ``require_admin``, which answers 401 otherwise.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status

from realty.api.deps import AdminDep, SessionDep
from realty.core.logging import get_logger
from realty.core.security import generate_temporary_password
from realty.models.activity import ActivityAction, ActivityItemType
from realty.schemas.activity import ActivityResponse
from realty.schemas.blog import BlogPostResponse
from realty.schemas.listing import ListingResponse
from realty.schemas.user import (
    AdminUserCreate,
    AdminUserUpdate,
    UserCreate,
    UserResponse,
    UserWithPassword,
)
from realty.services.activity_service import ActivityLogger, get_activity_logger, recent_activities
from realty.services.blog_service import BlogService
from realty.services.listing_service import ListingService
from realty.services.user_service import UserService

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

ActivityDep = Annotated[ActivityLogger, Depends(get_activity_logger)]


# ========== Listings ==========

@router.post("/listings/{listing_id}/approve")
def approve_listing(
    listing_id: str,
    request: Request,
    session: SessionDep,
    admin: AdminDep,
    background_tasks: BackgroundTasks,
    activity: ActivityDep,
) -> dict:
    """Publish a listing and record the approving admin."""
    listing = ListingService.get(session, listing_id)
    if listing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")

    updated = ListingService.approve(session, listing, admin.user_id)  # type: ignore[arg-type]
    logger.info(f"Listing {listing_id} approved by {admin.user_id}")
    activity.log_listing_activity(
        background_tasks, admin.user_id, ActivityAction.APPROVE, listing_id,
        {"title": updated.title}, request,
    )
    return {"success": True, "listing": ListingResponse.model_validate(updated)}


@router.post("/listings/{listing_id}/delete")
def admin_delete_listing(
    listing_id: str,
    request: Request,
    session: SessionDep,
    admin: AdminDep,
    background_tasks: BackgroundTasks,
    activity: ActivityDep,
) -> dict:
    """Delete any listing."""
    listing = ListingService.get(session, listing_id)
    if listing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Listing not found")

    metadata = {
        "title": listing.title,
        "propertyId": listing.property_id,
        "uploadedBy": listing.user_id,
        "uploadedByName": listing.owner.name if listing.owner else None,
    }
    ListingService.delete(session, listing)
    logger.info(f"Listing {listing_id} deleted by admin {admin.user_id}")
    activity.log_listing_activity(
        background_tasks, admin.user_id, ActivityAction.DELETE, listing_id, metadata, request
    )
    return {"success": True}


# ========== Blog posts ==========

@router.post("/blogs/{post_id}/approve")
def approve_blog_post(
    post_id: str,
    request: Request,
    session: SessionDep,
    admin: AdminDep,
    background_tasks: BackgroundTasks,
    activity: ActivityDep,
) -> dict:
    post = BlogService.get(session, post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog post not found")

    updated = BlogService.approve(session, post, admin.user_id)  # type: ignore[arg-type]
    activity.log_blog_activity(
        background_tasks, admin.user_id, ActivityAction.APPROVE, post_id,
        {"title": updated.title}, request,
    )
    return {"success": True, "blog": BlogPostResponse.model_validate(updated)}


@router.post("/blogs/{post_id}/delete")
def admin_delete_blog_post(
    post_id: str,
    request: Request,
    session: SessionDep,
    admin: AdminDep,
    background_tasks: BackgroundTasks,
    activity: ActivityDep,
) -> dict:
    post = BlogService.get(session, post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blog post not found")

    metadata = {
        "title": post.title,
        "slug": post.slug,
        "uploadedBy": post.user_id,
        "uploadedByName": post.owner.name if post.owner else None,
    }
    BlogService.delete(session, post)
    activity.log_blog_activity(
        background_tasks, admin.user_id, ActivityAction.DELETE, post_id, metadata, request
    )
    return {"success": True}


# ========== Users ==========

@router.get("/users")
def list_users(session: SessionDep, admin: AdminDep) -> dict:
    return {"users": [UserResponse.model_validate(u) for u in UserService.list_all(session)]}


@router.post("/users", status_code=status.HTTP_201_CREATED, response_model=UserWithPassword)
def create_user(
    user_in: AdminUserCreate,
    request: Request,
    session: SessionDep,
    admin: AdminDep,
    background_tasks: BackgroundTasks,
    activity: ActivityDep,
) -> UserWithPassword:
    """
    Create an account. Without a password a temporary one is generated and
    returned once in the response.
    """
    if UserService.email_taken(session, user_in.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")

    temporary_password = None if user_in.password else generate_temporary_password()
    user = UserService.create(
        session,
        UserCreate(
            email=user_in.email,
            name=user_in.name,
            password=user_in.password or temporary_password,  # type: ignore[arg-type]
        ),
        role=user_in.role,
    )
    logger.info(f"User {user.email} ({user.role.value}) created by admin {admin.user_id}")
    activity.log_user_activity(
        background_tasks, admin.user_id, ActivityAction.CREATE, user.id,
        {"email": user.email, "name": user.name, "role": user.role.value}, request,
    )
    return UserWithPassword(
        user=UserResponse.model_validate(user),
        temporary_password=temporary_password,
        message="User created successfully",
    )


@router.get("/users/{user_id}")
def get_user(user_id: str, session: SessionDep, admin: AdminDep) -> dict:
    user = UserService.get_by_id(session, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"user": UserResponse.model_validate(user)}


@router.put("/users/{user_id}")
def update_user(
    user_id: str,
    user_in: AdminUserUpdate,
    request: Request,
    session: SessionDep,
    admin: AdminDep,
    background_tasks: BackgroundTasks,
    activity: ActivityDep,
) -> dict:
    """Change a user's name, email or role."""
    user = UserService.get_by_id(session, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if UserService.email_taken(session, user_in.email, exclude_user_id=user_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email is already taken by another user",
        )

    previous = {"previousEmail": user.email, "previousName": user.name, "previousRole": user.role.value}
    updated = UserService.update(session, user, name=user_in.name, email=user_in.email, role=user_in.role)
    activity.log_user_activity(
        background_tasks, admin.user_id, ActivityAction.UPDATE, user_id,
        {"email": updated.email, "name": updated.name, "role": updated.role.value, **previous},
        request,
    )
    return {"success": True, "user": UserResponse.model_validate(updated)}


@router.post("/users/{user_id}/delete")
def delete_user(
    user_id: str,
    request: Request,
    session: SessionDep,
    admin: AdminDep,
    background_tasks: BackgroundTasks,
    activity: ActivityDep,
) -> dict:
    """Delete an account and its content. Admins cannot delete themselves."""
    if user_id == admin.user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete yourself")

    user = UserService.get_by_id(session, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    metadata = {"email": user.email, "name": user.name}
    UserService.delete(session, user)
    logger.info(f"User {user_id} deleted by admin {admin.user_id}")
    activity.log_user_activity(
        background_tasks, admin.user_id, ActivityAction.DELETE, user_id, metadata, request
    )
    return {"success": True}


@router.post("/users/{user_id}/reset-password")
def reset_password(
    user_id: str,
    request: Request,
    session: SessionDep,
    admin: AdminDep,
    background_tasks: BackgroundTasks,
    activity: ActivityDep,
) -> dict:
    """Replace a user's password with a generated one, shown once."""
    user = UserService.get_by_id(session, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    temporary_password = generate_temporary_password()
    UserService.set_password(session, user, temporary_password)
    activity.log_user_activity(
        background_tasks, admin.user_id, ActivityAction.UPDATE, user_id,
        {
            "action": "password_reset_by_admin",
            "targetUserEmail": user.email,
            "targetUserName": user.name,
        },
        request,
    )
    return {
        "success": True,
        "temporary_password": temporary_password,
        "message": "Password reset successfully",
    }


# ========== Audit log ==========

@router.get("/activities")
def list_activities(
    session: SessionDep,
    admin: AdminDep,
    limit: int = 100,
    action: Optional[ActivityAction] = None,
    item_type: Optional[ActivityItemType] = None,
    user_id: Optional[str] = None,
) -> dict:
    """Newest audit records first, at most 500 per request."""
    activities = recent_activities(
        session, limit=limit, user_id=user_id, action=action, item_type=item_type
    )
    return {"activities": [ActivityResponse.model_validate(a) for a in activities]}
