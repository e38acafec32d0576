"""
Routes for the signed-in user's own account.
"""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status

from realty.api.deps import CurrentIdentity, SessionDep
from realty.core.logging import get_logger
from realty.core.security import verify_password
from realty.models.activity import ActivityAction
from realty.schemas.user import PasswordChange, UserResponse
from realty.services.activity_service import ActivityLogger, get_activity_logger
from realty.services.user_service import UserService

logger = get_logger(__name__)

router = APIRouter(prefix="/user", tags=["user"])


@router.get("/me", response_model=UserResponse)
def get_current_user_profile(session: SessionDep, identity: CurrentIdentity) -> UserResponse:
    """
    Get current user's profile.

    Raises:
        HTTPException: 404 if the account was deleted after sign-in
    """
    user = UserService.get_by_id(session, identity.id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserResponse.model_validate(user)


@router.post("/change-password")
def change_password(
    payload: PasswordChange,
    request: Request,
    session: SessionDep,
    identity: CurrentIdentity,
    background_tasks: BackgroundTasks,
    activity: Annotated[ActivityLogger, Depends(get_activity_logger)],
) -> dict:
    """
    Change the caller's password.

    Args:
        payload: Current password, new password and its confirmation

    Raises:
        HTTPException: 401 if the current password is wrong
    """
    user = UserService.get_by_id(session, identity.id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if not verify_password(payload.current_password, user.hashed_password):
        logger.warning(f"Password change with wrong current password for {identity.id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Current password is incorrect",
        )

    UserService.set_password(session, user, payload.new_password)
    activity.log_user_activity(
        background_tasks, identity.id, ActivityAction.UPDATE, identity.id,
        {"action": "password_change"}, request,
    )
    return {"success": True, "message": "Password changed successfully"}
