"""
Activity logging: the audit trail behind the admin log viewer.

Writes are best effort. Route handlers dispatch records as background tasks
after their own change has committed; the logger uses its own session, and a
failed write is rolled back and reported on the dead-letter logger with the
full record, never raised to the request.
"""

from typing import Any, Callable, Dict, List, Optional

from fastapi import BackgroundTasks, Request
from sqlmodel import Session, col, select

from realty.core.config import settings
from realty.core.logging import DEAD_LETTER_LOGGER, get_logger
from realty.db.session import new_session
from realty.models.activity import Activity, ActivityAction, ActivityItemType
from realty.models.blog_post import BlogPost
from realty.models.listing import Listing
from realty.schemas.activity import ActivityEntry

logger = get_logger(__name__)
dead_letter = get_logger(DEAD_LETTER_LOGGER)

# Always recorded while logging is enabled
ALWAYS_LOG_ACTIONS = {ActivityAction.APPROVE, ActivityAction.DELETE, ActivityAction.CREATE}

MAX_ACTIVITY_PAGE = 500


def should_log_activity(action: ActivityAction) -> bool:
    """Apply the ENABLE_ACTIVITY_LOGGING / LOG_*_ACTIONS switches."""
    if not settings.ENABLE_ACTIVITY_LOGGING:
        return False
    if action in ALWAYS_LOG_ACTIONS:
        return True
    if action in (ActivityAction.LOGIN, ActivityAction.LOGOUT):
        return settings.LOG_AUTH_ACTIONS
    if action == ActivityAction.UPDATE:
        return settings.LOG_UPDATE_ACTIONS
    return True


def request_origin(request: Optional[Request]) -> Dict[str, Optional[str]]:
    """IP address and user agent to stamp on a record, unless disabled."""
    if request is None or settings.LOG_MINIMAL_DATA:
        return {"ip_address": None, "user_agent": None}
    forwarded_for = request.headers.get("x-forwarded-for")
    ip_address = forwarded_for or request.headers.get("x-real-ip")
    if not ip_address and request.client is not None:
        ip_address = request.client.host
    return {"ip_address": ip_address, "user_agent": request.headers.get("user-agent")}


class ActivityLogger:
    """
    Writes audit records through ``session_factory``.

    Every public method swallows its own failures.
    """

    def __init__(self, session_factory: Callable[[], Session] = new_session) -> None:
        self._session_factory = session_factory

    def log_activity(self, entry: ActivityEntry) -> Optional[Activity]:
        """
        Append one audit record.

        Returns:
            The stored record, or None if it was skipped or failed
        """
        if not should_log_activity(entry.action):
            return None
        if not entry.user_id:
            logger.warning(
                f"Skipping {entry.action.value} {entry.item_type.value} activity without a user id"
            )
            return None

        session: Optional[Session] = None
        try:
            session = self._session_factory()
            activity = Activity(
                user_id=entry.user_id,
                action=entry.action,
                item_type=entry.item_type,
                item_id=entry.item_id,
                details=self._enrich(session, entry),
                ip_address=entry.ip_address,
                user_agent=entry.user_agent,
            )
            session.add(activity)
            session.commit()
            session.refresh(activity)
            return activity
        except Exception as e:
            if session is not None:
                try:
                    session.rollback()
                except Exception:
                    logger.debug("Rollback after failed activity write also failed")
            dead_letter.error(
                f"Failed to log activity: {e}",
                extra={"activity": entry.model_dump(mode="json")},
            )
            return None
        finally:
            if session is not None:
                session.close()

    def _enrich(self, session: Session, entry: ActivityEntry) -> Dict[str, Any]:
        """
        Add uploader and approver details to listing/blog records unless the
        caller already supplied them.
        """
        metadata = dict(entry.metadata)
        if entry.item_type not in (ActivityItemType.LISTING, ActivityItemType.BLOG):
            return metadata
        if metadata.get("uploadedBy") and metadata.get("uploadedByName"):
            return metadata
        if not entry.item_id:
            return metadata

        model = Listing if entry.item_type == ActivityItemType.LISTING else BlogPost
        try:
            item = session.get(model, entry.item_id)
        except Exception as e:
            logger.warning(f"Could not load {entry.item_type.value} {entry.item_id} for activity log: {e}")
            return metadata
        if item is None:
            return metadata

        metadata.update(
            {
                "uploadedBy": item.user_id,
                "uploadedByName": item.owner.name if item.owner else None,
                "uploadedByEmail": item.owner.email if item.owner else None,
                "approvedBy": item.approved_by,
                "approvedByName": item.approver.name if item.approver else None,
                "approvedByEmail": item.approver.email if item.approver else None,
            }
        )
        return metadata

    def dispatch(self, background_tasks: BackgroundTasks, entry: ActivityEntry) -> None:
        """Queue a record to be written after the response is sent."""
        background_tasks.add_task(self.log_activity, entry)

    # Convenience wrappers

    def log_auth_activity(
        self,
        background_tasks: BackgroundTasks,
        user_id: Optional[str],
        action: ActivityAction,
        request: Optional[Request] = None,
    ) -> None:
        self.dispatch(
            background_tasks,
            ActivityEntry(
                user_id=user_id,
                action=action,
                item_type=ActivityItemType.AUTH,
                **request_origin(request),
            ),
        )

    def log_listing_activity(
        self,
        background_tasks: BackgroundTasks,
        user_id: Optional[str],
        action: ActivityAction,
        listing_id: str,
        metadata: Optional[Dict[str, Any]] = None,
        request: Optional[Request] = None,
    ) -> None:
        self.dispatch(
            background_tasks,
            ActivityEntry(
                user_id=user_id,
                action=action,
                item_type=ActivityItemType.LISTING,
                item_id=listing_id,
                metadata=metadata or {},
                **request_origin(request),
            ),
        )

    def log_blog_activity(
        self,
        background_tasks: BackgroundTasks,
        user_id: Optional[str],
        action: ActivityAction,
        blog_id: str,
        metadata: Optional[Dict[str, Any]] = None,
        request: Optional[Request] = None,
    ) -> None:
        self.dispatch(
            background_tasks,
            ActivityEntry(
                user_id=user_id,
                action=action,
                item_type=ActivityItemType.BLOG,
                item_id=blog_id,
                metadata=metadata or {},
                **request_origin(request),
            ),
        )

    def log_user_activity(
        self,
        background_tasks: BackgroundTasks,
        user_id: Optional[str],
        action: ActivityAction,
        target_user_id: str,
        metadata: Optional[Dict[str, Any]] = None,
        request: Optional[Request] = None,
    ) -> None:
        self.dispatch(
            background_tasks,
            ActivityEntry(
                user_id=user_id,
                action=action,
                item_type=ActivityItemType.USER,
                item_id=target_user_id,
                metadata=metadata or {},
                **request_origin(request),
            ),
        )


def get_activity_logger() -> ActivityLogger:
    """FastAPI dependency; tests override it to point at their own database."""
    return ActivityLogger()


def recent_activities(
    session: Session,
    limit: int = 100,
    user_id: Optional[str] = None,
    action: Optional[ActivityAction] = None,
    item_type: Optional[ActivityItemType] = None,
) -> List[Activity]:
    """Newest audit records first, for the log viewers."""
    statement = select(Activity)
    if user_id is not None:
        statement = statement.where(Activity.user_id == user_id)
    if action is not None:
        statement = statement.where(Activity.action == action)
    if item_type is not None:
        statement = statement.where(Activity.item_type == item_type)
    statement = statement.order_by(col(Activity.timestamp).desc()).limit(
        max(1, min(limit, MAX_ACTIVITY_PAGE))
    )
    return list(session.exec(statement).all())
