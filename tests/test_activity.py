"""
Tests for best-effort activity logging.
"""

import logging
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from realty.core.config import settings
from realty.core.logging import DEAD_LETTER_LOGGER
from realty.main import app
from realty.models.activity import Activity, ActivityAction, ActivityItemType
from realty.models.listing import Listing
from realty.models.user import User
from realty.schemas.activity import ActivityEntry
from realty.services.activity_service import (
    ActivityLogger,
    get_activity_logger,
    recent_activities,
    should_log_activity,
)


def _entry(user_id, action=ActivityAction.CREATE, item_type=ActivityItemType.USER, **kwargs):
    return ActivityEntry(user_id=user_id, action=action, item_type=item_type, **kwargs)


def test_log_activity_writes_record(
    session: Session, activity_logger: ActivityLogger, agent_user: User
) -> None:
    stored = activity_logger.log_activity(
        _entry(agent_user.id, item_id=agent_user.id, metadata={"email": agent_user.email})
    )
    assert stored is not None

    records = session.exec(select(Activity)).all()
    assert len(records) == 1
    assert records[0].details == {"email": agent_user.email}


def test_log_activity_without_user_is_skipped(
    session: Session, activity_logger: ActivityLogger
) -> None:
    assert activity_logger.log_activity(_entry(None)) is None
    assert session.exec(select(Activity)).all() == []


def test_log_activity_failure_goes_to_dead_letter(caplog: pytest.LogCaptureFixture) -> None:
    failing = ActivityLogger(session_factory=MagicMock(side_effect=RuntimeError("no database")))

    with caplog.at_level(logging.ERROR, logger=DEAD_LETTER_LOGGER):
        result = failing.log_activity(_entry("user-1"))

    assert result is None
    records = [r for r in caplog.records if r.name == DEAD_LETTER_LOGGER]
    assert len(records) == 1
    assert records[0].activity["user_id"] == "user-1"


def test_log_activity_rolls_back_failed_commit() -> None:
    broken_session = MagicMock()
    broken_session.commit.side_effect = RuntimeError("constraint failed")
    failing = ActivityLogger(session_factory=lambda: broken_session)

    assert failing.log_activity(_entry("user-1")) is None
    broken_session.rollback.assert_called_once()
    broken_session.close.assert_called_once()


def test_listing_records_are_enriched_with_owner(
    session: Session, activity_logger: ActivityLogger, agent_user: User
) -> None:
    listing = Listing(property_id="TSR-ABC234", title="Loft", description="Nice", user_id=agent_user.id)
    session.add(listing)
    session.commit()

    stored = activity_logger.log_activity(
        _entry(agent_user.id, item_type=ActivityItemType.LISTING, item_id=listing.id)
    )
    assert stored is not None
    assert stored.details["uploadedBy"] == agent_user.id
    assert stored.details["uploadedByName"] == "Alice Agent"
    assert stored.details["approvedBy"] is None


def test_switches_control_what_is_logged(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "LOG_AUTH_ACTIONS", False)
    monkeypatch.setattr(settings, "LOG_UPDATE_ACTIONS", False)
    assert should_log_activity(ActivityAction.LOGIN) is False
    assert should_log_activity(ActivityAction.UPDATE) is False
    assert should_log_activity(ActivityAction.DELETE) is True

    monkeypatch.setattr(settings, "ENABLE_ACTIVITY_LOGGING", False)
    assert should_log_activity(ActivityAction.DELETE) is False


def test_recent_activities_filters_and_caps(
    session: Session, activity_logger: ActivityLogger, agent_user: User
) -> None:
    activity_logger.log_activity(_entry(agent_user.id, action=ActivityAction.CREATE))
    activity_logger.log_activity(_entry(agent_user.id, action=ActivityAction.DELETE))

    deletes = recent_activities(session, action=ActivityAction.DELETE)
    assert [a.action for a in deletes] == [ActivityAction.DELETE]
    assert len(recent_activities(session, limit=10_000)) == 2


def test_failing_logger_never_breaks_the_request(
    sign_in, agent_user: User, session: Session
) -> None:
    """A mutation still succeeds when its audit record cannot be written."""
    client: TestClient = sign_in(agent_user)
    app.dependency_overrides[get_activity_logger] = lambda: ActivityLogger(
        session_factory=MagicMock(side_effect=RuntimeError("audit store down"))
    )

    response = client.post(
        f"{settings.API_PREFIX}/listings",
        json={"title": "Garden flat", "description": "Quiet street", "price": 250000},
    )

    assert response.status_code == 201
    assert response.json()["success"] is True
    assert len(session.exec(select(Listing)).all()) == 1
    assert session.exec(select(Activity)).all() == []


def test_login_is_recorded_with_origin(
    client: TestClient, agent_user: User, session: Session
) -> None:
    client.post(
        f"{settings.API_PREFIX}/auth/login",
        data={"email": agent_user.email, "password": "agentpassword123"},
        headers={"x-forwarded-for": "203.0.113.7", "user-agent": "pytest"},
    )

    records = session.exec(select(Activity)).all()
    assert len(records) == 1
    assert records[0].action == ActivityAction.LOGIN
    assert records[0].item_type == ActivityItemType.AUTH
    assert records[0].ip_address == "203.0.113.7"
    assert records[0].user_agent == "pytest"
