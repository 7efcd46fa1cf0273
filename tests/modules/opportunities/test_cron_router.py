"""
Tests for the cron endpoints.

These tests cover:
- Shared secret guard (bearer, bare, mismatch, missing, unconfigured)
- Success body shape (camelCase counts, ISO timestamp)
- Internal error body
"""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from camboconnect.core.config import settings
from camboconnect.modules.opportunities.lifecycle import LifecycleSummary
from camboconnect.modules.opportunities.service import (
    DeadlineReminderError,
    DeadlineReminderSummary,
    LifecycleUpdateError,
)

UPDATE_URL = "/api/v1/cron/update-opportunities"
CHECK_DEADLINES_URL = "/api/v1/cron/check-deadlines"
SERVICE = "camboconnect.modules.opportunities.service"


@pytest.fixture
def lifecycle_summary(now):
    return LifecycleSummary(
        timestamp=now, active=3, closing_soon=2, closed=1, popular=4, not_new=5
    )


class TestCronSecretGuard:
    """Requests without the right secret are rejected and mutate nothing."""

    def test_bearer_secret_is_accepted(self, client, cron_secret, lifecycle_summary):
        with patch(
            f"{SERVICE}.run_lifecycle_update", AsyncMock(return_value=lifecycle_summary)
        ) as mock_run:
            response = client.post(
                UPDATE_URL, headers={"Authorization": f"Bearer {cron_secret}"}
            )

        assert response.status_code == 200
        mock_run.assert_awaited_once()

    def test_bare_secret_is_accepted(self, client, cron_secret, lifecycle_summary):
        with patch(f"{SERVICE}.run_lifecycle_update", AsyncMock(return_value=lifecycle_summary)):
            response = client.post(UPDATE_URL, headers={"Authorization": cron_secret})

        assert response.status_code == 200

    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"Authorization": "Bearer wrong-secret"},
            {"Authorization": "wrong-secret"},
            {"Authorization": "Basic dXNlcjpwYXNz"},
        ],
    )
    def test_missing_or_wrong_secret_is_rejected(self, client, cron_secret, headers):
        with patch(f"{SERVICE}.run_lifecycle_update", AsyncMock()) as mock_run:
            response = client.post(UPDATE_URL, headers=headers)

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
        mock_run.assert_not_awaited()

    def test_unconfigured_secret_rejects_everything(self, client, monkeypatch):
        monkeypatch.setattr(settings, "cron_api_secret", None)

        with patch(f"{SERVICE}.run_lifecycle_update", AsyncMock()) as mock_run:
            response = client.post(UPDATE_URL, headers={"Authorization": "Bearer anything"})

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
        mock_run.assert_not_awaited()

    def test_check_deadlines_is_guarded(self, client, cron_secret):
        with patch(f"{SERVICE}.send_deadline_reminders", AsyncMock()) as mock_send:
            response = client.post(CHECK_DEADLINES_URL)

        assert response.status_code == 401
        mock_send.assert_not_awaited()


class TestUpdateOpportunities:
    """Tests for POST /cron/update-opportunities."""

    def test_success_body(self, client, cron_secret, lifecycle_summary):
        with patch(f"{SERVICE}.run_lifecycle_update", AsyncMock(return_value=lifecycle_summary)):
            response = client.post(
                UPDATE_URL, headers={"Authorization": f"Bearer {cron_secret}"}
            )

        body = response.json()
        assert body["success"] is True
        assert body["updated"] == {
            "active": 3,
            "closingSoon": 2,
            "closed": 1,
            "popular": 4,
            "notNew": 5,
        }
        assert body["timestamp"].startswith("2026-03-10T12:00:00")

    def test_database_failure_returns_500_with_details(
        self, client, cron_secret, lifecycle_summary
    ):
        error = LifecycleUpdateError(
            "closed", lifecycle_summary, SQLAlchemyError("connection refused")
        )

        with patch(f"{SERVICE}.run_lifecycle_update", AsyncMock(side_effect=error)):
            response = client.post(
                UPDATE_URL, headers={"Authorization": f"Bearer {cron_secret}"}
            )

        assert response.status_code == 500
        assert response.json() == {
            "error": "Internal server error",
            "details": "connection refused",
        }


class TestCheckDeadlines:
    """Tests for POST /cron/check-deadlines."""

    def test_success_body(self, client, cron_secret, now):
        summary = DeadlineReminderSummary(
            timestamp=now,
            bookmarks_checked=3,
            notifications_created=1,
            skipped=1,
            errors=1,
            created=[
                {
                    "id": "notif-1",
                    "userId": "user-1",
                    "opportunityId": "opp-1",
                    "message": 'Reminder: Deadline approaching for "Data Fellowship"',
                }
            ],
        )

        with patch(f"{SERVICE}.send_deadline_reminders", AsyncMock(return_value=summary)):
            response = client.post(CHECK_DEADLINES_URL, headers={"Authorization": cron_secret})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["bookmarksChecked"] == 3
        assert body["notificationsCreated"] == 1
        assert body["skipped"] == 1
        assert body["errors"] == 1
        assert body["notificationsDetails"][0] == {
            "id": "notif-1",
            "userId": "user-1",
            "opportunityId": "opp-1",
            "message": 'Reminder: Deadline approaching for "Data Fellowship"',
        }

    def test_failure_returns_500(self, client, cron_secret):
        error = DeadlineReminderError(SQLAlchemyError("timeout"))

        with patch(f"{SERVICE}.send_deadline_reminders", AsyncMock(side_effect=error)):
            response = client.post(CHECK_DEADLINES_URL, headers={"Authorization": cron_secret})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error", "details": "timeout"}
