"""
Unit tests for the opportunities service layer.

These tests cover:
- Partial failure of the lifecycle update
- Running the lifecycle update against the SQL store
- View tracking
- Bookmarks
- Deadline reminders (window, message, dedup, error handling)
"""

from datetime import UTC, datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from camboconnect.modules.notifications.models import NotificationType
from camboconnect.modules.opportunities.lifecycle import InMemoryOpportunityStore
from camboconnect.modules.opportunities.models import OpportunityStatus
from camboconnect.modules.opportunities.service import (
    REMINDER_DEDUP_WINDOW,
    DeadlineReminderError,
    LifecycleUpdateError,
    OpportunityNotFoundError,
    build_reminder_message,
    check_view,
    hours_until,
    is_bookmarked,
    record_view,
    reminder_window,
    run_lifecycle_update,
    send_deadline_reminders,
    set_bookmark,
    update_opportunity_lifecycle,
)

SERVICE = "camboconnect.modules.opportunities.service"


class FailingStore(InMemoryOpportunityStore):
    """Raises a database error when it reaches ``fail_at``."""

    def __init__(self, records, fail_at):
        super().__init__(records)
        self.fail_at = fail_at

    async def update_where(self, rule, now):
        if rule.key == self.fail_at:
            raise OperationalError("UPDATE opportunities", {}, Exception("connection lost"))
        return await super().update_where(rule, now)


class TestLifecyclePartialFailure:
    """A failing step keeps the work of earlier steps."""

    @pytest.mark.asyncio
    async def test_failure_keeps_earlier_steps(self, now, make_opportunity):
        opening = make_opportunity(
            status=OpportunityStatus.OPENING_SOON,
            start_date=now - timedelta(days=1),
        )
        expired = make_opportunity(deadline=now - timedelta(hours=1))
        store = FailingStore([opening, expired], fail_at="closed")

        with pytest.raises(LifecycleUpdateError) as exc_info:
            await update_opportunity_lifecycle(store, now)

        assert exc_info.value.step == "closed"
        assert exc_info.value.status_code == 500
        assert exc_info.value.summary.active == 1
        assert "connection lost" in exc_info.value.message
        # Step 1 stays applied, step 3 never ran
        assert opening.status == OpportunityStatus.ACTIVE
        assert expired.status == OpportunityStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_rerun_completes_remaining_steps(self, now, make_opportunity):
        expired = make_opportunity(deadline=now - timedelta(hours=1))
        records = [expired]

        with pytest.raises(LifecycleUpdateError):
            await update_opportunity_lifecycle(FailingStore(records, fail_at="closed"), now)

        summary = await update_opportunity_lifecycle(InMemoryOpportunityStore(records), now)

        assert expired.status == OpportunityStatus.CLOSED
        assert summary.closed == 1

    @pytest.mark.asyncio
    async def test_non_database_errors_propagate_unwrapped(self, now):
        store = MagicMock()
        store.update_where = AsyncMock(side_effect=ValueError("bad rule"))

        with pytest.raises(ValueError):
            await update_opportunity_lifecycle(store, now)


class TestRunLifecycleUpdate:
    """Tests for run_lifecycle_update against a mocked session."""

    @pytest.mark.asyncio
    async def test_runs_five_committed_updates(self, mock_db, now):
        mock_db.execute = AsyncMock(return_value=MagicMock(rowcount=2))

        summary = await run_lifecycle_update(mock_db, now)

        assert mock_db.execute.await_count == 5
        assert mock_db.commit.await_count == 5
        assert summary.counts() == {
            "active": 2,
            "closing_soon": 2,
            "closed": 2,
            "popular": 2,
            "not_new": 2,
        }
        assert summary.timestamp == now

    @pytest.mark.asyncio
    async def test_defaults_to_current_utc_time(self, mock_db):
        mock_db.execute = AsyncMock(return_value=MagicMock(rowcount=0))
        before = datetime.now(UTC)

        summary = await run_lifecycle_update(mock_db)

        assert summary.timestamp >= before
        assert summary.timestamp.tzinfo is not None

    @pytest.mark.asyncio
    async def test_database_error_is_wrapped(self, mock_db, now):
        mock_db.execute = AsyncMock(side_effect=SQLAlchemyError("database unavailable"))

        with pytest.raises(LifecycleUpdateError) as exc_info:
            await run_lifecycle_update(mock_db, now)

        assert exc_info.value.step == "active"
        mock_db.commit.assert_not_awaited()


class TestRecordView:
    """Tests for record_view."""

    @pytest.mark.asyncio
    async def test_counts_view_and_records_event(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.increment_visit_count = AsyncMock(return_value=1)
            mock_repo.add_view = AsyncMock()

            await record_view(mock_db, "opp-1", "user-1")

            mock_repo.increment_visit_count.assert_awaited_once_with(mock_db, "opp-1")
            mock_repo.add_view.assert_awaited_once_with(mock_db, "opp-1", "user-1")
            mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_opportunity_raises_not_found(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.increment_visit_count = AsyncMock(return_value=0)
            mock_repo.add_view = AsyncMock()

            with pytest.raises(OpportunityNotFoundError) as exc_info:
                await record_view(mock_db, "missing", "user-1")

            assert exc_info.value.status_code == 404
            mock_repo.add_view.assert_not_awaited()
            mock_db.rollback.assert_awaited_once()
            mock_db.commit.assert_not_awaited()


class TestCheckView:
    """Tests for check_view."""

    @pytest.mark.asyncio
    async def test_not_viewed(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_first_view = AsyncMock(return_value=None)

            status = await check_view(mock_db, "opp-1", "user-1")

            assert status.has_viewed is False
            assert status.viewed_at is None

    @pytest.mark.asyncio
    async def test_viewed_returns_first_view_time(self, mock_db, now):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_first_view = AsyncMock(return_value=SimpleNamespace(created_at=now))

            status = await check_view(mock_db, "opp-1", "user-1")

            assert status.has_viewed is True
            assert status.viewed_at == now


class TestSetBookmark:
    """Tests for set_bookmark."""

    @pytest.mark.asyncio
    async def test_creates_missing_bookmark(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=SimpleNamespace(id="opp-1"))
            mock_repo.get_bookmark = AsyncMock(return_value=None)
            mock_repo.create_bookmark = AsyncMock()

            result = await set_bookmark(mock_db, "opp-1", "user-1", True)

            assert result is True
            mock_repo.create_bookmark.assert_awaited_once_with(mock_db, "user-1", "opp-1")

    @pytest.mark.asyncio
    async def test_bookmarking_twice_keeps_one(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=SimpleNamespace(id="opp-1"))
            mock_repo.get_bookmark = AsyncMock(return_value=SimpleNamespace(id="bm-1"))
            mock_repo.create_bookmark = AsyncMock()

            result = await set_bookmark(mock_db, "opp-1", "user-1", True)

            assert result is True
            mock_repo.create_bookmark.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_counts_as_bookmarked(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=SimpleNamespace(id="opp-1"))
            mock_repo.get_bookmark = AsyncMock(return_value=None)
            mock_repo.create_bookmark = AsyncMock(
                side_effect=IntegrityError("INSERT", {}, Exception("duplicate key"))
            )

            result = await set_bookmark(mock_db, "opp-1", "user-1", True)

            assert result is True
            mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_removes_bookmark(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=SimpleNamespace(id="opp-1"))
            mock_repo.delete_bookmark = AsyncMock(return_value=0)

            result = await set_bookmark(mock_db, "opp-1", "user-1", False)

            assert result is False
            mock_repo.delete_bookmark.assert_awaited_once_with(mock_db, "user-1", "opp-1")

    @pytest.mark.asyncio
    async def test_missing_opportunity_raises_not_found(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=None)
            mock_repo.create_bookmark = AsyncMock()

            with pytest.raises(OpportunityNotFoundError):
                await set_bookmark(mock_db, "missing", "user-1", True)

            mock_repo.create_bookmark.assert_not_awaited()


class TestIsBookmarked:
    """Tests for is_bookmarked."""

    @pytest.mark.asyncio
    async def test_anonymous_viewer_has_no_bookmarks(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_bookmark = AsyncMock()

            assert await is_bookmarked(mock_db, "opp-1", None) is False

            mock_repo.get_bookmark.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_existing_bookmark(self, mock_db):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_bookmark = AsyncMock(return_value=SimpleNamespace(id="bm-1"))

            assert await is_bookmarked(mock_db, "opp-1", "user-1") is True


class TestReminderHelpers:
    """Tests for the reminder window and message helpers."""

    def test_window_covers_today_and_tomorrow(self, now):
        start, end = reminder_window(now)

        assert start == datetime(2026, 3, 10, 0, 0, tzinfo=UTC)
        assert end == datetime(2026, 3, 11, 23, 59, 59, 999999, tzinfo=UTC)

    def test_window_converts_to_utc_first(self):
        evening_in_lima = datetime(2026, 3, 10, 22, 0, tzinfo=timezone(timedelta(hours=-5)))

        start, _ = reminder_window(evening_in_lima)

        assert start == datetime(2026, 3, 11, 0, 0, tzinfo=UTC)

    def test_hours_until_rounds_half_up(self, now):
        assert hours_until(now + timedelta(hours=10), now) == 10
        assert hours_until(now + timedelta(hours=23, minutes=29), now) == 23
        assert hours_until(now + timedelta(hours=24, minutes=30), now) == 25

    def test_urgent_message_within_24_hours(self):
        message = build_reminder_message("Data Fellowship", 24)

        assert message == 'URGENT: Less than 24 hours left to apply for "Data Fellowship"'

    def test_regular_message_beyond_24_hours(self):
        message = build_reminder_message("Data Fellowship", 25)

        assert message == 'Reminder: Deadline approaching for "Data Fellowship"'


class TestSendDeadlineReminders:
    """Tests for send_deadline_reminders."""

    @staticmethod
    def _notification(user_id, message):
        return SimpleNamespace(id="notif-1", user_id=user_id, message=message)

    @pytest.mark.asyncio
    async def test_creates_reminders_and_skips_recent_ones(
        self, mock_db, now, make_bookmark
    ):
        fresh = make_bookmark(user_id="user-1", title="Data Fellowship")
        reminded = make_bookmark(user_id="user-2")

        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.notifications_repository") as mock_notifications,
        ):
            mock_repo.get_bookmarks_with_deadline_between = AsyncMock(
                return_value=[fresh, reminded]
            )
            mock_notifications.exists_since = AsyncMock(side_effect=[False, True])
            mock_notifications.create = AsyncMock(
                side_effect=lambda db, user_id, type, message, related_entity_id: (
                    self._notification(user_id, message)
                )
            )

            summary = await send_deadline_reminders(mock_db, now)

            assert summary.bookmarks_checked == 2
            assert summary.notifications_created == 1
            assert summary.skipped == 1
            assert summary.errors == 0
            assert summary.created == [
                {
                    "id": "notif-1",
                    "userId": "user-1",
                    "opportunityId": fresh.opportunity.id,
                    "message": 'URGENT: Less than 24 hours left to apply for "Data Fellowship"',
                }
            ]

            mock_notifications.create.assert_awaited_once()
            create_kwargs = mock_notifications.create.await_args.kwargs
            assert create_kwargs["type"] == NotificationType.DEADLINE_REMINDER
            assert create_kwargs["related_entity_id"] == fresh.opportunity.id

    @pytest.mark.asyncio
    async def test_dedup_looks_back_24_hours(self, mock_db, now, make_bookmark):
        bookmark = make_bookmark()

        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.notifications_repository") as mock_notifications,
        ):
            mock_repo.get_bookmarks_with_deadline_between = AsyncMock(return_value=[bookmark])
            mock_notifications.exists_since = AsyncMock(return_value=True)
            mock_notifications.create = AsyncMock()

            await send_deadline_reminders(mock_db, now)

            kwargs = mock_notifications.exists_since.await_args.kwargs
            assert kwargs["since"] == now - REMINDER_DEDUP_WINDOW
            assert kwargs["user_id"] == bookmark.user_id
            assert kwargs["related_entity_id"] == bookmark.opportunity.id
            mock_notifications.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_queries_todays_and_tomorrows_deadlines(self, mock_db, now):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_bookmarks_with_deadline_between = AsyncMock(return_value=[])

            summary = await send_deadline_reminders(mock_db, now)

            mock_repo.get_bookmarks_with_deadline_between.assert_awaited_once_with(
                mock_db, *reminder_window(now)
            )
            assert summary.bookmarks_checked == 0
            assert summary.notifications_created == 0

    @pytest.mark.asyncio
    async def test_failed_notification_is_counted_and_job_continues(
        self, mock_db, now, make_bookmark
    ):
        first = make_bookmark(user_id="user-1")
        second = make_bookmark(
            user_id="user-2", title="Research Grant", deadline=now + timedelta(hours=30)
        )

        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.notifications_repository") as mock_notifications,
        ):
            mock_repo.get_bookmarks_with_deadline_between = AsyncMock(
                return_value=[first, second]
            )
            mock_notifications.exists_since = AsyncMock(return_value=False)
            mock_notifications.create = AsyncMock(
                side_effect=[
                    SQLAlchemyError("insert failed"),
                    self._notification(
                        "user-2", 'Reminder: Deadline approaching for "Research Grant"'
                    ),
                ]
            )

            summary = await send_deadline_reminders(mock_db, now)

            assert summary.errors == 1
            assert summary.notifications_created == 1
            assert summary.created[0]["userId"] == "user-2"
            mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_loading_failure_raises(self, mock_db, now):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_bookmarks_with_deadline_between = AsyncMock(
                side_effect=SQLAlchemyError("database unavailable")
            )

            with pytest.raises(DeadlineReminderError) as exc_info:
                await send_deadline_reminders(mock_db, now)

            assert exc_info.value.status_code == 500
            assert "database unavailable" in exc_info.value.message
