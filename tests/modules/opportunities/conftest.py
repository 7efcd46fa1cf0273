"""
Fixtures for opportunities tests.
"""

from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from uuid import uuid4

import pytest

from camboconnect.modules.opportunities.models import OpportunityStatus


@pytest.fixture
def now():
    """A fixed instant shared by every step of a run."""
    return datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


@pytest.fixture
def make_opportunity(now):
    """
    Build an in-memory opportunity record.

    Defaults describe an ACTIVE opportunity that no rule touches: deadline far
    away, below the popularity threshold, created today and already not new.
    """

    def _make(**overrides):
        fields = {
            "id": str(uuid4()),
            "title": "Summer Internship",
            "status": OpportunityStatus.ACTIVE,
            "start_date": now - timedelta(days=30),
            "deadline": now + timedelta(days=30),
            "visit_count": 0,
            "is_popular": False,
            "is_new": False,
            "created_at": now,
        }
        fields.update(overrides)
        return SimpleNamespace(**fields)

    return _make


@pytest.fixture
def make_bookmark(now):
    """Build a bookmark with its opportunity loaded."""

    def _make(user_id=None, title="Data Fellowship", deadline=None):
        opportunity = SimpleNamespace(
            id=str(uuid4()),
            title=title,
            deadline=deadline or now + timedelta(hours=10),
        )
        return SimpleNamespace(
            id=str(uuid4()),
            user_id=user_id or str(uuid4()),
            opportunity=opportunity,
        )

    return _make
