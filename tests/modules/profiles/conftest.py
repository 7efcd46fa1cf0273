"""
Fixtures for profiles tests.
"""

from types import SimpleNamespace
from uuid import uuid4

import pytest

from camboconnect.modules.users.models import PrivacyLevel, User

OWNER_ID = "owner-1"
VIEWER_ID = "viewer-1"


@pytest.fixture
def owner():
    """A profile owner with one entry per section, all sections PUBLIC."""
    return User(
        id=OWNER_ID,
        email="sokha@example.com",
        first_name="Sokha",
        last_name="Chan",
        profile_image=None,
        bio="Engineering student",
        education_entries=[{"school": "RUPP", "degree": "BSc Computer Science"}],
        experience_entries=[{"company": "Smart Axiata", "role": "Intern"}],
        skill_entries=[{"name": "Python"}],
        social_links=[{"platform": "github", "url": "https://github.com/sokha"}],
        education_privacy=PrivacyLevel.PUBLIC,
        experience_privacy=PrivacyLevel.PUBLIC,
        skills_privacy=PrivacyLevel.PUBLIC,
        contact_url_privacy=PrivacyLevel.PUBLIC,
    )


@pytest.fixture
def make_participation():
    """Build a participation record with its opportunity and organization loaded."""

    def _make(privacy_level=PrivacyLevel.PUBLIC, year=2025, user_id=OWNER_ID):
        organization = SimpleNamespace(id=str(uuid4()), name="Impact Hub Phnom Penh")
        opportunity = SimpleNamespace(
            id=str(uuid4()), title="Startup Bootcamp", organization=organization
        )
        return SimpleNamespace(
            id=str(uuid4()),
            user_id=user_id,
            year=year,
            feedback=None,
            privacy_level=privacy_level,
            opportunity=opportunity,
        )

    return _make
