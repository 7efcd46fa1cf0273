"""
Profiles Schemas

Pydantic schemas for privacy-filtered profile responses and privacy updates.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from camboconnect.modules.users.models import PrivacyLevel


class OrganizationSummary(BaseModel):
    id: str
    name: str


class ParticipationOpportunity(BaseModel):
    id: str
    title: str
    organization: OrganizationSummary


class ParticipationItem(BaseModel):
    """A participation the viewer is allowed to see."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    year: int
    feedback: str | None = None
    opportunity: ParticipationOpportunity


class ProfileStats(BaseModel):
    participations_count: int
    friends_count: int


class ProfileResponse(BaseModel):
    """
    Profile as seen by a particular viewer.

    Hidden sections are returned as empty lists, hidden participations are
    left out.
    """

    id: str
    first_name: str
    last_name: str
    profile_image: str | None = None
    bio: str | None = None
    education: list[dict[str, Any]] = Field(default_factory=list)
    experience: list[dict[str, Any]] = Field(default_factory=list)
    skills: list[dict[str, Any]] = Field(default_factory=list)
    social_links: list[dict[str, Any]] = Field(default_factory=list)
    participations: list[ParticipationItem] = Field(default_factory=list)
    stats: ProfileStats


class ParticipationListResponse(BaseModel):
    participations: list[ParticipationItem]


class PrivacySettings(BaseModel):
    """The four section privacy levels of a user."""

    model_config = ConfigDict(from_attributes=True)

    education_privacy: PrivacyLevel
    experience_privacy: PrivacyLevel
    skills_privacy: PrivacyLevel
    contact_url_privacy: PrivacyLevel


class PrivacySettingsUpdate(BaseModel):
    """Request body for PUT /profile/privacy. Omitted fields are left unchanged."""

    education_privacy: PrivacyLevel | None = None
    experience_privacy: PrivacyLevel | None = None
    skills_privacy: PrivacyLevel | None = None
    contact_url_privacy: PrivacyLevel | None = None


class PrivacySettingsResponse(PrivacySettings):
    id: str


class ParticipationPrivacyUpdate(BaseModel):
    """Request body for PUT /participations/{id}/privacy."""

    privacy_level: PrivacyLevel


class ParticipationPrivacyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    privacy_level: PrivacyLevel
