"""Data models for the mentor matching core.

The models are implemented using :mod:`pydantic` so that they provide
runtime validation and convenient serialisation to and from dictionaries.
Records are owned by exactly one organization; identifiers are integers
assigned by the storage layer when a record is first persisted.
"""

from __future__ import annotations

import datetime
import math
from datetime import UTC
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


def _now() -> datetime.datetime:
    return datetime.datetime.now(tz=UTC)


def _unique(values: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for value in values:
        value = value.strip()
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


class MeetingFormat(str, Enum):
    VIRTUAL = "virtual"
    IN_PERSON = "in-person"
    BOTH = "both"


class MatchStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class SessionStatus(str, Enum):
    PENDING = "pending"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ScoringWeights(BaseModel):
    """Relative weight of each sub-score in the overall match score.

    Weights are non-negative and must add up to ``1.0`` so that the weighted
    total stays on the same 0-100 scale as the sub-scores.
    """

    model_config = {"frozen": True}

    expertise: float = Field(default=0.4, ge=0.0)
    industry: float = Field(default=0.2, ge=0.0)
    availability: float = Field(default=0.3, ge=0.0)
    meeting_format: float = Field(default=0.1, ge=0.0)

    @model_validator(mode="after")
    def _check_total(self) -> ScoringWeights:
        total = self.expertise + self.industry + self.availability + self.meeting_format
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError(f"scoring weights must sum to 1.0, got {total:.4f}")
        return self


class MatchingConfig(BaseModel):
    """Admin-tunable matching settings for an organization."""

    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    threshold: int = Field(default=70, ge=0, le=100)
    max_matches_per_mentee: int = Field(default=3, ge=1)


class Organization(BaseModel):
    """A tenant of the platform; every other record belongs to one."""

    id: int | None = None
    name: str
    location: str | None = None
    about: str | None = None
    logo: str | None = None
    primary_color: str = "#3B82F6"
    secondary_color: str = "#8B5CF6"
    accent_color: str = "#10B981"
    matching: MatchingConfig | None = None


class _Participant(BaseModel):
    id: int | None = None
    organization_id: int
    name: str
    email: str
    industry: str | None = None
    availability: list[str] = Field(default_factory=list)
    preferred_meeting_format: MeetingFormat | None = None
    active: bool = True
    approved: bool = False
    welcome_email_sent: bool = False

    @field_validator("availability")
    @classmethod
    def _dedupe_availability(cls, value: list[str]) -> list[str]:
        return _unique(value)


class Mentor(_Participant):
    """A mentor profile with the attributes used for scoring.

    Attributes
    ----------
    expertise:
        Category tags the mentor can help with, compared against a
        mentee's ``interests``.
    years_of_experience:
        Bucketed string such as ``"3-5"`` or ``"10+"``.
    booking_link:
        Optional scheduling URL included in introduction emails.

    """

    title: str | None = None
    organization: str | None = None
    bio: str | None = None
    expertise: list[str] = Field(default_factory=list)
    years_of_experience: str | None = None
    booking_link: str | None = None

    @field_validator("expertise")
    @classmethod
    def _dedupe_expertise(cls, value: list[str]) -> list[str]:
        return _unique(value)


class Mentee(_Participant):
    """A mentee profile. ``goals`` and ``background`` are not scored."""

    background: str | None = None
    goals: str | None = None
    interests: list[str] = Field(default_factory=list)

    @field_validator("interests")
    @classmethod
    def _dedupe_interests(cls, value: list[str]) -> list[str]:
        return _unique(value)


class Match(BaseModel):
    """A proposed or confirmed pairing of one mentor and one mentee."""

    id: int | None = None
    organization_id: int
    mentor_id: int
    mentee_id: int
    match_score: int = Field(default=0, ge=0, le=100)
    match_reasons: list[str] = Field(default_factory=list)
    status: MatchStatus = MatchStatus.PENDING
    admin_id: str | None = None
    intro_email_sent: bool = False
    follow_up_email_sent: bool = False
    session_scheduled: bool = False
    created_at: datetime.datetime = Field(default_factory=_now)
    updated_at: datetime.datetime = Field(default_factory=_now)


class MentoringSession(BaseModel):
    """A single meeting held under a match."""

    id: int | None = None
    match_id: int
    scheduled_date: datetime.datetime | None = None
    status: SessionStatus = SessionStatus.PENDING
    mentor_feedback: str | None = None
    mentee_feedback: str | None = None
    mentor_rating: int | None = Field(default=None, ge=1, le=5)
    mentee_rating: int | None = Field(default=None, ge=1, le=5)
    feedback_email_sent: bool = False
    created_at: datetime.datetime = Field(default_factory=_now)
    updated_at: datetime.datetime = Field(default_factory=_now)

    def has_both_ratings(self) -> bool:
        return self.mentor_rating is not None and self.mentee_rating is not None


class OrganizationAnalytics(BaseModel):
    total_matches: int = 0
    active_mentors: int = 0
    sessions_completed: int = 0
    average_rating: float = 0.0
    pending_matches: int = 0
