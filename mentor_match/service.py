"""Organization-scoped orchestration over storage, matching and lifecycle."""

from __future__ import annotations

import datetime
import logging
from typing import Any

from pydantic import BaseModel

from .adapters.base import EmailSender
from .config import Settings
from .core.models import (
    Match,
    MatchingConfig,
    MatchStatus,
    Mentee,
    MentoringSession,
    Mentor,
    OrganizationAnalytics,
    SessionStatus,
)
from .core.storage import JSONStorage
from .errors import NotFoundError, ValidationError
from .matching.generator import build_match, find_top_matches_for_mentee, generate_matches
from .matching.lifecycle import MatchLifecycle

log = logging.getLogger("mentor_match.service")


class MatchDetails(BaseModel):
    match: Match
    mentor: Mentor
    mentee: Mentee
    sessions: list[MentoringSession]


def _eligible(profile: Mentor | Mentee) -> bool:
    return profile.approved and profile.active


class MatchService:
    """Everything an admin request handler needs, keyed by record id.

    The generator itself does not look at ``approved``; this layer only
    hands it approved and active profiles.
    """

    def __init__(self, storage: JSONStorage, sender: EmailSender, settings: Settings) -> None:
        self.storage = storage
        self.settings = settings
        self.lifecycle = MatchLifecycle(storage, sender)

    def matching_config(self, organization_id: int) -> MatchingConfig:
        organization = self.storage.get_organization(organization_id)
        if organization is None:
            raise NotFoundError("Organization", organization_id)
        return organization.matching or self.settings.matching

    # ------------------------------------------------------------------
    # Match generation
    def generate_for_organization(self, organization_id: int) -> list[Match]:
        """Score all approved pairs of an organization and persist the new ones.

        Pairs that already have a match record, in any status, are skipped.
        """
        config = self.matching_config(organization_id)
        mentors = [m for m in self.storage.mentors_for(organization_id) if _eligible(m)]
        mentees = [m for m in self.storage.mentees_for(organization_id) if _eligible(m)]
        existing = {(m.mentor_id, m.mentee_id) for m in self.storage.matches_for(organization_id)}
        created = []
        for match in generate_matches(mentees, mentors, config.threshold, config.weights):
            if (match.mentor_id, match.mentee_id) in existing:
                continue
            created.append(self.storage.add_match(match))
        log.info(
            "Generated %d matches for organization %s (%d mentors, %d mentees, threshold %d)",
            len(created), organization_id, len(mentors), len(mentees), config.threshold,
        )
        return created

    def top_matches_for_mentee(self, mentee_id: int, persist: bool = False) -> list[Match]:
        mentee = self.storage.get_mentee(mentee_id)
        if mentee is None:
            raise NotFoundError("Mentee", mentee_id)
        config = self.matching_config(mentee.organization_id)
        mentors = [m for m in self.storage.mentors_for(mentee.organization_id) if _eligible(m)]
        matches = find_top_matches_for_mentee(
            mentee, mentors, config.max_matches_per_mentee, config.weights
        )
        if persist:
            matches = [self.storage.add_match(m) for m in matches]
        return matches

    def create_manual_match(self, mentor_id: int, mentee_id: int) -> Match:
        """Create a ``pending`` match chosen by an administrator."""
        mentor = self.storage.get_mentor(mentor_id)
        if mentor is None:
            raise NotFoundError("Mentor", mentor_id)
        mentee = self.storage.get_mentee(mentee_id)
        if mentee is None:
            raise NotFoundError("Mentee", mentee_id)
        if mentor.organization_id != mentee.organization_id:
            raise ValidationError("Mentor and mentee belong to different organizations.")
        config = self.matching_config(mentee.organization_id)
        match = self.storage.add_match(build_match(mentor, mentee, config.weights))
        log.info("Manual match %s created (score %d)", match.id, match.match_score)
        return match

    def list_matches(self, organization_id: int, status: MatchStatus | str | None = None) -> list[Match]:
        return self.storage.matches_for(
            organization_id, MatchStatus(status) if status is not None else None
        )

    def match_details(self, match_id: int) -> MatchDetails:
        match = self.storage.get_match(match_id)
        if match is None:
            raise NotFoundError("Match", match_id)
        mentor = self.storage.get_mentor(match.mentor_id)
        if mentor is None:
            raise NotFoundError("Mentor", match.mentor_id)
        mentee = self.storage.get_mentee(match.mentee_id)
        if mentee is None:
            raise NotFoundError("Mentee", match.mentee_id)
        return MatchDetails(
            match=match, mentor=mentor, mentee=mentee, sessions=self.storage.sessions_for(match_id)
        )

    # ------------------------------------------------------------------
    # Sessions
    def schedule_session(self, match_id: int, scheduled_date: datetime.datetime) -> MentoringSession:
        if self.storage.get_match(match_id) is None:
            raise NotFoundError("Match", match_id)
        session = self.storage.add_session(
            MentoringSession(
                match_id=match_id, scheduled_date=scheduled_date, status=SessionStatus.SCHEDULED
            )
        )
        self.storage.update_match(match_id, session_scheduled=True)
        return session

    def record_session_outcome(self, session_id: int, **changes: Any) -> MentoringSession:
        """Update a session; a completed session rated by both sides completes its match.

        Accepts ``status``, ``mentor_rating``, ``mentee_rating``,
        ``mentor_feedback``, ``mentee_feedback`` and ``scheduled_date``.
        """
        allowed = {
            "status", "mentor_rating", "mentee_rating",
            "mentor_feedback", "mentee_feedback", "scheduled_date",
        }
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(f"Unknown session field(s): {', '.join(sorted(unknown))}.")
        session = self.storage.update_session(session_id, **changes)
        if session is None:
            raise NotFoundError("Session", session_id)
        if session.status == SessionStatus.COMPLETED and session.has_both_ratings():
            self.lifecycle.complete(session.match_id, session)
        return session

    def analytics(self, organization_id: int) -> OrganizationAnalytics:
        return self.storage.analytics(organization_id)
