"""Match lifecycle: guarded status transitions and their notifications.

::

    pending --approve--> approved --complete--> completed
       |                    |
       +------reject--------+-----> rejected

Each transition is one conditional update on one match record. The storage
compares the expected source state and writes under a lock, so of two
concurrent approvals only one succeeds and only one introduction email is
sent. Notification flags are set in the same update as the transition.
Emails go out after the update is persisted; a failed send is logged and
does not undo the transition.
"""

from __future__ import annotations

import logging

from ..adapters.base import EmailSender
from ..core.models import Match, MatchStatus, Mentee, MentoringSession, Mentor, Organization, SessionStatus
from ..core.storage import JSONStorage
from ..emails.delivery import deliver
from ..emails.templates import feedback_email, follow_up_email, introduction_email
from ..errors import NotFoundError, StateConflictError, ValidationError

log = logging.getLogger("mentor_match.lifecycle")


class MatchLifecycle:
    """Apply administrator and session driven transitions to matches."""

    def __init__(self, storage: JSONStorage, sender: EmailSender) -> None:
        self.storage = storage
        self.sender = sender

    # ------------------------------------------------------------------
    # Lookups
    def _match(self, match_id: int) -> Match:
        match = self.storage.get_match(match_id)
        if match is None:
            raise NotFoundError("Match", match_id)
        return match

    def _parties(self, match: Match) -> tuple[Mentor, Mentee, Organization]:
        mentor = self.storage.get_mentor(match.mentor_id)
        if mentor is None:
            raise NotFoundError("Mentor", match.mentor_id)
        mentee = self.storage.get_mentee(match.mentee_id)
        if mentee is None:
            raise NotFoundError("Mentee", match.mentee_id)
        organization = self.storage.get_organization(match.organization_id)
        if organization is None:
            raise NotFoundError("Organization", match.organization_id)
        return mentor, mentee, organization

    @staticmethod
    def _require(match: Match, expected: dict) -> None:
        for name, value in expected.items():
            actual = getattr(match, name)
            if actual != value:
                shown = actual.value if isinstance(actual, MatchStatus) else actual
                raise StateConflictError(f"Match {match.id}: {name} is {shown}.")

    def _transition(self, match: Match, expected: dict, **changes) -> Match:
        self._require(match, expected)
        updated = self.storage.update_match(match.id, expected=expected, **changes)
        if updated is None:
            raise NotFoundError("Match", match.id)
        return updated

    # ------------------------------------------------------------------
    # Transitions
    def approve(self, match_id: int, admin_id: str) -> Match:
        """Approve a pending match and send the introduction email.

        Raises :class:`NotFoundError` for an unknown match and
        :class:`StateConflictError` when the match is not ``pending``, which
        includes a second approval of the same match.
        """
        if not admin_id:
            raise ValidationError("Admin ID is required.")
        match = self._match(match_id)
        self._require(match, {"status": MatchStatus.PENDING})
        mentor, mentee, organization = self._parties(match)
        updated = self._transition(
            match,
            {"status": MatchStatus.PENDING},
            status=MatchStatus.APPROVED,
            admin_id=admin_id,
            intro_email_sent=True,
        )
        log.info("Match %s approved by %s", match_id, admin_id)
        deliver(self.sender, mentee.email, introduction_email(mentor, mentee, organization))
        return updated

    def send_follow_up(self, match_id: int) -> Match:
        """Send the follow-up email once for an approved match."""
        match = self._match(match_id)
        guard = {"status": MatchStatus.APPROVED, "follow_up_email_sent": False}
        self._require(match, guard)
        mentor, mentee, organization = self._parties(match)
        updated = self._transition(match, guard, follow_up_email_sent=True)
        log.info("Follow-up recorded for match %s", match_id)
        deliver(self.sender, mentee.email, follow_up_email(mentor, mentee, organization))
        return updated

    def complete(self, match_id: int, session: MentoringSession) -> Match:
        """Mark an approved match completed after a fully rated session.

        A match that is already ``completed`` is returned unchanged so that
        a repeated session update does not fail.
        """
        match = self._match(match_id)
        if session.match_id != match_id:
            raise ValidationError(f"Session {session.id} does not belong to match {match_id}.")
        if session.status != SessionStatus.COMPLETED or not session.has_both_ratings():
            raise ValidationError(
                f"Session {session.id} must be completed and rated by both sides."
            )
        if match.status == MatchStatus.COMPLETED:
            return match
        updated = self._transition(
            match, {"status": MatchStatus.APPROVED}, status=MatchStatus.COMPLETED
        )
        log.info("Match %s completed", match_id)
        return updated

    def reject(self, match_id: int, admin_id: str) -> Match:
        """Administrative override: reject a pending or approved match."""
        if not admin_id:
            raise ValidationError("Admin ID is required.")
        match = self._match(match_id)
        if match.status not in (MatchStatus.PENDING, MatchStatus.APPROVED):
            raise StateConflictError(
                f"Match {match_id} cannot move to rejected: status is {match.status.value}."
            )
        updated = self._transition(
            match, {"status": match.status}, status=MatchStatus.REJECTED, admin_id=admin_id
        )
        log.info("Match %s rejected by %s", match_id, admin_id)
        return updated

    def request_feedback(self, session_id: int) -> MentoringSession:
        """Ask both sides of a session for feedback, once."""
        session = self.storage.get_session(session_id)
        if session is None:
            raise NotFoundError("Session", session_id)
        if session.feedback_email_sent:
            raise StateConflictError(f"Feedback for session {session_id} was already requested.")
        mentor, mentee, organization = self._parties(self._match(session.match_id))
        updated = self.storage.update_session(
            session_id, expected={"feedback_email_sent": False}, feedback_email_sent=True
        )
        log.info("Feedback requested for session %s", session_id)
        deliver(self.sender, mentor.email, feedback_email(mentor, mentee, organization, role="mentor"))
        deliver(self.sender, mentee.email, feedback_email(mentor, mentee, organization, role="mentee"))
        return updated
