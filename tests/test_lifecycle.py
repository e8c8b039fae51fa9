"""Tests for match lifecycle transitions and their notifications."""

import httpx
import pytest

from factories import RecordingSender, make_mentee, make_mentor
from mentor_match.adapters.resend import ResendEmailSender
from mentor_match.core.models import Match, MatchStatus, MentoringSession, SessionStatus
from mentor_match.errors import NotFoundError, StateConflictError, ValidationError
from mentor_match.matching.lifecycle import MatchLifecycle


@pytest.fixture
def match(storage, org):
    mentor = storage.add_mentor(make_mentor(org.id))
    mentee = storage.add_mentee(make_mentee(org.id))
    return storage.add_match(
        Match(organization_id=org.id, mentor_id=mentor.id, mentee_id=mentee.id, match_score=90)
    )


@pytest.fixture
def lifecycle(storage, sender):
    return MatchLifecycle(storage, sender)


def _completed_session(storage, match_id, **overrides):
    data = dict(match_id=match_id, status=SessionStatus.COMPLETED, mentor_rating=5, mentee_rating=4)
    data.update(overrides)
    return storage.add_session(MentoringSession(**data))


def test_approve_sets_state_and_sends_introduction(lifecycle, storage, sender, match) -> None:
    updated = lifecycle.approve(match.id, "admin-1")

    assert updated.status == MatchStatus.APPROVED
    assert updated.admin_id == "admin-1"
    assert updated.intro_email_sent is True
    assert storage.get_match(match.id).status == MatchStatus.APPROVED

    assert len(sender.sent) == 1
    to, subject, html = sender.sent[0]
    assert to == "alan@startup.io"
    assert "Grace" in subject
    assert "Dear Alan," in html


def test_reapproval_is_rejected_without_second_email(lifecycle, sender, match) -> None:
    lifecycle.approve(match.id, "admin-1")
    with pytest.raises(StateConflictError):
        lifecycle.approve(match.id, "admin-2")
    assert len(sender.sent) == 1


def test_approve_unknown_match(lifecycle) -> None:
    with pytest.raises(NotFoundError):
        lifecycle.approve(404, "admin-1")


def test_approve_requires_admin(lifecycle, match) -> None:
    with pytest.raises(ValidationError):
        lifecycle.approve(match.id, "")


def test_email_failure_does_not_roll_back(storage, match) -> None:
    lifecycle = MatchLifecycle(storage, RecordingSender(accept=False))
    updated = lifecycle.approve(match.id, "admin-1")
    assert updated.status == MatchStatus.APPROVED
    assert storage.get_match(match.id).intro_email_sent is True


def test_email_transport_error_is_swallowed(storage, match) -> None:
    class Exploding(RecordingSender):
        def send_email(self, to, subject, html):
            raise httpx.ConnectError("no route")

    updated = MatchLifecycle(storage, Exploding()).approve(match.id, "admin-1")
    assert updated.status == MatchStatus.APPROVED


def test_follow_up_sent_once(lifecycle, sender, match) -> None:
    lifecycle.approve(match.id, "admin-1")
    updated = lifecycle.send_follow_up(match.id)

    assert updated.follow_up_email_sent is True
    assert updated.status == MatchStatus.APPROVED
    assert len(sender.sent) == 2

    with pytest.raises(StateConflictError):
        lifecycle.send_follow_up(match.id)
    assert len(sender.sent) == 2


def test_follow_up_requires_approval(lifecycle, sender, match) -> None:
    with pytest.raises(StateConflictError):
        lifecycle.send_follow_up(match.id)
    assert sender.sent == []


def test_complete_after_rated_session(lifecycle, storage, match) -> None:
    lifecycle.approve(match.id, "admin-1")
    session = _completed_session(storage, match.id)

    assert lifecycle.complete(match.id, session).status == MatchStatus.COMPLETED
    # repeating the completion is harmless
    assert lifecycle.complete(match.id, session).status == MatchStatus.COMPLETED


def test_complete_requires_both_ratings(lifecycle, storage, match) -> None:
    lifecycle.approve(match.id, "admin-1")
    session = _completed_session(storage, match.id, mentee_rating=None)
    with pytest.raises(ValidationError):
        lifecycle.complete(match.id, session)


def test_complete_requires_approved_match(lifecycle, storage, match) -> None:
    session = _completed_session(storage, match.id)
    with pytest.raises(StateConflictError):
        lifecycle.complete(match.id, session)


def test_complete_rejects_foreign_session(lifecycle, storage, match) -> None:
    lifecycle.approve(match.id, "admin-1")
    session = _completed_session(storage, match.id + 1)
    with pytest.raises(ValidationError):
        lifecycle.complete(match.id, session)


def test_reject_override(lifecycle, match) -> None:
    rejected = lifecycle.reject(match.id, "admin-1")
    assert rejected.status == MatchStatus.REJECTED
    with pytest.raises(StateConflictError):
        lifecycle.reject(match.id, "admin-1")
    with pytest.raises(StateConflictError):
        lifecycle.approve(match.id, "admin-1")


def test_request_feedback_emails_both_sides_once(lifecycle, storage, sender, match) -> None:
    session = _completed_session(storage, match.id)

    updated = lifecycle.request_feedback(session.id)

    assert updated.feedback_email_sent is True
    assert [to for to, _, _ in sender.sent] == ["grace@mentors.io", "alan@startup.io"]
    with pytest.raises(StateConflictError):
        lifecycle.request_feedback(session.id)


def test_request_feedback_unknown_session(lifecycle) -> None:
    with pytest.raises(NotFoundError):
        lifecycle.request_feedback(1)


def test_stale_writer_loses_race(storage, sender, match) -> None:
    """A transition computed from a stale read must not overwrite a newer state."""
    first = MatchLifecycle(storage, sender)
    stale = storage.get_match(match.id)
    first.approve(match.id, "admin-1")

    with pytest.raises(StateConflictError):
        storage.update_match(
            stale.id, expected={"status": MatchStatus.PENDING}, status=MatchStatus.APPROVED
        )
    assert storage.get_match(match.id).admin_id == "admin-1"


def test_any_sender_error_is_swallowed(storage, match) -> None:
    class Unreachable(RecordingSender):
        def send_email(self, to, subject, html):
            raise ConnectionError("smtp down")

    lifecycle = MatchLifecycle(storage, Unreachable())
    assert lifecycle.approve(match.id, "admin-1").status == MatchStatus.APPROVED
    assert storage.get_match(match.id).status == MatchStatus.APPROVED


def test_resend_reply_without_json_body(storage, match) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="OK")

    client = httpx.Client(transport=httpx.MockTransport(handler))
    sender = ResendEmailSender("re_KEY", "Acme <hello@acme.io>", client=client)

    updated = MatchLifecycle(storage, sender).approve(match.id, "admin-1")
    assert updated.status == MatchStatus.APPROVED
    sender.close()


def test_failed_write_leaves_match_pending(lifecycle, storage, sender, match, monkeypatch) -> None:
    def disk_full(*args, **kwargs):
        raise OSError("No space left on device")

    monkeypatch.setattr(storage, "_save", disk_full)
    with pytest.raises(OSError):
        lifecycle.approve(match.id, "admin-1")
    assert storage.get_match(match.id).status == MatchStatus.PENDING
    assert sender.sent == []

    monkeypatch.undo()
    assert lifecycle.approve(match.id, "admin-1").status == MatchStatus.APPROVED
