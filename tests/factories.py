"""Test helpers for building profiles and capturing outgoing email."""

from mentor_match.adapters.base import EmailSender
from mentor_match.core.models import MeetingFormat, Mentee, Mentor


class RecordingSender(EmailSender):
    """Collects messages instead of sending them; ``accept`` controls the result."""

    def __init__(self, accept: bool = True) -> None:
        self.accept = accept
        self.sent: list[tuple[str, str, str]] = []

    def send_email(self, to: str, subject: str, html: str) -> bool:
        self.sent.append((to, subject, html))
        return self.accept


def make_mentor(organization_id: int = 1, **overrides) -> Mentor:
    data = dict(
        organization_id=organization_id,
        name="Grace",
        email="grace@mentors.io",
        industry="tech",
        expertise=["marketing", "sales"],
        availability=["weekday-evenings"],
        preferred_meeting_format=MeetingFormat.VIRTUAL,
        years_of_experience="10+",
        approved=True,
    )
    data.update(overrides)
    return Mentor(**data)


def make_mentee(organization_id: int = 1, **overrides) -> Mentee:
    data = dict(
        organization_id=organization_id,
        name="Alan",
        email="alan@startup.io",
        industry="tech",
        interests=["marketing"],
        availability=["weekday-evenings"],
        preferred_meeting_format=MeetingFormat.VIRTUAL,
        approved=True,
    )
    data.update(overrides)
    return Mentee(**data)
