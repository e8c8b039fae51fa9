"""Approval of new mentors and mentees, welcome emails and invitations."""

from __future__ import annotations

import datetime
import logging
from datetime import UTC
from typing import Literal

from pydantic import BaseModel

from .adapters.base import EmailSender
from .core.models import Mentee, Mentor, Organization
from .core.storage import JSONStorage
from .emails.delivery import deliver
from .emails.templates import invitation_email, welcome_email
from .errors import NotFoundError, ValidationError

log = logging.getLogger("mentor_match.onboarding")


class Invitation(BaseModel):
    email: str
    user_type: Literal["mentor", "mentee"]
    form_template_id: int | None = None
    sent: bool
    sent_at: datetime.datetime | None = None


class Onboarding:
    def __init__(self, storage: JSONStorage, sender: EmailSender) -> None:
        self.storage = storage
        self.sender = sender

    def _organization(self, organization_id: int) -> Organization:
        organization = self.storage.get_organization(organization_id)
        if organization is None:
            raise NotFoundError("Organization", organization_id)
        return organization

    def approve_mentor(self, mentor_id: int) -> Mentor:
        """Approve a mentor and send the welcome email if it has not gone out yet.

        ``welcome_email_sent`` is only set when the provider accepted the
        message, so approving again retries a failed welcome email.
        """
        mentor = self.storage.get_mentor(mentor_id)
        if mentor is None:
            raise NotFoundError("Mentor", mentor_id)
        mentor = self.storage.update_mentor(mentor_id, approved=True)
        if not mentor.welcome_email_sent:
            organization = self._organization(mentor.organization_id)
            if deliver(self.sender, mentor.email, welcome_email(mentor, organization, role="mentor")):
                mentor = self.storage.update_mentor(mentor_id, welcome_email_sent=True)
        log.info("Mentor %s approved", mentor_id)
        return mentor

    def approve_mentee(self, mentee_id: int) -> Mentee:
        """Mentee counterpart of :meth:`approve_mentor`."""
        mentee = self.storage.get_mentee(mentee_id)
        if mentee is None:
            raise NotFoundError("Mentee", mentee_id)
        mentee = self.storage.update_mentee(mentee_id, approved=True)
        if not mentee.welcome_email_sent:
            organization = self._organization(mentee.organization_id)
            if deliver(self.sender, mentee.email, welcome_email(mentee, organization, role="mentee")):
                mentee = self.storage.update_mentee(mentee_id, welcome_email_sent=True)
        log.info("Mentee %s approved", mentee_id)
        return mentee

    def send_invitations(
        self,
        organization_id: int,
        emails: list[str],
        user_type: str,
        message: str = "",
        form_template_id: int | None = None,
    ) -> list[Invitation]:
        if not emails:
            raise ValidationError("Emails are required.")
        if user_type not in ("mentor", "mentee"):
            raise ValidationError("Valid user type is required.")
        if form_template_id is not None:
            template = self.storage.get_form_template(form_template_id)
            if template is None:
                raise NotFoundError("Form template", form_template_id)
            if template.type != user_type:
                raise ValidationError(
                    f"Form template {form_template_id} is a {template.type} form."
                )
        email = invitation_email(self._organization(organization_id), user_type, message)
        invitations = []
        for address in emails:
            sent = deliver(self.sender, address, email)
            invitations.append(
                Invitation(
                    email=address,
                    user_type=user_type,
                    form_template_id=form_template_id,
                    sent=sent,
                    sent_at=datetime.datetime.now(tz=UTC) if sent else None,
                )
            )
        log.info(
            "Sent %d of %d %s invitations for organization %s",
            sum(1 for i in invitations if i.sent), len(invitations), user_type, organization_id,
        )
        return invitations
