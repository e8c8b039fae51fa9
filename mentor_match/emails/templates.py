"""Email templates and the placeholder renderer that fills them.

Templates use ``{{key}}`` tokens. :func:`render` replaces every occurrence of
each key it is given and leaves unknown tokens in place, so a missing value
shows up in the output instead of raising. The builders below always supply
every key their template uses; optional sections are passed as an empty
string rather than left out.
"""

from __future__ import annotations

import datetime
import html
from dataclasses import dataclass
from datetime import UTC
from typing import Literal

from ..core.models import Mentee, Mentor, Organization

Role = Literal["mentor", "mentee"]


@dataclass(frozen=True)
class Email:
    subject: str
    body: str
    is_html: bool = False

    def html_body(self) -> str:
        return self.body if self.is_html else text_to_html(self.body)


def render(template: str, values: dict[str, str]) -> str:
    """Replace each ``{{key}}`` in ``template`` with ``values[key]``."""
    for key, value in values.items():
        template = template.replace("{{" + key + "}}", value)
    return template


def text_to_html(text: str) -> str:
    """Escape a plain-text body and keep its line breaks."""
    return html.escape(text.strip()).replace("\n", "<br>\n")


INTRODUCTION_TEMPLATE = """
Dear {{mentee_name}},

I am pleased to introduce you to {{mentor_name}}, who has agreed to be your mentor as part of {{organization_name}}'s mentorship program.

{{mentor_name}} is a {{mentor_title}} at {{mentor_organization}} with expertise in {{mentor_expertise}}. Based on your interests in {{mentee_interests}}, we believe this will be a valuable mentoring relationship.

{{booking_link_section}}

Please connect with {{mentor_name}} and arrange your first mentoring session. We recommend meeting within the next two weeks.

Best regards,
The {{organization_name}} Team
"""

FOLLOW_UP_TEMPLATE = """
Dear {{mentee_name}},

I hope this email finds you well. We recently connected you with {{mentor_name}} for mentorship.

We would like to know if you have scheduled a meeting with your mentor. If yes, please let us know when the session is planned. If not, please make arrangements soon to get the most out of this mentoring opportunity.

{{booking_link_section}}

Thank you for your participation in our mentorship program.

Best regards,
The {{organization_name}} Team
"""

FEEDBACK_TEMPLATE = """
Dear {{recipient_name}},

Thank you for participating in our mentorship program at {{organization_name}}.

We hope your recent session with {{partner_name}} was valuable. We would appreciate your feedback to help us improve the program.

Please take a moment to rate your experience from 1 to 5 stars and provide any comments you may have.

Your feedback is valuable to us.

Best regards,
The {{organization_name}} Team
"""

MENTOR_INVITATION_TEMPLATE = """
Dear Mentor,

You have been invited to join {{organization_name}}'s mentorship program as a mentor.

We believe your expertise and experience would be valuable to entrepreneurs seeking guidance. Our platform makes it easy to connect with motivated mentees who match your skills and availability.

{{custom_message}}

To get started, please click the link below to complete your mentor profile:
[Complete Your Profile]

Thank you for considering this opportunity to make a difference.

Best regards,
The {{organization_name}} Team
"""

MENTEE_INVITATION_TEMPLATE = """
Dear Entrepreneur,

You have been invited to join {{organization_name}}'s mentorship program as a mentee.

Our platform connects you with experienced mentors who can provide guidance tailored to your needs and goals. This is a great opportunity to gain insights and support for your entrepreneurial journey.

{{custom_message}}

To get started, please click the link below to complete your profile:
[Complete Your Profile]

We look forward to helping you find the perfect mentor.

Best regards,
The {{organization_name}} Team
"""

WELCOME_TEMPLATE = """<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <div style="background-color: {{primary_color}}; padding: 20px; text-align: center;">
    <h1 style="color: white; margin: 0;">Welcome to {{organization_name}}!</h1>
  </div>
  <div style="padding: 20px; border: 1px solid #e5e7eb; border-top: none;">
    <p>Dear {{recipient_name}},</p>
    {{welcome_body}}
    <p>Best regards,<br>The {{organization_name}} Team</p>
  </div>
  <div style="background-color: #f3f4f6; padding: 10px; text-align: center; font-size: 12px; color: #6b7280;">
    <p>&copy; {{year}} {{organization_name}}. All rights reserved.</p>
  </div>
</div>
"""

_MENTOR_WELCOME_BODY = """<p>We're delighted to welcome you as an approved mentor in the {{organization_name}} mentorship program!</p>
    <p>You are now visible in our mentor pool and may be matched with mentees based on skills and interests.</p>
    <ul>
      <li>You'll receive notifications when you're matched with a mentee</li>
      <li>You can review potential matches and schedule sessions</li>
    </ul>"""

_MENTEE_WELCOME_BODY = """<p>Welcome to the {{organization_name}} mentorship program! Your application has been approved.</p>
    <p>We're now working on finding the right mentor for you based on your goals and interests.</p>
    <ul>
      <li>You'll be notified when we've found a suitable mentor for you</li>
      <li>You'll be able to schedule your first mentoring session</li>
    </ul>"""


def introduction_email(mentor: Mentor, mentee: Mentee, organization: Organization) -> Email:
    booking = ""
    if mentor.booking_link:
        booking = (
            f"{mentor.name} has provided a booking link to make scheduling easier:\n"
            f"{mentor.booking_link}"
        )
    values = {
        "mentor_name": mentor.name,
        "mentee_name": mentee.name,
        "organization_name": organization.name,
        "mentor_title": mentor.title or "professional",
        "mentor_organization": mentor.organization or "",
        "mentor_expertise": ", ".join(mentor.expertise) or "various areas",
        "mentee_interests": ", ".join(mentee.interests) or "various areas",
        "booking_link_section": booking,
    }
    return Email(
        subject=f"Introducing your {organization.name} mentor: {mentor.name}",
        body=render(INTRODUCTION_TEMPLATE, values),
    )


def follow_up_email(mentor: Mentor, mentee: Mentee, organization: Organization) -> Email:
    booking = ""
    if mentor.booking_link:
        booking = (
            f"For your convenience, here is {mentor.name}'s booking link:\n"
            f"{mentor.booking_link}"
        )
    values = {
        "mentor_name": mentor.name,
        "mentee_name": mentee.name,
        "organization_name": organization.name,
        "booking_link_section": booking,
    }
    return Email(
        subject=f"Have you met with {mentor.name} yet?",
        body=render(FOLLOW_UP_TEMPLATE, values),
    )


def feedback_email(
    mentor: Mentor, mentee: Mentee, organization: Organization, role: Role
) -> Email:
    """Feedback request addressed to the ``role`` side of the match."""
    recipient, partner = (mentor, mentee) if role == "mentor" else (mentee, mentor)
    values = {
        "recipient_name": recipient.name,
        "partner_name": partner.name,
        "organization_name": organization.name,
    }
    return Email(
        subject=f"How was your session with {partner.name}?",
        body=render(FEEDBACK_TEMPLATE, values),
    )


def invitation_email(organization: Organization, user_type: Role, custom_message: str = "") -> Email:
    template = MENTOR_INVITATION_TEMPLATE if user_type == "mentor" else MENTEE_INVITATION_TEMPLATE
    values = {
        "organization_name": organization.name,
        "custom_message": f'\nPersonal message: "{custom_message}"\n' if custom_message else "",
    }
    return Email(
        subject=f"You're invited to join {organization.name}'s mentorship program",
        body=render(template, values),
    )


def welcome_email(person: Mentor | Mentee, organization: Organization, role: Role) -> Email:
    body = _MENTOR_WELCOME_BODY if role == "mentor" else _MENTEE_WELCOME_BODY
    values = {
        "primary_color": organization.primary_color,
        "organization_name": html.escape(organization.name),
        "recipient_name": html.escape(person.name),
        "year": str(datetime.datetime.now(tz=UTC).year),
    }
    # the body carries its own tokens, so it is inserted before the final pass
    page = render(WELCOME_TEMPLATE, {"welcome_body": body})
    program = "Mentor" if role == "mentor" else "Mentorship"
    return Email(
        subject=f"Welcome to {organization.name}'s {program} Program!",
        body=render(page, values),
        is_html=True,
    )
