"""Best-effort hand-off of rendered emails to the email collaborator."""

from __future__ import annotations

import logging

from ..adapters.base import EmailSender
from .templates import Email

log = logging.getLogger("mentor_match.email")


def deliver(sender: EmailSender, to: str, email: Email) -> bool:
    """Send ``email`` and return whether it was accepted.

    Delivery is best-effort: any error raised by the sender and any rejected
    send is logged and reported as ``False``. Nothing propagates to the caller.
    """
    try:
        sent = sender.send_email(to, email.subject, email.html_body())
    except Exception:
        log.exception("Email %r to %s failed", email.subject, to)
        return False
    if not sent:
        log.warning("Email %r to %s was not accepted", email.subject, to)
    return sent
