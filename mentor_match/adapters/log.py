"""Development sender that writes messages to the log instead of mailing them."""

from __future__ import annotations

import logging

from .base import EmailSender

log = logging.getLogger("mentor_match.email")


class LogEmailSender(EmailSender):
    def send_email(self, to: str, subject: str, html: str) -> bool:
        log.info("Email to %s: %s (%d chars, not delivered)", to, subject, len(html))
        return True
