"""Resend adapter implementing :class:`~mentor_match.adapters.base.EmailSender`.

The adapter posts directly to Resend's HTTP API with :mod:`httpx`, which keeps
the dependency footprint small. Failures are logged and reported as
``False``; callers decide what a failed send means for them.
"""

from __future__ import annotations

import logging

import httpx

from .base import EmailSender

log = logging.getLogger("mentor_match.email")

SANDBOX_ADDRESS = "delivered@resend.dev"


def _message_id(response: httpx.Response) -> str | None:
    # the send already succeeded; an unexpected body only loses the id
    try:
        data = response.json()
    except ValueError:
        return None
    return data.get("id") if isinstance(data, dict) else None


def sandbox_address(email: str) -> str:
    """Route placeholder and malformed addresses to Resend's test inbox."""
    if email.endswith("example.com") or "@" not in email or "." not in email:
        return SANDBOX_ADDRESS
    return email


class ResendEmailSender(EmailSender):
    """Send email through the Resend HTTP API."""

    api_base = "https://api.resend.com"

    def __init__(
        self,
        api_key: str,
        sender: str,
        client: httpx.Client | None = None,
        sandbox: bool = False,
    ) -> None:
        """Store the ``api_key``, ``sender`` address and optional HTTP ``client``."""
        self.api_key = api_key
        self.sender = sender
        self.sandbox = sandbox
        self.client = client or httpx.Client(timeout=10.0)

    # ------------------------------------------------------------------
    def send_email(self, to: str, subject: str, html: str) -> bool:
        """Send a message.

        Parameters
        ----------
        to:
            Recipient address. Rewritten to the sandbox inbox for test
            addresses when ``sandbox`` is enabled.
        subject:
            Subject line.
        html:
            HTML body.

        """
        recipient = sandbox_address(to) if self.sandbox else to
        url = f"{self.api_base}/emails"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        payload = {"from": self.sender, "to": [recipient], "subject": subject, "html": html}
        try:
            response = self.client.post(url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError:
            log.exception("Failed to send email %r to %s", subject, recipient)
            return False
        log.info("Email %r sent to %s (id=%s)", subject, recipient, _message_id(response))
        return True

    def close(self) -> None:
        """Close the underlying :class:`httpx.Client`."""
        self.client.close()
