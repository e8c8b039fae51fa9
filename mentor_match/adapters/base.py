"""Base interface for outgoing email providers."""

from __future__ import annotations

from abc import ABC, abstractmethod


class EmailSender(ABC):
    """Abstract email collaborator used by the lifecycle and onboarding code."""

    @abstractmethod
    def send_email(self, to: str, subject: str, html: str) -> bool:
        """Send one message and report whether the provider accepted it.

        Implementations do not retry; delivery guarantees belong to the
        provider.
        """

    def close(self) -> None:
        """Release any resources held by the sender."""
