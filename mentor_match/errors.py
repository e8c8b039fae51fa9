"""Exception types raised by the matching core."""

from __future__ import annotations


class MentorMatchError(Exception):
    """Base class for all errors raised by :mod:`mentor_match`."""


class NotFoundError(MentorMatchError):
    """A referenced record does not exist."""

    def __init__(self, kind: str, record_id: object) -> None:
        super().__init__(f"{kind} {record_id} not found.")
        self.kind = kind
        self.record_id = record_id


class StateConflictError(MentorMatchError):
    """A transition was attempted from a state that does not allow it."""


class ValidationError(MentorMatchError):
    """Input to an operation was malformed or incomplete."""
