"""Simple JSON-backed storage for mentor matching records."""

from __future__ import annotations

import datetime
import json
import os
import threading
from datetime import UTC
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel

from ..errors import StateConflictError
from .forms import FormTemplate
from .models import (
    Match,
    MatchStatus,
    Mentee,
    MentoringSession,
    Mentor,
    Organization,
    OrganizationAnalytics,
    SessionStatus,
)

M = TypeVar("M", bound=BaseModel)

_COLLECTIONS: dict[str, type[BaseModel]] = {
    "organizations": Organization,
    "form_templates": FormTemplate,
    "mentors": Mentor,
    "mentees": Mentee,
    "matches": Match,
    "sessions": MentoringSession,
}


class JSONStorage:
    """Persist organizations, profiles, matches and sessions.

    The storage is intentionally lightweight. Data is persisted to a single
    JSON file on every mutation which keeps the implementation simple while
    providing durability across process restarts. Records handed out are
    copies; the only way to change a stored record is through one of the
    ``update_*`` methods.

    ``update_match`` and ``update_session`` accept an ``expected`` mapping of
    field values that must still hold when the write happens. The comparison
    and the write run under one lock, which turns a lifecycle transition into
    a compare-and-swap instead of a plain read-then-write.
    """

    def __init__(self, path: Path | str) -> None:
        """Initialise storage using JSON file at ``path``."""
        self.path = Path(path)
        self._lock = threading.RLock()
        self._records: dict[str, dict[int, BaseModel]] = {name: {} for name in _COLLECTIONS}
        if self.path.exists():
            self._load()
        else:
            self._save()

    # ------------------------------------------------------------------
    # Internal helpers
    def _load(self) -> None:
        data = json.loads(self.path.read_text(encoding="utf-8"))
        for name, model in _COLLECTIONS.items():
            self._records[name] = {
                int(item["id"]): model.model_validate(item) for item in data.get(name, [])
            }

    def _save(self, snapshot: dict[str, dict[int, BaseModel]] | None = None) -> None:
        data = {
            name: [r.model_dump(mode="json") for r in records.values()]
            for name, records in (snapshot or self._records).items()
        }
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, self.path)

    def _commit(self, collection: str, record_id: int, record: BaseModel) -> None:
        # memory only changes once the file write has succeeded
        records = {**self._records[collection], record_id: record}
        self._save({**self._records, collection: records})
        self._records[collection] = records

    def _insert(self, collection: str, record: M) -> M:
        with self._lock:
            records = self._records[collection]
            new_id = max(records.keys(), default=0) + 1
            stored = record.model_copy(update={"id": new_id}, deep=True)
            self._commit(collection, new_id, stored)
            return stored.model_copy(deep=True)

    def _get(self, collection: str, record_id: int) -> Any:
        record = self._records[collection].get(record_id)
        return record.model_copy(deep=True) if record is not None else None

    def _update(
        self,
        collection: str,
        record_id: int,
        changes: dict[str, Any],
        expected: dict[str, Any] | None = None,
    ) -> Any:
        with self._lock:
            current = self._records[collection].get(record_id)
            if current is None:
                return None
            for name, value in (expected or {}).items():
                actual = getattr(current, name)
                if actual != value:
                    raise StateConflictError(
                        f"{collection[:-1]} {record_id}: expected {name}={_show(value)}, "
                        f"found {_show(actual)}."
                    )
            data = current.model_dump()
            data.update(changes)
            if "updated_at" in type(current).model_fields:
                data["updated_at"] = datetime.datetime.now(tz=UTC)
            updated = type(current).model_validate(data)
            self._commit(collection, record_id, updated)
            return updated.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Organization operations
    def add_organization(self, organization: Organization) -> Organization:
        """Persist a new ``organization`` and return it with its id."""
        return self._insert("organizations", organization)

    def get_organization(self, organization_id: int) -> Organization | None:
        return self._get("organizations", organization_id)

    def update_organization(self, organization_id: int, **changes: Any) -> Organization | None:
        return self._update("organizations", organization_id, changes)

    # ------------------------------------------------------------------
    # Form template operations
    def add_form_template(self, template: FormTemplate) -> FormTemplate:
        return self._insert("form_templates", template)

    def get_form_template(self, template_id: int) -> FormTemplate | None:
        return self._get("form_templates", template_id)

    def form_templates_for(self, organization_id: int, kind: str | None = None) -> list[FormTemplate]:
        return [
            t.model_copy(deep=True)
            for t in self._records["form_templates"].values()
            if t.organization_id == organization_id and (kind is None or t.type == kind)
        ]

    # ------------------------------------------------------------------
    # Mentor operations
    def add_mentor(self, mentor: Mentor) -> Mentor:
        return self._insert("mentors", mentor)

    def get_mentor(self, mentor_id: int) -> Mentor | None:
        return self._get("mentors", mentor_id)

    def get_mentor_by_email(self, email: str) -> Mentor | None:
        """Look up a mentor by email address (case-insensitive)."""
        return next(
            (m.model_copy(deep=True) for m in self._records["mentors"].values()
             if m.email.lower() == email.lower()),
            None,
        )

    def mentors_for(self, organization_id: int) -> list[Mentor]:
        return [
            m.model_copy(deep=True)
            for m in self._records["mentors"].values()
            if m.organization_id == organization_id
        ]

    def update_mentor(self, mentor_id: int, **changes: Any) -> Mentor | None:
        return self._update("mentors", mentor_id, changes)

    # ------------------------------------------------------------------
    # Mentee operations
    def add_mentee(self, mentee: Mentee) -> Mentee:
        return self._insert("mentees", mentee)

    def get_mentee(self, mentee_id: int) -> Mentee | None:
        return self._get("mentees", mentee_id)

    def get_mentee_by_email(self, email: str) -> Mentee | None:
        """Look up a mentee by email address (case-insensitive)."""
        return next(
            (m.model_copy(deep=True) for m in self._records["mentees"].values()
             if m.email.lower() == email.lower()),
            None,
        )

    def mentees_for(self, organization_id: int) -> list[Mentee]:
        return [
            m.model_copy(deep=True)
            for m in self._records["mentees"].values()
            if m.organization_id == organization_id
        ]

    def update_mentee(self, mentee_id: int, **changes: Any) -> Mentee | None:
        return self._update("mentees", mentee_id, changes)

    # ------------------------------------------------------------------
    # Match operations
    def add_match(self, match: Match) -> Match:
        return self._insert("matches", match)

    def get_match(self, match_id: int) -> Match | None:
        return self._get("matches", match_id)

    def matches_for(self, organization_id: int, status: MatchStatus | None = None) -> list[Match]:
        return [
            m.model_copy(deep=True)
            for m in self._records["matches"].values()
            if m.organization_id == organization_id and (status is None or m.status == status)
        ]

    def update_match(
        self, match_id: int, expected: dict[str, Any] | None = None, **changes: Any
    ) -> Match | None:
        """Apply ``changes`` to a match, optionally guarded by ``expected``.

        Returns ``None`` when the match does not exist and raises
        :class:`~mentor_match.errors.StateConflictError` when a field in
        ``expected`` no longer has the given value.
        """
        return self._update("matches", match_id, changes, expected)

    # ------------------------------------------------------------------
    # Mentoring session operations
    def add_session(self, session: MentoringSession) -> MentoringSession:
        return self._insert("sessions", session)

    def get_session(self, session_id: int) -> MentoringSession | None:
        return self._get("sessions", session_id)

    def sessions_for(self, match_id: int) -> list[MentoringSession]:
        return [
            s.model_copy(deep=True)
            for s in self._records["sessions"].values()
            if s.match_id == match_id
        ]

    def update_session(
        self, session_id: int, expected: dict[str, Any] | None = None, **changes: Any
    ) -> MentoringSession | None:
        return self._update("sessions", session_id, changes, expected)

    # ------------------------------------------------------------------
    # Analytics
    def analytics(self, organization_id: int) -> OrganizationAnalytics:
        """Summarise matches, mentors and session ratings for an organization."""
        matches = [m for m in self._records["matches"].values() if m.organization_id == organization_id]
        match_ids = {m.id for m in matches}
        sessions = [s for s in self._records["sessions"].values() if s.match_id in match_ids]
        ratings = [
            r for s in sessions for r in (s.mentor_rating, s.mentee_rating) if r is not None
        ]
        return OrganizationAnalytics(
            total_matches=len(matches),
            active_mentors=sum(
                1 for m in self._records["mentors"].values()
                if m.organization_id == organization_id and m.active and m.approved
            ),
            sessions_completed=sum(1 for s in sessions if s.status == SessionStatus.COMPLETED),
            average_rating=sum(ratings) / len(ratings) if ratings else 0.0,
            pending_matches=sum(1 for m in matches if m.status == MatchStatus.PENDING),
        )


def _show(value: Any) -> str:
    return value.value if hasattr(value, "value") else repr(value)
