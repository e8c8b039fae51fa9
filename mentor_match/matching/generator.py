"""Turn scored mentor/mentee pairs into ranked ``pending`` matches.

Both entry points are pure: they never touch storage and never filter on
``approved``. Callers pass in the profiles they want considered. Mentors from
another organization than the mentee are never paired with it.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..core.models import Match, Mentee, Mentor, ScoringWeights
from .scoring import DEFAULT_WEIGHTS, score_match


def build_match(mentor: Mentor, mentee: Mentee, weights: ScoringWeights = DEFAULT_WEIGHTS) -> Match:
    """Score one pair and wrap the result in a new, unsaved ``Match``."""
    result = score_match(mentor, mentee, weights)
    return Match(
        organization_id=mentee.organization_id,
        mentor_id=mentor.id,
        mentee_id=mentee.id,
        match_score=result.score,
        match_reasons=result.reasons,
    )


def _candidates(mentee: Mentee, mentors: Iterable[Mentor]) -> list[Mentor]:
    return [m for m in mentors if m.organization_id == mentee.organization_id]


def find_top_matches_for_mentee(
    mentee: Mentee,
    mentors: Sequence[Mentor],
    max_matches: int = 3,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> list[Match]:
    """Return the ``max_matches`` best mentors for ``mentee``.

    Results are sorted by score, highest first. ``sorted`` is stable, so
    mentors with equal scores keep their input order.
    """
    if max_matches <= 0:
        return []
    matches = [build_match(mentor, mentee, weights) for mentor in _candidates(mentee, mentors)]
    matches = sorted(matches, key=lambda m: m.match_score, reverse=True)
    return matches[:max_matches]


def generate_matches(
    mentees: Sequence[Mentee],
    mentors: Sequence[Mentor],
    threshold: int = 70,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> list[Match]:
    """Score every mentee against every mentor and keep pairs at ``threshold`` or above.

    The whole cross product is scored, so cost grows with
    ``len(mentees) * len(mentors)``. There is no per-mentee cap.
    """
    kept = [
        match
        for mentee in mentees
        for mentor in _candidates(mentee, mentors)
        if (match := build_match(mentor, mentee, weights)).match_score >= threshold
    ]
    return sorted(kept, key=lambda m: m.match_score, reverse=True)
