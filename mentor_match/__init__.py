"""Core package for Mentor Match.

This module exposes the main data models, the storage layer and the matching
entry points so that consumers of the package can simply import them from
``mentor_match``.
"""

from .core.models import (
    Match,
    MatchingConfig,
    MatchStatus,
    MeetingFormat,
    Mentee,
    MentoringSession,
    Mentor,
    Organization,
    ScoringWeights,
    SessionStatus,
)
from .core.storage import JSONStorage
from .emails.templates import render
from .errors import MentorMatchError, NotFoundError, StateConflictError, ValidationError
from .matching.generator import find_top_matches_for_mentee, generate_matches
from .matching.lifecycle import MatchLifecycle
from .matching.scoring import MatchScore, score_match

__all__ = [
    "JSONStorage",
    "Match",
    "MatchLifecycle",
    "MatchScore",
    "MatchStatus",
    "MatchingConfig",
    "MeetingFormat",
    "Mentee",
    "MentoringSession",
    "Mentor",
    "MentorMatchError",
    "NotFoundError",
    "Organization",
    "ScoringWeights",
    "SessionStatus",
    "StateConflictError",
    "ValidationError",
    "find_top_matches_for_mentee",
    "generate_matches",
    "render",
    "score_match",
]
