"""Compatibility scoring between a mentor and a mentee.

Four independent sub-scores, each on a 0-100 scale, are combined into a
weighted total:

* expertise: share of the mentee's interests covered by the mentor's
  expertise
* industry: both sides work in the same industry
* availability: overlap of time slots relative to the smaller availability set
* meeting format: the preferred formats are compatible

Missing or empty profile data contributes zero to the affected sub-score;
scoring never raises on incomplete profiles. The reasons produced alongside
the score are informational only and never change the number.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from ..core.models import MeetingFormat, Mentee, Mentor, ScoringWeights

DEFAULT_WEIGHTS = ScoringWeights()

TOP_EXPERIENCE_BUCKET = "10+"
FALLBACK_REASON = "this could be a good match."


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (``12.5 -> 13``)."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class SubScores:
    expertise: int
    industry: int
    availability: int
    meeting_format: int

    def weighted_total(self, weights: ScoringWeights = DEFAULT_WEIGHTS) -> int:
        total = round_half_up(
            self.expertise * weights.expertise
            + self.industry * weights.industry
            + self.availability * weights.availability
            + self.meeting_format * weights.meeting_format
        )
        return max(0, min(100, total))


@dataclass(frozen=True)
class MatchScore:
    score: int
    reasons: list[str] = field(default_factory=list)
    breakdown: SubScores | None = None


def _overlap(left: list[str], right: list[str]) -> list[str]:
    # keeps the order of ``left``
    wanted = set(right)
    return [item for item in left if item in wanted]


def expertise_score(mentor: Mentor, mentee: Mentee) -> int:
    if not mentor.expertise or not mentee.interests:
        return 0
    shared = _overlap(mentor.expertise, mentee.interests)
    return min(100, round_half_up(len(shared) / len(mentee.interests) * 100))


def industry_score(mentor: Mentor, mentee: Mentee) -> int:
    if not mentor.industry or not mentee.industry:
        return 0
    return 100 if mentor.industry == mentee.industry else 0


def availability_score(mentor: Mentor, mentee: Mentee) -> int:
    if not mentor.availability or not mentee.availability:
        return 0
    shared = _overlap(mentor.availability, mentee.availability)
    smaller = min(len(mentor.availability), len(mentee.availability))
    return min(100, round_half_up(len(shared) / smaller * 100))


def meeting_format_score(mentor: Mentor, mentee: Mentee) -> int:
    ours, theirs = mentor.preferred_meeting_format, mentee.preferred_meeting_format
    if ours is None or theirs is None:
        return 0
    if MeetingFormat.BOTH in (ours, theirs):
        return 100
    return 100 if ours == theirs else 0


def compute_sub_scores(mentor: Mentor, mentee: Mentee) -> SubScores:
    return SubScores(
        expertise=expertise_score(mentor, mentee),
        industry=industry_score(mentor, mentee),
        availability=availability_score(mentor, mentee),
        meeting_format=meeting_format_score(mentor, mentee),
    )


def match_reasons(mentor: Mentor, mentee: Mentee, scores: SubScores) -> list[str]:
    """Explain a score in a few sentences suitable for an admin dashboard."""
    reasons: list[str] = []

    if scores.expertise > 50:
        shared = _overlap(mentor.expertise, mentee.interests)
        if set(mentee.interests) <= set(mentor.expertise):
            reasons.append(
                f"{mentor.name} has expertise in all areas that {mentee.name} is interested in"
            )
        elif shared:
            more = " and more" if len(shared) > 2 else ""
            reasons.append(f"Both share interests in {', '.join(shared[:2])}{more}")

    if scores.industry == 100:
        reasons.append(f"Both work in the {mentor.industry} industry")

    if mentor.years_of_experience == TOP_EXPERIENCE_BUCKET:
        reasons.append(
            f"{mentor.name} has 10+ years experience in areas {mentee.name} wants to learn"
        )

    if scores.availability > 50:
        shared = _overlap(mentor.availability, mentee.availability)
        if "weekday-evenings" in shared:
            reasons.append("Both indicated availability on weekday evenings")
        elif "weekend-mornings" in shared:
            reasons.append("Both have weekend morning availability")
        elif shared:
            reasons.append("Both have overlapping availability")

    if scores.meeting_format == 100:
        formats = (mentor.preferred_meeting_format, mentee.preferred_meeting_format)
        label = "flexible" if MeetingFormat.BOTH in formats else mentor.preferred_meeting_format.value
        reasons.append(f"Both prefer {label} meeting format")

    if mentor.booking_link:
        reasons.append(f"{mentor.name} has a booking link for easy scheduling")

    unique = list(dict.fromkeys(reasons))
    return unique or [FALLBACK_REASON]


def score_match(
    mentor: Mentor, mentee: Mentee, weights: ScoringWeights = DEFAULT_WEIGHTS
) -> MatchScore:
    """Score a mentor/mentee pair.

    Parameters
    ----------
    mentor, mentee:
        The profiles to compare. Neither is modified.
    weights:
        Relative weight of each sub-score; defaults to
        ``expertise=0.4, industry=0.2, availability=0.3, meeting_format=0.1``.

    Returns
    -------
    MatchScore
        The weighted 0-100 score, the reasons and the sub-score breakdown.

    """
    scores = compute_sub_scores(mentor, mentee)
    return MatchScore(
        score=scores.weighted_total(weights),
        reasons=match_reasons(mentor, mentee, scores),
        breakdown=scores,
    )
