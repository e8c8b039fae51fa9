from factories import make_mentee, make_mentor
from mentor_match.core.models import MatchStatus, MeetingFormat
from mentor_match.matching.generator import find_top_matches_for_mentee, generate_matches


def _mentors():
    return [
        make_mentor(id=1, expertise=["law"], industry="finance", years_of_experience=None),  # 40
        make_mentor(id=2),  # 100
        make_mentor(id=3, industry="health"),  # 80
        make_mentor(id=4, industry="health", years_of_experience=None),  # 80, after 3
    ]


def test_top_matches_sorted_and_capped() -> None:
    mentee = make_mentee(id=10)
    matches = find_top_matches_for_mentee(mentee, _mentors(), max_matches=3)

    assert [m.mentor_id for m in matches] == [2, 3, 4]
    assert [m.match_score for m in matches] == [100, 80, 80]
    for match in matches:
        assert match.status == MatchStatus.PENDING
        assert match.mentee_id == 10
        assert match.organization_id == mentee.organization_id
        assert not (match.intro_email_sent or match.follow_up_email_sent or match.session_scheduled)
        assert match.id is None


def test_top_matches_edge_cases() -> None:
    mentee = make_mentee(id=10)
    assert find_top_matches_for_mentee(mentee, []) == []
    assert find_top_matches_for_mentee(mentee, _mentors(), max_matches=0) == []
    assert len(find_top_matches_for_mentee(mentee, _mentors(), max_matches=10)) == 4


def test_ties_keep_input_order() -> None:
    mentee = make_mentee(id=10)
    mentors = [make_mentor(id=i) for i in (7, 5, 6)]
    assert [m.mentor_id for m in find_top_matches_for_mentee(mentee, mentors)] == [7, 5, 6]


def test_generate_matches_applies_threshold_across_all_pairs() -> None:
    mentees = [
        make_mentee(id=10),
        # scores 60 against mentor 1 and 0 against the rest
        make_mentee(id=11, interests=["law"], industry="finance",
                    availability=["weekend-afternoons"],
                    preferred_meeting_format=MeetingFormat.IN_PERSON),
    ]
    matches = generate_matches(mentees, _mentors(), threshold=70)

    assert all(m.match_score >= 70 for m in matches)
    scores = [m.match_score for m in matches]
    assert scores == sorted(scores, reverse=True)
    assert {(m.mentee_id, m.mentor_id) for m in matches} == {(10, 2), (10, 3), (10, 4)}


def test_generate_matches_has_no_per_mentee_cap() -> None:
    mentors = [make_mentor(id=i) for i in range(1, 6)]
    matches = generate_matches([make_mentee(id=10)], mentors, threshold=0)
    assert len(matches) == 5


def test_generator_never_crosses_organizations() -> None:
    mentee = make_mentee(id=10, organization_id=1)
    outsider = make_mentor(id=99, organization_id=2)

    assert find_top_matches_for_mentee(mentee, [outsider]) == []
    assert generate_matches([mentee], [outsider], threshold=0) == []


def test_generator_does_not_filter_unapproved() -> None:
    mentor = make_mentor(id=1, approved=False)
    mentee = make_mentee(id=10, approved=False)
    assert len(generate_matches([mentee], [mentor])) == 1
