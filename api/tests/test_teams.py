import pytest

from matchmaking.config import TEAM_COMBINATION_CAP
from matchmaking.domain import Profile
from matchmaking.errors import InvalidArgument
from matchmaking.services.teams import build_teams, rank_candidates, skill_coverage, suggest_teams


def _profile(user_id: str, **fields) -> Profile:
    return Profile.from_mapping({"user_id": user_id, "seeking_teammate": True, **fields})


def _pool(n: int) -> list[Profile]:
    skill_cycle = [["x"], ["y"], ["x", "y"], ["z"], []]
    return [
        _profile(f"c{i:02d}", skills=skill_cycle[i % len(skill_cycle)] + [f"extra{i}"], interests=["ai"] if i % 2 else [])
        for i in range(n)
    ]


def test_large_pool_is_capped_and_sorted():
    requester = _profile("me", skills=["x"], interests=["ai"])
    teams = suggest_teams(requester, _pool(25), ["x", "y"], team_size=3)

    assert 0 < len(teams) <= TEAM_COMBINATION_CAP
    scores = [t.team_score for t in teams]
    assert scores == sorted(scores, reverse=True)
    assert all(len(t.members) == 2 for t in teams)


def test_empty_required_skills_yield_zero_coverage():
    requester = _profile("me", skills=["x"])
    teams = suggest_teams(requester, _pool(8), [], team_size=3)
    assert teams
    assert all(t.skill_coverage == 0 for t in teams)


def test_coverage_stays_within_unit_interval():
    requester = _profile("me")
    for size in (1, 2, 3, 4):
        for t in suggest_teams(requester, _pool(12), ["x", "y", "X", "nobody-has-this"], team_size=size):
            assert 0.0 <= t.skill_coverage <= 1.0


def test_team_size_one_and_two_return_ranked_singletons():
    requester = _profile("me", skills=["python"])
    pool = [
        _profile("a", skills=["go"]),
        _profile("b", skills=["python", "go"]),
        _profile("c", skills=["python"]),
    ]
    for size in (1, 2):
        teams = suggest_teams(requester, pool, ["go"], team_size=size)
        assert [t.members[0].profile.user_id for t in teams] == ["b", "a", "c"]
        assert all(len(t.members) == 1 for t in teams)


def test_team_score_combines_average_compatibility_and_coverage():
    requester = _profile("me", skills=["python"])
    pool = [_profile("a", skills=["python", "x"]), _profile("b", skills=["y"])]
    (team,) = suggest_teams(requester, pool, ["x", "y"], team_size=3)

    compat = {c.profile.user_id: c.compatibility for c in rank_candidates(requester, pool)}
    assert team.total_compatibility == (compat["a"] + compat["b"]) / 2
    assert team.skill_coverage == 1.0
    assert team.team_score == team.total_compatibility + 10


def test_requester_is_never_a_member():
    requester = _profile("me", skills=["x"])
    teams = suggest_teams(requester, [requester] + _pool(4), ["x"], team_size=2)
    assert all(m.profile.user_id != "me" for t in teams for m in t.members)


def test_candidate_window_respects_pool_cap():
    requester = _profile("me")
    teams = suggest_teams(requester, _pool(30), ["x"], team_size=1, pool_cap=4, combination_cap=50)
    assert len(teams) == 4


def test_ties_prefer_higher_coverage_then_generation_order():
    requester = _profile("me")
    pool = [_profile("a"), _profile("b"), _profile("c", skills=["x"]), _profile("d")]
    teams = suggest_teams(requester, pool, ["x"], team_size=3)
    # c ranks first individually, so its pairs lead; equal scores keep generation order.
    assert [sorted(m.profile.user_id for m in t.members) for t in teams[:3]] == [["a", "c"], ["b", "c"], ["c", "d"]]


def test_skill_coverage_helper():
    members = [_profile("a", skills=["X"]), _profile("b", skills=["y"])]
    assert skill_coverage(members, ("x", "y", "z")) == pytest.approx(2 / 3)
    assert skill_coverage(members, ()) == 0.0


def test_invalid_team_size():
    with pytest.raises(InvalidArgument):
        suggest_teams(_profile("me"), [], [], team_size=0)


def test_build_teams_from_ranking_matches_suggest_teams():
    requester = _profile("me", skills=["x"], interests=["ai"])
    pool = _pool(10)
    ranked = rank_candidates(requester, pool, ["x", "y"])

    built = [t.to_dict() for t in build_teams(ranked, ["x", "y"], team_size=3)]
    direct = [t.to_dict() for t in suggest_teams(requester, pool, ["x", "y"], team_size=3)]
    assert built == direct
