import pytest

from matchmaking.errors import InvalidArgument, NotFound
from matchmaking.services.matchmaking import MatchmakingService
from matchmaking.services.memory_store import InMemoryMatchStore, InMemoryProfileAccessor, InMemorySwipeLedger


class RecordingNotifier:
    def __init__(self):
        self.events = []

    def notify_match_created(self, event):
        self.events.append(event)


def _service() -> MatchmakingService:
    profiles = InMemoryProfileAccessor(
        [
            {"user_id": "me", "skills": ["python", "ml"], "interests": ["ai"], "role": "student", "seeking_mentor": True},
            {"user_id": "t1", "skills": ["python"], "interests": ["ai"], "seeking_teammate": True},
            {"user_id": "t2", "skills": ["design", "ml"], "seeking_teammate": True},
            {"user_id": "t3", "skills": ["go"], "seeking_teammate": True},
            {"user_id": "m1", "role": "professional", "interests": ["ai", "music"], "seeking_mentee": True},
            {"user_id": "m2", "role": "organizer", "seeking_mentee": True},
            {"user_id": "m3", "role": "student", "seeking_mentor": True},
        ]
    )
    return MatchmakingService(profiles, InMemorySwipeLedger(), InMemoryMatchStore(), RecordingNotifier())


def test_score_returns_total_and_breakdown():
    out = _service().score("me", "t1", "teammate")
    assert out["match_type"] == "teammate"
    assert out["compatibility_score"] == 15
    assert out["breakdown"]["skills"]["common"] == ["python"]


def test_score_errors():
    svc = _service()
    with pytest.raises(NotFound):
        svc.score("me", "ghost", "teammate")
    with pytest.raises(InvalidArgument):
        svc.score("me", "t1", "buddy")
    with pytest.raises(InvalidArgument):
        svc.score("me", "", "teammate")


def test_suggest_teams_uses_teammate_seekers_only():
    out = _service().suggest_teams("me", ["ml", "go"], team_size=3, project_type="hackathon")

    member_ids = {m["id"] for t in out["team_suggestions"] for m in t["members"]}
    assert member_ids <= {"t1", "t2", "t3"}
    assert [c["id"] for c in out["individual_suggestions"]][0] in {"t1", "t2"}
    assert out["project_type"] == "hackathon"
    assert out["required_skills"] == ["ml", "go"]
    assert all(0 <= t["skill_coverage"] <= 1 for t in out["team_suggestions"])


def test_suggest_teams_rejects_bad_team_size():
    with pytest.raises(InvalidArgument):
        _service().suggest_teams("me", [], team_size=0)


def test_potential_matches_filters_by_seeking_flag_and_skips_swiped():
    svc = _service()
    svc.record_swipe("me", "m2", "pass", "mentor")

    out = svc.potential_matches("me", "mentor", limit=5)

    ids = [row["id"] for row in out["matches"]]
    assert ids == ["m1"]
    row = out["matches"][0]
    assert row["common_interests"] == ["ai"]
    assert row["icebreakers"][0] == "You both are interested in ai!"
    assert row["reason_for_match"].startswith("Good potential") or row["reason_for_match"].startswith("Great match")


def test_list_matches_reports_the_other_party():
    svc = _service()
    svc.record_swipe("me", "m1", "like", "mentor")
    svc.record_swipe("m1", "me", "like", "mentor")

    out = svc.list_matches("m1")
    assert len(out["matches"]) == 1
    assert out["matches"][0]["matched_user_id"] == "me"
    assert out["matches"][0]["match_type"] == "mentor"


def test_suggest_teams_scores_each_candidate_once(monkeypatch):
    import matchmaking.services.teams as teams

    calls = []
    real = teams.compute_compatibility

    def counting(requester, candidate, match_type, cfg=None):
        calls.append(candidate.user_id)
        return real(requester, candidate, match_type, cfg=cfg)

    monkeypatch.setattr(teams, "compute_compatibility", counting)
    _service().suggest_teams("me", ["ml"], team_size=3)
    assert sorted(calls) == ["t1", "t2", "t3"]


@pytest.mark.parametrize("cfg", [{"MAX_POSSIBLE_SCORE": 0}, {"SKILL_W": "heavy"}, {"INTEREST_W": -1}, {"GOAL_W": 2.5}])
def test_bad_scoring_overrides_are_rejected_up_front(cfg):
    profiles = InMemoryProfileAccessor()
    with pytest.raises(ValueError):
        MatchmakingService(profiles, InMemorySwipeLedger(), InMemoryMatchStore(), RecordingNotifier(), cfg=cfg)
