from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from ..config import TEAM_CANDIDATE_POOL_CAP, TEAM_COMBINATION_CAP
from ..domain import MatchType, Profile, iter_common, normalize_items
from ..errors import InvalidArgument
from .scoring import compute_compatibility

logger = logging.getLogger(__name__)


@dataclass
class RankedCandidate:
    profile: Profile
    compatibility: int
    skill_match: int

    @property
    def rank_score(self) -> int:
        return self.compatibility + 10 * self.skill_match

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.profile.summary(),
            "compatibility": self.compatibility,
            "skill_match": self.skill_match,
        }


@dataclass
class TeamSuggestion:
    members: list[RankedCandidate] = field(default_factory=list)
    total_compatibility: float = 0.0
    skill_coverage: float = 0.0
    team_score: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "members": [m.to_dict() for m in self.members],
            "total_compatibility": round(self.total_compatibility, 4),
            "skill_coverage": round(self.skill_coverage, 4),
            "team_score": round(self.team_score, 4),
        }


def skill_coverage(members: Iterable[Profile], required_skills: tuple[str, ...]) -> float:
    if not required_skills:
        return 0.0
    team_skills: set[str] = set()
    for member in members:
        team_skills.update(member.skills)
    covered = [skill for skill in required_skills if skill in team_skills]
    return len(covered) / len(required_skills)


def rank_candidates(
    requester: Profile,
    pool: Iterable[Profile],
    required_skills: Iterable[str] = (),
    cfg: dict[str, Any] | None = None,
) -> list[RankedCandidate]:
    required = normalize_items(list(required_skills))
    ranked: list[RankedCandidate] = []
    for candidate in pool:
        if candidate.user_id == requester.user_id:
            continue
        score = compute_compatibility(requester, candidate, MatchType.TEAMMATE, cfg=cfg)
        ranked.append(
            RankedCandidate(
                profile=candidate,
                compatibility=score.total,
                skill_match=len(iter_common(candidate.skills, required)),
            )
        )
    # sorted() is stable, so equal rank scores keep pool order.
    return sorted(ranked, key=lambda c: -c.rank_score)


def _build_team(members: list[RankedCandidate], required: tuple[str, ...]) -> TeamSuggestion:
    avg = sum(m.compatibility for m in members) / len(members)
    coverage = skill_coverage((m.profile for m in members), required)
    return TeamSuggestion(
        members=members,
        total_compatibility=avg,
        skill_coverage=coverage,
        team_score=avg + 10 * coverage,
    )


def _team_size(team_size: Any) -> int:
    try:
        team_size = int(team_size)
    except (TypeError, ValueError):
        raise InvalidArgument("team_size must be an integer")
    if team_size < 1:
        raise InvalidArgument("team_size must be at least 1")
    return team_size


def build_teams(
    ranked: list[RankedCandidate],
    required_skills: Iterable[str] | None,
    team_size: int,
    *,
    pool_cap: int = TEAM_CANDIDATE_POOL_CAP,
    combination_cap: int = TEAM_COMBINATION_CAP,
) -> list[TeamSuggestion]:
    """Assemble teams from an already ranked candidate list (see ``rank_candidates``)."""
    team_size = _team_size(team_size)
    required = normalize_items(list(required_skills or []))
    window = ranked[: max(0, pool_cap)]
    members_needed = max(1, team_size - 1)

    if members_needed == 1:
        # Singletons keep the individual ranking order.
        return [_build_team([c], required) for c in window[: max(0, combination_cap)]]

    teams: list[TeamSuggestion] = []
    for combo in itertools.combinations(window, members_needed):
        if len(teams) >= combination_cap:
            break
        teams.append(_build_team(list(combo), required))

    teams.sort(key=lambda t: (-t.team_score, -t.skill_coverage))
    logger.debug("[TEAMS] window=%d members_needed=%d generated=%d", len(window), members_needed, len(teams))
    return teams


def suggest_teams(
    requester: Profile,
    candidate_pool: Iterable[Profile],
    required_skills: Iterable[str] | None,
    team_size: int,
    *,
    pool_cap: int = TEAM_CANDIDATE_POOL_CAP,
    combination_cap: int = TEAM_COMBINATION_CAP,
    cfg: dict[str, Any] | None = None,
) -> list[TeamSuggestion]:
    """Rank candidate teams for ``requester``, who is an implicit member of every team.

    ``team_size`` counts the requester, so each suggestion has ``team_size - 1`` members (at
    least one). Only the top ``pool_cap`` individuals are considered and at most
    ``combination_cap`` combinations are generated, whatever the size of the pool.
    """
    if requester is None:
        raise InvalidArgument("requester profile is required")
    team_size = _team_size(team_size)
    ranked = rank_candidates(requester, candidate_pool, required_skills or (), cfg=cfg)
    return build_teams(ranked, required_skills, team_size, pool_cap=pool_cap, combination_cap=combination_cap)
