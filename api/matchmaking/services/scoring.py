from __future__ import annotations

import math
from typing import Any

from ..config import DEFAULT_SCORING_CONFIG
from ..domain import CompatibilityScore, MatchType, Profile, Role, iter_common
from ..errors import InvalidArgument

# student < professional < organizer; roles outside the ladder rank with students.
ROLE_RANK: dict[Role, int] = {
    Role.STUDENT: 0,
    Role.PROFESSIONAL: 1,
    Role.ORGANIZER: 2,
}

# Sparse and keyed by ordered pair, so lookups try both orders.
PERSONALITY_MATRIX: dict[str, dict[str, int]] = {
    "ENTJ": {"INTP": 20, "INTJ": 15, "ENTP": 15},
    "INTJ": {"ENFP": 20, "ENTP": 15, "ENTJ": 15},
    "ENFP": {"INTJ": 20, "INFJ": 15, "ENFJ": 15},
    "INFJ": {"ENFP": 20, "ENTP": 15, "ENFJ": 15},
}


def _pair_scores(matrix: dict[str, dict[str, int]]) -> dict[frozenset[str], int]:
    # ENFP->INFJ and INFJ->ENFP disagree in the matrix; the higher entry wins for both orders.
    out: dict[frozenset[str], int] = {}
    for first, row in matrix.items():
        for second, value in row.items():
            key = frozenset((first, second))
            out[key] = max(value, out.get(key, 0))
    return out


_PAIR_SCORES = _pair_scores(PERSONALITY_MATRIX)


def _w(cfg: dict[str, Any], key: str) -> int:
    return int(cfg.get(key, DEFAULT_SCORING_CONFIG[key]))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _role_rank(role: Role | None) -> int:
    if role is None:
        return 0
    return ROLE_RANK.get(role, 0)


def experience_gap(requester: Profile, candidate: Profile) -> int:
    """Positive when the candidate sits above the requester on the role ladder."""
    return _role_rank(candidate.role) - _role_rank(requester.role)


def personality_compatibility(type_a: str, type_b: str, cfg: dict[str, Any] | None = None) -> int:
    cfg = cfg or {}
    a, b = type_a.upper(), type_b.upper()
    if a == b:
        return _w(cfg, "SAME_PERSONALITY_BONUS")
    found = _PAIR_SCORES.get(frozenset((a, b)))
    if found is not None:
        return found
    return _w(cfg, "DEFAULT_PERSONALITY_BONUS")


def normalize_total(raw: float, cfg: dict[str, Any] | None = None) -> int:
    cfg = cfg or {}
    max_possible = _w(cfg, "MAX_POSSIBLE_SCORE")
    scaled = min(100.0, (raw / max_possible) * 100.0)
    return max(0, min(100, _round_half_up(scaled)))


def compute_compatibility(
    requester: Profile | None,
    candidate: Profile | None,
    match_type: MatchType | str,
    cfg: dict[str, Any] | None = None,
) -> CompatibilityScore:
    """Score ``candidate`` from ``requester``'s point of view on a 0-100 scale.

    Every factor contributes a non-negative amount, so adding shared items never lowers the total.
    The mentor and mentee role factors are directional; all other factors are symmetric.
    """
    if requester is None or candidate is None:
        raise InvalidArgument("both profiles are required for scoring")
    match_type = MatchType.parse(match_type)
    cfg = cfg or {}

    raw = 0
    breakdown: dict[str, dict[str, Any]] = {}
    collab = match_type in (MatchType.TEAMMATE, MatchType.COFOUNDER)

    common_skills = iter_common(requester.skills, candidate.skills)
    skill_score = len(common_skills) * _w(cfg, "SKILL_W_COLLAB" if collab else "SKILL_W")
    raw += skill_score
    breakdown["skills"] = {"score": skill_score, "overlap": len(common_skills), "common": common_skills}

    common_interests = iter_common(requester.interests, candidate.interests)
    interest_score = len(common_interests) * _w(cfg, "INTEREST_W")
    raw += interest_score
    breakdown["interests"] = {"score": interest_score, "overlap": len(common_interests), "common": common_interests}

    if requester.goals is not None and candidate.goals is not None:
        common_goals = iter_common(requester.goals, candidate.goals)
        goal_score = len(common_goals) * _w(
            cfg, "GOAL_W_COFOUNDER" if match_type == MatchType.COFOUNDER else "GOAL_W"
        )
        raw += goal_score
        breakdown["goals"] = {"score": goal_score, "overlap": len(common_goals), "common": common_goals}

    if match_type.directional:
        gap = experience_gap(requester, candidate)
        # A mentor must outrank the requester; a mentee must rank below.
        qualifies = gap > 0 if match_type == MatchType.MENTOR else gap < 0
        mentorship_score = _w(cfg, "MENTORSHIP_BONUS") if qualifies else 0
        raw += mentorship_score
        breakdown["mentorship"] = {"score": mentorship_score, "experience_gap": gap}
    else:
        same_role = requester.role is not None and requester.role == candidate.role
        role_score = _w(cfg, "SAME_ROLE_BONUS") if same_role else 0
        raw += role_score
        breakdown["role"] = {"score": role_score, "match": same_role}

    if requester.location and candidate.location:
        same_location = requester.location == candidate.location
        location_score = _w(cfg, "SAME_LOCATION_BONUS" if same_location else "ANY_LOCATION_BONUS")
        raw += location_score
        breakdown["location"] = {"score": location_score, "same_location": same_location}

    affiliation_score = 0
    affiliation = None
    if requester.company and candidate.company and requester.company == candidate.company:
        affiliation_score = _w(cfg, "SAME_COMPANY_BONUS")
        affiliation = "company"
    elif requester.college and candidate.college and requester.college == candidate.college:
        affiliation_score = _w(cfg, "SAME_COLLEGE_BONUS")
        affiliation = "college"
    raw += affiliation_score
    breakdown["affiliation"] = {"score": affiliation_score, "shared": affiliation}

    if requester.personality_type and candidate.personality_type:
        personality_score = personality_compatibility(requester.personality_type, candidate.personality_type, cfg)
        raw += personality_score
        breakdown["personality"] = {
            "score": personality_score,
            "types": [requester.personality_type, candidate.personality_type],
        }

    if requester.work_style and candidate.work_style:
        same_style = requester.work_style == candidate.work_style
        work_style_score = _w(cfg, "SAME_WORK_STYLE_BONUS" if same_style else "ANY_WORK_STYLE_BONUS")
        raw += work_style_score
        breakdown["work_style"] = {"score": work_style_score, "same_style": same_style}

    return CompatibilityScore(total=normalize_total(raw, cfg), breakdown=breakdown, match_type=match_type)
