from __future__ import annotations

from ..config import ICEBREAKER_LIMIT
from ..domain import CompatibilityScore, MatchType, Profile, iter_common

GENERIC_GREETING = "Start with a friendly hello!"

MATCH_TYPE_TEMPLATES: dict[MatchType, tuple[str, ...]] = {
    MatchType.COFOUNDER: (
        "Discuss your startup ideas and vision",
        "Share your entrepreneurial experience",
    ),
    MatchType.MENTOR: (
        "Ask about their career journey",
        "Seek advice on professional development",
    ),
    MatchType.MENTEE: (
        "Ask what they are hoping to learn this year",
        "Share a lesson from your own career journey",
    ),
    MatchType.TEAMMATE: (
        "Discuss potential collaboration opportunities",
        "Share your project experience",
    ),
}


def _clean_text(line: str) -> str:
    return " ".join(str(line or "").split())


def generate_icebreakers(
    profile_a: Profile,
    profile_b: Profile,
    match_type: MatchType | str,
    limit: int = ICEBREAKER_LIMIT,
) -> list[str]:
    """Conversation starters for a pair: shared skill, shared interest, then match-type prompts.

    Deterministic for the same inputs and never empty.
    """
    match_type = MatchType.parse(match_type)
    prompts: list[str] = []

    common_skills = iter_common(profile_a.skills, profile_b.skills)
    if common_skills:
        prompts.append(f"You both are skilled in {common_skills[0]}!")

    common_interests = iter_common(profile_a.interests, profile_b.interests)
    if common_interests:
        prompts.append(f"You both are interested in {common_interests[0]}!")

    prompts.extend(MATCH_TYPE_TEMPLATES.get(match_type, ()))

    out = [_clean_text(p) for p in prompts if _clean_text(p)][: max(1, min(3, limit))]
    return out or [GENERIC_GREETING]


def match_reason(score: CompatibilityScore) -> str:
    breakdown = score.breakdown
    reasons: list[str] = []
    if (breakdown.get("skills") or {}).get("score", 0) > 15:
        reasons.append("strong skill alignment")
    if (breakdown.get("interests") or {}).get("score", 0) > 10:
        reasons.append("shared interests")
    if (breakdown.get("goals") or {}).get("score", 0) > 15:
        reasons.append("aligned goals")
    if (breakdown.get("role") or {}).get("match"):
        reasons.append("same professional background")
    if (breakdown.get("location") or {}).get("same_location"):
        reasons.append("same location")

    if reasons:
        return f"Great match based on {', '.join(reasons)}"
    return f"Good potential for {score.match_type.value} collaboration"
