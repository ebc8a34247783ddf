from __future__ import annotations

import logging
from typing import Any

from ..config import CANDIDATE_FETCH_LIMIT, INDIVIDUAL_SUGGESTION_LIMIT, TEAM_SUGGESTION_LIMIT, validate_scoring_config
from ..domain import MatchType, Profile, iter_common
from ..errors import InvalidArgument, NotFound
from .icebreakers import generate_icebreakers, match_reason
from .scoring import compute_compatibility
from .stores import MatchNotifier, MatchStore, ProfileAccessor, SwipeLedger
from .swipes import MatchResolver, SwipeResult
from .teams import build_teams, rank_candidates

logger = logging.getLogger(__name__)


class MatchmakingService:
    """Entry point for the public operations. Holds no per-request state."""

    def __init__(
        self,
        profiles: ProfileAccessor,
        ledger: SwipeLedger,
        matches: MatchStore,
        notifier: MatchNotifier,
        cfg: dict[str, Any] | None = None,
    ) -> None:
        self.profiles = profiles
        self.ledger = ledger
        self.matches = matches
        self.cfg = validate_scoring_config(cfg or {})
        self.resolver = MatchResolver(profiles, ledger, matches, notifier, cfg=self.cfg)

    def _profile(self, user_id: str | None, field_name: str = "user_id") -> Profile:
        uid = str(user_id or "").strip()
        if not uid:
            raise InvalidArgument(f"{field_name} is required")
        profile = self.profiles.get_profile(uid)
        if profile is None:
            raise NotFound(f"profile {uid} not found")
        return profile

    def score(self, requester_id: str, target_id: str, match_type: Any) -> dict[str, Any]:
        mt = MatchType.parse(match_type)
        if not str(target_id or "").strip():
            raise InvalidArgument("target_user_id is required")
        requester = self._profile(requester_id, "actor_id")
        target = self._profile(target_id, "target_user_id")
        score = compute_compatibility(requester, target, mt, cfg=self.cfg)
        return {
            "compatibility_score": score.total,
            "breakdown": score.breakdown,
            "match_type": mt.value,
        }

    def suggest_teams(
        self,
        requester_id: str,
        required_skills: list[str] | None,
        team_size: int,
        project_type: str | None = None,
        limit: int = TEAM_SUGGESTION_LIMIT,
    ) -> dict[str, Any]:
        try:
            team_size = int(team_size)
        except (TypeError, ValueError):
            raise InvalidArgument("team_size must be an integer")
        if team_size < 1:
            raise InvalidArgument("team_size must be at least 1")
        requester = self._profile(requester_id, "actor_id")
        pool = self.profiles.list_candidates(MatchType.TEAMMATE, exclude_ids=[requester.user_id], limit=CANDIDATE_FETCH_LIMIT)
        required = list(required_skills or [])

        individuals = rank_candidates(requester, pool, required, cfg=self.cfg)
        teams = build_teams(individuals, required, team_size)
        logger.info("[TEAMS] requester=%s pool=%d teams=%d", requester.user_id, len(pool), len(teams))
        return {
            "individual_suggestions": [c.to_dict() for c in individuals[:INDIVIDUAL_SUGGESTION_LIMIT]],
            "team_suggestions": [t.to_dict() for t in teams[: max(0, limit)]],
            "project_type": project_type,
            "required_skills": required,
        }

    def record_swipe(self, actor_id: str, target_id: str, action: Any, match_type: Any) -> SwipeResult:
        return self.resolver.record_swipe(actor_id, target_id, action, match_type)

    def potential_matches(self, requester_id: str, match_type: Any, limit: int = 10) -> dict[str, Any]:
        mt = MatchType.parse(match_type)
        requester = self._profile(requester_id, "actor_id")
        swiped = self.ledger.swiped_target_ids(requester.user_id)
        pool = self.profiles.list_candidates(mt, exclude_ids=[requester.user_id], limit=max(0, limit) * 3)

        out: list[dict[str, Any]] = []
        for candidate in pool:
            if candidate.user_id == requester.user_id or candidate.user_id in swiped:
                continue
            score = compute_compatibility(requester, candidate, mt, cfg=self.cfg)
            out.append(
                {
                    "id": candidate.user_id,
                    "user": candidate.summary(),
                    "compatibility_score": score.total,
                    "match_type": mt.value,
                    "icebreakers": generate_icebreakers(requester, candidate, mt),
                    "common_interests": iter_common(requester.interests, candidate.interests)[:3],
                    "reason_for_match": match_reason(score),
                }
            )
        out.sort(key=lambda row: -row["compatibility_score"])
        return {"matches": out[: max(0, limit)], "match_type": mt.value}

    def list_matches(self, user_id: str) -> dict[str, Any]:
        uid = str(user_id or "").strip()
        if not uid:
            raise InvalidArgument("actor_id is required")
        rows = self.matches.list_matches_for_user(uid)
        return {"matches": [{**m.to_dict(), "matched_user_id": m.other_user(uid)} for m in rows]}
