from typing import Any

from fastapi import APIRouter, Depends

from ..config import RL_SWIPE_LIMIT, RL_WINDOW_SECONDS, TEAM_SUGGESTION_LIMIT
from ..deps import get_matchmaking_service, require_actor_id
from ..schemas import (
    MatchListResponse,
    PotentialMatchesResponse,
    ScoreRequest,
    ScoreResponse,
    SwipeRequest,
    SwipeResponse,
    TeamSuggestionsRequest,
    TeamSuggestionsResponse,
)
from ..services.matchmaking import MatchmakingService
from ..services.rate_limit import rate_limit_dependency

router = APIRouter()
scaffold_router = APIRouter()

RL_SWIPE = rate_limit_dependency("swipe", RL_SWIPE_LIMIT, RL_WINDOW_SECONDS)


@scaffold_router.get("/health")
def matchmaking_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "matchmaking"}


@router.post("/matchmaking/score", response_model=ScoreResponse)
def calculate_compatibility_score(
    payload: ScoreRequest,
    actor_id: str = Depends(require_actor_id),
    service: MatchmakingService = Depends(get_matchmaking_service),
) -> dict[str, Any]:
    return service.score(actor_id, payload.target_user_id, payload.match_type)


@router.post("/matchmaking/teams", response_model=TeamSuggestionsResponse)
def generate_team_suggestions(
    payload: TeamSuggestionsRequest,
    limit: int = TEAM_SUGGESTION_LIMIT,
    actor_id: str = Depends(require_actor_id),
    service: MatchmakingService = Depends(get_matchmaking_service),
) -> dict[str, Any]:
    return service.suggest_teams(
        actor_id,
        payload.required_skills,
        payload.team_size,
        project_type=payload.project_type,
        limit=limit,
    )


@router.post("/matchmaking/swipes", response_model=SwipeResponse)
def record_swipe(
    payload: SwipeRequest,
    actor_id: str = Depends(require_actor_id),
    service: MatchmakingService = Depends(get_matchmaking_service),
    _: None = RL_SWIPE,
) -> dict[str, Any]:
    result = service.record_swipe(actor_id, payload.target_user_id, payload.action, payload.match_type)
    return {"success": True, **result.to_dict()}


@router.get("/matchmaking/potential", response_model=PotentialMatchesResponse)
def get_potential_matches(
    match_type: str,
    limit: int = 10,
    actor_id: str = Depends(require_actor_id),
    service: MatchmakingService = Depends(get_matchmaking_service),
) -> dict[str, Any]:
    return service.potential_matches(actor_id, match_type, limit=limit)


@router.get("/matchmaking/matches", response_model=MatchListResponse)
def list_my_matches(
    actor_id: str = Depends(require_actor_id),
    service: MatchmakingService = Depends(get_matchmaking_service),
) -> dict[str, Any]:
    return service.list_matches(actor_id)
