from typing import Any

from pydantic import BaseModel, Field


class ScoreRequest(BaseModel):
    target_user_id: str
    match_type: str


class ScoreResponse(BaseModel):
    compatibility_score: int
    breakdown: dict[str, dict[str, Any]]
    match_type: str


class TeamSuggestionsRequest(BaseModel):
    required_skills: list[str] = Field(default_factory=list)
    team_size: int = 2
    project_type: str | None = None


class TeamSuggestionsResponse(BaseModel):
    individual_suggestions: list[dict[str, Any]]
    team_suggestions: list[dict[str, Any]]
    project_type: str | None = None
    required_skills: list[str]


class SwipeRequest(BaseModel):
    target_user_id: str
    action: str
    match_type: str


class SwipeResponse(BaseModel):
    success: bool = True
    swipe_id: str
    matched: bool
    match_id: str | None = None
    state: str


class PotentialMatchesResponse(BaseModel):
    matches: list[dict[str, Any]]
    match_type: str


class MatchListResponse(BaseModel):
    matches: list[dict[str, Any]]
