import json
import os
from typing import Any

DATABASE_URL = os.getenv("DATABASE_URL", "postgresql+psycopg2://postgres:postgres@db:5432/eventra_matchmaking")
STORE_BACKEND = os.getenv("STORE_BACKEND", "sql").strip().lower()
MEMORY_PROFILES_PATH = os.getenv("MEMORY_PROFILES_PATH", "").strip()

DEFAULT_SCORING_CONFIG: dict[str, Any] = {
    "SKILL_W_COLLAB": int(os.getenv("SKILL_W_COLLAB", "15")),
    "SKILL_W": int(os.getenv("SKILL_W", "10")),
    "INTEREST_W": int(os.getenv("INTEREST_W", "8")),
    "GOAL_W_COFOUNDER": int(os.getenv("GOAL_W_COFOUNDER", "20")),
    "GOAL_W": int(os.getenv("GOAL_W", "10")),
    "MENTORSHIP_BONUS": int(os.getenv("MENTORSHIP_BONUS", "25")),
    "SAME_ROLE_BONUS": int(os.getenv("SAME_ROLE_BONUS", "15")),
    "SAME_LOCATION_BONUS": int(os.getenv("SAME_LOCATION_BONUS", "10")),
    "ANY_LOCATION_BONUS": int(os.getenv("ANY_LOCATION_BONUS", "5")),
    "SAME_COMPANY_BONUS": int(os.getenv("SAME_COMPANY_BONUS", "15")),
    "SAME_COLLEGE_BONUS": int(os.getenv("SAME_COLLEGE_BONUS", "10")),
    "SAME_PERSONALITY_BONUS": int(os.getenv("SAME_PERSONALITY_BONUS", "10")),
    "DEFAULT_PERSONALITY_BONUS": int(os.getenv("DEFAULT_PERSONALITY_BONUS", "5")),
    "SAME_WORK_STYLE_BONUS": int(os.getenv("SAME_WORK_STYLE_BONUS", "10")),
    "ANY_WORK_STYLE_BONUS": int(os.getenv("ANY_WORK_STYLE_BONUS", "5")),
    "MAX_POSSIBLE_SCORE": int(os.getenv("MAX_POSSIBLE_SCORE", "150")),
}

if os.getenv("SCORING_CONFIG_JSON"):
    try:
        DEFAULT_SCORING_CONFIG.update(json.loads(os.getenv("SCORING_CONFIG_JSON", "{}")))
    except json.JSONDecodeError:
        pass


def validate_scoring_config(cfg: dict[str, Any]) -> dict[str, int]:
    """Coerce weights to non-negative ints and require a positive ``MAX_POSSIBLE_SCORE``."""
    out: dict[str, int] = {}
    for key, value in cfg.items():
        bad_type = isinstance(value, bool) or (isinstance(value, float) and not value.is_integer())
        try:
            number = int(value)
        except (TypeError, ValueError, OverflowError):
            bad_type = True
        if bad_type:
            raise ValueError(f"scoring weight {key} must be an integer, got {value!r}")
        if number < 0:
            raise ValueError(f"scoring weight {key} must not be negative")
        out[key] = number
    if "MAX_POSSIBLE_SCORE" in out and out["MAX_POSSIBLE_SCORE"] <= 0:
        raise ValueError("MAX_POSSIBLE_SCORE must be positive")
    return out


DEFAULT_SCORING_CONFIG = validate_scoring_config(DEFAULT_SCORING_CONFIG)

TEAM_CANDIDATE_POOL_CAP = int(os.getenv("TEAM_CANDIDATE_POOL_CAP", "20"))
TEAM_COMBINATION_CAP = int(os.getenv("TEAM_COMBINATION_CAP", "20"))
TEAM_SUGGESTION_LIMIT = int(os.getenv("TEAM_SUGGESTION_LIMIT", "5"))
INDIVIDUAL_SUGGESTION_LIMIT = int(os.getenv("INDIVIDUAL_SUGGESTION_LIMIT", "10"))
CANDIDATE_FETCH_LIMIT = int(os.getenv("CANDIDATE_FETCH_LIMIT", "50"))
ICEBREAKER_LIMIT = min(3, max(1, int(os.getenv("ICEBREAKER_LIMIT", "3"))))

RL_SWIPE_LIMIT = int(os.getenv("RL_SWIPE_LIMIT", "120"))
RL_WINDOW_SECONDS = int(os.getenv("RL_WINDOW_SECONDS", "60"))
