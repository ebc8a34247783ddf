import logging
from functools import lru_cache

from fastapi import Header, HTTPException

from .config import MEMORY_PROFILES_PATH, STORE_BACKEND
from .database import SessionLocal
from .services.events import LoggingNotifier
from .services.matchmaking import MatchmakingService
from .services.memory_store import InMemoryMatchStore, InMemoryProfileAccessor, InMemorySwipeLedger, load_profiles

logger = logging.getLogger(__name__)


def parse_actor_user_id(raw_actor_user_id: str | None) -> str | None:
    if not raw_actor_user_id:
        return None
    value = raw_actor_user_id.strip()
    return value or None


def require_actor_id(x_actor_user_id: str | None = Header(default=None)) -> str:
    actor_id = parse_actor_user_id(x_actor_user_id)
    if not actor_id:
        raise HTTPException(status_code=400, detail="X-Actor-User-Id header is required")
    return actor_id


def build_service(backend: str = STORE_BACKEND, profiles_path: str = MEMORY_PROFILES_PATH) -> MatchmakingService:
    if backend == "memory":
        seed = load_profiles(profiles_path) if profiles_path else []
        logger.info("[STORE] memory backend seeded with %d profiles", len(seed))
        return MatchmakingService(
            profiles=InMemoryProfileAccessor(seed),
            ledger=InMemorySwipeLedger(),
            matches=InMemoryMatchStore(),
            notifier=LoggingNotifier(),
        )
    if backend != "sql":
        raise ValueError(f"unknown STORE_BACKEND {backend!r}; expected 'sql' or 'memory'")

    from .repo import SqlMatchStore, SqlProfileAccessor, SqlSwipeLedger

    return MatchmakingService(
        profiles=SqlProfileAccessor(SessionLocal),
        ledger=SqlSwipeLedger(SessionLocal),
        matches=SqlMatchStore(SessionLocal),
        notifier=LoggingNotifier(),
    )


@lru_cache(maxsize=1)
def get_matchmaking_service() -> MatchmakingService:
    return build_service()
