from __future__ import annotations

import json
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable

from ..domain import MatchRecord, MatchType, PairKey, Profile, SwipeRecord
from .stores import CANDIDATE_SEEKING


class InMemoryProfileAccessor:
    def __init__(self, profiles: Iterable[Profile | dict[str, Any]] = ()) -> None:
        self._profiles: dict[str, Profile] = {}
        for p in profiles:
            self.put(p)

    def put(self, profile: Profile | dict[str, Any]) -> Profile:
        if isinstance(profile, dict):
            profile = Profile.from_mapping(profile)
        self._profiles[profile.user_id] = profile
        return profile

    def get_profile(self, user_id: str) -> Profile | None:
        return self._profiles.get(user_id)

    def list_candidates(self, match_type: MatchType, exclude_ids: Iterable[str] = (), limit: int = 50) -> list[Profile]:
        wanted = CANDIDATE_SEEKING[match_type]
        excluded = set(exclude_ids)
        out = [p for p in self._profiles.values() if p.user_id not in excluded and p.is_seeking(wanted)]
        return out[: max(0, limit)]


def load_profiles(path: str | Path) -> list[Profile]:
    """Read a JSON array of profile objects, as used to seed the memory backend."""
    with Path(path).open("r", encoding="utf-8") as f:
        rows = json.load(f)
    if not isinstance(rows, list):
        raise ValueError(f"{path}: expected a JSON array of profiles")
    return [Profile.from_mapping(row) for row in rows]


class InMemorySwipeLedger:
    def __init__(self) -> None:
        self._swipes: list[SwipeRecord] = []
        self._lock = threading.Lock()

    def append_swipe(self, swipe: SwipeRecord) -> str:
        with self._lock:
            self._swipes.append(swipe)
        return swipe.id

    def find_swipe(self, actor_id: str, target_id: str, match_type: MatchType) -> SwipeRecord | None:
        with self._lock:
            snapshot = list(self._swipes)
        for swipe in reversed(snapshot):
            if swipe.actor_id == actor_id and swipe.target_id == target_id and swipe.match_type == match_type:
                return swipe
        return None

    def swiped_target_ids(self, actor_id: str) -> set[str]:
        with self._lock:
            return {s.target_id for s in self._swipes if s.actor_id == actor_id}

    def history(self) -> list[SwipeRecord]:
        with self._lock:
            return list(self._swipes)


class InMemoryMatchStore:
    """Match store whose create-if-absent is a test-and-set under one lock."""

    def __init__(self) -> None:
        self._matches: dict[PairKey, MatchRecord] = {}
        self._lock = threading.Lock()

    def create_match_if_absent(self, key: PairKey, payload: MatchRecord) -> tuple[bool, MatchRecord]:
        with self._lock:
            existing = self._matches.get(key)
            if existing is not None:
                return False, existing
            match = replace(payload, key=key)
            self._matches[key] = match
            return True, match

    def get_match(self, key: PairKey) -> MatchRecord | None:
        with self._lock:
            return self._matches.get(key)

    def list_matches_for_user(self, user_id: str) -> list[MatchRecord]:
        with self._lock:
            rows = [m for m in self._matches.values() if user_id in (m.user_a_id, m.user_b_id)]
        return sorted(rows, key=lambda m: m.created_at, reverse=True)

    def count(self) -> int:
        with self._lock:
            return len(self._matches)
