from __future__ import annotations

from typing import Iterable, Protocol

from ..domain import MatchCreatedEvent, MatchRecord, MatchType, PairKey, Profile, SwipeRecord

# Requesting a given match type lists people seeking the complementary relationship.
CANDIDATE_SEEKING: dict[MatchType, MatchType] = {
    MatchType.MENTOR: MatchType.MENTEE,
    MatchType.MENTEE: MatchType.MENTOR,
    MatchType.COFOUNDER: MatchType.COFOUNDER,
    MatchType.TEAMMATE: MatchType.TEAMMATE,
}


class ProfileAccessor(Protocol):
    def get_profile(self, user_id: str) -> Profile | None: ...

    def list_candidates(
        self, match_type: MatchType, exclude_ids: Iterable[str] = (), limit: int = 50
    ) -> list[Profile]: ...


class SwipeLedger(Protocol):
    def append_swipe(self, swipe: SwipeRecord) -> str: ...

    def find_swipe(self, actor_id: str, target_id: str, match_type: MatchType) -> SwipeRecord | None: ...

    def swiped_target_ids(self, actor_id: str) -> set[str]: ...


class MatchStore(Protocol):
    def create_match_if_absent(self, key: PairKey, payload: MatchRecord) -> tuple[bool, MatchRecord]: ...

    def get_match(self, key: PairKey) -> MatchRecord | None: ...

    def list_matches_for_user(self, user_id: str) -> list[MatchRecord]: ...


class MatchNotifier(Protocol):
    def notify_match_created(self, event: MatchCreatedEvent) -> None: ...
