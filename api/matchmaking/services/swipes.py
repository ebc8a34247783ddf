from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from ..domain import (
    MatchCreatedEvent,
    MatchRecord,
    MatchType,
    PairKey,
    Profile,
    SwipeKind,
    SwipeRecord,
    canonical_key,
)
from ..errors import InvalidArgument, NotFound
from .icebreakers import generate_icebreakers
from .scoring import compute_compatibility
from .state_machine import pair_state
from .stores import MatchNotifier, MatchStore, ProfileAccessor, SwipeLedger

logger = logging.getLogger(__name__)

MATCHED_STATUS = "matched"


@dataclass
class SwipeResult:
    swipe_id: str
    matched: bool
    match_id: str | None
    state: str

    def to_dict(self) -> dict[str, Any]:
        return {"swipe_id": self.swipe_id, "matched": self.matched, "match_id": self.match_id, "state": self.state}


def _require_id(value: Any, field_name: str) -> str:
    v = str(value or "").strip()
    if not v:
        raise InvalidArgument(f"{field_name} is required")
    return v


def validate_swipe(actor_id: Any, target_id: Any, action: Any, match_type: Any) -> tuple[str, str, SwipeKind, MatchType]:
    actor = _require_id(actor_id, "actor_id")
    target = _require_id(target_id, "target_user_id")
    if actor == target:
        raise InvalidArgument("cannot swipe on yourself")
    return actor, target, SwipeKind.parse(action), MatchType.parse(match_type)


def build_match_payload(key: PairKey, profile_a: Profile, profile_b: Profile, cfg: dict[str, Any] | None = None) -> MatchRecord:
    # Directional types are scored from the lower canonical id's side so every racer builds the same row.
    score = compute_compatibility(profile_a, profile_b, key.match_type, cfg=cfg)
    return MatchRecord(
        id=str(uuid.uuid4()),
        key=key,
        status=MATCHED_STATUS,
        score_total=score.total,
        score_breakdown=score.breakdown,
        icebreakers=tuple(generate_icebreakers(profile_a, profile_b, key.match_type)),
        created_at=datetime.now(timezone.utc),
    )


class MatchResolver:
    """Records swipes and turns reciprocal likes into exactly one match per pair and match type.

    The swipe is appended before the reciprocal lookup, so of two racing reciprocal swipes at
    least one sees the other. The match store's create-if-absent then decides the single winner;
    the loser reports the winner's match as its own result. A created event the notifier rejected
    is retried by the next swipe that lands on the matched pair.
    """

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
        self.notifier = notifier
        self.cfg = cfg or {}
        # Matches whose created event has not reached the notifier yet.
        self._undelivered: set[str] = set()
        self._delivery_lock = threading.Lock()

    def _profile(self, user_id: str) -> Profile:
        profile = self.profiles.get_profile(user_id)
        if profile is None:
            raise NotFound(f"profile {user_id} not found")
        return profile

    def record_swipe(self, actor_id: Any, target_id: Any, action: Any, match_type: Any) -> SwipeResult:
        actor, target, kind, mt = validate_swipe(actor_id, target_id, action, match_type)
        actor_profile = self._profile(actor)
        target_profile = self._profile(target)

        swipe = SwipeRecord(actor_id=actor, target_id=target, action=kind, match_type=mt)
        swipe_id = self.ledger.append_swipe(swipe)
        key = canonical_key(actor, target, mt)

        reciprocal = self.ledger.find_swipe(target, actor, mt)
        reciprocal_kind = reciprocal.action if reciprocal else None

        if kind.is_positive and reciprocal_kind is not None and reciprocal_kind.is_positive:
            match = self._commit_match(key, {actor: actor_profile, target: target_profile})
            return SwipeResult(swipe_id=swipe_id, matched=True, match_id=match.id, state=pair_state(kind, reciprocal_kind, True))

        existing = self.matches.get_match(key)
        if existing is not None:
            logger.info("[SWIPE] actor=%s target=%s match_type=%s after terminal match %s", actor, target, mt.value, existing.id)
            self._redeliver(existing)
            return SwipeResult(swipe_id=swipe_id, matched=True, match_id=existing.id, state=pair_state(kind, reciprocal_kind, True))

        return SwipeResult(swipe_id=swipe_id, matched=False, match_id=None, state=self._state(actor, target, kind, reciprocal_kind))

    @staticmethod
    def _state(actor: str, target: str, kind: SwipeKind, reciprocal_kind: SwipeKind | None) -> str:
        # State names are relative to the canonical ordering: "a" is the lower id.
        if actor < target:
            return pair_state(kind, reciprocal_kind)
        return pair_state(reciprocal_kind, kind)

    def _commit_match(self, key: PairKey, profiles: dict[str, Profile]) -> MatchRecord:
        payload = build_match_payload(key, profiles[key.user_a_id], profiles[key.user_b_id], cfg=self.cfg)
        created, match = self.matches.create_match_if_absent(key, payload)
        if not created:
            logger.info("[MATCH] key=%s already matched as %s", key.as_string(), match.id)
            self._redeliver(match)
            return match

        logger.info("[MATCH] key=%s created %s score=%s", key.as_string(), match.id, match.score_total)
        self._deliver(match)
        return match

    def _deliver(self, match: MatchRecord) -> None:
        try:
            self.notifier.notify_match_created(MatchCreatedEvent.from_match(match))
        except Exception:
            # The match is committed; the event stays pending until a later swipe on the pair.
            logger.exception("[MATCH] notifier failed for match_id=%s", match.id)
            with self._delivery_lock:
                self._undelivered.add(match.id)

    def _redeliver(self, match: MatchRecord) -> None:
        with self._delivery_lock:
            if match.id not in self._undelivered:
                return
            self._undelivered.discard(match.id)
        logger.info("[MATCH] retrying created event for match_id=%s", match.id)
        self._deliver(match)

    def pending_deliveries(self) -> set[str]:
        with self._delivery_lock:
            return set(self._undelivered)
