import json
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Iterable

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .database import SessionLocal
from .domain import MatchCreatedEvent, MatchRecord, MatchType, PairKey, Profile, SwipeKind, SwipeRecord
from .errors import StoreUnavailable
from .services.events import log_match_event
from .services.stores import CANDIDATE_SEEKING

logger = logging.getLogger(__name__)

_SEEKING_COLUMNS = {
    MatchType.MENTOR: "seeking_mentor",
    MatchType.MENTEE: "seeking_mentee",
    MatchType.COFOUNDER: "seeking_cofounder",
    MatchType.TEAMMATE: "seeking_teammate",
}


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    parsed = datetime.fromisoformat(str(value))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _json_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        return []
    return parsed if isinstance(parsed, list) else []


def _store_error(operation: str, exc: SQLAlchemyError) -> StoreUnavailable:
    logger.error("[STORE] %s failed: %s", operation, exc.__class__.__name__)
    return StoreUnavailable(f"{operation} failed; retry later")


def _profile_from_row(row: dict[str, Any]) -> Profile:
    data = dict(row)
    data["skills"] = _json_list(row.get("skills"))
    data["interests"] = _json_list(row.get("interests"))
    data["goals"] = _json_list(row.get("goals")) if row.get("goals") is not None else None
    return Profile.from_mapping(data)


class SqlProfileAccessor:
    def __init__(self, session_factory=SessionLocal) -> None:
        self._session_factory = session_factory

    def get_profile(self, user_id: str) -> Profile | None:
        try:
            with self._session_factory() as db:
                row = db.execute(
                    text("SELECT * FROM user_profile WHERE user_id = :user_id"),
                    {"user_id": user_id},
                ).mappings().first()
        except SQLAlchemyError as exc:
            raise _store_error("profile lookup", exc) from exc
        return _profile_from_row(dict(row)) if row else None

    def list_candidates(self, match_type: MatchType, exclude_ids: Iterable[str] = (), limit: int = 50) -> list[Profile]:
        excluded = set(exclude_ids)
        column = _SEEKING_COLUMNS[CANDIDATE_SEEKING[match_type]]
        try:
            with self._session_factory() as db:
                rows = db.execute(
                    text(
                        f"""
                        SELECT *
                        FROM user_profile
                        WHERE {column} = :flag
                        ORDER BY updated_at DESC, user_id
                        LIMIT :limit
                        """
                    ),
                    {"flag": True, "limit": max(0, limit) + len(excluded)},
                ).mappings().all()
        except SQLAlchemyError as exc:
            raise _store_error("candidate listing", exc) from exc
        out = [_profile_from_row(dict(r)) for r in rows if str(r["user_id"]) not in excluded]
        return out[: max(0, limit)]


class SqlSwipeLedger:
    """Append-only swipe history. The newest row per direction is authoritative."""

    def __init__(self, session_factory=SessionLocal) -> None:
        self._session_factory = session_factory

    def append_swipe(self, swipe: SwipeRecord) -> str:
        try:
            with self._session_factory() as db:
                db.execute(
                    text(
                        """
                        INSERT INTO swipe_action (id, actor_id, target_id, action, match_type, created_at)
                        VALUES (:id, :actor_id, :target_id, :action, :match_type, :created_at)
                        """
                    ),
                    {
                        "id": swipe.id,
                        "actor_id": swipe.actor_id,
                        "target_id": swipe.target_id,
                        "action": swipe.action.value,
                        "match_type": swipe.match_type.value,
                        "created_at": swipe.created_at.isoformat(),
                    },
                )
                db.commit()
        except SQLAlchemyError as exc:
            raise _store_error("swipe write", exc) from exc
        return swipe.id

    def find_swipe(self, actor_id: str, target_id: str, match_type: MatchType) -> SwipeRecord | None:
        try:
            with self._session_factory() as db:
                row = db.execute(
                    text(
                        """
                        SELECT id, actor_id, target_id, action, match_type, created_at
                        FROM swipe_action
                        WHERE actor_id = :actor_id
                          AND target_id = :target_id
                          AND match_type = :match_type
                        ORDER BY seq DESC
                        LIMIT 1
                        """
                    ),
                    {"actor_id": actor_id, "target_id": target_id, "match_type": match_type.value},
                ).mappings().first()
        except SQLAlchemyError as exc:
            raise _store_error("swipe lookup", exc) from exc
        if not row:
            return None
        return SwipeRecord(
            id=str(row["id"]),
            actor_id=str(row["actor_id"]),
            target_id=str(row["target_id"]),
            action=SwipeKind(row["action"]),
            match_type=MatchType(row["match_type"]),
            created_at=_as_datetime(row["created_at"]),
        )

    def swiped_target_ids(self, actor_id: str) -> set[str]:
        try:
            with self._session_factory() as db:
                rows = db.execute(
                    text("SELECT DISTINCT target_id FROM swipe_action WHERE actor_id = :actor_id"),
                    {"actor_id": actor_id},
                ).mappings().all()
        except SQLAlchemyError as exc:
            raise _store_error("swipe history", exc) from exc
        return {str(r["target_id"]) for r in rows}


def _match_from_row(row: dict[str, Any]) -> MatchRecord:
    breakdown = row.get("score_breakdown")
    if isinstance(breakdown, str):
        breakdown = json.loads(breakdown or "{}")
    return MatchRecord(
        id=str(row["id"]),
        key=PairKey(
            user_a_id=str(row["user_a_id"]),
            user_b_id=str(row["user_b_id"]),
            match_type=MatchType(row["match_type"]),
        ),
        status=str(row["status"]),
        score_total=int(row["score_total"]),
        score_breakdown=breakdown or {},
        icebreakers=tuple(str(x) for x in _json_list(row.get("icebreakers"))),
        created_at=_as_datetime(row["created_at"]),
    )


class SqlMatchStore:
    """Match rows keyed by (user_a_id, user_b_id, match_type), unique at the database.

    ``create_match_if_absent`` relies on ``ON CONFLICT DO NOTHING`` against that constraint, so
    concurrent writers on separate processes still produce a single row. The winning insert also
    writes the ``match_created`` outbox row in the same transaction.
    """

    def __init__(self, session_factory=SessionLocal) -> None:
        self._session_factory = session_factory

    def _select(self, db, key: PairKey) -> dict[str, Any] | None:
        row = db.execute(
            text(
                """
                SELECT id, user_a_id, user_b_id, match_type, status, score_total, score_breakdown, icebreakers, created_at
                FROM match_record
                WHERE user_a_id = :user_a_id
                  AND user_b_id = :user_b_id
                  AND match_type = :match_type
                """
            ),
            {"user_a_id": key.user_a_id, "user_b_id": key.user_b_id, "match_type": key.match_type.value},
        ).mappings().first()
        return dict(row) if row else None

    def create_match_if_absent(self, key: PairKey, payload: MatchRecord) -> tuple[bool, MatchRecord]:
        try:
            with self._session_factory() as db:
                result = db.execute(
                    text(
                        """
                        INSERT INTO match_record
                        (id, user_a_id, user_b_id, match_type, status, score_total, score_breakdown, icebreakers, created_at)
                        VALUES (:id, :user_a_id, :user_b_id, :match_type, :status, :score_total, :score_breakdown, :icebreakers, :created_at)
                        ON CONFLICT (user_a_id, user_b_id, match_type)
                        DO NOTHING
                        """
                    ),
                    {
                        "id": payload.id,
                        "user_a_id": key.user_a_id,
                        "user_b_id": key.user_b_id,
                        "match_type": key.match_type.value,
                        "status": payload.status,
                        "score_total": payload.score_total,
                        "score_breakdown": json.dumps(payload.score_breakdown),
                        "icebreakers": json.dumps(list(payload.icebreakers)),
                        "created_at": payload.created_at.isoformat(),
                    },
                )
                created = (result.rowcount or 0) == 1
                if created:
                    log_match_event(db, MatchCreatedEvent.from_match(replace(payload, key=key)))
                db.commit()
                row = self._select(db, key)
        except SQLAlchemyError as exc:
            raise _store_error("match commit", exc) from exc
        if row is None:
            raise StoreUnavailable("match commit could not be confirmed; retry later")
        return created, _match_from_row(row)

    def get_match(self, key: PairKey) -> MatchRecord | None:
        try:
            with self._session_factory() as db:
                row = self._select(db, key)
        except SQLAlchemyError as exc:
            raise _store_error("match lookup", exc) from exc
        return _match_from_row(row) if row else None

    def list_matches_for_user(self, user_id: str) -> list[MatchRecord]:
        try:
            with self._session_factory() as db:
                rows = db.execute(
                    text(
                        """
                        SELECT id, user_a_id, user_b_id, match_type, status, score_total, score_breakdown, icebreakers, created_at
                        FROM match_record
                        WHERE user_a_id = :user_id OR user_b_id = :user_id
                        ORDER BY created_at DESC
                        """
                    ),
                    {"user_id": user_id},
                ).mappings().all()
        except SQLAlchemyError as exc:
            raise _store_error("match history", exc) from exc
        return [_match_from_row(dict(r)) for r in rows]


def upsert_profile(db, profile: dict[str, Any]) -> None:
    """Write a profile row. Profile storage belongs to the platform; this exists for seeding and tests."""
    p = Profile.from_mapping(profile)
    db.execute(
        text("DELETE FROM user_profile WHERE user_id = :user_id"),
        {"user_id": p.user_id},
    )
    db.execute(
        text(
            """
            INSERT INTO user_profile
            (user_id, name, role, skills, interests, goals, personality_type, work_style, location, company, college,
             seeking_mentor, seeking_mentee, seeking_cofounder, seeking_teammate, updated_at)
            VALUES
            (:user_id, :name, :role, :skills, :interests, :goals, :personality_type, :work_style, :location, :company, :college,
             :seeking_mentor, :seeking_mentee, :seeking_cofounder, :seeking_teammate, :updated_at)
            """
        ),
        {
            "user_id": p.user_id,
            "name": p.name,
            "role": p.role.value if p.role else None,
            "skills": json.dumps(list(p.skills)),
            "interests": json.dumps(list(p.interests)),
            "goals": json.dumps(list(p.goals)) if p.goals is not None else None,
            "personality_type": p.personality_type,
            "work_style": p.work_style,
            "location": p.location,
            "company": p.company,
            "college": p.college,
            "seeking_mentor": p.is_seeking(MatchType.MENTOR),
            "seeking_mentee": p.is_seeking(MatchType.MENTEE),
            "seeking_cofounder": p.is_seeking(MatchType.COFOUNDER),
            "seeking_teammate": p.is_seeking(MatchType.TEAMMATE),
            "updated_at": _now_utc().isoformat(),
        },
    )
