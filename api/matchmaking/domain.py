from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable

from .errors import InvalidArgument


class MatchType(str, Enum):
    MENTOR = "mentor"
    MENTEE = "mentee"
    COFOUNDER = "cofounder"
    TEAMMATE = "teammate"

    @property
    def directional(self) -> bool:
        return self in (MatchType.MENTOR, MatchType.MENTEE)

    @classmethod
    def parse(cls, value: Any) -> "MatchType":
        return _parse_enum(cls, value, "match_type")


class SwipeKind(str, Enum):
    LIKE = "like"
    PASS = "pass"
    SUPER_LIKE = "super_like"

    @property
    def is_positive(self) -> bool:
        return self in (SwipeKind.LIKE, SwipeKind.SUPER_LIKE)

    @classmethod
    def parse(cls, value: Any) -> "SwipeKind":
        return _parse_enum(cls, value, "action")


class Role(str, Enum):
    STUDENT = "student"
    PROFESSIONAL = "professional"
    SPEAKER = "speaker"
    ORGANIZER = "organizer"


def _parse_enum(enum_cls, value: Any, field_name: str):
    if isinstance(value, enum_cls):
        return value
    raw = str(value or "").strip().lower()
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidArgument(f"{field_name} must be one of: {allowed}")


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def normalize_items(values: Any) -> tuple[str, ...]:
    """Lowercase, strip and dedupe a list of strings, keeping first-seen order."""
    if not values:
        return ()
    if isinstance(values, str):
        values = [values]
    out: list[str] = []
    for value in values:
        v = str(value or "").strip().lower()
        if v and v not in out:
            out.append(v)
    return tuple(out)


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    v = str(value).strip()
    return v or None


def _role(value: Any) -> Role | None:
    raw = str(value or "").strip().lower()
    try:
        return Role(raw)
    except ValueError:
        return None


@dataclass(frozen=True)
class Profile:
    user_id: str
    skills: tuple[str, ...] = ()
    interests: tuple[str, ...] = ()
    goals: tuple[str, ...] | None = None
    role: Role | None = None
    personality_type: str | None = None
    work_style: str | None = None
    location: str | None = None
    company: str | None = None
    college: str | None = None
    seeking: frozenset[MatchType] = frozenset()
    name: str | None = None

    def is_seeking(self, match_type: MatchType) -> bool:
        return match_type in self.seeking

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "Profile":
        seeking = set()
        for mt in MatchType:
            if data.get(f"seeking_{mt.value}"):
                seeking.add(mt)
        for raw in data.get("looking_for") or []:
            try:
                seeking.add(MatchType(str(raw).strip().lower()))
            except ValueError:
                continue

        goals = data.get("goals")
        personality = _clean(data.get("personality_type"))
        work_style = _clean(data.get("work_style"))
        return cls(
            user_id=str(data["user_id"]),
            skills=normalize_items(data.get("skills")),
            interests=normalize_items(data.get("interests")),
            goals=normalize_items(goals) if goals is not None else None,
            role=_role(data.get("role")),
            personality_type=personality.upper() if personality else None,
            work_style=work_style.lower() if work_style else None,
            location=_clean(data.get("location")),
            company=_clean(data.get("company")),
            college=_clean(data.get("college")),
            seeking=frozenset(seeking),
            name=_clean(data.get("name")),
        )

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.user_id,
            "name": self.name,
            "role": self.role.value if self.role else None,
            "company": self.company,
            "college": self.college,
            "location": self.location,
            "skills": list(self.skills[:5]),
        }


@dataclass
class CompatibilityScore:
    total: int
    breakdown: dict[str, dict[str, Any]]
    match_type: MatchType

    def to_dict(self) -> dict[str, Any]:
        return {"total": self.total, "breakdown": self.breakdown, "match_type": self.match_type.value}


@dataclass(frozen=True)
class PairKey:
    user_a_id: str
    user_b_id: str
    match_type: MatchType

    def as_string(self) -> str:
        return f"{self.user_a_id}|{self.user_b_id}|{self.match_type.value}"


def canonical_pair(user_a: str, user_b: str) -> tuple[str, str]:
    return tuple(sorted((user_a, user_b)))


def canonical_key(user_a: str, user_b: str, match_type: MatchType) -> PairKey:
    a, b = canonical_pair(user_a, user_b)
    return PairKey(user_a_id=a, user_b_id=b, match_type=match_type)


@dataclass(frozen=True)
class SwipeRecord:
    actor_id: str
    target_id: str
    action: SwipeKind
    match_type: MatchType
    created_at: datetime = field(default_factory=_now_utc)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass(frozen=True)
class MatchRecord:
    id: str
    key: PairKey
    status: str
    score_total: int
    score_breakdown: dict[str, Any]
    icebreakers: tuple[str, ...]
    created_at: datetime

    @property
    def user_a_id(self) -> str:
        return self.key.user_a_id

    @property
    def user_b_id(self) -> str:
        return self.key.user_b_id

    @property
    def match_type(self) -> MatchType:
        return self.key.match_type

    def other_user(self, user_id: str) -> str:
        return self.user_b_id if user_id == self.user_a_id else self.user_a_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_a_id": self.user_a_id,
            "user_b_id": self.user_b_id,
            "match_type": self.match_type.value,
            "status": self.status,
            "score_total": self.score_total,
            "icebreakers": list(self.icebreakers),
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class MatchCreatedEvent:
    match_id: str
    user_a_id: str
    user_b_id: str
    match_type: MatchType
    icebreakers: tuple[str, ...]

    @classmethod
    def from_match(cls, match: MatchRecord) -> "MatchCreatedEvent":
        return cls(
            match_id=match.id,
            user_a_id=match.user_a_id,
            user_b_id=match.user_b_id,
            match_type=match.match_type,
            icebreakers=match.icebreakers,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "match_id": self.match_id,
            "user_a": self.user_a_id,
            "user_b": self.user_b_id,
            "match_type": self.match_type.value,
            "icebreakers": list(self.icebreakers),
        }


def iter_common(left: Iterable[str], right: Iterable[str]) -> list[str]:
    """Items of ``left`` also present in ``right``, in ``left`` order."""
    right_set = set(right)
    return [item for item in left if item in right_set]
