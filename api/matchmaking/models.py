import uuid

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text, UniqueConstraint, func

from .database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class UserProfile(Base):
    __tablename__ = "user_profile"

    user_id = Column(String(64), primary_key=True)
    name = Column(String, nullable=True)
    role = Column(String(32), nullable=True)
    skills = Column(Text, nullable=False, default="[]")
    interests = Column(Text, nullable=False, default="[]")
    goals = Column(Text, nullable=True)
    personality_type = Column(String(8), nullable=True)
    work_style = Column(String(64), nullable=True)
    location = Column(String, nullable=True)
    company = Column(String, nullable=True)
    college = Column(String, nullable=True)
    seeking_mentor = Column(Boolean, nullable=False, default=False)
    seeking_mentee = Column(Boolean, nullable=False, default=False)
    seeking_cofounder = Column(Boolean, nullable=False, default=False)
    seeking_teammate = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class SwipeAction(Base):
    __tablename__ = "swipe_action"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True, default=_uuid)
    actor_id = Column(String(64), nullable=False)
    target_id = Column(String(64), nullable=False)
    action = Column(String(16), nullable=False)
    match_type = Column(String(16), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_swipe_action_direction", "actor_id", "target_id", "match_type"),
    )


class MatchRecord(Base):
    __tablename__ = "match_record"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_a_id = Column(String(64), nullable=False)
    user_b_id = Column(String(64), nullable=False)
    match_type = Column(String(16), nullable=False)
    status = Column(String(16), nullable=False, default="matched")
    score_total = Column(Integer, nullable=False)
    score_breakdown = Column(Text, nullable=False, default="{}")
    icebreakers = Column(Text, nullable=False, default="[]")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_a_id", "user_b_id", "match_type", name="uq_match_pair_type"),
        Index("idx_match_record_user_a", "user_a_id"),
        Index("idx_match_record_user_b", "user_b_id"),
    )


class MatchEvent(Base):
    __tablename__ = "match_event"

    id = Column(String(36), primary_key=True, default=_uuid)
    match_id = Column(String(36), nullable=False, index=True)
    event_type = Column(String(64), nullable=False)
    payload = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
