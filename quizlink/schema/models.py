"""
엔티티 정의 (정규 형태).

속성 이름은 snake_case, 직렬화(by_alias)는 camelCase. 로컬 저장소 레코드와
API 응답은 camelCase 형태를 그대로 쓴다.

시각은 항상 UTC aware. 타임존 없는 값은 UTC로 간주한다.
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from quizlink.core.constants import POINTS_PER_QUESTION

QuizType = Literal["refresh", "final"]
SessionStatus = Literal["active", "completed"]
ParticipantStatus = Literal["joined", "active", "completed"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(v: datetime | None) -> datetime | None:
    if v is not None and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


class Entity(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuizSession(Entity):
    quiz_id: str = Field(min_length=1)
    quiz_type: QuizType
    created_at: datetime = Field(default_factory=utcnow)
    status: SessionStatus = "active"
    completed_at: datetime | None = None

    @field_validator("created_at", "completed_at")
    @classmethod
    def aware(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)


class Participant(Entity):
    quiz_id: str = Field(min_length=1)
    device_id: str = Field(min_length=1)
    name: str
    email: str | None = None
    joined_at: datetime = Field(default_factory=utcnow)
    browser: str | None = None
    status: ParticipantStatus = "joined"

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v

    @field_validator("email")
    @classmethod
    def blank_email_is_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("joined_at")
    @classmethod
    def aware(cls, v: datetime) -> datetime:
        return as_utc(v)


class ParticipantSnapshot(Entity):
    """결과 저장 시점의 참가자 투영. 저장 후 변경되지 않는다."""

    name: str
    email: str | None = None
    device_id: str
    joined_at: datetime

    @field_validator("joined_at")
    @classmethod
    def aware(cls, v: datetime) -> datetime:
        return as_utc(v)

    @classmethod
    def of(cls, participant: Participant) -> "ParticipantSnapshot":
        return cls(
            name=participant.name,
            email=participant.email,
            device_id=participant.device_id,
            joined_at=participant.joined_at,
        )


class QuizResult(Entity):
    quiz_id: str = Field(min_length=1)
    quiz_type: QuizType
    score: int = Field(ge=0)
    total_questions: int = Field(ge=0)
    date: datetime = Field(default_factory=utcnow)
    participants: list[ParticipantSnapshot] = Field(default_factory=list)

    @field_validator("score")
    @classmethod
    def whole_questions(cls, v: int) -> int:
        if v % POINTS_PER_QUESTION:
            raise ValueError(f"score must be a multiple of {POINTS_PER_QUESTION}")
        return v

    @field_validator("date")
    @classmethod
    def aware(cls, v: datetime) -> datetime:
        return as_utc(v)
