"""
SQLModel 테이블 정의 (원격 PostgreSQL).
"""

from datetime import datetime
from typing import Any

from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel


class QuizSessionRow(SQLModel, table=True):
    """퀴즈 세션. quiz_id당 한 행 (upsert)."""

    __tablename__ = "quiz_sessions"

    id: int | None = Field(default=None, primary_key=True)
    quiz_id: str = Field(sa_column=Column(String(255), nullable=False, unique=True))
    quiz_type: str = Field(sa_column=Column(String(50), nullable=False))  # refresh | final
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    status: str = Field(sa_column=Column(String(50), nullable=False))  # active | completed
    completed_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )


class ParticipantRow(SQLModel, table=True):
    """참가자 join 기록. (quiz_id, device_id)당 논리적으로 한 행."""

    __tablename__ = "participants"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(sa_column=Column(String(255), nullable=False))
    email: str | None = Field(default=None, sa_column=Column(String(255), nullable=True))
    device_id: str = Field(sa_column=Column(String(255), nullable=False, index=True))
    quiz_id: str = Field(sa_column=Column(String(255), nullable=False, index=True))
    joined_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    browser: str | None = Field(default=None, sa_column=Column(String(255), nullable=True))
    status: str = Field(sa_column=Column(String(50), nullable=False))  # joined | active | completed
    created_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )


class QuizResultRow(SQLModel, table=True):
    """최종 결과. participants는 저장 시점 스냅샷(JSON 배열)."""

    __tablename__ = "quiz_results"

    id: int | None = Field(default=None, primary_key=True)
    quiz_id: str = Field(sa_column=Column(String(255), nullable=False, unique=True))
    quiz_type: str = Field(sa_column=Column(String(50), nullable=False))
    score: int = Field(sa_column=Column(Integer, nullable=False))
    total_questions: int = Field(sa_column=Column(Integer, nullable=False))
    date: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    participants: list[dict[str, Any]] | None = Field(default=None, sa_column=Column(JSONB, nullable=True))
    created_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), server_default=func.now()),
    )
