"""
원격 저장소 어댑터 (PostgreSQL, 비동기).

네트워크·인증·스키마 오류와 디코딩할 수 없는 행은 전부 RemoteUnavailableError
하나로 올린다.
내부 재시도는 하지 않는다.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from quizlink.db import codec
from quizlink.db.connection import ensure_schema, get_session, make_engine
from quizlink.db.repositories import participant_repo, quiz_result_repo, quiz_session_repo
from quizlink.schema.models import Participant, ParticipantStatus, QuizResult, QuizSession

logger = logging.getLogger(__name__)


class RemoteUnavailableError(Exception):
    """원격 저장소를 쓸 수 없음 (미설정, 네트워크, 스키마 오류 등)."""


class RemoteNotConfiguredError(RemoteUnavailableError):
    pass


class RemoteStore:
    def __init__(self, engine: AsyncEngine | None) -> None:
        self._engine = engine

    @classmethod
    def from_url(cls, database_url: str | None) -> "RemoteStore":
        return cls(make_engine(database_url) if database_url else None)

    @property
    def configured(self) -> bool:
        return self._engine is not None

    @asynccontextmanager
    async def _session(self, op: str) -> AsyncGenerator:
        if self._engine is None:
            raise RemoteNotConfiguredError("remote database is not configured")
        try:
            async with get_session(self._engine) as session:
                yield session
        except (SQLAlchemyError, OSError, ValidationError) as e:
            raise RemoteUnavailableError(f"{op} failed: {e}") from e

    async def ensure_schema(self) -> None:
        if self._engine is None:
            raise RemoteNotConfiguredError("remote database is not configured")
        try:
            await ensure_schema(self._engine)
        except (SQLAlchemyError, OSError) as e:
            raise RemoteUnavailableError(f"ensure_schema failed: {e}") from e
        logger.info("원격 스키마 확인 완료")

    async def upsert_session(self, quiz_session: QuizSession) -> None:
        async with self._session("upsert_session") as session:
            await quiz_session_repo.upsert(session, codec.session_to_row(quiz_session))

    async def get_session(self, quiz_id: str) -> QuizSession | None:
        async with self._session("get_session") as session:
            row = await quiz_session_repo.get_by_quiz_id(session, quiz_id)
            return codec.session_from_row(row) if row else None

    async def insert_participant(self, participant: Participant) -> None:
        async with self._session("insert_participant") as session:
            await participant_repo.insert(session, codec.participant_to_row(participant))

    async def update_participant_status(
        self, quiz_id: str, device_id: str, status: ParticipantStatus
    ) -> int:
        async with self._session("update_participant_status") as session:
            return await participant_repo.update_status(session, quiz_id, device_id, status)

    async def list_participants(self, quiz_id: str) -> list[Participant]:
        async with self._session("list_participants") as session:
            rows = await participant_repo.list_by_quiz(session, quiz_id)
            return [codec.participant_from_row(r) for r in rows]

    async def upsert_result(self, result: QuizResult) -> None:
        async with self._session("upsert_result") as session:
            await quiz_result_repo.upsert(session, codec.result_to_row(result))

    async def list_results(self) -> list[QuizResult]:
        async with self._session("list_results") as session:
            rows = await quiz_result_repo.list_all(session)
            return [codec.result_from_row(r) for r in rows]

    async def delete_results(self) -> int:
        async with self._session("delete_results") as session:
            return await quiz_result_repo.delete_all(session)

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
