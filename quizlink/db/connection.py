"""
SQLModel 비동기 엔진·세션 (PostgreSQL, psycopg3).
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.schema import CreateIndex, CreateTable
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from quizlink.db.models import (  # noqa: F401 - 테이블 등록
    ParticipantRow,
    QuizResultRow,
    QuizSessionRow,
)


def make_engine(database_url: str) -> AsyncEngine:
    # postgresql:// → postgresql+psycopg:// (psycopg3 드라이버, async 지원)
    url = database_url.replace("postgresql://", "postgresql+psycopg://", 1)
    url = url.replace("postgres://", "postgresql+psycopg://", 1)
    return create_async_engine(url, echo=False, pool_pre_ping=True)


async def ensure_schema(engine: AsyncEngine) -> None:
    """
    테이블이 없으면 생성. 여러 프로세스가 동시에 호출해도 안전하도록
    앱 레벨 락 없이 DB의 IF NOT EXISTS에 맡긴다.
    """
    async with engine.begin() as conn:
        for table in SQLModel.metadata.sorted_tables:
            await conn.execute(CreateTable(table, if_not_exists=True))
            for index in table.indexes:
                await conn.execute(CreateIndex(index, if_not_exists=True))
        # 스냅샷 컬럼 없던 이전 배포의 quiz_results 대비
        await conn.execute(text("ALTER TABLE quiz_results ADD COLUMN IF NOT EXISTS participants JSONB"))


@asynccontextmanager
async def get_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session
