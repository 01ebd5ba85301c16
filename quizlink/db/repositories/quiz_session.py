"""
quiz_sessions 테이블 접근: quiz_id 기준 upsert, 조회.
"""

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from quizlink.db.models import QuizSessionRow


class QuizSessionRepo:
    async def upsert(self, session: AsyncSession, row: QuizSessionRow) -> QuizSessionRow:
        """이미 있으면 status, completed_at만 갱신 (식별 필드는 그대로)."""
        existing = await self.get_by_quiz_id(session, row.quiz_id)
        if existing:
            existing.status = row.status
            existing.completed_at = row.completed_at
            session.add(existing)
            target = existing
        else:
            session.add(row)
            target = row
        await session.commit()
        await session.refresh(target)
        return target

    async def get_by_quiz_id(self, session: AsyncSession, quiz_id: str) -> QuizSessionRow | None:
        stmt = select(QuizSessionRow).where(QuizSessionRow.quiz_id == quiz_id)
        return (await session.exec(stmt)).first()


quiz_session_repo = QuizSessionRepo()
