"""
quiz_results 테이블 접근.
participants: 저장 시점 참가자 스냅샷(JSONB 배열). 생성 후 갱신하지 않는다.
"""

from sqlalchemy import delete
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from quizlink.db.models import QuizResultRow


class QuizResultRepo:
    async def upsert(self, session: AsyncSession, row: QuizResultRow) -> QuizResultRow:
        stmt = select(QuizResultRow).where(QuizResultRow.quiz_id == row.quiz_id)
        existing = (await session.exec(stmt)).first()
        if existing:
            existing.score = row.score
            existing.date = row.date
            session.add(existing)
            target = existing
        else:
            session.add(row)
            target = row
        await session.commit()
        await session.refresh(target)
        return target

    async def list_all(self, session: AsyncSession) -> list[QuizResultRow]:
        stmt = select(QuizResultRow).order_by(QuizResultRow.date.desc())
        return list((await session.exec(stmt)).all())

    async def delete_all(self, session: AsyncSession) -> int:
        result = await session.execute(delete(QuizResultRow))
        await session.commit()
        return result.rowcount


quiz_result_repo = QuizResultRepo()
