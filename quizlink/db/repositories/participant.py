"""
participants 테이블 접근.

(quiz_id, device_id) 쌍은 쓰기 시점에 중복 제거: 기존 행을 지우고 새 행을 넣는다.
"""

from sqlalchemy import delete, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from quizlink.db.models import ParticipantRow


class ParticipantRepo:
    async def insert(self, session: AsyncSession, row: ParticipantRow) -> ParticipantRow:
        await session.execute(
            delete(ParticipantRow).where(
                ParticipantRow.quiz_id == row.quiz_id,
                ParticipantRow.device_id == row.device_id,
            )
        )
        session.add(row)
        await session.commit()
        await session.refresh(row)
        return row

    async def update_status(
        self, session: AsyncSession, quiz_id: str, device_id: str, status: str
    ) -> int:
        """일치하는 행 전부 갱신. 없으면 0 (no-op)."""
        result = await session.execute(
            update(ParticipantRow)
            .where(
                ParticipantRow.quiz_id == quiz_id,
                ParticipantRow.device_id == device_id,
            )
            .values(status=status)
        )
        await session.commit()
        return result.rowcount

    async def list_by_quiz(self, session: AsyncSession, quiz_id: str) -> list[ParticipantRow]:
        stmt = (
            select(ParticipantRow)
            .where(ParticipantRow.quiz_id == quiz_id)
            .order_by(ParticipantRow.joined_at.asc(), ParticipantRow.id.asc())
        )
        return list((await session.exec(stmt)).all())


participant_repo = ParticipantRepo()
