"""
엔티티 ↔ 백엔드 행/레코드 변환.

- 원격(PostgreSQL): snake_case 컬럼 (QuizSessionRow 등)
- 로컬 저장소: camelCase JSON 레코드 (deviceId, joinedAt ...)

선택 필드(email 등)가 비어 있으면 키를 생략하지 않고 명시적 null로 둔다.
"""

from typing import Any, TypeVar

from quizlink.db.models import ParticipantRow, QuizResultRow, QuizSessionRow
from quizlink.schema.models import (
    Entity,
    Participant,
    ParticipantSnapshot,
    QuizResult,
    QuizSession,
)

E = TypeVar("E", bound=Entity)


# ----- 로컬 레코드 (camelCase dict) -----


def to_record(entity: Entity) -> dict[str, Any]:
    return entity.model_dump(mode="json", by_alias=True)


def from_record(model: type[E], record: dict[str, Any]) -> E:
    """camelCase / snake_case 키 모두 허용."""
    return model.model_validate(record)


# ----- 원격 행 (SQLModel) -----


def session_to_row(session: QuizSession) -> QuizSessionRow:
    return QuizSessionRow(
        quiz_id=session.quiz_id,
        quiz_type=session.quiz_type,
        created_at=session.created_at,
        status=session.status,
        completed_at=session.completed_at,
    )


def session_from_row(row: QuizSessionRow) -> QuizSession:
    return QuizSession(
        quiz_id=row.quiz_id,
        quiz_type=row.quiz_type,
        created_at=row.created_at,
        status=row.status,
        completed_at=row.completed_at,
    )


def participant_to_row(participant: Participant) -> ParticipantRow:
    return ParticipantRow(
        name=participant.name,
        email=participant.email,
        device_id=participant.device_id,
        quiz_id=participant.quiz_id,
        joined_at=participant.joined_at,
        browser=participant.browser,
        status=participant.status,
    )


def participant_from_row(row: ParticipantRow) -> Participant:
    return Participant(
        quiz_id=row.quiz_id,
        device_id=row.device_id,
        name=row.name,
        email=row.email,
        joined_at=row.joined_at,
        browser=row.browser,
        status=row.status,
    )


def result_to_row(result: QuizResult) -> QuizResultRow:
    return QuizResultRow(
        quiz_id=result.quiz_id,
        quiz_type=result.quiz_type,
        score=result.score,
        total_questions=result.total_questions,
        date=result.date,
        participants=[to_record(p) for p in result.participants],
    )


def result_from_row(row: QuizResultRow) -> QuizResult:
    return QuizResult(
        quiz_id=row.quiz_id,
        quiz_type=row.quiz_type,
        score=row.score,
        total_questions=row.total_questions,
        date=row.date,
        participants=[ParticipantSnapshot.model_validate(p) for p in row.participants or []],
    )
