"""
퀴즈 세션·참가자 생명주기: 생성 → 참가(join) → 시작 → 종료(결과 저장).

입력 검증은 저장 시도 전에 끝낸다. 저장은 전부 PersistenceService를 거친다.
"""

import logging
from urllib.parse import quote

from quizlink.core.config import settings
from quizlink.core.constants import POINTS_PER_QUESTION, QUIZ_TIME_LIMITS
from quizlink.schema.models import (
    Participant,
    ParticipantSnapshot,
    QuizResult,
    QuizSession,
    utcnow,
)
from quizlink.services.device import make_id
from quizlink.services.persistence import PersistenceService, persistence_service

logger = logging.getLogger(__name__)


class JoinValidationError(ValueError):
    """사용자에게 인라인으로 보여줄 입력 오류."""


class SessionNotFoundError(LookupError):
    pass


def join_url(quiz_id: str, base_url: str | None = None) -> str:
    base = (base_url or settings.PUBLIC_BASE_URL).rstrip("/")
    return f"{base}/join/{quote(quiz_id, safe='')}"


def score_percentage(score: int, total_questions: int) -> int:
    max_score = total_questions * POINTS_PER_QUESTION
    if max_score <= 0:
        return 0
    return round(score / max_score * 100)


def validate_score(score: int, total_questions: int) -> None:
    if total_questions < 0:
        raise JoinValidationError("totalQuestions must not be negative")
    if score < 0 or score % POINTS_PER_QUESTION:
        raise JoinValidationError(f"score must be a non-negative multiple of {POINTS_PER_QUESTION}")
    if score > total_questions * POINTS_PER_QUESTION:
        raise JoinValidationError("score exceeds the maximum for this quiz")


class QuizLifecycleService:
    def __init__(self, persistence: PersistenceService, base_url: str | None = None) -> None:
        self.persistence = persistence
        self.base_url = base_url

    def join_url(self, quiz_id: str) -> str:
        return join_url(quiz_id, self.base_url)

    async def create_quiz(self, quiz_type: str) -> QuizSession:
        if quiz_type not in QUIZ_TIME_LIMITS:
            raise JoinValidationError(f"Unknown quiz type: {quiz_type}")
        await self.persistence.init_database()
        session = QuizSession(quiz_id=make_id("quiz"), quiz_type=quiz_type, status="active")
        await self.persistence.save_session(session)
        logger.info("퀴즈 세션 생성 quiz_id=%s quiz_type=%s", session.quiz_id, quiz_type)
        return session

    async def lookup(self, quiz_id: str) -> QuizSession:
        """세션 조회. 세션은 없지만 결과가 있으면 완료된 세션으로 본다."""
        session = await self.persistence.get_session(quiz_id)
        if session:
            return session
        for r in await self.persistence.get_all_results():
            if r.quiz_id == quiz_id:
                return QuizSession(
                    quiz_id=quiz_id,
                    quiz_type=r.quiz_type,
                    created_at=r.date,
                    status="completed",
                    completed_at=r.date,
                )
        raise SessionNotFoundError(quiz_id)

    async def join(
        self,
        quiz_id: str,
        name: str,
        email: str | None = None,
        browser: str | None = None,
        device_id: str | None = None,
    ) -> Participant:
        """device_id가 없으면 새 기기 ID를 만든다. 클라이언트는 응답의 deviceId를 보관해 재참가에 쓴다."""
        if not quiz_id or not quiz_id.strip():
            raise JoinValidationError("Invalid quiz session")
        if not name or not name.strip():
            raise JoinValidationError("Please enter your name")
        await self.lookup(quiz_id)

        participant = Participant(
            quiz_id=quiz_id,
            device_id=device_id or make_id("device"),
            name=name,
            email=email,
            browser=browser,
            status="joined",
        )
        await self.persistence.save_participant(participant)
        logger.info("참가 quiz_id=%s device_id=%s", quiz_id, participant.device_id)
        return participant

    async def find_participant(self, quiz_id: str, device_id: str) -> Participant | None:
        """이미 참가한 기기인지 확인."""
        for p in await self.persistence.get_participants(quiz_id):
            if p.device_id == device_id:
                return p
        return None

    async def start_quiz(self, quiz_id: str) -> list[Participant]:
        participants = await self.persistence.get_participants(quiz_id)
        for p in participants:
            await self.persistence.update_status(quiz_id, p.device_id, "active")
        logger.info("퀴즈 시작 quiz_id=%s 참가자 수=%d", quiz_id, len(participants))
        return [p.model_copy(update={"status": "active"}) for p in participants]

    async def finish_quiz(self, quiz_id: str, score: int, total_questions: int) -> QuizResult:
        validate_score(score, total_questions)
        session = await self.lookup(quiz_id)
        participants = await self.persistence.get_participants(quiz_id)
        now = utcnow()
        result = QuizResult(
            quiz_id=quiz_id,
            quiz_type=session.quiz_type,
            score=score,
            total_questions=total_questions,
            date=now,
            participants=[ParticipantSnapshot.of(p) for p in participants],
        )
        await self.persistence.save_result(result)
        await self.persistence.save_session(
            session.model_copy(update={"status": "completed", "completed_at": now})
        )
        logger.info("결과 저장 quiz_id=%s score=%d/%d", quiz_id, score, total_questions * POINTS_PER_QUESTION)
        return result


quiz_lifecycle_service = QuizLifecycleService(persistence_service)
