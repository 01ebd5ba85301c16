"""
FastAPI 앱: 퀴즈 세션 생성, 참가, 참가자 조회, 시작/종료, 결과 조회·삭제.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Header, HTTPException

from quizlink.api.schemas import (
    FinishRequest,
    JoinRequest,
    JoinUrlResponse,
    OkResponse,
    QuizCreateRequest,
    StatusUpdateRequest,
)
from quizlink.schema.models import Participant, QuizResult, QuizSession
from quizlink.services.quiz_lifecycle import (
    JoinValidationError,
    QuizLifecycleService,
    SessionNotFoundError,
    quiz_lifecycle_service,
)

logger = logging.getLogger(__name__)

NOT_FOUND = "Quiz session not found or has expired"


def create_app(lifecycle: QuizLifecycleService | None = None) -> FastAPI:
    lifecycle = lifecycle or quiz_lifecycle_service
    persistence = lifecycle.persistence

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        ready = await persistence.init_database()
        logger.info("API 시작 (remote_ready=%s)", ready)
        yield

    app = FastAPI(
        title="QuizLink API",
        description="퀴즈 세션·참가자·결과 저장 (원격 DB, 실패 시 로컬 저장소)",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.post("/quizzes", response_model=QuizSession, summary="퀴즈 세션 생성")
    async def create_quiz(body: QuizCreateRequest) -> QuizSession:
        try:
            return await lifecycle.create_quiz(body.quiz_type)
        except JoinValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app.get("/quizzes/{quiz_id}", response_model=QuizSession, summary="퀴즈 세션 조회")
    async def get_quiz(quiz_id: str) -> QuizSession:
        try:
            return await lifecycle.lookup(quiz_id)
        except SessionNotFoundError:
            raise HTTPException(status_code=404, detail=NOT_FOUND)

    @app.get("/quizzes/{quiz_id}/join-url", response_model=JoinUrlResponse, summary="참가 링크")
    async def get_join_url(quiz_id: str) -> JoinUrlResponse:
        return JoinUrlResponse(quiz_id=quiz_id, join_url=lifecycle.join_url(quiz_id))

    @app.post(
        "/quizzes/{quiz_id}/participants",
        response_model=Participant,
        summary="퀴즈 참가",
        description="같은 기기로 다시 참가하면 기존 기록을 갱신한다.",
    )
    async def join_quiz(
        quiz_id: str,
        body: JoinRequest,
        user_agent: str | None = Header(None),
    ) -> Participant:
        try:
            return await lifecycle.join(
                quiz_id,
                name=body.name,
                email=body.email,
                browser=body.browser or user_agent,
                device_id=body.device_id,
            )
        except JoinValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except SessionNotFoundError:
            raise HTTPException(status_code=404, detail=NOT_FOUND)

    @app.get("/quizzes/{quiz_id}/participants", response_model=list[Participant], summary="참가자 목록")
    async def list_participants(quiz_id: str) -> list[Participant]:
        return await persistence.get_participants(quiz_id)

    @app.patch(
        "/quizzes/{quiz_id}/participants/{device_id}",
        response_model=OkResponse,
        summary="참가자 상태 변경",
    )
    async def update_participant_status(
        quiz_id: str, device_id: str, body: StatusUpdateRequest
    ) -> OkResponse:
        ok = await persistence.update_status(quiz_id, device_id, body.status)
        return OkResponse(ok=ok)

    @app.post("/quizzes/{quiz_id}/start", response_model=list[Participant], summary="퀴즈 시작")
    async def start_quiz(quiz_id: str) -> list[Participant]:
        return await lifecycle.start_quiz(quiz_id)

    @app.post("/quizzes/{quiz_id}/finish", response_model=QuizResult, summary="퀴즈 종료 및 결과 저장")
    async def finish_quiz(quiz_id: str, body: FinishRequest) -> QuizResult:
        try:
            return await lifecycle.finish_quiz(quiz_id, body.score, body.total_questions)
        except JoinValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except SessionNotFoundError:
            raise HTTPException(status_code=404, detail=NOT_FOUND)

    @app.get("/results", response_model=list[QuizResult], summary="전체 결과 (최신순)")
    async def list_results() -> list[QuizResult]:
        return await persistence.get_all_results()

    @app.delete("/results", response_model=OkResponse, summary="결과 전체 삭제")
    async def clear_results() -> OkResponse:
        return OkResponse(ok=await persistence.clear_results())

    return app


app = create_app()
