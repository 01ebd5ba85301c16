"""
API 요청/응답 스키마.
"""

from pydantic import BaseModel, Field

from quizlink.schema.models import Entity, ParticipantStatus, QuizType


# ----- 세션 -----


class QuizCreateRequest(Entity):
    quiz_type: QuizType = Field(..., description="refresh | final")


class JoinUrlResponse(Entity):
    quiz_id: str
    join_url: str


# ----- 참가자 -----


class JoinRequest(Entity):
    """참가 요청. 이름은 필수, 이메일은 선택."""

    name: str = Field("", description="참가자 이름")
    email: str | None = Field(None, description="이메일 (선택)")
    device_id: str | None = Field(None, description="기기 ID (없으면 새로 발급, 응답의 deviceId를 재참가에 사용)")
    browser: str | None = Field(None, description="User-Agent (없으면 요청 헤더 사용)")


class StatusUpdateRequest(BaseModel):
    status: ParticipantStatus


# ----- 결과 -----


class FinishRequest(Entity):
    score: int = Field(..., ge=0, description="점수 (문항당 10점)")
    total_questions: int = Field(..., ge=0, description="문항 수")


class OkResponse(BaseModel):
    ok: bool
