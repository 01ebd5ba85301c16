"""
공통 픽스처: tmp 로컬 저장소, 메모리 원격 저장소(정상/항상 실패), 퍼사드.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from quizlink.db.local_store import LocalStore
from quizlink.db.remote_store import RemoteUnavailableError
from quizlink.schema.models import Participant, QuizResult, QuizSession
from quizlink.services.persistence import PersistenceService

T0 = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)


def at(seconds: int) -> datetime:
    return T0 + timedelta(seconds=seconds)


class FakeRemoteStore:
    """PostgreSQL 대신 쓰는 메모리 원격 저장소. RemoteStore와 같은 인터페이스."""

    def __init__(self) -> None:
        self.sessions: dict[str, QuizSession] = {}
        self.participants: list[Participant] = []
        self.results: dict[str, QuizResult] = {}
        self.schema_calls = 0

    async def ensure_schema(self) -> None:
        self.schema_calls += 1

    async def upsert_session(self, quiz_session: QuizSession) -> None:
        existing = self.sessions.get(quiz_session.quiz_id)
        if existing:
            self.sessions[quiz_session.quiz_id] = existing.model_copy(
                update={"status": quiz_session.status, "completed_at": quiz_session.completed_at}
            )
        else:
            self.sessions[quiz_session.quiz_id] = quiz_session.model_copy()

    async def get_session(self, quiz_id: str) -> QuizSession | None:
        s = self.sessions.get(quiz_id)
        return s.model_copy() if s else None

    async def insert_participant(self, participant: Participant) -> None:
        self.participants = [
            p
            for p in self.participants
            if not (p.quiz_id == participant.quiz_id and p.device_id == participant.device_id)
        ]
        self.participants.append(participant.model_copy())

    async def update_participant_status(self, quiz_id: str, device_id: str, status: str) -> int:
        count = 0
        for i, p in enumerate(self.participants):
            if p.quiz_id == quiz_id and p.device_id == device_id:
                self.participants[i] = p.model_copy(update={"status": status})
                count += 1
        return count

    async def list_participants(self, quiz_id: str) -> list[Participant]:
        rows = [p.model_copy() for p in self.participants if p.quiz_id == quiz_id]
        return sorted(rows, key=lambda p: p.joined_at)

    async def upsert_result(self, result: QuizResult) -> None:
        existing = self.results.get(result.quiz_id)
        if existing:
            self.results[result.quiz_id] = existing.model_copy(
                update={"score": result.score, "date": result.date}
            )
        else:
            self.results[result.quiz_id] = result.model_copy(deep=True)

    async def list_results(self) -> list[QuizResult]:
        rows = [r.model_copy(deep=True) for r in self.results.values()]
        return sorted(rows, key=lambda r: r.date, reverse=True)

    async def delete_results(self) -> int:
        count = len(self.results)
        self.results.clear()
        return count


class FailingRemoteStore:
    """모든 연산이 RemoteUnavailableError."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def __getattr__(self, name: str):
        async def fail(*args, **kwargs):
            self.calls.append(name)
            raise RemoteUnavailableError(f"{name} failed: connection refused")

        return fail


class SlowRemoteStore(FakeRemoteStore):
    async def list_participants(self, quiz_id: str) -> list[Participant]:
        await asyncio.sleep(5)
        return []


class BrokenLocalStore(LocalStore):
    """디스크가 가득 찬 것처럼 읽기/쓰기 모두 실패."""

    def read_collection(self, name):
        raise OSError("disk full")

    def write_collection(self, name, records):
        raise OSError("disk full")

    def remove_collection(self, name):
        raise OSError("disk full")


@pytest.fixture
def local_store(tmp_path):
    return LocalStore(tmp_path / "store")


@pytest.fixture
def fake_remote():
    return FakeRemoteStore()


@pytest.fixture
def local_only(local_store):
    return PersistenceService(local_store)


@pytest.fixture
def with_remote(local_store, fake_remote):
    return PersistenceService(local_store, fake_remote)


@pytest.fixture
def failing_remote(local_store):
    return PersistenceService(local_store, FailingRemoteStore())


@pytest.fixture(params=["local", "remote", "failing"])
def persistence(request, local_store, fake_remote):
    """세 가지 백엔드 구성 각각에 대해 같은 테스트를 실행."""
    if request.param == "local":
        return PersistenceService(local_store)
    if request.param == "remote":
        return PersistenceService(local_store, fake_remote)
    return PersistenceService(local_store, FailingRemoteStore())


@pytest.fixture
def make_participant():
    def _make(name="Ana", device_id="dev_a", quiz_id="quiz_1", joined=0, **kw):
        return Participant(
            quiz_id=quiz_id,
            device_id=device_id,
            name=name,
            joined_at=at(joined),
            browser="pytest",
            **kw,
        )

    return _make


@pytest.fixture
def make_session():
    def _make(quiz_id="quiz_1", quiz_type="refresh", status="active", **kw):
        return QuizSession(quiz_id=quiz_id, quiz_type=quiz_type, created_at=T0, status=status, **kw)

    return _make
