"""
원격/로컬 이중 저장소 퍼사드.

모든 논리 연산은 원격을 먼저 시도하고, 실패하면(미설정·네트워크·스키마 오류)
로컬 저장소에서 같은 연산을 수행한다. 어떤 경우에도 예외를 밖으로 올리지 않고
빈 목록 / False / None 을 돌려준다.

원격이 정상일 때는 로컬을 읽지도 쓰지도 않는다 (로컬은 캐시가 아닌 대체 저장소).
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

from pydantic import ValidationError

from quizlink.core.config import Settings, settings
from quizlink.core.constants import (
    PARTICIPANTS_COLLECTION,
    RESULTS_COLLECTION,
    SESSIONS_COLLECTION,
)
from quizlink.db import codec
from quizlink.db.local_store import LocalStore
from quizlink.db.remote_store import RemoteStore
from quizlink.schema.models import (
    Participant,
    ParticipantStatus,
    QuizResult,
    QuizSession,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
E = TypeVar("E")


def _same_participant(record: dict[str, Any], quiz_id: str, device_id: str) -> bool:
    return record.get("quizId") == quiz_id and record.get("deviceId") == device_id


class PersistenceService:
    def __init__(
        self,
        local: LocalStore,
        remote: RemoteStore | None = None,
        *,
        remote_timeout: float | None = None,
    ) -> None:
        self.local = local
        self.remote = remote
        self.remote_timeout = remote_timeout

    async def _call_remote(self, remote_call: Callable[[], Awaitable[T]]) -> T:
        if self.remote_timeout:
            return await asyncio.wait_for(remote_call(), self.remote_timeout)
        return await remote_call()

    async def _run(
        self,
        op: str,
        remote_call: Callable[[], Awaitable[T]] | None,
        local_call: Callable[[], T],
        default: T,
    ) -> T:
        if self.remote is not None and remote_call is not None:
            try:
                return await self._call_remote(remote_call)
            except Exception as e:
                logger.warning("%s 원격 실패 → 로컬 대체: %s", op, e)
        try:
            return local_call()
        except Exception:
            logger.exception("%s 로컬 저장소 실패", op)
            return default

    def _decode(self, model: type[E], records: list[dict[str, Any]]) -> list[E]:
        out = []
        for r in records:
            try:
                out.append(codec.from_record(model, r))
            except ValidationError as e:
                logger.warning("로컬 레코드 무시 (%s): %s", model.__name__, e.error_count())
        return out

    # ----- 스키마 -----

    async def init_database(self) -> bool:
        """원격 스키마 준비. 원격을 쓸 수 있으면 True."""
        if self.remote is None:
            logger.info("원격 DB 미설정 → 로컬 저장소 사용")
            return False
        try:
            await self.remote.ensure_schema()
            return True
        except Exception as e:
            logger.warning("원격 DB 초기화 실패 → 로컬 저장소 사용: %s", e)
            return False

    # ----- 세션 -----

    async def save_session(self, session: QuizSession) -> bool:
        async def remote() -> bool:
            await self.remote.upsert_session(session)
            return True

        return await self._run("save_session", remote, lambda: self._save_session_local(session), False)

    def _save_session_local(self, session: QuizSession) -> bool:
        records = self.local.read_collection(SESSIONS_COLLECTION)
        for r in records:
            if r.get("quizId") == session.quiz_id:
                new = codec.to_record(session)
                r["status"] = new["status"]
                r["completedAt"] = new["completedAt"]
                break
        else:
            records.append(codec.to_record(session))
        self.local.write_collection(SESSIONS_COLLECTION, records)
        return True

    async def get_session(self, quiz_id: str) -> QuizSession | None:
        return await self._run(
            "get_session",
            lambda: self.remote.get_session(quiz_id),
            lambda: self._get_session_local(quiz_id),
            None,
        )

    def _get_session_local(self, quiz_id: str) -> QuizSession | None:
        records = [
            r for r in self.local.read_collection(SESSIONS_COLLECTION) if r.get("quizId") == quiz_id
        ]
        sessions = self._decode(QuizSession, records)
        return sessions[0] if sessions else None

    # ----- 참가자 -----

    async def save_participant(self, participant: Participant) -> bool:
        async def remote() -> bool:
            await self.remote.insert_participant(participant)
            return True

        return await self._run(
            "save_participant", remote, lambda: self._save_participant_local(participant), False
        )

    def _save_participant_local(self, participant: Participant) -> bool:
        records = [
            r
            for r in self.local.read_collection(PARTICIPANTS_COLLECTION)
            if not _same_participant(r, participant.quiz_id, participant.device_id)
        ]
        records.append(codec.to_record(participant))
        self.local.write_collection(PARTICIPANTS_COLLECTION, records)
        return True

    async def update_status(self, quiz_id: str, device_id: str, status: ParticipantStatus) -> bool:
        """일치하는 참가자가 없으면 아무것도 만들지 않는다."""

        async def remote() -> bool:
            await self.remote.update_participant_status(quiz_id, device_id, status)
            return True

        return await self._run(
            "update_status",
            remote,
            lambda: self._update_status_local(quiz_id, device_id, status),
            False,
        )

    def _update_status_local(self, quiz_id: str, device_id: str, status: ParticipantStatus) -> bool:
        records = self.local.read_collection(PARTICIPANTS_COLLECTION)
        matched = False
        for r in records:
            if _same_participant(r, quiz_id, device_id):
                r["status"] = status
                matched = True
        if matched:
            self.local.write_collection(PARTICIPANTS_COLLECTION, records)
        return True

    async def get_participants(self, quiz_id: str) -> list[Participant]:
        """joinedAt 오름차순 (먼저 들어온 순)."""
        return await self._run(
            "get_participants",
            lambda: self.remote.list_participants(quiz_id),
            lambda: self._get_participants_local(quiz_id),
            [],
        )

    def _get_participants_local(self, quiz_id: str) -> list[Participant]:
        records = [
            r for r in self.local.read_collection(PARTICIPANTS_COLLECTION) if r.get("quizId") == quiz_id
        ]
        return sorted(self._decode(Participant, records), key=lambda p: p.joined_at)

    # ----- 결과 -----

    async def save_result(self, result: QuizResult) -> bool:
        async def remote() -> bool:
            await self.remote.upsert_result(result)
            return True

        return await self._run("save_result", remote, lambda: self._save_result_local(result), False)

    def _save_result_local(self, result: QuizResult) -> bool:
        records = self.local.read_collection(RESULTS_COLLECTION)
        for r in records:
            if r.get("quizId") == result.quiz_id:
                new = codec.to_record(result)
                r["score"] = new["score"]
                r["date"] = new["date"]
                break
        else:
            records.append(codec.to_record(result))
        self.local.write_collection(RESULTS_COLLECTION, records)
        return True

    async def get_all_results(self) -> list[QuizResult]:
        """date 내림차순 (최근 결과 먼저)."""
        return await self._run(
            "get_all_results",
            lambda: self.remote.list_results(),
            self._get_all_results_local,
            [],
        )

    def _get_all_results_local(self) -> list[QuizResult]:
        results = self._decode(QuizResult, self.local.read_collection(RESULTS_COLLECTION))
        return sorted(results, key=lambda r: r.date, reverse=True)

    async def clear_results(self) -> bool:
        """결과 전체 삭제. 어느 백엔드가 다음 조회를 처리하든 비어 있도록 로컬도 항상 비운다."""
        if self.remote is not None:
            try:
                await self._call_remote(self.remote.delete_results)
            except Exception as e:
                logger.warning("clear_results 원격 실패: %s", e)
        try:
            self.local.remove_collection(RESULTS_COLLECTION)
            return True
        except Exception:
            logger.exception("clear_results 로컬 저장소 실패")
            return False


def build_persistence(cfg: Settings = settings) -> PersistenceService:
    remote = None
    if cfg.remote_enabled:
        try:
            remote = RemoteStore.from_url(cfg.DATABASE_URL)
        except Exception:
            logger.exception("원격 DB 초기화 실패 → 로컬 저장소 사용")
    else:
        logger.info("개발 모드 (APP_ENV=%s) → 로컬 저장소 사용", cfg.APP_ENV)
    return PersistenceService(
        LocalStore(cfg.LOCAL_STORE_DIR),
        remote,
        remote_timeout=cfg.REMOTE_TIMEOUT_SEC,
    )


persistence_service = build_persistence()
