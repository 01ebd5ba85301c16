"""
호스트 측 참가자 목록 폴링.

상태는 idle(바인딩된 quiz_id 없음) / polling(quiz_id에 바인딩) 두 가지.
polling에 들어가면 즉시 1회 조회하고, 이후 POLL_INTERVAL_SEC마다 반복한다.
quiz_id가 바뀌거나 unbind/aclose가 호출되면 기존 태스크를 취소한다.
목록의 지연은 최대 폴링 간격만큼이다 (push 없음).
"""

import asyncio
import inspect
import logging
from contextlib import suppress
from typing import Any, Callable

from quizlink.core.config import settings
from quizlink.schema.models import Participant
from quizlink.services.persistence import PersistenceService

logger = logging.getLogger(__name__)

OnUpdate = Callable[[list[Participant]], Any]


async def _maybe_await(value: Any) -> None:
    if inspect.isawaitable(value):
        await value


class ParticipantPoller:
    def __init__(
        self,
        persistence: PersistenceService,
        on_update: OnUpdate | None = None,
        interval: float | None = None,
    ) -> None:
        self.persistence = persistence
        self.on_update = on_update
        self.interval = interval if interval is not None else settings.POLL_INTERVAL_SEC
        self.participants: list[Participant] = []
        self._quiz_id: str | None = None
        self._task: asyncio.Task | None = None

    @property
    def quiz_id(self) -> str | None:
        return self._quiz_id

    @property
    def state(self) -> str:
        if self._task is not None and not self._task.done():
            return "polling"
        return "idle"

    def bind(self, quiz_id: str | None) -> None:
        """quiz_id로 폴링 시작. 같은 quiz_id면 그대로, 다르면 기존 폴링 취소 후 재시작."""
        if quiz_id == self._quiz_id and self.state == "polling":
            return
        self.unbind()
        if not quiz_id:
            return
        self._quiz_id = quiz_id
        self.participants = []
        self._task = asyncio.get_running_loop().create_task(self._run(quiz_id))
        logger.debug("폴링 시작 quiz_id=%s interval=%ss", quiz_id, self.interval)

    def unbind(self) -> None:
        if self._task is not None:
            self._task.cancel()
            logger.debug("폴링 취소 quiz_id=%s", self._quiz_id)
        self._task = None
        self._quiz_id = None

    async def aclose(self) -> None:
        task = self._task
        self.unbind()
        if task is not None:
            with suppress(asyncio.CancelledError):
                await task

    async def poll_once(self, quiz_id: str) -> list[Participant]:
        participants = await self.persistence.get_participants(quiz_id)
        # 바인딩이 바뀐 뒤 도착한 응답은 버린다
        if quiz_id != self._quiz_id:
            return participants
        self.participants = participants
        if self.on_update is not None:
            await _maybe_await(self.on_update(participants))
        return participants

    async def _run(self, quiz_id: str) -> None:
        while True:
            try:
                await self.poll_once(quiz_id)
            except Exception:
                logger.exception("참가자 폴링 오류 quiz_id=%s", quiz_id)
            await asyncio.sleep(self.interval)

    async def __aenter__(self) -> "ParticipantPoller":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()
