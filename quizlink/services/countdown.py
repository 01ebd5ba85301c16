"""
퀴즈 제한 시간 카운트다운 (1초 단위).
0이 되면 on_expire를 한 번 호출하고 끝난다. cancel()로 즉시 중단.
"""

import asyncio
import inspect
import logging
from contextlib import suppress
from typing import Any, Callable

from quizlink.core.constants import QUIZ_TIME_LIMITS

logger = logging.getLogger(__name__)


def format_time(seconds: int) -> str:
    """MM:SS"""
    minutes, rest = divmod(max(seconds, 0), 60)
    return f"{minutes:02d}:{rest:02d}"


class QuizCountdown:
    def __init__(
        self,
        seconds: int,
        on_tick: Callable[[int], Any] | None = None,
        on_expire: Callable[[], Any] | None = None,
        tick: float = 1.0,
    ) -> None:
        self.time_left = seconds
        self.on_tick = on_tick
        self.on_expire = on_expire
        self.tick = tick
        self._task: asyncio.Task | None = None

    @classmethod
    def for_quiz(cls, quiz_type: str, **kwargs: Any) -> "QuizCountdown":
        return cls(QUIZ_TIME_LIMITS[quiz_type], **kwargs)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running or self.time_left <= 0:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        if self._task is not None:
            with suppress(asyncio.CancelledError):
                await self._task

    async def _call(self, fn: Callable[..., Any] | None, *args: Any) -> None:
        if fn is None:
            return
        value = fn(*args)
        if inspect.isawaitable(value):
            await value

    async def _run(self) -> None:
        while self.time_left > 0:
            await asyncio.sleep(self.tick)
            self.time_left -= 1
            await self._call(self.on_tick, self.time_left)
        logger.info("제한 시간 종료")
        await self._call(self.on_expire)
