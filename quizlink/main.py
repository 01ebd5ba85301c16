"""
QuizLink CLI.

    python -m quizlink.main init-db
    python -m quizlink.main watch <quiz_id>
    python -m quizlink.main results [--pretty]
    python -m quizlink.main clear-results
    python -m quizlink.main join-url <quiz_id>
    python -m quizlink.main join <quiz_id> --name <이름> [--email <이메일>]

로그는 stderr로 출력된다.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from quizlink.schema.models import Participant
from quizlink.services.device import get_device_id
from quizlink.services.participant_poller import ParticipantPoller
from quizlink.services.persistence import PersistenceService, persistence_service
from quizlink.services.quiz_lifecycle import (
    JoinValidationError,
    QuizLifecycleService,
    SessionNotFoundError,
    join_url,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


async def init_db(persistence: PersistenceService) -> int:
    ready = await persistence.init_database()
    print("원격 DB 준비 완료" if ready else "로컬 저장소 사용 (원격 DB 없음)")
    return 0


async def watch(persistence: PersistenceService, quiz_id: str, interval: float | None) -> int:
    def show(participants: list[Participant]) -> None:
        names = ", ".join(f"{p.name}({p.status})" for p in participants) or "-"
        logger.info("quiz_id=%s 참가자 %d명: %s", quiz_id, len(participants), names)

    await persistence.init_database()
    async with ParticipantPoller(persistence, on_update=show, interval=interval) as poller:
        poller.bind(quiz_id)
        await asyncio.Event().wait()
    return 0


async def results(persistence: PersistenceService, pretty: bool) -> int:
    items = await persistence.get_all_results()
    print(
        json.dumps(
            [r.model_dump(mode="json", by_alias=True) for r in items],
            ensure_ascii=False,
            indent=2 if pretty else None,
        )
    )
    return 0


async def clear_results(persistence: PersistenceService) -> int:
    ok = await persistence.clear_results()
    print("결과 삭제 완료" if ok else "결과 삭제 실패")
    return 0 if ok else 1


async def join(persistence: PersistenceService, quiz_id: str, name: str, email: str | None) -> int:
    """이 기기의 deviceId로 참가. 같은 기기로 다시 실행하면 기존 기록을 갱신한다."""
    lifecycle = QuizLifecycleService(persistence)
    try:
        participant = await lifecycle.join(
            quiz_id,
            name=name,
            email=email,
            browser="quizlink-cli",
            device_id=get_device_id(persistence.local),
        )
    except JoinValidationError as e:
        print(e, file=sys.stderr)
        return 2
    except SessionNotFoundError:
        print("Quiz session not found or has expired", file=sys.stderr)
        return 1
    print(json.dumps(participant.model_dump(mode="json", by_alias=True), ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="퀴즈 세션·참가자·결과 저장소 도구")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="원격 테이블 생성 (이미 있으면 무시)")

    p_watch = sub.add_parser("watch", help="참가자 목록 폴링 (Ctrl+C로 종료)")
    p_watch.add_argument("quiz_id")
    p_watch.add_argument("--interval", type=float, default=None, help="폴링 간격(초), 기본 POLL_INTERVAL_SEC")

    p_results = sub.add_parser("results", help="전체 결과 출력 (최신순)")
    p_results.add_argument("--pretty", action="store_true", help="예쁘게 출력")

    sub.add_parser("clear-results", help="결과 전체 삭제")

    p_url = sub.add_parser("join-url", help="참가 링크 출력")
    p_url.add_argument("quiz_id")
    p_url.add_argument("--base-url", default=None, help="기본 PUBLIC_BASE_URL")

    p_join = sub.add_parser("join", help="이 기기로 퀴즈 참가")
    p_join.add_argument("quiz_id")
    p_join.add_argument("--name", required=True, help="참가자 이름")
    p_join.add_argument("--email", default=None, help="이메일 (선택)")
    return parser


async def run(args: argparse.Namespace, persistence: PersistenceService) -> int:
    if args.command == "init-db":
        return await init_db(persistence)
    if args.command == "watch":
        return await watch(persistence, args.quiz_id, args.interval)
    if args.command == "results":
        return await results(persistence, args.pretty)
    if args.command == "clear-results":
        return await clear_results(persistence)
    if args.command == "join":
        return await join(persistence, args.quiz_id, args.name, args.email)
    print(join_url(args.quiz_id, args.base_url))
    return 0


def main() -> None:
    args = build_parser().parse_args()
    try:
        code = asyncio.run(run(args, persistence_service))
    except KeyboardInterrupt:
        logger.info("종료")
        code = 0
    sys.exit(code)


if __name__ == "__main__":
    main()
