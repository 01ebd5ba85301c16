"""
이중 저장소 퍼사드: upsert/중복 제거, 원격 실패 시 로컬 대체, 예외 비전파.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from quizlink.core.constants import PARTICIPANTS_COLLECTION, RESULTS_COLLECTION, SESSIONS_COLLECTION
from quizlink.db.local_store import LocalStore
from quizlink.schema.models import Participant, ParticipantSnapshot, QuizResult
from quizlink.services.persistence import PersistenceService

from conftest import BrokenLocalStore, FailingRemoteStore, SlowRemoteStore, T0, at


async def test_rejoin_keeps_single_record_with_latest_fields(persistence, make_participant):
    await persistence.save_participant(make_participant(name="Ana"))
    await persistence.save_participant(make_participant(name="Ana Maria", email="ana@example.com", joined=30))

    participants = await persistence.get_participants("quiz_1")
    assert len(participants) == 1
    assert participants[0].name == "Ana Maria"
    assert participants[0].email == "ana@example.com"


async def test_participants_are_scoped_and_ordered_by_join_time(persistence, make_participant):
    await persistence.save_participant(make_participant(name="Late", device_id="dev_b", joined=60))
    await persistence.save_participant(make_participant(name="Early", device_id="dev_a", joined=0))
    await persistence.save_participant(make_participant(name="Other", device_id="dev_c", quiz_id="quiz_2"))

    names = [p.name for p in await persistence.get_participants("quiz_1")]
    assert names == ["Early", "Late"]


async def test_save_session_twice_upserts(persistence, make_session):
    await persistence.save_session(make_session(status="active"))
    await persistence.save_session(make_session(status="completed", completed_at=at(300)))

    session = await persistence.get_session("quiz_1")
    assert session.status == "completed"
    assert session.completed_at == at(300)
    assert session.created_at == T0


async def test_session_upsert_only_touches_mutable_fields(persistence, make_session):
    await persistence.save_session(make_session(quiz_type="refresh"))
    await persistence.save_session(make_session(quiz_type="final", status="completed"))

    session = await persistence.get_session("quiz_1")
    assert session.quiz_type == "refresh"
    assert session.status == "completed"


async def test_unknown_session_is_none(persistence):
    assert await persistence.get_session("nope") is None


async def test_update_status(persistence, make_participant):
    await persistence.save_participant(make_participant())
    assert await persistence.update_status("quiz_1", "dev_a", "active")
    [p] = await persistence.get_participants("quiz_1")
    assert p.status == "active"


async def test_update_status_for_unknown_identity_is_noop(persistence, make_participant):
    await persistence.save_participant(make_participant())
    await persistence.update_status("quiz_1", "dev_missing", "active")
    await persistence.update_status("quiz_missing", "dev_a", "active")

    assert await persistence.get_participants("quiz_missing") == []
    [p] = await persistence.get_participants("quiz_1")
    assert p.status == "joined"


async def test_result_upsert_keeps_original_snapshot(persistence, make_participant):
    snapshot = [ParticipantSnapshot.of(make_participant())]
    await persistence.save_result(
        QuizResult(quiz_id="quiz_1", quiz_type="refresh", score=10, total_questions=3, date=T0, participants=snapshot)
    )
    await persistence.save_result(
        QuizResult(quiz_id="quiz_1", quiz_type="refresh", score=20, total_questions=3, date=at(10), participants=[])
    )

    [result] = await persistence.get_all_results()
    assert result.score == 20
    assert result.date == at(10)
    assert [p.name for p in result.participants] == ["Ana"]


async def test_snapshot_not_affected_by_later_status_change(persistence, make_participant):
    await persistence.save_participant(make_participant())
    participants = await persistence.get_participants("quiz_1")
    await persistence.save_result(
        QuizResult(
            quiz_id="quiz_1",
            quiz_type="final",
            score=0,
            total_questions=5,
            participants=[ParticipantSnapshot.of(p) for p in participants],
        )
    )
    await persistence.save_participant(make_participant(name="Renamed"))

    [result] = await persistence.get_all_results()
    assert result.participants[0].name == "Ana"


async def test_results_newest_first(persistence):
    for quiz_id, date in [("q_old", at(0)), ("q_new", at(200)), ("q_mid", at(100))]:
        await persistence.save_result(
            QuizResult(quiz_id=quiz_id, quiz_type="refresh", score=0, total_questions=3, date=date)
        )
    assert [r.quiz_id for r in await persistence.get_all_results()] == ["q_new", "q_mid", "q_old"]


async def test_naive_timestamps_are_read_as_utc(persistence, make_participant):
    await persistence.save_participant(make_participant(name="Aware", device_id="dev_a"))
    await persistence.save_participant(
        Participant(quiz_id="quiz_1", device_id="dev_b", name="Naive", joined_at=datetime(2026, 10, 18, 8, 0))
    )

    participants = await persistence.get_participants("quiz_1")
    assert [p.name for p in participants] == ["Naive", "Aware"]
    assert participants[0].joined_at == datetime(2026, 10, 18, 8, 0, tzinfo=timezone.utc)

    for quiz_id, date in [("q_aware", T0), ("q_naive", datetime(2026, 10, 18, 10, 0))]:
        await persistence.save_result(
            QuizResult(quiz_id=quiz_id, quiz_type="refresh", score=0, total_questions=3, date=date)
        )
    assert [r.quiz_id for r in await persistence.get_all_results()] == ["q_naive", "q_aware"]


async def test_clear_results_empties(persistence):
    await persistence.save_result(QuizResult(quiz_id="q", quiz_type="refresh", score=0, total_questions=3))
    assert await persistence.clear_results()
    assert await persistence.get_all_results() == []


async def test_clear_results_when_nothing_saved(persistence):
    assert await persistence.clear_results()
    assert await persistence.get_all_results() == []


# ----- 원격 / 로컬 경로 -----


async def test_healthy_remote_never_touches_local(with_remote, local_store, make_participant, make_session):
    await with_remote.save_session(make_session())
    await with_remote.save_participant(make_participant())
    await with_remote.save_result(QuizResult(quiz_id="quiz_1", quiz_type="refresh", score=0, total_questions=3))

    assert not local_store.base_dir.exists()


async def test_clear_results_also_clears_local_copy(with_remote, fake_remote, local_store):
    local_store.write_collection(RESULTS_COLLECTION, [{"quizId": "stale"}])
    await with_remote.save_result(QuizResult(quiz_id="q", quiz_type="refresh", score=0, total_questions=3))

    assert await with_remote.clear_results()
    assert fake_remote.results == {}
    assert local_store.read_collection(RESULTS_COLLECTION) == []


async def test_failing_remote_matches_local_only(tmp_path, make_participant, make_session):
    failing = PersistenceService(LocalStore(tmp_path / "a"), FailingRemoteStore())
    local = PersistenceService(LocalStore(tmp_path / "b"))
    result = QuizResult(quiz_id="quiz_1", quiz_type="refresh", score=20, total_questions=3, date=T0)

    steps = [
        lambda s: s.save_session(make_session()),
        lambda s: s.save_participant(make_participant()),
        lambda s: s.save_participant(make_participant(name="Bo", device_id="dev_b", joined=5)),
        lambda s: s.update_status("quiz_1", "dev_a", "active"),
        lambda s: s.update_status("quiz_1", "dev_x", "active"),
        lambda s: s.get_participants("quiz_1"),
        lambda s: s.get_session("quiz_1"),
        lambda s: s.save_result(result),
        lambda s: s.get_all_results(),
        lambda s: s.clear_results(),
        lambda s: s.get_all_results(),
    ]
    for step in steps:
        assert await step(failing) == await step(local)


async def test_failing_remote_is_attempted_first(local_store, make_participant):
    remote = FailingRemoteStore()
    service = PersistenceService(local_store, remote)
    await service.save_participant(make_participant())
    await service.get_participants("quiz_1")
    assert remote.calls == ["insert_participant", "list_participants"]
    assert len(local_store.read_collection(PARTICIPANTS_COLLECTION)) == 1


async def test_hung_remote_times_out_to_local(local_store, make_participant):
    service = PersistenceService(local_store, SlowRemoteStore(), remote_timeout=0.05)
    await PersistenceService(local_store).save_participant(make_participant())

    [p] = await service.get_participants("quiz_1")
    assert p.name == "Ana"


async def test_both_backends_down_never_raise(tmp_path, make_participant, make_session):
    service = PersistenceService(BrokenLocalStore(tmp_path), FailingRemoteStore())

    assert await service.save_session(make_session()) is False
    assert await service.save_participant(make_participant()) is False
    assert await service.update_status("quiz_1", "dev_a", "active") is False
    assert await service.get_participants("quiz_1") == []
    assert await service.get_session("quiz_1") is None
    assert await service.save_result(QuizResult(quiz_id="q", quiz_type="final", score=0, total_questions=5)) is False
    assert await service.get_all_results() == []
    assert await service.clear_results() is False


async def test_invalid_local_records_are_skipped(local_only, local_store, make_participant):
    await local_only.save_participant(make_participant())
    records = local_store.read_collection(PARTICIPANTS_COLLECTION)
    local_store.write_collection(PARTICIPANTS_COLLECTION, records + [{"quizId": "quiz_1", "name": ""}])

    assert [p.name for p in await local_only.get_participants("quiz_1")] == ["Ana"]


async def test_local_records_without_timezone_are_not_dropped(local_only, local_store, make_participant):
    await local_only.save_participant(make_participant())
    records = local_store.read_collection(PARTICIPANTS_COLLECTION)
    legacy = {"quizId": "quiz_1", "deviceId": "dev_old", "name": "Old", "joinedAt": "2026-10-18T08:00:00"}
    local_store.write_collection(PARTICIPANTS_COLLECTION, records + [legacy])

    assert [p.name for p in await local_only.get_participants("quiz_1")] == ["Old", "Ana"]


def test_result_score_must_be_whole_questions():
    with pytest.raises(ValidationError):
        QuizResult(quiz_id="q", quiz_type="refresh", score=15, total_questions=3)


async def test_local_session_record_layout(local_only, local_store, make_session):
    await local_only.save_session(make_session())
    [record] = local_store.read_collection(SESSIONS_COLLECTION)
    assert set(record) == {"quizId", "quizType", "createdAt", "status", "completedAt"}
    assert record["completedAt"] is None


async def test_init_database(local_only, with_remote, failing_remote, fake_remote):
    assert await local_only.init_database() is False
    assert await with_remote.init_database() is True
    assert await with_remote.init_database() is True
    assert fake_remote.schema_calls == 2
    assert await failing_remote.init_database() is False
