"""Tests for the submission engine and assessment routes."""

import multiprocessing
import sys
from concurrent.futures import ThreadPoolExecutor

import pytest

from packages.common.errors import AlreadySubmitted, StorageError, TestNotFound
from packages.common.storage import RESULTS, RecordStore
from packages.schemas.catalog import TestInput
from services.assessment.engine import SubmissionEngine
from services.catalog.repo import CatalogRepo


def _four_question_test(catalog, direction):
    return catalog.create_test(TestInput(
        title="Algoritmlar",
        direction=direction.id,
        time_limit=20,
        attempts=1,
        questions=[
            {"question": f"Q{i}", "options": ["a", "b", "c", "d"], "correct": i} for i in range(4)
        ],
    ))


@pytest.mark.asyncio
async def test_submit_scores_and_records_once(client, catalog, direction, learner_headers, store) -> None:
    test = _four_question_test(catalog, direction)
    body = {"testId": test.id, "answers": [0, 1, 9, 3], "timeSpent": 95}

    r = await client.post("/api/submit-test", json=body, headers=learner_headers)
    assert r.status_code == 200
    assert r.json() == {"success": True, "score": 3, "totalQuestions": 4, "percentage": 75}

    again = await client.post("/api/submit-test", json=body, headers=learner_headers)
    assert again.status_code == 400
    assert again.json() == {"success": False, "message": "You have already submitted this test"}

    stored = store.load(RESULTS)
    assert len(stored) == 1
    assert stored[0]["timeSpent"] == 95
    assert [q["isCorrect"] for q in stored[0]["questionResults"]] == [True, True, False, True]


@pytest.mark.asyncio
async def test_submit_unknown_test_is_404(client, learner_headers) -> None:
    r = await client.post("/api/submit-test", json={"testId": "nope", "answers": []}, headers=learner_headers)
    assert r.status_code == 404
    assert r.json()["success"] is False


@pytest.mark.asyncio
async def test_submit_requires_test_id_and_answers(client, learner_headers) -> None:
    r = await client.post("/api/submit-test", json={"answers": [1]}, headers=learner_headers)
    assert r.status_code == 400
    r = await client.post("/api/submit-test", json={"testId": "x"}, headers=learner_headers)
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Test ID and answers are required"}


@pytest.mark.asyncio
async def test_submit_requires_token(client) -> None:
    r = await client.post("/api/submit-test", json={"testId": "x", "answers": []})
    assert r.status_code == 401


def test_engine_rejects_unknown_test(engine) -> None:
    with pytest.raises(TestNotFound):
        engine.submit("u1", "missing", [0])


def test_storage_failure_records_nothing(engine, catalog, direction, store, monkeypatch) -> None:
    test = _four_question_test(catalog, direction)
    original_save = store.save

    def failing_save(collection, documents):
        if collection == RESULTS:
            raise StorageError(detail="disk full")
        return original_save(collection, documents)

    monkeypatch.setattr(store, "save", failing_save)
    with pytest.raises(StorageError):
        engine.submit("u1", test.id, [0, 1, 2, 3])
    monkeypatch.undo()

    assert store.load(RESULTS) == []
    assert engine.submit("u1", test.id, [0, 1, 2, 3]).percentage == 100


def test_concurrent_submissions_record_exactly_one(engine, catalog, direction, store) -> None:
    test = _four_question_test(catalog, direction)

    def attempt(_):
        try:
            engine.submit("racer", test.id, [0, 1, 2, 3])
            return "ok"
        except AlreadySubmitted:
            return "dup"

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(attempt, range(16)))

    assert outcomes.count("ok") == 1
    assert outcomes.count("dup") == 15
    assert len([r for r in store.load(RESULTS) if r["userId"] == "racer"]) == 1


def _submit_from_process(data_dir, user_id, test_id, barrier, outcomes) -> None:
    store = RecordStore(data_dir)
    engine = SubmissionEngine(store, CatalogRepo(store))
    barrier.wait(timeout=10)
    try:
        engine.submit(user_id, test_id, [0, 1, 2, 3])
        outcomes.put("ok")
    except AlreadySubmitted:
        outcomes.put("dup")


@pytest.mark.skipif(sys.platform == "win32", reason="needs the fork start method")
def test_submissions_from_two_processes_record_exactly_one(catalog, direction, store, settings) -> None:
    test = _four_question_test(catalog, direction)
    ctx = multiprocessing.get_context("fork")

    for round_no in range(5):
        user_id = f"proc-{round_no}"
        barrier = ctx.Barrier(2)
        outcomes = ctx.Queue()
        workers = [
            ctx.Process(target=_submit_from_process, args=(settings.DATA_DIR, user_id, test.id, barrier, outcomes))
            for _ in range(2)
        ]
        for w in workers:
            w.start()
        for w in workers:
            w.join(timeout=30)
        results = sorted(outcomes.get(timeout=5) for _ in workers)

        assert results == ["dup", "ok"]
        assert len([r for r in store.load(RESULTS) if r["userId"] == user_id]) == 1


@pytest.mark.asyncio
async def test_my_results_joins_titles_and_survives_deleted_tests(
    client, catalog, direction, learner, learner_headers, engine
) -> None:
    kept = _four_question_test(catalog, direction)
    gone = _four_question_test(catalog, direction)
    engine.submit(learner.id, kept.id, [0, 1, 2, 3], 10)
    engine.submit(learner.id, gone.id, [0, 0, 0, 0], 10)
    engine.submit("someone-else", kept.id, [0, 0, 0, 0], 10)
    catalog.delete_test(gone.id)

    r = await client.get("/api/my-results", headers=learner_headers)
    assert r.status_code == 200
    titles = {x["testId"]: x["testTitle"] for x in r.json()}
    assert titles == {kept.id: "Algoritmlar", gone.id: "Unknown test"}


@pytest.mark.asyncio
async def test_admin_results_and_statistics(
    client, catalog, direction, learner, admin_headers, learner_headers, engine
) -> None:
    test = _four_question_test(catalog, direction)
    catalog.add_direction("Dizayn")
    engine.submit(learner.id, test.id, [0, 1, 2, 3], 30)
    engine.submit("ghost", test.id, [0, 1, 2, 3], 30)

    r = await client.get("/api/admin/results", headers=admin_headers)
    assert r.status_code == 200
    names = sorted(x["userName"] for x in r.json())
    assert names == ["Alice Karimova", "Unknown"]

    r = await client.get("/api/admin/statistics", headers=admin_headers)
    assert r.status_code == 200
    stats = r.json()
    assert stats["totalUsers"] == 1
    assert stats["totalTests"] == 1
    assert stats["totalResults"] == 2
    assert stats["directionStats"]["Dasturlash"] == {"users": 2, "tests": 1, "results": 1}
    assert stats["directionStats"]["Dizayn"] == {"users": 0, "tests": 0, "results": 0}

    denied = await client.get("/api/admin/statistics", headers=learner_headers)
    assert denied.status_code == 403
