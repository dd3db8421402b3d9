"""API tests for the job, designer and metrics endpoints with in-memory repositories."""

from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from fo_tracker.application.services import JobSession, JobSessionRegistry, MetricsService
from fo_tracker.infrastructure.dependencies import get_metrics_service, get_session_registry
from fo_tracker.main import app

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def repo(make_job, make_job_repository):
    return make_job_repository([
        make_job("a", 1001, item="Expositor", created_at=T0),
        make_job("b", 1002, item="Cartaz", designer_id="d-ana", in_progress=True, created_at=T0),
    ])


@pytest.fixture
def overrides(repo, designer_repository):
    registry = JobSessionRegistry(lambda: JobSession(repo, designer_repository))
    app.dependency_overrides[get_session_registry] = lambda: registry
    app.dependency_overrides[get_metrics_service] = lambda: MetricsService(repo, designer_repository)
    yield registry
    app.dependency_overrides.clear()


def _client(session_id: str = "s1") -> AsyncClient:
    return AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-Edit-Session": session_id},
    )


@pytest.mark.asyncio
async def test_list_jobs_and_designers(overrides):
    async with _client() as client:
        jobs = await client.get("/api/v1/jobs", params={"sort": "work_order_number", "direction": "asc"})
        designers = await client.get("/api/v1/designers")

    assert jobs.status_code == 200
    assert [j["work_order_number"] for j in jobs.json()] == [1001, 1002]
    assert not any(j["has_pending_edits"] for j in jobs.json())
    assert [d["name"] for d in designers.json()] == ["Ana", "bruno"]


@pytest.mark.asyncio
async def test_edit_is_visible_only_in_its_session(overrides):
    async with _client("s1") as mine, _client("s2") as theirs:
        edit = await mine.patch("/api/v1/jobs/a", json={"field": "designer_id", "value": "d-bruno"})
        my_rows = (await mine.get("/api/v1/jobs", params={"fo": "1001"})).json()
        their_rows = (await theirs.get("/api/v1/jobs", params={"fo": "1001"})).json()
        pending = (await mine.get("/api/v1/jobs/pending")).json()

    assert edit.status_code == 200
    assert edit.json()["accepted"] is True
    assert edit.json()["updates"]["in_progress"] is True
    assert my_rows[0]["designer_id"] == "d-bruno"
    assert my_rows[0]["has_pending_edits"] is True
    assert their_rows[0]["designer_id"] is None
    assert pending == {"a": {"designer_id": "d-bruno", "in_progress": True, "has_questions": False, "mockup_sent": False}}


@pytest.mark.asyncio
async def test_rejected_edit_is_returned_not_raised(overrides):
    async with _client() as client:
        response = await client.patch("/api/v1/jobs/a", json={"field": "in_progress", "value": True})

    assert response.status_code == 200
    assert response.json() == {
        "accepted": False,
        "updates": {},
        "warning": None,
        "reason": "assign a designer first",
    }


@pytest.mark.asyncio
async def test_edit_validation_errors(overrides):
    async with _client() as client:
        read_only = await client.patch("/api/v1/jobs/a", json={"field": "work_order_number", "value": 5})
        unknown_job = await client.patch("/api/v1/jobs/zzz", json={"field": "path", "value": "/x"})

    assert read_only.status_code == 422
    assert unknown_job.status_code == 404


@pytest.mark.asyncio
async def test_save_discard_and_refresh(overrides, repo):
    async with _client() as client:
        await client.patch("/api/v1/jobs/b", json={"field": "path", "value": "/srv/fo/1002"})
        await client.patch("/api/v1/jobs/a", json={"field": "path", "value": "/tmp/discard-me"})
        discard = await client.delete("/api/v1/jobs/a/pending")
        save = await client.post("/api/v1/jobs/save")
        again = await client.post("/api/v1/jobs/save")
        refresh = await client.post("/api/v1/jobs/refresh")

    assert discard.status_code == 204
    assert save.status_code == 200
    assert save.json()["status"] == "success"
    assert save.json()["succeeded_ids"] == ["b"]
    assert again.json()["status"] == "nothing_to_save"
    assert refresh.status_code == 204
    assert repo.rows["b"].path == "/srv/fo/1002"
    assert repo.rows["a"].path is None


@pytest.mark.asyncio
async def test_save_rejected_without_path(overrides):
    async with _client() as client:
        await client.patch("/api/v1/jobs/a", json={"field": "paginated", "value": True})
        response = await client.post("/api/v1/jobs/save")

    assert response.status_code == 200
    assert response.json()["status"] == "rejected"
    assert response.json()["invalid_work_orders"] == [1001]


@pytest.mark.asyncio
async def test_create_jobs(overrides):
    async with _client() as client:
        created = await client.post(
            "/api/v1/jobs", json={"work_order_number": 1500, "items": ["Banner", " "]}
        )
        duplicate = await client.post(
            "/api/v1/jobs", json={"work_order_number": 1001, "items": ["Banner"]}
        )
        blank = await client.post("/api/v1/jobs", json={"work_order_number": 1600, "items": [" "]})
        too_big = await client.post("/api/v1/jobs", json={"work_order_number": 10000, "items": ["x"]})

    assert created.status_code == 201
    assert [j["item"] for j in created.json()] == ["Banner"]
    assert duplicate.status_code == 409
    assert blank.status_code == 422
    assert too_big.status_code == 422


@pytest.mark.asyncio
async def test_delete_job(overrides, repo):
    async with _client() as client:
        first = await client.delete("/api/v1/jobs/a")
        second = await client.delete("/api/v1/jobs/a")

    assert first.status_code == 204
    assert second.status_code == 404
    assert "a" not in repo.rows


@pytest.mark.asyncio
async def test_remote_failures_map_to_gateway_errors(overrides, repo):
    async with _client() as client:
        await client.get("/api/v1/jobs")
        repo.fail.update({"delete_job", "fetch_jobs"})
        delete = await client.delete("/api/v1/jobs/a")
        refresh = await client.post("/api/v1/jobs/refresh")

    assert delete.status_code == 502
    assert refresh.status_code == 502


@pytest.mark.asyncio
async def test_unreachable_store_on_first_load(overrides, repo):
    repo.fail.add("fetch_jobs")

    async with _client("fresh") as client:
        response = await client.get("/api/v1/jobs")

    assert response.status_code == 503


@pytest.mark.asyncio
async def test_metrics(overrides):
    async with _client() as client:
        response = await client.get("/api/v1/metrics", params={"year": 2024})
        bad_month = await client.get("/api/v1/metrics", params={"year": 2024, "month": 13})

    assert response.status_code == 200
    data = response.json()
    assert data["total_jobs"] == 2
    assert data["period"] == {"year": 2024, "month": None}
    assert len(data["opened_per_month"]) == 12
    assert bad_month.status_code == 422


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"field": "in_progress", "value": 1},
        {"field": "has_questions", "value": "true"},
        {"field": "paginated", "value": 1},
        {"field": "mockup_sent", "value": None},
        {"field": "path", "value": 42},
    ],
)
async def test_edit_with_wrong_value_type_is_unprocessable(overrides, body):
    async with _client() as client:
        response = await client.patch("/api/v1/jobs/b", json=body)
        pending = (await client.get("/api/v1/jobs/pending")).json()

    assert response.status_code == 422
    assert pending == {}


@pytest.mark.asyncio
async def test_edit_with_unknown_designer_is_unprocessable(overrides):
    async with _client() as client:
        response = await client.patch("/api/v1/jobs/a", json={"field": "designer_id", "value": "d-ghost"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_save_reports_conflicting_server_values(overrides, repo):
    async with _client() as client:
        await client.patch("/api/v1/jobs/b", json={"field": "path", "value": "/mine"})
        repo.touch("b", datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc), path="/theirs")
        response = await client.post("/api/v1/jobs/save")

    assert response.status_code == 200
    assert response.json()["conflicted_ids"] == ["b"]
    assert response.json()["conflicts"] == {"b": {"path": "/theirs"}}


@pytest.mark.asyncio
async def test_close_session_drops_it_from_registry(overrides):
    async with _client("leaving") as client:
        await client.patch("/api/v1/jobs/a", json={"field": "path", "value": "/tmp/x"})
        assert "leaving" in overrides

        closed = await client.delete("/api/v1/jobs/session")
        pending = (await client.get("/api/v1/jobs/pending")).json()

    assert closed.status_code == 204
    assert pending == {}
