import uuid
from datetime import datetime, time
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from app.database import get_db
from app.dependencies import get_event_publisher, get_generation_job, get_lookup_adapter
from app.models import Manager
from app.services.auto_generation_job import AutoGenerateShiftsJob
from main import app

from conftest import contract_payload, schedule_payload


@pytest.fixture()
def job(session_factory, lookup, publisher):
    return AutoGenerateShiftsJob(
        session_factory=session_factory,
        lookup=lookup,
        publisher=publisher,
        run_time=time(2, 0),
        lookahead_days=7,
        clock=lambda: datetime(2024, 1, 1, 1, 0, tzinfo=ZoneInfo("Asia/Ho_Chi_Minh"))
    )


@pytest.fixture()
def client(db_session, lookup, publisher, job):
    def _get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_lookup_adapter] = lambda: lookup
    app.dependency_overrides[get_event_publisher] = lambda: publisher
    app.dependency_overrides[get_generation_job] = lambda: job
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def schedule(register_contract):
    schedule = schedule_payload()
    register_contract(contract_payload([schedule], contract_number="CT-API-01"))
    return schedule


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").status_code == 200


def test_generate_shifts(client, manager, schedule, publisher):
    response = client.post("/api/shifts/generate", json={
        "actor_id": str(manager.id),
        "schedule_template_ids": [schedule["schedule_id"]],
        "from_date": "2024-01-01",
        "days": 7
    })

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["shifts_created_count"] == 5
    assert body["shifts_skipped_count"] == 2
    assert len(body["created_shift_ids"]) == 5
    assert body["generated_from"] == "2024-01-01"
    assert body["generated_to"] == "2024-01-08"
    assert len(publisher.events) == 1


def test_generate_requires_permitted_actor(client, db_session, schedule):
    actor = Manager(id=uuid.uuid4(), full_name="Inativo", is_active=False)
    db_session.add(actor)
    db_session.commit()

    response = client.post("/api/shifts/generate", json={
        "actor_id": str(actor.id),
        "schedule_template_ids": [schedule["schedule_id"]]
    })

    assert response.status_code == 403


def test_generate_unknown_templates(client, manager):
    response = client.post("/api/shifts/generate", json={
        "actor_id": str(manager.id),
        "schedule_template_ids": [str(uuid.uuid4())]
    })

    assert response.status_code == 404


def test_generate_validates_body(client, manager):
    response = client.post("/api/shifts/generate", json={
        "actor_id": str(manager.id),
        "schedule_template_ids": [],
        "days": 0
    })

    assert response.status_code == 422


def test_generate_lookup_failure(client, manager, schedule, request_client):
    request_client.failing.add("GetContractShiftSchedules")

    response = client.post("/api/shifts/generate", json={
        "actor_id": str(manager.id),
        "schedule_template_ids": [schedule["schedule_id"]]
    })

    assert response.status_code == 502


def test_check_contract(client, schedule, request_client):
    contract_id = next(iter(request_client.contracts))

    response = client.get(f"/api/shifts/background-job/check-contract/{contract_id}")

    assert response.status_code == 200
    body = response.json()
    assert body["contract"]["contract_number"] == "CT-API-01"
    assert [t["id"] for t in body["templates"]] == [schedule["schedule_id"]]
    assert body["shift_statistics"]["total_shifts"] == 0
    analysis = body["background_job_analysis"]
    assert analysis["will_trigger"] is True
    assert analysis["eligible"] is True
    assert analysis["reason"] == "Nenhum turno gerado ainda"
    assert analysis["next_generation_date"] == "2024-01-01"


def test_check_unknown_contract(client):
    response = client.get(f"/api/shifts/background-job/check-contract/{uuid.uuid4()}")

    assert response.status_code == 404


def test_check_contract_lookup_failure(client, request_client):
    request_client.failing.add("GetContractShiftSchedules")

    response = client.get(f"/api/shifts/background-job/check-contract/{uuid.uuid4()}")

    assert response.status_code == 502


def test_status_and_manual_run(client, manager, schedule):
    before = client.get("/api/shifts/background-job/status").json()
    assert before["total_contracts_with_auto_generate"] == 1
    assert len(before["contracts_needing_generation"]) == 1
    assert before["managers_with_permission"] == 1
    assert before["job"]["run_time"] == "02:00"
    assert before["job"]["next_run"].startswith("2024-01-01T02:00")

    run = client.post("/api/shifts/background-job/run")
    assert run.status_code == 200
    assert run.json()["succeeded"] == 1
    assert run.json()["shifts_created"] == 22

    after = client.get("/api/shifts/background-job/status").json()
    assert after["contracts_needing_generation"] == []
    assert after["stats"]["total_shifts"] == 22
    assert after["stats"]["future_shifts"] == 22
    assert after["job"]["last_run"]["shifts_created"] == 22
