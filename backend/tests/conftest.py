import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["SCHEDULER_ENABLED"] = "false"

import uuid
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base
from app.exceptions import EventPublishError, LookupTimeoutError
from app.models import Manager, ShiftTemplate
from app.services.contract_lookup_adapter import ContractLookupAdapter

MONDAY = date(2024, 1, 1)


class FakeRequestClient:
    """Responde às mensagens do serviço de contratos a partir de dicionários em memória."""

    def __init__(self):
        self.holidays = {}
        self.closed = {}
        self.contracts = {}
        self.failing = set()
        self.calls = []

    def request(self, message_type, payload, timeout):
        self.calls.append((message_type, payload))
        if message_type in self.failing:
            raise LookupTimeoutError(f"{message_type}: sem resposta em {timeout}s")

        if message_type == "CheckPublicHoliday":
            return self._holiday(payload["date"])
        if message_type == "BatchCheckPublicHolidays":
            return {"holidays": {d: self._holiday(d) for d in payload["dates"]}}
        if message_type == "CheckLocationClosed":
            reason = self.closed.get((payload["location_id"], payload["date"]))
            return {"is_closed": reason is not None, "reason": reason}
        if message_type == "GetContractShiftSchedules":
            return self.contracts.get(payload["contract_id"], {"found": False})
        raise AssertionError(f"mensagem inesperada: {message_type}")

    def _holiday(self, iso_date):
        name = self.holidays.get(iso_date)
        return {"is_holiday": name is not None, "name": name, "category": "NATIONAL" if name else None}

    def count(self, message_type):
        return sum(1 for m, _ in self.calls if m == message_type)


class FakePublisher:

    def __init__(self, fail=False):
        self.fail = fail
        self.events = []

    def publish(self, event_name, event):
        if self.fail:
            raise EventPublishError("broker indisponível")
        self.events.append((event_name, event))
        return 1


def location_payload(name="Torre A", **overrides):
    payload = {
        "location_id": str(uuid.uuid4()),
        "location_name": name,
        "location_code": name.upper().replace(" ", "-"),
        "address": "Rua 1, 100",
        "guards_required": 1
    }
    payload.update(overrides)
    return payload


def schedule_payload(name="Turno Diurno", **overrides):
    payload = {
        "schedule_id": str(uuid.uuid4()),
        "schedule_name": name,
        "schedule_type": "REGULAR",
        "location_id": None,
        "shift_start_time": "08:00",
        "shift_end_time": "17:00",
        "crosses_midnight": False,
        "break_minutes": 60,
        "guards_per_shift": 1,
        "effective_from": "2023-01-01",
        "effective_to": None
    }
    payload.update(overrides)
    return payload


def contract_payload(schedules, locations=None, exceptions=None, **contract_fields):
    contract = {
        "contract_id": str(uuid.uuid4()),
        "contract_number": "CT-2024-001",
        "start_date": "2023-01-01",
        "end_date": "2024-12-31",
        "status": "ACTIVE",
        "is_active": True,
        "auto_generate_shifts": True,
        "generate_shifts_advance_days": 30,
        "created_by": None
    }
    contract.update(contract_fields)
    return {
        "found": True,
        "contract": contract,
        "schedules": schedules,
        "exceptions": exceptions or [],
        "locations": [location_payload()] if locations is None else locations
    }


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def request_client():
    return FakeRequestClient()


@pytest.fixture()
def lookup(request_client):
    return ContractLookupAdapter(client=request_client, batch_holidays=True)


@pytest.fixture()
def publisher():
    return FakePublisher()


@pytest.fixture()
def manager(db_session):
    manager = Manager(id=uuid.uuid4(), full_name="Ana Gestora", email="ana@example.com")
    db_session.add(manager)
    db_session.commit()
    return manager


@pytest.fixture()
def register_contract(request_client, db_session):
    """Publica o contrato no fake e registra seus modelos em shift_templates."""

    def _register(payload, register_templates=True):
        contract_id = payload["contract"]["contract_id"]
        request_client.contracts[contract_id] = payload
        if register_templates:
            for schedule in payload["schedules"]:
                db_session.add(ShiftTemplate(
                    id=uuid.UUID(schedule["schedule_id"]),
                    contract_id=uuid.UUID(contract_id),
                    template_name=schedule["schedule_name"],
                    is_active=True
                ))
            db_session.commit()
        return uuid.UUID(contract_id)

    return _register
