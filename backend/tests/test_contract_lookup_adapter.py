import uuid
from datetime import date

import pytest

from app.exceptions import ContractLookupError, ContractNotFoundError, MalformedResponseError
from app.services.contract_lookup_adapter import ContractLookupAdapter

from conftest import contract_payload, schedule_payload


class StaticClient:

    def __init__(self, reply):
        self.reply = reply
        self.calls = []

    def request(self, message_type, payload, timeout):
        self.calls.append((message_type, payload, timeout))
        return self.reply


def test_check_holiday(lookup, request_client):
    request_client.holidays["2024-09-02"] = "Dia da Independência"

    status = lookup.check_holiday(date(2024, 9, 2))

    assert status.is_holiday
    assert status.name == "Dia da Independência"
    assert request_client.calls == [("CheckPublicHoliday", {"date": "2024-09-02"})]


def test_check_holiday_degrades_on_timeout(lookup, request_client):
    request_client.failing.add("CheckPublicHoliday")

    assert not lookup.check_holiday(date(2024, 9, 2)).is_holiday


def test_check_holiday_degrades_on_invalid_payload():
    adapter = ContractLookupAdapter(client=StaticClient({"is_holiday": "talvez"}))

    assert not adapter.check_holiday(date(2024, 9, 2)).is_holiday


def test_resolve_holidays_uses_single_batch(lookup, request_client):
    request_client.holidays["2024-01-01"] = "Ano Novo"
    dates = [date(2024, 1, 2), date(2024, 1, 1), date(2024, 1, 1)]

    holidays = lookup.resolve_holidays(dates)

    assert set(holidays) == {date(2024, 1, 1), date(2024, 1, 2)}
    assert holidays[date(2024, 1, 1)].name == "Ano Novo"
    assert not holidays[date(2024, 1, 2)].is_holiday
    assert request_client.calls == [
        ("BatchCheckPublicHolidays", {"dates": ["2024-01-01", "2024-01-02"]})
    ]


def test_resolve_holidays_missing_dates_default_to_regular():
    adapter = ContractLookupAdapter(client=StaticClient({"holidays": {"2024-01-01": None}}), batch_holidays=True)

    holidays = adapter.resolve_holidays([date(2024, 1, 1), date(2024, 1, 2)])

    assert not holidays[date(2024, 1, 1)].is_holiday
    assert not holidays[date(2024, 1, 2)].is_holiday


def test_resolve_holidays_without_batch(request_client):
    adapter = ContractLookupAdapter(client=request_client, batch_holidays=False)

    adapter.resolve_holidays([date(2024, 1, 1), date(2024, 1, 2)])

    assert request_client.count("BatchCheckPublicHolidays") == 0
    assert request_client.count("CheckPublicHoliday") == 2


def test_check_location_closed(lookup, request_client):
    location_id = uuid.uuid4()
    request_client.closed[(str(location_id), "2024-01-05")] = "Feriado do condomínio"

    status = lookup.check_location_closed(location_id, date(2024, 1, 5))

    assert status.is_closed
    assert status.reason == "Feriado do condomínio"


def test_check_location_closed_fails_open(lookup, request_client):
    request_client.failing.add("CheckLocationClosed")

    assert not lookup.check_location_closed(uuid.uuid4(), date(2024, 1, 5)).is_closed


def test_fetch_contract_schedule_parses_reply(lookup, register_contract):
    schedule = schedule_payload(shift_start_time="07:30", shift_end_time="19:30:00")
    contract_id = register_contract(contract_payload([schedule]), register_templates=False)

    data = lookup.fetch_contract_schedule(contract_id)

    assert data.contract.contract_id == contract_id
    assert data.schedules[0].shift_start_time.hour == 7
    assert data.schedules[0].shift_end_time.minute == 30
    assert data.schedules[0].weekday_flags() == (True, True, True, True, True, False, False)
    assert len(data.locations) == 1


def test_fetch_contract_schedule_applies_defaults():
    reply = contract_payload([{
        "schedule_id": str(uuid.uuid4()),
        "shift_start_time": "08:00",
        "shift_end_time": "17:00",
        "effective_from": "2024-01-01"
    }])
    data = ContractLookupAdapter(client=StaticClient(reply)).fetch_contract_schedule(uuid.uuid4())

    schedule = data.schedules[0]
    assert schedule.break_minutes == 60
    assert schedule.guards_per_shift == 1
    assert schedule.applies_on_public_holidays
    assert not schedule.applies_on_weekends
    assert schedule.skip_when_location_closed


def test_fetch_unknown_contract(lookup):
    with pytest.raises(ContractNotFoundError):
        lookup.fetch_contract_schedule(uuid.uuid4())


def test_fetch_contract_schedule_propagates_timeout(lookup, request_client):
    request_client.failing.add("GetContractShiftSchedules")

    with pytest.raises(ContractLookupError):
        lookup.fetch_contract_schedule(uuid.uuid4())


def test_fetch_contract_schedule_malformed_reply():
    adapter = ContractLookupAdapter(client=StaticClient({"contract": {"contract_number": "X"}}))

    with pytest.raises(MalformedResponseError):
        adapter.fetch_contract_schedule(uuid.uuid4())
