"""
Instâncias compartilhadas do processo (adaptador de consultas,
publicador de eventos e job diário), expostas como dependências
do FastAPI para poderem ser substituídas nos testes.
"""
from typing import Optional

from app.database import SessionLocal
from app.messaging.event_publisher import RedisEventPublisher
from app.services.auto_generation_job import AutoGenerateShiftsJob
from app.services.contract_lookup_adapter import ContractLookupAdapter

_lookup_adapter: Optional[ContractLookupAdapter] = None
_event_publisher: Optional[RedisEventPublisher] = None
_generation_job: Optional[AutoGenerateShiftsJob] = None


def get_lookup_adapter() -> ContractLookupAdapter:
    global _lookup_adapter
    if _lookup_adapter is None:
        _lookup_adapter = ContractLookupAdapter()
    return _lookup_adapter


def get_event_publisher() -> RedisEventPublisher:
    global _event_publisher
    if _event_publisher is None:
        _event_publisher = RedisEventPublisher()
    return _event_publisher


def get_generation_job() -> AutoGenerateShiftsJob:
    global _generation_job
    if _generation_job is None:
        _generation_job = AutoGenerateShiftsJob(
            session_factory=SessionLocal,
            lookup=get_lookup_adapter(),
            publisher=get_event_publisher()
        )
    return _generation_job
