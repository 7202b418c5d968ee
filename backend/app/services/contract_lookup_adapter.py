"""
Adaptador das consultas ao serviço de contratos.

Feriados e fechamento de local degradam para o valor negativo
(não é feriado, local aberto) quando a consulta falha; a busca dos
modelos de turno do contrato propaga o erro.
"""
import logging
from datetime import date
from typing import Dict, Iterable, Optional
from uuid import UUID

from pydantic import ValidationError

from app import config
from app.exceptions import ContractLookupError, ContractNotFoundError, MalformedResponseError
from app.messaging.request_client import RedisRequestClient
from app.schemas.contract_schedule import (
    BatchHolidayReply, ContractScheduleData, HolidayStatus, LocationClosedStatus
)

logger = logging.getLogger(__name__)

CHECK_PUBLIC_HOLIDAY = "CheckPublicHoliday"
BATCH_CHECK_PUBLIC_HOLIDAYS = "BatchCheckPublicHolidays"
CHECK_LOCATION_CLOSED = "CheckLocationClosed"
GET_CONTRACT_SHIFT_SCHEDULES = "GetContractShiftSchedules"


class ContractLookupAdapter:

    def __init__(self, client=None, batch_holidays: bool = None):
        self.client = client or RedisRequestClient()
        self.batch_holidays = config.HOLIDAY_BATCH_LOOKUP if batch_holidays is None else batch_holidays

    def check_holiday(self, target_date: date) -> HolidayStatus:
        try:
            reply = self.client.request(
                CHECK_PUBLIC_HOLIDAY,
                {"date": target_date.isoformat()},
                timeout=config.HOLIDAY_LOOKUP_TIMEOUT
            )
            return HolidayStatus.model_validate(reply)
        except (ContractLookupError, ValidationError) as e:
            logger.warning("Consulta de feriado para %s falhou, assumindo dia normal: %s", target_date, e)
            return HolidayStatus()

    def resolve_holidays(self, dates: Iterable[date]) -> Dict[date, HolidayStatus]:
        """
        Resolve o status de feriado de todas as datas da janela.

        Tenta uma única consulta em lote; se ela falhar, consulta data a data.
        """
        dates = sorted(set(dates))
        if not dates:
            return {}

        if self.batch_holidays:
            try:
                reply = self.client.request(
                    BATCH_CHECK_PUBLIC_HOLIDAYS,
                    {"dates": [d.isoformat() for d in dates]},
                    timeout=config.HOLIDAY_BATCH_LOOKUP_TIMEOUT
                )
                batch = BatchHolidayReply.model_validate(reply)
                return {d: batch.holidays.get(d) or HolidayStatus() for d in dates}
            except (ContractLookupError, ValidationError) as e:
                logger.warning(
                    "Consulta de feriados em lote falhou (%s datas), consultando por data: %s",
                    len(dates), e
                )

        return {d: self.check_holiday(d) for d in dates}

    def check_location_closed(self, location_id: UUID, target_date: date) -> LocationClosedStatus:
        try:
            reply = self.client.request(
                CHECK_LOCATION_CLOSED,
                {"location_id": str(location_id), "date": target_date.isoformat()},
                timeout=config.LOCATION_CLOSED_LOOKUP_TIMEOUT
            )
            return LocationClosedStatus.model_validate(reply)
        except (ContractLookupError, ValidationError) as e:
            logger.warning(
                "Consulta de fechamento do local %s em %s falhou, assumindo aberto: %s",
                location_id, target_date, e
            )
            return LocationClosedStatus()

    def fetch_contract_schedule(self, contract_id: UUID, location_id: Optional[UUID] = None) -> ContractScheduleData:
        """
        Busca contrato, modelos de turno, exceções e locais.

        Raises:
            ContractNotFoundError: o serviço de contratos não conhece o contrato
            ContractLookupError: timeout, Redis indisponível ou resposta inválida
        """
        payload = {"contract_id": str(contract_id)}
        if location_id is not None:
            payload["location_id"] = str(location_id)

        reply = self.client.request(
            GET_CONTRACT_SHIFT_SCHEDULES,
            payload,
            timeout=config.SCHEDULE_FETCH_TIMEOUT
        )
        if reply.get("found") is False:
            raise ContractNotFoundError(contract_id)

        try:
            return ContractScheduleData.model_validate(reply)
        except ValidationError as e:
            raise MalformedResponseError(
                f"{GET_CONTRACT_SHIFT_SCHEDULES}: resposta inválida para o contrato {contract_id}"
            ) from e
