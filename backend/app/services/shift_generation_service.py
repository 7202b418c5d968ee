"""
Serviço de Materialização de Turnos.

Expande os modelos de turno de um contrato em turnos concretos dentro
de uma janela [from, to). Para cada data e cada modelo vigente aplica,
nesta ordem:
1. Dia da semana permitido pelo modelo
2. Feriado (quando o modelo não se aplica a feriados)
3. Fim de semana (quando o modelo não se aplica a fins de semana)
4. Exceção pontual do modelo (skip / modify / replace)
5. Fechamento do local (quando o modelo pede)
6. Turno já existente na mesma chave (local, data, início, fim)

Turnos são gravados um a um; ao final, se algo foi criado, um único
evento ShiftsGenerated é publicado.
"""
import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from time import perf_counter
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from app import config
from app.exceptions import ActorNotPermittedError, EventPublishError, TemplatesNotFoundError
from app.models.manager import Manager
from app.models.shift import Shift, ShiftStatus
from app.models.shift_template import ShiftTemplate
from app.schemas.contract_schedule import (
    ContractScheduleData, HolidayStatus, LocationInfo, ShiftExceptionInfo, ShiftScheduleInfo
)
from app.schemas.shift_generation import (
    GenerateShiftsRequest, GenerationResult, GenerationWindow, ShiftsGeneratedEvent, SkipReason
)
from app.services import shift_calculator
from app.services.contract_lookup_adapter import ContractLookupAdapter

logger = logging.getLogger(__name__)

SHIFTS_GENERATED_EVENT = "ShiftsGenerated"
MANUAL_GENERATION = "ManualShiftGeneration"

WEEKDAY_NAMES = [
    "segunda-feira", "terça-feira", "quarta-feira", "quinta-feira",
    "sexta-feira", "sábado", "domingo"
]


class ShiftGenerationService:

    def __init__(self, db: Session, lookup: ContractLookupAdapter, publisher=None, clock=None):
        self.db = db
        self.lookup = lookup
        self.publisher = publisher
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def generate_shifts(self, request: GenerateShiftsRequest, today: Optional[date] = None) -> GenerationResult:
        """
        Geração sob demanda a partir de ids de modelos de turno.

        Os modelos são agrupados por contrato; cada contrato é buscado uma
        vez e expandido apenas com os modelos pedidos.
        """
        actor = self.db.get(Manager, request.actor_id)
        if not actor or not actor.is_active or not actor.can_create_shifts:
            raise ActorNotPermittedError(request.actor_id)

        templates = self.db.query(ShiftTemplate).filter(
            ShiftTemplate.id.in_(request.schedule_template_ids),
            ShiftTemplate.is_active == True,
            ShiftTemplate.contract_id.isnot(None)
        ).all()
        if not templates:
            raise TemplatesNotFoundError("Nenhum modelo de turno ativo encontrado para os ids informados")

        from_date = request.from_date or today or shift_calculator.local_today(config.SCHEDULER_TIMEZONE)
        window = GenerationWindow(
            from_date=from_date,
            to_date=from_date + timedelta(days=request.days)
        )

        by_contract: Dict[UUID, set] = {}
        for template in templates:
            by_contract.setdefault(template.contract_id, set()).add(template.id)

        result = GenerationResult()
        for contract_id, schedule_ids in by_contract.items():
            data = self.lookup.fetch_contract_schedule(contract_id)
            result.merge(self.materialize(
                data,
                window,
                request.actor_id,
                schedule_ids=schedule_ids,
                generated_by_job=MANUAL_GENERATION
            ))
        return result

    def materialize(
        self,
        data: ContractScheduleData,
        window: GenerationWindow,
        actor_id: Optional[UUID],
        schedule_ids: Optional[Iterable[UUID]] = None,
        holidays: Optional[Dict[date, HolidayStatus]] = None,
        generated_by_job: str = MANUAL_GENERATION
    ) -> GenerationResult:
        started = perf_counter()
        contract = data.contract
        window = shift_calculator.clamp_to_contract_end(window, contract.end_date)
        result = GenerationResult(
            contract_ids=[contract.contract_id],
            generated_from=window.from_date,
            generated_to=window.to_date
        )

        wanted = set(schedule_ids) if schedule_ids is not None else None
        schedules = [s for s in data.schedules if wanted is None or s.schedule_id in wanted]
        if not schedules:
            result.errors.append("Nenhum modelo de turno para gerar")
            return result

        if window.is_empty:
            logger.info(
                "Contrato %s: janela vazia (%s a %s), nada a gerar",
                contract.contract_number, window.from_date, window.to_date
            )
            return result

        if holidays is None:
            holidays = self.lookup.resolve_holidays(window.dates())

        exceptions = {(e.schedule_id, e.exception_date): e for e in data.exceptions}
        weekday_tables = {s.schedule_id: s.weekday_flags() for s in schedules}
        locations_processed = set()

        for current_date in window.dates():
            holiday = holidays.get(current_date) or HolidayStatus()
            for schedule in schedules:
                if not schedule.is_effective_on(current_date):
                    continue
                try:
                    self._expand_on_date(
                        data, schedule, current_date, holiday,
                        weekday_tables[schedule.schedule_id],
                        exceptions.get((schedule.schedule_id, current_date)),
                        actor_id, result, locations_processed
                    )
                except OperationalError:
                    raise
                except Exception as e:
                    self.db.rollback()
                    logger.exception(
                        "Erro ao gerar turno de %s em %s", schedule.schedule_name, current_date
                    )
                    result.errors.append(f"{schedule.schedule_name} em {current_date}: {e}")

        logger.info(
            "Contrato %s: %s turnos criados, %s ignorados, %s erros (%s a %s)",
            contract.contract_number, result.shifts_created_count,
            result.shifts_skipped_count, len(result.errors), window.from_date, window.to_date
        )

        if result.shifts_created_count > 0:
            self._publish_event(
                data, window, result, generated_by_job,
                schedules_processed=len(schedules),
                locations_processed=len(locations_processed),
                duration_ms=int((perf_counter() - started) * 1000)
            )
        return result

    def _expand_on_date(
        self,
        data: ContractScheduleData,
        schedule: ShiftScheduleInfo,
        current_date: date,
        holiday: HolidayStatus,
        weekday_flags,
        exception: Optional[ShiftExceptionInfo],
        actor_id: Optional[UUID],
        result: GenerationResult,
        locations_processed: set
    ):
        weekday = current_date.weekday()
        bound_location = data.location_by_id(schedule.location_id)
        scope_name = bound_location.location_name if bound_location else "Todos os locais"

        def skip(reason: str, location: Optional[LocationInfo] = None):
            result.shifts_skipped_count += 1
            result.skip_reasons.append(SkipReason(
                date=current_date,
                location_id=location.location_id if location else schedule.location_id,
                location_name=location.location_name if location else scope_name,
                schedule_name=schedule.schedule_name,
                reason=reason
            ))

        if not weekday_flags[weekday]:
            skip(f"Modelo não se aplica a {WEEKDAY_NAMES[weekday]}")
            return

        if holiday.is_holiday and not schedule.applies_on_public_holidays:
            skip(f"Feriado: {holiday.name or 'sem nome'}")
            return

        if weekday >= 5 and not schedule.applies_on_weekends:
            skip("Fim de semana")
            return

        start_time = schedule.shift_start_time
        end_time = schedule.shift_end_time
        flagged = schedule.crosses_midnight
        guards = schedule.guards_per_shift
        special_instructions = None

        if exception is not None:
            if exception.exception_type == "skip":
                skip(f"Exceção: {exception.reason or 'turno cancelado'}")
                return
            if exception.modified_start_time or exception.modified_end_time:
                flagged = False
            start_time = exception.modified_start_time or start_time
            end_time = exception.modified_end_time or end_time
            if exception.modified_guards_count is not None:
                guards = exception.modified_guards_count
            special_instructions = exception.special_instructions

        if schedule.location_id is not None:
            if bound_location is None:
                skip("Local do modelo não pertence ao contrato")
                return
            locations = [bound_location]
        else:
            locations = data.locations
        if not locations:
            skip("Contrato sem locais cadastrados")
            return

        shift_start, shift_end = shift_calculator.build_shift_times(current_date, start_time, end_time, flagged)

        for location in locations:
            locations_processed.add(location.location_id)

            if schedule.skip_when_location_closed:
                closed = self.lookup.check_location_closed(location.location_id, current_date)
                if closed.is_closed:
                    skip(f"Local fechado: {closed.reason or 'sem motivo informado'}", location)
                    continue

            if self._shift_exists(location.location_id, current_date, shift_start, shift_end):
                logger.debug(
                    "Turno já existe: %s %s %s-%s",
                    location.location_name, current_date, shift_start.time(), shift_end.time()
                )
                continue

            shift = self._build_shift(
                data, schedule, location, current_date, shift_start, shift_end,
                guards, holiday, actor_id, special_instructions
            )
            if self._persist(shift):
                result.shifts_created_count += 1
                result.created_shift_ids.append(shift.id)

    def _shift_exists(self, location_id: UUID, shift_date: date, start: datetime, end: datetime) -> bool:
        return self.db.query(Shift.id).filter(
            Shift.location_id == location_id,
            Shift.shift_date == shift_date,
            Shift.shift_start == start,
            Shift.shift_end == end
        ).first() is not None

    def _build_shift(
        self,
        data: ContractScheduleData,
        schedule: ShiftScheduleInfo,
        location: LocationInfo,
        shift_date: date,
        shift_start: datetime,
        shift_end: datetime,
        guards: int,
        holiday: HolidayStatus,
        actor_id: Optional[UUID],
        special_instructions: Optional[str]
    ) -> Shift:
        total_minutes = int((shift_end - shift_start).total_seconds() // 60)
        work_minutes = max(total_minutes - schedule.break_minutes, 0)
        weekday = shift_date.weekday()

        return Shift(
            id=uuid.uuid4(),
            contract_id=data.contract.contract_id,
            shift_template_id=schedule.schedule_id,
            location_id=location.location_id,
            location_name=location.location_name,
            location_address=location.address,
            manager_id=actor_id,
            created_by=actor_id,
            shift_date=shift_date,
            shift_end_date=shift_end.date(),
            shift_start=shift_start,
            shift_end=shift_end,
            total_duration_minutes=total_minutes,
            work_duration_minutes=work_minutes,
            work_duration_hours=round(work_minutes / 60, 2),
            break_duration_minutes=schedule.break_minutes,
            paid_break_minutes=0,
            unpaid_break_minutes=schedule.break_minutes,
            shift_type=schedule.schedule_type,
            is_regular_weekday=weekday < 5,
            is_saturday=weekday == 5,
            is_sunday=weekday == 6,
            is_public_holiday=holiday.is_holiday,
            is_night_shift=shift_calculator.is_night_shift(shift_start.time(), shift_end.time()),
            night_hours=shift_calculator.calculate_night_hours(shift_start, shift_end),
            day_hours=shift_calculator.calculate_day_hours(shift_start, shift_end),
            required_guards=guards,
            assigned_guards_count=0,
            confirmed_guards_count=0,
            checked_in_guards_count=0,
            completed_guards_count=0,
            is_fully_staffed=False,
            is_understaffed=guards > 0,
            is_overstaffed=False,
            staffing_percentage=0,
            status=ShiftStatus.SCHEDULED,
            approval_status="APPROVED",
            requires_approval=False,
            is_training_shift=schedule.schedule_type.upper() == "TRAINING",
            requires_armed_guard=schedule.requires_armed_guard,
            requires_supervisor=schedule.requires_supervisor,
            description=f"Gerado automaticamente do modelo: {schedule.schedule_name}",
            special_instructions=special_instructions,
            **shift_calculator.date_parts(shift_date)
        )

    def _persist(self, shift: Shift) -> bool:
        """Grava o turno. Violação da chave única (gravação concorrente) conta como já existente."""
        self.db.add(shift)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.debug(
                "Turno gravado por outra execução: %s %s", shift.location_id, shift.shift_start
            )
            return False
        return True

    def _publish_event(
        self,
        data: ContractScheduleData,
        window: GenerationWindow,
        result: GenerationResult,
        generated_by_job: str,
        schedules_processed: int,
        locations_processed: int,
        duration_ms: int
    ):
        if self.publisher is None:
            logger.warning("Sem publicador configurado, evento %s não enviado", SHIFTS_GENERATED_EVENT)
            return

        event = ShiftsGeneratedEvent(
            contract_id=data.contract.contract_id,
            contract_number=data.contract.contract_number,
            generation_date=window.from_date,
            generated_to=window.to_date,
            generated_at=self.clock(),
            generated_by_job=generated_by_job,
            shifts_created_count=result.shifts_created_count,
            shifts_skipped_count=result.shifts_skipped_count,
            skip_reasons=_distinct(s.reason for s in result.skip_reasons),
            created_shift_ids=result.created_shift_ids,
            status="success" if not result.errors else "partial",
            error_message="; ".join(result.errors) or None,
            locations_processed=locations_processed,
            schedules_processed=schedules_processed,
            generation_duration_ms=duration_ms
        )
        try:
            self.publisher.publish(SHIFTS_GENERATED_EVENT, event)
            result.event_published = True
        except EventPublishError as e:
            logger.error("Turnos do contrato %s criados, mas o evento falhou: %s", data.contract.contract_number, e)


def _distinct(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))
