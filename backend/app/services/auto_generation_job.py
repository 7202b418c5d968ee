"""
Job diário de geração automática de turnos.

Roda numa thread própria e acorda uma vez por dia no horário local
configurado (padrão 02:00, Asia/Ho_Chi_Minh). A cada execução:
1. Busca contratos com modelos ativos cujo último turno é nulo ou
   está a menos de SCHEDULER_LOOKAHEAD_DAYS dias
2. Busca os dados do contrato e valida elegibilidade
   (ativo, vigente, geração automática ligada)
3. Calcula a janela e o gestor responsável
4. Chama o ShiftGenerationService contrato a contrato
"""
import logging
import threading
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, List, Optional, Tuple
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy import func, or_
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app import config
from app.exceptions import ContractLookupError
from app.models.manager import Manager
from app.models.shift import Shift
from app.models.shift_template import ShiftTemplate
from app.schemas.shift_generation import ContractRunOutcome, JobRunSummary
from app.services import shift_calculator
from app.services.contract_lookup_adapter import ContractLookupAdapter
from app.services.shift_generation_service import ShiftGenerationService

logger = logging.getLogger(__name__)

JOB_NAME = "AutoGenerateShiftsJob"


def calculate_next_run(now_local: datetime, run_time: time) -> datetime:
    """Próximo horário de execução: hoje se ainda não passou, senão amanhã."""
    candidate = now_local.replace(
        hour=run_time.hour, minute=run_time.minute, second=0, microsecond=0
    )
    if candidate <= now_local:
        candidate += timedelta(days=1)
    return candidate


def find_candidate_contracts(db: Session, today: date, lookahead_days: int) -> List[Tuple[UUID, Optional[date]]]:
    """
    Contratos com ao menos um modelo ativo e cujo último turno
    é nulo ou cai até today + lookahead_days.
    """
    threshold = today + timedelta(days=lookahead_days)
    last_shift_date = func.max(Shift.shift_date)

    rows = db.query(
        ShiftTemplate.contract_id,
        last_shift_date.label("last_shift_date")
    ).outerjoin(
        Shift, Shift.contract_id == ShiftTemplate.contract_id
    ).filter(
        ShiftTemplate.is_active == True,
        ShiftTemplate.contract_id.isnot(None)
    ).group_by(
        ShiftTemplate.contract_id
    ).having(
        or_(last_shift_date.is_(None), last_shift_date <= threshold)
    ).order_by(
        ShiftTemplate.contract_id
    ).all()

    return [(row.contract_id, row.last_shift_date) for row in rows]


def find_responsible_actor(db: Session, preferred_id: Optional[UUID] = None) -> Optional[Manager]:
    """Criador do contrato se puder gerar turnos; senão qualquer gestor ativo com permissão."""
    if preferred_id is not None:
        preferred = db.get(Manager, preferred_id)
        if preferred and preferred.is_active and preferred.can_create_shifts:
            return preferred

    return db.query(Manager).filter(
        Manager.is_active == True,
        Manager.can_create_shifts == True
    ).order_by(Manager.created_at, Manager.id).first()


class AutoGenerateShiftsJob:

    def __init__(
        self,
        session_factory: Callable[[], Session],
        lookup: ContractLookupAdapter,
        publisher=None,
        tz_name: str = None,
        run_time: time = None,
        lookahead_days: int = None,
        default_advance_days: int = None,
        clock: Callable[[], datetime] = None
    ):
        self.session_factory = session_factory
        self.lookup = lookup
        self.publisher = publisher
        self.tz_name = tz_name or config.SCHEDULER_TIMEZONE
        self.run_time = run_time or config.SCHEDULER_RUN_TIME
        self.lookahead_days = config.SCHEDULER_LOOKAHEAD_DAYS if lookahead_days is None else lookahead_days
        self.default_advance_days = default_advance_days or config.DEFAULT_ADVANCE_DAYS
        self.clock = clock or (lambda: datetime.now(ZoneInfo(self.tz_name)))

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.last_summary: Optional[JobRunSummary] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def next_run_time(self) -> datetime:
        return calculate_next_run(self.clock(), self.run_time)

    def start(self):
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run_forever, name=JOB_NAME, daemon=True)
        self._thread.start()
        logger.info(
            "%s iniciado: execução diária às %s (%s)",
            JOB_NAME, self.run_time.strftime("%H:%M"), self.tz_name
        )

    def stop(self, timeout: float = 5.0):
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        logger.info("%s parado", JOB_NAME)

    def run_forever(self):
        while not self._stop_event.is_set():
            now = self.clock()
            next_run = calculate_next_run(now, self.run_time)
            delay = (next_run - now).total_seconds()
            logger.info("Próxima geração automática em %s (%.0fs)", next_run.isoformat(), delay)

            if self._stop_event.wait(delay):
                break

            try:
                self.run_once()
            except Exception:
                logger.exception("Execução do %s falhou; nova tentativa no próximo ciclo", JOB_NAME)

    def run_once(self, today: Optional[date] = None) -> JobRunSummary:
        today = today or self.clock().date()
        summary = JobRunSummary(started_at=datetime.now(timezone.utc))
        logger.info("%s: início da execução para %s", JOB_NAME, today)

        db = self.session_factory()
        try:
            candidates = find_candidate_contracts(db, today, self.lookahead_days)
            summary.contracts_found = len(candidates)

            for contract_id, last_shift_date in candidates:
                if self._stop_event.is_set():
                    summary.interrupted = True
                    logger.info("%s interrompido antes do contrato %s", JOB_NAME, contract_id)
                    break
                try:
                    outcome = self._process_contract(db, contract_id, last_shift_date, today)
                except OperationalError:
                    raise
                except Exception as e:
                    db.rollback()
                    logger.exception("Erro ao processar contrato %s", contract_id)
                    outcome = ContractRunOutcome(contract_id=contract_id, status="failed", errors=[str(e)])
                self._record(summary, outcome)
        finally:
            db.close()

        summary.finished_at = datetime.now(timezone.utc)
        self.last_summary = summary
        logger.info(
            "%s concluído: %s encontrados, %s processados, %s ok, %s falhas, %s ignorados, %s turnos criados",
            JOB_NAME, summary.contracts_found, summary.contracts_processed, summary.succeeded,
            summary.failed, summary.skipped, summary.shifts_created
        )
        return summary

    def _process_contract(
        self,
        db: Session,
        contract_id: UUID,
        last_shift_date: Optional[date],
        today: date
    ) -> ContractRunOutcome:
        try:
            data = self.lookup.fetch_contract_schedule(contract_id)
        except ContractLookupError as e:
            logger.error("Falha ao buscar modelos do contrato %s: %s", contract_id, e)
            return ContractRunOutcome(contract_id=contract_id, status="failed", errors=[str(e)])

        contract = data.contract
        outcome = ContractRunOutcome(contract_id=contract_id, contract_number=contract.contract_number, status="skipped")

        if not contract.is_active:
            logger.info("Contrato %s inativo, ignorado", contract.contract_number)
            return outcome
        if contract.end_date < today:
            logger.info("Contrato %s encerrado em %s, ignorado", contract.contract_number, contract.end_date)
            return outcome
        if not contract.auto_generate_shifts:
            logger.info("Contrato %s com geração automática desligada, ignorado", contract.contract_number)
            return outcome

        actor = find_responsible_actor(db, contract.created_by)
        if actor is None:
            logger.error("Contrato %s: nenhum gestor com permissão para gerar turnos", contract.contract_number)
            outcome.status = "failed"
            outcome.errors.append("Nenhum gestor com permissão para gerar turnos")
            return outcome

        active_template_ids = {
            row.id for row in db.query(ShiftTemplate.id).filter(
                ShiftTemplate.contract_id == contract_id,
                ShiftTemplate.is_active == True
            ).all()
        }
        if not active_template_ids:
            logger.error("Contrato %s: nenhum modelo de turno ativo", contract.contract_number)
            outcome.status = "failed"
            outcome.errors.append("Contrato sem modelos de turno ativos")
            return outcome

        window = shift_calculator.compute_generation_window(
            last_shift_date,
            today,
            contract.generate_shifts_advance_days or self.default_advance_days,
            contract.end_date
        )

        service = ShiftGenerationService(db, self.lookup, self.publisher)
        result = service.materialize(
            data, window, actor.id, schedule_ids=active_template_ids, generated_by_job=JOB_NAME
        )

        outcome.status = "success" if result.success else "failed"
        outcome.shifts_created = result.shifts_created_count
        outcome.shifts_skipped = result.shifts_skipped_count
        outcome.errors = result.errors
        return outcome

    @staticmethod
    def _record(summary: JobRunSummary, outcome: ContractRunOutcome):
        summary.outcomes.append(outcome)
        if outcome.status == "skipped":
            summary.skipped += 1
            return
        summary.contracts_processed += 1
        summary.shifts_created += outcome.shifts_created
        if outcome.status == "success":
            summary.succeeded += 1
        else:
            summary.failed += 1
