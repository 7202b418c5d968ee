from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.manager import Manager
from app.models.shift import Shift
from app.models.shift_template import ShiftTemplate
from app.services.auto_generation_job import JOB_NAME, AutoGenerateShiftsJob, find_candidate_contracts
from app.services.contract_lookup_adapter import ContractLookupAdapter


class GenerationDiagnosticsService:
    """
    Leituras de diagnóstico do job de geração automática:
    situação geral e análise de um contrato específico.
    """

    def __init__(self, db: Session, job: AutoGenerateShiftsJob, lookup: Optional[ContractLookupAdapter] = None):
        self.db = db
        self.job = job
        self.lookup = lookup

    def _job_info(self) -> Dict[str, Any]:
        return {
            "job_name": JOB_NAME,
            "running": self.job.is_running,
            "run_time": self.job.run_time.strftime("%H:%M"),
            "timezone": self.job.tz_name,
            "lookahead_days": self.job.lookahead_days,
            "default_advance_days": self.job.default_advance_days,
            "next_run": self.job.next_run_time().isoformat(),
            "last_run": self.job.last_summary.model_dump(mode="json") if self.job.last_summary else None
        }

    def get_status(self, today: Optional[date] = None) -> Dict[str, Any]:
        today = today or self.job.clock().date()
        now = datetime.now(timezone.utc)

        candidates = find_candidate_contracts(self.db, today, self.job.lookahead_days)
        contracts_needing_generation = [
            {
                "contract_id": contract_id,
                "last_shift_date": last_shift_date,
                "days_remaining": (last_shift_date - today).days if last_shift_date else None
            }
            for contract_id, last_shift_date in candidates
        ]

        total_templates = self.db.query(func.count(ShiftTemplate.id)).filter(
            ShiftTemplate.is_active == True
        ).scalar()
        contracts_with_templates = self.db.query(
            func.count(func.distinct(ShiftTemplate.contract_id))
        ).filter(
            ShiftTemplate.is_active == True,
            ShiftTemplate.contract_id.isnot(None)
        ).scalar()

        return {
            "server_time": now.isoformat(),
            "job": self._job_info(),
            "total_contracts_with_auto_generate": contracts_with_templates,
            "contracts_needing_generation": contracts_needing_generation,
            "stats": {
                "total_shift_templates": total_templates,
                "total_shifts": self.db.query(func.count(Shift.id)).scalar(),
                "future_shifts": self.db.query(func.count(Shift.id)).filter(
                    Shift.shift_date >= today
                ).scalar(),
                "shifts_created_last_24_hours": self.db.query(func.count(Shift.id)).filter(
                    Shift.created_at >= now - timedelta(hours=24)
                ).scalar(),
                "shifts_created_last_7_days": self.db.query(func.count(Shift.id)).filter(
                    Shift.created_at >= now - timedelta(days=7)
                ).scalar()
            },
            "managers_with_permission": self.db.query(func.count(Manager.id)).filter(
                Manager.is_active == True,
                Manager.can_create_shifts == True
            ).scalar()
        }

    def check_contract(self, contract_id: UUID, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Explica se o job vai gerar turnos para o contrato na próxima execução.

        Raises:
            ContractNotFoundError / ContractLookupError vindos do adaptador
        """
        today = today or self.job.clock().date()
        contract = self.lookup.fetch_contract_schedule(contract_id).contract

        templates = self.db.query(ShiftTemplate).filter(
            ShiftTemplate.contract_id == contract_id
        ).order_by(ShiftTemplate.is_active.desc(), ShiftTemplate.template_name).all()
        active_templates = [t for t in templates if t.is_active]

        total_shifts, first_shift_date, last_shift_date = self.db.query(
            func.count(Shift.id),
            func.min(Shift.shift_date),
            func.max(Shift.shift_date)
        ).filter(Shift.contract_id == contract_id).one()

        days_remaining = (last_shift_date - today).days if last_shift_date else 0
        threshold = self.job.lookahead_days
        eligible = contract.is_active and contract.auto_generate_shifts and contract.end_date >= today

        if not active_templates:
            will_trigger = False
            reason = "Contrato sem modelos de turno ativos"
        elif last_shift_date is None:
            will_trigger = True
            reason = "Nenhum turno gerado ainda"
        elif days_remaining <= threshold:
            will_trigger = True
            reason = f"Restam apenas {days_remaining} dias de turnos (limite: {threshold} dias)"
        else:
            will_trigger = False
            reason = f"Ainda há {days_remaining} dias de turnos (limite: {threshold} dias)"

        if will_trigger and eligible:
            action = f"O job vai gerar turnos na próxima execução ({self.job.next_run_time().isoformat()})"
        elif will_trigger:
            action = "Contrato não elegível para geração automática (inativo, encerrado ou geração desligada)"
        else:
            action = "Nenhuma ação necessária"

        return {
            "contract": {
                "contract_id": contract.contract_id,
                "contract_number": contract.contract_number,
                "is_active": contract.is_active,
                "auto_generate_shifts": contract.auto_generate_shifts,
                "start_date": contract.start_date,
                "end_date": contract.end_date,
                "generate_shifts_advance_days": contract.generate_shifts_advance_days
            },
            "templates": [
                {
                    "id": t.id,
                    "template_code": t.template_code,
                    "template_name": t.template_name,
                    "is_active": t.is_active,
                    "effective_from": t.effective_from,
                    "effective_to": t.effective_to
                }
                for t in templates
            ],
            "shift_statistics": {
                "total_shifts": total_shifts,
                "first_shift_date": first_shift_date,
                "last_shift_date": last_shift_date,
                "days_remaining": days_remaining
            },
            "background_job_analysis": {
                "eligible": eligible,
                "will_trigger": will_trigger,
                "reason": reason,
                "next_generation_date": last_shift_date + timedelta(days=1) if last_shift_date else today,
                "recommended_action": action
            }
        }
