import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_event_publisher, get_generation_job, get_lookup_adapter
from app.exceptions import (
    ActorNotPermittedError, ContractLookupError, ContractNotFoundError, TemplatesNotFoundError
)
from app.schemas.shift_generation import GenerateShiftsRequest, GenerationResult, JobRunSummary
from app.services.auto_generation_job import AutoGenerateShiftsJob
from app.services.contract_lookup_adapter import ContractLookupAdapter
from app.services.generation_diagnostics_service import GenerationDiagnosticsService
from app.services.shift_generation_service import ShiftGenerationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/shifts", tags=["Shift Generation"])


@router.post("/generate", response_model=GenerationResult)
def generate_shifts(
    request: GenerateShiftsRequest,
    db: Session = Depends(get_db),
    lookup: ContractLookupAdapter = Depends(get_lookup_adapter),
    publisher=Depends(get_event_publisher)
):
    """Gera turnos sob demanda para os modelos informados."""
    service = ShiftGenerationService(db, lookup, publisher)
    try:
        return service.generate_shifts(request)
    except ActorNotPermittedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except TemplatesNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ContractLookupError as e:
        logger.error("Geração manual abortada: %s", e)
        raise HTTPException(status_code=502, detail=f"Falha ao consultar o serviço de contratos: {e}")


@router.get("/background-job/status")
def background_job_status(
    db: Session = Depends(get_db),
    job: AutoGenerateShiftsJob = Depends(get_generation_job)
):
    return GenerationDiagnosticsService(db, job).get_status()


@router.get("/background-job/check-contract/{contract_id}")
def check_contract(
    contract_id: UUID,
    db: Session = Depends(get_db),
    job: AutoGenerateShiftsJob = Depends(get_generation_job),
    lookup: ContractLookupAdapter = Depends(get_lookup_adapter)
):
    service = GenerationDiagnosticsService(db, job, lookup)
    try:
        return service.check_contract(contract_id)
    except ContractNotFoundError:
        raise HTTPException(status_code=404, detail="Contrato não encontrado")
    except ContractLookupError as e:
        raise HTTPException(status_code=502, detail=f"Falha ao consultar o serviço de contratos: {e}")


@router.post("/background-job/run", response_model=JobRunSummary)
def run_background_job(job: AutoGenerateShiftsJob = Depends(get_generation_job)):
    """Executa uma passada do job diário agora, de forma síncrona."""
    return job.run_once()
