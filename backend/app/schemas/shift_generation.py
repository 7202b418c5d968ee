from datetime import date, datetime, timedelta
from typing import Iterator, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, computed_field, field_validator


class GenerationWindow(BaseModel):
    """Intervalo [from_date, to_date) de uma execução de geração."""
    from_date: date
    to_date: date

    @property
    def days(self) -> int:
        return max((self.to_date - self.from_date).days, 0)

    @property
    def is_empty(self) -> bool:
        return self.to_date <= self.from_date

    def dates(self) -> Iterator[date]:
        current = self.from_date
        while current < self.to_date:
            yield current
            current += timedelta(days=1)


class SkipReason(BaseModel):
    date: date
    location_id: Optional[UUID] = None
    location_name: str = ""
    schedule_name: str = ""
    reason: str


class GenerationResult(BaseModel):
    contract_ids: List[UUID] = []
    shifts_created_count: int = 0
    shifts_skipped_count: int = 0
    skip_reasons: List[SkipReason] = []
    created_shift_ids: List[UUID] = []
    errors: List[str] = []
    generated_from: Optional[date] = None
    generated_to: Optional[date] = None
    event_published: bool = False

    @computed_field
    @property
    def success(self) -> bool:
        return not self.errors

    def merge(self, other: "GenerationResult") -> None:
        self.contract_ids.extend(other.contract_ids)
        self.shifts_created_count += other.shifts_created_count
        self.shifts_skipped_count += other.shifts_skipped_count
        self.skip_reasons.extend(other.skip_reasons)
        self.created_shift_ids.extend(other.created_shift_ids)
        self.errors.extend(other.errors)
        self.event_published = self.event_published or other.event_published
        if other.generated_from and (self.generated_from is None or other.generated_from < self.generated_from):
            self.generated_from = other.generated_from
        if other.generated_to and (self.generated_to is None or other.generated_to > self.generated_to):
            self.generated_to = other.generated_to


class GenerateShiftsRequest(BaseModel):
    actor_id: UUID
    schedule_template_ids: List[UUID] = Field(min_length=1)
    from_date: Optional[date] = None
    days: int = 30

    @field_validator("days")
    @classmethod
    def validate_days(cls, v):
        if v < 1 or v > 366:
            raise ValueError("days deve estar entre 1 e 366")
        return v


class ShiftsGeneratedEvent(BaseModel):
    contract_id: UUID
    contract_number: str = ""
    generation_date: date
    generated_to: date
    generated_at: datetime
    generated_by_job: str
    shifts_created_count: int
    shifts_skipped_count: int
    skip_reasons: List[str] = []
    created_shift_ids: List[UUID] = []
    status: str
    error_message: Optional[str] = None
    locations_processed: int = 0
    schedules_processed: int = 0
    generation_duration_ms: int = 0


class ContractRunOutcome(BaseModel):
    contract_id: UUID
    contract_number: str = ""
    status: str
    shifts_created: int = 0
    shifts_skipped: int = 0
    errors: List[str] = []


class JobRunSummary(BaseModel):
    started_at: datetime
    finished_at: Optional[datetime] = None
    contracts_found: int = 0
    contracts_processed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    shifts_created: int = 0
    interrupted: bool = False
    outcomes: List[ContractRunOutcome] = []
