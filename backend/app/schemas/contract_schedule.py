"""
Tipos do protocolo request/response com o serviço de contratos.

Os payloads trafegam como JSON (snake_case, datas ISO, horas HH:MM)
e são validados aqui na chegada.
"""
from datetime import date, time
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, field_validator


class HolidayStatus(BaseModel):
    is_holiday: bool = False
    name: Optional[str] = None
    category: Optional[str] = None


class BatchHolidayReply(BaseModel):
    holidays: Dict[date, Optional[HolidayStatus]] = {}


class LocationClosedStatus(BaseModel):
    is_closed: bool = False
    reason: Optional[str] = None
    day_type: Optional[str] = None


class ContractInfo(BaseModel):
    contract_id: UUID
    contract_number: str = ""
    start_date: date
    end_date: date
    status: str = ""
    is_active: bool = True
    auto_generate_shifts: bool = True
    generate_shifts_advance_days: Optional[int] = None
    work_on_public_holidays: bool = False
    created_by: Optional[UUID] = None


class LocationInfo(BaseModel):
    location_id: UUID
    location_name: str = "Unknown"
    location_code: str = ""
    address: Optional[str] = None
    guards_required: int = 1


class ShiftScheduleInfo(BaseModel):
    schedule_id: UUID
    schedule_name: str = "Unknown"
    schedule_type: str = "REGULAR"
    location_id: Optional[UUID] = None

    shift_start_time: time
    shift_end_time: time
    crosses_midnight: bool = False
    break_minutes: int = 60
    guards_per_shift: int = 1

    applies_monday: bool = True
    applies_tuesday: bool = True
    applies_wednesday: bool = True
    applies_thursday: bool = True
    applies_friday: bool = True
    applies_saturday: bool = False
    applies_sunday: bool = False

    applies_on_public_holidays: bool = True
    applies_on_weekends: bool = False
    skip_when_location_closed: bool = True

    requires_armed_guard: bool = False
    requires_supervisor: bool = False

    effective_from: date
    effective_to: Optional[date] = None

    @field_validator("break_minutes", "guards_per_shift")
    @classmethod
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError("Valor não pode ser negativo")
        return v

    def weekday_flags(self) -> Tuple[bool, ...]:
        """Flags indexadas por date.weekday() (0=Seg ... 6=Dom)."""
        return (
            self.applies_monday,
            self.applies_tuesday,
            self.applies_wednesday,
            self.applies_thursday,
            self.applies_friday,
            self.applies_saturday,
            self.applies_sunday,
        )

    def is_effective_on(self, target_date: date) -> bool:
        if target_date < self.effective_from:
            return False
        return self.effective_to is None or target_date <= self.effective_to


class ShiftExceptionInfo(BaseModel):
    """
    Exceção pontual de um modelo de turno.

    skip: não gerar o turno na data.
    modify / replace: sobrescrever horário e/ou número de vigilantes.
    """
    schedule_id: UUID
    exception_date: date
    exception_type: str
    reason: Optional[str] = None
    modified_start_time: Optional[time] = None
    modified_end_time: Optional[time] = None
    modified_guards_count: Optional[int] = None
    special_instructions: Optional[str] = None

    @field_validator("exception_type")
    @classmethod
    def validate_exception_type(cls, v):
        v = v.lower()
        if v not in ("skip", "modify", "replace"):
            raise ValueError("Tipo de exceção deve ser skip, modify ou replace")
        return v


class ContractScheduleData(BaseModel):
    contract: ContractInfo
    schedules: List[ShiftScheduleInfo] = []
    exceptions: List[ShiftExceptionInfo] = []
    locations: List[LocationInfo] = []

    def location_by_id(self, location_id: Optional[UUID]) -> Optional[LocationInfo]:
        if location_id is None:
            return None
        for location in self.locations:
            if location.location_id == location_id:
                return location
        return None
