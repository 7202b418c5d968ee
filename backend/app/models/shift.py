import enum
import uuid

from sqlalchemy import (
    Column, Integer, String, Boolean, Date, DateTime, Float, Text, Uuid,
    Enum as SQLEnum, UniqueConstraint, Index
)
from sqlalchemy.sql import func
from app.database import Base


class ShiftStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Shift(Base):
    """
    Turno concreto materializado a partir de um modelo de turno do contrato.

    Criado somente pelo gerador; a chave (local, data, início, fim) é única.
    Alocação de vigilantes e check-in alteram os contadores depois, em
    outros serviços.
    """
    __tablename__ = "shifts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    contract_id = Column(Uuid, nullable=True, index=True)
    shift_template_id = Column(Uuid, nullable=True, index=True)

    location_id = Column(Uuid, nullable=False)
    location_name = Column(String(200), nullable=True)
    location_address = Column(String(500), nullable=True)

    manager_id = Column(Uuid, nullable=True)
    created_by = Column(Uuid, nullable=True)

    shift_date = Column(Date, nullable=False, index=True)
    shift_day = Column(Integer, nullable=False)
    shift_month = Column(Integer, nullable=False)
    shift_year = Column(Integer, nullable=False)
    shift_quarter = Column(Integer, nullable=False)
    shift_week = Column(Integer, nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 1=Seg ... 7=Dom
    shift_end_date = Column(Date, nullable=True)

    shift_start = Column(DateTime, nullable=False)
    shift_end = Column(DateTime, nullable=False)

    total_duration_minutes = Column(Integer, nullable=False)
    work_duration_minutes = Column(Integer, nullable=False)
    work_duration_hours = Column(Float, nullable=False)
    break_duration_minutes = Column(Integer, default=60)
    paid_break_minutes = Column(Integer, default=0)
    unpaid_break_minutes = Column(Integer, default=60)

    shift_type = Column(String(30), default="REGULAR")
    is_regular_weekday = Column(Boolean, default=True)
    is_saturday = Column(Boolean, default=False)
    is_sunday = Column(Boolean, default=False)
    is_public_holiday = Column(Boolean, default=False)

    is_night_shift = Column(Boolean, default=False)
    night_hours = Column(Float, default=0)
    day_hours = Column(Float, default=0)

    required_guards = Column(Integer, default=1)
    assigned_guards_count = Column(Integer, default=0)
    confirmed_guards_count = Column(Integer, default=0)
    checked_in_guards_count = Column(Integer, default=0)
    completed_guards_count = Column(Integer, default=0)
    is_fully_staffed = Column(Boolean, default=False)
    is_understaffed = Column(Boolean, default=True)
    is_overstaffed = Column(Boolean, default=False)
    staffing_percentage = Column(Float, default=0)

    status = Column(
        SQLEnum(ShiftStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ShiftStatus.SCHEDULED
    )
    approval_status = Column(String(20), default="APPROVED")
    requires_approval = Column(Boolean, default=False)

    is_training_shift = Column(Boolean, default=False)
    requires_armed_guard = Column(Boolean, default=False)
    requires_supervisor = Column(Boolean, default=False)

    description = Column(Text, nullable=True)
    special_instructions = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    __table_args__ = (
        UniqueConstraint(
            "location_id", "shift_date", "shift_start", "shift_end",
            name="uq_shift_location_date_start_end"
        ),
        Index("ix_shifts_contract_date", "contract_id", "shift_date"),
    )
