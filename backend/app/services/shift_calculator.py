"""
Cálculos puros usados na materialização de turnos.

Nada aqui acessa banco ou mensageria: horários, janela de geração,
divisão de horas noturnas/diurnas e partes da data.
"""
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from app.schemas.shift_generation import GenerationWindow

NIGHT_START = time(22, 0)
NIGHT_END = time(6, 0)


def local_today(tz_name: str) -> date:
    return datetime.now(ZoneInfo(tz_name)).date()


def crosses_midnight(start: time, end: time, flagged: bool = False) -> bool:
    return flagged or end <= start


def build_shift_times(
    shift_date: date,
    start: time,
    end: time,
    flagged_crosses_midnight: bool = False
) -> Tuple[datetime, datetime]:
    """
    Retorna (início, fim) do turno. Se o turno atravessa a meia-noite
    o fim cai no dia seguinte.
    """
    start_dt = datetime.combine(shift_date, start)
    end_dt = datetime.combine(shift_date, end)
    if crosses_midnight(start, end, flagged_crosses_midnight):
        end_dt += timedelta(days=1)
    return start_dt, end_dt


def _overlap_minutes(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> float:
    latest_start = max(a_start, b_start)
    earliest_end = min(a_end, b_end)
    if earliest_end <= latest_start:
        return 0.0
    return (earliest_end - latest_start).total_seconds() / 60


def calculate_night_minutes(start: datetime, end: datetime) -> float:
    """
    Minutos de [start, end) que caem em 22:00-24:00 ou 00:00-06:00,
    somando a interseção com as faixas noturnas de cada dia coberto.
    """
    if end <= start:
        return 0.0

    total = 0.0
    current = start.date() - timedelta(days=1)
    last = end.date()
    while current <= last:
        midnight = datetime.combine(current, time(0, 0))
        early_end = datetime.combine(current, NIGHT_END)
        late_start = datetime.combine(current, NIGHT_START)
        next_midnight = midnight + timedelta(days=1)
        total += _overlap_minutes(start, end, midnight, early_end)
        total += _overlap_minutes(start, end, late_start, next_midnight)
        current += timedelta(days=1)
    return total


def calculate_night_hours(start: datetime, end: datetime) -> float:
    return round(calculate_night_minutes(start, end) / 60, 2)


def calculate_day_hours(start: datetime, end: datetime) -> float:
    total_hours = (end - start).total_seconds() / 3600
    return round(total_hours - calculate_night_hours(start, end), 2)


def is_night_shift(start: time, end: time) -> bool:
    return start >= NIGHT_START or end <= NIGHT_END


def date_parts(shift_date: date) -> dict:
    """Partes da data gravadas no turno. day_of_week vai de 1 (Seg) a 7 (Dom)."""
    iso = shift_date.isocalendar()
    return {
        "shift_day": shift_date.day,
        "shift_month": shift_date.month,
        "shift_year": shift_date.year,
        "shift_quarter": (shift_date.month - 1) // 3 + 1,
        "shift_week": iso[1],
        "day_of_week": iso[2],
    }


def clamp_to_contract_end(window: GenerationWindow, contract_end_date: Optional[date]) -> GenerationWindow:
    if contract_end_date is None:
        return window
    limit = contract_end_date + timedelta(days=1)
    if window.to_date <= limit:
        return window
    return GenerationWindow(from_date=window.from_date, to_date=limit)


def compute_generation_window(
    last_shift_date: Optional[date],
    today: date,
    advance_days: int,
    contract_end_date: Optional[date] = None
) -> GenerationWindow:
    """
    Janela [from, to) da próxima geração.

    from: dia seguinte ao último turno existente, ou hoje se não houver turnos.
    to: from + advance_days, limitado ao dia seguinte ao fim do contrato.
    """
    from_date = last_shift_date + timedelta(days=1) if last_shift_date else today
    window = GenerationWindow(from_date=from_date, to_date=from_date + timedelta(days=advance_days))
    return clamp_to_contract_end(window, contract_end_date)
