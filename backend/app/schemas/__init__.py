from .contract_schedule import (
    HolidayStatus, BatchHolidayReply, LocationClosedStatus,
    ContractInfo, LocationInfo, ShiftScheduleInfo, ShiftExceptionInfo,
    ContractScheduleData
)
from .shift_generation import (
    GenerationWindow, SkipReason, GenerationResult, GenerateShiftsRequest,
    ShiftsGeneratedEvent, ContractRunOutcome, JobRunSummary
)

__all__ = [
    "HolidayStatus", "BatchHolidayReply", "LocationClosedStatus",
    "ContractInfo", "LocationInfo", "ShiftScheduleInfo", "ShiftExceptionInfo",
    "ContractScheduleData",
    "GenerationWindow", "SkipReason", "GenerationResult", "GenerateShiftsRequest",
    "ShiftsGeneratedEvent", "ContractRunOutcome", "JobRunSummary"
]
