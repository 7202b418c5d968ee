from .manager import Manager
from .shift_template import ShiftTemplate
from .shift import Shift, ShiftStatus

__all__ = [
    "Manager",
    "ShiftTemplate",
    "Shift",
    "ShiftStatus"
]
