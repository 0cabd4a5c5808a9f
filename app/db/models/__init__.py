from app.db.database import Base

# Import models
from app.db.models.organizations import Organizations
from app.db.models.workers import Workers, WorkerStatus, PayType
from app.db.models.shift_templates import ShiftTemplates
from app.db.models.leaves import Leaves, LeaveStatus, LeaveType
from app.db.models.shifts import Shifts, ShiftStatus, ShiftSource
from app.db.models.public_holidays import PublicHolidays

__all__ = [
    "Base",
    # Models
    "Organizations",
    "Workers",
    "ShiftTemplates",
    "Leaves",
    "Shifts",
    "PublicHolidays",
    # Enums
    "WorkerStatus",
    "PayType",
    "LeaveStatus",
    "LeaveType",
    "ShiftStatus",
    "ShiftSource",
]
