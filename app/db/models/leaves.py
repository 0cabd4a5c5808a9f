from datetime import date, datetime
from enum import Enum
from typing import Optional
from sqlalchemy import String, Integer, Date, DateTime, ForeignKey, Enum as SQLEnum, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.database import Base


class LeaveStatus(str, Enum):
    APPROVED = "APPROVED"
    PENDING = "PENDING"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class LeaveType(str, Enum):
    HOLIDAY = "holiday"
    SICK = "sick"
    PERSONAL = "personal"
    OTHER = "other"


class Leaves(Base):
    __tablename__ = "leaves"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    worker_id: Mapped[str] = mapped_column(String(64), ForeignKey("workers.id"), nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[LeaveStatus] = mapped_column(SQLEnum(LeaveStatus, name="leave_status_enum"), nullable=False)
    type: Mapped[LeaveType] = mapped_column(SQLEnum(LeaveType, name="leave_type_enum"), nullable=False, default=LeaveType.HOLIDAY)
    reason: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
