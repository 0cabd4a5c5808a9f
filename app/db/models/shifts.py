from sqlalchemy import String, Integer, Float, Boolean, Date, Time, DateTime, ForeignKey, Enum as SQLEnum, Index, func
from datetime import date, datetime, time
from sqlalchemy.orm import Mapped, mapped_column
from enum import Enum
from typing import Optional
from app.db.database import Base


class ShiftStatus(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    CANCELLED = "CANCELLED"


class ShiftSource(str, Enum):
    MANUAL = "MANUAL"
    AUTO = "AUTO"
    IMPORT = "IMPORT"


class Shifts(Base):
    __tablename__ = "shifts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    organization_id: Mapped[str] = mapped_column(String(64), ForeignKey("organizations.id"), nullable=False)
    worker_id: Mapped[str] = mapped_column(String(64), ForeignKey("workers.id"), nullable=False)
    template_id: Mapped[Optional[str]] = mapped_column(String(64), ForeignKey("shift_templates.id"), nullable=True)
    shop_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    shift_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    hours: Mapped[float] = mapped_column(Float, nullable=False)
    gross_hours: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    unpaid_break_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    type: Mapped[str] = mapped_column(String(32), nullable=False, default="regular")
    status: Mapped[ShiftStatus] = mapped_column(SQLEnum(ShiftStatus, name="shift_status_enum"), nullable=False)
    source: Mapped[ShiftSource] = mapped_column(SQLEnum(ShiftSource, name="shift_source_enum"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_shifts_org_date", "organization_id", "date"),
        Index("ix_shifts_worker_date", "worker_id", "date"),
    )
