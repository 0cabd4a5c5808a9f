from datetime import datetime
from enum import Enum
from typing import Optional
from sqlalchemy import String, Float, DateTime, JSON, ForeignKey, Enum as SQLEnum, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.database import Base


class WorkerStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_LEAVE = "on_leave"


class PayType(str, Enum):
    HOURLY = "hourly"
    SALARIED = "salaried"


class Workers(Base):
    __tablename__ = "workers"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    organization_id: Mapped[str] = mapped_column(String(64), ForeignKey("organizations.id"), nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    status: Mapped[WorkerStatus] = mapped_column(SQLEnum(WorkerStatus, name="worker_status_enum"), nullable=False)
    pay_type: Mapped[PayType] = mapped_column(SQLEnum(PayType, name="pay_type_enum"), nullable=False)
    cost_per_hour: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    contracted_hours: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    min_hours_week: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    max_hours_week: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    monthly_salary: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    fixed_hours_week: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    available_days: Mapped[Optional[list[int]]] = mapped_column(JSON, nullable=True)
    shift_preference: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    shop_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
