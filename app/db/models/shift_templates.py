from datetime import datetime, time
from typing import Any, Optional
from sqlalchemy import String, Integer, Time, DateTime, JSON, Boolean, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.database import Base


class ShiftTemplates(Base):
    __tablename__ = "shift_templates"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    organization_id: Mapped[str] = mapped_column(String(64), ForeignKey("organizations.id"), nullable=False, index=True)
    shop_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False, default="regular")
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    days_of_week: Mapped[Optional[list[int]]] = mapped_column(JSON, nullable=True)
    required_workers: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    required_by_day: Mapped[Optional[dict[str, int]]] = mapped_column(JSON, nullable=True)
    break_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rules: Mapped[Optional[list[dict[str, Any]]]] = mapped_column(JSON, nullable=True)
    overtime_override: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
