from datetime import date
from typing import Optional
from sqlalchemy import String, Integer, Float, Date, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.database import Base


class PublicHolidays(Base):
    __tablename__ = "public_holidays"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    organization_id: Mapped[str] = mapped_column(String(64), ForeignKey("organizations.id"), nullable=False, index=True)
    holiday_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False, default="Public Holiday")
    multiplier: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    __table_args__ = (
        UniqueConstraint("organization_id", "date", name="uq_public_holidays_org_date"),
    )
