"""Organization payroll settings and pay rate models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Date, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from timeclock_engine.calculators.types import OvertimeType, PayPeriodType, PayrollSettings
from timeclock_engine.models.base import Base, TimestampMixin


class OrganizationSettings(Base, TimestampMixin):
    """Per-organization pay period, overtime and soft cap configuration."""

    __tablename__ = "organization_settings"

    organization_id: Mapped[UUID] = mapped_column(primary_key=True)
    pay_period_type: Mapped[str] = mapped_column(
        String, nullable=False, default=PayPeriodType.WEEKLY.value
    )
    pay_day: Mapped[str] = mapped_column(String, nullable=False, default="friday")
    pay_period_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    overtime_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    overtime_type: Mapped[str] = mapped_column(
        String, nullable=False, default=OvertimeType.WEEKLY40.value
    )
    overtime_rate: Mapped[Decimal] = mapped_column(
        Numeric(6, 3), nullable=False, default=Decimal("1.5")
    )
    soft_cap_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    timezone: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "pay_period_type IN ('weekly', 'biweekly')",
            name="organization_settings_period_type_check",
        ),
        CheckConstraint(
            "overtime_type IN ('weekly40', 'daily8')",
            name="organization_settings_overtime_type_check",
        ),
        CheckConstraint(
            "soft_cap_minutes IS NULL OR soft_cap_minutes > 0",
            name="organization_settings_cap_check",
        ),
    )

    __mapper_args__ = {"eager_defaults": True}

    def to_payroll_settings(self, default_timezone: str = "UTC") -> PayrollSettings:
        return PayrollSettings(
            pay_period_type=self.pay_period_type,
            pay_day=self.pay_day,
            pay_period_start_date=self.pay_period_start_date,
            overtime_enabled=self.overtime_enabled,
            overtime_type=self.overtime_type,
            overtime_rate=self.overtime_rate,
            timezone=self.timezone or default_timezone,
        )


class PayRate(Base, TimestampMixin):
    """Effective-dated hourly rate for a user."""

    __tablename__ = "pay_rate"

    pay_rate_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(nullable=False)
    organization_id: Mapped[UUID] = mapped_column(nullable=False)
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(14, 6), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        CheckConstraint("hourly_rate >= 0", name="pay_rate_amount_check"),
        CheckConstraint(
            "end_date IS NULL OR end_date >= start_date",
            name="pay_rate_dates_check",
        ),
    )

    __mapper_args__ = {"eager_defaults": True}

    def is_active_on(self, as_of_date: date) -> bool:
        """Check if the rate applies on a given date."""
        if self.start_date > as_of_date:
            return False
        if self.end_date is not None and self.end_date < as_of_date:
            return False
        return True
