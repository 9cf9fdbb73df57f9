"""API routes."""

from timeclock_engine.api.routes.cron import router as cron_router
from timeclock_engine.api.routes.health import router as health_router
from timeclock_engine.api.routes.payroll import router as payroll_router
from timeclock_engine.api.routes.time_clock import router as time_clock_router

__all__ = ["cron_router", "health_router", "payroll_router", "time_clock_router"]
