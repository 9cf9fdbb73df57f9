"""Time Clock Command Line Interface.

Provides operational tools for:
- Serving the HTTP API
- Running the soft cap sweep from a scheduler without HTTP
- Printing an organization's pay period summary
- Creating the database schema

Usage:
    timeclock-engine serve
    timeclock-engine sweep-soft-cap
    timeclock-engine pay-period --organization-id X [--previous] [--json]
    timeclock-engine create-schema
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from contextlib import AbstractAsyncContextManager
from typing import Callable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from timeclock_engine.calculators.pay_period import format_currency, format_hours
from timeclock_engine.clock import Clock, SystemClock
from timeclock_engine.config import Settings, get_settings
from timeclock_engine.database import get_session, init_db
from timeclock_engine.services.payroll_service import PayrollService, PayrollSummary
from timeclock_engine.services.results import SweepResult
from timeclock_engine.services.time_clock_service import TimeClockService

logger = logging.getLogger(__name__)

SessionScope = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def parse_uuid(s: str) -> UUID:
    """Parse UUID string."""
    return UUID(s)


class TimeClockCli:
    """Time Clock Command Line Interface."""

    def __init__(
        self,
        clock: Clock | None = None,
        settings: Settings | None = None,
        session_scope: SessionScope | None = None,
    ) -> None:
        self.clock = clock or SystemClock()
        self.settings = settings or get_settings()
        self.session_scope = session_scope or get_session
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="timeclock-engine",
            description="Time clock operational tools",
        )
        parser.add_argument(
            "--log-level",
            default=None,
            help="Override LOG_LEVEL for this run",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        subparsers.add_parser("serve", help="Run the HTTP API with uvicorn")

        subparsers.add_parser(
            "sweep-soft-cap",
            help="Flag open entries that have reached their soft cap",
        )

        pay_period = subparsers.add_parser(
            "pay-period",
            help="Show hours and pay per employee for a pay period",
        )
        pay_period.add_argument(
            "--organization-id",
            type=parse_uuid,
            required=True,
            help="Organization to summarize",
        )
        pay_period.add_argument(
            "--previous",
            action="store_true",
            help="Use the previous pay period instead of the current one",
        )
        pay_period.add_argument(
            "--json",
            action="store_true",
            help="Output as JSON",
        )

        subparsers.add_parser(
            "create-schema",
            help="Create missing tables in the configured database",
        )

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        logging.basicConfig(
            level=(parsed.log_level or self.settings.log_level).upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        if not parsed.command:
            self.parser.print_help()
            return 1

        handlers: dict[str, Callable[[argparse.Namespace], int]] = {
            "serve": self._cmd_serve,
            "sweep-soft-cap": self._cmd_sweep_soft_cap,
            "pay-period": self._cmd_pay_period,
            "create-schema": self._cmd_create_schema,
        }

        handler = handlers.get(parsed.command)
        if handler:
            return handler(parsed)

        print(f"Unknown command: {parsed.command}", file=sys.stderr)
        return 1

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _cmd_serve(self, args: argparse.Namespace) -> int:
        from timeclock_engine.__main__ import main as serve

        serve()
        return 0

    def _cmd_sweep_soft_cap(self, args: argparse.Namespace) -> int:
        result = asyncio.run(self.sweep_soft_cap())
        print(
            f"Processed {result.processed} open entries: "
            f"{result.flagged} flagged, {result.approaching} approaching the cap"
        )
        return 0

    def _cmd_pay_period(self, args: argparse.Namespace) -> int:
        summary = asyncio.run(self.pay_period_summary(args.organization_id, args.previous))

        if args.json:
            print(json.dumps(summary_to_dict(summary), indent=2))
        else:
            print(render_summary(summary))
        return 0

    def _cmd_create_schema(self, args: argparse.Namespace) -> int:
        asyncio.run(self.create_schema())
        print("Schema is up to date.")
        return 0

    # ------------------------------------------------------------------
    # Async implementations
    # ------------------------------------------------------------------

    async def sweep_soft_cap(self) -> SweepResult:
        """Run one soft cap evaluation pass and commit it."""
        async with self.session_scope() as session:
            service = TimeClockService(session, self.clock, self.settings)
            return await service.evaluate_soft_cap_for_open_entries()

    async def pay_period_summary(
        self, organization_id: UUID, previous: bool = False
    ) -> PayrollSummary:
        async with self.session_scope() as session:
            service = PayrollService(session, self.clock, self.settings)
            return await service.get_payroll_summary(organization_id, previous=previous)

    async def create_schema(self) -> None:
        from timeclock_engine.models import Base

        engine, _ = init_db()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Created missing tables")


def summary_to_dict(summary: PayrollSummary) -> dict[str, object]:
    """JSON-safe view of a payroll summary."""
    return {
        "organization_id": str(summary.organization_id),
        "period": {
            "start": summary.period.start.isoformat(),
            "end": summary.period.end.isoformat(),
            "label": summary.period.label,
        },
        "employees": [
            {
                "user_id": str(e.user_id),
                "entries_count": e.entries_count,
                "regular_hours": str(e.earnings.regular_hours),
                "overtime_hours": str(e.earnings.overtime_hours),
                "total_pay": str(e.earnings.total_pay),
                "job_ids": [str(j) for j in e.job_ids],
            }
            for e in summary.employees
        ],
        "total_hours": str(summary.total_hours),
        "total_pay": str(summary.total_pay),
    }


def render_summary(summary: PayrollSummary) -> str:
    """Human-readable table of a payroll summary."""
    lines = [
        f"Pay period {summary.period.label} "
        f"({summary.period.start.isoformat()} to {summary.period.end.isoformat()})",
        "=" * 60,
    ]
    if not summary.employees:
        lines.append("  No settled entries in this period.")
    for e in summary.employees:
        lines.append(
            f"  {e.user_id}  {e.entries_count:>3} entries  "
            f"{format_hours(e.total_hours):>8}  {format_currency(e.earnings.total_pay):>12}"
        )
    lines.append("=" * 60)
    lines.append(
        f"  Total: {format_hours(summary.total_hours)}, {format_currency(summary.total_pay)}"
    )
    return "\n".join(lines)


def main() -> int:
    """CLI entry point."""
    cli = TimeClockCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
