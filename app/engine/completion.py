"""Completion tracking — per-day marks and aggregates over a program.

A mark is present or absent; toggling flips it. Week and phase figures
are derived on every read from the program's days and the person's
marks, never stored. Rest days are not trackable and count toward
neither side of a total.
"""

from __future__ import annotations

from datetime import datetime, timezone

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import unit_of_work
from app.engine.energy import round_half_up
from app.engine.errors import DayNotFound, PersistenceFailure
from app.engine.models import PhaseStats, ProgramKind, ProgramStats, ToggleResult, TrackedDay, WeekStats
from app.engine.programs import load_program
from app.engine.tables import ClientMealDayRow, ClientProgramDayRow, ClientProgramWeekRow, DayCompletionRow


def _percent(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    return round_half_up(completed / total * 100)


def _trackable(days: list[TrackedDay]) -> list[TrackedDay]:
    return [d for d in days if not d.is_rest_day]


def week_stats(days: list[TrackedDay], completed: set[str], week_number: int) -> WeekStats:
    in_week = [d for d in _trackable(days) if d.week_number == week_number]
    done = sum(1 for d in in_week if d.day_id in completed)
    return WeekStats(
        week_number=week_number,
        total=len(in_week),
        completed=done,
        percent=_percent(done, len(in_week)),
        is_complete=len(in_week) > 0 and done == len(in_week),
    )


def phase_stats(days: list[TrackedDay], completed: set[str]) -> PhaseStats:
    trackable = _trackable(days)
    done = sum(1 for d in trackable if d.day_id in completed)
    return PhaseStats(
        total_days=len(trackable),
        completed_days=done,
        percent=_percent(done, len(trackable)),
        is_phase_complete=len(trackable) > 0 and done >= len(trackable),
    )


def program_stats(kind: ProgramKind, days: list[TrackedDay], completed: set[str]) -> ProgramStats:
    week_numbers = sorted({d.week_number for d in days})
    return ProgramStats(
        kind=kind,
        weeks=[week_stats(days, completed, n) for n in week_numbers],
        phase=phase_stats(days, completed),
        completed_day_ids=sorted(d.day_id for d in days if d.day_id in completed),
    )


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


async def _week_of_day(session: AsyncSession, person_id: str, kind: ProgramKind, day_id: str) -> int | None:
    if kind == ProgramKind.workout:
        stmt = (
            select(ClientProgramWeekRow.week_number)
            .join(ClientProgramDayRow, ClientProgramDayRow.week_id == ClientProgramWeekRow.id)
            .where(ClientProgramDayRow.id == day_id, ClientProgramDayRow.person_id == person_id)
        )
    else:
        stmt = select(ClientMealDayRow.week_number).where(
            ClientMealDayRow.id == day_id, ClientMealDayRow.person_id == person_id
        )
    return await session.scalar(stmt)


async def fetch_completed_day_ids(session: AsyncSession, person_id: str, kind: ProgramKind) -> set[str]:
    result = await session.execute(
        select(DayCompletionRow.day_id).where(
            DayCompletionRow.person_id == person_id, DayCompletionRow.kind == kind.value
        )
    )
    return set(result.scalars().all())


async def toggle_day(session: AsyncSession, person_id: str, kind: ProgramKind, day_id: str) -> ToggleResult:
    """Remove the day's mark if present, otherwise add one.

    The delete runs first, so a double tap can never leave two marks; the
    unique (person, day) constraint catches a concurrent insert.
    """
    now = datetime.now(timezone.utc)
    try:
        async with unit_of_work(session):
            result = await session.execute(
                delete(DayCompletionRow).where(
                    DayCompletionRow.person_id == person_id,
                    DayCompletionRow.day_id == day_id,
                    DayCompletionRow.kind == kind.value,
                )
            )
            if result.rowcount:
                completed = False
            else:
                week_number = await _week_of_day(session, person_id, kind, day_id)
                if week_number is None:
                    raise DayNotFound(person_id, day_id)
                session.add(
                    DayCompletionRow(
                        person_id=person_id,
                        day_id=day_id,
                        kind=kind.value,
                        week_number=week_number,
                        completed_at=now,
                    )
                )
                await session.flush()
                completed = True
    except IntegrityError:
        # Another request marked the same day first.
        logger.info(f"Day {day_id} already marked for person={person_id}")
        completed = True
    except SQLAlchemyError as exc:
        logger.error(f"Completion toggle failed for person={person_id} day={day_id}: {exc}")
        raise PersistenceFailure(f"Completion toggle failed for person {person_id}") from exc

    logger.info(f"Toggled {kind.value} day={day_id} for person={person_id}: completed={completed}")
    return ToggleResult(day_id=day_id, completed=completed, toggled_at=now)


async def load_program_stats(session: AsyncSession, person_id: str, kind: ProgramKind) -> ProgramStats:
    program = await load_program(session, person_id, kind)
    completed = await fetch_completed_day_ids(session, person_id, kind)
    return program_stats(kind, program.tracked_days(), completed)
