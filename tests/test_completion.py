"""Tests for completion marks and week/phase aggregates."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from app.engine import completion, materializer
from app.engine.errors import DayNotFound, ProgramNotFound
from app.engine.models import AssignmentRequest, ProgramKind, TrackedDay
from app.engine.tables import DayCompletionRow
from tests.conftest import OTHER_PERSON, PERSON, seed_nutrition_library, seed_workout_library


def _week(number: int, rest_last: bool = True) -> list[TrackedDay]:
    return [
        TrackedDay(day_id=f"w{number}d{i}", week_number=number, is_rest_day=rest_last and i == 6)
        for i in range(7)
    ]


async def _marks(session) -> int:
    return await session.scalar(select(func.count()).select_from(DayCompletionRow))


# ---------------------------------------------------------------------------
# Aggregates (no database)
# ---------------------------------------------------------------------------


class TestWeekStats:
    def test_rest_day_not_counted(self):
        s = completion.week_stats(_week(1), set(), 1)
        assert s.total == 6
        assert s.completed == 0
        assert s.percent == 0
        assert s.is_complete is False

    def test_complete_when_all_trackable_done(self):
        days = _week(1)
        done = {d.day_id for d in days if not d.is_rest_day}
        s = completion.week_stats(days, done, 1)
        assert s.completed == 6
        assert s.percent == 100
        assert s.is_complete is True

    def test_mark_on_rest_day_ignored(self):
        s = completion.week_stats(_week(1), {"w1d6"}, 1)
        assert s.completed == 0

    def test_partial_percent(self):
        s = completion.week_stats(_week(1), {"w1d0", "w1d1"}, 1)
        assert s.percent == 33

    def test_empty_week_is_never_complete(self):
        s = completion.week_stats(_week(1), set(), 5)
        assert s.total == 0
        assert s.is_complete is False


class TestPhaseStats:
    def test_whole_program(self):
        days = _week(1) + _week(2)
        done = {d.day_id for d in _week(1) if not d.is_rest_day}
        s = completion.phase_stats(days, done)
        assert s.total_days == 12
        assert s.completed_days == 6
        assert s.percent == 50
        assert s.is_phase_complete is False

    def test_phase_complete(self):
        days = _week(1, rest_last=False)
        s = completion.phase_stats(days, {d.day_id for d in days})
        assert s.is_phase_complete is True
        assert s.percent == 100

    def test_empty_program(self):
        s = completion.phase_stats([], {"stale"})
        assert s.total_days == 0
        assert s.percent == 0
        assert s.is_phase_complete is False

    def test_program_stats_weeks_in_order(self):
        days = _week(2) + _week(1)
        stats = completion.program_stats(ProgramKind.workout, days, {"w2d0", "unknown"})
        assert [w.week_number for w in stats.weeks] == [1, 2]
        assert stats.completed_day_ids == ["w2d0"]
        assert stats.phase.completed_days == 1


# ---------------------------------------------------------------------------
# Toggle (database)
# ---------------------------------------------------------------------------


async def _workout(session):
    await seed_workout_library(session)
    return await materializer.materialize_workout(
        session, AssignmentRequest(person_id=PERSON, template_id="tpl-foundations")
    )


class TestToggle:
    @pytest.mark.asyncio
    async def test_toggle_on_then_off(self, session):
        program = await _workout(session)
        day_id = program.weeks[1].days[0].id

        on = await completion.toggle_day(session, PERSON, ProgramKind.workout, day_id)
        assert on.completed is True
        assert on.day_id == day_id
        assert await _marks(session) == 1
        row = (await session.execute(select(DayCompletionRow))).scalar_one()
        assert row.week_number == 2
        assert row.kind == "workout"

        off = await completion.toggle_day(session, PERSON, ProgramKind.workout, day_id)
        assert off.completed is False
        assert await _marks(session) == 0

    @pytest.mark.asyncio
    async def test_never_more_than_one_mark(self, session):
        program = await _workout(session)
        day_id = program.weeks[0].days[0].id
        for _ in range(5):
            await completion.toggle_day(session, PERSON, ProgramKind.workout, day_id)
        assert await _marks(session) == 1

    @pytest.mark.asyncio
    async def test_unknown_day(self, session):
        await _workout(session)
        with pytest.raises(DayNotFound):
            await completion.toggle_day(session, PERSON, ProgramKind.workout, "no-such-day")
        assert await _marks(session) == 0

    @pytest.mark.asyncio
    async def test_someone_elses_day(self, session):
        program = await _workout(session)
        with pytest.raises(DayNotFound):
            await completion.toggle_day(session, OTHER_PERSON, ProgramKind.workout, program.weeks[0].days[0].id)

    @pytest.mark.asyncio
    async def test_wrong_kind(self, session):
        program = await _workout(session)
        with pytest.raises(DayNotFound):
            await completion.toggle_day(session, PERSON, ProgramKind.nutrition, program.weeks[0].days[0].id)

    @pytest.mark.asyncio
    async def test_wrong_kind_leaves_existing_mark(self, session):
        program = await _workout(session)
        day_id = program.weeks[0].days[0].id
        await completion.toggle_day(session, PERSON, ProgramKind.workout, day_id)

        with pytest.raises(DayNotFound):
            await completion.toggle_day(session, PERSON, ProgramKind.nutrition, day_id)

        assert await completion.fetch_completed_day_ids(session, PERSON, ProgramKind.workout) == {day_id}
        assert await _marks(session) == 1

    @pytest.mark.asyncio
    async def test_meal_plan_day(self, session):
        await seed_nutrition_library(session)
        plan = await materializer.materialize_nutrition(
            session, AssignmentRequest(person_id=PERSON, template_id="mp-2000")
        )
        day = plan.days[9]
        result = await completion.toggle_day(session, PERSON, ProgramKind.nutrition, day.id)
        assert result.completed is True
        row = (await session.execute(select(DayCompletionRow))).scalar_one()
        assert row.week_number == 2


class TestLoadProgramStats:
    @pytest.mark.asyncio
    async def test_first_week_complete(self, session):
        program = await _workout(session)
        for day in program.weeks[0].days:
            if not day.is_rest_day:
                await completion.toggle_day(session, PERSON, ProgramKind.workout, day.id)

        stats = await completion.load_program_stats(session, PERSON, ProgramKind.workout)
        assert [w.is_complete for w in stats.weeks] == [True, False, False, False]
        assert stats.phase.total_days == 24
        assert stats.phase.completed_days == 6
        assert stats.phase.percent == 25
        assert stats.phase.is_phase_complete is False
        assert len(stats.completed_day_ids) == 6

    @pytest.mark.asyncio
    async def test_nutrition_stats(self, session):
        await seed_nutrition_library(session)
        plan = await materializer.materialize_nutrition(
            session, AssignmentRequest(person_id=PERSON, template_id="mp-2000")
        )
        for day in plan.days[:7]:
            await completion.toggle_day(session, PERSON, ProgramKind.nutrition, day.id)

        stats = await completion.load_program_stats(session, PERSON, ProgramKind.nutrition)
        assert [(w.week_number, w.total, w.completed) for w in stats.weeks] == [(1, 7, 7), (2, 7, 0)]
        assert stats.weeks[0].is_complete is True
        assert stats.phase.percent == 50

    @pytest.mark.asyncio
    async def test_no_program(self, session):
        with pytest.raises(ProgramNotFound):
            await completion.load_program_stats(session, PERSON, ProgramKind.workout)
