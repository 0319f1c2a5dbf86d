"""Program materializer — copy a library template into a person-owned program.

Two phases:

1. Snapshot (pure): the template tree is ordered and turned into a value
   tree of client rows with fresh ids. Rest days drop their exercises.
2. Apply (one transaction): record the assignment, delete the person's
   existing copy of that kind, insert the snapshot.

A failure anywhere in apply rolls the whole unit back; the prior program
is left untouched.
"""

from __future__ import annotations

import math
from typing import Any, Sequence

from loguru import logger
from sqlalchemy import delete, insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.db import unit_of_work
from app.engine import library
from app.engine.errors import PersistenceFailure, ProgramNotFound, TemplateNotFound
from app.engine.models import (
    AssignmentRequest,
    ClientDay,
    ClientExercise,
    ClientMeal,
    ClientMealDay,
    ClientWeek,
    MealPlan,
    MealPlanTemplateTree,
    ProgramKind,
    WorkoutProgram,
    WorkoutTemplateTree,
)
from app.engine.tables import (
    ClientMealDayRow,
    ClientMealPlanRow,
    ClientMealRow,
    ClientProgramDayRow,
    ClientProgramExerciseRow,
    ClientProgramWeekRow,
    DayCompletionRow,
    TemplateAssignmentRow,
    new_id,
)

DAYS_OF_WEEK = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
REST_DAY = "Sunday"
DAYS_PER_WEEK = 7


def _display_key(item) -> tuple[bool, int]:
    return item.display_order is None, item.display_order or 0


def _order(value: int | None, fallback: int) -> int:
    return value if value is not None else fallback


def meal_week_number(day_number: int) -> int:
    """Meal-plan days group into weeks of seven: days 1–7 are week 1."""
    return max(1, math.ceil(day_number / DAYS_PER_WEEK))


# ---------------------------------------------------------------------------
# Phase 1: snapshots
# ---------------------------------------------------------------------------


def snapshot_workout(tree: WorkoutTemplateTree) -> list[ClientWeek]:
    weeks: list[ClientWeek] = []
    for week in sorted(tree.weeks, key=lambda w: w.week_number):
        days: list[ClientDay] = []
        for d_index, day in enumerate(sorted(week.days, key=_display_key)):
            exercises: list[ClientExercise] = []
            if not day.is_rest_day:
                for e_index, ex in enumerate(sorted(day.exercises, key=_display_key)):
                    exercises.append(
                        ClientExercise(
                            id=new_id(),
                            section_type=ex.section_type or "main",
                            exercise_name=ex.exercise_name,
                            sets=ex.sets,
                            reps_or_time=ex.reps_or_time,
                            rest=ex.rest,
                            notes=ex.notes,
                            instructions=ex.instructions,
                            demo_url=ex.demo_url,
                            display_order=_order(ex.display_order, e_index),
                        )
                    )
            days.append(
                ClientDay(
                    id=new_id(),
                    day_of_week=day.day_of_week,
                    workout_name=day.workout_name,
                    workout_description=day.workout_description,
                    is_rest_day=day.is_rest_day,
                    display_order=_order(day.display_order, d_index),
                    exercises=exercises,
                )
            )
        weeks.append(
            ClientWeek(
                id=new_id(),
                week_number=week.week_number,
                title=week.title,
                focus_description=week.focus_description,
                days=days,
            )
        )
    return weeks


def blank_workout_snapshot(weeks: int) -> list[ClientWeek]:
    """Empty program: Monday to Sunday per week, Sunday a rest day."""
    return [
        ClientWeek(
            id=new_id(),
            week_number=number,
            title=f"Week {number}",
            days=[
                ClientDay(
                    id=new_id(),
                    day_of_week=name,
                    workout_name="Rest Day" if name == REST_DAY else f"Day {index + 1}",
                    is_rest_day=name == REST_DAY,
                    display_order=index,
                )
                for index, name in enumerate(DAYS_OF_WEEK)
            ],
        )
        for number in range(1, weeks + 1)
    ]


def snapshot_meal_plan(tree: MealPlanTemplateTree, person_id: str) -> MealPlan:
    template = tree.template
    days = [
        ClientMealDay(
            id=new_id(),
            day_number=day.day_number,
            day_name=day.day_name,
            week_number=meal_week_number(day.day_number),
            meals=[
                ClientMeal(
                    id=new_id(),
                    **meal.model_dump(exclude={"display_order"}),
                    display_order=_order(meal.display_order, index),
                )
                for index, meal in enumerate(sorted(day.meals, key=_display_key))
            ],
        )
        for day in sorted(tree.days, key=lambda d: d.day_number)
    ]
    return MealPlan(
        person_id=person_id,
        name=template.name,
        calorie_range_min=template.calorie_range_min,
        calorie_range_max=template.calorie_range_max,
        daily_protein_g=template.daily_protein_g,
        daily_carbs_g=template.daily_carbs_g,
        daily_fats_g=template.daily_fats_g,
        days=days,
    )


def workout_rows(person_id: str, weeks: Sequence[ClientWeek]) -> tuple[list[dict], list[dict], list[dict]]:
    """Flatten a snapshot into insert parameters for weeks, days and exercises."""
    week_rows: list[dict] = []
    day_rows: list[dict] = []
    exercise_rows: list[dict] = []
    for week in weeks:
        week_rows.append({"person_id": person_id, **week.model_dump(exclude={"days"})})
        for day in week.days:
            day_rows.append({"person_id": person_id, "week_id": week.id, **day.model_dump(exclude={"exercises"})})
            for ex in day.exercises:
                exercise_rows.append({"person_id": person_id, "day_id": day.id, **ex.model_dump()})
    return week_rows, day_rows, exercise_rows


def meal_plan_rows(plan: MealPlan) -> tuple[dict, list[dict], list[dict]]:
    header = plan.model_dump(exclude={"days"})
    day_rows: list[dict] = []
    meal_rows: list[dict] = []
    for day in plan.days:
        day_rows.append({"person_id": plan.person_id, **day.model_dump(exclude={"meals"})})
        for meal in day.meals:
            meal_rows.append({"person_id": plan.person_id, "day_id": day.id, **meal.model_dump()})
    return header, day_rows, meal_rows


# ---------------------------------------------------------------------------
# Phase 2: apply
# ---------------------------------------------------------------------------


async def _insert_rows(session: AsyncSession, table: Any, rows: list[dict[str, Any]]) -> None:
    if rows:
        await session.execute(insert(table), rows)


async def _record_assignment(session: AsyncSession, kind: ProgramKind, request: AssignmentRequest) -> None:
    session.add(
        TemplateAssignmentRow(
            person_id=request.person_id,
            kind=kind.value,
            template_id=request.template_id,
            suggested_category_id=request.suggested_category_id,
            match_score=request.match_score,
            assigned_by=request.assigned_by,
            notes=request.notes,
        )
    )
    await session.flush()


async def _clear_completions(session: AsyncSession, person_id: str, kind: ProgramKind) -> None:
    await session.execute(
        delete(DayCompletionRow).where(DayCompletionRow.person_id == person_id, DayCompletionRow.kind == kind.value)
    )


async def _delete_workout(session: AsyncSession, person_id: str) -> int:
    await session.execute(delete(ClientProgramExerciseRow).where(ClientProgramExerciseRow.person_id == person_id))
    await session.execute(delete(ClientProgramDayRow).where(ClientProgramDayRow.person_id == person_id))
    result = await session.execute(delete(ClientProgramWeekRow).where(ClientProgramWeekRow.person_id == person_id))
    await _clear_completions(session, person_id, ProgramKind.workout)
    return result.rowcount or 0


async def _delete_meal_plan(session: AsyncSession, person_id: str) -> int:
    await session.execute(delete(ClientMealRow).where(ClientMealRow.person_id == person_id))
    days = await session.execute(delete(ClientMealDayRow).where(ClientMealDayRow.person_id == person_id))
    header = await session.execute(delete(ClientMealPlanRow).where(ClientMealPlanRow.person_id == person_id))
    await _clear_completions(session, person_id, ProgramKind.nutrition)
    return (days.rowcount or 0) + (header.rowcount or 0)


async def _write_workout(session: AsyncSession, person_id: str, weeks: list[ClientWeek]) -> None:
    week_rows, day_rows, exercise_rows = workout_rows(person_id, weeks)
    await _delete_workout(session, person_id)
    await _insert_rows(session, ClientProgramWeekRow, week_rows)
    await _insert_rows(session, ClientProgramDayRow, day_rows)
    await _insert_rows(session, ClientProgramExerciseRow, exercise_rows)


def _persistence_failure(action: str, person_id: str, exc: SQLAlchemyError) -> PersistenceFailure:
    logger.error(f"{action} failed for person={person_id}, rolled back: {exc}")
    return PersistenceFailure(f"{action} failed for person {person_id}")


async def materialize_workout(session: AsyncSession, request: AssignmentRequest) -> WorkoutProgram:
    """Replace the person's workout program with a copy of a library template."""
    logger.info(f"Materializing workout template={request.template_id} for person={request.person_id}")
    try:
        async with unit_of_work(session):
            await _record_assignment(session, ProgramKind.workout, request)
            tree = await library.fetch_workout_template_tree(session, request.template_id)
            if tree is None:
                raise TemplateNotFound(request.template_id)
            weeks = snapshot_workout(tree)
            await _write_workout(session, request.person_id, weeks)
    except SQLAlchemyError as exc:
        raise _persistence_failure("Workout materialization", request.person_id, exc) from exc

    program = WorkoutProgram(person_id=request.person_id, weeks=weeks)
    logger.info(
        f"Materialized workout for person={request.person_id}: "
        f"weeks={len(weeks)} days={sum(len(w.days) for w in weeks)} "
        f"exercises={sum(len(d.exercises) for w in weeks for d in w.days)}"
    )
    return program


async def materialize_nutrition(session: AsyncSession, request: AssignmentRequest) -> MealPlan:
    """Replace the person's meal plan with a copy of a library template."""
    logger.info(f"Materializing meal plan template={request.template_id} for person={request.person_id}")
    try:
        async with unit_of_work(session):
            await _record_assignment(session, ProgramKind.nutrition, request)
            tree = await library.fetch_meal_plan_tree(session, request.template_id)
            if tree is None:
                raise TemplateNotFound(request.template_id)
            plan = snapshot_meal_plan(tree, request.person_id)
            header, day_rows, meal_rows = meal_plan_rows(plan)

            await _delete_meal_plan(session, request.person_id)
            await _insert_rows(session, ClientMealPlanRow, [header])
            await _insert_rows(session, ClientMealDayRow, day_rows)
            await _insert_rows(session, ClientMealRow, meal_rows)
    except SQLAlchemyError as exc:
        raise _persistence_failure("Meal plan materialization", request.person_id, exc) from exc

    logger.info(
        f"Materialized meal plan for person={request.person_id}: "
        f"days={len(plan.days)} meals={sum(len(d.meals) for d in plan.days)}"
    )
    return plan


async def materialize(session: AsyncSession, kind: ProgramKind, request: AssignmentRequest) -> WorkoutProgram | MealPlan:
    if kind == ProgramKind.workout:
        return await materialize_workout(session, request)
    return await materialize_nutrition(session, request)


async def initialize_blank_program(
    session: AsyncSession,
    person_id: str,
    weeks: int | None = None,
) -> WorkoutProgram:
    """Replace the person's workout program with empty weeks to fill in by hand."""
    count = weeks if weeks is not None else settings.blank_program_weeks
    snapshot = blank_workout_snapshot(count)
    try:
        async with unit_of_work(session):
            await _write_workout(session, person_id, snapshot)
    except SQLAlchemyError as exc:
        raise _persistence_failure("Blank program initialization", person_id, exc) from exc

    logger.info(f"Initialized blank {count}-week workout program for person={person_id}")
    return WorkoutProgram(person_id=person_id, weeks=snapshot)


async def remove_program(session: AsyncSession, person_id: str, kind: ProgramKind) -> None:
    """Delete the person's program of a kind, with its completion marks."""
    try:
        async with unit_of_work(session):
            if kind == ProgramKind.workout:
                removed = await _delete_workout(session, person_id)
            else:
                removed = await _delete_meal_plan(session, person_id)
            if not removed:
                raise ProgramNotFound(person_id)
    except SQLAlchemyError as exc:
        raise _persistence_failure("Program removal", person_id, exc) from exc

    logger.info(f"Removed {kind.value} program for person={person_id}")
