"""Materialized program reader and per-row editing.

Edits touch only the person's copy. Every edit target is checked to
belong to the person before it is changed; a row owned by someone else
is reported exactly like a missing one.
"""

from __future__ import annotations

from collections import defaultdict

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import unit_of_work
from app.engine.errors import PersistenceFailure, ProgramNotFound
from app.engine.models import (
    ClientDay,
    ClientExercise,
    ClientMeal,
    ClientMealDay,
    ClientWeek,
    DayUpdate,
    ExerciseInput,
    MealPlan,
    ProgramKind,
    WeekUpdate,
    WorkoutProgram,
)
from app.engine.tables import (
    ClientMealDayRow,
    ClientMealPlanRow,
    ClientMealRow,
    ClientProgramDayRow,
    ClientProgramExerciseRow,
    ClientProgramWeekRow,
)

DEFAULT_EXERCISE_NAME = "New Exercise"


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------


def _exercise(row: ClientProgramExerciseRow) -> ClientExercise:
    return ClientExercise(
        id=row.id,
        section_type=row.section_type,
        exercise_name=row.exercise_name,
        sets=row.sets,
        reps_or_time=row.reps_or_time,
        rest=row.rest,
        notes=row.notes,
        instructions=row.instructions,
        demo_url=row.demo_url,
        display_order=row.display_order,
    )


async def load_workout_program(session: AsyncSession, person_id: str) -> WorkoutProgram:
    week_rows = (
        (
            await session.execute(
                select(ClientProgramWeekRow)
                .where(ClientProgramWeekRow.person_id == person_id)
                .order_by(ClientProgramWeekRow.week_number)
            )
        )
        .scalars()
        .all()
    )
    if not week_rows:
        raise ProgramNotFound(person_id)

    day_rows = (
        (
            await session.execute(
                select(ClientProgramDayRow)
                .where(ClientProgramDayRow.person_id == person_id)
                .order_by(ClientProgramDayRow.display_order)
            )
        )
        .scalars()
        .all()
    )
    exercise_rows = (
        (
            await session.execute(
                select(ClientProgramExerciseRow)
                .where(ClientProgramExerciseRow.person_id == person_id)
                .order_by(ClientProgramExerciseRow.display_order)
            )
        )
        .scalars()
        .all()
    )

    exercises_by_day: dict[str, list[ClientExercise]] = defaultdict(list)
    for row in exercise_rows:
        exercises_by_day[row.day_id].append(_exercise(row))

    days_by_week: dict[str, list[ClientDay]] = defaultdict(list)
    for row in day_rows:
        days_by_week[row.week_id].append(
            ClientDay(
                id=row.id,
                day_of_week=row.day_of_week,
                workout_name=row.workout_name,
                workout_description=row.workout_description,
                is_rest_day=row.is_rest_day,
                display_order=row.display_order,
                exercises=exercises_by_day.get(row.id, []),
            )
        )

    weeks = [
        ClientWeek(
            id=w.id,
            week_number=w.week_number,
            title=w.title,
            focus_description=w.focus_description,
            phase=w.phase,
            days=days_by_week.get(w.id, []),
        )
        for w in week_rows
    ]
    return WorkoutProgram(person_id=person_id, weeks=weeks)


async def load_meal_plan(session: AsyncSession, person_id: str) -> MealPlan:
    header = await session.get(ClientMealPlanRow, person_id)
    if header is None:
        raise ProgramNotFound(person_id)

    day_rows = (
        (
            await session.execute(
                select(ClientMealDayRow)
                .where(ClientMealDayRow.person_id == person_id)
                .order_by(ClientMealDayRow.day_number)
            )
        )
        .scalars()
        .all()
    )
    meal_rows = (
        (
            await session.execute(
                select(ClientMealRow)
                .where(ClientMealRow.person_id == person_id)
                .order_by(ClientMealRow.display_order)
            )
        )
        .scalars()
        .all()
    )

    meals_by_day: dict[str, list[ClientMeal]] = defaultdict(list)
    for row in meal_rows:
        meals_by_day[row.day_id].append(
            ClientMeal(
                id=row.id,
                meal_type=row.meal_type,
                meal_name=row.meal_name,
                calories=row.calories,
                protein_g=row.protein_g,
                carbs_g=row.carbs_g,
                fats_g=row.fats_g,
                prep_time_min=row.prep_time_min,
                cook_time_min=row.cook_time_min,
                servings=row.servings,
                instructions=row.instructions,
                notes=row.notes,
                image_url=row.image_url,
                display_order=row.display_order,
                ingredients=row.ingredients or [],
            )
        )

    return MealPlan(
        person_id=person_id,
        name=header.name,
        calorie_range_min=header.calorie_range_min,
        calorie_range_max=header.calorie_range_max,
        daily_protein_g=header.daily_protein_g,
        daily_carbs_g=header.daily_carbs_g,
        daily_fats_g=header.daily_fats_g,
        days=[
            ClientMealDay(
                id=d.id,
                day_number=d.day_number,
                day_name=d.day_name,
                week_number=d.week_number,
                meals=meals_by_day.get(d.id, []),
            )
            for d in day_rows
        ],
    )


async def load_program(session: AsyncSession, person_id: str, kind: ProgramKind) -> WorkoutProgram | MealPlan:
    if kind == ProgramKind.workout:
        return await load_workout_program(session, person_id)
    return await load_meal_plan(session, person_id)


# ---------------------------------------------------------------------------
# Editing (workout copies)
# ---------------------------------------------------------------------------


async def _owned(session: AsyncSession, table, row_id: str, person_id: str, label: str):
    row = await session.get(table, row_id)
    if row is None or row.person_id != person_id:
        raise ProgramNotFound(person_id, f"{label} {row_id} not found for person {person_id}")
    return row


def _apply(row, values: dict) -> None:
    for key, value in values.items():
        setattr(row, key, value)


async def update_week(session: AsyncSession, person_id: str, week_id: str, update: WeekUpdate) -> WorkoutProgram:
    try:
        async with unit_of_work(session):
            row = await _owned(session, ClientProgramWeekRow, week_id, person_id, "Week")
            _apply(row, update.model_dump(exclude_none=True))
    except SQLAlchemyError as exc:
        logger.error(f"Week update failed for person={person_id}: {exc}")
        raise PersistenceFailure(f"Week update failed for person {person_id}") from exc
    return await load_workout_program(session, person_id)


async def update_day(session: AsyncSession, person_id: str, day_id: str, update: DayUpdate) -> WorkoutProgram:
    try:
        async with unit_of_work(session):
            row = await _owned(session, ClientProgramDayRow, day_id, person_id, "Day")
            _apply(row, update.model_dump(exclude_none=True))
    except SQLAlchemyError as exc:
        logger.error(f"Day update failed for person={person_id}: {exc}")
        raise PersistenceFailure(f"Day update failed for person {person_id}") from exc
    return await load_workout_program(session, person_id)


async def add_exercise(session: AsyncSession, person_id: str, day_id: str, exercise: ExerciseInput) -> WorkoutProgram:
    """Append an exercise to a day; without an explicit order it goes last."""
    try:
        async with unit_of_work(session):
            await _owned(session, ClientProgramDayRow, day_id, person_id, "Day")
            order = exercise.display_order
            if order is None:
                order = await session.scalar(
                    select(func.count()).select_from(ClientProgramExerciseRow).where(
                        ClientProgramExerciseRow.day_id == day_id
                    )
                )
            values = exercise.model_dump(exclude_none=True)
            values.update(
                section_type=exercise.section_type or "main",
                exercise_name=exercise.exercise_name or DEFAULT_EXERCISE_NAME,
                display_order=order or 0,
            )
            session.add(ClientProgramExerciseRow(person_id=person_id, day_id=day_id, **values))
    except SQLAlchemyError as exc:
        logger.error(f"Adding exercise failed for person={person_id}: {exc}")
        raise PersistenceFailure(f"Adding exercise failed for person {person_id}") from exc
    return await load_workout_program(session, person_id)


async def update_exercise(
    session: AsyncSession,
    person_id: str,
    exercise_id: str,
    update: ExerciseInput,
) -> WorkoutProgram:
    try:
        async with unit_of_work(session):
            row = await _owned(session, ClientProgramExerciseRow, exercise_id, person_id, "Exercise")
            _apply(row, update.model_dump(exclude_none=True))
    except SQLAlchemyError as exc:
        logger.error(f"Exercise update failed for person={person_id}: {exc}")
        raise PersistenceFailure(f"Exercise update failed for person {person_id}") from exc
    return await load_workout_program(session, person_id)


async def delete_exercise(session: AsyncSession, person_id: str, exercise_id: str) -> WorkoutProgram:
    try:
        async with unit_of_work(session):
            row = await _owned(session, ClientProgramExerciseRow, exercise_id, person_id, "Exercise")
            await session.delete(row)
    except SQLAlchemyError as exc:
        logger.error(f"Exercise delete failed for person={person_id}: {exc}")
        raise PersistenceFailure(f"Exercise delete failed for person {person_id}") from exc
    return await load_workout_program(session, person_id)
