"""Template library reader — async access to the read-only library tables.

Flat ordered queries, one per tree level, assembled into trees in Python.
Inactive rows are excluded from recommendation input. Lookups return None
when nothing is found — never raise for missing data.
"""

from __future__ import annotations

from collections import defaultdict
from enum import Enum
from typing import TypeVar

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.engine.models import (
    CategoryKind,
    Ingredient,
    Meal,
    MealPlanDay,
    MealPlanTemplate,
    MealPlanTemplateTree,
    NutritionCategory,
    NutritionCategoryKind,
    ProgramTemplate,
    TemplateCategory,
    TemplateDay,
    TemplateExercise,
    TemplateWeek,
    WorkoutTemplateTree,
)
from app.engine.tables import (
    MealPlanDayRow,
    MealPlanMealRow,
    MealPlanTemplateRow,
    NutritionTemplateCategoryRow,
    ProgramTemplateCategoryRow,
    ProgramTemplateDayRow,
    ProgramTemplateExerciseRow,
    ProgramTemplateRow,
    ProgramTemplateWeekRow,
)

K = TypeVar("K", bound=Enum)


def _parse_kind(enum_cls: type[K], value: str | None, row_id: str) -> K | None:
    if not value:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning(f"Library row {row_id} has unrecognized category kind '{value}'")
        return None


def _ordered(column):
    # NULL display orders sort last.
    return column.is_(None), column


# ---------------------------------------------------------------------------
# Row → model conversion
# ---------------------------------------------------------------------------


def _workout_category(row: ProgramTemplateCategoryRow) -> TemplateCategory:
    return TemplateCategory(
        id=row.id,
        name=row.name,
        kind=_parse_kind(CategoryKind, row.kind, row.id),
        description=row.description,
        display_order=row.display_order,
    )


def _program_template(row: ProgramTemplateRow) -> ProgramTemplate:
    return ProgramTemplate(
        id=row.id,
        category_id=row.category_id,
        name=row.name,
        description=row.description,
        difficulty=row.difficulty,
        days_per_week=row.days_per_week,
        equipment=list(row.equipment or []),
        goal_focus=row.goal_focus,
        display_order=row.display_order,
    )


def _nutrition_category(row: NutritionTemplateCategoryRow) -> NutritionCategory:
    return NutritionCategory(
        id=row.id,
        name=row.name,
        kind=_parse_kind(NutritionCategoryKind, row.kind, row.id),
        description=row.description,
        display_order=row.display_order,
    )


def _meal_plan_template(row: MealPlanTemplateRow) -> MealPlanTemplate:
    return MealPlanTemplate(
        id=row.id,
        category_id=row.category_id,
        name=row.name,
        description=row.description,
        goal_type=row.goal_type,
        calorie_range_min=row.calorie_range_min,
        calorie_range_max=row.calorie_range_max,
        daily_protein_g=row.daily_protein_g,
        daily_carbs_g=row.daily_carbs_g,
        daily_fats_g=row.daily_fats_g,
        dietary_tags=list(row.dietary_tags or []),
        difficulty=row.difficulty,
        display_order=row.display_order,
    )


def _meal(row: MealPlanMealRow) -> Meal:
    return Meal(
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
        ingredients=[Ingredient.model_validate(i) for i in row.ingredients or []],
    )


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


async def list_workout_categories(session: AsyncSession) -> list[TemplateCategory]:
    stmt = (
        select(ProgramTemplateCategoryRow)
        .where(ProgramTemplateCategoryRow.is_active.is_(True))
        .order_by(*_ordered(ProgramTemplateCategoryRow.display_order), ProgramTemplateCategoryRow.name)
    )
    rows = (await session.execute(stmt)).scalars().all()
    return [_workout_category(r) for r in rows]


async def list_workout_templates(session: AsyncSession) -> list[ProgramTemplate]:
    stmt = (
        select(ProgramTemplateRow)
        .where(ProgramTemplateRow.is_active.is_(True))
        .order_by(*_ordered(ProgramTemplateRow.display_order), ProgramTemplateRow.name)
    )
    rows = (await session.execute(stmt)).scalars().all()
    return [_program_template(r) for r in rows]


async def list_nutrition_categories(session: AsyncSession) -> list[NutritionCategory]:
    stmt = (
        select(NutritionTemplateCategoryRow)
        .where(NutritionTemplateCategoryRow.is_active.is_(True))
        .order_by(*_ordered(NutritionTemplateCategoryRow.display_order), NutritionTemplateCategoryRow.name)
    )
    rows = (await session.execute(stmt)).scalars().all()
    return [_nutrition_category(r) for r in rows]


async def list_meal_plan_templates(session: AsyncSession) -> list[MealPlanTemplate]:
    stmt = (
        select(MealPlanTemplateRow)
        .where(MealPlanTemplateRow.is_active.is_(True))
        .order_by(*_ordered(MealPlanTemplateRow.display_order), MealPlanTemplateRow.name)
    )
    rows = (await session.execute(stmt)).scalars().all()
    return [_meal_plan_template(r) for r in rows]


# ---------------------------------------------------------------------------
# Trees
# ---------------------------------------------------------------------------


async def fetch_workout_template_tree(session: AsyncSession, template_id: str) -> WorkoutTemplateTree | None:
    """Template with its weeks, days and exercises, or None when absent.

    Children come back in storage order; ordering for copies is applied
    by the materializer snapshot.
    """
    template = await session.get(ProgramTemplateRow, template_id)
    if template is None:
        return None

    week_rows = (
        (
            await session.execute(
                select(ProgramTemplateWeekRow)
                .where(ProgramTemplateWeekRow.template_id == template_id)
                .order_by(ProgramTemplateWeekRow.week_number)
            )
        )
        .scalars()
        .all()
    )
    week_ids = [w.id for w in week_rows]

    day_rows = []
    if week_ids:
        day_rows = (
            (await session.execute(select(ProgramTemplateDayRow).where(ProgramTemplateDayRow.week_id.in_(week_ids))))
            .scalars()
            .all()
        )
    day_ids = [d.id for d in day_rows]

    exercise_rows = []
    if day_ids:
        exercise_rows = (
            (
                await session.execute(
                    select(ProgramTemplateExerciseRow).where(ProgramTemplateExerciseRow.day_id.in_(day_ids))
                )
            )
            .scalars()
            .all()
        )

    exercises_by_day: dict[str, list[TemplateExercise]] = defaultdict(list)
    for ex in exercise_rows:
        exercises_by_day[ex.day_id].append(
            TemplateExercise(
                section_type=ex.section_type,
                exercise_name=ex.exercise_name,
                sets=ex.sets,
                reps_or_time=ex.reps_or_time,
                rest=ex.rest,
                notes=ex.notes,
                instructions=ex.instructions,
                demo_url=ex.demo_url,
                display_order=ex.display_order,
            )
        )

    days_by_week: dict[str, list[TemplateDay]] = defaultdict(list)
    for day in day_rows:
        days_by_week[day.week_id].append(
            TemplateDay(
                day_of_week=day.day_of_week,
                workout_name=day.workout_name,
                workout_description=day.workout_description,
                is_rest_day=bool(day.is_rest_day),
                display_order=day.display_order,
                exercises=exercises_by_day.get(day.id, []),
            )
        )

    weeks = [
        TemplateWeek(
            week_number=w.week_number,
            title=w.title,
            focus_description=w.focus_description,
            days=days_by_week.get(w.id, []),
        )
        for w in week_rows
    ]
    return WorkoutTemplateTree(template=_program_template(template), weeks=weeks)


async def fetch_meal_plan_tree(session: AsyncSession, template_id: str) -> MealPlanTemplateTree | None:
    template = await session.get(MealPlanTemplateRow, template_id)
    if template is None:
        return None

    day_rows = (
        (
            await session.execute(
                select(MealPlanDayRow)
                .where(MealPlanDayRow.template_id == template_id)
                .order_by(MealPlanDayRow.day_number)
            )
        )
        .scalars()
        .all()
    )
    day_ids = [d.id for d in day_rows]

    meals_by_day: dict[str, list[Meal]] = defaultdict(list)
    if day_ids:
        meal_rows = (
            (await session.execute(select(MealPlanMealRow).where(MealPlanMealRow.day_id.in_(day_ids))))
            .scalars()
            .all()
        )
        for row in meal_rows:
            meals_by_day[row.day_id].append(_meal(row))

    days = [
        MealPlanDay(day_number=d.day_number, day_name=d.day_name, meals=meals_by_day.get(d.id, []))
        for d in day_rows
    ]
    return MealPlanTemplateTree(template=_meal_plan_template(template), days=days)
