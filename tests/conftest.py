"""Shared fixtures for the test suite."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.db import get_session
from app.engine.models import Profile
from app.engine.tables import (
    Base,
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
from app.main import app

PERSON = "person-1"
OTHER_PERSON = "person-2"

DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


# ---------------------------------------------------------------------------
# In-memory SQLite database (no real Postgres needed)
# ---------------------------------------------------------------------------


@pytest.fixture()
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture()
def override_session(session_factory):
    """Override the FastAPI dependency with the SQLite session factory."""

    async def _override():
        async with session_factory() as s:
            yield s

    app.dependency_overrides[get_session] = _override
    yield session_factory
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_session):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


def beginner_profile(**overrides) -> Profile:
    """Sedentary beginner, 3 training days, dumbbells at home."""
    data = {
        "goal": "Lose fat",
        "experience": "Never trained",
        "activity_level": "Sedentary (desk job)",
        "body_fat_estimate": "Average",
        "equipment": "Dumbbells, Resistance bands",
        "training_days_per_week": 3,
    }
    data.update(overrides)
    return Profile(**data)


def scenario_a_profile(**overrides) -> Profile:
    """180 lb, 5'10", 30 years, moderately active, losing fat."""
    data = {
        "goal": "Lose fat",
        "activity_level": "Moderately active",
        "weight": "180",
        "height": "5'10\"",
        "age": 30,
    }
    data.update(overrides)
    return Profile(**data)


# ---------------------------------------------------------------------------
# Library seeding
# ---------------------------------------------------------------------------


def workout_tree_rows(template_id: str, weeks: int, exercises_per_day: int = 2) -> list:
    """Week/day/exercise rows for a template.

    Sunday is a rest day that still carries a mobility exercise in the
    library. Exercises are added in reverse display order.
    """
    rows: list = []
    for number in range(1, weeks + 1):
        week_id = f"{template_id}-w{number}"
        rows.append(
            ProgramTemplateWeekRow(
                id=week_id,
                template_id=template_id,
                week_number=number,
                title=f"Week {number}",
                focus_description=f"Focus {number}",
            )
        )
        for index, name in enumerate(DAYS):
            day_id = f"{week_id}-d{index}"
            rest = name == "Sunday"
            rows.append(
                ProgramTemplateDayRow(
                    id=day_id,
                    week_id=week_id,
                    day_of_week=name,
                    workout_name="Rest" if rest else f"Workout {index + 1}",
                    is_rest_day=rest,
                    display_order=index,
                )
            )
            for order in reversed(range(exercises_per_day)):
                rows.append(
                    ProgramTemplateExerciseRow(
                        id=f"{day_id}-e{order}",
                        day_id=day_id,
                        section_type=None if order == 0 else "main",
                        exercise_name="Mobility Flow" if rest else f"Exercise {order + 1}",
                        sets="3",
                        reps_or_time="10",
                        rest="60s",
                        display_order=order,
                    )
                )
    return rows


async def seed_workout_library(session: AsyncSession) -> None:
    session.add_all(
        [
            ProgramTemplateCategoryRow(
                id="cat-beginner", name="Beginner Basics", kind="beginner_basics", display_order=1
            ),
            ProgramTemplateCategoryRow(
                id="cat-intermediate", name="Intermediate Growth", kind="intermediate_growth", display_order=2
            ),
            ProgramTemplateCategoryRow(
                id="cat-retired", name="Retired Program", kind="beginner_basics", display_order=0, is_active=False
            ),
            ProgramTemplateRow(
                id="tpl-foundations",
                category_id="cat-beginner",
                name="Bodyweight Foundations",
                days_per_week=3,
                equipment=["bodyweight"],
                display_order=1,
            ),
            ProgramTemplateRow(
                id="tpl-dumbbell",
                category_id="cat-beginner",
                name="Dumbbell Starter",
                days_per_week=4,
                equipment=["Dumbbell", "Bench"],
                display_order=2,
            ),
            ProgramTemplateRow(
                id="tpl-hidden",
                category_id="cat-beginner",
                name="Hidden Template",
                days_per_week=3,
                equipment=[],
                display_order=0,
                is_active=False,
            ),
            ProgramTemplateRow(
                id="tpl-growth",
                category_id="cat-intermediate",
                name="Barbell Growth",
                days_per_week=5,
                equipment=["barbell"],
                display_order=1,
            ),
        ]
    )
    session.add_all(workout_tree_rows("tpl-foundations", weeks=4))
    session.add_all(workout_tree_rows("tpl-dumbbell", weeks=3))
    await session.commit()


def meal_plan_tree_rows(template_id: str, days: int, meals_per_day: int = 3) -> list:
    rows: list = []
    for number in range(1, days + 1):
        day_id = f"{template_id}-d{number}"
        rows.append(MealPlanDayRow(id=day_id, template_id=template_id, day_number=number, day_name=f"Day {number}"))
        for order in reversed(range(meals_per_day)):
            rows.append(
                MealPlanMealRow(
                    id=f"{day_id}-m{order}",
                    day_id=day_id,
                    meal_type=("breakfast", "lunch", "dinner", "snack")[order % 4],
                    meal_name=f"Meal {order + 1}",
                    calories=600,
                    protein_g=45,
                    carbs_g=60,
                    fats_g=20,
                    display_order=order,
                    ingredients=[{"item": "Oats", "amount": "50g"}, {"item": "Egg", "amount": "2", "notes": "whole"}],
                )
            )
    return rows


async def seed_nutrition_library(session: AsyncSession) -> None:
    session.add_all(
        [
            NutritionTemplateCategoryRow(
                id="ncat-aggressive", name="Fat Loss - Aggressive", kind="fat_loss_aggressive", display_order=1
            ),
            NutritionTemplateCategoryRow(id="ncat-recomp", name="Recomposition", kind=None, display_order=2),
            NutritionTemplateCategoryRow(id="ncat-legacy", name="Legacy Bulk", kind="bulk_forever", display_order=3),
            MealPlanTemplateRow(
                id="mp-2000",
                category_id="ncat-aggressive",
                name="Cut 2000",
                calorie_range_min=1900,
                calorie_range_max=2100,
                daily_protein_g=200,
                daily_carbs_g=150,
                daily_fats_g=60,
                dietary_tags=["gluten-free"],
                display_order=2,
            ),
            MealPlanTemplateRow(
                id="mp-2200",
                category_id="ncat-aggressive",
                name="Cut 2200",
                calorie_range_min=2100,
                calorie_range_max=2300,
                dietary_tags=[],
                display_order=1,
            ),
            MealPlanTemplateRow(
                id="mp-1800",
                category_id="ncat-aggressive",
                name="Cut 1800",
                calorie_range_min=1700,
                calorie_range_max=1900,
                dietary_tags=[],
                display_order=3,
            ),
            MealPlanTemplateRow(
                id="mp-recomp",
                category_id="ncat-recomp",
                name="Recomp 2700",
                calorie_range_min=2600,
                calorie_range_max=2800,
                display_order=1,
            ),
        ]
    )
    session.add_all(meal_plan_tree_rows("mp-2000", days=14))
    session.add_all(meal_plan_tree_rows("mp-recomp", days=7, meals_per_day=2))
    await session.commit()
