"""Database tables — SQLAlchemy 2.0 declarative models.

Library tables are administered elsewhere and only read here. Client
tables hold person-owned copies: every row carries person_id, and none
points back at the library, so a copy stays valid when a template is
edited or removed.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all engine tables."""


# ---------------------------------------------------------------------------
# Workout library
# ---------------------------------------------------------------------------


class ProgramTemplateCategoryRow(Base):
    __tablename__ = "program_template_categories"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String, nullable=False)
    kind: Mapped[str | None] = mapped_column(String, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    display_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class ProgramTemplateRow(Base):
    __tablename__ = "program_templates"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    category_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("program_template_categories.id"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    difficulty: Mapped[str | None] = mapped_column(String, nullable=True)
    days_per_week: Mapped[int | None] = mapped_column(Integer, nullable=True)
    equipment: Mapped[list | None] = mapped_column(JSON, nullable=True)
    goal_focus: Mapped[str | None] = mapped_column(String, nullable=True)
    display_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class ProgramTemplateWeekRow(Base):
    __tablename__ = "program_template_weeks"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    template_id: Mapped[str] = mapped_column(String, ForeignKey("program_templates.id"), nullable=False, index=True)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str | None] = mapped_column(String, nullable=True)
    focus_description: Mapped[str | None] = mapped_column(Text, nullable=True)


class ProgramTemplateDayRow(Base):
    __tablename__ = "program_template_days"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    week_id: Mapped[str] = mapped_column(String, ForeignKey("program_template_weeks.id"), nullable=False, index=True)
    day_of_week: Mapped[str] = mapped_column(String, nullable=False)
    workout_name: Mapped[str] = mapped_column(String, nullable=False)
    workout_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_rest_day: Mapped[bool | None] = mapped_column(Boolean, nullable=True, default=False)
    display_order: Mapped[int | None] = mapped_column(Integer, nullable=True)


class ProgramTemplateExerciseRow(Base):
    __tablename__ = "program_template_exercises"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    day_id: Mapped[str] = mapped_column(String, ForeignKey("program_template_days.id"), nullable=False, index=True)
    section_type: Mapped[str | None] = mapped_column(String, nullable=True)
    exercise_name: Mapped[str] = mapped_column(String, nullable=False)
    sets: Mapped[str | None] = mapped_column(String, nullable=True)
    reps_or_time: Mapped[str | None] = mapped_column(String, nullable=True)
    rest: Mapped[str | None] = mapped_column(String, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    demo_url: Mapped[str | None] = mapped_column(String, nullable=True)
    display_order: Mapped[int | None] = mapped_column(Integer, nullable=True)


# ---------------------------------------------------------------------------
# Nutrition library
# ---------------------------------------------------------------------------


class NutritionTemplateCategoryRow(Base):
    __tablename__ = "nutrition_template_categories"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String, nullable=False)
    kind: Mapped[str | None] = mapped_column(String, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    display_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class MealPlanTemplateRow(Base):
    __tablename__ = "meal_plan_templates"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    category_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("nutrition_template_categories.id"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    goal_type: Mapped[str | None] = mapped_column(String, nullable=True)
    calorie_range_min: Mapped[int] = mapped_column(Integer, nullable=False)
    calorie_range_max: Mapped[int] = mapped_column(Integer, nullable=False)
    daily_protein_g: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    daily_carbs_g: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    daily_fats_g: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dietary_tags: Mapped[list | None] = mapped_column(JSON, nullable=True)
    difficulty: Mapped[str | None] = mapped_column(String, nullable=True)
    display_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class MealPlanDayRow(Base):
    __tablename__ = "meal_plan_days"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    template_id: Mapped[str] = mapped_column(String, ForeignKey("meal_plan_templates.id"), nullable=False, index=True)
    day_number: Mapped[int] = mapped_column(Integer, nullable=False)
    day_name: Mapped[str] = mapped_column(String, nullable=False)


class MealPlanMealRow(Base):
    __tablename__ = "meal_plan_meals"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    day_id: Mapped[str] = mapped_column(String, ForeignKey("meal_plan_days.id"), nullable=False, index=True)
    meal_type: Mapped[str] = mapped_column(String, nullable=False)
    meal_name: Mapped[str] = mapped_column(String, nullable=False)
    calories: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    protein_g: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    carbs_g: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    fats_g: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    prep_time_min: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cook_time_min: Mapped[int | None] = mapped_column(Integer, nullable=True)
    servings: Mapped[int | None] = mapped_column(Integer, nullable=True)
    instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String, nullable=True)
    display_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    ingredients: Mapped[list | None] = mapped_column(JSON, nullable=True)


# ---------------------------------------------------------------------------
# Person-owned workout copy
# ---------------------------------------------------------------------------


class ClientProgramWeekRow(Base):
    __tablename__ = "client_program_weeks"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    person_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str | None] = mapped_column(String, nullable=True)
    focus_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    phase: Mapped[str] = mapped_column(String, nullable=False, default="custom")


class ClientProgramDayRow(Base):
    __tablename__ = "client_program_days"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    person_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    week_id: Mapped[str] = mapped_column(
        String, ForeignKey("client_program_weeks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_of_week: Mapped[str] = mapped_column(String, nullable=False)
    workout_name: Mapped[str] = mapped_column(String, nullable=False)
    workout_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_rest_day: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ClientProgramExerciseRow(Base):
    __tablename__ = "client_program_exercises"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    person_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    day_id: Mapped[str] = mapped_column(
        String, ForeignKey("client_program_days.id", ondelete="CASCADE"), nullable=False, index=True
    )
    section_type: Mapped[str] = mapped_column(String, nullable=False, default="main")
    exercise_name: Mapped[str] = mapped_column(String, nullable=False)
    sets: Mapped[str | None] = mapped_column(String, nullable=True)
    reps_or_time: Mapped[str | None] = mapped_column(String, nullable=True)
    rest: Mapped[str | None] = mapped_column(String, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    demo_url: Mapped[str | None] = mapped_column(String, nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


# ---------------------------------------------------------------------------
# Person-owned nutrition copy
# ---------------------------------------------------------------------------


class ClientMealPlanRow(Base):
    """One header per person: the targets of the copied plan."""

    __tablename__ = "client_meal_plans"

    person_id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    calorie_range_min: Mapped[int] = mapped_column(Integer, nullable=False)
    calorie_range_max: Mapped[int] = mapped_column(Integer, nullable=False)
    daily_protein_g: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    daily_carbs_g: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    daily_fats_g: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ClientMealDayRow(Base):
    __tablename__ = "client_meal_plan_days"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    person_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    day_number: Mapped[int] = mapped_column(Integer, nullable=False)
    day_name: Mapped[str] = mapped_column(String, nullable=False)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)


class ClientMealRow(Base):
    __tablename__ = "client_meal_plan_meals"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    person_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    day_id: Mapped[str] = mapped_column(
        String, ForeignKey("client_meal_plan_days.id", ondelete="CASCADE"), nullable=False, index=True
    )
    meal_type: Mapped[str] = mapped_column(String, nullable=False)
    meal_name: Mapped[str] = mapped_column(String, nullable=False)
    calories: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    protein_g: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    carbs_g: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    fats_g: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    prep_time_min: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cook_time_min: Mapped[int | None] = mapped_column(Integer, nullable=True)
    servings: Mapped[int | None] = mapped_column(Integer, nullable=True)
    instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String, nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ingredients: Mapped[list | None] = mapped_column(JSON, nullable=True)


# ---------------------------------------------------------------------------
# Assignment audit + completion marks
# ---------------------------------------------------------------------------


class TemplateAssignmentRow(Base):
    """Append-only record of who assigned which template, and how well it matched."""

    __tablename__ = "template_assignments"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    person_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    kind: Mapped[str] = mapped_column(String, nullable=False)
    template_id: Mapped[str] = mapped_column(String, nullable=False)
    suggested_category_id: Mapped[str | None] = mapped_column(String, nullable=True)
    match_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    assigned_by: Mapped[str | None] = mapped_column(String, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class DayCompletionRow(Base):
    __tablename__ = "day_completions"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=new_id)
    person_id: Mapped[str] = mapped_column(String, nullable=False)
    day_id: Mapped[str] = mapped_column(String, nullable=False)
    kind: Mapped[str] = mapped_column(String, nullable=False)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("person_id", "day_id", name="uq_day_completion_person_day"),
        Index("idx_day_completions_person_kind", "person_id", "kind"),
    )
