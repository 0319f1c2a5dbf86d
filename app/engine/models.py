"""Engine contract models — Pydantic v2.

Profiles and library content come in, rankings and materialized programs
go out. Scores are ephemeral and never persisted.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class Goal(str, Enum):
    fat_loss = "fat_loss"
    muscle_gain = "muscle_gain"
    recomposition = "recomposition"
    maintain = "maintain"


class ExperienceLevel(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class ActivityLevel(str, Enum):
    sedentary = "sedentary"
    light = "light"
    moderate = "moderate"
    active = "active"
    very_active = "very_active"


class BodyComposition(str, Enum):
    lean = "lean"
    average = "average"
    overweight = "overweight"
    obese = "obese"


class CategoryKind(str, Enum):
    beginner_basics = "beginner_basics"
    foundation_builder = "foundation_builder"
    intermediate_growth = "intermediate_growth"
    advanced_performance = "advanced_performance"
    athletic_conditioning = "athletic_conditioning"


class NutritionCategoryKind(str, Enum):
    fat_loss_aggressive = "fat_loss_aggressive"
    fat_loss_moderate = "fat_loss_moderate"
    muscle_building_mass = "muscle_building_mass"
    muscle_building_lean = "muscle_building_lean"
    recomposition = "recomposition"


class ProgramKind(str, Enum):
    workout = "workout"
    nutrition = "nutrition"


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class Profile(BaseModel):
    """Raw intake snapshot. Every field is optional free-form input."""

    goal: str | None = None
    experience: str | None = None
    activity_level: str | None = None
    body_fat_estimate: str | None = None
    injuries: str | None = None
    equipment: list[str] | str | None = None
    weight: str | float | None = None  # pounds
    height: str | None = None  # feet'inches, e.g. 5'10"
    age: int | None = None
    training_days_per_week: int | None = None
    dietary_restrictions: str | None = None


class NormalizedProfile(BaseModel):
    goal: Goal = Goal.recomposition
    experience: ExperienceLevel = ExperienceLevel.beginner
    activity: ActivityLevel = ActivityLevel.sedentary
    body_composition: BodyComposition = BodyComposition.average
    training_days: int | None = None
    has_injuries: bool = False
    equipment: list[str] = Field(default_factory=list)
    dietary_tags: list[str] = Field(default_factory=list)


class Macros(BaseModel):
    protein_g: int
    carbs_g: int
    fats_g: int


class EnergyEstimate(BaseModel):
    bmr: int
    tdee: int
    target_calories: int
    recommended_kind: NutritionCategoryKind
    recommended_category_name: str
    macros: Macros


# ---------------------------------------------------------------------------
# Template library (read-only)
# ---------------------------------------------------------------------------


class TemplateCategory(BaseModel):
    id: str
    name: str
    kind: CategoryKind | None = None
    description: str | None = None
    display_order: int | None = None


class ProgramTemplate(BaseModel):
    id: str
    category_id: str | None = None
    name: str
    description: str | None = None
    difficulty: str | None = None
    days_per_week: int | None = None
    equipment: list[str] = Field(default_factory=list)
    goal_focus: str | None = None
    display_order: int | None = None


class TemplateExercise(BaseModel):
    section_type: str | None = None
    exercise_name: str
    sets: str | None = None
    reps_or_time: str | None = None
    rest: str | None = None
    notes: str | None = None
    instructions: str | None = None
    demo_url: str | None = None
    display_order: int | None = None


class TemplateDay(BaseModel):
    day_of_week: str
    workout_name: str
    workout_description: str | None = None
    is_rest_day: bool = False
    display_order: int | None = None
    exercises: list[TemplateExercise] = Field(default_factory=list)


class TemplateWeek(BaseModel):
    week_number: int
    title: str | None = None
    focus_description: str | None = None
    days: list[TemplateDay] = Field(default_factory=list)


class WorkoutTemplateTree(BaseModel):
    template: ProgramTemplate
    weeks: list[TemplateWeek] = Field(default_factory=list)


class NutritionCategory(BaseModel):
    id: str
    name: str
    kind: NutritionCategoryKind | None = None
    description: str | None = None
    display_order: int | None = None


class MealPlanTemplate(BaseModel):
    id: str
    category_id: str | None = None
    name: str
    description: str | None = None
    goal_type: str | None = None
    calorie_range_min: int
    calorie_range_max: int
    daily_protein_g: int = 0
    daily_carbs_g: int = 0
    daily_fats_g: int = 0
    dietary_tags: list[str] = Field(default_factory=list)
    difficulty: str | None = None
    display_order: int | None = None


class Ingredient(BaseModel):
    item: str
    amount: str
    notes: str | None = None


class Meal(BaseModel):
    meal_type: str
    meal_name: str
    calories: int = 0
    protein_g: int = 0
    carbs_g: int = 0
    fats_g: int = 0
    prep_time_min: int | None = None
    cook_time_min: int | None = None
    servings: int | None = None
    instructions: str | None = None
    notes: str | None = None
    image_url: str | None = None
    display_order: int | None = None
    ingredients: list[Ingredient] = Field(default_factory=list)


class MealPlanDay(BaseModel):
    day_number: int
    day_name: str
    meals: list[Meal] = Field(default_factory=list)


class MealPlanTemplateTree(BaseModel):
    template: MealPlanTemplate
    days: list[MealPlanDay] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Scores (ephemeral)
# ---------------------------------------------------------------------------


class CategoryScore(BaseModel):
    category: TemplateCategory
    score: int
    reasons: list[str] = Field(default_factory=list)


class WorkoutTemplateScore(BaseModel):
    template: ProgramTemplate
    score: int
    reasons: list[str] = Field(default_factory=list)


class NutritionTemplateScore(BaseModel):
    template: MealPlanTemplate
    score: int
    reasons: list[str] = Field(default_factory=list)
    calorie_distance: float


class MatchQuality(BaseModel):
    label: str
    score: int


class WorkoutRecommendation(BaseModel):
    categories: list[CategoryScore] = Field(default_factory=list)
    templates: list[WorkoutTemplateScore] = Field(default_factory=list)
    recommended_category: CategoryScore | None = None
    recommendation: WorkoutTemplateScore | None = None


class NutritionRecommendation(BaseModel):
    energy: EnergyEstimate
    category: NutritionCategory | None = None
    templates: list[NutritionTemplateScore] = Field(default_factory=list)
    recommendation: NutritionTemplateScore | None = None


# ---------------------------------------------------------------------------
# Materialized programs (person-owned copies)
# ---------------------------------------------------------------------------


class ClientExercise(BaseModel):
    id: str
    section_type: str = "main"
    exercise_name: str
    sets: str | None = None
    reps_or_time: str | None = None
    rest: str | None = None
    notes: str | None = None
    instructions: str | None = None
    demo_url: str | None = None
    display_order: int = 0


class ClientDay(BaseModel):
    id: str
    day_of_week: str
    workout_name: str
    workout_description: str | None = None
    is_rest_day: bool = False
    display_order: int = 0
    exercises: list[ClientExercise] = Field(default_factory=list)


class ClientWeek(BaseModel):
    id: str
    week_number: int
    title: str | None = None
    focus_description: str | None = None
    phase: str = "custom"
    days: list[ClientDay] = Field(default_factory=list)


class TrackedDay(BaseModel):
    """A day as seen by completion aggregation."""

    day_id: str
    week_number: int
    is_rest_day: bool = False


class WorkoutProgram(BaseModel):
    person_id: str
    weeks: list[ClientWeek] = Field(default_factory=list)

    def tracked_days(self) -> list[TrackedDay]:
        return [
            TrackedDay(day_id=day.id, week_number=week.week_number, is_rest_day=day.is_rest_day)
            for week in self.weeks
            for day in week.days
        ]


class ClientMeal(Meal):
    id: str


class ClientMealDay(BaseModel):
    id: str
    day_number: int
    day_name: str
    week_number: int
    meals: list[ClientMeal] = Field(default_factory=list)


class MealPlan(BaseModel):
    person_id: str
    name: str
    calorie_range_min: int
    calorie_range_max: int
    daily_protein_g: int = 0
    daily_carbs_g: int = 0
    daily_fats_g: int = 0
    days: list[ClientMealDay] = Field(default_factory=list)

    def tracked_days(self) -> list[TrackedDay]:
        return [TrackedDay(day_id=day.id, week_number=day.week_number) for day in self.days]


# ---------------------------------------------------------------------------
# Completion aggregates (computed on read)
# ---------------------------------------------------------------------------


class WeekStats(BaseModel):
    week_number: int
    total: int = 0
    completed: int = 0
    percent: int = 0
    is_complete: bool = False


class PhaseStats(BaseModel):
    total_days: int = 0
    completed_days: int = 0
    percent: int = 0
    is_phase_complete: bool = False


class ProgramStats(BaseModel):
    kind: ProgramKind
    weeks: list[WeekStats] = Field(default_factory=list)
    phase: PhaseStats = Field(default_factory=PhaseStats)
    completed_day_ids: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class AssignmentRequest(BaseModel):
    person_id: str
    template_id: str
    assigned_by: str | None = None
    suggested_category_id: str | None = None
    match_score: int | None = None
    notes: str | None = None


class AutoAssignmentRequest(BaseModel):
    person_id: str
    profile: Profile
    assigned_by: str | None = None


class WeekUpdate(BaseModel):
    title: str | None = None
    focus_description: str | None = None
    phase: str | None = None


class DayUpdate(BaseModel):
    workout_name: str | None = None
    workout_description: str | None = None
    is_rest_day: bool | None = None


class ExerciseInput(BaseModel):
    section_type: str | None = None
    exercise_name: str | None = None
    sets: str | None = None
    reps_or_time: str | None = None
    rest: str | None = None
    notes: str | None = None
    instructions: str | None = None
    demo_url: str | None = None
    display_order: int | None = None


class ToggleResult(BaseModel):
    day_id: str
    completed: bool
    toggled_at: datetime
