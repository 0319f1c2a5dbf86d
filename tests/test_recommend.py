"""Tests for the read-only recommendation preview path."""

from __future__ import annotations

from app.engine.models import (
    CategoryKind,
    MealPlanTemplate,
    NutritionCategory,
    NutritionCategoryKind,
    ProgramTemplate,
    TemplateCategory,
)
from app.engine.recommend import find_nutrition_category, recommend_nutrition, recommend_workout
from tests.conftest import beginner_profile, scenario_a_profile

CATEGORIES = [
    TemplateCategory(id="cat-intermediate", name="Intermediate Growth", kind=CategoryKind.intermediate_growth),
    TemplateCategory(id="cat-beginner", name="Beginner Basics", kind=CategoryKind.beginner_basics),
]

TEMPLATES = [
    ProgramTemplate(id="tpl-dumbbell", category_id="cat-beginner", name="Dumbbell Starter", days_per_week=4,
                    equipment=["Dumbbell", "Bench"]),
    ProgramTemplate(id="tpl-foundations", category_id="cat-beginner", name="Bodyweight Foundations", days_per_week=3,
                    equipment=["bodyweight"]),
    ProgramTemplate(id="tpl-growth", category_id="cat-intermediate", name="Barbell Growth", days_per_week=5,
                    equipment=["barbell"]),
]

NUTRITION_CATEGORIES = [
    NutritionCategory(id="ncat-recomp", name="Recomposition"),
    NutritionCategory(id="ncat-aggressive", name="Fat Loss – Aggressive"),
]

PLANS = [
    MealPlanTemplate(id="mp-2200", category_id="ncat-aggressive", name="Cut 2200", calorie_range_min=2100,
                     calorie_range_max=2300),
    MealPlanTemplate(id="mp-2000", category_id="ncat-aggressive", name="Cut 2000", calorie_range_min=1900,
                     calorie_range_max=2100, dietary_tags=["gluten-free"]),
    MealPlanTemplate(id="mp-recomp", category_id="ncat-recomp", name="Recomp", calorie_range_min=2600,
                     calorie_range_max=2800),
]


class TestWorkoutRecommendation:
    def test_top_category_then_top_template(self):
        rec = recommend_workout(beginner_profile(), CATEGORIES, TEMPLATES)
        assert rec.recommended_category.category.id == "cat-beginner"
        assert rec.recommendation.template.id == "tpl-foundations"
        assert rec.recommendation.score == 100
        assert [s.template.id for s in rec.templates] == ["tpl-foundations", "tpl-dumbbell"]
        assert len(rec.categories) == 2

    def test_no_templates_in_category(self):
        rec = recommend_workout(beginner_profile(), CATEGORIES, [t for t in TEMPLATES if t.id == "tpl-growth"])
        assert rec.recommended_category.category.id == "cat-beginner"
        assert rec.templates == []
        assert rec.recommendation is None

    def test_no_categories(self):
        rec = recommend_workout(beginner_profile(), [], TEMPLATES)
        assert rec.categories == []
        assert rec.recommended_category is None
        assert rec.recommendation is None


class TestNutritionRecommendation:
    def test_category_found_by_name(self):
        cat = find_nutrition_category(NUTRITION_CATEGORIES, NutritionCategoryKind.fat_loss_aggressive)
        assert cat is not None
        assert cat.id == "ncat-aggressive"

    def test_category_missing(self):
        assert find_nutrition_category(NUTRITION_CATEGORIES, NutritionCategoryKind.muscle_building_mass) is None

    def test_scenario_a(self):
        rec = recommend_nutrition(scenario_a_profile(), NUTRITION_CATEGORIES, PLANS)
        assert rec.energy.target_calories == 2013
        assert rec.category.id == "ncat-aggressive"
        assert [s.template.id for s in rec.templates] == ["mp-2000", "mp-2200"]
        assert rec.recommendation.template.id == "mp-2000"

    def test_dietary_restriction_filters(self):
        profile = scenario_a_profile(dietary_restrictions="Gluten-free")
        rec = recommend_nutrition(profile, NUTRITION_CATEGORIES, PLANS)
        assert [s.template.id for s in rec.templates] == ["mp-2000"]

    def test_empty_category_has_no_recommendation(self):
        rec = recommend_nutrition(scenario_a_profile(), NUTRITION_CATEGORIES, [p for p in PLANS if p.id == "mp-recomp"])
        assert rec.category.id == "ncat-aggressive"
        assert rec.templates == []
        assert rec.recommendation is None

    def test_no_matching_category(self):
        rec = recommend_nutrition(scenario_a_profile(goal="Build muscle"), NUTRITION_CATEGORIES, PLANS)
        assert rec.category is None
        assert rec.recommendation is None
        assert rec.energy.recommended_kind == NutritionCategoryKind.muscle_building_lean
