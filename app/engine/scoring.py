"""Pure stateless scoring — fixed weighted heuristics, never raises.

Every score is a weighted sum of 0–100 sub-scores rounded once at the
end. Rankings sort descending by score; Python's sort is stable, so ties
keep library order.
"""

from __future__ import annotations

from app.engine.energy import round_half_up
from app.engine.models import (
    BodyComposition,
    CategoryScore,
    EnergyEstimate,
    ExperienceLevel,
    MatchQuality,
    MealPlanTemplate,
    NormalizedProfile,
    NutritionTemplateScore,
    ProgramTemplate,
    TemplateCategory,
    WorkoutTemplateScore,
)
from app.engine.rules import DEFAULT_RULES, LOW_INTENSITY_CEILING, RuleSet

# Training-day preference when the profile gives none.
CATEGORY_DEFAULT_DAYS = 3
TEMPLATE_DEFAULT_DAYS = 4

EXPERIENCE_INTENSITY: dict[ExperienceLevel, float] = {
    ExperienceLevel.beginner: 1.0,
    ExperienceLevel.intermediate: 2.0,
    ExperienceLevel.advanced: 3.0,
}

BODY_INTENSITY_MODIFIER: dict[BodyComposition, float] = {
    BodyComposition.lean: 0.5,
    BodyComposition.average: 0.0,
    BodyComposition.overweight: -0.3,
    BodyComposition.obese: -0.5,
}


# ---------------------------------------------------------------------------
# Category scoring
# ---------------------------------------------------------------------------


def days_range_score(days: int, min_days: int, max_days: int) -> float:
    """100 inside [min, max]; otherwise lose 20 per day outside the nearest bound."""
    if min_days <= days <= max_days:
        return 100.0
    distance = min_days - days if days < min_days else days - max_days
    return max(0.0, 100.0 - distance * 20.0)


def score_category(
    category: TemplateCategory,
    profile: NormalizedProfile,
    rules: RuleSet = DEFAULT_RULES,
) -> CategoryScore:
    rule = rules.rule_for(rules.resolve_kind(category.kind, category.name))
    if rule is None:
        return CategoryScore(category=category, score=0, reasons=["Unknown category"])

    weights = rules.category_weights
    reasons: list[str] = []
    total = 0.0

    exp_match = profile.experience in rule.experience
    total += (100.0 if exp_match else 30.0) * weights.experience
    if exp_match:
        reasons.append(f"Experience level matches ({profile.experience.value})")

    body_match = profile.body_composition in rule.body_composition
    total += (100.0 if body_match else 40.0) * weights.body_fat
    if body_match:
        reasons.append(f"Body composition aligns ({profile.body_composition.value})")

    activity_match = profile.activity in rule.activity
    total += (100.0 if activity_match else 35.0) * weights.activity
    if activity_match:
        reasons.append(f"Activity level compatible ({profile.activity.value.replace('_', ' ')})")

    days = profile.training_days or CATEGORY_DEFAULT_DAYS
    days_score = days_range_score(days, rule.min_days, rule.max_days)
    total += days_score * weights.training_days
    if days_score == 100.0:
        reasons.append(f"{days} training days fits well")

    injury_score = 100.0
    if profile.has_injuries:
        injury_score = 100.0 if rule.injury_friendly else 50.0
        if rule.injury_friendly:
            reasons.append("Injury-friendly programming")
    total += injury_score * weights.injury

    return CategoryScore(category=category, score=round_half_up(total), reasons=reasons)


def rank_categories(
    categories: list[TemplateCategory],
    profile: NormalizedProfile,
    rules: RuleSet = DEFAULT_RULES,
) -> list[CategoryScore]:
    scored = [score_category(c, profile, rules) for c in categories]
    return sorted(scored, key=lambda s: s.score, reverse=True)


# ---------------------------------------------------------------------------
# Workout template scoring
# ---------------------------------------------------------------------------


def client_intensity(profile: NormalizedProfile) -> float:
    return EXPERIENCE_INTENSITY[profile.experience] + BODY_INTENSITY_MODIFIER[profile.body_composition]


def days_distance_score(diff: int) -> float:
    if diff == 0:
        return 100.0
    if diff == 1:
        return 80.0
    if diff == 2:
        return 50.0
    return 20.0


def equipment_score(required: list[str], available: list[str]) -> float | None:
    """Percent of required tags the person has.

    None when the template needs nothing or only "bodyweight"; otherwise
    every tag counts, bodyweight included.

    Tags match case-insensitively when either contains the other, so
    "dumbbells" satisfies "dumbbell".
    """
    needed = [tag.strip().lower() for tag in required if tag and tag.strip()]
    if all(tag == "bodyweight" for tag in needed):
        return None
    have = [item.lower() for item in available]
    matched = sum(1 for tag in needed if any(tag in item or item in tag for item in have))
    return matched / len(needed) * 100.0


def intensity_gap_score(gap: float) -> float:
    if gap <= 0.5:
        return 100.0
    if gap <= 1.0:
        return 75.0
    return 50.0


def score_workout_template(
    template: ProgramTemplate,
    category: TemplateCategory,
    profile: NormalizedProfile,
    rules: RuleSet = DEFAULT_RULES,
) -> WorkoutTemplateScore:
    weights = rules.template_weights
    reasons: list[str] = []
    total = 0.0

    client_days = profile.training_days or TEMPLATE_DEFAULT_DAYS
    template_days = template.days_per_week or TEMPLATE_DEFAULT_DAYS
    diff = abs(client_days - template_days)
    total += days_distance_score(diff) * weights.training_days
    if diff == 0:
        reasons.append(f"Perfect match: {template_days} days/week")
    elif diff == 1:
        reasons.append(f"Good fit: {template_days} days/week (you prefer {client_days})")

    equip = equipment_score(template.equipment, profile.equipment)
    if equip is None:
        equip = 100.0
        reasons.append("Minimal equipment needed")
    elif equip >= 80.0:
        reasons.append("Equipment requirements met")
    total += equip * weights.equipment

    category_intensity = rules.intensity_for(rules.resolve_kind(category.kind, category.name))
    gap = abs(client_intensity(profile) - category_intensity)
    total += intensity_gap_score(gap) * weights.intensity

    injury_score = 100.0
    if profile.has_injuries:
        if category_intensity <= LOW_INTENSITY_CEILING:
            reasons.append("Injury-friendly programming")
        else:
            injury_score = 60.0
    total += injury_score * weights.injury

    return WorkoutTemplateScore(template=template, score=round_half_up(total), reasons=reasons)


def rank_workout_templates(
    templates: list[ProgramTemplate],
    category: TemplateCategory,
    profile: NormalizedProfile,
    rules: RuleSet = DEFAULT_RULES,
) -> list[WorkoutTemplateScore]:
    in_category = [t for t in templates if t.category_id == category.id]
    scored = [score_workout_template(t, category, profile, rules) for t in in_category]
    return sorted(scored, key=lambda s: s.score, reverse=True)


# ---------------------------------------------------------------------------
# Nutrition template scoring
# ---------------------------------------------------------------------------


def _fmt_cal(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.1f}"


def score_nutrition_template(template: MealPlanTemplate, energy: EnergyEstimate) -> NutritionTemplateScore:
    midpoint = (template.calorie_range_min + template.calorie_range_max) / 2
    distance = abs(energy.target_calories - midpoint)
    score = round_half_up(max(0.0, 100.0 - distance / 10))

    reasons: list[str] = []
    if distance <= 50:
        reasons.append(f"Excellent calorie match ({_fmt_cal(midpoint)} cal)")
    elif distance <= 150:
        reasons.append(f"Good calorie range ({template.calorie_range_min}-{template.calorie_range_max} cal)")
    else:
        reasons.append(f"Calorie range: {template.calorie_range_min}-{template.calorie_range_max} cal")
    reasons.append(f"Target: {energy.target_calories} cal/day")
    reasons.append(f"TDEE: {energy.tdee} cal")

    return NutritionTemplateScore(template=template, score=score, reasons=reasons, calorie_distance=distance)


def filter_by_dietary_tags(templates: list[MealPlanTemplate], tags: list[str]) -> list[MealPlanTemplate]:
    """Templates sharing a dietary tag with the person, or all when none do."""
    if not tags:
        return templates
    matches = [t for t in templates if any(tag in t.dietary_tags for tag in tags)]
    return matches or templates


def rank_nutrition_templates(
    templates: list[MealPlanTemplate],
    energy: EnergyEstimate,
) -> list[NutritionTemplateScore]:
    scored = [score_nutrition_template(t, energy) for t in templates]
    return sorted(scored, key=lambda s: s.score, reverse=True)


# ---------------------------------------------------------------------------
# Match quality labels
# ---------------------------------------------------------------------------


def match_quality(score: int) -> MatchQuality:
    """Label for category and workout template scores."""
    if score >= 85:
        return MatchQuality(label="Excellent Match", score=score)
    if score >= 70:
        return MatchQuality(label="Good Match", score=score)
    if score >= 50:
        return MatchQuality(label="Fair Match", score=score)
    return MatchQuality(label="Possible Fit", score=score)


def nutrition_match_quality(score: int) -> MatchQuality:
    if score >= 90:
        return MatchQuality(label="Excellent Match", score=score)
    if score >= 75:
        return MatchQuality(label="Good Match", score=score)
    if score >= 50:
        return MatchQuality(label="Fair Match", score=score)
    return MatchQuality(label="Possible Fit", score=score)
