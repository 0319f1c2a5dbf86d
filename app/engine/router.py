"""Engine HTTP router — recommendations, assignments, programs, completion."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import verify_api_key
from app.db import get_session
from app.engine import completion, library, materializer, programs
from app.engine.energy import estimate_for_profile
from app.engine.errors import DayNotFound, EngineError, PersistenceFailure, ProgramNotFound, TemplateNotFound
from app.engine.models import (
    AssignmentRequest,
    AutoAssignmentRequest,
    DayUpdate,
    EnergyEstimate,
    ExerciseInput,
    MealPlan,
    NutritionRecommendation,
    Profile,
    ProgramKind,
    ProgramStats,
    ToggleResult,
    WeekUpdate,
    WorkoutProgram,
    WorkoutRecommendation,
)
from app.engine.recommend import recommend_nutrition, recommend_workout
from app.engine.rules import DEFAULT_RULES, NUTRITION_CATEGORY_NAMES, list_rules
from app.engine.scoring import match_quality, nutrition_match_quality

router = APIRouter(prefix="/engine", tags=["engine"])


def _http_error(exc: EngineError) -> HTTPException:
    if isinstance(exc, (TemplateNotFound, ProgramNotFound, DayNotFound)):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, PersistenceFailure):
        return HTTPException(status_code=503, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


# ---------------------------------------------------------------------------
# /engine/energy, /engine/recommendations/*
# ---------------------------------------------------------------------------


@router.post("/energy", response_model=EnergyEstimate)
async def energy(
    profile: Profile,
    _: str = Depends(verify_api_key),
) -> EnergyEstimate:
    return estimate_for_profile(profile)


@router.post("/recommendations/workout", response_model=WorkoutRecommendation)
async def workout_recommendation(
    profile: Profile,
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
) -> WorkoutRecommendation:
    categories = await library.list_workout_categories(session)
    templates = await library.list_workout_templates(session)
    return recommend_workout(profile, categories, templates)


@router.post("/recommendations/nutrition", response_model=NutritionRecommendation)
async def nutrition_recommendation(
    profile: Profile,
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
) -> NutritionRecommendation:
    categories = await library.list_nutrition_categories(session)
    templates = await library.list_meal_plan_templates(session)
    return recommend_nutrition(profile, categories, templates)


# ---------------------------------------------------------------------------
# /engine/assignments/{kind}
# ---------------------------------------------------------------------------


@router.post("/assignments/{kind}", response_model=None)
async def assign(
    kind: ProgramKind,
    body: AssignmentRequest,
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
) -> WorkoutProgram | MealPlan:
    try:
        return await materializer.materialize(session, kind, body)
    except EngineError as exc:
        raise _http_error(exc)


@router.post("/assignments/{kind}/auto", response_model=None)
async def auto_assign(
    kind: ProgramKind,
    body: AutoAssignmentRequest,
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
) -> WorkoutProgram | MealPlan:
    """Materialize the top recommendation when no one has picked a template."""
    if kind == ProgramKind.workout:
        rec = recommend_workout(
            body.profile,
            await library.list_workout_categories(session),
            await library.list_workout_templates(session),
        )
        if rec.recommendation is None or rec.recommended_category is None:
            raise HTTPException(status_code=404, detail="No workout recommendation available")
        request = AssignmentRequest(
            person_id=body.person_id,
            template_id=rec.recommendation.template.id,
            assigned_by=body.assigned_by,
            suggested_category_id=rec.recommended_category.category.id,
            match_score=rec.recommendation.score,
            notes=f"Auto-assigned ({match_quality(rec.recommendation.score).label})",
        )
    else:
        nrec = recommend_nutrition(
            body.profile,
            await library.list_nutrition_categories(session),
            await library.list_meal_plan_templates(session),
        )
        if nrec.recommendation is None or nrec.category is None:
            raise HTTPException(status_code=404, detail="No nutrition recommendation available")
        request = AssignmentRequest(
            person_id=body.person_id,
            template_id=nrec.recommendation.template.id,
            assigned_by=body.assigned_by,
            suggested_category_id=nrec.category.id,
            match_score=nrec.recommendation.score,
            notes=f"Auto-assigned ({nutrition_match_quality(nrec.recommendation.score).label})",
        )

    try:
        return await materializer.materialize(session, kind, request)
    except EngineError as exc:
        raise _http_error(exc)


# ---------------------------------------------------------------------------
# /engine/programs/{person_id}/{kind}
# ---------------------------------------------------------------------------


@router.get("/programs/{person_id}/{kind}")
async def program_detail(
    person_id: str,
    kind: ProgramKind,
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
) -> dict:
    try:
        program = await programs.load_program(session, person_id, kind)
    except EngineError as exc:
        raise _http_error(exc)
    completed = await completion.fetch_completed_day_ids(session, person_id, kind)
    stats = completion.program_stats(kind, program.tracked_days(), completed)
    return {"program": program.model_dump(mode="json"), "stats": stats.model_dump(mode="json")}


@router.delete("/programs/{person_id}/{kind}", status_code=204)
async def program_delete(
    person_id: str,
    kind: ProgramKind,
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
) -> Response:
    try:
        await materializer.remove_program(session, person_id, kind)
    except EngineError as exc:
        raise _http_error(exc)
    return Response(status_code=204)


@router.post("/programs/{person_id}/workout/initialize", response_model=WorkoutProgram)
async def program_initialize(
    person_id: str,
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
) -> WorkoutProgram:
    try:
        return await materializer.initialize_blank_program(session, person_id)
    except EngineError as exc:
        raise _http_error(exc)


@router.patch("/programs/{person_id}/workout/weeks/{week_id}", response_model=WorkoutProgram)
async def week_update(
    person_id: str,
    week_id: str,
    body: WeekUpdate,
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
) -> WorkoutProgram:
    try:
        return await programs.update_week(session, person_id, week_id, body)
    except EngineError as exc:
        raise _http_error(exc)


@router.patch("/programs/{person_id}/workout/days/{day_id}", response_model=WorkoutProgram)
async def day_update(
    person_id: str,
    day_id: str,
    body: DayUpdate,
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
) -> WorkoutProgram:
    try:
        return await programs.update_day(session, person_id, day_id, body)
    except EngineError as exc:
        raise _http_error(exc)


@router.post("/programs/{person_id}/workout/days/{day_id}/exercises", response_model=WorkoutProgram)
async def exercise_add(
    person_id: str,
    day_id: str,
    body: ExerciseInput,
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
) -> WorkoutProgram:
    try:
        return await programs.add_exercise(session, person_id, day_id, body)
    except EngineError as exc:
        raise _http_error(exc)


@router.patch("/programs/{person_id}/workout/exercises/{exercise_id}", response_model=WorkoutProgram)
async def exercise_update(
    person_id: str,
    exercise_id: str,
    body: ExerciseInput,
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
) -> WorkoutProgram:
    try:
        return await programs.update_exercise(session, person_id, exercise_id, body)
    except EngineError as exc:
        raise _http_error(exc)


@router.delete("/programs/{person_id}/workout/exercises/{exercise_id}", response_model=WorkoutProgram)
async def exercise_delete(
    person_id: str,
    exercise_id: str,
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
) -> WorkoutProgram:
    try:
        return await programs.delete_exercise(session, person_id, exercise_id)
    except EngineError as exc:
        raise _http_error(exc)


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------


@router.post("/programs/{person_id}/{kind}/days/{day_id}/toggle", response_model=ToggleResult)
async def day_toggle(
    person_id: str,
    kind: ProgramKind,
    day_id: str,
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
) -> ToggleResult:
    try:
        return await completion.toggle_day(session, person_id, kind, day_id)
    except EngineError as exc:
        raise _http_error(exc)


@router.get("/programs/{person_id}/{kind}/stats", response_model=ProgramStats)
async def program_stats(
    person_id: str,
    kind: ProgramKind,
    session: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
) -> ProgramStats:
    try:
        return await completion.load_program_stats(session, person_id, kind)
    except EngineError as exc:
        raise _http_error(exc)


# ---------------------------------------------------------------------------
# /engine/rules
# ---------------------------------------------------------------------------


@router.get("/rules")
async def rules_catalog(
    _: str = Depends(verify_api_key),
) -> dict:
    return {
        "categories": [
            {
                "kind": kind.value,
                "label": rule.label,
                "experience": sorted(e.value for e in rule.experience),
                "body_composition": sorted(b.value for b in rule.body_composition),
                "activity": sorted(a.value for a in rule.activity),
                "min_days": rule.min_days,
                "max_days": rule.max_days,
                "injury_friendly": rule.injury_friendly,
                "intensity": rule.intensity,
            }
            for kind, rule in list_rules()
        ],
        "nutrition_categories": [{"kind": k.value, "label": v} for k, v in NUTRITION_CATEGORY_NAMES.items()],
        "category_weights": asdict(DEFAULT_RULES.category_weights),
        "template_weights": asdict(DEFAULT_RULES.template_weights),
    }
