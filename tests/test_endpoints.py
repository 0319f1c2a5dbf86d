"""Endpoint tests — FastAPI app via httpx against an in-memory database."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from app.engine.errors import PersistenceFailure
from tests.conftest import PERSON, seed_nutrition_library, seed_workout_library

BEGINNER = {
    "goal": "Lose fat",
    "experience": "Never trained",
    "activity_level": "Sedentary (desk job)",
    "body_fat_estimate": "Average",
    "equipment": "Dumbbells, Resistance bands",
    "training_days_per_week": 3,
}

SCENARIO_A = {
    "goal": "Lose fat",
    "activity_level": "Moderately active",
    "weight": "180",
    "height": "5'10\"",
    "age": 30,
}


class TestAppRoutes:
    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_index(self, client):
        resp = await client.get("/")
        assert resp.status_code == 200
        assert resp.json()["engine"]["rules"] == "/engine/rules"


class TestAuth:
    @pytest.mark.asyncio
    async def test_missing_key_401(self, client):
        with patch("app.auth.settings.engine_api_key", "secret"):
            resp = await client.get("/engine/rules")
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_bearer_key_accepted(self, client):
        with patch("app.auth.settings.engine_api_key", "secret"):
            resp = await client.get("/engine/rules", headers={"Authorization": "Bearer secret"})
        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_header_key_accepted(self, client):
        with patch("app.auth.settings.engine_api_key", "secret"):
            resp = await client.get("/engine/rules", headers={"X-API-Key": "secret"})
        assert resp.status_code == 200


class TestEnergyAndRules:
    @pytest.mark.asyncio
    async def test_energy(self, client):
        resp = await client.post("/engine/energy", json=SCENARIO_A)
        assert resp.status_code == 200
        body = resp.json()
        assert body["tdee"] == 2763
        assert body["target_calories"] == 2013
        assert body["recommended_kind"] == "fat_loss_aggressive"
        assert body["recommended_category_name"] == "Fat Loss - Aggressive"

    @pytest.mark.asyncio
    async def test_energy_invalid_body_422(self, client):
        resp = await client.post("/engine/energy", json={"age": "thirty"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_rules_catalog(self, client):
        resp = await client.get("/engine/rules")
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["categories"]) == 5
        assert body["category_weights"]["experience"] == 0.35
        assert body["template_weights"]["equipment"] == 0.30
        labels = {c["label"] for c in body["nutrition_categories"]}
        assert "Recomposition" in labels


class TestRecommendations:
    @pytest.mark.asyncio
    async def test_workout(self, client, session):
        await seed_workout_library(session)
        resp = await client.post("/engine/recommendations/workout", json=BEGINNER)
        assert resp.status_code == 200
        body = resp.json()
        assert body["recommended_category"]["category"]["id"] == "cat-beginner"
        assert body["recommendation"]["template"]["id"] == "tpl-foundations"
        # Inactive library rows are never candidates.
        assert "cat-retired" not in {c["category"]["id"] for c in body["categories"]}
        assert "tpl-hidden" not in {t["template"]["id"] for t in body["templates"]}

    @pytest.mark.asyncio
    async def test_workout_empty_library(self, client):
        resp = await client.post("/engine/recommendations/workout", json=BEGINNER)
        assert resp.status_code == 200
        assert resp.json()["recommendation"] is None

    @pytest.mark.asyncio
    async def test_nutrition(self, client, session):
        await seed_nutrition_library(session)
        resp = await client.post("/engine/recommendations/nutrition", json=SCENARIO_A)
        assert resp.status_code == 200
        body = resp.json()
        assert body["category"]["id"] == "ncat-aggressive"
        assert [t["template"]["id"] for t in body["templates"]] == ["mp-2000", "mp-2200", "mp-1800"]
        assert body["recommendation"]["score"] == 99


class TestAssignments:
    @pytest.mark.asyncio
    async def test_assign_workout(self, client, session):
        await seed_workout_library(session)
        resp = await client.post(
            "/engine/assignments/workout", json={"person_id": PERSON, "template_id": "tpl-dumbbell"}
        )
        assert resp.status_code == 200
        assert len(resp.json()["weeks"]) == 3

    @pytest.mark.asyncio
    async def test_assign_unknown_template_404(self, client):
        resp = await client.post("/engine/assignments/workout", json={"person_id": PERSON, "template_id": "nope"})
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_assign_unknown_kind_422(self, client):
        resp = await client.post("/engine/assignments/yoga", json={"person_id": PERSON, "template_id": "x"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_auto_assign_workout(self, client, session):
        await seed_workout_library(session)
        resp = await client.post(
            "/engine/assignments/workout/auto", json={"person_id": PERSON, "profile": BEGINNER}
        )
        assert resp.status_code == 200
        assert len(resp.json()["weeks"]) == 4

    @pytest.mark.asyncio
    async def test_auto_assign_nutrition(self, client, session):
        await seed_nutrition_library(session)
        resp = await client.post(
            "/engine/assignments/nutrition/auto", json={"person_id": PERSON, "profile": SCENARIO_A}
        )
        assert resp.status_code == 200
        assert resp.json()["name"] == "Cut 2000"

    @pytest.mark.asyncio
    async def test_auto_assign_without_recommendation_404(self, client):
        resp = await client.post(
            "/engine/assignments/workout/auto", json={"person_id": PERSON, "profile": BEGINNER}
        )
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_persistence_failure_503(self, client, session):
        await seed_workout_library(session)
        with patch("app.engine.router.materializer.materialize", side_effect=PersistenceFailure("down")):
            resp = await client.post(
                "/engine/assignments/workout", json={"person_id": PERSON, "template_id": "tpl-dumbbell"}
            )
        assert resp.status_code == 503


class TestPrograms:
    @pytest.mark.asyncio
    async def test_missing_program_404(self, client):
        resp = await client.get(f"/engine/programs/{PERSON}/workout")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_initialize_edit_toggle_and_stats(self, client):
        resp = await client.post(f"/engine/programs/{PERSON}/workout/initialize")
        assert resp.status_code == 200
        program = resp.json()
        assert len(program["weeks"]) == 4
        week = program["weeks"][0]
        monday = week["days"][0]

        resp = await client.patch(f"/engine/programs/{PERSON}/workout/weeks/{week['id']}", json={"title": "Intro"})
        assert resp.status_code == 200
        assert resp.json()["weeks"][0]["title"] == "Intro"

        resp = await client.patch(
            f"/engine/programs/{PERSON}/workout/days/{monday['id']}", json={"workout_name": "Legs"}
        )
        assert resp.json()["weeks"][0]["days"][0]["workout_name"] == "Legs"

        resp = await client.post(
            f"/engine/programs/{PERSON}/workout/days/{monday['id']}/exercises", json={"exercise_name": "Squat"}
        )
        assert resp.status_code == 200
        exercise = resp.json()["weeks"][0]["days"][0]["exercises"][0]
        assert exercise["exercise_name"] == "Squat"

        resp = await client.patch(
            f"/engine/programs/{PERSON}/workout/exercises/{exercise['id']}", json={"sets": "5"}
        )
        assert resp.json()["weeks"][0]["days"][0]["exercises"][0]["sets"] == "5"

        resp = await client.post(f"/engine/programs/{PERSON}/workout/days/{monday['id']}/toggle")
        assert resp.status_code == 200
        assert resp.json()["completed"] is True

        resp = await client.get(f"/engine/programs/{PERSON}/workout/stats")
        assert resp.status_code == 200
        stats = resp.json()
        assert stats["phase"]["total_days"] == 24
        assert stats["phase"]["completed_days"] == 1
        assert stats["weeks"][0]["completed"] == 1

        resp = await client.get(f"/engine/programs/{PERSON}/workout")
        assert resp.status_code == 200
        assert resp.json()["stats"]["completed_day_ids"] == [monday["id"]]

        resp = await client.delete(f"/engine/programs/{PERSON}/workout/exercises/{exercise['id']}")
        assert resp.json()["weeks"][0]["days"][0]["exercises"] == []

    @pytest.mark.asyncio
    async def test_toggle_unknown_day_404(self, client):
        await client.post(f"/engine/programs/{PERSON}/workout/initialize")
        resp = await client.post(f"/engine/programs/{PERSON}/workout/days/nope/toggle")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_program(self, client):
        await client.post(f"/engine/programs/{PERSON}/workout/initialize")
        resp = await client.delete(f"/engine/programs/{PERSON}/workout")
        assert resp.status_code == 204
        resp = await client.delete(f"/engine/programs/{PERSON}/workout")
        assert resp.status_code == 404
