from fastapi import FastAPI

from app.config import settings
from app.engine.router import router as engine_router
from app.logger import setup_logger

setup_logger(level=settings.log_level, log_file=settings.log_file)

app = FastAPI(title="ProgramEngine", version="0.1.0")
app.include_router(engine_router)


@app.get("/")
async def root() -> dict:
    return {
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
        "engine": {
            "energy": "/engine/energy",
            "recommend_workout": "/engine/recommendations/workout",
            "recommend_nutrition": "/engine/recommendations/nutrition",
            "assign": "/engine/assignments/{kind}",
            "auto_assign": "/engine/assignments/{kind}/auto",
            "program": "/engine/programs/{person_id}/{kind}",
            "initialize": "/engine/programs/{person_id}/workout/initialize",
            "toggle": "/engine/programs/{person_id}/{kind}/days/{day_id}/toggle",
            "stats": "/engine/programs/{person_id}/{kind}/stats",
            "rules": "/engine/rules",
        },
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
