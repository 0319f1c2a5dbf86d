from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://localhost:5432/programengine"
    engine_api_key: str | None = None
    sql_echo: bool = False

    # Logging (loguru). log_file enables a rotating file sink next to stderr.
    log_level: str = "INFO"
    log_file: str | None = None

    # Blank workout program initialization
    blank_program_weeks: int = 4

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
