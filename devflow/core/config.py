from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "postgresql://devflow:devflow@db:5432/devflow"
    APP_ENV: str = "development"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://devflow.app,https://api.devflow.app"
    CORS_ORIGINS: str = "*"

    LOG_LEVEL: str = "INFO"

    # How many times POST /users/{id}/evaluate re-runs the whole pipeline
    # after a concurrent update of the same user row.
    EVALUATION_MAX_RETRIES: int = 1

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
