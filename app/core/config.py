from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "postgresql://dreams:dreams@db:5432/dreams"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Seconds to wait for a store connection before failing the request.
    DB_CONNECT_TIMEOUT: int = 5

    # Users logging in with this open_id are upserted as admins.
    OWNER_OPEN_ID: str = ""

    # OpenAI-compatible endpoint used for dream analysis and illustrations.
    AI_BASE_URL: str = "https://api.openai.com/v1"
    AI_API_KEY: str = ""
    AI_MODEL: str = "gpt-4o-mini"
    AI_IMAGE_MODEL: str = "dall-e-3"
    AI_TIMEOUT_SECONDS: float = 60.0

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://dreams.example.com,https://app.dreams.example.com"
    CORS_ORIGINS: str = "*"

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
