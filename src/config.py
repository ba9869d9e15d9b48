from typing import List
from pydantic import PostgresDsn, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    PROJECT_NAME: str = "Policy-safe Knowledge Base"
    VERSION: str = "0.1.0"
    API_V1_STR: str = "/v1"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "policy_kb"
    POSTGRES_PORT: int = 5432

    @computed_field
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> PostgresDsn:
        return PostgresDsn.build(
            scheme="postgresql+asyncpg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_SERVER,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        )

    # User context defaults (synthesized, never persisted on read)
    DEFAULT_LOCALE: str = "en-GB"
    DEFAULT_JURISDICTION: str = "EU"
    DEFAULT_ALLOWED_SCOPE: str = "education_only"

    # Retrieval / answering
    SEARCH_EXCERPT_LENGTH: int = 140
    ANSWER_MAX_CITATIONS: int = 5

    # Rule version allocation
    VERSION_ALLOCATION_RETRIES: int = 3

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env")

settings = Settings()
