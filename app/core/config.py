from typing import Optional
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    name: str = Field(default="study-cards", alias="APP_NAME")
    version: str = Field(default="v1", alias="API_VERSION")
    port: int = Field(default=9000, alias="APP_PORT")
    mode: str = Field(default="prod", alias="MODE")

    @computed_field
    def is_production(self) -> bool:
        return self.mode != "dev"


class GenerationSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    # Promoted ahead of the default candidates when set
    gemini_model: Optional[str] = Field(default=None, alias="GEMINI_MODEL")
    timeout_seconds: float = Field(default=60.0, gt=0, alias="GEMINI_TIMEOUT_SECONDS")

    text_budget: int = Field(default=4000, ge=2, alias="STUDY_CARDS_TEXT_BUDGET")
    max_cards: int = Field(default=10, ge=1, alias="STUDY_CARDS_MAX_CARDS")
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024, gt=0, alias="STUDY_CARDS_MAX_UPLOAD_BYTES"
    )


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=lambda: AppSettings())
    generation: GenerationSettings = Field(default_factory=lambda: GenerationSettings())


settings = Settings()
