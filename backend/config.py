from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    openai_api_key: str = ""
    allowed_origins: str = "http://localhost:5173,http://localhost:3000"

    # Optional: set to use OpenRouter or any OpenAI-compatible provider
    # e.g. https://openrouter.ai/api/v1
    openai_base_url: Optional[str] = "https://openrouter.ai/api/v1"

    # Model names — use OpenRouter format if needed e.g. "google/gemini-flash-1.5"
    chat_model: str = "google/gemini-flash-1.5"

    # Large documents can take minutes to turn into study materials, so model
    # calls get their own timeout, well above the one used for link fetching.
    model_timeout: float = 180.0
    fetch_timeout: float = 20.0

    max_content_chars: int = 60000
    max_upload_mb: int = 25
    user_agent: str = "SnapStudy/1.0 (+https://snapstudy.app)"
    log_level: str = "INFO"

    @property
    def origins_list(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",")]

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
