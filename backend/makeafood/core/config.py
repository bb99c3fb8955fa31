# makeafood/core/config.py
# Environment loading (.env) -> explicit per-service configs
# create_app turns Settings into ServiceConfig objects once and fails fast
# with ConfigError when a required value is missing.

from __future__ import annotations
from typing import List, Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings

from makeafood.core.errors import ConfigError

# provider -> (OpenAI-compatible base url, default model)
LLM_PROVIDERS = {
    "gemini": ("https://generativelanguage.googleapis.com/v1beta/openai/", "gemini-2.0-flash"),
    "groq": ("https://api.groq.com/openai/v1", "llama-3.3-70b-versatile"),
}


class ServiceConfig(BaseModel):
    # one external service: credentials + endpoint
    api_key: str
    base_url: str
    service_role_key: Optional[str] = None
    model: Optional[str] = None


class Settings(BaseSettings):
    # Supabase (auth + tables)
    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SUPABASE_ANON_KEY: str | None = None

    # LLM
    LLM_PROVIDER: str = "gemini"
    GEMINI_API_KEY: str | None = None
    GROQ_API_KEY: str | None = None
    LLM_BASE_URL: str | None = None   # override provider endpoint
    LLM_MODEL: str | None = None

    # upstream recipe APIs
    SPOONACULAR_API_KEY: str | None = None
    SPOONACULAR_BASE_URL: str = "https://api.spoonacular.com"
    MEALDB_BASE_URL: str = "https://www.themealdb.com/api/json/v1/1"

    # mail (optional; mail endpoints answer 500 when unset)
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASSWORD: str | None = None
    MAIL_FROM: str | None = None

    APP_BASE_URL: str = "http://localhost:3000"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    def supabase_config(self) -> ServiceConfig:
        url = _require(self.SUPABASE_URL, "SUPABASE_URL")
        service_key = _require(self.SUPABASE_SERVICE_ROLE_KEY, "SUPABASE_SERVICE_ROLE_KEY")
        return ServiceConfig(
            api_key=self.SUPABASE_ANON_KEY or service_key,
            base_url=url,
            service_role_key=service_key,
        )

    def llm_config(self) -> ServiceConfig:
        provider = (self.LLM_PROVIDER or "").strip().lower()
        if provider not in LLM_PROVIDERS:
            raise ConfigError(
                f"LLM_PROVIDER must be one of {sorted(LLM_PROVIDERS)}, got {self.LLM_PROVIDER!r}"
            )
        base_url, model = LLM_PROVIDERS[provider]
        key_name = f"{provider.upper()}_API_KEY"
        api_key = _require(getattr(self, key_name), key_name)
        return ServiceConfig(
            api_key=api_key,
            base_url=self.LLM_BASE_URL or base_url,
            model=self.LLM_MODEL or model,
        )

    def spoonacular_config(self) -> ServiceConfig:
        return ServiceConfig(
            api_key=_require(self.SPOONACULAR_API_KEY, "SPOONACULAR_API_KEY"),
            base_url=self.SPOONACULAR_BASE_URL.rstrip("/"),
        )


def _require(value: str | None, name: str) -> str:
    if value is None or not str(value).strip():
        raise ConfigError(f"{name} is required. Set it in the environment or in .env")
    return str(value).strip()
