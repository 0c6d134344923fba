from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    openrouter_api_key: str = ""
    llm_base_url: str = "https://openrouter.ai/api/v1"
    llm_model: str = "google/gemini-2.5-flash"
    db_path: str = "ledger.json"
    forms_path: str = "forms.json"
    default_requester_name: str = ""
    split_form_key: str = "split-expense-form"
    max_split_sessions: int = 256


@lru_cache
def get_settings() -> Settings:
    return Settings()
