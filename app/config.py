from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    telegram_bot_token: str = ""
    db_path: str = "lendings.json"
    log_level: str = "INFO"
    lendings_ledger_name: str = "LENDINGS"
    lendings_categories: list[str] = ["Lending", "Repayment", "Borrowing"]
    lendings_payment_modes: list[str] = ["Cash", "UPI", "Bank Transfer"]
    default_payment_mode: str = "Cash"


@lru_cache
def get_settings() -> Settings:
    return Settings()
