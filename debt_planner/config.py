"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./debt_planner.db"

    # Service
    service_name: str = "debt-planner"
    log_level: str = "INFO"

    # Simulation limits
    default_max_months: int = 600  # 50 years
    max_months_limit: int = 1200  # Hard ceiling a request may ask for
    max_debts_per_plan: int = 100


settings = Settings()
