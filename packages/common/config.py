"""
Application configuration using Pydantic Settings
Reads from environment variables and .env file
"""
from decimal import Decimal
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database
    db_user: str = Field(default="thrifty", alias="DB_USER")
    db_password: str = Field(default="thrifty", alias="DB_PASSWORD")
    db_name: str = Field(default="thrifty_clothings", alias="DB_NAME")
    db_host: str = Field(default="postgres", alias="DB_HOST")
    db_port: int = Field(default=5432, alias="DB_PORT")
    database_url_override: Optional[str] = Field(default=None, alias="DATABASE_URL")

    @property
    def database_url(self) -> str:
        """Construct database URL (DATABASE_URL wins when set)"""
        if self.database_url_override:
            return self.database_url_override
        return f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    # Redis / Celery
    redis_url: str = Field(default="redis://redis:6379/0", alias="REDIS_URL")
    celery_broker_url: str = Field(default="redis://redis:6379/1", alias="CELERY_BROKER_URL")
    celery_result_backend: str = Field(default="redis://redis:6379/2", alias="CELERY_RESULT_BACKEND")

    # Application
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    debug: bool = Field(default=False, alias="DEBUG")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")

    # Pricing (GST 18%, free shipping above 1000, flat fee otherwise)
    tax_rate: Decimal = Field(default=Decimal("0.18"), ge=0, alias="TAX_RATE")
    free_shipping_threshold: Decimal = Field(default=Decimal("1000"), ge=0, alias="FREE_SHIPPING_THRESHOLD")
    flat_shipping_fee: Decimal = Field(default=Decimal("100"), ge=0, alias="FLAT_SHIPPING_FEE")
    currency: str = Field(default="INR", alias="CURRENCY")

    # Categorization
    keyword_match_mode: str = Field(default="word", alias="KEYWORD_MATCH_MODE")

    # Catalog
    catalog_page_size: int = Field(default=12, ge=1, alias="CATALOG_PAGE_SIZE")
    catalog_max_page_size: int = Field(default=100, ge=1, alias="CATALOG_MAX_PAGE_SIZE")

    # Monitoring
    metrics_enabled: bool = Field(default=True, alias="METRICS_ENABLED")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment"""
        valid_envs = ["development", "staging", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT must be one of {valid_envs}")
        return v.lower()

    @field_validator("keyword_match_mode")
    @classmethod
    def validate_keyword_match_mode(cls, v):
        """Validate keyword match mode"""
        valid_modes = ["word", "substring"]
        if v.lower() not in valid_modes:
            raise ValueError(f"KEYWORD_MATCH_MODE must be one of {valid_modes}")
        return v.lower()


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
