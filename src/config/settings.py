"""
Application settings loaded from ACCOUNTS_* environment variables.

Values may also come from a local .env file. Defaults suit development:
basic password rules, codes that never expire, bcrypt cost 10.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ACCOUNTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Registration
    strong_passwords: bool = False  # 8+ chars with lower, upper and digit
    code_ttl_seconds: int | None = Field(None, gt=0)  # None: valid until redeemed
    bcrypt_cost: int = Field(10, ge=4, le=31)

    # Credit ledger
    history_limit: int = Field(50, gt=0)

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Settings are read once per process."""
    return Settings()
