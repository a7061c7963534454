"""Application configuration using pydantic settings with structured sections."""

from decimal import Decimal
from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./timebank.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None


class LedgerSettings(BaseModel):
    allow_negative_balance: bool = False
    # 0 means "no lower bound" once negative balances are allowed
    max_negative_balance: Decimal = Field(default=Decimal("0"), ge=0)
    description_max_length: int = Field(default=500, ge=16)

    @property
    def floor(self) -> Optional[Decimal]:
        """Lowest balance an account may reach, or ``None`` when unbounded."""
        if not self.allow_negative_balance:
            return Decimal("0")
        if self.max_negative_balance == 0:
            return None
        return -self.max_negative_balance


class VotingSettings(BaseModel):
    enabled: bool = True
    required_votes: int = Field(default=3, ge=1)
    system_resolver_id: str = Field(default="voting-system", min_length=1, max_length=64)


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    project_name: str = "Time Bank Ledger"

    database: DatabaseSettings = DatabaseSettings()
    ledger: LedgerSettings = LedgerSettings()
    voting: VotingSettings = VotingSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def database_url(self) -> str:
        return self.database.url


@lru_cache()
def get_settings() -> Settings:
    return Settings()
