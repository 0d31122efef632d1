"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.config.constants import (
    CURATION_SYNC_INTERVAL_MINUTES,
    CURATION_SYNC_RANGE_CAP,
    PAY_TO_DELAY_SECONDS,
    PAY_TO_MAX_ATTEMPTS,
    POLYGON_MAINNET_CHAIN_ID,
    POLYGON_SAFE_CONFIRMATIONS,
    USDT_DECIMALS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Redis (for Dramatiq broker, locks and response cache)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Blockchain RPC
    rpc_url: str
    chain_id: int = Field(
        default=POLYGON_MAINNET_CHAIN_ID,
        gt=0,
        description="Chain ID of the network hosting the curation contract",
    )

    # Contracts
    curation_contract_address: str
    usdt_contract_address: str
    usdt_decimals: int = Field(
        default=USDT_DECIMALS, ge=0, le=36, description="USDT token decimals"
    )

    # Curation event synchronization
    blockchain_safe_confirmations: int = Field(
        default=POLYGON_SAFE_CONFIRMATIONS,
        ge=0,
        description="Blocks behind the head considered final for syncing",
    )
    curation_sync_range_cap: int = Field(
        default=CURATION_SYNC_RANGE_CAP,
        gt=0,
        description="Maximum block range width per log query",
    )
    curation_sync_interval_minutes: int = Field(
        default=CURATION_SYNC_INTERVAL_MINUTES,
        gt=0,
        description="Interval between scheduled curation event syncs",
    )

    # Pay-to verification
    pay_to_delay_seconds: float = Field(
        default=PAY_TO_DELAY_SECONDS,
        gt=0,
        description="Delay before the first verification attempt (backoff base)",
    )
    pay_to_max_attempts: int = Field(
        default=PAY_TO_MAX_ATTEMPTS,
        gt=0,
        description="Verification attempts before a job is abandoned",
    )

    # Notifications (optional, notices are skipped without a bot token)
    telegram_bot_token: str | None = None

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    health_check_port: int = Field(
        default=8080, ge=1, le=65535, description="Health check HTTP server port"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("curation_contract_address", "usdt_contract_address")
    @classmethod
    def normalize_address(cls, v: str) -> str:
        """Contract addresses are compared lower-cased everywhere."""
        v = v.strip()
        if not (v.startswith("0x") and len(v) == 42):
            raise ValueError(f"Invalid contract address: {v}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case log level for loguru."""
        return v.upper()


settings = Settings()

logger.debug(
    f"Settings loaded: environment={settings.environment}, "
    f"chain_id={settings.chain_id}"
)
