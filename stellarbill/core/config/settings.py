"""Application settings loaded from the environment.

All defaults live here. Values are read from env vars (and an optional
``.env`` file) through Pydantic Settings.
"""

from typing import Optional

from pydantic import Field, PostgresDsn, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from stellarbill.core.config.enums import Environment


class Settings(BaseSettings):
    """Typed settings for the API, the sweeps and the chain adapters."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    PROJECT_NAME: str = "Stellarbill"
    ENVIRONMENT: Environment = Environment.LOCAL
    LOG_LEVEL: str = "INFO"
    TESTING: bool = False

    # Database
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "stellarbill"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "stellarbill"
    POSTGRES_SSLMODE: str = "prefer"
    db_pool_size: int = Field(20, alias="DB_POOL_SIZE")
    db_pool_max_overflow: int = Field(40, alias="DB_POOL_MAX_OVERFLOW")
    RUN_ALEMBIC_MIGRATIONS: bool = True

    # Chain endpoints
    HORIZON_TESTNET_URL: str = "https://horizon-testnet.stellar.org"
    HORIZON_MAINNET_URL: str = "https://horizon.stellar.org"
    SOROBAN_RPC_TESTNET_URL: str = "https://soroban-testnet.stellar.org"
    SOROBAN_RPC_MAINNET_URL: str = "https://soroban-mainnet.stellar.org"
    SUBSCRIPTION_CONTRACT_ID_TESTNET: Optional[str] = None
    SUBSCRIPTION_CONTRACT_ID_MAINNET: Optional[str] = None
    KEEPER_SECRET: Optional[str] = None
    CHAIN_REQUEST_TIMEOUT_SECONDS: float = 10.0

    # Subscription charge sweep
    CHARGE_TIMEOUT_SECONDS: float = 30.0
    CHARGE_SWEEP_CONCURRENCY: int = Field(1, ge=1)
    CHARGE_CLAIM_TTL_SECONDS: int = Field(900, ge=1)
    PAST_DUE_MAX_FAILED_CHARGES: Optional[int] = Field(3, ge=1)
    PAST_DUE_RETRY_ENABLED: bool = False

    # Checkout sweep
    CHECKOUT_SWEEP_CONCURRENCY: int = Field(10, ge=1)

    # Credits
    CREDIT_BALANCE_FLOOR: int = 0

    # Cron endpoints
    CRON_SECRET: Optional[str] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_ASYNC_DATABASE_URI(self) -> str:  # noqa: N802
        """Async connection string for asyncpg."""
        return str(
            PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=self.POSTGRES_USER,
                password=self.POSTGRES_PASSWORD or None,
                host=self.POSTGRES_HOST,
                port=self.POSTGRES_PORT,
                path=self.POSTGRES_DB,
            )
        )

    @model_validator(mode="after")
    def validate_sweep_settings(self) -> "Settings":
        """Reject timeouts that would let a claim expire before its charge returns."""
        if self.CHARGE_CLAIM_TTL_SECONDS <= self.CHARGE_TIMEOUT_SECONDS:
            raise ValueError(
                "CHARGE_CLAIM_TTL_SECONDS must exceed CHARGE_TIMEOUT_SECONDS, otherwise a "
                "second sweep could claim a subscription whose charge is still in flight"
            )
        return self

    def horizon_url(self, network: str) -> str:
        """Horizon base URL for a chain network."""
        return self.HORIZON_TESTNET_URL if network == "testnet" else self.HORIZON_MAINNET_URL

    def soroban_rpc_url(self, network: str) -> str:
        """Soroban RPC URL for a chain network."""
        if network == "testnet":
            return self.SOROBAN_RPC_TESTNET_URL
        return self.SOROBAN_RPC_MAINNET_URL

    def subscription_contract_id(self, network: str) -> Optional[str]:
        """Subscription-engine contract id for a chain network."""
        if network == "testnet":
            return self.SUBSCRIPTION_CONTRACT_ID_TESTNET
        return self.SUBSCRIPTION_CONTRACT_ID_MAINNET
