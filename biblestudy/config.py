from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Sui full node
    SUI_RPC_URL: str = "https://fullnode.testnet.sui.io:443"
    REQUEST_TIMEOUT: float = 15.0

    # Deployed Move package and its shared objects
    PACKAGE_ID: str | None = None
    MOVE_MODULE: str = "biblestudy"
    CLAIMS_ID: str | None = None
    PROGRESS_REGISTRY_ID: str | None = None
    TREASURY_ID: str | None = None
    CLOCK_OBJECT_ID: str = "0x6"

    # Verse text lookup
    BIBLE_API_URL: str = "https://bible-api.com"
    VERSE_TRANSLATION: str = "kjv"

    # External signer that builds and executes claim transactions
    SIGNER_URL: str | None = None

    # Address watched by the background worker
    WALLET_ADDRESS: str | None = None

    # =================================================================
    # CLAIM STATUS RECONCILIATION
    # =================================================================
    STATUS_POLL_INTERVAL_SECONDS: float = 5.0
    CLAIM_SETTLE_DELAY_SECONDS: float = 2.0
    INITIAL_STATUS_MAX_ATTEMPTS: int = 3

    # Wallets below this SUI balance (in MIST) are flagged as low on gas
    MIN_GAS_BALANCE: int = 50_000_000

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def move_target(self, function: str) -> str:
        """Fully qualified Move function, e.g. 0xabc::biblestudy::has_claimed_today."""
        return f"{self.PACKAGE_ID}::{self.MOVE_MODULE}::{function}"

    def missing_contract_ids(self) -> list[str]:
        """Names of contract object settings that are not configured."""
        required = {
            "PACKAGE_ID": self.PACKAGE_ID,
            "CLAIMS_ID": self.CLAIMS_ID,
            "PROGRESS_REGISTRY_ID": self.PROGRESS_REGISTRY_ID,
        }
        return [name for name, value in required.items() if not value]

    def get_http_client_config(self) -> dict:
        """
        Get outbound HTTP client configuration.
        Adjust environment-specific settings based on self.environment.
        """
        config = {
            "timeout": self.REQUEST_TIMEOUT,
            "max_keepalive_connections": 10,
            "max_connections": 20,
        }

        if self.environment == "development":
            config.update({"max_connections": 10})

        return config


settings = Settings()
