"""Runtime configuration read from the environment."""

import os
from dataclasses import dataclass, field


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class DatabaseConfig:
    """Configuration for the patient store."""

    url: str = "sqlite:///./hospital_queue.db"
    echo: bool = False

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        return cls(
            url=os.getenv("DATABASE_URL", cls.url),
            echo=os.getenv("DATABASE_ECHO", "").lower() in ("1", "true", "yes"),
        )


@dataclass
class RazorpayConfig:
    """Configuration for the Razorpay gateway client.

    Leaving either credential blank puts the client in demo mode: orders and
    payment links are mocked locally and signature checks always pass.
    """

    key_id: str = ""
    key_secret: str = ""
    base_url: str = "https://api.razorpay.com/v1"
    timeout: float = 15.0
    max_retries: int = 3
    retry_delay: float = 0.5
    requests_per_minute: int = 120

    @property
    def has_credentials(self) -> bool:
        return bool(self.key_id.strip()) and bool(self.key_secret.strip())

    @classmethod
    def from_env(cls) -> "RazorpayConfig":
        return cls(
            key_id=os.getenv("RAZORPAY_KEY_ID", ""),
            key_secret=os.getenv("RAZORPAY_KEY_SECRET", ""),
            base_url=os.getenv("RAZORPAY_BASE_URL", cls.base_url).rstrip("/"),
            timeout=float(os.getenv("RAZORPAY_TIMEOUT", str(cls.timeout))),
        )


@dataclass
class KioskConfig:
    """Top-level application configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    razorpay: RazorpayConfig = field(default_factory=RazorpayConfig)
    token_prefix: str = "HOS"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "KioskConfig":
        """Build configuration from environment variables."""
        return cls(
            database=DatabaseConfig.from_env(),
            razorpay=RazorpayConfig.from_env(),
            token_prefix=os.getenv("TOKEN_PREFIX", "HOS"),
            cors_origins=_split_csv(os.getenv("CORS_ORIGINS", "*")) or ["*"],
        )
