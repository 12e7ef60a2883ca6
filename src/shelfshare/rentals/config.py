"""Configuration management for shelfshare.

Loads configuration from environment variables and provides defaults.
"""

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


@dataclass
class Config:
    """Application configuration."""

    # Platform API
    api_url: str
    api_token: Optional[str]
    api_timeout: int  # seconds

    # Cache
    cache_path: Path
    cache_ttl: int  # seconds

    # Fees
    late_fee_per_day: str
    fine_grace_days: int
    max_fine: Optional[str]
    default_daily_rate: str

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        cache_path_str = os.environ.get(
            "SHELFSHARE_CACHE_PATH",
            str(Path.home() / ".shelfshare" / "cache.db"),
        )

        return cls(
            api_url=os.environ.get("SHELFSHARE_API_URL", "http://localhost:5000/api"),
            api_token=os.environ.get("SHELFSHARE_API_TOKEN") or None,
            api_timeout=int(os.environ.get("SHELFSHARE_API_TIMEOUT", "10")),
            cache_path=Path(cache_path_str).expanduser(),
            cache_ttl=int(os.environ.get("SHELFSHARE_CACHE_TTL", "300")),
            late_fee_per_day=os.environ.get("SHELFSHARE_LATE_FEE_PER_DAY", "0.50"),
            fine_grace_days=int(os.environ.get("SHELFSHARE_FINE_GRACE_DAYS", "0")),
            max_fine=os.environ.get("SHELFSHARE_MAX_FINE") or None,
            default_daily_rate=os.environ.get("SHELFSHARE_DEFAULT_DAILY_RATE", "0"),
        )

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        parsed = urlparse(self.api_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append(f"Invalid API URL: {self.api_url}")

        if self.api_timeout <= 0:
            errors.append("API timeout must be positive")
        if self.cache_ttl < 0:
            errors.append("Cache TTL must not be negative")
        if self.fine_grace_days < 0:
            errors.append("Fine grace period must not be negative")

        for name, value in (
            ("late fee per day", self.late_fee_per_day),
            ("max fine", self.max_fine),
            ("default daily rate", self.default_daily_rate),
        ):
            if value is None:
                continue
            try:
                amount = Decimal(value)
            except InvalidOperation:
                errors.append(f"Invalid {name}: {value}")
                continue
            if not amount.is_finite() or amount < 0:
                errors.append(f"Invalid {name}: {value}")

        return errors

    def has_api_token(self) -> bool:
        """Check if an API token is configured."""
        return bool(self.api_token)


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config instance. Used for testing."""
    global _config
    _config = None
