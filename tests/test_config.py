"""Tests for configuration loading."""

from pathlib import Path

from shelfshare.rentals.config import Config, get_config, reset_config


class TestConfigFromEnv:
    """Tests for Config.from_env."""

    def test_defaults(self, monkeypatch):
        """Test default values when nothing is set."""
        monkeypatch.delenv("SHELFSHARE_CACHE_PATH")

        config = Config.from_env()

        assert config.api_url == "http://localhost:5000/api"
        assert config.api_token is None
        assert config.api_timeout == 10
        assert config.cache_path == Path.home() / ".shelfshare" / "cache.db"
        assert config.cache_ttl == 300
        assert config.late_fee_per_day == "0.50"
        assert config.fine_grace_days == 0
        assert config.max_fine is None
        assert config.default_daily_rate == "0"

    def test_overrides(self, monkeypatch, tmp_path):
        """Test environment variables override defaults."""
        monkeypatch.setenv("SHELFSHARE_API_URL", "https://library.example.com/api")
        monkeypatch.setenv("SHELFSHARE_API_TOKEN", "secret")
        monkeypatch.setenv("SHELFSHARE_API_TIMEOUT", "30")
        monkeypatch.setenv("SHELFSHARE_CACHE_PATH", str(tmp_path / "c.db"))
        monkeypatch.setenv("SHELFSHARE_CACHE_TTL", "60")
        monkeypatch.setenv("SHELFSHARE_LATE_FEE_PER_DAY", "1")
        monkeypatch.setenv("SHELFSHARE_FINE_GRACE_DAYS", "1")
        monkeypatch.setenv("SHELFSHARE_MAX_FINE", "50")
        monkeypatch.setenv("SHELFSHARE_DEFAULT_DAILY_RATE", "10")

        config = Config.from_env()

        assert config.api_url == "https://library.example.com/api"
        assert config.api_token == "secret"
        assert config.has_api_token()
        assert config.api_timeout == 30
        assert config.cache_path == tmp_path / "c.db"
        assert config.cache_ttl == 60
        assert config.late_fee_per_day == "1"
        assert config.fine_grace_days == 1
        assert config.max_fine == "50"
        assert config.default_daily_rate == "10"

    def test_empty_token_is_none(self, monkeypatch):
        """Test an empty token counts as unset."""
        monkeypatch.setenv("SHELFSHARE_API_TOKEN", "")

        config = Config.from_env()

        assert config.api_token is None
        assert not config.has_api_token()


class TestConfigValidate:
    """Tests for Config.validate."""

    def test_valid_defaults(self):
        """Test defaults validate cleanly."""
        assert Config.from_env().validate() == []

    def test_bad_url(self, monkeypatch):
        """Test a URL without scheme is reported."""
        monkeypatch.setenv("SHELFSHARE_API_URL", "localhost:5000")

        errors = Config.from_env().validate()

        assert any("API URL" in e for e in errors)

    def test_bad_amounts(self, monkeypatch):
        """Test negative and non-numeric amounts are reported."""
        monkeypatch.setenv("SHELFSHARE_LATE_FEE_PER_DAY", "-1")
        monkeypatch.setenv("SHELFSHARE_MAX_FINE", "lots")

        errors = Config.from_env().validate()

        assert any("late fee per day" in e for e in errors)
        assert any("max fine" in e for e in errors)

    def test_negative_grace(self, monkeypatch):
        """Test a negative grace period is reported."""
        monkeypatch.setenv("SHELFSHARE_FINE_GRACE_DAYS", "-2")

        errors = Config.from_env().validate()

        assert any("grace" in e for e in errors)


class TestGlobalConfig:
    """Tests for the global config accessor."""

    def test_get_config_is_cached(self):
        """Test get_config returns the same instance."""
        assert get_config() is get_config()

    def test_reset_config(self, monkeypatch):
        """Test reset_config reloads from the environment."""
        first = get_config()
        monkeypatch.setenv("SHELFSHARE_API_URL", "https://other.example.com/api")
        reset_config()

        second = get_config()

        assert second is not first
        assert second.api_url == "https://other.example.com/api"
