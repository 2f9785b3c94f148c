"""Tests for AMMConfig."""

import pytest

from cpamm.config import DEFAULT_CONFIG, AMMConfig


class TestAMMConfigDefaults:
    """Default fee schedule and limits."""

    def test_defaults(self):
        assert DEFAULT_CONFIG.fee_numerator == 997
        assert DEFAULT_CONFIG.fee_denominator == 1000
        assert DEFAULT_CONFIG.minimum_liquidity == 1000
        assert DEFAULT_CONFIG.price_oracle_enabled is True
        assert DEFAULT_CONFIG.default_deadline_seconds == 1200

    def test_fee_bps(self):
        """0.3% fee is 30 basis points."""
        assert DEFAULT_CONFIG.fee_bps == 30
        assert AMMConfig(fee_numerator=9975, fee_denominator=10000).fee_bps == 25

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_CONFIG.fee_numerator = 990  # type: ignore[misc]


class TestAMMConfigValidation:
    """Invalid configurations are rejected at construction."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"fee_denominator": 0},
            {"fee_numerator": 0},
            {"fee_numerator": 1001},
            {"minimum_liquidity": -1},
            {"default_deadline_seconds": -5},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            AMMConfig(**kwargs)

    def test_zero_fee_allowed(self):
        """fee_numerator == fee_denominator means no fee."""
        assert AMMConfig(fee_numerator=1000).fee_bps == 0


class TestAMMConfigFromEnv:
    """Loading from CPAMM_* environment variables."""

    def test_no_env_gives_defaults(self, monkeypatch):
        for name in (
            "CPAMM_FEE_NUMERATOR",
            "CPAMM_FEE_DENOMINATOR",
            "CPAMM_MINIMUM_LIQUIDITY",
            "CPAMM_PRICE_ORACLE",
            "CPAMM_DEADLINE_SECONDS",
        ):
            monkeypatch.delenv(name, raising=False)
        assert AMMConfig.from_env() == DEFAULT_CONFIG

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("CPAMM_FEE_NUMERATOR", "995")
        monkeypatch.setenv("CPAMM_MINIMUM_LIQUIDITY", "0")
        monkeypatch.setenv("CPAMM_PRICE_ORACLE", "false")
        monkeypatch.setenv("CPAMM_DEADLINE_SECONDS", "60")

        config = AMMConfig.from_env()

        assert config.fee_numerator == 995
        assert config.fee_bps == 50
        assert config.minimum_liquidity == 0
        assert config.price_oracle_enabled is False
        assert config.default_deadline_seconds == 60

    @pytest.mark.parametrize("value", ["true", "1", "YES"])
    def test_oracle_truthy_values(self, monkeypatch, value):
        monkeypatch.setenv("CPAMM_PRICE_ORACLE", value)
        assert AMMConfig.from_env().price_oracle_enabled is True

    def test_invalid_env_value_raises(self, monkeypatch):
        monkeypatch.setenv("CPAMM_FEE_NUMERATOR", "2000")
        with pytest.raises(ValueError):
            AMMConfig.from_env()
