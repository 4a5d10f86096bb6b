"""
Tests for analysis configuration loading.
"""

import tempfile
import pytest
from pathlib import Path

from analysis.config import (
    AnalysisConfig,
    ConfigError,
    CorrelationThresholds,
    DEFAULT_RISK_FREE_RATE,
    load_config
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer environment overrides out of config tests."""
    for var in ('RISK_FREE_RATE', 'MIN_HISTORY_MONTHS', 'FUND_ANALYTICS_CONFIG'):
        monkeypatch.delenv(var, raising=False)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_missing_file_gives_defaults(self):
        """No config file means built-in defaults."""
        with tempfile.TemporaryDirectory() as temp_dir:
            config = load_config(str(Path(temp_dir) / 'absent.yml'))

        assert config == AnalysisConfig()
        assert config.risk_free_rate == DEFAULT_RISK_FREE_RATE
        assert config.similarity.strategy == 30.0
        assert config.trending.decay_half_life_hours == 24.0

    def test_yaml_values(self):
        """Nested sections override individual fields."""
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / 'analysis.yml'
            path.write_text(
                "risk_free_rate: 0.05\n"
                "min_history_months: 24\n"
                "correlation:\n"
                "  high: 0.8\n"
                "trending:\n"
                "  max_funds_in_list: 10\n"
            )

            config = load_config(str(path))

        assert config.risk_free_rate == 0.05
        assert config.min_history_months == 24
        assert config.correlation.high == 0.8
        assert config.correlation.low == 0.3
        assert config.trending.max_funds_in_list == 10

    def test_env_overrides(self, monkeypatch):
        """Environment variables win over the file."""
        monkeypatch.setenv('RISK_FREE_RATE', '0.02')
        monkeypatch.setenv('MIN_HISTORY_MONTHS', '6')

        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / 'analysis.yml'
            path.write_text("risk_free_rate: 0.05\n")

            config = load_config(str(path))

        assert config.risk_free_rate == 0.02
        assert config.min_history_months == 6

    def test_path_from_env(self, monkeypatch):
        """FUND_ANALYTICS_CONFIG locates the file."""
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / 'custom.yml'
            path.write_text("risk_free_rate: 0.03\n")
            monkeypatch.setenv('FUND_ANALYTICS_CONFIG', str(path))

            config = load_config()

        assert config.risk_free_rate == 0.03

    def test_invalid_yaml(self):
        """Malformed YAML raises ConfigError."""
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / 'bad.yml'
            path.write_text("risk_free_rate: [0.05\n")

            with pytest.raises(ConfigError, match="Invalid YAML"):
                load_config(str(path))

    def test_unknown_key(self):
        """Unknown section keys are rejected."""
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / 'analysis.yml'
            path.write_text("similarity:\n  colour: 5\n")

            with pytest.raises(ConfigError, match="Invalid analysis config"):
                load_config(str(path))

    def test_invalid_env_override(self, monkeypatch):
        """Non-numeric overrides raise ConfigError."""
        monkeypatch.setenv('RISK_FREE_RATE', 'four percent')

        with tempfile.TemporaryDirectory() as temp_dir:
            with pytest.raises(ConfigError, match="Invalid environment override"):
                load_config(str(Path(temp_dir) / 'absent.yml'))


class TestThresholds:
    """Tests for CorrelationThresholds validation."""

    def test_low_above_high_rejected(self):
        """Bounds must be ordered."""
        with pytest.raises(ValueError, match="low correlation threshold"):
            CorrelationThresholds(high=0.2, low=0.5)
