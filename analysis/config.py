"""
Analysis configuration.
Explicit config objects passed into engine functions; loaded from YAML with env overrides.
"""

import os
import logging
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


# Default risk-free rate (4% annual, typical Treasury rate)
DEFAULT_RISK_FREE_RATE = 0.04


class ConfigError(Exception):
    """Raised when configuration cannot be loaded."""
    pass


@dataclass(frozen=True)
class SimilarityWeights:
    """Points awarded per similarity signal (total 100)."""
    strategy: float = 30.0
    sub_strategy: float = 20.0
    fund_type: float = 20.0
    aum: float = 15.0
    correlation: float = 35.0
    min_aum_ratio: float = 0.5
    high_correlation: float = 0.7
    moderate_correlation: float = 0.4


@dataclass(frozen=True)
class CorrelationThresholds:
    """Bounds used to flag fund pairs in report insights."""
    high: float = 0.7
    low: float = 0.3

    def __post_init__(self):
        if self.low > self.high:
            raise ValueError("low correlation threshold must be <= high threshold")


@dataclass(frozen=True)
class TrendingConfig:
    """Weights and windows for trending fund scoring."""
    decay_half_life_hours: float = 24.0
    weight_views: float = 0.4
    weight_velocity: float = 0.35
    weight_recency: float = 0.25
    recent_window_hours: float = 168.0
    velocity_window_hours: float = 24.0
    min_views_for_trending: int = 5
    max_funds_in_list: int = 100

    def __post_init__(self):
        if self.decay_half_life_hours <= 0:
            raise ValueError("decay_half_life_hours must be positive")
        if self.velocity_window_hours <= 0 or self.recent_window_hours <= 0:
            raise ValueError("trending windows must be positive")


@dataclass(frozen=True)
class AnalysisConfig:
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE
    min_history_months: int = 12
    similarity: SimilarityWeights = field(default_factory=SimilarityWeights)
    correlation: CorrelationThresholds = field(default_factory=CorrelationThresholds)
    trending: TrendingConfig = field(default_factory=TrendingConfig)


def load_config(config_path: Optional[str] = None) -> AnalysisConfig:
    """
    Load analysis configuration.

    Resolution order: defaults, then the YAML file, then environment
    overrides (RISK_FREE_RATE, MIN_HISTORY_MONTHS).

    Args:
        config_path: Path to YAML config (default: $FUND_ANALYTICS_CONFIG
            or ./config/analysis.yml). A missing file means defaults.

    Returns:
        AnalysisConfig instance

    Raises:
        ConfigError: If the file is not valid YAML or has unknown keys
    """
    if config_path is None:
        config_path = os.getenv('FUND_ANALYTICS_CONFIG', './config/analysis.yml')

    raw: Dict[str, Any] = {}
    path = Path(config_path)

    if path.exists():
        try:
            with open(path, 'r') as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}")

        if not isinstance(raw, dict):
            raise ConfigError(f"Config root must be a mapping: {config_path}")

        logger.info(f"Loaded analysis config from {config_path}")
    else:
        logger.debug(f"No config file at {config_path}, using defaults")

    try:
        config = AnalysisConfig(
            risk_free_rate=float(raw.get('risk_free_rate', DEFAULT_RISK_FREE_RATE)),
            min_history_months=int(raw.get('min_history_months', 12)),
            similarity=SimilarityWeights(**raw.get('similarity', {})),
            correlation=CorrelationThresholds(**raw.get('correlation', {})),
            trending=TrendingConfig(**raw.get('trending', {}))
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid analysis config: {e}")

    return _apply_env_overrides(config)


def _apply_env_overrides(config: AnalysisConfig) -> AnalysisConfig:
    """Apply environment variable overrides on top of file config."""
    risk_free_rate = os.getenv('RISK_FREE_RATE')
    min_history = os.getenv('MIN_HISTORY_MONTHS')

    if risk_free_rate is None and min_history is None:
        return config

    try:
        return AnalysisConfig(
            risk_free_rate=float(risk_free_rate) if risk_free_rate is not None else config.risk_free_rate,
            min_history_months=int(min_history) if min_history is not None else config.min_history_months,
            similarity=config.similarity,
            correlation=config.correlation,
            trending=config.trending
        )
    except ValueError as e:
        raise ConfigError(f"Invalid environment override: {e}")
