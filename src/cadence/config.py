"""Configuration management for Cadence."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .core.models import ScoringWeights, UserProfile

logger = logging.getLogger(__name__)

CADENCE_HOME = Path(os.environ.get("CADENCE_HOME", Path.home() / "cadence"))
CONFIG_FILE = CADENCE_HOME / "config" / "cadence.conf"
DATA_DIR = CADENCE_HOME / "data"
DEFAULT_DATA_FILE = DATA_DIR / "plan.json"


@dataclass
class Config:
    """Cadence configuration."""

    data_file: str = ""
    recent_session_days: int = 7
    default_max_slices: int | None = None
    baseline_daily_min: int = 0
    buffer_pct: float = 0.1
    weights: ScoringWeights = field(default_factory=ScoringWeights)

    @property
    def data_path(self) -> Path:
        if self.data_file:
            return Path(self.data_file).expanduser()
        return DEFAULT_DATA_FILE

    def default_profile(self) -> UserProfile:
        """Profile used when the plan store holds none."""
        return UserProfile(
            weights=self.weights,
            baseline_daily_min=self.baseline_daily_min,
            buffer_pct=self.buffer_pct,
        )


def _parse_number(key: str, value: str, kind: type):
    try:
        return kind(value)
    except ValueError:
        logger.warning(f"Ignoring {key.upper()}: not a valid number: {value!r}")
        return None


def load_config(config_file: Path | None = None) -> Config:
    """Load configuration from cadence.conf file."""
    config = Config()
    config_file = config_file or CONFIG_FILE

    if not config_file.exists():
        return config

    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = value.strip()

        # Handle quoted values with inline comments: "value" # comment
        if value[:1] in ('"', "'"):
            quote = value[0]
            end_quote = value.find(quote, 1)
            value = value[1:end_quote] if end_quote != -1 else value[1:]
        elif "#" in value:
            value = value.split("#")[0].strip()

        match key:
            case "data_file":
                config.data_file = value
            case "recent_session_days":
                days = _parse_number(key, value, int)
                if days is not None and days >= 1:
                    config.recent_session_days = days
            case "default_max_slices":
                slices = _parse_number(key, value, int)
                if slices is not None:
                    config.default_max_slices = slices if slices >= 1 else None
            case "baseline_daily_min":
                baseline = _parse_number(key, value, int)
                if baseline is not None:
                    config.baseline_daily_min = baseline
            case "buffer_pct":
                buffer = _parse_number(key, value, float)
                if buffer is not None:
                    config.buffer_pct = buffer
            case _ if key.startswith("weight_"):
                name = key.removeprefix("weight_")
                if not hasattr(config.weights, name):
                    logger.warning(f"Unknown scoring weight: {key.upper()}")
                    continue
                weight = _parse_number(key, value, float)
                if weight is not None:
                    setattr(config.weights, name, weight)

    return config
