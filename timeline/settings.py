"""
Simulation settings and the TOML loader.
"""

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import config
from timeline.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DistributionBounds:
    """Bounds a (mean, std) pair is drawn from. Upper bounds are exclusive."""
    min_mean: int
    max_mean: int
    min_std: int
    max_std: int

    @classmethod
    def regular(cls) -> "DistributionBounds":
        return cls(
            min_mean=config.REGULAR_MIN_MEAN,
            max_mean=config.REGULAR_MAX_MEAN,
            min_std=config.REGULAR_MIN_STD,
            max_std=config.REGULAR_MAX_STD,
        )

    @classmethod
    def disrupted(cls) -> "DistributionBounds":
        return cls(
            min_mean=config.DISRUPTED_MIN_MEAN,
            max_mean=config.DISRUPTED_MAX_MEAN,
            min_std=config.DISRUPTED_MIN_STD,
            max_std=config.DISRUPTED_MAX_STD,
        )


@dataclass(frozen=True)
class SimulationConfig:
    """Everything a single timeline run needs. Immutable for the run."""
    nodes: int = config.NODES
    queries: int = config.QUERIES
    metrics: int = config.METRICS
    hours: int = config.HOURS
    disruptions: int = config.DISRUPTIONS
    threads: int = config.THREADS
    bulk_size: int = config.BULK_SIZE
    buffer_capacity: int = config.BUFFER_CAPACITY
    seed: Optional[int] = config.RANDOM_SEED
    regular: DistributionBounds = field(default_factory=DistributionBounds.regular)
    disrupted: DistributionBounds = field(default_factory=DistributionBounds.disrupted)
    sink_url: str = config.SINK_URL
    index: str = config.INDEX_NAME
    mapping: Optional[str] = None

    @property
    def tuple_count(self) -> int:
        """Number of (node, query, metric) tuples."""
        return self.nodes * self.queries * self.metrics

    @property
    def record_count(self) -> int:
        """Number of records a full run emits."""
        return self.hours * self.tuple_count


_COUNT_KEYS = ("nodes", "queries", "metrics", "hours", "threads")
_TOP_LEVEL_KEYS = set(_COUNT_KEYS) | {"disruptions", "seed"}
_BOUND_KEYS = ("min_mean", "max_mean", "min_std", "max_std")
_ES_KEYS = {"url", "index", "bulk_size", "mapping"}
_TABLES = {"regular_distribution", "disrupted_distribution", "es"}


def load_config(path: str = config.CONFIG_PATH) -> SimulationConfig:
    """Load a SimulationConfig from a TOML file.

    A missing or unparsable file falls back to the defaults with a warning.
    A file that parses but has the wrong shape raises ConfigError.

    Args:
        path: Path to the TOML file

    Returns:
        SimulationConfig
    """
    config_path = Path(path)
    if not config_path.exists():
        logger.warning("Could not find config file %s, using defaults", path)
        return SimulationConfig()

    try:
        with open(config_path, "rb") as f:
            raw = tomllib.load(f)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        logger.warning("Could not parse config file %s (%s), using defaults", path, e)
        return SimulationConfig()
    except OSError as e:
        logger.warning("Could not read config file %s (%s), using defaults", path, e)
        return SimulationConfig()

    return parse_config(raw)


def parse_config(raw: Dict[str, Any]) -> SimulationConfig:
    """Build a SimulationConfig from an already-parsed TOML document.

    Args:
        raw: Parsed TOML document

    Returns:
        SimulationConfig
    """
    unknown = set(raw) - _TOP_LEVEL_KEYS - _TABLES
    if unknown:
        raise ConfigError(f"Unknown config keys: {sorted(unknown)}")

    defaults = SimulationConfig()
    values: Dict[str, Any] = {}

    for key in _COUNT_KEYS:
        if key in raw:
            values[key] = _positive_int(raw[key], key)

    if "disruptions" in raw:
        disruptions = _int(raw["disruptions"], "disruptions")
        if disruptions < 0:
            raise ConfigError("disruptions must not be negative")
        values["disruptions"] = disruptions

    if "seed" in raw:
        values["seed"] = _int(raw["seed"], "seed")

    values["regular"] = _parse_bounds(
        raw.get("regular_distribution"), defaults.regular, "regular_distribution"
    )
    values["disrupted"] = _parse_bounds(
        raw.get("disrupted_distribution"), defaults.disrupted, "disrupted_distribution"
    )

    es = _table(raw.get("es", {}), "es")
    unknown = set(es) - _ES_KEYS
    if unknown:
        raise ConfigError(f"Unknown keys in [es]: {sorted(unknown)}")
    if "bulk_size" in es:
        values["bulk_size"] = _positive_int(es["bulk_size"], "es.bulk_size")
    for key, attr in (("url", "sink_url"), ("index", "index"), ("mapping", "mapping")):
        if key in es:
            if not isinstance(es[key], str):
                raise ConfigError(f"es.{key} must be a string")
            values[attr] = es[key]

    return SimulationConfig(**values)


def _parse_bounds(raw: Any, default: DistributionBounds, name: str) -> DistributionBounds:
    if raw is None:
        return default

    table = _table(raw, name)
    unknown = set(table) - set(_BOUND_KEYS)
    if unknown:
        raise ConfigError(f"Unknown keys in [{name}]: {sorted(unknown)}")

    values = {
        key: _int(table[key], f"{name}.{key}") if key in table else getattr(default, key)
        for key in _BOUND_KEYS
    }
    bounds = DistributionBounds(**values)

    if bounds.min_mean >= bounds.max_mean:
        raise ConfigError(f"{name}: min_mean must be below max_mean")
    if bounds.min_std >= bounds.max_std:
        raise ConfigError(f"{name}: min_std must be below max_std")
    if bounds.min_std < 0:
        raise ConfigError(f"{name}: min_std must not be negative")
    return bounds


def _table(value: Any, name: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ConfigError(f"[{name}] must be a table")
    return value


def _int(value: Any, name: str) -> int:
    # bool is an int subclass, TOML true/false is never a count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    return value


def _positive_int(value: Any, name: str) -> int:
    value = _int(value, name)
    if value <= 0:
        raise ConfigError(f"{name} must be positive")
    return value
