"""
Filter configuration.

A configuration is a flat mapping of parameter names to scalars or short
lists, e.g. loaded from a YAML-style file such as::

    # localization.yaml
    num_particles: 100
    seed: 42
    delta_t: 0.1
    sensor_range: 50
    sigma_init: [0.3, 0.3, 0.01]
    sigma_pos: [0.3, 0.3, 0.01]
    sigma_landmark: [0.3, 0.3]
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import List, Optional


@dataclass
class FilterConfig:
    """
    Parameters of a localization run.

    Attributes
    ----------
    num_particles : int
        Size of the particle set.
    seed : int, optional
        Seed of the filter's random generator. None draws a
        non-deterministic seed.
    delta_t : float
        Time between two prediction steps (s).
    sensor_range : float
        Sensor range (m).
    sigma_init : list of float
        GPS-style uncertainty [x (m), y (m), theta (rad)] used at
        initialization.
    sigma_pos : list of float
        Process noise [x (m), y (m), theta (rad)].
    sigma_landmark : list of float
        Landmark measurement noise [x (m), y (m)].
    """

    num_particles: int = 100
    seed: Optional[int] = None
    delta_t: float = 0.1
    sensor_range: float = 50.0
    sigma_init: List[float] = field(default_factory=lambda: [0.3, 0.3, 0.01])
    sigma_pos: List[float] = field(default_factory=lambda: [0.3, 0.3, 0.01])
    sigma_landmark: List[float] = field(default_factory=lambda: [0.3, 0.3])

    def __post_init__(self) -> None:
        if len(self.sigma_init) != 3:
            raise ValueError(f"sigma_init needs 3 entries, got {self.sigma_init}")
        if len(self.sigma_pos) != 3:
            raise ValueError(f"sigma_pos needs 3 entries, got {self.sigma_pos}")
        if len(self.sigma_landmark) != 2:
            raise ValueError(
                f"sigma_landmark needs 2 entries, got {self.sigma_landmark}"
            )
        if self.delta_t <= 0:
            raise ValueError(f"delta_t must be positive, got {self.delta_t}")
        if self.sensor_range <= 0:
            raise ValueError(
                f"sensor_range must be positive, got {self.sensor_range}"
            )

    @staticmethod
    def from_config(cfg: dict) -> "FilterConfig":
        """
        Build a FilterConfig from a configuration dictionary.

        Missing keys keep their defaults; unknown keys are rejected.
        """
        known = {f.name for f in fields(FilterConfig)}
        unknown = set(cfg) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")

        kwargs = dict(cfg)
        if "num_particles" in kwargs:
            kwargs["num_particles"] = int(kwargs["num_particles"])
        if kwargs.get("seed") is not None:
            kwargs["seed"] = int(kwargs["seed"])
        for key in ("delta_t", "sensor_range"):
            if key in kwargs:
                kwargs[key] = float(kwargs[key])
        for key in ("sigma_init", "sigma_pos", "sigma_landmark"):
            if key in kwargs:
                kwargs[key] = [float(v) for v in kwargs[key]]
        return FilterConfig(**kwargs)


def _parse_value(value: str):
    if value.startswith('['):
        if not value.endswith(']'):
            raise ValueError(f"Unterminated list value: {value}")
        inner = value[1:-1].strip()
        return [float(x.strip()) for x in inner.split(',')] if inner else []
    if value.lower() in ("null", "none", "~", ""):
        return None
    try:
        return int(value)
    except ValueError:
        return float(value)


def parse_config(content: str) -> dict:
    """
    Parse flat ``key: value`` lines. Comments and blank lines are skipped,
    values are ints, floats, ``null`` or ``[a, b, c]`` lists of floats.
    """
    cfg = {}
    for lineno, raw in enumerate(content.split('\n'), start=1):
        line = raw.split('#', 1)[0].strip()
        if not line:
            continue
        if ':' not in line:
            raise ValueError(f"Line {lineno}: expected 'key: value', got {raw!r}")
        key, value = line.split(':', 1)
        cfg[key.strip()] = _parse_value(value.strip())
    return cfg


def load_config(config_path: str) -> FilterConfig:
    """Read a configuration file and build a FilterConfig from it."""
    with open(config_path, "r") as f:
        content = f.read()
    return FilterConfig.from_config(parse_config(content))
