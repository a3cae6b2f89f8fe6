"""
Configuration errors raised while resolving a scan calibration.

All of them are fatal at startup: the node refuses to subscribe to any
input when one is raised.
"""

from __future__ import annotations


class ConfigError(ValueError):
    """Base class for calibration/parameter resolution failures."""


class UnknownModelError(ConfigError):
    def __init__(self, model: str, supported: tuple[str, ...]) -> None:
        self.model = model
        self.supported = supported
        super().__init__(
            f"Invalid lidar model {model!r} (only {', '.join(repr(m) for m in supported)} are supported)"
        )


class InvalidRangeError(ConfigError):
    def __init__(self, min_angle: float, max_angle: float) -> None:
        self.min_angle = min_angle
        self.max_angle = max_angle
        super().__init__(
            f"Invalid vertical range (min >= max): min={min_angle:g}, max={max_angle:g}"
        )


class InvalidRingCountError(ConfigError):
    def __init__(self, ring_count: int) -> None:
        self.ring_count = ring_count
        super().__init__(f"Invalid number of scan rings (n < 2): n={ring_count}")


class MissingParametersError(ConfigError):
    """Neither a lidar model nor a complete explicit triple was given."""


class AmbiguousParametersError(ConfigError):
    """Both a lidar model and explicit angles were given."""
