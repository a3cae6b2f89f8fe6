"""
Scan ring mapper.

Resolves a calibration profile once at startup into a closed-form mapping
from vertical beam angle (degrees) to scan ring index.

Two modes:
- linear: explicit (min_angle, max_angle, ring_count), rings evenly spaced.
- vendor preset: fixed per-ring angle table of a supported Velodyne model,
  nearest ring by angular distance.

Angles outside the calibrated field of view map to no ring. Nothing is
clamped to an edge ring.

The mapper is immutable after construction and safe to share between
threads without locking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from ring_registration import constants
from ring_registration.errors import (
    InvalidRangeError,
    InvalidRingCountError,
    UnknownModelError,
)

NO_RING = -1


@dataclass(frozen=True)
class VendorPreset:
    """One of the built-in sensor geometries, by model name."""
    model: str


@dataclass(frozen=True)
class ExplicitRange:
    """Linear calibration: ring_count rings evenly spaced over [min_angle, max_angle]."""
    min_angle: float
    max_angle: float
    ring_count: int


CalibrationProfile = Union[VendorPreset, ExplicitRange]


def _vlp16_table() -> np.ndarray:
    return np.linspace(
        constants.VLP16_MIN_ANGLE_DEG,
        constants.VLP16_MAX_ANGLE_DEG,
        constants.VLP16_RING_COUNT,
    )


def _hdl32_table() -> np.ndarray:
    return np.linspace(
        constants.HDL32_MIN_ANGLE_DEG,
        constants.HDL32_MAX_ANGLE_DEG,
        constants.HDL32_RING_COUNT,
    )


def _hdl64e_table() -> np.ndarray:
    lower = np.linspace(
        constants.HDL64E_LOWER_MIN_ANGLE_DEG,
        constants.HDL64E_LOWER_MAX_ANGLE_DEG,
        constants.HDL64E_BLOCK_RING_COUNT,
    )
    upper = np.linspace(
        constants.HDL64E_UPPER_MIN_ANGLE_DEG,
        constants.HDL64E_UPPER_MAX_ANGLE_DEG,
        constants.HDL64E_BLOCK_RING_COUNT,
    )
    return np.concatenate([lower, upper])


_PRESET_TABLES = {
    constants.VLP16_MODEL: _vlp16_table,
    constants.HDL32_MODEL: _hdl32_table,
    constants.HDL64E_MODEL: _hdl64e_table,
}


def preset_ring_angles(model: str) -> np.ndarray:
    """Per-ring vertical angles (deg, ascending) of a supported lidar model."""
    factory = _PRESET_TABLES.get(model)
    if factory is None:
        raise UnknownModelError(model, constants.SUPPORTED_LIDAR_MODELS)
    return factory()


class ScanMapper:
    """
    Maps vertical angles to ring indices for one resolved calibration.

    Use ScanMapper.configure(profile) to build one; the constructor takes an
    already validated table.
    """

    def __init__(
        self,
        profile: CalibrationProfile,
        ring_angles: np.ndarray,
        linear_span: Optional[tuple[float, float]] = None,
    ) -> None:
        table = np.asarray(ring_angles, dtype=np.float64).copy()
        table.setflags(write=False)
        self._profile = profile
        self._ring_angles = table
        self._linear_span = linear_span

        # Table mode: nearest ring via midpoints between neighbouring rings.
        self._boundaries = 0.5 * (table[:-1] + table[1:])
        self._boundaries.setflags(write=False)
        self._lower_limit = float(table[0] - 0.5 * (table[1] - table[0]))
        self._upper_limit = float(table[-1] + 0.5 * (table[-1] - table[-2]))

    @classmethod
    def configure(
        cls,
        profile: CalibrationProfile,
        logger=None,
    ) -> "ScanMapper":
        """
        Validate a calibration profile and build the mapper.

        Raises:
            UnknownModelError: preset name is not a supported model
            InvalidRangeError: explicit min_angle >= max_angle
            InvalidRingCountError: explicit ring_count < 2
        """
        log = logger or logging.getLogger(__name__)

        if isinstance(profile, VendorPreset):
            mapper = cls(profile, preset_ring_angles(profile.model))
        elif isinstance(profile, ExplicitRange):
            min_angle = float(profile.min_angle)
            max_angle = float(profile.max_angle)
            if not min_angle < max_angle:
                raise InvalidRangeError(min_angle, max_angle)
            if int(profile.ring_count) < 2:
                raise InvalidRingCountError(int(profile.ring_count))
            table = np.linspace(min_angle, max_angle, int(profile.ring_count))
            mapper = cls(profile, table, linear_span=(min_angle, max_angle))
        else:
            raise TypeError(f"Unsupported calibration profile: {type(profile).__name__}")

        log.info(f"Set {mapper.describe()}.")
        return mapper

    @property
    def profile(self) -> CalibrationProfile:
        return self._profile

    @property
    def ring_count(self) -> int:
        return int(self._ring_angles.shape[0])

    @property
    def ring_angles(self) -> np.ndarray:
        """Read-only per-ring vertical angles (deg), ring 0 first."""
        return self._ring_angles

    @property
    def is_linear(self) -> bool:
        return self._linear_span is not None

    def describe(self) -> str:
        if self._linear_span is not None:
            lo, hi = self._linear_span
            return (
                f"linear scan mapper from {lo:g} to {hi:g} degrees "
                f"with {self.ring_count} scan rings"
            )
        return (
            f"{self._profile.model} scan mapper ({self.ring_count} rings, "
            f"{self._ring_angles[0]:.2f} .. {self._ring_angles[-1]:.2f} deg)"
        )

    def rings_for_angles(self, angles_deg: np.ndarray) -> np.ndarray:
        """
        Vectorised ring lookup.

        Args:
            angles_deg: (N,) vertical angles in degrees

        Returns:
            (N,) int64 ring indices, NO_RING (-1) where the angle is outside
            the calibrated field of view or not finite.
        """
        angles = np.asarray(angles_deg, dtype=np.float64).reshape(-1)
        finite = np.isfinite(angles)
        safe = np.where(finite, angles, 0.0)

        if self._linear_span is not None:
            lo, hi = self._linear_span
            scaled = (safe - lo) / (hi - lo) * (self.ring_count - 1)
            rings = np.floor(scaled + 0.5)
            valid = finite & (rings >= 0) & (rings <= self.ring_count - 1)
            rings = np.where(valid, rings, NO_RING)
        else:
            rings = np.searchsorted(self._boundaries, safe, side="right")
            valid = finite & (safe >= self._lower_limit) & (safe <= self._upper_limit)
            rings = np.where(valid, rings, NO_RING)

        return rings.astype(np.int64)

    def ring_for_angle(self, angle_deg: float) -> Optional[int]:
        """Ring index for one vertical angle (deg), or None outside the field of view."""
        ring = int(self.rings_for_angles(np.array([angle_deg], dtype=np.float64))[0])
        if ring == NO_RING:
            return None
        return ring
