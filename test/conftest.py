import os
from types import SimpleNamespace
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np
import pytest

from ring_registration.frontend.scan.scan_mapper import (
    ExplicitRange,
    ScanMapper,
    VendorPreset,
)


# =============================================================================
# Geometry Helpers
# =============================================================================


def points_at_angles(
    angles_deg: Sequence[float],
    azimuths_deg: Optional[Sequence[float]] = None,
    ranges_m: Optional[Sequence[float]] = None,
) -> np.ndarray:
    """(N, 3) xyz points with the given vertical angles, azimuths and ranges."""
    elev = np.radians(np.asarray(angles_deg, dtype=np.float64))
    n = elev.shape[0]
    if azimuths_deg is None:
        azimuths_deg = np.linspace(0.0, 360.0, n, endpoint=False)
    if ranges_m is None:
        ranges_m = np.full(n, 10.0)
    az = np.radians(np.asarray(azimuths_deg, dtype=np.float64))
    r = np.asarray(ranges_m, dtype=np.float64)
    return np.stack(
        [
            r * np.cos(elev) * np.cos(az),
            r * np.cos(elev) * np.sin(az),
            r * np.sin(elev),
        ],
        axis=1,
    )


def make_cloud_msg(
    points: np.ndarray,
    stamp_sec: float = 0.0,
    height: int = 1,
    row_padding: int = 0,
    frame_id: str = "velodyne",
    stamp: Optional[Tuple[int, int]] = None,
) -> SimpleNamespace:
    """
    PointCloud2-shaped object with x, y, z, intensity float32 fields.

    Points are laid out row-major over `height` rows; each row is followed by
    `row_padding` unused bytes. `stamp` gives an exact (sec, nanosec) header
    stamp and takes precedence over `stamp_sec`.
    """
    points = np.asarray(points, dtype=np.float32).reshape(-1, 3)
    n = points.shape[0]
    assert n % height == 0
    width = n // height

    dtype = np.dtype(
        {
            "names": ["x", "y", "z", "intensity"],
            "formats": ["<f4", "<f4", "<f4", "<f4"],
            "offsets": [0, 4, 8, 12],
            "itemsize": 16,
        }
    )
    records = np.zeros(n, dtype=dtype)
    records["x"] = points[:, 0]
    records["y"] = points[:, 1]
    records["z"] = points[:, 2]
    records["intensity"] = 1.0

    row_bytes = width * 16
    data = b""
    for row in range(height):
        data += records[row * width:(row + 1) * width].tobytes() + b"\x00" * row_padding

    if stamp is not None:
        sec, nanosec = stamp
    else:
        sec = int(np.floor(stamp_sec))
        nanosec = int(round((stamp_sec - sec) * 1e9))
    fields = [
        SimpleNamespace(name=name, offset=offset, datatype=7, count=1)
        for name, offset in (("x", 0), ("y", 4), ("z", 8), ("intensity", 12))
    ]
    return SimpleNamespace(
        header=SimpleNamespace(stamp=SimpleNamespace(sec=sec, nanosec=nanosec), frame_id=frame_id),
        height=height,
        width=width,
        fields=fields,
        is_bigendian=False,
        point_step=16,
        row_step=row_bytes + row_padding,
        data=data,
        is_dense=True,
    )


class FakeNode:
    """Minimal stand-in for rclpy Node parameter access."""

    def __init__(self, params: Dict[str, Any]):
        self._params = dict(params)
        self.errors = []

    def has_parameter(self, name: str) -> bool:
        return name in self._params

    def get_parameter(self, name: str) -> SimpleNamespace:
        return SimpleNamespace(value=self._params[name])

    def get_logger(self) -> SimpleNamespace:
        return SimpleNamespace(error=self.errors.append)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def linear16_mapper() -> ScanMapper:
    """Explicit calibration: 16 rings over -15..15 deg (2 deg pitch)."""
    return ScanMapper.configure(ExplicitRange(min_angle=-15.0, max_angle=15.0, ring_count=16))


@pytest.fixture(params=["VLP-16", "HDL-32", "HDL-64E"])
def preset_mapper(request) -> ScanMapper:
    return ScanMapper.configure(VendorPreset(model=request.param))


@pytest.fixture
def package_config_dir() -> str:
    test_dir = os.path.dirname(__file__)
    return os.path.join(os.path.dirname(test_dir), "config")
