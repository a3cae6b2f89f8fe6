"""
PointCloud2 <-> Frame conversion.

Works on any object shaped like sensor_msgs/PointCloud2 (fields, point_step,
row_step, width, height, is_bigendian, data, header.stamp), so the codec is
usable without a ROS runtime. The node wraps pack_ring_cloud output into a
real PointCloud2 message.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Tuple

import numpy as np

from ring_registration import constants
from ring_registration.frontend.scan.ingestion_controller import NANOSEC_PER_SEC, Dispatched, Frame

# sensor_msgs/PointField datatype ids
POINTFIELD_INT8 = 1
POINTFIELD_UINT8 = 2
POINTFIELD_INT16 = 3
POINTFIELD_UINT16 = 4
POINTFIELD_INT32 = 5
POINTFIELD_UINT32 = 6
POINTFIELD_FLOAT32 = 7
POINTFIELD_FLOAT64 = 8

_POINTFIELD_DTYPES = {
    POINTFIELD_INT8: "i1",
    POINTFIELD_UINT8: "u1",
    POINTFIELD_INT16: "i2",
    POINTFIELD_UINT16: "u2",
    POINTFIELD_INT32: "i4",
    POINTFIELD_UINT32: "u4",
    POINTFIELD_FLOAT32: "f4",
    POINTFIELD_FLOAT64: "f8",
}


@dataclass(frozen=True)
class FieldSpec:
    name: str
    offset: int
    datatype: int
    count: int = 1


RING_CLOUD_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("x", 0, POINTFIELD_FLOAT32),
    FieldSpec("y", 4, POINTFIELD_FLOAT32),
    FieldSpec("z", 8, POINTFIELD_FLOAT32),
    FieldSpec(constants.RING_FIELD_NAME, 12, POINTFIELD_UINT16),
)
RING_CLOUD_POINT_STEP = 16

_RING_CLOUD_DTYPE = np.dtype(
    {
        "names": [f.name for f in RING_CLOUD_FIELDS],
        "formats": ["<f4", "<f4", "<f4", "<u2"],
        "offsets": [f.offset for f in RING_CLOUD_FIELDS],
        "itemsize": RING_CLOUD_POINT_STEP,
    }
)


def stamp_to_ns(stamp: Any) -> int:
    """builtin_interfaces/Time -> integer nanoseconds, no float rounding."""
    return int(stamp.sec) * NANOSEC_PER_SEC + int(stamp.nanosec)


def ns_to_stamp(stamp_ns: int) -> Tuple[int, int]:
    """(sec, nanosec) split of integer nanoseconds, nanosec in [0, 1e9)."""
    sec, nanosec = divmod(int(stamp_ns), NANOSEC_PER_SEC)
    return int(sec), int(nanosec)


def _xyz_dtype(msg: Any) -> np.dtype:
    field_map = {f.name: f for f in msg.fields}
    missing = [name for name in ("x", "y", "z") if name not in field_map]
    if missing:
        raise ValueError(f"PointCloud2 is missing required fields: {missing}")

    endian = ">" if bool(msg.is_bigendian) else "<"
    formats = []
    for name in ("x", "y", "z"):
        datatype = int(field_map[name].datatype)
        if datatype not in (POINTFIELD_FLOAT32, POINTFIELD_FLOAT64):
            raise ValueError(
                f"PointCloud2 field {name!r} must be FLOAT32 or FLOAT64, got datatype {datatype}"
            )
        formats.append(endian + _POINTFIELD_DTYPES[datatype])

    return np.dtype(
        {
            "names": ["x", "y", "z"],
            "formats": formats,
            "offsets": [int(field_map[name].offset) for name in ("x", "y", "z")],
            "itemsize": int(msg.point_step),
        }
    )


def parse_pointcloud2(msg: Any) -> Frame:
    """
    Decode a PointCloud2 into a Frame, keeping the original point order.

    Non-finite points are kept; the controller filters them.

    Raises:
        ValueError: x/y/z fields missing or not floating point
    """
    dtype = _xyz_dtype(msg)
    stamp_ns = stamp_to_ns(msg.header.stamp)
    frame_id = str(msg.header.frame_id)

    width = int(msg.width)
    height = int(msg.height)
    n_points = width * height
    if n_points == 0:
        return Frame(
            stamp_ns=stamp_ns, points=np.zeros((0, 3), dtype=np.float64), frame_id=frame_id
        )

    point_step = int(msg.point_step)
    row_step = int(msg.row_step) or width * point_step
    raw = np.frombuffer(bytes(msg.data), dtype=np.uint8)
    if raw.size < height * row_step:
        raise ValueError(
            f"PointCloud2 data too short: {raw.size} bytes for {height} rows of {row_step}"
        )
    # Strip per-row padding so the buffer is a dense array of point records.
    rows = raw[: height * row_step].reshape(height, row_step)[:, : width * point_step]
    records = np.ascontiguousarray(rows).view(dtype).reshape(-1)

    points = np.empty((n_points, 3), dtype=np.float64)
    points[:, 0] = records["x"]
    points[:, 1] = records["y"]
    points[:, 2] = records["z"]
    return Frame(stamp_ns=stamp_ns, points=points, frame_id=frame_id)


def pack_ring_cloud(dispatched: Dispatched) -> Tuple[bytes, int]:
    """
    Flatten ring groups into PointCloud2 record bytes (ring-major, arrival order
    within each ring) using RING_CLOUD_FIELDS.

    Returns:
        (data, n_points)
    """
    n_points = dispatched.n_points
    records = np.zeros(n_points, dtype=_RING_CLOUD_DTYPE)
    start = 0
    for ring, group in enumerate(dispatched.ring_groups):
        end = start + int(group.shape[0])
        if end > start:
            records["x"][start:end] = group[:, 0]
            records["y"][start:end] = group[:, 1]
            records["z"][start:end] = group[:, 2]
            records[constants.RING_FIELD_NAME][start:end] = ring
        start = end
    return records.tobytes(), n_points


def unpack_ring_cloud(data: bytes, ring_count: int) -> List[np.ndarray]:
    """Inverse of pack_ring_cloud: ring groups as (M, 3) float64 arrays."""
    records = np.frombuffer(data, dtype=_RING_CLOUD_DTYPE)
    xyz = np.stack([records["x"], records["y"], records["z"]], axis=1).astype(np.float64)
    rings = records[constants.RING_FIELD_NAME].astype(np.int64)
    return [xyz[rings == ring] for ring in range(int(ring_count))]
