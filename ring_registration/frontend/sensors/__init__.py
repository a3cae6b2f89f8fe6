"""
Sensor I/O subpackage.

Handles:
- PointCloud2 decoding into frames and ring cloud packing
- Bounded drop-oldest hand-off from transport to processing
"""

from __future__ import annotations

from ring_registration.frontend.sensors.frame_queue import FrameDispatcher, FrameQueue
from ring_registration.frontend.sensors.pointcloud_io import (
    RING_CLOUD_FIELDS,
    pack_ring_cloud,
    parse_pointcloud2,
    unpack_ring_cloud,
)

__all__ = [
    "FrameDispatcher",
    "FrameQueue",
    "RING_CLOUD_FIELDS",
    "pack_ring_cloud",
    "parse_pointcloud2",
    "unpack_ring_cloud",
]
