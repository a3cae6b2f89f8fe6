"""
Ingestion controller: warm-up gating and per-ring grouping of scan frames.

Lifecycle:
    WARMUP --(warmup_remaining reaches 0)--> ACTIVE (permanent)

While in WARMUP every frame is skipped. Once ACTIVE each frame is split into
ring_count ring groups, points kept in arrival (azimuthal scan) order so the
downstream registration stage can infer relative point timing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Union

import numpy as np

from ring_registration.frontend.scan.scan_mapper import NO_RING, ScanMapper


class ControllerState(str, Enum):
    WARMUP = "warmup"
    ACTIVE = "active"


NANOSEC_PER_SEC = 1_000_000_000


@dataclass(frozen=True)
class Frame:
    """
    One sensor sweep: (N, 3) xyz points in scan order.

    stamp_ns is the capture stamp as integer nanoseconds so the header stamp
    survives unchanged; stamp_sec is a float view for logging only.
    """
    stamp_ns: int
    points: np.ndarray
    frame_id: str = ""

    @classmethod
    def from_points(cls, stamp_sec: float, points, frame_id: str = "") -> "Frame":
        arr = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        return cls(stamp_ns=int(round(float(stamp_sec) * 1e9)), points=arr, frame_id=frame_id)

    @property
    def stamp_sec(self) -> float:
        return self.stamp_ns / NANOSEC_PER_SEC

    @property
    def n_points(self) -> int:
        return int(self.points.shape[0])


@dataclass(frozen=True)
class Skipped:
    """Frame absorbed by the warm-up window; nothing is produced."""
    warmup_remaining: int


@dataclass(frozen=True)
class Dispatched:
    """Ring-grouped frame handed to the registration stage."""
    stamp_ns: int
    ring_groups: List[np.ndarray]
    frame_id: str = ""

    @property
    def stamp_sec(self) -> float:
        return self.stamp_ns / NANOSEC_PER_SEC

    @property
    def n_points(self) -> int:
        return int(sum(g.shape[0] for g in self.ring_groups))


DispatchOutcome = Union[Skipped, Dispatched]


def vertical_angles_deg(points: np.ndarray) -> np.ndarray:
    """Elevation atan2(z, sqrt(x^2 + y^2)) of each point, in degrees."""
    xy = np.hypot(points[:, 0], points[:, 1])
    return np.degrees(np.arctan2(points[:, 2], xy))


class IngestionController:
    """
    Sequences frames into ring groups for one immutable ScanMapper.

    on_frame must not be called concurrently; FrameDispatcher provides the
    single-consumer path when frames arrive from another thread.
    """

    def __init__(self, mapper: ScanMapper, warmup_frames: int = 0, logger=None) -> None:
        if int(warmup_frames) < 0:
            raise ValueError(f"warmup_frames must be >= 0, got {warmup_frames}")
        self._mapper = mapper
        self._warmup_remaining = int(warmup_frames)
        self._logger = logger or logging.getLogger(__name__)

        self.frames_received = 0
        self.frames_skipped = 0
        self.frames_dispatched = 0
        self.points_in = 0
        self.points_non_finite = 0
        self.points_out_of_fov = 0

    @property
    def mapper(self) -> ScanMapper:
        return self._mapper

    @property
    def warmup_remaining(self) -> int:
        return self._warmup_remaining

    @property
    def state(self) -> ControllerState:
        if self._warmup_remaining > 0:
            return ControllerState.WARMUP
        return ControllerState.ACTIVE

    def on_frame(self, frame: Frame) -> DispatchOutcome:
        self.frames_received += 1

        if self._warmup_remaining > 0:
            self._warmup_remaining -= 1
            self.frames_skipped += 1
            if self._warmup_remaining == 0:
                self._logger.info(
                    f"Warm-up complete after {self.frames_skipped} frames; dispatching"
                )
            return Skipped(warmup_remaining=self._warmup_remaining)

        points = np.asarray(frame.points, dtype=np.float64).reshape(-1, 3)
        self.points_in += int(points.shape[0])

        finite = np.all(np.isfinite(points), axis=1)
        n_non_finite = int(points.shape[0] - np.count_nonzero(finite))
        if n_non_finite:
            points = points[finite]
            self.points_non_finite += n_non_finite

        rings = self._mapper.rings_for_angles(vertical_angles_deg(points))
        self.points_out_of_fov += int(np.count_nonzero(rings == NO_RING))

        # Boolean masks keep the original relative order inside each ring.
        ring_groups = [points[rings == ring] for ring in range(self._mapper.ring_count)]

        self.frames_dispatched += 1
        return Dispatched(
            stamp_ns=int(frame.stamp_ns), ring_groups=ring_groups, frame_id=frame.frame_id
        )

    def stats(self) -> Dict[str, Union[int, str]]:
        return {
            "state": self.state.value,
            "warmup_remaining": self._warmup_remaining,
            "frames_received": self.frames_received,
            "frames_skipped": self.frames_skipped,
            "frames_dispatched": self.frames_dispatched,
            "points_in": self.points_in,
            "points_non_finite": self.points_non_finite,
            "points_out_of_fov": self.points_out_of_fov,
        }
