"""
Scan processing subpackage.

Handles:
- Vertical angle -> ring index calibration (scan_mapper)
- Warm-up gating and per-ring grouping of frames (ingestion_controller)

Usage:
    from ring_registration.frontend.scan import (
        ScanMapper,
        IngestionController,
    )
"""

from __future__ import annotations

from ring_registration.frontend.scan.scan_mapper import (
    NO_RING,
    CalibrationProfile,
    ExplicitRange,
    ScanMapper,
    VendorPreset,
    preset_ring_angles,
)
from ring_registration.frontend.scan.ingestion_controller import (
    ControllerState,
    Dispatched,
    DispatchOutcome,
    Frame,
    IngestionController,
    Skipped,
    vertical_angles_deg,
)

__all__ = [
    "NO_RING",
    "CalibrationProfile",
    "ExplicitRange",
    "ScanMapper",
    "VendorPreset",
    "preset_ring_angles",
    "ControllerState",
    "Dispatched",
    "DispatchOutcome",
    "Frame",
    "IngestionController",
    "Skipped",
    "vertical_angles_deg",
]
