"""
Multi-scan ring registration front end.

Resolves each lidar point to the scan ring that produced it and hands
ring-grouped, scan-ordered clouds to the registration stage.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "ScanMapper",
    "VendorPreset",
    "ExplicitRange",
    "IngestionController",
    "Frame",
    "Skipped",
    "Dispatched",
    "FrameQueue",
    "FrameDispatcher",
    "ConfigError",
]

_LAZY_ATTRS: dict[str, tuple[str, str]] = {
    "ScanMapper": ("ring_registration.frontend.scan.scan_mapper", "ScanMapper"),
    "VendorPreset": ("ring_registration.frontend.scan.scan_mapper", "VendorPreset"),
    "ExplicitRange": ("ring_registration.frontend.scan.scan_mapper", "ExplicitRange"),
    "IngestionController": ("ring_registration.frontend.scan.ingestion_controller", "IngestionController"),
    "Frame": ("ring_registration.frontend.scan.ingestion_controller", "Frame"),
    "Skipped": ("ring_registration.frontend.scan.ingestion_controller", "Skipped"),
    "Dispatched": ("ring_registration.frontend.scan.ingestion_controller", "Dispatched"),
    "FrameQueue": ("ring_registration.frontend.sensors.frame_queue", "FrameQueue"),
    "FrameDispatcher": ("ring_registration.frontend.sensors.frame_queue", "FrameDispatcher"),
    "ConfigError": ("ring_registration.errors", "ConfigError"),
}


def __getattr__(name: str) -> Any:
    target = _LAZY_ATTRS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = target
    module = import_module(module_name)
    return getattr(module, attr_name)


def __dir__() -> list[str]:
    return sorted(set(globals().keys()) | set(_LAZY_ATTRS.keys()))
