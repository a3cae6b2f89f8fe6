"""
Ring registration configuration.

Provides utilities for loading and validating registration parameters from
YAML files and ROS 2 parameters, and for resolving them into a
CalibrationProfile.

This module bridges:
1. YAML configuration files (config/ring_registration_base.yaml, config/presets/*.yaml)
2. Pydantic validation model (RegistrationParams)
3. ROS 2 parameter system

Usage:
    from ring_registration.config import load_registration_config

    params = load_registration_config(base_path, preset_path)
    profile = params.to_profile()
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, TYPE_CHECKING

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ring_registration import constants
from ring_registration.errors import AmbiguousParametersError, MissingParametersError
from ring_registration.frontend.scan.scan_mapper import (
    CalibrationProfile,
    ExplicitRange,
    VendorPreset,
)

if TYPE_CHECKING:
    from rclpy.node import Node

NODE_SECTION = "multi_scan_registration"

_EXPLICIT_KEYS = ("min_vertical_angle", "max_vertical_angle", "n_scan_rings")


class RegistrationParams(BaseModel):
    """Validated parameters of the multi-scan registration node."""

    model_config = ConfigDict(extra="forbid")

    # Calibration: either lidar_model or all three explicit values.
    lidar_model: Optional[str] = None
    min_vertical_angle: Optional[float] = None
    max_vertical_angle: Optional[float] = None
    n_scan_rings: Optional[int] = None

    warmup_frames: int = Field(default=constants.WARMUP_FRAMES_DEFAULT, ge=0)
    queue_depth: int = Field(
        default=constants.FRAME_QUEUE_DEPTH_DEFAULT, ge=1, le=constants.FRAME_QUEUE_DEPTH_MAX
    )

    input_topic: str = constants.INPUT_TOPIC_DEFAULT
    output_topic: str = constants.OUTPUT_TOPIC_DEFAULT
    status_topic: str = constants.STATUS_TOPIC_DEFAULT
    status_publish_period_sec: float = Field(default=constants.STATUS_PUBLISH_PERIOD_SEC, gt=0.0)

    def to_profile(self) -> CalibrationProfile:
        """
        Resolve the calibration form.

        Raises:
            MissingParametersError: no model and an incomplete (or empty) explicit triple
            AmbiguousParametersError: model and explicit values both given
        """
        explicit = {k: getattr(self, k) for k in _EXPLICIT_KEYS}
        given = [k for k, v in explicit.items() if v is not None]
        model = (self.lidar_model or "").strip()

        if model:
            if given:
                raise AmbiguousParametersError(
                    f"Both lidar_model={model!r} and explicit parameters {given} are set; "
                    "specify exactly one calibration form"
                )
            return VendorPreset(model=model)

        if len(given) == len(_EXPLICIT_KEYS):
            return ExplicitRange(
                min_angle=float(self.min_vertical_angle),
                max_angle=float(self.max_vertical_angle),
                ring_count=int(self.n_scan_rings),
            )

        if given:
            missing = [k for k in _EXPLICIT_KEYS if k not in given]
            raise MissingParametersError(
                f"Incomplete explicit scan parameters: missing {missing} (given {given})"
            )
        raise MissingParametersError(
            "Invalid scan registration parameters: set lidar_model or "
            f"all of {list(_EXPLICIT_KEYS)}"
        )


def load_yaml_config(config_path: str | Path) -> Dict[str, Any]:
    """
    Load YAML configuration file.

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """Merge configuration dictionaries (later configs override earlier)."""
    result: Dict[str, Any] = {}
    for config in configs:
        if config:
            _deep_merge(result, config)
    return result


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Deep merge override dict into base dict (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def _node_parameters(data: Dict[str, Any]) -> Dict[str, Any]:
    # ROS 2 YAML wraps parameters in <node>:/ros__parameters: or /**:/ros__parameters:
    for key in (NODE_SECTION, "/**"):
        section = data.get(key)
        if isinstance(section, dict) and "ros__parameters" in section:
            return dict(section["ros__parameters"] or {})
    return data


def load_registration_config(
    base_path: Optional[str | Path] = None,
    preset_path: Optional[str | Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> RegistrationParams:
    """
    Load and validate registration parameters: base <- preset <- overrides.

    Raises:
        ValidationError: If parameter types or ranges are invalid
    """
    base_config = _node_parameters(load_yaml_config(base_path)) if base_path else {}
    preset_config = _node_parameters(load_yaml_config(preset_path)) if preset_path else {}

    merged = merge_configs(base_config, preset_config, overrides or {})
    return RegistrationParams(**merged)


def validate_registration_params(node: "Node") -> RegistrationParams:
    """
    Validate declared ROS 2 node parameters against RegistrationParams.

    Unset optional parameters (empty string / NOT_SET) are treated as absent.
    """
    values: Dict[str, Any] = {}
    for name in RegistrationParams.model_fields:
        if not node.has_parameter(name):
            continue
        value = node.get_parameter(name).value
        if value is None or value == "":
            continue
        values[name] = value

    try:
        return RegistrationParams(**values)
    except ValidationError as exc:
        node.get_logger().error(f"Invalid registration parameters: {exc}")
        raise
