"""
Multi-scan registration node.

Subscribes to raw PointCloud2 sweeps of a multi-beam lidar, assigns every
point to its scan ring and republishes ring-ordered clouds (x, y, z, ring)
for the downstream feature extraction / odometry stage.

Fail fast on configuration:
- Exactly one calibration form (lidar_model, or the explicit
  min_vertical_angle / max_vertical_angle / n_scan_rings triple).
- Any ConfigError is logged and raised before subscribing.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

import rclpy
from pydantic import ValidationError
from rcl_interfaces.msg import ParameterDescriptor
from rclpy.node import Node
from rclpy.qos import DurabilityPolicy, HistoryPolicy, QoSProfile, ReliabilityPolicy
from sensor_msgs.msg import PointCloud2, PointField
from std_msgs.msg import String

from ring_registration import constants
from ring_registration.config import (
    load_registration_config,
    validate_registration_params,
)
from ring_registration.errors import ConfigError
from ring_registration.frontend.scan.ingestion_controller import Dispatched, IngestionController
from ring_registration.frontend.scan.scan_mapper import ScanMapper
from ring_registration.frontend.sensors.frame_queue import FrameDispatcher, FrameQueue
from ring_registration.frontend.sensors.pointcloud_io import (
    RING_CLOUD_FIELDS,
    RING_CLOUD_POINT_STEP,
    ns_to_stamp,
    pack_ring_cloud,
    parse_pointcloud2,
)

MODULE_NAME = "MultiScanRegistration"


class MultiScanRegistrationNode(Node):
    """Ring assignment front end: /multi_scan_points -> /laser_cloud_rings."""

    def __init__(self, parameter_overrides: Optional[Dict[str, Any]] = None) -> None:
        overrides = None
        if parameter_overrides:
            from rclpy.parameter import Parameter
            overrides = [Parameter(k, value=v) for k, v in parameter_overrides.items()]
        super().__init__("multi_scan_registration", parameter_overrides=overrides)

        self._declare_parameters()
        self.params = self._load_params()

        try:
            self.mapper = ScanMapper.configure(self.params.to_profile(), logger=self.get_logger())
        except ConfigError as exc:
            self.get_logger().error(f"{MODULE_NAME}: {exc}")
            raise

        self.controller = IngestionController(
            self.mapper, warmup_frames=self.params.warmup_frames, logger=self.get_logger()
        )
        self.dispatcher = FrameDispatcher(
            self.controller,
            sink=self._publish_rings,
            queue=FrameQueue(depth=self.params.queue_depth),
            logger=self.get_logger(),
        )

        self._init_ros()
        self._log_startup_manifest()
        self.dispatcher.start()

    def _declare_parameters(self) -> None:
        optional = ParameterDescriptor(dynamic_typing=True)
        self.declare_parameter("config_path", "")
        self.declare_parameter("preset_path", "")
        self.declare_parameter("lidar_model", "")
        self.declare_parameter("min_vertical_angle", None, optional)
        self.declare_parameter("max_vertical_angle", None, optional)
        self.declare_parameter("n_scan_rings", None, optional)
        self.declare_parameter("warmup_frames", constants.WARMUP_FRAMES_DEFAULT)
        self.declare_parameter("queue_depth", constants.FRAME_QUEUE_DEPTH_DEFAULT)
        self.declare_parameter("input_topic", constants.INPUT_TOPIC_DEFAULT)
        self.declare_parameter("output_topic", constants.OUTPUT_TOPIC_DEFAULT)
        self.declare_parameter("status_topic", constants.STATUS_TOPIC_DEFAULT)
        self.declare_parameter("status_publish_period_sec", constants.STATUS_PUBLISH_PERIOD_SEC)

    def _load_params(self):
        config_path = str(self.get_parameter("config_path").value).strip()
        if not config_path:
            return validate_registration_params(self)

        # YAML file wins over node parameters; single source, no mixing.
        preset_path = str(self.get_parameter("preset_path").value).strip() or None
        self.get_logger().info(f"{MODULE_NAME}: loading parameters from {config_path}")
        try:
            return load_registration_config(config_path, preset_path)
        except (OSError, ValidationError) as exc:
            self.get_logger().error(f"{MODULE_NAME}: invalid config {config_path}: {exc}")
            raise

    def _init_ros(self) -> None:
        # KEEP_LAST with the queue depth: the transport also drops oldest.
        qos = QoSProfile(
            reliability=ReliabilityPolicy.BEST_EFFORT,
            durability=DurabilityPolicy.VOLATILE,
            history=HistoryPolicy.KEEP_LAST,
            depth=self.params.queue_depth,
        )
        self.pub_rings = self.create_publisher(PointCloud2, self.params.output_topic, qos)
        self.pub_status = self.create_publisher(String, self.params.status_topic, 10)
        self.sub_cloud = self.create_subscription(
            PointCloud2, self.params.input_topic, self._on_cloud, qos
        )
        self._status_timer = self.create_timer(
            self.params.status_publish_period_sec, self._publish_status
        )

    def _log_startup_manifest(self) -> None:
        self.get_logger().info("=" * 60)
        self.get_logger().info("MULTI-SCAN REGISTRATION MANIFEST")
        self.get_logger().info("=" * 60)
        self.get_logger().info(f"  mapper: {self.mapper.describe()}")
        self.get_logger().info(f"  warmup_frames: {self.params.warmup_frames}")
        self.get_logger().info(f"  queue_depth: {self.params.queue_depth} (drop oldest)")
        self.get_logger().info(f"  input: {self.params.input_topic}")
        self.get_logger().info(f"  output: {self.params.output_topic}")
        self.get_logger().info("=" * 60)

    def _on_cloud(self, msg: PointCloud2) -> None:
        if self.dispatcher.error is not None:
            raise RuntimeError(f"{MODULE_NAME}: dispatcher stopped") from self.dispatcher.error
        try:
            frame = parse_pointcloud2(msg)
        except ValueError as exc:
            self.get_logger().error(f"{MODULE_NAME}: cannot decode cloud: {exc}")
            raise
        self.dispatcher.submit(frame)

    def _publish_rings(self, dispatched: Dispatched) -> None:
        data, n_points = pack_ring_cloud(dispatched)

        out = PointCloud2()
        sec, nanosec = ns_to_stamp(dispatched.stamp_ns)
        out.header.stamp.sec = sec
        out.header.stamp.nanosec = nanosec
        out.header.frame_id = dispatched.frame_id
        out.height = 1
        out.width = n_points
        out.fields = [
            PointField(name=f.name, offset=f.offset, datatype=f.datatype, count=f.count)
            for f in RING_CLOUD_FIELDS
        ]
        out.is_bigendian = False
        out.point_step = RING_CLOUD_POINT_STEP
        out.row_step = RING_CLOUD_POINT_STEP * n_points
        out.data = data
        out.is_dense = True
        self.pub_rings.publish(out)

        n = self.controller.frames_dispatched
        if n <= 10 or n % 100 == 0:
            self.get_logger().info(
                f"Frame {n}: {n_points} pts in {self.mapper.ring_count} rings, "
                f"t={dispatched.stamp_sec:.3f}"
            )

    def _publish_status(self) -> None:
        status = self.controller.stats()
        status["frames_dropped"] = self.dispatcher.queue.dropped
        msg = String()
        msg.data = json.dumps(status)
        self.pub_status.publish(msg)

    def destroy_node(self) -> None:
        # stop() re-raises a worker failure; the node is released regardless.
        try:
            self.dispatcher.stop(timeout=1.0)
        finally:
            super().destroy_node()


def main() -> None:
    rclpy.init()
    try:
        node = MultiScanRegistrationNode()
        try:
            rclpy.spin(node)
        except KeyboardInterrupt:
            pass
        finally:
            node.destroy_node()
    finally:
        rclpy.shutdown()


if __name__ == "__main__":
    main()
