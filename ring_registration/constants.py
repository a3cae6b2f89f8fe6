"""
Ring registration constants and sensor calibration tables.

All magic numbers are centralized here with clear documentation.
"""

# =============================================================================
# Vendor Sensor Geometries (vertical angles in degrees, ring 0 = lowest beam)
# =============================================================================

# Velodyne VLP-16 (Puck): 16 lasers, +/-15 deg, 2 deg spacing
VLP16_MODEL = "VLP-16"
VLP16_RING_COUNT = 16
VLP16_MIN_ANGLE_DEG = -15.0
VLP16_MAX_ANGLE_DEG = 15.0

# Velodyne HDL-32E: 32 lasers, -30.67 .. +10.67 deg, 1.33 deg spacing
HDL32_MODEL = "HDL-32"
HDL32_RING_COUNT = 32
HDL32_MIN_ANGLE_DEG = -30.67
HDL32_MAX_ANGLE_DEG = 10.67

# Velodyne HDL-64E: two blocks of 32 lasers with different spacing.
# Lower block 0.5 deg pitch, upper block ~1/3 deg pitch. Values are nominal
# beam centres of the evenly spaced block layout, not a per-unit calibration
# file; the datasheet -24.8 deg lower FOV edge is not a ring centre, so
# returns below -24.58 deg (half a lower pitch past ring 0) are out of FOV.
HDL64E_MODEL = "HDL-64E"
HDL64E_RING_COUNT = 64
HDL64E_LOWER_MIN_ANGLE_DEG = -24.33
HDL64E_LOWER_MAX_ANGLE_DEG = -8.83
HDL64E_UPPER_MIN_ANGLE_DEG = -8.33
HDL64E_UPPER_MAX_ANGLE_DEG = 2.0
HDL64E_BLOCK_RING_COUNT = 32

SUPPORTED_LIDAR_MODELS = (VLP16_MODEL, HDL32_MODEL, HDL64E_MODEL)

# =============================================================================
# Ingestion Defaults
# =============================================================================

# Frames discarded at startup while the driver output settles
WARMUP_FRAMES_DEFAULT = 20

# Bounded frame queue between transport and processing (drop-oldest)
FRAME_QUEUE_DEPTH_DEFAULT = 2
FRAME_QUEUE_DEPTH_MAX = 2

# Consumer wake-up period while idle (seconds)
DISPATCHER_POLL_PERIOD_SEC = 0.1

# =============================================================================
# ROS Interface Defaults
# =============================================================================

INPUT_TOPIC_DEFAULT = "/multi_scan_points"
OUTPUT_TOPIC_DEFAULT = "/laser_cloud_rings"
STATUS_TOPIC_DEFAULT = "/ring_registration/status"
STATUS_PUBLISH_PERIOD_SEC = 5.0

# PointCloud2 field name carrying the ring index on output clouds
RING_FIELD_NAME = "ring"
