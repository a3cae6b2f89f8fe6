"""
Frontend package for ring registration.

Subpackages:
- scan/: ring calibration (ScanMapper) and frame ingestion (IngestionController)
- sensors/: PointCloud2 codec and the bounded frame queue

The ROS node (registration_node) is the only module importing rclpy.
"""
