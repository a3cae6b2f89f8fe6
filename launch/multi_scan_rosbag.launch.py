"""
Multi-scan registration rosbag launch file.

Replays a bag into the ring registration node with an explicit lidar model.
"""

from launch import LaunchDescription
from launch.actions import DeclareLaunchArgument, ExecuteProcess, TimerAction
from launch.substitutions import LaunchConfiguration
from launch_ros.actions import Node


def generate_launch_description():
    """Generate launch description for bag replay through ring registration."""

    bag_arg = DeclareLaunchArgument(
        "bag",
        description="Path to rosbag directory",
    )

    lidar_model_arg = DeclareLaunchArgument(
        "lidar_model",
        default_value="VLP-16",
        description="Lidar model preset (VLP-16, HDL-32, HDL-64E)",
    )

    points_topic_arg = DeclareLaunchArgument(
        "points_topic",
        default_value="/velodyne_points",
        description="PointCloud2 topic recorded in the bag",
    )

    registration = Node(
        package="ring_registration",
        executable="multi_scan_registration_node",
        name="multi_scan_registration",
        output="screen",
        parameters=[
            {
                "lidar_model": LaunchConfiguration("lidar_model"),
                "warmup_frames": 20,
                "queue_depth": 2,
            }
        ],
        remappings=[("/multi_scan_points", LaunchConfiguration("points_topic"))],
    )

    # Rosbag playback (short delay to let the node initialize)
    bag_play = TimerAction(
        period=3.0,
        actions=[
            ExecuteProcess(
                cmd=[
                    "ros2", "bag", "play",
                    LaunchConfiguration("bag"),
                    "--clock",
                    "--rate", "1.0",
                ],
                output="screen",
            ),
        ],
    )

    return LaunchDescription([
        bag_arg,
        lidar_model_arg,
        points_topic_arg,
        registration,
        bag_play,
    ])
