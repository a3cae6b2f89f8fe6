"""
Multi-scan registration launch file.

Starts the ring registration node with the base config and a sensor preset.
"""

from launch import LaunchDescription
from launch.actions import DeclareLaunchArgument
from launch.substitutions import LaunchConfiguration, PathJoinSubstitution
from launch_ros.actions import Node
from launch_ros.substitutions import FindPackageShare


def generate_launch_description():
    share = FindPackageShare("ring_registration")

    preset_arg = DeclareLaunchArgument(
        "preset",
        default_value="vlp16",
        description="Sensor preset under config/presets (vlp16, hdl32, hdl64e, linear_custom)",
    )

    registration = Node(
        package="ring_registration",
        executable="multi_scan_registration_node",
        name="multi_scan_registration",
        output="screen",
        parameters=[
            {
                "config_path": PathJoinSubstitution(
                    [share, "config", "ring_registration_base.yaml"]
                ),
                "preset_path": PathJoinSubstitution(
                    [share, "config", "presets", [LaunchConfiguration("preset"), ".yaml"]]
                ),
            }
        ],
    )

    return LaunchDescription([preset_arg, registration])
