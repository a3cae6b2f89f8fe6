from setuptools import find_packages, setup

package_name = "ring_registration"

setup(
    name=package_name,
    version="0.1.0",
    packages=find_packages(exclude=["test"]),
    data_files=[
        ("share/ament_index/resource_index/packages", ["resource/" + package_name]),
        ("share/" + package_name, ["package.xml"]),
        (
            "share/" + package_name + "/launch",
            [
                "launch/multi_scan_registration.launch.py",
                "launch/multi_scan_rosbag.launch.py",
            ],
        ),
        (
            "share/" + package_name + "/config",
            [
                "config/ring_registration_base.yaml",
            ],
        ),
        (
            "share/" + package_name + "/config/presets",
            [
                "config/presets/vlp16.yaml",
                "config/presets/hdl32.yaml",
                "config/presets/hdl64e.yaml",
                "config/presets/linear_custom.yaml",
            ],
        ),
    ],
    install_requires=["setuptools", "numpy", "pyyaml", "pydantic>=2"],
    extras_require={"test": ["pytest"]},
    zip_safe=True,
    maintainer="you",
    maintainer_email="you@example.com",
    description="Multi-scan lidar ring registration front end (ROS 2 Jazzy)",
    license="Apache-2.0",
    tests_require=["pytest"],
    entry_points={
        "console_scripts": [
            "multi_scan_registration_node = ring_registration.frontend.registration_node:main",
        ],
    },
)
