from setuptools import find_packages, setup

package_name = "airsim_ros_relay"

setup(
    name=package_name,
    version="0.1.0",
    packages=find_packages(exclude=["test"]),
    data_files=[
        ("share/ament_index/resource_index/packages", ["resource/" + package_name]),
        ("share/" + package_name, ["package.xml"]),
        (
            "share/" + package_name + "/config",
            [
                "config/relay.yaml",
            ],
        ),
    ],
    install_requires=["setuptools", "numpy", "pyyaml", "pydantic>=2", "rerun-sdk"],
    extras_require={
        "test": ["pytest", "scipy"],
    },
    zip_safe=True,
    maintainer="Will Haber",
    maintainer_email="whab13@mit.edu",
    description="AirSim camera/LiDAR relay to ROS 2 topics and TF (ROS 2 Jazzy)",
    license="Apache-2.0",
    tests_require=["pytest", "scipy"],
    entry_points={
        "console_scripts": [
            # Single relay node; the host simulation feeds samples in-process
            "airsim_ros_relay = airsim_ros_relay.node.relay_node:main",
        ],
    },
)
