"""ROS 2 node hosting one relay context (requires rclpy)."""
