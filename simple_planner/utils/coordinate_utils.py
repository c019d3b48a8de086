import math
from typing import Tuple
from dataclasses import dataclass


@dataclass
class Pose2D:
    """Planar pose in a world frame."""
    x: float
    y: float
    yaw: float = 0.0

    def __post_init__(self):
        self.yaw = normalize_angle(self.yaw)

    @classmethod
    def from_quaternion(cls, x: float, y: float,
                        orientation: Tuple[float, float, float, float]) -> 'Pose2D':
        """Build from a position and an (x, y, z, w) orientation quaternion."""
        return cls(x, y, yaw_from_quaternion(*orientation))

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass
class GoalRequest:
    """Operator goal with the frame it is expressed in."""
    pose: Pose2D
    frame_id: str = "map"


def yaw_from_quaternion(x: float, y: float, z: float, w: float) -> float:
    """Heading angle (rotation about z) of a unit quaternion."""
    siny_cosp = 2.0 * (w * z + x * y)
    cosy_cosp = 1.0 - 2.0 * (y * y + z * z)
    return math.atan2(siny_cosp, cosy_cosp)


def normalize_angle(angle: float) -> float:
    """Wrap an angle to [-pi, pi)."""
    return (angle + math.pi) % (2.0 * math.pi) - math.pi
