"""Planar points, poses and weighted particles."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

_TWO_PI = 2.0 * math.pi


def normalize_yaw(yaw: float) -> float:
    """Wrap an angle into the interval [-pi, pi]."""
    while yaw < -math.pi:
        yaw += _TWO_PI
    while yaw > math.pi:
        yaw -= _TWO_PI
    return yaw


@dataclass(frozen=True)
class Point:
    """A point in the plane."""

    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Pose:
    """A planar pose whose yaw is always kept within [-pi, pi]."""

    x: float = 0.0
    y: float = 0.0
    yaw: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "yaw", normalize_yaw(self.yaw))

    def with_yaw(self, yaw: float) -> Pose:
        """Return the same position with a different heading."""
        return Pose(self.x, self.y, yaw)


@dataclass
class Particle:
    """A pose hypothesis carrying a weight."""

    pose: Pose = field(default_factory=Pose)
    w: float = 0.0

    @property
    def x(self) -> float:
        return self.pose.x

    @property
    def y(self) -> float:
        return self.pose.y

    @property
    def yaw(self) -> float:
        return self.pose.yaw