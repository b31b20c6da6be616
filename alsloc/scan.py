"""Planar laser range scans."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Iterable

from alsloc.geometry import Point, Pose


@dataclass(frozen=True)
class LaserScan:
    """A single sweep of a planar range finder.

    Beam ``i`` points at ``angle_min + i * angle_increment`` in the sensor frame.
    """

    ranges: tuple[float, ...] = ()
    angle_min: float = 0.0
    angle_increment: float = 0.0
    range_min: float = 0.0
    range_max: float = math.inf
    stamp: float = 0.0
    angle_max: float = 0.0
    time_increment: float = 0.0
    scan_time: float = 0.0
    intensities: tuple[float, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "ranges", tuple(float(r) for r in self.ranges))
        object.__setattr__(self, "intensities", tuple(float(v) for v in self.intensities))

    def __len__(self) -> int:
        return len(self.ranges)

    def beam_angle(self, index: int) -> float:
        """Direction of beam ``index`` in the sensor frame."""
        return self.angle_min + float(index) * self.angle_increment

    def is_valid_range(self, value: float) -> bool:
        """Whether a range lies within [range_min, range_max]."""
        return not (value < self.range_min or self.range_max < value)

    def invalid_rate(self) -> float:
        """Fraction of beams whose range lies outside the valid interval."""
        if not self.ranges:
            raise ValueError("the scan holds no ranges")
        invalid = sum(1 for r in self.ranges if not self.is_valid_range(r))
        return invalid / len(self.ranges)

    def with_ranges(self, ranges: Iterable[float]) -> LaserScan:
        """Return a copy of this scan carrying different ranges."""
        return replace(self, ranges=tuple(ranges))

    def points(self, sensor_pose: Pose) -> list[Point]:
        """Valid beam end points in the frame that ``sensor_pose`` is given in."""
        result = []
        for i, r in enumerate(self.ranges):
            if not self.is_valid_range(r):
                continue
            angle = self.beam_angle(i) + sensor_pose.yaw
            result.append(
                Point(sensor_pose.x + r * math.cos(angle), sensor_pose.y + r * math.sin(angle))
            )
        return result