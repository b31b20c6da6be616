"""Distance field built from an occupancy grid map."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from scipy import ndimage

from alsloc.geometry import Point, Pose

OCCUPIED = 100


class DistanceMap:
    """Distance in metres from each map cell to the nearest occupied cell.

    Cell ``(u, v)`` is column ``u`` and row ``v`` of the grid; the grid is
    placed in the world by ``origin`` and scaled by ``resolution``.
    """

    def __init__(self, distances: np.ndarray, resolution: float, origin: Pose = Pose()) -> None:
        array = np.asarray(distances, dtype=np.float32)
        if array.ndim != 2:
            raise ValueError("the distance field must be two-dimensional")
        if resolution <= 0.0:
            raise ValueError("the map resolution must be positive")
        self.distances = array
        self.resolution = float(resolution)
        self.origin = origin

    @property
    def width(self) -> int:
        return int(self.distances.shape[1])

    @property
    def height(self) -> int:
        return int(self.distances.shape[0])

    @classmethod
    def from_occupancy_grid(
        cls,
        data: Sequence[int],
        width: int,
        height: int,
        resolution: float,
        origin: Pose = Pose(),
    ) -> DistanceMap:
        """Build the distance field from row-major occupancy values.

        Only cells holding exactly 100 count as obstacles.
        """
        if width <= 0 or height <= 0:
            raise ValueError("the map must have a positive width and height")
        grid = np.asarray(data, dtype=np.int64)
        if grid.size != width * height:
            raise ValueError(f"expected {width * height} cells, got {grid.size}")
        free = grid.reshape(height, width) != OCCUPIED
        if free.all():
            cells = np.full((height, width), np.inf)
        else:
            cells = ndimage.distance_transform_edt(free)
        return cls(cells * resolution, resolution, origin)

    def xy_to_uv(self, x: float, y: float) -> tuple[int, int]:
        """Grid cell holding the world point (x, y); truncates toward zero."""
        dx = x - self.origin.x
        dy = y - self.origin.y
        yaw = -self.origin.yaw
        xx = dx * math.cos(yaw) - dy * math.sin(yaw)
        yy = dx * math.sin(yaw) + dy * math.cos(yaw)
        return int(xx / self.resolution), int(yy / self.resolution)

    def uv_to_xy(self, u: int, v: int) -> tuple[float, float]:
        """World coordinates of the corner of grid cell (u, v)."""
        xx = u * self.resolution
        yy = v * self.resolution
        yaw = -self.origin.yaw
        dx = xx * math.cos(yaw) + yy * math.sin(yaw)
        dy = -xx * math.sin(yaw) + yy * math.cos(yaw)
        return dx + self.origin.x, dy + self.origin.y

    def on_map(self, u: int, v: int) -> bool:
        """Whether the cell lies inside the grid."""
        return 0 <= u < self.width and 0 <= v < self.height

    def distance_at(self, u: int, v: int) -> float:
        """Distance stored at cell (u, v)."""
        if not self.on_map(u, v):
            raise IndexError(f"cell ({u}, {v}) lies outside the map")
        return float(self.distances[v, u])

    def distance_at_xy(self, x: float, y: float) -> float | None:
        """Distance at the world point (x, y), or None off the map."""
        u, v = self.xy_to_uv(x, y)
        if not self.on_map(u, v):
            return None
        return float(self.distances[v, u])

    def occupied_points(self) -> list[Point]:
        """World positions of the cells at zero distance, column by column."""
        rows, cols = np.nonzero(self.distances == 0.0)
        order = np.lexsort((rows, cols))
        return [Point(*self.uv_to_xy(int(cols[k]), int(rows[k]))) for k in order]