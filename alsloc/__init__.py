"""Geometry, laser scans, distance maps, range measurement models and MRF failure detection for 2D LiDAR localization."""

__version__ = "0.1.0"
__all__ = [
    "distance_map",
    "geometry",
    "measurement_models",
    "mrf_failure_detector",
    "scan",
]