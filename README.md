# alsloc

Building blocks for localizing a robot that carries a 2D laser scanner:
planar geometry, laser scans, a distance field built from an occupancy grid,
range measurement models scored against that field, and a Markov random
field detector that estimates how likely it is that localization has failed.

## Modules

- `alsloc.geometry`
  - `normalize_yaw(yaw)` wraps an angle into [-π, π].
  - `Point(x, y)`, a frozen point.
  - `Pose(x, y, yaw)`, a frozen pose whose yaw is normalized on creation;
    `Pose.with_yaw(yaw)` returns the same position with a new heading.
  - `Particle(pose, w)`, a pose with a weight, exposing `x`, `y` and `yaw`.
- `alsloc.scan`
  - `LaserScan`, a frozen scan (`ranges`, `angle_min`, `angle_increment`,
    `range_min`, `range_max`, `stamp` and further metadata).
    `beam_angle(i)` gives the direction of beam `i`; `is_valid_range(r)`
    checks `range_min <= r <= range_max`; `invalid_rate()` gives the share of
    invalid beams (an empty scan raises `ValueError`); `with_ranges(ranges)`
    returns a copy with other ranges; `points(sensor_pose)` projects the valid
    beams to `Point`s in the frame the sensor pose is given in.
- `alsloc.distance_map`
  - `DistanceMap`, the distance in metres from every grid cell to the nearest
    occupied cell. `DistanceMap.from_occupancy_grid(data, width, height,
    resolution, origin)` builds it from row-major occupancy values, where only
    cells holding exactly `100` are obstacles (a grid without obstacles gives
    infinite distances). `xy_to_uv` / `uv_to_xy` convert between world and
    cell coordinates, `on_map` tests bounds, `distance_at(u, v)` raises
    `IndexError` off the grid, `distance_at_xy(x, y)` returns `None` off the
    grid, and `occupied_points()` lists the obstacle cells in world
    coordinates.
- `alsloc.measurement_models`
  - `MeasurementModelType`: `LIKELIHOOD_FIELD`, `BEAM`, `CLASS_CONDITIONAL`.
  - `MeasurementModel(distance_map, model_type, z_hit, z_short, z_max,
    z_rand, var_hit, lambda_short, lambda_unknown, known_prior)` scores one
    range reading taken from a sensor pose: `likelihood_field`, `beam`,
    `class_conditional`, or `likelihood` for the configured type.
    `expected_range` ray-casts a beam through the map (returning `None` when
    it leaves the map or reaches no obstacle), and `unknown_probability` gives
    the posterior that a reading came from an unmapped obstacle.
- `alsloc.mrf_failure_detector`
  - `MeasurementClass`: `ALIGNED`, `MISALIGNED`, `UNKNOWN`.
  - `MRFFailureDetector` classifies residual errors with a Markov random
    field and samples a failure probability.
    `predict_failure_probability(residual_errors)` uses the errors within
    `[0, max_residual_error]` (at most `max_residual_errors_num`, drawn at
    random) and raises `InsufficientResidualErrors` when no more than
    `min_valid_residual_errors_num` are valid. Afterwards
    `residual_error_classes()` gives the most probable class of each used
    error and `classify_scan(ranges)` splits the scan ranges into a
    `ClassifiedScan` of aligned, misaligned and unknown ranges. A
    `random.Random` can be passed as `rng` for repeatable results.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
import math
import random

from alsloc.distance_map import DistanceMap
from alsloc.geometry import Pose
from alsloc.measurement_models import MeasurementModel, MeasurementModelType
from alsloc.mrf_failure_detector import InsufficientResidualErrors, MRFFailureDetector
from alsloc.scan import LaserScan

# A 100 x 100 grid of 5 cm cells with a wall along column 80.
width = height = 100
data = [100 if u == 80 else 0 for v in range(height) for u in range(width)]
grid = DistanceMap.from_occupancy_grid(data, width, height, 0.05, Pose(0.0, 0.0, 0.0))

scan = LaserScan(
    ranges=[2.0] * 30,
    angle_min=-0.3,
    angle_increment=0.02,
    range_min=0.1,
    range_max=10.0,
)

sensor = Pose(2.0, 2.5, 0.0)
model = MeasurementModel(grid, MeasurementModelType.LIKELIHOOD_FIELD)
log_likelihood = sum(
    math.log(model.likelihood(sensor, r, scan.beam_angle(i), scan.range_min, scan.range_max))
    for i, r in enumerate(scan.ranges)
)

residual_errors = []
for r, point in zip(scan.ranges, scan.points(sensor)):
    d = grid.distance_at_xy(point.x, point.y)
    residual_errors.append(-1.0 if d is None else d)

detector = MRFFailureDetector(rng=random.Random(0))
try:
    p_fail = detector.predict_failure_probability(residual_errors)
    split = detector.classify_scan(scan.ranges)
except InsufficientResidualErrors:
    p_fail = None
```

## What it does not do

The package provides the pieces a localizer is made of, not a localizer. It
has no particle filter that runs motion updates, weighting, pose estimation
and resampling over time, no learned mean-absolute-error classifier for
reliability, and no command-line program. It does not talk to any robot
middleware, subscribe to sensor topics or publish results; scans, maps and
residual errors are passed in as plain Python values, and nothing is stored
to disk.