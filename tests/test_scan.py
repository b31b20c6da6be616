import math

import pytest

from alsloc.geometry import Pose
from alsloc.scan import LaserScan


def make_scan(ranges, **kwargs):
    params = dict(angle_min=-0.5, angle_increment=0.25, range_min=0.1, range_max=10.0)
    params.update(kwargs)
    return LaserScan(ranges=ranges, **params)


def test_beam_angle_first_is_angle_min():
    scan = make_scan([1.0, 1.0, 1.0])
    assert scan.beam_angle(0) == -0.5


def test_beam_angle_steps_by_increment():
    scan = make_scan([1.0] * 5)
    for i in range(1, 5):
        assert scan.beam_angle(i) - scan.beam_angle(i - 1) == pytest.approx(0.25)


def test_is_valid_range_bounds_inclusive():
    scan = make_scan([1.0])
    assert scan.is_valid_range(0.1)
    assert scan.is_valid_range(10.0)
    assert scan.is_valid_range(5.0)
    assert not scan.is_valid_range(0.05)
    assert not scan.is_valid_range(10.5)


def test_invalid_rate_counts_out_of_range():
    scan = make_scan([0.0, 1.0, 20.0, 2.0])
    assert scan.invalid_rate() == pytest.approx(0.5)


def test_invalid_rate_all_valid_is_zero():
    scan = make_scan([1.0, 2.0, 3.0])
    assert scan.invalid_rate() == 0.0


def test_invalid_rate_empty_scan_raises():
    with pytest.raises(ValueError):
        make_scan([]).invalid_rate()


def test_with_ranges_keeps_metadata_and_original():
    scan = make_scan([1.0, 2.0], stamp=3.5)
    other = scan.with_ranges([0.0, 4.0])
    assert other.ranges == (0.0, 4.0)
    assert scan.ranges == (1.0, 2.0)
    assert other.stamp == 3.5
    assert other.angle_min == scan.angle_min
    assert other.range_max == scan.range_max


def test_ranges_are_stored_as_tuple():
    scan = make_scan([1, 2])
    assert scan.ranges == (1.0, 2.0)
    assert len(scan) == 2


def test_points_from_origin_pose():
    scan = LaserScan(ranges=[2.0], angle_min=0.0, angle_increment=0.1, range_min=0.0, range_max=5.0)
    (p,) = scan.points(Pose(0.0, 0.0, 0.0))
    assert p.x == pytest.approx(2.0)
    assert p.y == pytest.approx(0.0)


def test_points_translated_and_rotated():
    scan = LaserScan(ranges=[1.0], angle_min=0.0, angle_increment=0.1, range_min=0.0, range_max=5.0)
    (p,) = scan.points(Pose(1.0, 2.0, math.pi / 2.0))
    assert p.x == pytest.approx(1.0)
    assert p.y == pytest.approx(3.0)


def test_points_skip_invalid_ranges():
    scan = make_scan([0.0, 1.0, 50.0, 2.0])
    points = scan.points(Pose())
    assert len(points) == 2


def test_points_lie_at_measured_distance():
    scan = make_scan([1.0, 2.0, 3.0, 4.0])
    pose = Pose(-1.0, 0.5, 0.3)
    points = scan.points(pose)
    for p, r in zip(points, scan.ranges):
        assert math.hypot(p.x - pose.x, p.y - pose.y) == pytest.approx(r)