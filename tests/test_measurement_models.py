import math

import pytest

from alsloc.distance_map import DistanceMap
from alsloc.geometry import Pose
from alsloc.measurement_models import MeasurementModel, MeasurementModelType

RES = 0.1
RANGE_MIN = 0.05
RANGE_MAX = 5.0


@pytest.fixture
def dist_map():
    width, height = 20, 20
    data = [100 if u == 10 else 0 for v in range(height) for u in range(width)]
    return DistanceMap.from_occupancy_grid(data, width, height, RES)


@pytest.fixture
def sensor():
    return Pose(0.05, 1.05, 0.0)


def test_expected_range_hits_wall(dist_map, sensor):
    model = MeasurementModel(dist_map)
    assert model.expected_range(sensor, 0.0, RANGE_MAX) == pytest.approx(1.0)


def test_expected_range_none_when_leaving_map(dist_map, sensor):
    model = MeasurementModel(dist_map)
    assert model.expected_range(sensor, math.pi, RANGE_MAX) is None


def test_invalid_minus_off_map_is_z_max(dist_map, sensor):
    model = MeasurementModel(dist_map)
    invalid = model.likelihood_field(sensor, RANGE_MAX, 0.0, RANGE_MIN, RANGE_MAX)
    off_map = model.likelihood_field(sensor, 3.0, math.pi, RANGE_MIN, RANGE_MAX)
    assert invalid - off_map == pytest.approx(model.z_max)


@pytest.mark.parametrize("measured", [RANGE_MIN, RANGE_MAX, 0.0, 10.0])
def test_invalid_range_same_for_all_models(dist_map, sensor, measured):
    model = MeasurementModel(dist_map)
    values = {
        model.likelihood_field(sensor, measured, 0.0, RANGE_MIN, RANGE_MAX),
        model.beam(sensor, measured, 0.0, RANGE_MIN, RANGE_MAX),
        model.class_conditional(sensor, measured, 0.0, RANGE_MIN, RANGE_MAX),
    }
    assert len(values) == 1


def test_likelihood_field_prefers_wall(dist_map, sensor):
    model = MeasurementModel(dist_map)
    on_wall = model.likelihood_field(sensor, 1.0, 0.0, RANGE_MIN, RANGE_MAX)
    short = model.likelihood_field(sensor, 0.3, 0.0, RANGE_MIN, RANGE_MAX)
    assert on_wall > short
    assert 0.0 < on_wall <= 1.0


def test_beam_beyond_expected_is_random_only(dist_map, sensor):
    model = MeasurementModel(dist_map)
    beyond = model.beam(sensor, 3.0, 0.0, RANGE_MIN, RANGE_MAX)
    off_map = model.likelihood_field(sensor, 3.0, math.pi, RANGE_MIN, RANGE_MAX)
    assert beyond == pytest.approx(off_map)


def test_beam_prefers_expected_range(dist_map, sensor):
    model = MeasurementModel(dist_map)
    at_wall = model.beam(sensor, 1.0, 0.0, RANGE_MIN, RANGE_MAX)
    beyond = model.beam(sensor, 3.0, 0.0, RANGE_MIN, RANGE_MAX)
    assert at_wall > beyond


def test_class_conditional_with_full_known_prior_matches_field(dist_map, sensor):
    model = MeasurementModel(dist_map, known_prior=1.0)
    for measured in (0.3, 1.0, 2.0):
        assert model.class_conditional(sensor, measured, 0.0, RANGE_MIN, RANGE_MAX) == pytest.approx(
            model.likelihood_field(sensor, measured, 0.0, RANGE_MIN, RANGE_MAX)
        )


@pytest.mark.parametrize(
    "model_type,method",
    [
        (MeasurementModelType.LIKELIHOOD_FIELD, "likelihood_field"),
        (MeasurementModelType.BEAM, "beam"),
        (MeasurementModelType.CLASS_CONDITIONAL, "class_conditional"),
    ],
)
def test_likelihood_dispatches(dist_map, sensor, model_type, method):
    model = MeasurementModel(dist_map, model_type=model_type)
    for measured in (0.4, 1.0):
        expected = getattr(model, method)(sensor, measured, 0.0, RANGE_MIN, RANGE_MAX)
        assert model.likelihood(sensor, measured, 0.0, RANGE_MIN, RANGE_MAX) == expected


def test_model_type_accepts_int(dist_map):
    model = MeasurementModel(dist_map, model_type=1)
    assert model.model_type is MeasurementModelType.BEAM


def test_unknown_probability(dist_map, sensor):
    model = MeasurementModel(dist_map)
    short = model.unknown_probability(sensor, 0.3, 0.0, RANGE_MIN, RANGE_MAX)
    on_wall = model.unknown_probability(sensor, 1.0, 0.0, RANGE_MIN, RANGE_MAX)
    assert 0.0 <= on_wall < short <= 1.0
    assert model.unknown_probability(sensor, RANGE_MAX, 0.0, RANGE_MIN, RANGE_MAX) == 0.0


def test_likelihood_clamped_to_one(dist_map, sensor):
    model = MeasurementModel(dist_map, z_hit=1000.0)
    assert model.likelihood_field(sensor, 1.0, 0.0, RANGE_MIN, RANGE_MAX) == 1.0


def test_non_positive_variance_rejected(dist_map):
    with pytest.raises(ValueError):
        MeasurementModel(dist_map, var_hit=0.0)