"""Range measurement likelihood models evaluated against a distance map."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum

from alsloc.distance_map import DistanceMap
from alsloc.geometry import Pose


class MeasurementModelType(IntEnum):
    """Which likelihood model scores a range measurement."""

    LIKELIHOOD_FIELD = 0
    BEAM = 1
    CLASS_CONDITIONAL = 2


@dataclass
class MeasurementModel:
    """Scores single range measurements taken from a sensor pose on the map.

    All ``pose`` arguments are sensor poses in the map frame and
    ``beam_angle`` is the beam direction in the sensor frame.
    """

    distance_map: DistanceMap
    model_type: MeasurementModelType = MeasurementModelType.LIKELIHOOD_FIELD
    z_hit: float = 0.9
    z_short: float = 0.2
    z_max: float = 0.05
    z_rand: float = 0.05
    var_hit: float = 0.1
    lambda_short: float = 3.0
    lambda_unknown: float = 1.0
    known_prior: float = 0.5

    def __post_init__(self) -> None:
        if self.var_hit <= 0.0:
            raise ValueError("var_hit must be positive")
        self.model_type = MeasurementModelType(self.model_type)

    @property
    def unknown_prior(self) -> float:
        return 1.0 - self.known_prior

    @property
    def norm_const_hit(self) -> float:
        return 1.0 / math.sqrt(2.0 * self.var_hit * math.pi)

    @property
    def denom_hit(self) -> float:
        return 1.0 / (2.0 * self.var_hit)

    @property
    def resolution(self) -> float:
        return self.distance_map.resolution

    def _random(self, range_max: float) -> float:
        return self.z_rand * self.resolution / range_max

    def _invalid(self, range_max: float) -> float:
        return self.z_max + self._random(range_max)

    def _hit(self, error: float) -> float:
        return self.norm_const_hit * math.exp(-(error * error) * self.denom_hit) * self.resolution

    def _short(self, measured_range: float, range_max: float) -> float:
        lam = self.lambda_short
        return lam * math.exp(-lam * measured_range) / (1.0 - math.exp(-lam * range_max)) * self.resolution

    def _unknown(self, measured_range: float, range_max: float) -> float:
        lam = self.lambda_unknown
        return (
            lam * math.exp(-lam * measured_range) / (1.0 - math.exp(-lam * range_max))
            * self.resolution * self.unknown_prior
        )

    @staticmethod
    def _is_invalid(measured_range: float, range_min: float, range_max: float) -> bool:
        return measured_range <= range_min or range_max <= measured_range

    def _end_point_distance(self, pose: Pose, measured_range: float, beam_angle: float) -> float | None:
        t = pose.yaw + beam_angle
        x = measured_range * math.cos(t) + pose.x
        y = measured_range * math.sin(t) + pose.y
        return self.distance_map.distance_at_xy(x, y)

    def expected_range(self, pose: Pose, beam_angle: float, range_max: float) -> float | None:
        """Range at which the beam first meets an obstacle, or None if it never does."""
        res = self.resolution
        t = pose.yaw + beam_angle
        dx = res * math.cos(t)
        dy = res * math.sin(t)
        x, y = pose.x, pose.y
        hit_threshold = 0.5 * res
        r = 0.0
        while r < range_max:
            dist = self.distance_map.distance_at_xy(x, y)
            if dist is None:
                return None
            if dist < hit_threshold:
                return r
            x += dx
            y += dy
            r += res
        return None

    def likelihood_field(
        self, pose: Pose, measured_range: float, beam_angle: float, range_min: float, range_max: float
    ) -> float:
        """Likelihood from the distance of the beam end point to the nearest obstacle."""
        if self._is_invalid(measured_range, range_min, range_max):
            return self._invalid(range_max)
        dist = self._end_point_distance(pose, measured_range, beam_angle)
        if dist is None:
            p = self._random(range_max)
        else:
            p = self.z_hit * self._hit(dist) + self._random(range_max)
        return min(p, 1.0)

    def beam(
        self, pose: Pose, measured_range: float, beam_angle: float, range_min: float, range_max: float
    ) -> float:
        """Likelihood from comparing the measured range with a ray-cast range."""
        if self._is_invalid(measured_range, range_min, range_max):
            return self._invalid(range_max)
        expected = self.expected_range(pose, beam_angle, range_max)
        if expected is not None and measured_range <= expected:
            error = expected - measured_range
            p = (
                self.z_hit * self._hit(error)
                + self.z_short * self._short(measured_range, range_max)
                + self._random(range_max)
            )
        else:
            p = self._random(range_max)
        return min(p, 1.0)

    def class_conditional(
        self, pose: Pose, measured_range: float, beam_angle: float, range_min: float, range_max: float
    ) -> float:
        """Likelihood mixing known-obstacle and unknown-obstacle classes."""
        if self._is_invalid(measured_range, range_min, range_max):
            return self._invalid(range_max)
        p = self._unknown(measured_range, range_max)
        dist = self._end_point_distance(pose, measured_range, beam_angle)
        if dist is None:
            p += self._random(range_max) * self.known_prior
        else:
            p += (self.z_hit * self._hit(dist) + self._random(range_max)) * self.known_prior
        return min(p, 1.0)

    def likelihood(
        self, pose: Pose, measured_range: float, beam_angle: float, range_min: float, range_max: float
    ) -> float:
        """Likelihood by the configured model type."""
        if self.model_type is MeasurementModelType.LIKELIHOOD_FIELD:
            return self.likelihood_field(pose, measured_range, beam_angle, range_min, range_max)
        if self.model_type is MeasurementModelType.BEAM:
            return self.beam(pose, measured_range, beam_angle, range_min, range_max)
        return self.class_conditional(pose, measured_range, beam_angle, range_min, range_max)

    def unknown_probability(
        self, pose: Pose, measured_range: float, beam_angle: float, range_min: float, range_max: float
    ) -> float:
        """Posterior probability that the measurement hit an unmapped obstacle.

        Invalid ranges give 0.
        """
        if self._is_invalid(measured_range, range_min, range_max):
            return 0.0
        p_unknown = self._unknown(measured_range, range_max)
        dist = self._end_point_distance(pose, measured_range, beam_angle)
        if dist is None:
            p_known = self._random(range_max) * self.known_prior
        else:
            p_known = (self.z_hit * self._hit(dist) + self._random(range_max)) * self.known_prior
        return p_unknown / (p_known + p_unknown)