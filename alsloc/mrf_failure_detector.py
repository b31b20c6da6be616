"""Localization failure detection with a Markov random field over residual errors."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence

logger = logging.getLogger(__name__)

_DEFAULT_TRANSITION = (
    0.8, 0.0, 0.2,
    0.0, 0.8, 0.2,
    0.333333, 0.333333, 0.333333,
)
_CONVERGENCE_THRESHOLD = 10e-6


class MeasurementClass(IntEnum):
    """Class of a single residual error."""

    ALIGNED = 0
    MISALIGNED = 1
    UNKNOWN = 2


class InsufficientResidualErrors(ValueError):
    """Raised when too few valid residual errors are available."""


def _normalize(vector: Sequence[float]) -> list[float]:
    total = sum(vector)
    return [v / total for v in vector]


def _hadamard(a: Sequence[float], b: Sequence[float]) -> list[float]:
    return [x * y for x, y in zip(a, b)]


def _diff_norm(a: Sequence[float], b: Sequence[float]) -> float:
    return math.sqrt(sum((x - y) ** 2 for x, y in zip(a, b)))


@dataclass(frozen=True)
class ClassifiedScan:
    """Scan ranges split by the class of their residual errors."""

    aligned: list[float]
    misaligned: list[float]
    unknown: list[float]


class MRFFailureDetector:
    """Estimates the probability that localization has failed."""

    def __init__(
        self,
        *,
        max_residual_error: float = 1.0,
        nd_mean: float = 0.0,
        nd_var: float = 0.04,
        ed_lambda: float = 4.0,
        residual_error_reso: float = 0.05,
        min_valid_residual_errors_num: int = 10,
        max_residual_errors_num: int = 200,
        max_lpb_computation_num: int = 1000,
        sampling_num: int = 1000,
        misalignment_ratio_threshold: float = 0.1,
        unknown_ratio_threshold: float = 0.7,
        transition_prob_mat: Sequence[float] = _DEFAULT_TRANSITION,
        rng: random.Random | None = None,
    ) -> None:
        if len(transition_prob_mat) != 9:
            raise ValueError("the transition probability matrix needs 9 entries")
        self.max_residual_error = max_residual_error
        self.nd_mean = nd_mean
        self.nd_var = nd_var
        self.ed_lambda = ed_lambda
        self.residual_error_reso = residual_error_reso
        self.min_valid_residual_errors_num = min_valid_residual_errors_num
        self.max_residual_errors_num = max_residual_errors_num
        self.max_lpb_computation_num = max_lpb_computation_num
        self.sampling_num = sampling_num
        self.misalignment_ratio_threshold = misalignment_ratio_threshold
        self.unknown_ratio_threshold = unknown_ratio_threshold
        self.transition_prob_mat = tuple(float(v) for v in transition_prob_mat)
        self.rng = rng if rng is not None else random.Random()

        self.used_residual_errors: list[float] = []
        self.used_scan_indices: list[int] = []
        self.measurement_class_probabilities: list[list[float]] = []
        self.failure_probability: float | None = None

    @property
    def nd_norm_const(self) -> float:
        return 1.0 / math.sqrt(2.0 * math.pi * self.nd_var)

    def _normal(self, e: float) -> float:
        gauss = 2.0 * self.nd_norm_const * math.exp(-((e - self.nd_mean) ** 2) / (2.0 * self.nd_var))
        return (0.95 * gauss + 0.05 / self.max_residual_error) * self.residual_error_reso

    def _exponential(self, e: float) -> float:
        lam = self.ed_lambda
        expo = lam * math.exp(-lam * e) / (1.0 - math.exp(-lam * self.max_residual_error))
        return (0.95 * expo + 0.05 / self.max_residual_error) * self.residual_error_reso

    def _uniform(self) -> float:
        return self.residual_error_reso / self.max_residual_error

    def _transition_message(self, probs: Sequence[float]) -> list[float]:
        tm = self.transition_prob_mat
        return [sum(tm[3 * row + col] * probs[col] for col in range(3)) for row in range(3)]

    def likelihood_vectors(self, residual_errors: Sequence[float]) -> list[list[float]]:
        """Normalized per-class likelihoods of each residual error."""
        pud = self._uniform()
        return [_normalize([self._normal(e), self._exponential(e), pud]) for e in residual_errors]

    def estimate_measurement_class_probabilities(
        self, likelihood_vectors: Sequence[Sequence[float]]
    ) -> list[list[float]]:
        """Class probabilities by message passing and loopy belief propagation."""
        size = len(likelihood_vectors)
        if size == 0:
            raise ValueError("no likelihood vectors to estimate from")
        likelihoods = [list(v) for v in likelihood_vectors]
        messages = [self._transition_message(v) for v in likelihoods]
        probs: list[list[float]] = []
        for i, vector in enumerate(likelihoods):
            current = list(vector)
            for j, message in enumerate(messages):
                if i != j:
                    current = _normalize(_hadamard(current, message))
            probs.append(_normalize(current))

        variation = 0.0
        idx1 = self.rng.randrange(size)
        message = list(likelihoods[idx1])
        check_step = self.max_lpb_computation_num // 20
        for i in range(self.max_lpb_computation_num):
            idx2 = self.rng.randrange(size)
            for _ in range(10):
                if idx2 != idx1:
                    break
                idx2 = self.rng.randrange(size)
            message = self._transition_message(message)
            message = _hadamard(likelihoods[idx2], message)
            previous = probs[idx2]
            probs[idx2] = _normalize(_hadamard(probs[idx2], message))
            variation += _diff_norm(probs[idx2], previous)
            if check_step > 0 and i >= check_step and i % check_step == 0:
                if variation < _CONVERGENCE_THRESHOLD:
                    break
                variation = 0.0
            message = probs[idx2]
            idx1 = idx2
        return probs

    def failure_probability_by_sampling(self, class_probabilities: Sequence[Sequence[float]]) -> float:
        """Fraction of sampled class assignments that indicate a failure."""
        measurement_num = len(class_probabilities)
        if measurement_num == 0:
            raise ValueError("no class probabilities to sample from")
        failures = 0
        for _ in range(self.sampling_num):
            misaligned = 0
            valid = 0
            for probs in class_probabilities:
                darts = self.rng.random()
                if darts > probs[MeasurementClass.ALIGNED] + probs[MeasurementClass.MISALIGNED]:
                    continue
                valid += 1
                if darts > probs[MeasurementClass.ALIGNED]:
                    misaligned += 1
            misalignment_ratio = misaligned / valid if valid else math.nan
            unknown_ratio = (measurement_num - valid) / measurement_num
            if misalignment_ratio >= self.misalignment_ratio_threshold or unknown_ratio >= self.unknown_ratio_threshold:
                failures += 1
        return failures / self.sampling_num

    def predict_failure_probability(self, residual_errors: Sequence[float]) -> float:
        """Predict the failure probability from a scan's residual errors."""
        valid = [(i, e) for i, e in enumerate(residual_errors) if 0.0 <= e <= self.max_residual_error]
        if len(valid) <= self.min_valid_residual_errors_num:
            self.failure_probability = None
            raise InsufficientResidualErrors(
                f"only {len(valid)} valid residual errors; more than "
                f"{self.min_valid_residual_errors_num} are required"
            )
        if len(valid) > self.max_residual_errors_num:
            valid = self.rng.sample(valid, self.max_residual_errors_num)
        self.used_scan_indices = [i for i, _ in valid]
        self.used_residual_errors = [e for _, e in valid]

        vectors = self.likelihood_vectors(self.used_residual_errors)
        probs = self.estimate_measurement_class_probabilities(vectors)
        self.measurement_class_probabilities = [list(p) for p in probs]
        self.failure_probability = self.failure_probability_by_sampling(probs)
        return self.failure_probability

    def residual_error_classes(self) -> list[MeasurementClass]:
        """Most probable class of each used residual error."""
        classes = []
        for aligned, misaligned, unknown in self.measurement_class_probabilities:
            if aligned > misaligned and aligned > unknown:
                classes.append(MeasurementClass.ALIGNED)
            elif misaligned > aligned and misaligned > unknown:
                classes.append(MeasurementClass.MISALIGNED)
            else:
                classes.append(MeasurementClass.UNKNOWN)
        return classes

    def classify_scan(self, ranges: Sequence[float]) -> ClassifiedScan:
        """Split scan ranges into aligned, misaligned and unknown scans."""
        size = len(ranges)
        split = {cls: [0.0] * size for cls in MeasurementClass}
        for idx, cls in zip(self.used_scan_indices, self.residual_error_classes()):
            split[cls][idx] = ranges[idx]
        return ClassifiedScan(
            aligned=split[MeasurementClass.ALIGNED],
            misaligned=split[MeasurementClass.MISALIGNED],
            unknown=split[MeasurementClass.UNKNOWN],
        )