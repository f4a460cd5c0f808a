"""One-dimensional Gaussian mixture model fit by Expectation-Maximization.

Initialization is deterministic: component means start at the centres of
``k`` equal-width bins spanning the sample range, so identical input always
produces identical tiers.

Usage:
    gmm = GaussianMixtureModel(n_components=6)
    gmm.fit(ranks)
    labels = gmm.predict(ranks)  # 0 = component with the lowest mean
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from fantasy_football_tiers.clustering.grouping import groups_from_labels, sort_by_rank
from fantasy_football_tiers.exceptions import ClusteringError, InsufficientSamplesError, NotFittedError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fantasy_football_tiers.domain.ranked_entity import RankedEntity
    from fantasy_football_tiers.domain.scoring_format import ScoringFormat
    from fantasy_football_tiers.domain.tier import TierGroup

logger = logging.getLogger(__name__)

# Variance floor; a collapsed component would make the density blow up.
MIN_VARIANCE = 0.1
# Per-sample probability floor inside the log-likelihood.
MIN_PROBABILITY = 1e-10

DEFAULT_MAX_ITERATIONS = 100
DEFAULT_TOLERANCE = 1e-6


@dataclass(frozen=True)
class GaussianComponent:
    mean: float
    variance: float
    weight: float


def gaussian_pdf(x: np.ndarray, mean: float, variance: float) -> np.ndarray:
    coefficient = 1.0 / math.sqrt(2.0 * math.pi * variance)
    return coefficient * np.exp(-((x - mean) ** 2) / (2.0 * variance))


def floor_variance(variance: float) -> float:
    return max(variance, MIN_VARIANCE)


def safe_log_likelihood(probabilities: np.ndarray) -> float:
    return float(np.sum(np.log(np.maximum(probabilities, MIN_PROBABILITY))))


class GaussianMixtureModel:
    def __init__(
        self,
        n_components: int,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        tolerance: float = DEFAULT_TOLERANCE,
    ) -> None:
        if n_components < 1:
            msg = f"n_components must be at least 1, got {n_components}"
            raise ValueError(msg)
        self.n_components = n_components
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self._components: tuple[GaussianComponent, ...] = ()
        self.n_iter = 0
        self.converged = False
        self.log_likelihood = -math.inf

    @property
    def is_fitted(self) -> bool:
        return bool(self._components)

    @property
    def components(self) -> tuple[GaussianComponent, ...]:
        return self._components

    def fit(self, samples: Sequence[float]) -> GaussianMixtureModel:
        """Fit the mixture to ``samples``.

        Raises:
            InsufficientSamplesError: Fewer samples than components.
            ClusteringError: Non-finite samples, or EM produced non-finite parameters.
        """
        x = self._as_array(samples)
        if len(x) < self.n_components:
            raise InsufficientSamplesError(len(x), self.n_components)

        components = self._initial_components(x)
        previous = -math.inf
        log_likelihood = previous
        converged = False
        iterations = 0
        for iterations in range(1, self.max_iterations + 1):
            responsibilities = self._expectation(x, components)
            components = self._maximization(x, responsibilities, components)
            log_likelihood = safe_log_likelihood(self._weighted_densities(x, components).sum(axis=1))
            if abs(log_likelihood - previous) < self.tolerance:
                converged = True
                break
            previous = log_likelihood

        if not all(math.isfinite(c.mean) and math.isfinite(c.variance) for c in components):
            msg = "EM produced non-finite component parameters"
            raise ClusteringError(msg)

        # Only publish state once the fit has fully succeeded.
        self._components = components
        self.n_iter = iterations
        self.converged = converged
        self.log_likelihood = log_likelihood
        logger.debug(
            "GMM k=%d fit in %d iterations (converged=%s, log-likelihood=%.4f)",
            self.n_components,
            iterations,
            converged,
            log_likelihood,
        )
        return self

    def predict(self, samples: Sequence[float]) -> list[int]:
        """Hard-assign samples to components, labeled by ascending component mean."""
        if not self.is_fitted:
            raise NotFittedError("GaussianMixtureModel must be fitted before calling predict.")
        x = self._as_array(samples)
        if len(x) == 0:
            return []

        densities = self._weighted_densities(x, self._components)
        assignments = np.argmax(densities, axis=1)

        # Samples far from every component underflow to zero density everywhere;
        # argmax would put them in component 0, so use the nearest mean instead.
        means = np.array([c.mean for c in self._components])
        underflow = densities.sum(axis=1) <= 0.0
        if np.any(underflow):
            nearest = np.argmin(np.abs(x[:, None] - means[None, :]), axis=1)
            assignments = np.where(underflow, nearest, assignments)

        order = np.argsort(means, kind="stable")
        relabel = np.empty_like(order)
        relabel[order] = np.arange(len(order))
        return [int(relabel[a]) for a in assignments]

    def fit_predict(self, samples: Sequence[float]) -> list[int]:
        return self.fit(samples).predict(samples)

    @staticmethod
    def _as_array(samples: Sequence[float]) -> np.ndarray:
        x = np.asarray(samples, dtype=float)
        if x.ndim != 1:
            msg = f"Expected 1-D samples, got shape {x.shape}"
            raise ClusteringError(msg)
        if not np.all(np.isfinite(x)):
            raise ClusteringError("Samples contain non-finite values")
        return x

    def _initial_components(self, x: np.ndarray) -> tuple[GaussianComponent, ...]:
        k = self.n_components
        low = float(x.min())
        span = float(x.max()) - low
        variance = floor_variance((span / (2 * k)) ** 2)
        return tuple(
            GaussianComponent(mean=low + span * (i + 0.5) / k, variance=variance, weight=1.0 / k) for i in range(k)
        )

    @staticmethod
    def _weighted_densities(x: np.ndarray, components: tuple[GaussianComponent, ...]) -> np.ndarray:
        """Return an (n, k) array of ``weight * pdf`` per sample and component."""
        columns = [c.weight * gaussian_pdf(x, c.mean, c.variance) for c in components]
        return np.stack(columns, axis=1)

    def _expectation(self, x: np.ndarray, components: tuple[GaussianComponent, ...]) -> np.ndarray:
        densities = self._weighted_densities(x, components)
        totals = densities.sum(axis=1, keepdims=True)
        # Rows with an all-zero total stay zero rather than dividing by zero.
        return np.divide(densities, totals, out=np.zeros_like(densities), where=totals > 0.0)

    @staticmethod
    def _maximization(
        x: np.ndarray,
        responsibilities: np.ndarray,
        previous: tuple[GaussianComponent, ...],
    ) -> tuple[GaussianComponent, ...]:
        n = len(x)
        updated: list[GaussianComponent] = []
        for j, component in enumerate(previous):
            resp = responsibilities[:, j]
            total = float(resp.sum())
            if total <= 0.0:
                updated.append(GaussianComponent(mean=component.mean, variance=component.variance, weight=0.0))
                continue
            mean = float(np.dot(resp, x) / total)
            variance = float(np.dot(resp, (x - mean) ** 2) / total)
            updated.append(GaussianComponent(mean=mean, variance=floor_variance(variance), weight=total / n))
        return tuple(updated)


class GaussianMixtureStrategy:
    """Tier strategy backed by :class:`GaussianMixtureModel` over average ranks."""

    name = "gmm"

    def __init__(self, max_iterations: int = DEFAULT_MAX_ITERATIONS, tolerance: float = DEFAULT_TOLERANCE) -> None:
        self._max_iterations = max_iterations
        self._tolerance = tolerance

    def cluster(
        self,
        entities: Sequence[RankedEntity],
        k: int,
        scoring_format: ScoringFormat,
    ) -> list[TierGroup]:
        ordered = sort_by_rank(entities)
        model = GaussianMixtureModel(k, max_iterations=self._max_iterations, tolerance=self._tolerance)
        labels = model.fit_predict([e.average_rank for e in ordered])
        return groups_from_labels(ordered, labels, self.name)
