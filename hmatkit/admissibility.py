"""Conditions telling whether a block of clusters can be compressed."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from .vectors import norm2


class AdmissibilityCondition(ABC):
    """Decides whether the interaction of two clusters is admissible.

    Clusters are any objects with a ``center`` and a ``radius``.
    """

    @abstractmethod
    def is_admissible(self, target, source, eta: float) -> bool:
        """True if the block target x source may be approximated at low rank."""


class RjasanowSteinbach(AdmissibilityCondition):
    """Admissible when the smaller diameter is below eta times the cluster gap."""

    def is_admissible(self, target, source, eta: float) -> bool:
        gap = (
            norm2(np.asarray(target.center, dtype=np.float64) - np.asarray(source.center, dtype=np.float64))
            - target.radius
            - source.radius
        )
        return bool(2 * min(target.radius, source.radius) < eta * max(gap, 0.0))