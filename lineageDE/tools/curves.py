"""Fitted curve handle and the regression strategy interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from .._utils.errors import EmptyLineageError
from .subset import LineageSubset


@dataclass(frozen=True)
class FittedCurve:
    """
    A smoothing model fitted to one lineage subset (or a pooled subset).

    Attributes
    ----------
    strategy : RegressionStrategy
        Strategy that produced the fit; used for prediction
    model : Any
        Strategy-specific fitted state
    subset : LineageSubset
        Training data, including cells later dropped for undefined pseudotime
    param : float
        Span (local regression) or spline degrees of freedom
    """

    strategy: 'RegressionStrategy'
    model: Any = field(repr=False)
    subset: LineageSubset = field(repr=False)
    param: float

    def predict(self, x) -> np.ndarray:
        """Fitted expression at pseudotimes ``x``."""
        return self.strategy.predict(self, x)


class RegressionStrategy(ABC):
    """Smoothing family used to fit expression along pseudotime."""

    name = None
    label = None

    @abstractmethod
    def fit(self, subset: LineageSubset) -> FittedCurve:
        """Fit the smoother to a lineage subset."""

    @abstractmethod
    def predict(self, curve: FittedCurve, x) -> np.ndarray:
        """Evaluate a fitted curve at new pseudotimes."""

    def _training_data(self, subset: LineageSubset) -> LineageSubset:
        data = subset.finite()
        if len(data) == 0:
            raise EmptyLineageError(subset.lineage, reason='with a defined pseudotime')
        return data
