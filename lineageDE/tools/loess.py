"""Weighted local regression (loess) and its standard deviation band."""

from typing import NamedTuple

import numpy as np

from .curves import FittedCurve, RegressionStrategy
from .subset import LineageSubset


def _tricube(u):
    u = np.clip(u, 0.0, 1.0)
    return (1 - u ** 3) ** 3


def local_regression(
    x: np.ndarray,
    y: np.ndarray,
    weights: np.ndarray,
    x_new: np.ndarray,
    span: float = 0.5,
    degree: int = 1
) -> np.ndarray:
    """
    Evaluate a weighted loess smoother at new points.

    For every point in ``x_new`` the ``floor(n * span)`` nearest training
    points receive tricube weights relative to the distance of the farthest
    one; a polynomial of ``degree`` is then fitted by weighted least squares
    with weights ``weights * tricube`` and evaluated at the point. For
    ``span > 1`` the bandwidth is widened by ``span``. Neighbourhoods with
    fewer distinct pseudotimes than ``degree + 1`` get a lower degree fit.

    Parameters
    ----------
    x : np.ndarray
        Training pseudotimes
    y : np.ndarray
        Training responses
    weights : np.ndarray
        Prior weights of the training points
    x_new : np.ndarray
        Points to evaluate
    span : float, optional (default: 0.5)
        Fraction of points in each local neighbourhood
    degree : int, optional (default: 1)
        Degree of the local polynomial

    Returns
    -------
    np.ndarray
        Smoothed values; NaN where every local weight is zero or x_new is NaN
    """
    if span <= 0:
        raise ValueError(f"span must be positive, got {span}")
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    weights = np.asarray(weights, dtype=float)
    x_new = np.atleast_1d(np.asarray(x_new, dtype=float))

    n = len(x)
    fitted = np.full(x_new.shape, np.nan)
    if n == 0:
        return fitted
    q = min(max(int(np.floor(n * span)), degree + 1), n)

    for i, x0 in enumerate(x_new):
        if not np.isfinite(x0):
            continue
        dist = np.abs(x - x0)
        # widened so that neighbours tied at the radius keep a positive weight
        h = np.partition(dist, q - 1)[q - 1] * (1 + 1e-3)
        if span > 1:
            h *= span
        local_w = weights * (_tricube(dist / h) if h > 0 else (dist == 0).astype(float))
        use = local_w > 0
        if not np.any(use):
            continue

        local_degree = min(degree, len(np.unique(x[use])) - 1)
        design = np.vander(x[use] - x0, local_degree + 1, increasing=True)
        sw = np.sqrt(local_w[use])
        coef = np.linalg.lstsq(design * sw[:, None], y[use] * sw, rcond=None)[0]
        fitted[i] = coef[0]

    return fitted


class LocalRegression(RegressionStrategy):
    """
    Loess smoothing of expression along pseudotime.

    Parameters
    ----------
    span : float, optional (default: 0.5)
        Fraction of cells in each local neighbourhood
    degree : int, optional (default: 1)
        Degree of the local polynomial
    """

    name = 'loess'
    label = '(loess)'

    def __init__(self, span: float = 0.5, degree: int = 1):
        if span <= 0:
            raise ValueError(f"span must be positive, got {span}")
        self.span = span
        self.degree = degree

    def __repr__(self):
        return f"LocalRegression(span={self.span}, degree={self.degree})"

    def fit(self, subset: LineageSubset) -> FittedCurve:
        model = {'data': self._training_data(subset), 'degree': self.degree}
        return FittedCurve(strategy=self, model=model, subset=subset, param=self.span)

    def predict(self, curve: FittedCurve, x) -> np.ndarray:
        data = curve.model['data']
        return local_regression(
            data.pseudotime, data.expression, data.weights, x,
            span=curve.param, degree=curve.model['degree'],
        )


class LoessBand(NamedTuple):
    """Loess fit with a one-sigma style band, sorted by pseudotime."""

    x: np.ndarray
    fit: np.ndarray
    sd: np.ndarray
    upper: np.ndarray
    lower: np.ndarray


def loess_sd(
    x,
    y,
    weights,
    span: float = 0.5,
    nsigma: float = 1.0,
    degree: int = 2
) -> LoessBand:
    """
    Local standard deviation band around a loess fit.

    Fits ``y`` with loess, fits the squared residuals with a second loess
    and takes the square root as the local standard deviation. Points with
    undefined x, y or weight are excluded.

    Parameters
    ----------
    x, y, weights : array-like
        Pseudotime, expression and weights of all cells of a lineage
    span : float, optional (default: 0.5)
        Loess span
    nsigma : float, optional (default: 1.0)
        Half-width of the band in standard deviations
    degree : int, optional (default: 2)
        Degree of the local polynomials

    Returns
    -------
    LoessBand
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    weights = np.asarray(weights, dtype=float)

    keep = np.isfinite(x) & np.isfinite(y) & np.isfinite(weights)
    order = np.argsort(x[keep], kind='stable')
    x, y, weights = x[keep][order], y[keep][order], weights[keep][order]

    fit = local_regression(x, y, weights, x, span=span, degree=degree)
    variance = local_regression(x, (y - fit) ** 2, weights, x, span=span, degree=degree)
    sd = np.sqrt(np.clip(variance, 0, None))

    return LoessBand(x=x, fit=fit, sd=sd, upper=fit + nsigma * sd, lower=fit - nsigma * sd)
