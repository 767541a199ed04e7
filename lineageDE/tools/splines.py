"""Natural cubic spline GLM fits (gaussian and negative binomial)."""

import warnings

import numpy as np
import patsy
import statsmodels.api as sm
from scipy import stats
from scipy.optimize import minimize_scalar
from statsmodels.tools.sm_exceptions import ConvergenceWarning

from .._utils.errors import FitDivergenceError
from .curves import FittedCurve, RegressionStrategy
from .subset import FAMILIES, LineageSubset


def _nb_loglik(y, mu, weights, size):
    p = size / (size + mu)
    return np.sum(weights * stats.nbinom.logpmf(y, size, p))


def estimate_nb_size(y, mu, weights, bounds=(-10.0, 10.0)) -> float:
    """
    Maximum likelihood negative binomial size given fitted means.

    The search runs over ``log(size)`` within ``bounds``.
    """
    res = minimize_scalar(
        lambda log_size: -_nb_loglik(y, mu, weights, np.exp(log_size)),
        bounds=bounds,
        method='bounded',
        options={'xatol': 1e-8},
    )
    if not res.success or not np.isfinite(res.x):
        raise FitDivergenceError("Negative binomial size estimation did not converge.")
    return float(np.exp(res.x))


class SplineGLM(RegressionStrategy):
    """
    Generalized linear model on a natural cubic spline basis of pseudotime.

    Parameters
    ----------
    df : int, optional (default: 3)
        Degrees of freedom of the spline basis
    family : str, optional (default: 'gaussian')
        'gaussian' (identity link on log1p counts) or 'negbinomial'
        (log link on rounded counts, size estimated from the data)
    max_iter : int, optional (default: 25)
        Maximum number of alternations between the GLM fit and the
        negative binomial size estimate
    tol : float, optional (default: 1e-5)
        Convergence tolerance on ``log(size)``
    """

    name = 'spline'
    label = '(VGAM, splines)'

    def __init__(
        self,
        df: int = 3,
        family: str = 'gaussian',
        max_iter: int = 25,
        tol: float = 1e-5
    ):
        if family not in FAMILIES:
            raise ValueError(f"Unknown family: {family}. Choose from {list(FAMILIES)}")
        self.df = df
        self.family = family
        self.max_iter = max_iter
        self.tol = tol

    def __repr__(self):
        return f"SplineGLM(df={self.df}, family='{self.family}')"

    @property
    def formula(self) -> str:
        return f"cr(x, df={self.df}, constraints='center')"

    def _glm(self, y, design, weights, family, start_params=None):
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', ConvergenceWarning)
            try:
                res = sm.GLM(y, design, family=family, var_weights=weights).fit(
                    start_params=start_params
                )
            except (np.linalg.LinAlgError, ValueError, OverflowError) as err:
                raise FitDivergenceError(f"Spline GLM fit failed: {err}") from err
        if not getattr(res, 'converged', True) or not np.all(np.isfinite(res.params)):
            raise FitDivergenceError("Spline GLM fit did not converge.")
        return res

    def fit(self, subset: LineageSubset) -> FittedCurve:
        data = self._training_data(subset)
        y, w = data.expression, data.weights

        try:
            design = patsy.dmatrix(self.formula, {'x': data.pseudotime})
        except (patsy.PatsyError, ValueError, np.linalg.LinAlgError) as err:
            raise FitDivergenceError(f"Cannot build spline basis: {err}") from err
        X = np.asarray(design)

        size = None
        if self.family == 'gaussian':
            res = self._glm(y, X, w, sm.families.Gaussian())
        else:
            start = np.zeros(X.shape[1])
            start[0] = np.log(max(np.mean(y), 1e-8))
            size = 1.0
            for _ in range(self.max_iter):
                family = sm.families.NegativeBinomial(alpha=1.0 / size)
                res = self._glm(y, X, w, family, start_params=start)
                new_size = estimate_nb_size(y, res.fittedvalues, w)
                converged = abs(np.log(new_size) - np.log(size)) < self.tol
                size, start = new_size, res.params
                if converged:
                    break
            else:
                raise FitDivergenceError(
                    f"Negative binomial fit did not converge in {self.max_iter} iterations."
                )

        model = {
            'result': res,
            'design_info': design.design_info,
            'bounds': (data.pseudotime.min(), data.pseudotime.max()),
            'size': size,
            'family': self.family,
        }
        return FittedCurve(strategy=self, model=model, subset=subset, param=self.df)

    def _linear_predictor(self, curve, x):
        X = patsy.build_design_matrices([curve.model['design_info']], {'x': x})[0]
        return np.asarray(X) @ np.asarray(curve.model['result'].params)

    def predict(self, curve: FittedCurve, x) -> np.ndarray:
        x = np.atleast_1d(np.asarray(x, dtype=float))
        eta = np.full(x.shape, np.nan)
        ok = np.isfinite(x)
        if ok.any():
            lo, hi = curve.model['bounds']
            xo = x[ok]
            eta_ok = self._linear_predictor(curve, np.clip(xo, lo, hi))

            # natural splines are linear beyond the boundary knots
            outside = (xo < lo) | (xo > hi)
            if outside.any() and hi > lo:
                eps = (hi - lo) * 1e-4
                e_lo, e_lo2, e_hi2, e_hi = self._linear_predictor(
                    curve, np.array([lo, lo + eps, hi - eps, hi])
                )
                below, above = xo < lo, xo > hi
                eta_ok[below] = e_lo + (e_lo2 - e_lo) / eps * (xo[below] - lo)
                eta_ok[above] = e_hi + (e_hi - e_hi2) / eps * (xo[above] - hi)
            eta[ok] = eta_ok

        if curve.model['family'] == 'negbinomial':
            return np.exp(eta)
        return eta
