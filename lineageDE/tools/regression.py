"""Per-lineage and null model regression fits for one gene."""

from typing import Dict, Optional

from anndata import AnnData

from .curves import FittedCurve, RegressionStrategy
from .loess import LocalRegression
from .splines import SplineGLM
from .subset import extract_lineage_subset

LINEAGE_KEYS = ('lineage1', 'lineage2')
NULL_KEY = 'null'


def get_strategy(
    method: str = 'loess',
    span: float = 0.5,
    spline_df: int = 3,
    family: str = 'gaussian'
) -> RegressionStrategy:
    """
    Build a regression strategy by name.

    Parameters
    ----------
    method : str, optional (default: 'loess')
        'loess' for local regression or 'spline' for the spline GLM
    span : float, optional (default: 0.5)
        Loess span
    spline_df : int, optional (default: 3)
        Spline degrees of freedom
    family : str, optional (default: 'gaussian')
        Spline GLM family, 'gaussian' or 'negbinomial'

    Returns
    -------
    RegressionStrategy
    """
    if method == 'loess':
        return LocalRegression(span=span)
    if method == 'spline':
        return SplineGLM(df=spline_df, family=family)
    raise ValueError(f"Unknown method: {method}. Choose from ['loess', 'spline']")


def _family(strategy):
    return getattr(strategy, 'family', 'gaussian')


def fit_lineage_curves(
    adata: AnnData,
    gene: str,
    strategy: Optional[RegressionStrategy] = None,
    null_model: bool = True
) -> Dict[str, FittedCurve]:
    """
    Fit one curve per lineage and, optionally, the pooled null model.

    Parameters
    ----------
    adata : AnnData
        Annotated data object registered with ``pp.setup_lineages``
    gene : str
        Gene name
    strategy : RegressionStrategy, optional
        Smoother to use. Defaults to ``LocalRegression(span=0.5)``
    null_model : bool, optional (default: True)
        If True, also fit both lineages pooled together

    Returns
    -------
    dict
        'lineage1', 'lineage2' and, if requested, 'null' mapped to
        FittedCurve objects

    Raises
    ------
    UnknownGeneError, EmptyLineageError
        If the data of a lineage cannot be extracted.
    FitDivergenceError
        If a spline GLM fit does not converge.
    """
    strategy = strategy if strategy is not None else LocalRegression()
    family = _family(strategy)

    subsets = [extract_lineage_subset(adata, gene, lineage, family=family)
               for lineage in range(len(LINEAGE_KEYS))]

    models = {key: strategy.fit(subset) for key, subset in zip(LINEAGE_KEYS, subsets)}
    if null_model:
        models[NULL_KEY] = strategy.fit(subsets[0].concat(subsets[1]))

    return models
