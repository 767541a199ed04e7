"""Tools module for lineage subsets, regression fits and rankings."""

from .subset import (
    LineageSubset,
    transform_counts,
    extract_lineage_subset,
    prediction_grid,
    lineage_grids,
    unshared_threshold,
    unshared_cells
)
from .curves import FittedCurve, RegressionStrategy
from .loess import LocalRegression, local_regression, loess_sd, LoessBand
from .splines import SplineGLM, estimate_nb_size
from .regression import get_strategy, fit_lineage_curves, LINEAGE_KEYS, NULL_KEY
from .ranking import Ranking

__all__ = [
    # Subsets and grids
    'LineageSubset',
    'transform_counts',
    'extract_lineage_subset',
    'prediction_grid',
    'lineage_grids',
    'unshared_threshold',
    'unshared_cells',
    # Regression
    'FittedCurve',
    'RegressionStrategy',
    'LocalRegression',
    'local_regression',
    'loess_sd',
    'LoessBand',
    'SplineGLM',
    'estimate_nb_size',
    'get_strategy',
    'fit_lineage_curves',
    'LINEAGE_KEYS',
    'NULL_KEY',
    # Rankings
    'Ranking',
]
