"""Per-lineage subsets, prediction grids and unshared-cell selection."""

import warnings
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
from anndata import AnnData

from .._utils.errors import EmptyLineageError, DegenerateThresholdWarning
from .._utils.io import get_counts, get_pseudotime, get_weights

FAMILIES = ('gaussian', 'negbinomial')


@dataclass(frozen=True)
class LineageSubset:
    """
    Cells of one lineage with their pseudotime, expression and weight.

    Only cells with a nonzero weight on the lineage are included. For a
    pooled (null model) subset ``lineage`` is None.
    """

    cells: np.ndarray
    pseudotime: np.ndarray
    expression: np.ndarray
    weights: np.ndarray
    lineage: Optional[int] = None

    def __len__(self):
        return len(self.cells)

    def concat(self, other: 'LineageSubset') -> 'LineageSubset':
        """Stack two subsets row-wise (no deduplication)."""
        return LineageSubset(
            cells=np.concatenate([self.cells, other.cells]),
            pseudotime=np.concatenate([self.pseudotime, other.pseudotime]),
            expression=np.concatenate([self.expression, other.expression]),
            weights=np.concatenate([self.weights, other.weights]),
        )

    def finite(self) -> 'LineageSubset':
        """Drop cells with undefined pseudotime or expression."""
        keep = np.isfinite(self.pseudotime) & np.isfinite(self.expression)
        if keep.all():
            return self
        return LineageSubset(
            cells=self.cells[keep],
            pseudotime=self.pseudotime[keep],
            expression=self.expression[keep],
            weights=self.weights[keep],
            lineage=self.lineage,
        )


def transform_counts(counts, family: str = 'gaussian'):
    """
    Transform raw counts into the response of a regression family.

    ``gaussian`` uses log1p counts, ``negbinomial`` rounded counts clipped
    at zero.
    """
    if family not in FAMILIES:
        raise ValueError(f"Unknown family: {family}. Choose from {list(FAMILIES)}")
    if family == 'negbinomial':
        return np.clip(np.round(counts), 0, None)
    return np.log1p(counts)


def extract_lineage_subset(
    adata: AnnData,
    gene: str,
    lineage: int,
    family: str = 'gaussian'
) -> LineageSubset:
    """
    Extract the cells of one lineage for one gene.

    Parameters
    ----------
    adata : AnnData
        Annotated data object registered with ``pp.setup_lineages``
    gene : str
        Gene name
    lineage : int
        Lineage index, 0 or 1
    family : str, optional (default: 'gaussian')
        Regression family deciding the expression transform

    Returns
    -------
    LineageSubset
        Cells with nonzero weight on ``lineage``, in dataset order.

    Raises
    ------
    UnknownGeneError
        If the gene is not in the dataset.
    EmptyLineageError
        If no cell has a nonzero weight on the lineage.
    """
    y = transform_counts(get_counts(adata, gene), family)
    w = get_weights(adata, lineage)
    t = get_pseudotime(adata, lineage)

    w = w[w != 0]
    if len(w) == 0:
        raise EmptyLineageError(lineage)

    cells = w.index
    return LineageSubset(
        cells=cells.to_numpy(),
        pseudotime=t.loc[cells].to_numpy(),
        expression=y.loc[cells].to_numpy(),
        weights=w.to_numpy(),
        lineage=lineage,
    )


def prediction_grid(adata: AnnData, lineage: int, n: int) -> np.ndarray:
    """
    Regular pseudotime grid from 0 to the lineage's largest pseudotime.

    The maximum is taken over every cell with a defined pseudotime.
    """
    t_max = np.nanmax(get_pseudotime(adata, lineage).to_numpy())
    return np.linspace(0, t_max, num=n)


def lineage_grids(
    adata: AnnData,
    subsets: Sequence[LineageSubset],
    shared_grid_length: bool = True
) -> List[np.ndarray]:
    """
    Prediction grids for both lineages.

    Parameters
    ----------
    adata : AnnData
        Annotated data object
    subsets : sequence of LineageSubset
        Subsets of lineage 1 and lineage 2
    shared_grid_length : bool, optional (default: True)
        If True, both grids have as many points as the lineage 1 subset
        has cells, which keeps results comparable with earlier analyses.
        If False, each grid follows its own subset size.

    Returns
    -------
    list of np.ndarray
        One grid per lineage
    """
    grids = []
    for lineage, subset in enumerate(subsets):
        n = len(subsets[0]) if shared_grid_length else len(subset)
        grids.append(prediction_grid(adata, lineage, n))
    return grids


def unshared_threshold(weights) -> float:
    """
    Weight cutoff above which a cell counts as specific to a lineage.

    The cutoff is ``0.5 + sd(w)`` where ``w`` are the weights strictly
    between 0 and 1 and ``sd`` is the sample standard deviation. With
    fewer than two such weights the standard deviation is taken as 0.
    """
    w = np.asarray(weights, dtype=float)
    interior = w[(w > 0) & (w < 1)]
    if len(interior) < 2:
        warnings.warn(
            "Fewer than two lineage weights lie strictly between 0 and 1; "
            "using 0.5 as the unshared-cell threshold.",
            DegenerateThresholdWarning,
            stacklevel=2,
        )
        return 0.5
    return 0.5 + np.std(interior, ddof=1)


def unshared_cells(adata: AnnData, lineage: int) -> pd.Index:
    """
    Cells whose weight on ``lineage`` exceeds ``unshared_threshold``.

    Parameters
    ----------
    adata : AnnData
        Annotated data object
    lineage : int
        Lineage index, 0 or 1

    Returns
    -------
    pd.Index
        Names of the selected cells
    """
    w = get_weights(adata, lineage)
    return w.index[w.to_numpy() > unshared_threshold(w.to_numpy())]
