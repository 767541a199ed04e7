"""Building and registering two-lineage datasets."""

import numpy as np
import pandas as pd
from typing import Optional
from anndata import AnnData

from .._utils.io import PSEUDOTIME_KEY, WEIGHTS_KEY, N_LINEAGES


def setup_lineages(
    adata: AnnData,
    pseudotime_key: str = PSEUDOTIME_KEY,
    weights_key: str = WEIGHTS_KEY,
    counts_key: Optional[str] = None,
    copy: bool = False
) -> Optional[AnnData]:
    """
    Validate and register the lineage annotations of a dataset.

    Parameters
    ----------
    adata : AnnData
        Annotated data object (cells x genes) with raw counts
    pseudotime_key : str, optional (default: 'pseudotime')
        Key in adata.obsm holding a (n_cells x 2) pseudotime matrix.
        Undefined pseudotimes are NaN.
    weights_key : str, optional (default: 'lineage_weights')
        Key in adata.obsm holding a (n_cells x 2) weight matrix with
        values in [0, 1]
    counts_key : str, optional
        Key in adata.layers for raw counts. If None, uses adata.X
    copy : bool, optional (default: False)
        If True, return a copy instead of modifying in-place

    Returns
    -------
    AnnData or None
        Returns adata if copy=True, otherwise None.
        Adds to adata.uns['lineageDE'] the keys used by downstream functions.
    """
    adata = adata.copy() if copy else adata

    if not adata.obs_names.is_unique:
        raise ValueError("Cell names must be unique. Run adata.obs_names_make_unique() first.")
    if counts_key is not None and counts_key not in adata.layers:
        raise ValueError(f"Layer '{counts_key}' not found in adata.layers")

    for key in (pseudotime_key, weights_key):
        if key not in adata.obsm:
            raise ValueError(f"'{key}' not found in adata.obsm")
        shape = np.shape(adata.obsm[key])
        if len(shape) != 2 or shape[1] != N_LINEAGES:
            raise ValueError(
                f"adata.obsm['{key}'] must have shape (n_cells, {N_LINEAGES}), got {shape}"
            )

    w = np.asarray(adata.obsm[weights_key], dtype=float)
    finite = w[np.isfinite(w)]
    if np.any(finite < 0) or np.any(finite > 1):
        raise ValueError(f"Lineage weights in adata.obsm['{weights_key}'] must lie in [0, 1]")

    if 'lineageDE' not in adata.uns:
        adata.uns['lineageDE'] = {}
    adata.uns['lineageDE'].update(
        pseudotime_key=pseudotime_key,
        weights_key=weights_key,
        counts_key=counts_key,
    )

    return adata if copy else None


def lineage_dataset(
    counts: pd.DataFrame,
    pseudotime: pd.DataFrame,
    weights: pd.DataFrame
) -> AnnData:
    """
    Build a registered lineage dataset from count, pseudotime and weight tables.

    Parameters
    ----------
    counts : pd.DataFrame
        Raw counts, genes x cells (columns are cell names)
    pseudotime : pd.DataFrame
        Cells x 2 pseudotime table indexed by cell name
    weights : pd.DataFrame
        Cells x 2 weight table indexed by cell name

    Returns
    -------
    AnnData
        Cells x genes object with counts in X, pseudotime and weights in
        obsm, registered with ``setup_lineages``. Tables are aligned on
        the cell names of ``counts``.
    """
    cells = counts.columns
    missing = cells.difference(pseudotime.index).union(cells.difference(weights.index))
    if len(missing) > 0:
        raise ValueError(f"Cells missing from pseudotime or weights: {list(missing[:5])}")

    adata = AnnData(
        X=counts.T.to_numpy(dtype=float),
        obs=pd.DataFrame(index=cells.astype(str)),
        var=pd.DataFrame(index=counts.index.astype(str)),
    )
    adata.obsm[PSEUDOTIME_KEY] = pseudotime.loc[cells].to_numpy(dtype=float)
    adata.obsm[WEIGHTS_KEY] = weights.loc[cells].to_numpy(dtype=float)

    setup_lineages(adata)
    return adata
