"""Accessors for the lineage data stored on an AnnData object."""

import numpy as np
import pandas as pd
import scipy.sparse as sp
from anndata import AnnData

from .errors import UnknownGeneError

PSEUDOTIME_KEY = 'pseudotime'
WEIGHTS_KEY = 'lineage_weights'
N_LINEAGES = 2


def to_numpy(matrix):
    """
    Convert matrix to NumPy array (handles sparse matrices).

    Args:
        matrix (np.ndarray or scipy.sparse matrix): Input matrix.

    Returns:
        np.ndarray: Dense NumPy array.
    """
    if sp.issparse(matrix):
        return matrix.toarray()
    return np.asarray(matrix)


def get_lineage_keys(adata: AnnData) -> dict:
    """
    Get the keys registered by ``pp.setup_lineages``.

    Falls back to the default keys when the dataset was never registered.

    Parameters
    ----------
    adata : AnnData
        Annotated data object

    Returns
    -------
    dict
        Mapping with 'pseudotime_key', 'weights_key' and 'counts_key'
    """
    keys = {
        'pseudotime_key': PSEUDOTIME_KEY,
        'weights_key': WEIGHTS_KEY,
        'counts_key': None,
    }
    keys.update(adata.uns.get('lineageDE', {}))
    return keys


def _check_lineage(lineage):
    if lineage not in range(N_LINEAGES):
        raise ValueError(f"lineage must be 0 or 1, got {lineage!r}")


def _obsm_frame(adata, key):
    if key not in adata.obsm:
        raise ValueError(
            f"'{key}' not found in adata.obsm. Run pp.setup_lineages() first."
        )
    values = np.asarray(adata.obsm[key], dtype=float)
    return pd.DataFrame(values, index=adata.obs_names)


def get_pseudotime(adata: AnnData, lineage: int) -> pd.Series:
    """
    Pseudotime of every cell on one lineage, indexed by cell name.

    Undefined values are NaN.
    """
    _check_lineage(lineage)
    key = get_lineage_keys(adata)['pseudotime_key']
    return _obsm_frame(adata, key)[lineage]


def get_weights(adata: AnnData, lineage: int) -> pd.Series:
    """
    Lineage-membership weight of every cell, indexed by cell name.

    Undefined weights are treated as 0 (not on the lineage).
    """
    _check_lineage(lineage)
    key = get_lineage_keys(adata)['weights_key']
    return _obsm_frame(adata, key)[lineage].fillna(0.0)


def get_counts(adata: AnnData, gene: str) -> pd.Series:
    """
    Raw counts of one gene, indexed by cell name.

    Parameters
    ----------
    adata : AnnData
        Annotated data object
    gene : str
        Gene name

    Returns
    -------
    pd.Series
        Counts per cell

    Raises
    ------
    UnknownGeneError
        If ``gene`` is not in ``adata.var_names``.
    """
    if gene not in adata.var_names:
        raise UnknownGeneError(gene)
    idx = adata.var_names.get_loc(gene)

    counts_key = get_lineage_keys(adata)['counts_key']
    matrix = adata.X if counts_key is None else adata.layers[counts_key]
    values = to_numpy(matrix[:, idx]).ravel().astype(float)
    return pd.Series(values, index=adata.obs_names, name=gene)
