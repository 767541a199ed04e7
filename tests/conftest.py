"""Shared fixtures: small synthetic two-lineage datasets."""

import matplotlib
matplotlib.use('Agg')

import numpy as np
import pandas as pd
import pytest
import matplotlib.pyplot as plt
from anndata import AnnData

import lineageDE as lde


def make_adata(counts, pseudotime, weights, cells=None, genes=None):
    """Registered AnnData from cells x genes counts and cells x 2 tables."""
    counts = np.asarray(counts, dtype=float)
    n_cells, n_genes = counts.shape
    cells = cells if cells is not None else [f'cell{i:03d}' for i in range(n_cells)]
    genes = genes if genes is not None else [f'G{j}' for j in range(n_genes)]

    adata = AnnData(
        X=counts,
        obs=pd.DataFrame(index=cells),
        var=pd.DataFrame(index=genes),
    )
    adata.obsm['pseudotime'] = np.asarray(pseudotime, dtype=float)
    adata.obsm['lineage_weights'] = np.asarray(weights, dtype=float)
    lde.pp.setup_lineages(adata)
    return adata


@pytest.fixture
def branching_adata():
    """
    60 cells, 5 genes.

    Cells 0-29 belong to lineage 1 only, 30-49 to lineage 2 only and 50-59
    are early shared cells with fractional weights on both.
    """
    rng = np.random.default_rng(0)
    n1, n2, ns = 30, 20, 10
    n = n1 + n2 + ns

    t = np.full((n, 2), np.nan)
    w = np.zeros((n, 2))
    t[:n1, 0] = rng.uniform(0.2, 1.0, n1)
    w[:n1, 0] = 1.0
    t[n1:n1 + n2, 1] = rng.uniform(0.2, 1.0, n2)
    w[n1:n1 + n2, 1] = 1.0
    shared_t = rng.uniform(0.0, 0.2, ns)
    p = rng.uniform(0.2, 0.8, ns)
    t[n1 + n2:, 0] = shared_t
    t[n1 + n2:, 1] = shared_t
    w[n1 + n2:, 0] = p
    w[n1 + n2:, 1] = 1 - p

    t_any = np.nanmax(t, axis=1)
    up = 2 + 8 * t_any
    down = 10 - 8 * t_any
    mean = np.column_stack([
        np.where(np.isnan(t[:, 1]), up, down),
        np.full(n, 5.0),
        up,
        down,
        3 + 2 * np.sin(3 * t_any),
    ])
    counts = rng.poisson(mean)
    return make_adata(counts, t, w)


@pytest.fixture
def identical_lineages_adata():
    """40 cells sharing the same pseudotime and weights on both lineages."""
    n = 40
    t_col = np.linspace(0, 1, n)
    t = np.column_stack([t_col, t_col])
    w = np.ones((n, 2))
    counts = np.round(20 + 15 * np.sin(4 * t_col))[:, None]
    return make_adata(counts, t, w, genes=['G0'])


@pytest.fixture
def one_sided_adata():
    """10 cells, all on lineage 1 and none on lineage 2."""
    n = 10
    t_col = np.linspace(0, 1, n)
    t = np.column_stack([t_col, t_col])
    w = np.column_stack([np.ones(n), np.zeros(n)])
    counts = np.arange(n, dtype=float)[:, None]
    return make_adata(counts, t, w, genes=['G0'])


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')
