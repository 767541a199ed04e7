"""
lineageDE: lineage differential expression visualization
========================================================

A package for plotting gene expression along two cell lineages together
with per-lineage regression curves and a shared null model.

Submodules
----------
pp : preprocessing
    Building and registering two-lineage datasets
tl : tools
    Lineage subsets, prediction grids, loess and spline GLM fits, rankings
pl : plotting
    Single-gene scenes and multi-gene panels

Usage
-----
Import lineageDE with::

    import lineageDE as lde

Then access functions via::

    lde.pp.setup_lineages(adata)
    models = lde.tl.fit_lineage_curves(adata, 'Gata1')
    lde.pl.plot_gene_loess(adata, 'Gata1', show_sd=True).draw()
    lde.pl.plot_multigenes(adata, ranking, ['Gata1', 'Mpo', 'Elane'])
"""

__version__ = '0.1.0'

# Import submodules
from . import preprocessing as pp
from . import tools as tl
from . import plotting as pl

# Expose key classes and functions at top level
from .preprocessing import setup_lineages, lineage_dataset
from .tools import extract_lineage_subset, fit_lineage_curves, LocalRegression, SplineGLM, Ranking
from .plotting import fit_and_plot, plot_multigenes
from ._utils.errors import (
    LineageDEError,
    UnknownGeneError,
    EmptyLineageError,
    FitDivergenceError,
    GridTooSmallError,
    DegenerateThresholdWarning
)

__all__ = [
    'pp',
    'tl',
    'pl',
    'setup_lineages',
    'lineage_dataset',
    'extract_lineage_subset',
    'fit_lineage_curves',
    'LocalRegression',
    'SplineGLM',
    'Ranking',
    'fit_and_plot',
    'plot_multigenes',
    'LineageDEError',
    'UnknownGeneError',
    'EmptyLineageError',
    'FitDivergenceError',
    'GridTooSmallError',
    'DegenerateThresholdWarning',
]
