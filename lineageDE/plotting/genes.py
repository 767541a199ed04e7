"""Plotting functions for gene-level lineage regressions."""

import warnings
from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np
import matplotlib.pyplot as plt
from anndata import AnnData

from .scene import Layer, Scene
from .._utils.errors import FitDivergenceError
from .._utils.io import get_counts, get_pseudotime, get_weights
from ..tools.curves import FittedCurve, RegressionStrategy
from ..tools.loess import LocalRegression, loess_sd
from ..tools.regression import LINEAGE_KEYS, NULL_KEY, fit_lineage_curves, get_strategy
from ..tools.subset import lineage_grids, transform_counts, unshared_cells

LINEAGE_STYLES = (
    {'color': 'red', 'marker': 'o'},
    {'color': 'blue', 'marker': '^'},
)
NULL_MODEL_COLOR = '#F8766D'
BAND_ALPHA = 0.2
UNSHARED_ALPHA = 0.4


@dataclass
class GenePlot:
    """Scene of one gene together with the curves fitted for it."""

    scene: Scene
    models: Dict[str, FittedCurve] = field(default_factory=dict)

    def draw(self, ax: Optional[plt.Axes] = None) -> plt.Axes:
        return self.scene.draw(ax)


def _raw_scene(adata, gene, strategy, show_legend):
    y = transform_counts(get_counts(adata, gene), getattr(strategy, 'family', 'gaussian'))
    scene = Scene(title=gene, subtitle=strategy.label, show_legend=show_legend)

    # lineage 2 first so lineage 1 ends up on top
    for lineage in reversed(range(len(LINEAGE_STYLES))):
        style = LINEAGE_STYLES[lineage]
        t = get_pseudotime(adata, lineage)
        scene.add(Layer(
            'point', x=t.to_numpy(), y=y.loc[t.index].to_numpy(),
            alpha=get_weights(adata, lineage).to_numpy(),
            color=style['color'], marker=style['marker'], filled=False,
            name=f'data_{LINEAGE_KEYS[lineage]}',
        ))
    return scene


def _add_curves(adata, scene, models, shared_grid_length):
    grids = lineage_grids(
        adata, [models[key].subset for key in LINEAGE_KEYS], shared_grid_length
    )
    for key, grid, style in zip(LINEAGE_KEYS, grids, LINEAGE_STYLES):
        scene.add(Layer('line', x=grid, y=models[key].predict(grid),
                        color=style['color'], name=key))
    if NULL_KEY in models:
        scene.add(Layer('line', x=grids[0], y=models[NULL_KEY].predict(grids[0]),
                        color=NULL_MODEL_COLOR, linestyle='--', label='null model',
                        name=NULL_KEY))
    return grids


def _add_sd_bands(adata, gene, scene, span):
    y = transform_counts(get_counts(adata, gene), 'gaussian')
    for lineage, style in enumerate(LINEAGE_STYLES):
        t = get_pseudotime(adata, lineage)
        band = loess_sd(t.to_numpy(), y.loc[t.index].to_numpy(),
                        get_weights(adata, lineage).to_numpy(), span=span, nsigma=1)
        scene.add(Layer('ribbon', x=band.x, y=band.lower, y2=band.upper,
                        color=style['color'], alpha=BAND_ALPHA,
                        name=f'sd_{LINEAGE_KEYS[lineage]}'))


def _add_unshared(adata, scene, models):
    for lineage, (key, style) in enumerate(zip(LINEAGE_KEYS, LINEAGE_STYLES)):
        cells = unshared_cells(adata, lineage)
        t = get_pseudotime(adata, lineage).loc[cells].to_numpy()
        t = t[np.isfinite(t)]
        scene.add(Layer('point', x=t, y=models[key].predict(t), color=style['color'],
                        alpha=UNSHARED_ALPHA, name=f'unshared_{key}'))


def fit_and_plot(
    adata: AnnData,
    gene: str,
    method: str = 'loess',
    regression: bool = True,
    null_model: bool = True,
    span: float = 0.5,
    spline_df: int = 3,
    family: str = 'gaussian',
    show_sd: bool = False,
    show_unshared: bool = False,
    show_legend: bool = False,
    shared_grid_length: bool = True,
    strategy: Optional[RegressionStrategy] = None,
    ax: Optional[plt.Axes] = None
) -> GenePlot:
    """
    Plot the raw expression of a gene along both lineages with its fits.

    Raw observations of both lineages are drawn with a transparency equal
    to each cell's lineage weight (lineage 1: red circles, lineage 2: blue
    triangles). Each lineage gets its own regression curve, evaluated on a
    regular pseudotime grid, and the pooled null model is drawn dashed.

    Parameters
    ----------
    adata : AnnData
        Annotated data object registered with ``pp.setup_lineages``
    gene : str
        Gene name
    method : str, optional (default: 'loess')
        'loess' (local regression) or 'spline' (natural spline GLM)
    regression : bool, optional (default: True)
        If True, fit and draw the per-lineage curves
    null_model : bool, optional (default: True)
        If True, fit and draw the null model on both lineages pooled
    span : float, optional (default: 0.5)
        Loess span
    spline_df : int, optional (default: 3)
        Degrees of freedom of the spline basis
    family : str, optional (default: 'gaussian')
        Spline GLM family: 'gaussian' or 'negbinomial'
    show_sd : bool, optional (default: False)
        If True, draw one standard deviation loess bands (loess only)
    show_unshared : bool, optional (default: False)
        If True, draw fitted values of the cells specific to each lineage
    show_legend : bool, optional (default: False)
        If True, show the legend
    shared_grid_length : bool, optional (default: True)
        If True, both prediction grids have the size of the lineage 1
        subset; if False, each has the size of its own lineage subset
    strategy : RegressionStrategy, optional
        Preconfigured strategy; overrides method, span, spline_df and family
    ax : plt.Axes, optional
        If given, the scene is drawn on these axes

    Returns
    -------
    GenePlot
        ``scene`` with all layers and ``models`` mapping 'lineage1',
        'lineage2' and 'null' to fitted curves (empty without regression)

    Raises
    ------
    UnknownGeneError
        If the gene is not in the dataset.
    EmptyLineageError
        If regression is requested and a lineage has no cell.
    """
    if strategy is None:
        strategy = get_strategy(method, span=span, spline_df=spline_df, family=family)
    if show_sd and not isinstance(strategy, LocalRegression):
        raise ValueError("show_sd is only available with method='loess'")

    scene = _raw_scene(adata, gene, strategy, show_legend)
    result = GenePlot(scene=scene)

    if regression:
        try:
            result.models = fit_lineage_curves(adata, gene, strategy, null_model=null_model)
        except FitDivergenceError as err:
            warnings.warn(
                f"Regression for gene '{gene}' skipped, showing raw data only: {err}",
                RuntimeWarning,
                stacklevel=2,
            )
            if ax is not None:
                result.draw(ax)
            return result
        _add_curves(adata, scene, result.models, shared_grid_length)

    if show_sd:
        _add_sd_bands(adata, gene, scene, strategy.span)

    if show_unshared and result.models:
        _add_unshared(adata, scene, result.models)

    if ax is not None:
        result.draw(ax)
    return result


def plot_gene_loess(
    adata: AnnData,
    gene: str,
    regression: bool = True,
    null_model: bool = True,
    span: float = 0.5,
    show_unshared: bool = False,
    show_sd: bool = False,
    show_legend: bool = False,
    ax: Optional[plt.Axes] = None
) -> GenePlot:
    """
    Plot one gene's raw data and its loess regressions.

    See ``fit_and_plot`` for the parameters.
    """
    return fit_and_plot(
        adata, gene, method='loess', regression=regression, null_model=null_model,
        span=span, show_sd=show_sd, show_unshared=show_unshared,
        show_legend=show_legend, ax=ax,
    )


def plot_gene_splines(
    adata: AnnData,
    gene: str,
    family: str = 'gaussian',
    regression: bool = True,
    show_unshared: bool = False,
    null_model: bool = True,
    spline_df: int = 3,
    show_legend: bool = False,
    ax: Optional[plt.Axes] = None
) -> GenePlot:
    """
    Plot one gene's raw data and its natural spline GLM regressions.

    With ``family='negbinomial'`` the raw counts are modelled directly and
    the curves show the fitted mean count.
    """
    return fit_and_plot(
        adata, gene, method='spline', regression=regression, null_model=null_model,
        spline_df=spline_df, family=family, show_unshared=show_unshared,
        show_legend=show_legend, ax=ax,
    )
