"""Grid of single-gene plots annotated with ranking information."""

import dataclasses
import warnings
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import matplotlib.pyplot as plt
from anndata import AnnData
from tqdm.auto import tqdm

from .genes import fit_and_plot
from .scene import Scene
from .._utils.errors import GridTooSmallError, LineageDEError
from ..tools.ranking import Ranking


@dataclass
class PanelLayout:
    """Per-gene scenes arranged on an ``nrows`` x ``ncols`` grid, row by row."""

    nrows: int
    ncols: int
    genes: List[str] = field(default_factory=list)
    scenes: List[Scene] = field(default_factory=list)
    failures: Dict[str, Exception] = field(default_factory=dict)

    @property
    def subtitles(self) -> List[str]:
        return [scene.subtitle for scene in self.scenes]

    @property
    def n_empty(self) -> int:
        return self.nrows * self.ncols - len(self.scenes)

    def draw(self, figsize: Optional[Tuple[float, float]] = None) -> plt.Figure:
        """
        Draw all scenes on one figure; unused grid cells are left blank.

        Returns
        -------
        plt.Figure
            Figure with ``nrows * ncols`` subplots
        """
        if figsize is None:
            figsize = (4 * self.ncols, 3.5 * self.nrows)
        fig, axes = plt.subplots(self.nrows, self.ncols, figsize=figsize, squeeze=False)

        for ax, scene in zip(axes.flat, self.scenes):
            scene.draw(ax)
        for ax in axes.flat[len(self.scenes):]:
            ax.axis('off')

        plt.tight_layout()
        return fig


def panel_grid(n_genes: int, grid_size: Optional[Sequence[int]] = None) -> Tuple[int, int]:
    """
    Rows and columns of a panel holding ``n_genes`` plots.

    Defaults to the smallest square grid. Raises ``GridTooSmallError`` if
    an explicit ``grid_size`` has fewer cells than genes.
    """
    if grid_size is None:
        side = max(int(np.ceil(np.sqrt(n_genes))), 1)
        return side, side

    nrows, ncols = (int(v) for v in grid_size)
    if nrows * ncols < n_genes:
        raise GridTooSmallError(
            f"A {nrows}x{ncols} grid cannot hold {n_genes} genes."
        )
    return nrows, ncols


def multigene_panel(
    adata: AnnData,
    ranking: Ranking,
    genes: Sequence[str],
    null_model: bool = False,
    grid_size: Optional[Sequence[int]] = None,
    span: float = 0.5,
    show_progress: bool = False
) -> PanelLayout:
    """
    Fit and lay out the loess plots of several ranked genes.

    Each subplot is subtitled with the gene's distance and rank, e.g.
    ``"dtw.dist: 12.3 | dtw.rank: 4"``. Genes that cannot be plotted (not
    in the dataset or the ranking, or with an empty lineage) are skipped
    and collected in ``PanelLayout.failures``.

    Parameters
    ----------
    adata : AnnData
        Annotated data object registered with ``pp.setup_lineages``
    ranking : Ranking
        Ranking holding the distance and rank of every gene
    genes : sequence of str
        Genes to plot, in panel order
    null_model : bool, optional (default: False)
        If True, draw the null model in each subplot
    grid_size : (int, int), optional
        Number of rows and columns. If None, uses a square grid
    span : float, optional (default: 0.5)
        Loess span
    show_progress : bool, optional (default: False)
        If True, show a progress bar over genes

    Returns
    -------
    PanelLayout
    """
    nrows, ncols = panel_grid(len(genes), grid_size)
    panel = PanelLayout(nrows=nrows, ncols=ncols)

    for gene in tqdm(genes, desc='Plotting genes', disable=not show_progress):
        try:
            subtitle = ranking.subtitle(gene)
            result = fit_and_plot(adata, gene, method='loess', null_model=null_model, span=span)
        except LineageDEError as err:
            panel.failures[gene] = err
            continue
        panel.genes.append(gene)
        panel.scenes.append(dataclasses.replace(result.scene, subtitle=subtitle))

    if panel.failures:
        warnings.warn(
            f"Skipped {len(panel.failures)} gene(s): "
            + ", ".join(f"{gene} ({err})" for gene, err in panel.failures.items()),
            stacklevel=2,
        )

    return panel


def plot_multigenes(
    adata: AnnData,
    ranking: Ranking,
    genes: Sequence[str],
    null_model: bool = False,
    grid_size: Optional[Sequence[int]] = None,
    span: float = 0.5,
    figsize: Optional[Tuple[float, float]] = None,
    show_progress: bool = False
) -> plt.Figure:
    """
    Plot several ranked genes on one grid.

    See ``multigene_panel`` for the parameters.

    Returns
    -------
    plt.Figure
        Figure with one subplot per gene
    """
    panel = multigene_panel(
        adata, ranking, genes, null_model=null_model, grid_size=grid_size,
        span=span, show_progress=show_progress,
    )
    return panel.draw(figsize=figsize)
