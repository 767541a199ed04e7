"""Plotting module for visualization functions."""

from .scene import Layer, Scene
from .genes import GenePlot, fit_and_plot, plot_gene_loess, plot_gene_splines
from .multigenes import PanelLayout, panel_grid, multigene_panel, plot_multigenes

__all__ = [
    'Layer',
    'Scene',
    'GenePlot',
    'fit_and_plot',
    'plot_gene_loess',
    'plot_gene_splines',
    'PanelLayout',
    'panel_grid',
    'multigene_panel',
    'plot_multigenes',
]
