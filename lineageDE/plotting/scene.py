"""Backend-free description of a plot and its matplotlib renderer."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.colors as mcolors

LAYER_KINDS = ('point', 'line', 'ribbon')


@dataclass
class Layer:
    """
    One drawable element of a scene.

    ``point`` and ``line`` layers use ``x`` and ``y``; ``ribbon`` layers
    fill between ``y`` (lower) and ``y2`` (upper). ``alpha`` is either a
    scalar or one value per point.
    """

    kind: str
    x: np.ndarray
    y: np.ndarray
    y2: Optional[np.ndarray] = None
    color: str = 'black'
    alpha: Union[float, np.ndarray] = 1.0
    marker: str = 'o'
    filled: bool = True
    linestyle: str = '-'
    label: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self):
        if self.kind not in LAYER_KINDS:
            raise ValueError(f"Unknown layer kind: {self.kind}. Choose from {list(LAYER_KINDS)}")
        self.x = np.asarray(self.x, dtype=float)
        self.y = np.asarray(self.y, dtype=float)
        if self.kind == 'ribbon':
            if self.y2 is None:
                raise ValueError("Ribbon layers need both y (lower) and y2 (upper)")
            self.y2 = np.asarray(self.y2, dtype=float)

    def __len__(self):
        return len(self.x)


@dataclass
class Scene:
    """
    Ordered collection of layers plus titles and axis settings.

    Drawing order follows the order in which layers were added.
    """

    title: str = ''
    subtitle: str = ''
    xlabel: str = 'times'
    ylabel: str = 'logcounts'
    ylim: Optional[Tuple[float, float]] = (-1.5, 10)
    show_legend: bool = False
    layers: List[Layer] = field(default_factory=list)

    def add(self, layer: Layer) -> 'Scene':
        self.layers.append(layer)
        return self

    def get_layers(self, kind: Optional[str] = None, name: Optional[str] = None) -> List[Layer]:
        """Layers filtered by kind and/or name."""
        return [
            layer for layer in self.layers
            if (kind is None or layer.kind == kind) and (name is None or layer.name == name)
        ]

    def draw(self, ax: Optional[plt.Axes] = None) -> plt.Axes:
        """
        Render the scene with matplotlib.

        Parameters
        ----------
        ax : plt.Axes, optional
            Axes to plot on. If None, creates new figure

        Returns
        -------
        plt.Axes
            Axes with plot
        """
        if ax is None:
            fig, ax = plt.subplots(figsize=(6, 4.5))

        for layer in self.layers:
            _draw_layer(ax, layer)

        ax.set_title(f"{self.title}\n{self.subtitle}" if self.subtitle else self.title)
        ax.set_xlabel(self.xlabel)
        ax.set_ylabel(self.ylabel)
        if self.ylim is not None:
            ax.set_ylim(self.ylim)

        has_labels = any(layer.label for layer in self.layers)
        if self.show_legend and has_labels:
            ax.legend()

        return ax


def _point_colors(layer):
    rgba = np.tile(mcolors.to_rgba(layer.color), (len(layer), 1))
    rgba[:, 3] = np.clip(np.broadcast_to(layer.alpha, len(layer)), 0, 1)
    return rgba


def _draw_layer(ax, layer):
    if layer.kind == 'point':
        keep = np.isfinite(layer.x) & np.isfinite(layer.y)
        colors = _point_colors(layer)[keep]
        if layer.filled:
            ax.scatter(layer.x[keep], layer.y[keep], c=colors, marker=layer.marker,
                       s=12, label=layer.label)
        else:
            ax.scatter(layer.x[keep], layer.y[keep], facecolors='none', edgecolors=colors,
                       marker=layer.marker, s=12, linewidths=0.8, label=layer.label)
    elif layer.kind == 'line':
        ax.plot(layer.x, layer.y, color=layer.color, linestyle=layer.linestyle,
                alpha=layer.alpha, label=layer.label)
    else:
        ax.fill_between(layer.x, layer.y, layer.y2, color=layer.color,
                        alpha=layer.alpha, linewidth=0, label=layer.label)
