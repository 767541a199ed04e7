"""Read-only view of an externally computed gene ranking."""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from .._utils.errors import UnknownGeneError

METHOD_LABELS = (('dtw', 'dtw'), ('likelihood', 'lkl'))


@dataclass(frozen=True)
class Ranking:
    """
    Gene ranking produced by a lineage differential expression test.

    Parameters
    ----------
    table : pd.DataFrame
        Indexed by gene name. The first column holds the distance or
        score, the second the integer rank.
    method : str
        Name of the ranking method, e.g. 'dtw' or 'likelihood_ratio'
    """

    table: pd.DataFrame
    method: str = ''

    def __post_init__(self):
        if self.table.shape[1] < 2:
            raise ValueError("Ranking table needs a score column and a rank column")

    def _row(self, gene):
        if gene not in self.table.index:
            raise UnknownGeneError(gene, source='the ranking table')
        return self.table.loc[gene]

    def score(self, gene: str) -> float:
        return float(self._row(gene).iloc[0])

    def rank(self, gene: str) -> int:
        return int(self._row(gene).iloc[1])

    @property
    def method_label(self) -> str:
        """Short method label: 'dtw', 'lkl' or '' for other methods."""
        label = ''
        for pattern, short in METHOD_LABELS:
            if pattern in self.method:
                label = short
        return label

    def subtitle(self, gene: str) -> str:
        """Distance and rank annotation of one gene."""
        label = self.method_label
        dist = np.round(self.score(gene), 1)
        return f"{label}.dist: {_format_number(dist)} | {label}.rank: {self.rank(gene)}"


def _format_number(value: float) -> str:
    # whole numbers print without a trailing '.0'
    text = f"{value:.1f}"
    return text[:-2] if text.endswith('.0') else text
