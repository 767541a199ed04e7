"""Exceptions and warnings raised by lineageDE."""


class LineageDEError(Exception):
    """Base class for lineageDE errors."""


class UnknownGeneError(LineageDEError, KeyError):
    """Gene identifier has no entry in the counts table or the ranking."""

    def __init__(self, gene, source='adata.var_names'):
        self.gene = gene
        self.source = source
        super().__init__(gene)

    def __str__(self):
        return f"Gene '{self.gene}' not found in {self.source}"


class EmptyLineageError(LineageDEError, ValueError):
    """No cell of the requested lineage is left to fit."""

    def __init__(self, lineage, reason='has a nonzero weight'):
        self.lineage = lineage
        where = 'the pooled lineages' if lineage is None else f'lineage {lineage + 1}'
        super().__init__(f"No cell {reason} on {where}; nothing to fit.")


class FitDivergenceError(LineageDEError, RuntimeError):
    """The spline GLM optimizer did not converge."""


class GridTooSmallError(LineageDEError, ValueError):
    """Panel grid has fewer slots than requested genes."""


class DegenerateThresholdWarning(UserWarning):
    """Weights have no interior values, unshared threshold falls back to 0.5."""
