"""Tests for rankings and multi-gene panels."""

import numpy as np
import pandas as pd
import pytest
import matplotlib.pyplot as plt

import lineageDE as lde
from lineageDE.plotting import multigene_panel, panel_grid, plot_multigenes
from lineageDE.tools import Ranking

from conftest import make_adata


@pytest.fixture
def ranking_table():
    return pd.DataFrame(
        {'distance': [12.34, 8.0, 5.55, 3.21, 1.04], 'rank': [1, 2, 3, 4, 5]},
        index=['G0', 'G1', 'G2', 'G3', 'G4'],
    )


class TestRanking:

    @pytest.mark.parametrize('method, label', [
        ('dtw', 'dtw'),
        ('dtw_distance', 'dtw'),
        ('likelihood_ratio', 'lkl'),
        ('dtw_likelihood', 'lkl'),
        ('wasserstein', ''),
    ])
    def test_method_label(self, ranking_table, method, label):
        assert Ranking(ranking_table, method=method).method_label == label

    def test_accessors(self, ranking_table):
        ranking = Ranking(ranking_table, method='dtw')
        assert ranking.score('G0') == pytest.approx(12.34)
        assert ranking.rank('G3') == 4
        with pytest.raises(lde.UnknownGeneError, match='ranking table'):
            ranking.rank('G9')

    def test_subtitle(self, ranking_table):
        assert Ranking(ranking_table, 'dtw').subtitle('G0') == 'dtw.dist: 12.3 | dtw.rank: 1'
        assert Ranking(ranking_table, 'likelihood').subtitle('G1') == 'lkl.dist: 8 | lkl.rank: 2'
        assert Ranking(ranking_table, 'other').subtitle('G4') == '.dist: 1 | .rank: 5'

    def test_needs_two_columns(self):
        with pytest.raises(ValueError, match="rank"):
            Ranking(pd.DataFrame({'distance': [1.0]}, index=['G0']))


class TestPanelGrid:

    @pytest.mark.parametrize('n, expected', [(1, (1, 1)), (4, (2, 2)), (5, (3, 3)), (10, (4, 4))])
    def test_square_default(self, n, expected):
        assert panel_grid(n) == expected

    def test_explicit_grid(self):
        assert panel_grid(5, (2, 3)) == (2, 3)

    def test_grid_too_small(self):
        with pytest.raises(lde.GridTooSmallError):
            panel_grid(5, (2, 2))


class TestMultigenePanel:

    def test_five_genes_on_three_by_three(self, branching_adata, ranking_table):
        ranking = Ranking(ranking_table, method='dtw')
        genes = ['G0', 'G1', 'G2', 'G3', 'G4']

        panel = multigene_panel(branching_adata, ranking, genes)

        assert (panel.nrows, panel.ncols) == (3, 3)
        assert panel.genes == genes
        assert len(panel.scenes) == 5
        assert panel.n_empty == 4
        assert panel.subtitles[0] == 'dtw.dist: 12.3 | dtw.rank: 1'
        assert [scene.title for scene in panel.scenes] == genes
        assert panel.failures == {}

    def test_null_model_flag(self, branching_adata, ranking_table):
        ranking = Ranking(ranking_table, method='dtw')
        without = multigene_panel(branching_adata, ranking, ['G0'])
        with_null = multigene_panel(branching_adata, ranking, ['G0'], null_model=True)

        assert without.scenes[0].get_layers(name='null') == []
        assert len(with_null.scenes[0].get_layers(name='null')) == 1

    def test_failing_gene_is_skipped(self, branching_adata, ranking_table):
        table = pd.concat([
            ranking_table,
            pd.DataFrame({'distance': [0.5], 'rank': [6]}, index=['ghost']),
        ])
        ranking = Ranking(table, method='likelihood')

        with pytest.warns(UserWarning, match="ghost"):
            panel = multigene_panel(branching_adata, ranking, ['G2', 'ghost', 'G0', 'G7'])

        assert panel.genes == ['G2', 'G0']
        assert set(panel.failures) == {'ghost', 'G7'}
        assert isinstance(panel.failures['ghost'], lde.UnknownGeneError)
        assert (panel.nrows, panel.ncols) == (2, 2)

    def test_lineage_without_defined_pseudotime_is_skipped(self):
        n = 20
        t = np.full((n, 2), np.nan)
        t[:15, 0] = np.linspace(0, 1, 15)
        w = np.zeros((n, 2))
        w[:15, 0] = 1.0
        w[15:, 1] = 1.0
        adata = make_adata(np.ones((n, 2)), t, w, genes=['A', 'B'])
        ranking = Ranking(
            pd.DataFrame({'distance': [2.0, 1.0], 'rank': [1, 2]}, index=['A', 'B']), 'dtw')

        with pytest.warns(UserWarning, match="lineage 2"):
            panel = multigene_panel(adata, ranking, ['A', 'B'])

        assert panel.genes == []
        assert set(panel.failures) == {'A', 'B'}
        assert all(isinstance(err, lde.EmptyLineageError) for err in panel.failures.values())

    def test_grid_too_small_raises(self, branching_adata, ranking_table):
        with pytest.raises(lde.GridTooSmallError):
            multigene_panel(branching_adata, Ranking(ranking_table), ['G0', 'G1', 'G2'],
                            grid_size=(1, 2))

    def test_plot_multigenes_figure(self, branching_adata, ranking_table):
        ranking = Ranking(ranking_table, method='dtw')
        fig = plot_multigenes(branching_adata, ranking, ['G0', 'G1', 'G2', 'G3', 'G4'])

        assert isinstance(fig, plt.Figure)
        assert len(fig.axes) == 9
        assert sum(not ax.axison for ax in fig.axes) == 4
        assert fig.axes[0].get_title() == 'G0\ndtw.dist: 12.3 | dtw.rank: 1'
