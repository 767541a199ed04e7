"""Tests for single-gene scenes."""

import warnings

import numpy as np
import pytest
import matplotlib.pyplot as plt

import lineageDE as lde
from lineageDE.plotting import Layer, Scene, fit_and_plot, plot_gene_loess, plot_gene_splines
from lineageDE.tools import SplineGLM, extract_lineage_subset, unshared_cells


class TestScene:

    def test_layer_kind_validated(self):
        with pytest.raises(ValueError, match="Unknown layer kind"):
            Layer('bar', x=[0], y=[0])
        with pytest.raises(ValueError, match="Ribbon"):
            Layer('ribbon', x=[0], y=[0])

    def test_draw_per_point_alpha(self):
        scene = Scene(title='g', subtitle='(loess)', show_legend=True)
        scene.add(Layer('point', x=[0, 1, np.nan], y=[1, 2, 3], alpha=np.array([0.0, 0.5, 1.0]),
                        color='red', filled=False, label='data'))
        scene.add(Layer('line', x=[0, 1], y=[1, 2], linestyle='--', label='null model'))
        scene.add(Layer('ribbon', x=[0, 1], y=[0, 1], y2=[2, 3], alpha=0.2))

        ax = scene.draw()

        assert isinstance(ax, plt.Axes)
        assert ax.get_title() == 'g\n(loess)'
        assert ax.get_ylim() == (-1.5, 10)
        assert ax.get_legend() is not None
        edge_alpha = ax.collections[0].get_edgecolors()[:, 3]
        np.testing.assert_allclose(edge_alpha, [0.0, 0.5])


class TestFitAndPlot:

    def test_raw_scene_only(self, branching_adata):
        res = fit_and_plot(branching_adata, 'G0', regression=False)

        assert res.models == {}
        points = res.scene.get_layers('point')
        assert [layer.name for layer in points] == ['data_lineage2', 'data_lineage1']
        np.testing.assert_array_equal(
            points[1].alpha, branching_adata.obsm['lineage_weights'][:, 0])
        assert res.scene.title == 'G0'
        assert res.scene.subtitle == '(loess)'

    def test_regression_layers(self, branching_adata):
        res = fit_and_plot(branching_adata, 'G0')
        n1 = len(extract_lineage_subset(branching_adata, 'G0', 0))

        assert set(res.models) == {'lineage1', 'lineage2', 'null'}
        lines = {layer.name: layer for layer in res.scene.get_layers('line')}
        assert set(lines) == {'lineage1', 'lineage2', 'null'}
        assert len(lines['lineage1']) == len(lines['lineage2']) == n1
        assert lines['lineage1'].color == 'red'
        assert lines['lineage2'].color == 'blue'
        assert lines['null'].linestyle == '--'
        assert lines['null'].label == 'null model'
        np.testing.assert_array_equal(lines['null'].x, lines['lineage1'].x)
        np.testing.assert_array_equal(
            lines['lineage2'].y, res.models['lineage2'].predict(lines['lineage2'].x))

    def test_without_null_model(self, branching_adata):
        res = plot_gene_loess(branching_adata, 'G0', null_model=False)
        assert 'null' not in res.models
        assert res.scene.get_layers(name='null') == []

    def test_sd_bands(self, branching_adata):
        res = plot_gene_loess(branching_adata, 'G3', show_sd=True)
        ribbons = res.scene.get_layers('ribbon')
        assert [layer.name for layer in ribbons] == ['sd_lineage1', 'sd_lineage2']
        for layer in ribbons:
            assert layer.alpha == 0.2
            assert np.all(layer.y2[np.isfinite(layer.y2)] >= layer.y[np.isfinite(layer.y)])

    def test_sd_bands_need_loess(self, branching_adata):
        with pytest.raises(ValueError, match="loess"):
            fit_and_plot(branching_adata, 'G0', method='spline', show_sd=True)

    def test_unshared_predictions(self, branching_adata):
        res = plot_gene_loess(branching_adata, 'G2', show_unshared=True)

        for lineage, key in enumerate(['lineage1', 'lineage2']):
            layer = res.scene.get_layers('point', name=f'unshared_{key}')[0]
            cells = unshared_cells(branching_adata, lineage)
            t = branching_adata.obsm['pseudotime'][branching_adata.obs_names.get_indexer(cells), lineage]
            assert len(layer) == np.isfinite(t).sum()
            assert layer.alpha == 0.4
            np.testing.assert_allclose(layer.y, res.models[key].predict(layer.x))

    def test_legend_toggle(self, branching_adata):
        fig, ax = plt.subplots()
        plot_gene_loess(branching_adata, 'G0', show_legend=True, ax=ax)
        assert ax.get_legend() is not None

        fig, ax = plt.subplots()
        plot_gene_loess(branching_adata, 'G0', ax=ax)
        assert ax.get_legend() is None

    def test_unknown_gene(self, branching_adata):
        with pytest.raises(lde.UnknownGeneError):
            fit_and_plot(branching_adata, 'missing')

    def test_empty_lineage_scatter_still_renders(self, one_sided_adata):
        res = fit_and_plot(one_sided_adata, 'G0', regression=False)
        layer = res.scene.get_layers('point', name='data_lineage1')[0]
        assert len(layer) == 10
        np.testing.assert_array_equal(layer.alpha, np.ones(10))
        assert isinstance(res.draw(), plt.Axes)

        with pytest.raises(lde.EmptyLineageError):
            fit_and_plot(one_sided_adata, 'G0', regression=True)

    def test_fit_divergence_keeps_raw_scene(self, branching_adata, monkeypatch):
        def diverge(self, subset):
            raise lde.FitDivergenceError("no convergence")

        monkeypatch.setattr(SplineGLM, 'fit', diverge)
        with pytest.warns(RuntimeWarning, match="G0"):
            res = plot_gene_splines(branching_adata, 'G0')

        assert res.models == {}
        assert res.scene.get_layers('line') == []
        assert len(res.scene.get_layers('point')) == 2

    def test_splines_gaussian(self, branching_adata):
        res = plot_gene_splines(branching_adata, 'G2', show_unshared=True)
        assert res.scene.subtitle == '(VGAM, splines)'
        assert set(res.models) == {'lineage1', 'lineage2', 'null'}
        for layer in res.scene.get_layers('line'):
            assert np.all(np.isfinite(layer.y))

    def test_splines_negbinomial_scatter_uses_counts(self, branching_adata):
        with warnings.catch_warnings():
            warnings.simplefilter('ignore')
            res = plot_gene_splines(branching_adata, 'G1', family='negbinomial')

        data = res.scene.get_layers('point', name='data_lineage1')[0]
        np.testing.assert_array_equal(data.y, np.round(branching_adata.X[:, 1]))
        for layer in res.scene.get_layers('line'):
            assert np.all(layer.y > 0)
