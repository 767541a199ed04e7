"""Preprocessing module for lineageDE."""

from .dataset import setup_lineages, lineage_dataset

__all__ = ['setup_lineages', 'lineage_dataset']
