"""
Tables and charts for pathway enrichment results.
"""

from .plots import plot_pathway_barplot, plot_metadata_pie, save_figure
from .tables import format_results_table, render_results_table

__all__ = [
    'plot_pathway_barplot',
    'plot_metadata_pie',
    'save_figure',
    'format_results_table',
    'render_results_table'
]
