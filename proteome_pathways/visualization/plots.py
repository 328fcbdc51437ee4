"""
Plotting functions for pathway enrichment results.

Bar charts of ranked pathways and pie charts of cohort composition,
styled consistently and optionally saved to disk.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

logger = logging.getLogger(__name__)

# Default color palette (colorblind-friendly, Nature-style)
DEFAULT_COLORS = {
    'primary': '#E64B35',      # Red
    'secondary': '#4DBBD5',    # Blue
    'tertiary': '#00A087',     # Green
    'quaternary': '#3C5488',   # Deep blue
    'neutral': '#808080',      # Gray
}

DEFAULT_DPI = 300
DEFAULT_FONTSIZE = {
    'title': 12,
    'label': 10,
    'tick': 9,
    'legend': 9,
}


def _apply_base_style(ax: plt.Axes,
                      remove_top_right: bool = True,
                      grid: bool = False,
                      grid_alpha: float = 0.3) -> None:
    """
    Apply base styling to matplotlib axes.

    Parameters
    ----------
    ax : plt.Axes
        Matplotlib axes object.
    remove_top_right : bool, optional
        Whether to remove top and right spines. Default is True.
    grid : bool, optional
        Whether to show grid. Default is False.
    grid_alpha : float, optional
        Grid transparency. Default is 0.3.
    """
    if remove_top_right:
        ax.spines['top'].set_visible(False)
        ax.spines['right'].set_visible(False)

    if grid:
        ax.grid(True, alpha=grid_alpha, linestyle='--', linewidth=0.5)


def _shorten(label: str, max_length: int) -> str:
    if len(label) <= max_length:
        return label
    return label[:max_length - 3] + '...'


def plot_pathway_barplot(
    results: pd.DataFrame,
    value_col: str = 'ingroup_mean',
    pathway_col: str = 'pathway',
    neg_log10: bool = False,
    figsize: Tuple[int, int] = (10, 8),
    title: Optional[str] = None,
    xlabel: Optional[str] = None,
    max_label_length: int = 50,
    save_path: Optional[str] = None,
    color_positive: str = DEFAULT_COLORS['primary'],
    color_negative: str = DEFAULT_COLORS['secondary'],
    ax: Optional[plt.Axes] = None
) -> Tuple[plt.Figure, plt.Axes]:
    """
    Horizontal bar chart of ranked pathways.

    Bars are drawn in the order of ``results`` with the first row at the
    top, so pass results already ranked.

    Parameters
    ----------
    results : pd.DataFrame
        Ranked results with a pathway column and a value column.
    value_col : str, optional
        Column to plot. Default is 'ingroup_mean'.
    pathway_col : str, optional
        Column holding pathway names. Default is 'pathway'.
    neg_log10 : bool, optional
        Plot -log10 of the value (for p-value columns). Default is False.
    figsize : tuple, optional
        Figure size. Default is (10, 8).
    title : str, optional
        Plot title.
    xlabel : str, optional
        X-axis label. Defaults to the plotted column name.
    max_label_length : int, optional
        Pathway names longer than this are truncated. Default is 50.
    save_path : str, optional
        Path to save figure.
    color_positive : str, optional
        Color for non-negative values.
    color_negative : str, optional
        Color for negative values.
    ax : plt.Axes, optional
        Existing axes to plot on.

    Returns
    -------
    fig : plt.Figure
        Matplotlib figure object.
    ax : plt.Axes
        Matplotlib axes object.

    Examples
    --------
    >>> ranked = pipeline.run_correlation()['results']
    >>> fig, ax = plot_pathway_barplot(ranked, value_col='ingroup_mean')
    """
    for col in (pathway_col, value_col):
        if col not in results.columns:
            raise ValueError(f"DataFrame must have a '{col}' column")

    values = results[value_col].astype(float).to_numpy()
    if neg_log10:
        values = -np.log10(np.clip(values, 1e-300, None))

    labels = [_shorten(str(p), max_label_length) for p in results[pathway_col]]

    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.get_figure()

    colors = [color_positive if v >= 0 else color_negative for v in values]
    positions = np.arange(len(values))[::-1]

    ax.barh(positions, values, color=colors, edgecolor='white', linewidth=0.5)
    ax.set_yticks(positions)
    ax.set_yticklabels(labels, fontsize=DEFAULT_FONTSIZE['tick'])

    if xlabel is None:
        xlabel = f'-log$_{{10}}$({value_col})' if neg_log10 else value_col
    ax.set_xlabel(xlabel, fontsize=DEFAULT_FONTSIZE['label'])

    if neg_log10:
        ax.axvline(-np.log10(0.05), color='gray', linestyle='--',
                   linewidth=0.8, alpha=0.5)
    else:
        ax.axvline(0, color='black', linestyle='-', linewidth=0.5, alpha=0.5)

    ax.set_title(title or f'Top {len(values)} Pathways',
                 fontsize=DEFAULT_FONTSIZE['title'], fontweight='bold')

    _apply_base_style(ax, grid=True)
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=DEFAULT_DPI, bbox_inches='tight')
        logger.info("Saved %s", save_path)

    return fig, ax


def plot_metadata_pie(
    metadata: pd.DataFrame,
    column: str,
    figsize: Tuple[int, int] = (6, 6),
    title: Optional[str] = None,
    palette: str = 'Set2',
    save_path: Optional[str] = None,
    ax: Optional[plt.Axes] = None
) -> Tuple[plt.Figure, plt.Axes]:
    """
    Pie chart of sample counts per metadata category.

    Parameters
    ----------
    metadata : pd.DataFrame
        Sample metadata, one row per sample.
    column : str
        Categorical column to summarize.
    figsize : tuple, optional
        Figure size. Default is (6, 6).
    title : str, optional
        Plot title. Defaults to the column name.
    palette : str, optional
        Seaborn palette name. Default is 'Set2'.
    save_path : str, optional
        Path to save figure.
    ax : plt.Axes, optional
        Existing axes to plot on.

    Returns
    -------
    fig : plt.Figure
        Matplotlib figure object.
    ax : plt.Axes
        Matplotlib axes object.
    """
    if column not in metadata.columns:
        raise ValueError(f"Metadata column '{column}' not found")

    counts = metadata[column].fillna('missing').astype(str).value_counts().sort_index()

    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.get_figure()

    colors = sns.color_palette(palette, len(counts))
    ax.pie(
        counts.values,
        labels=[f'{k} (n={v})' for k, v in counts.items()],
        colors=colors,
        autopct='%1.1f%%',
        startangle=90,
        counterclock=False,
        wedgeprops={'edgecolor': 'white', 'linewidth': 1.0},
        textprops={'fontsize': DEFAULT_FONTSIZE['tick']},
    )
    ax.axis('equal')
    ax.set_title(title or column, fontsize=DEFAULT_FONTSIZE['title'], fontweight='bold')

    if save_path:
        fig.savefig(save_path, dpi=DEFAULT_DPI, bbox_inches='tight')
        logger.info("Saved %s", save_path)

    return fig, ax


def save_figure(
    fig: plt.Figure,
    name: str,
    output_dir: Union[str, Path] = 'figures',
    formats: Optional[List[str]] = None,
    close: bool = True,
) -> List[Path]:
    """
    Save figure in multiple formats.

    Parameters
    ----------
    fig : plt.Figure
        Figure to save.
    name : str
        Base filename (without extension).
    output_dir : str or Path, optional
        Output directory, created if needed. Default is 'figures'.
    formats : list of str, optional
        Output formats. Default is ['png', 'pdf'].
    close : bool, optional
        Whether to close the figure after saving. Default is True.

    Returns
    -------
    list of Path
        Paths to saved files.
    """
    if formats is None:
        formats = ['png', 'pdf']

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    saved_paths = []
    for fmt in formats:
        path = output_dir / f'{name}.{fmt}'
        fig.savefig(
            str(path),
            format=fmt,
            dpi=DEFAULT_DPI,
            bbox_inches='tight',
            facecolor='white',
            edgecolor='none',
        )
        saved_paths.append(path)
        logger.info("Saved %s", path)

    if close:
        plt.close(fig)

    return saved_paths
