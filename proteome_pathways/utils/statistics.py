"""
Multiple testing correction for pathway results.
"""

import logging
from dataclasses import replace
from typing import List, Sequence

import numpy as np
from statsmodels.stats.multitest import multipletests

from ..enrichment.analysis import PathwayResult

logger = logging.getLogger(__name__)


def benjamini_hochberg(pvalues: Sequence[float]) -> np.ndarray:
    """
    Benjamini-Hochberg adjustment of raw p-values.

    Missing (NaN) p-values are left out of the test count and the
    ranking and stay NaN in the output. The remaining values are ranked
    ascending, scaled by N / rank and made monotone with a running
    minimum from the largest rank down.

    Args:
        pvalues: Raw p-values, possibly containing NaN

    Returns:
        Array of adjusted p-values in input order

    Example:
        >>> benjamini_hochberg([0.001, 0.01, 0.02, 0.04, 0.5])
        array([0.005     , 0.025     , 0.03333333, 0.05      , 0.5       ])
    """
    pvalues = np.asarray(pvalues, dtype=float)
    adjusted = np.full(pvalues.shape, np.nan)

    tested = ~np.isnan(pvalues)
    if tested.any():
        _, adjusted[tested], _, _ = multipletests(
            np.clip(pvalues[tested], 0, 1), method='fdr_bh'
        )

    logger.debug("Applied BH correction to %d of %d p-values", int(tested.sum()), pvalues.size)

    return adjusted


def apply_correction(results: Sequence[PathwayResult]) -> List[PathwayResult]:
    """
    Attach BH-adjusted p-values to a complete set of pathway results.

    Must be given every result of one engine run; the adjustment is
    only valid over the full set of tested pathways.

    Args:
        results: Raw results from one engine run

    Returns:
        New PathwayResult objects with ``padj`` set, in input order
    """
    adjusted = benjamini_hochberg([r.pvalue for r in results])
    return [replace(r, padj=float(p)) for r, p in zip(results, adjusted)]
