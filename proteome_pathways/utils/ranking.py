"""
Significance filtering and ranking of corrected pathway results.
"""

import logging
import math
from typing import List, Optional, Sequence

import pandas as pd

from ..enrichment.analysis import PathwayResult

logger = logging.getLogger(__name__)

RESULT_COLUMNS = [
    'pathway', 'ingroup_n', 'ingroup_mean', 'outgroup_n', 'outgroup_mean',
    'zscore', 'oddsratio', 'pvalue', 'padj'
]


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def filter_and_rank(
    results: Sequence[PathwayResult],
    sort_by: str,
    ascending: bool,
    threshold: float = 0.05,
    top_k: Optional[int] = 20
) -> List[PathwayResult]:
    """
    Keep significant pathways, order them and truncate to the top K.

    Records with a missing adjusted p-value or padj >= threshold are
    dropped. Sorting is stable, so ties keep the engine's pathway order.
    When fewer than ``top_k`` records survive, all of them are returned.

    Args:
        results: Corrected pathway results
        sort_by: PathwayResult attribute to sort on
        ascending: Sort direction
        threshold: Adjusted p-value cutoff
        top_k: Maximum number of records, or None for no limit

    Returns:
        Ranked list of significant results
    """
    if sort_by not in RESULT_COLUMNS:
        raise ValueError(f"Unknown sort key: {sort_by}")

    significant = [r for r in results if not _is_missing(r.padj) and r.padj < threshold]

    # missing keys sort last in either direction
    ranked = [r for r in significant if not _is_missing(getattr(r, sort_by))]
    unranked = [r for r in significant if _is_missing(getattr(r, sort_by))]
    ranked = sorted(ranked, key=lambda r: getattr(r, sort_by), reverse=not ascending)
    ranked += unranked

    if top_k is not None:
        ranked = ranked[:top_k]

    logger.info(f"{len(significant)} of {len(results)} pathways pass padj < {threshold}; "
                f"reporting {len(ranked)}")

    return ranked


def results_to_frame(results: Sequence[PathwayResult]) -> pd.DataFrame:
    """
    Convert pathway results to a DataFrame.

    Columns follow RESULT_COLUMNS; the zscore and oddsratio columns are
    dropped when no record carries them.
    """
    frame = pd.DataFrame([r.to_dict() for r in results], columns=RESULT_COLUMNS)

    for col in ('zscore', 'oddsratio'):
        if frame[col].isna().all():
            frame = frame.drop(columns=col)

    return frame
