"""
Multiple testing correction and result ranking utilities.
"""

from .statistics import benjamini_hochberg, apply_correction
from .ranking import filter_and_rank, results_to_frame, RESULT_COLUMNS

__all__ = [
    'benjamini_hochberg',
    'apply_correction',
    'filter_and_rank',
    'results_to_frame',
    'RESULT_COLUMNS'
]
