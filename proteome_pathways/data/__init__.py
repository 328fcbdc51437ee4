"""
Data loading, reshaping and normalization for proteomics cohorts.
"""

from .loaders import (
    TableSource,
    DataFrameSource,
    FileTableSource,
    RemoteTableSource,
    load_expression_table,
    create_sample_data
)
from .preprocessing import pivot_expression_table, extract_sample_metadata, normalize_rows
from .grouping import SampleGrouping

__all__ = [
    'TableSource',
    'DataFrameSource',
    'FileTableSource',
    'RemoteTableSource',
    'load_expression_table',
    'create_sample_data',
    'pivot_expression_table',
    'extract_sample_metadata',
    'normalize_rows',
    'SampleGrouping'
]
