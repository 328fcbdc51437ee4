"""
Proteome Pathways Package

Exploratory pathway enrichment analysis of proteomic expression data from
leukemia cohorts: correlation enrichment and two-group enrichment
comparison against an explicitly supplied gene-set database, with
Benjamini-Hochberg correction and ranked reporting.
"""

__version__ = "0.1.0"
__author__ = "Proteome Pathways Analysis Team"

# Core module imports
from .config import AnalysisConfig
from .exceptions import ConfigurationError, ProteomePathwaysError
from .data.loaders import DataFrameSource, FileTableSource, RemoteTableSource, create_sample_data
from .data.preprocessing import pivot_expression_table, normalize_rows
from .data.grouping import SampleGrouping
from .enrichment.analysis import EnrichmentEngine, PathwayResult
from .enrichment.databases import GeneSetDatabase
from .utils.statistics import benjamini_hochberg, apply_correction
from .utils.ranking import filter_and_rank, results_to_frame
from .pipeline import EnrichmentPipeline

__all__ = [
    'AnalysisConfig',
    'ConfigurationError',
    'ProteomePathwaysError',
    'DataFrameSource',
    'FileTableSource',
    'RemoteTableSource',
    'create_sample_data',
    'pivot_expression_table',
    'normalize_rows',
    'SampleGrouping',
    'EnrichmentEngine',
    'PathwayResult',
    'GeneSetDatabase',
    'benjamini_hochberg',
    'apply_correction',
    'filter_and_rank',
    'results_to_frame',
    'EnrichmentPipeline'
]
