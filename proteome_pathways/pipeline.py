"""
End-to-end pathway enrichment pipeline.

load -> pivot -> row-normalize -> enrichment engine -> BH correction
-> significance filter / ranking.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd

from .config import AnalysisConfig
from .data.grouping import SampleGrouping
from .data.loaders import TableSource, load_expression_table
from .data.preprocessing import extract_sample_metadata, normalize_rows, pivot_expression_table
from .enrichment.analysis import EnrichmentEngine, PathwayResult
from .enrichment.databases import GeneSetDatabase
from .utils.ranking import filter_and_rank, results_to_frame
from .utils.statistics import apply_correction

logger = logging.getLogger(__name__)


class EnrichmentPipeline:
    """
    Run correlation enrichment and enrichment comparison on a cohort.

    Attributes:
        source: Provider of the long-format expression table
        engine: EnrichmentEngine holding the gene-set database
        config: AnalysisConfig shared by engine and ranking
        raw_matrix: Genes x samples matrix after ``load``
        matrix: Row-normalized matrix after ``load``
        metadata: Per-sample metadata after ``load``

    Example:
        >>> pipeline = EnrichmentPipeline(
        ...     source=RemoteTableSource(url, token_env='PROTEOMICS_API_TOKEN'),
        ...     gene_sets=GeneSetDatabase.load_gmt('c2.cp.pid.symbols.gmt')
        ... )
        >>> correlation = pipeline.run_correlation()
        >>> grouping = pipeline.grouping_from_metadata('subtype', 'AML', 'ALL')
        >>> comparison = pipeline.run_comparison(grouping)
        >>> correlation['results'].head()
    """

    def __init__(self,
                 source: TableSource,
                 gene_sets: Union[GeneSetDatabase, Mapping[str, Sequence[str]]],
                 config: Optional[AnalysisConfig] = None,
                 feature_col: str = 'gene',
                 sample_col: str = 'sample',
                 value_col: str = 'value'):
        self.source = source
        self.config = (config or AnalysisConfig()).validate()
        self.engine = EnrichmentEngine(gene_sets, config=self.config)
        self.feature_col = feature_col
        self.sample_col = sample_col
        self.value_col = value_col

        self.raw_matrix: Optional[pd.DataFrame] = None
        self.matrix: Optional[pd.DataFrame] = None
        self.metadata: Optional[pd.DataFrame] = None

    def load(self) -> pd.DataFrame:
        """
        Fetch the table, build the matrix and normalize it.

        Returns:
            The normalized genes x samples matrix
        """
        table = load_expression_table(
            self.source,
            required_columns=(self.feature_col, self.sample_col, self.value_col)
        )

        self.raw_matrix = pivot_expression_table(
            table, self.feature_col, self.sample_col, self.value_col
        )
        self.matrix = normalize_rows(self.raw_matrix)
        self.metadata = extract_sample_metadata(
            table, self.sample_col, exclude=(self.feature_col, self.value_col)
        )

        return self.matrix

    def _ensure_loaded(self) -> pd.DataFrame:
        if self.matrix is None:
            self.load()
        return self.matrix

    def grouping_from_metadata(self, column: str, primary_values: Any,
                               secondary_values: Any = None) -> SampleGrouping:
        """Build a SampleGrouping from a sample metadata column."""
        self._ensure_loaded()
        return SampleGrouping.from_metadata(self.metadata, column,
                                            primary_values, secondary_values)

    def _finalize(self, raw: List[PathwayResult], sort_by: str, ascending: bool,
                  analysis: str, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        corrected = apply_correction(raw)
        ranked = filter_and_rank(
            corrected,
            sort_by=sort_by,
            ascending=ascending,
            threshold=self.config.significance_threshold,
            top_k=self.config.top_k
        )

        parameters = {
            'analysis': analysis,
            'n_genes': int(self.matrix.shape[0]),
            'n_samples': int(self.matrix.shape[1]),
            'sort_by': sort_by,
            'ascending': ascending,
            **self.config.to_dict(),
        }
        if extra:
            parameters.update(extra)

        return {
            'results': results_to_frame(ranked),
            'all_results': corrected,
            'parameters': parameters,
            'summary': {
                'total_gene_sets': len(self.engine.gene_sets),
                'tested_pathways': len(corrected),
                'significant_pathways': sum(
                    1 for r in corrected if r.padj < self.config.significance_threshold
                ),
                'reported_pathways': len(ranked),
            }
        }

    def run_correlation(self) -> Dict[str, Any]:
        """
        Correlation enrichment, ranked by mean in-group correlation.

        Returns:
            Dictionary containing:
                - 'results': DataFrame of ranked significant pathways
                - 'all_results': corrected PathwayResult for every tested pathway
                - 'parameters': analysis parameters
                - 'summary': counts of tested/significant/reported pathways
        """
        matrix = self._ensure_loaded()
        raw = self.engine.correlation_enrichment(matrix)
        return self._finalize(raw, sort_by='ingroup_mean', ascending=False,
                              analysis='correlation')

    def run_comparison(self, grouping: SampleGrouping) -> Dict[str, Any]:
        """
        Enrichment comparison between two sample groups, ranked by p-value.

        Args:
            grouping: Primary/secondary sample partition

        Returns:
            Dictionary with the same layout as ``run_correlation``
        """
        matrix = self._ensure_loaded()
        raw = self.engine.enrichment_comparison(matrix, grouping)
        primary_n, secondary_n = grouping.sizes
        return self._finalize(raw, sort_by='pvalue', ascending=True,
                              analysis='comparison',
                              extra={
                                  'primary_label': grouping.primary_label,
                                  'secondary_label': grouping.secondary_label,
                                  'primary_n': primary_n,
                                  'secondary_n': secondary_n,
                              })
