"""
Pathway enrichment engine for proteomic expression matrices.

Two procedures are implemented, both scoring every pathway of an
explicitly supplied gene-set database against a row-normalized
genes x samples matrix:

Correlation enrichment
    Are a pathway's member genes more correlated with each other than
    gene pairs in general? In-group pairs are the distinct pairs of
    member genes present in the matrix; out-group pairs are all other
    valid gene pairs, i.e. every pair with at least one non-member gene.
    The two correlation populations are compared with a pooled-variance
    two-sample t-test.

Enrichment comparison
    Do a pathway's member genes differ between two sample groups more
    than non-member genes? A Welch-style z-score is computed per gene;
    members and non-members are compared through a parametric gene-set
    score and a Fisher exact test on changed/unchanged gene counts.

Pathways with fewer than ``min_genes`` genes present in the matrix are
skipped. Numeric degeneracies (zero-variance genes, pairs without
enough shared samples) become NaN and are left out of every count and
mean.

Classes:
    PathwayResult: Per-pathway statistics
    EnrichmentEngine: Runs both procedures over a gene-set database

Functions:
    gene_zscores: Per-gene two-group z-scores
"""

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from scipy import stats

from ..config import AnalysisConfig
from ..data.grouping import SampleGrouping
from ..exceptions import ConfigurationError
from .databases import GeneSetDatabase

logger = logging.getLogger(__name__)


@dataclass
class PathwayResult:
    """
    Statistics for a single tested pathway.

    Attributes:
        pathway: Pathway name
        ingroup_n: In-group size (member gene pairs for correlation
            enrichment, member genes for enrichment comparison)
        ingroup_mean: Mean in-group correlation or gene z-score
        outgroup_n: Out-group size
        outgroup_mean: Mean out-group correlation or gene z-score
        pvalue: Raw p-value
        padj: Benjamini-Hochberg adjusted p-value, NaN until corrected
        zscore: Gene-set score (enrichment comparison only)
        oddsratio: Changed-gene odds ratio (enrichment comparison only)
    """
    pathway: str
    ingroup_n: int
    ingroup_mean: float
    outgroup_n: int
    outgroup_mean: float
    pvalue: float
    padj: float = float('nan')
    zscore: Optional[float] = None
    oddsratio: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary format."""
        return asdict(self)


def gene_zscores(matrix: pd.DataFrame, grouping: SampleGrouping) -> pd.Series:
    """
    Compute a two-group z-score for every gene.

    z = (mean_primary - mean_secondary) / sqrt(var_primary / n_primary
    + var_secondary / n_secondary), using non-missing cells only. Genes
    with fewer than two values in either group or a zero standard error
    get NaN.

    Args:
        matrix: Genes x samples matrix
        grouping: Sample partition; every grouped sample must be a column

    Returns:
        Series of z-scores indexed by gene
    """
    grouping.validate_against(matrix.columns)

    # grouping ids are strings; column labels may not be
    labels = matrix.columns.astype(str)
    primary = matrix.loc[:, labels.isin(grouping.primary)]
    secondary = matrix.loc[:, labels.isin(grouping.secondary)]

    n_primary = primary.count(axis=1)
    n_secondary = secondary.count(axis=1)

    std_error = np.sqrt(
        primary.var(axis=1, ddof=1) / n_primary
        + secondary.var(axis=1, ddof=1) / n_secondary
    )
    std_error = std_error.where(std_error > 0)

    zscores = (primary.mean(axis=1) - secondary.mean(axis=1)) / std_error
    zscores[(n_primary < 2) | (n_secondary < 2)] = np.nan
    zscores.name = 'zscore'

    return zscores


def _moments(values: np.ndarray) -> Tuple[int, float, float]:
    return values.size, float(values.sum()), float(np.square(values).sum())


def _mean_and_std(n: int, total: float, total_sq: float) -> Tuple[float, float]:
    if n == 0:
        return np.nan, np.nan
    mean = total / n
    if n == 1:
        return mean, 0.0
    sum_sq_dev = max(total_sq - total * total / n, 0.0)
    return mean, float(np.sqrt(sum_sq_dev / (n - 1)))


def _correlation_result(name: str,
                        positions: np.ndarray,
                        corr: np.ndarray,
                        totals: Tuple[int, float, float],
                        alternative: str) -> PathwayResult:
    sub = corr[np.ix_(positions, positions)]
    in_values = sub[np.triu_indices(len(positions), k=1)]
    in_values = in_values[~np.isnan(in_values)]

    in_n, in_sum, in_sumsq = _moments(in_values)
    out_n = totals[0] - in_n
    out_sum = totals[1] - in_sum
    out_sumsq = totals[2] - in_sumsq

    in_mean, in_std = _mean_and_std(in_n, in_sum, in_sumsq)
    out_mean, out_std = _mean_and_std(out_n, out_sum, out_sumsq)

    pvalue = np.nan
    if in_n >= 1 and out_n >= 1 and in_n + out_n > 2:
        with np.errstate(divide='ignore', invalid='ignore'):
            _, pvalue = stats.ttest_ind_from_stats(
                in_mean, in_std, in_n,
                out_mean, out_std, out_n,
                equal_var=True,
                alternative=alternative
            )

    return PathwayResult(
        pathway=name,
        ingroup_n=int(in_n),
        ingroup_mean=float(in_mean),
        outgroup_n=int(out_n),
        outgroup_mean=float(out_mean),
        pvalue=float(pvalue),
    )


def _comparison_result(name: str,
                       positions: np.ndarray,
                       zscores: np.ndarray,
                       threshold: float,
                       alternative: str) -> PathwayResult:
    finite = ~np.isnan(zscores)
    member = np.zeros(zscores.size, dtype=bool)
    member[positions] = True

    in_z = zscores[member & finite]
    out_z = zscores[~member & finite]
    in_n, out_n = in_z.size, out_z.size

    in_mean = float(in_z.mean()) if in_n else np.nan
    out_mean = float(out_z.mean()) if out_n else np.nan
    out_std = float(out_z.std(ddof=1)) if out_n > 1 else np.nan

    if in_n and out_std > 0:
        zscore = (in_mean - out_mean) * np.sqrt(in_n) / out_std
    else:
        zscore = np.nan

    oddsratio, pvalue = np.nan, np.nan
    if in_n and out_n:
        in_changed = int((np.abs(in_z) >= threshold).sum())
        out_changed = int((np.abs(out_z) >= threshold).sum())
        table = [[in_changed, in_n - in_changed],
                 [out_changed, out_n - out_changed]]
        oddsratio, pvalue = stats.fisher_exact(table, alternative=alternative)

    return PathwayResult(
        pathway=name,
        ingroup_n=int(in_n),
        ingroup_mean=in_mean,
        outgroup_n=int(out_n),
        outgroup_mean=out_mean,
        pvalue=float(pvalue),
        zscore=float(zscore),
        oddsratio=float(oddsratio),
    )


class EnrichmentEngine:
    """
    Pathway enrichment over a gene-set database.

    The engine holds the gene-set database and configuration; the
    expression matrix is passed to each operation. Results come back in
    database order whether or not pathways are evaluated in parallel.

    Attributes:
        gene_sets: GeneSetDatabase of pathways to test
        config: AnalysisConfig with thresholds and parallelism settings

    Example:
        >>> engine = EnrichmentEngine(gene_sets, config=AnalysisConfig(n_jobs=4))
        >>> correlation = engine.correlation_enrichment(normalized)
        >>> comparison = engine.enrichment_comparison(normalized, grouping)
    """

    def __init__(self,
                 gene_sets: Union[GeneSetDatabase, Mapping[str, Sequence[str]]],
                 config: Optional[AnalysisConfig] = None):
        if not isinstance(gene_sets, GeneSetDatabase):
            gene_sets = GeneSetDatabase.from_dict(gene_sets)

        if len(gene_sets) == 0:
            raise ConfigurationError("Gene-set database is empty")

        self.gene_sets = gene_sets
        self.config = (config or AnalysisConfig()).validate()

    @staticmethod
    def _check_matrix(matrix: pd.DataFrame) -> None:
        if matrix.shape[0] == 0 or matrix.shape[1] == 0:
            raise ConfigurationError(
                f"Expression matrix must have rows and columns, got shape {matrix.shape}"
            )
        if not matrix.index.is_unique:
            raise ConfigurationError("Expression matrix has duplicate gene identifiers")

    def _testable_pathways(self, genes: pd.Index) -> List[Tuple[str, np.ndarray]]:
        """Pair each pathway with the matrix row positions of its present genes."""
        testable = []
        n_skipped = 0

        for name, members in self.gene_sets.items():
            positions = genes.get_indexer(sorted(members))
            positions = np.sort(positions[positions >= 0])

            if positions.size < self.config.min_genes:
                logger.debug(f"Skipping {name}: {positions.size} genes present")
                n_skipped += 1
                continue

            testable.append((name, positions))

        logger.info(f"Testing {len(testable)} pathways "
                    f"({n_skipped} skipped with fewer than {self.config.min_genes} genes present)")

        return testable

    def _evaluate(self, func, pathways: List[Tuple[str, np.ndarray]], *args) -> List[PathwayResult]:
        if self.config.n_jobs == 1:
            return [func(name, positions, *args) for name, positions in pathways]

        return list(Parallel(n_jobs=self.config.n_jobs)(
            delayed(func)(name, positions, *args) for name, positions in pathways
        ))

    def correlation_enrichment(self, matrix: pd.DataFrame) -> List[PathwayResult]:
        """
        Score pathways by within-pathway gene-gene correlation.

        Args:
            matrix: Normalized genes x samples matrix

        Returns:
            Raw (uncorrected) PathwayResult per tested pathway, in
            database order

        Raises:
            ConfigurationError: If the matrix has no rows or no columns
        """
        self._check_matrix(matrix)

        corr = matrix.T.corr(
            method=self.config.correlation_method,
            min_periods=self.config.min_periods
        ).to_numpy()

        upper = np.triu_indices(corr.shape[0], k=1)
        pair_values = corr[upper]
        pair_values = pair_values[~np.isnan(pair_values)]
        totals = _moments(pair_values)

        logger.info(f"Computed {totals[0]} valid gene-gene correlations "
                    f"across {matrix.shape[0]} genes")

        pathways = self._testable_pathways(matrix.index)
        return self._evaluate(_correlation_result, pathways, corr, totals,
                              self.config.ttest_alternative)

    def enrichment_comparison(self,
                              matrix: pd.DataFrame,
                              grouping: SampleGrouping) -> List[PathwayResult]:
        """
        Score pathways by differential expression between two sample groups.

        Args:
            matrix: Normalized genes x samples matrix
            grouping: Primary/secondary sample partition

        Returns:
            Raw (uncorrected) PathwayResult per tested pathway, in
            database order

        Raises:
            ConfigurationError: If the matrix is empty or the grouping
                does not match the matrix columns
        """
        self._check_matrix(matrix)

        zscores = gene_zscores(matrix, grouping)
        n_valid = int(zscores.notna().sum())
        n_changed = int((zscores.abs() >= self.config.zscore_threshold).sum())

        logger.info(f"Comparing {grouping.primary_label} (n={len(grouping.primary)}) vs "
                    f"{grouping.secondary_label} (n={len(grouping.secondary)}): "
                    f"{n_valid} genes scored, {n_changed} changed")

        pathways = self._testable_pathways(matrix.index)
        return self._evaluate(_comparison_result, pathways, zscores.to_numpy(),
                              self.config.zscore_threshold,
                              self.config.fisher_alternative)
