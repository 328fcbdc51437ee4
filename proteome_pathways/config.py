"""
Configuration for pathway enrichment analysis.
"""

import logging
from dataclasses import dataclass, fields, asdict
from typing import Any, Dict

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CORRELATION_METHODS = ('pearson', 'spearman', 'kendall')
ALTERNATIVES = ('two-sided', 'less', 'greater')


@dataclass
class AnalysisConfig:
    """
    Configuration for pathway enrichment analysis.

    Attributes:
        significance_threshold: Adjusted p-value cutoff; results with
            padj >= threshold are dropped (default: 0.05)
        top_k: Maximum number of ranked pathways to report (default: 20)
        min_genes: Minimum number of pathway genes present in the matrix
            for the pathway to be tested (default: 2)
        zscore_threshold: Absolute per-gene z-score at which a gene counts
            as changed in enrichment comparison (default: 1.96)
        correlation_method: Gene-gene correlation method (default: 'pearson')
        min_periods: Minimum overlapping samples for a gene pair to get a
            correlation (default: 3)
        ttest_alternative: Alternative hypothesis of the correlation
            enrichment t-test (default: 'two-sided')
        fisher_alternative: Alternative hypothesis of the Fisher exact test
            in enrichment comparison (default: 'two-sided')
        n_jobs: Number of parallel jobs for pathway evaluation (default: 1)

    Example:
        >>> config = AnalysisConfig(significance_threshold=0.01, top_k=10)
        >>> engine = EnrichmentEngine(gene_sets, config=config)
    """
    significance_threshold: float = 0.05
    top_k: int = 20
    min_genes: int = 2
    zscore_threshold: float = 1.96
    correlation_method: str = 'pearson'
    min_periods: int = 3
    ttest_alternative: str = 'two-sided'
    fisher_alternative: str = 'two-sided'
    n_jobs: int = 1

    def validate(self) -> 'AnalysisConfig':
        """
        Check that every setting is in range.

        Returns:
            The config itself, so calls can be chained

        Raises:
            ConfigurationError: If any setting is invalid
        """
        if not 0 < self.significance_threshold <= 1:
            raise ConfigurationError(
                f"significance_threshold must be in (0, 1], got {self.significance_threshold}"
            )
        if self.top_k < 1:
            raise ConfigurationError(f"top_k must be positive, got {self.top_k}")
        if self.min_genes < 2:
            raise ConfigurationError(f"min_genes must be at least 2, got {self.min_genes}")
        if self.zscore_threshold <= 0:
            raise ConfigurationError(
                f"zscore_threshold must be positive, got {self.zscore_threshold}"
            )
        if self.correlation_method not in CORRELATION_METHODS:
            raise ConfigurationError(
                f"Unknown correlation method: {self.correlation_method}. "
                f"Choose from {CORRELATION_METHODS}"
            )
        if self.min_periods < 2:
            raise ConfigurationError(f"min_periods must be at least 2, got {self.min_periods}")
        for name in ('ttest_alternative', 'fisher_alternative'):
            if getattr(self, name) not in ALTERNATIVES:
                raise ConfigurationError(
                    f"Unknown {name}: {getattr(self, name)}. Choose from {ALTERNATIVES}"
                )
        if self.n_jobs == 0:
            raise ConfigurationError("n_jobs must be non-zero")
        return self

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'AnalysisConfig':
        """
        Build a validated config from a plain mapping.

        Unknown keys are ignored with a warning.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {unknown}")
        config = cls(**{k: v for k, v in values.items() if k in known})
        return config.validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary format."""
        return asdict(self)
