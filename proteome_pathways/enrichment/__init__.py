"""
Pathway enrichment analysis for proteomic expression data.

Key Components:
    - EnrichmentEngine: correlation enrichment and two-group enrichment
      comparison over a gene-set database
    - PathwayResult: per-pathway statistics container
    - GeneSetDatabase: ordered pathway -> genes mapping, loadable from GMT

Example Usage:
    >>> from proteome_pathways.enrichment import EnrichmentEngine, GeneSetDatabase
    >>>
    >>> gene_sets = GeneSetDatabase.load_gmt('c2.cp.pid.v2023.2.Hs.symbols.gmt')
    >>> engine = EnrichmentEngine(gene_sets)
    >>> results = engine.correlation_enrichment(normalized_matrix)
"""

from .analysis import (
    EnrichmentEngine,
    PathwayResult,
    gene_zscores
)
from .databases import GeneSetDatabase

__all__ = [
    'EnrichmentEngine',
    'PathwayResult',
    'gene_zscores',
    'GeneSetDatabase'
]
