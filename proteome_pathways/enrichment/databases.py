"""
Pathway / gene-set databases.

Gene sets are supplied explicitly to the enrichment engine, either built
from an in-memory mapping or parsed from MSigDB-style GMT files (for
example the NCI-PID or curated canonical pathway collections).
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Set, Union

logger = logging.getLogger(__name__)


class GeneSetDatabase:
    """
    Ordered, read-only collection of named gene sets.

    Iteration follows insertion order, which fixes the order in which
    pathways are tested and reported.

    Attributes:
        gene_sets: Dictionary mapping gene set names to frozensets of genes
        gene_set_metadata: Dictionary mapping gene set names to metadata

    Example:
        >>> db = GeneSetDatabase.from_dict({
        ...     'PID_P53_DOWNSTREAM_PATHWAY': ['TP53', 'CDKN1A', 'MDM2'],
        ...     'PID_MYC_ACTIV_PATHWAY': ['MYC', 'MAX', 'CDK4'],
        ... })
        >>> len(db)
        2
    """

    def __init__(self):
        self.gene_sets: Dict[str, FrozenSet[str]] = {}
        self.gene_set_metadata: Dict[str, Dict[str, Any]] = {}

    @classmethod
    def from_dict(cls, mapping: Mapping[str, Iterable[str]]) -> 'GeneSetDatabase':
        """Build a database from a pathway name -> genes mapping."""
        db = cls()
        for name, genes in mapping.items():
            db.add(name, genes)
        return db

    @classmethod
    def load_gmt(cls, gmt_paths: Union[str, Path, List[Union[str, Path]]]) -> 'GeneSetDatabase':
        """Build a database from one or more GMT files."""
        if isinstance(gmt_paths, (str, Path)):
            gmt_paths = [gmt_paths]

        db = cls()
        for path in gmt_paths:
            db.parse_gmt_file(path)
        return db

    def add(self, name: str, genes: Iterable[str], description: str = '',
            source: Optional[str] = None) -> None:
        """
        Add or replace a gene set.

        Args:
            name: Gene set name
            genes: Member gene identifiers; duplicates are collapsed
            description: Free-text description or URL
            source: File the gene set came from, if any
        """
        members = frozenset(str(g) for g in genes if g)
        self.gene_sets[name] = members
        self.gene_set_metadata[name] = {
            'name': name,
            'description': description,
            'size': len(members),
            'source_file': source
        }

    def parse_gmt_file(self, gmt_path: Union[str, Path]) -> int:
        """
        Parse a GMT format gene set file.

        GMT format: Each line contains:
        - Gene set name (tab-separated)
        - Description/URL (tab-separated)
        - Gene symbols (tab-separated)

        Args:
            gmt_path: Path to the GMT file

        Returns:
            Number of gene sets loaded from the file

        Raises:
            FileNotFoundError: If the file does not exist
        """
        gmt_path = str(gmt_path)
        if not os.path.exists(gmt_path):
            raise FileNotFoundError(f"GMT file not found: {gmt_path}")

        count = 0

        with open(gmt_path, 'r', encoding='utf-8') as f:
            for line_no, line in enumerate(f, start=1):
                line = line.rstrip('\n\r')
                if not line.strip():
                    continue

                parts = line.split('\t')
                if len(parts) < 3:
                    logger.warning(f"Skipping line {line_no} of {gmt_path}: no genes listed")
                    continue

                genes = [g.strip() for g in parts[2:] if g.strip()]
                self.add(parts[0].strip(), genes, description=parts[1], source=gmt_path)
                count += 1

        logger.info(f"Parsed {count} gene sets from {gmt_path}")

        return count

    def filter_by_size(self, min_size: int = 1,
                       max_size: Optional[int] = None) -> 'GeneSetDatabase':
        """
        Return a new database with gene sets inside a size range.

        Args:
            min_size: Minimum gene set size (inclusive)
            max_size: Maximum gene set size (inclusive), unbounded if None
        """
        filtered = GeneSetDatabase()
        for name, genes in self.gene_sets.items():
            if len(genes) < min_size or (max_size is not None and len(genes) > max_size):
                continue
            meta = self.gene_set_metadata[name]
            filtered.add(name, genes, meta['description'], meta['source_file'])
        return filtered

    def get_gene_set(self, set_name: str) -> Optional[FrozenSet[str]]:
        """Get genes in a specific gene set, or None if not found."""
        return self.gene_sets.get(set_name)

    def background(self) -> Set[str]:
        """Set of all unique genes across all gene sets."""
        background: Set[str] = set()
        for genes in self.gene_sets.values():
            background.update(genes)
        return background

    def summary(self) -> Dict[str, Any]:
        """
        Get summary statistics of loaded gene sets.

        Returns:
            Dictionary with summary statistics
        """
        sizes = [len(genes) for genes in self.gene_sets.values()]

        return {
            'total_gene_sets': len(self.gene_sets),
            'total_unique_genes': len(self.background()),
            'min_set_size': min(sizes) if sizes else 0,
            'max_set_size': max(sizes) if sizes else 0,
            'mean_set_size': sum(sizes) / len(sizes) if sizes else 0
        }

    def items(self):
        return self.gene_sets.items()

    def __len__(self) -> int:
        return len(self.gene_sets)

    def __iter__(self) -> Iterator[str]:
        return iter(self.gene_sets)

    def __contains__(self, name: object) -> bool:
        return name in self.gene_sets

    def __repr__(self) -> str:
        return f"GeneSetDatabase({len(self)} gene sets)"
