"""
Two-group sample partitions used by enrichment comparison.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Tuple

import pandas as pd

from ..exceptions import ConfigurationError


@dataclass(frozen=True)
class SampleGrouping:
    """
    Named partition of samples into a primary and a secondary group.

    Groups are keyed by sample identifier, never by column position.
    Samples in neither group are left out of the comparison.

    Attributes:
        primary: Sample identifiers of the primary group
        secondary: Sample identifiers of the secondary group
        primary_label: Display name of the primary group
        secondary_label: Display name of the secondary group

    Example:
        >>> grouping = SampleGrouping(
        ...     primary=('PT000', 'PT002'),
        ...     secondary=('PT001', 'PT003'),
        ...     primary_label='AML',
        ...     secondary_label='ALL'
        ... )
    """
    primary: Tuple[str, ...]
    secondary: Tuple[str, ...]
    primary_label: str = 'primary'
    secondary_label: str = 'secondary'

    def __post_init__(self):
        object.__setattr__(self, 'primary', tuple(str(s) for s in self.primary))
        object.__setattr__(self, 'secondary', tuple(str(s) for s in self.secondary))

        if not self.primary or not self.secondary:
            raise ConfigurationError("Both sample groups must be non-empty")

        overlap = sorted(set(self.primary) & set(self.secondary))
        if overlap:
            raise ConfigurationError(f"Samples assigned to both groups: {overlap}")

    @classmethod
    def from_metadata(cls,
                      metadata: pd.DataFrame,
                      column: str,
                      primary_values: Any,
                      secondary_values: Any = None) -> 'SampleGrouping':
        """
        Build a grouping from a sample metadata column.

        Args:
            metadata: Sample metadata indexed by sample identifier
            column: Metadata column to split on
            primary_values: Value or list of values defining the primary group
            secondary_values: Value or list of values defining the secondary
                group. If None, every sample not in the primary group.

        Returns:
            SampleGrouping over the matching sample identifiers
        """
        if column not in metadata.columns:
            raise ConfigurationError(f"Metadata column '{column}' not found")

        primary_values = _as_list(primary_values)
        primary_mask = metadata[column].isin(primary_values)

        if secondary_values is None:
            secondary_mask = ~primary_mask & metadata[column].notna()
            secondary_label = 'other'
        else:
            secondary_values = _as_list(secondary_values)
            secondary_mask = metadata[column].isin(secondary_values)
            secondary_label = '/'.join(str(v) for v in secondary_values)

        return cls(
            primary=tuple(metadata.index[primary_mask]),
            secondary=tuple(metadata.index[secondary_mask]),
            primary_label='/'.join(str(v) for v in primary_values),
            secondary_label=secondary_label,
        )

    def validate_against(self, samples: Iterable[str]) -> None:
        """
        Check that every grouped sample exists in the matrix.

        Raises:
            ConfigurationError: If a grouped sample is not a matrix column
        """
        available = set(str(s) for s in samples)
        unknown = sorted((set(self.primary) | set(self.secondary)) - available)
        if unknown:
            raise ConfigurationError(f"Grouped samples not found in matrix: {unknown}")

    @property
    def sizes(self) -> Tuple[int, int]:
        return len(self.primary), len(self.secondary)


def _as_list(values: Any) -> list:
    if isinstance(values, (list, tuple, set, frozenset)):
        return list(values)
    return [values]
