"""
Reshaping and normalization of proteomic expression data.
"""

import logging
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def pivot_expression_table(
    table: pd.DataFrame,
    feature_col: str = 'gene',
    sample_col: str = 'sample',
    value_col: str = 'value'
) -> pd.DataFrame:
    """
    Reshape a long expression table into a genes x samples matrix.

    Parameters:
    -----------
    table : pd.DataFrame
        Long table with one row per (feature, sample) measurement
    feature_col : str
        Column holding feature (gene) identifiers
    sample_col : str
        Column holding sample identifiers
    value_col : str
        Column holding expression values

    Returns:
    --------
    pd.DataFrame
        Matrix with genes as rows and samples as columns. Cells without a
        measurement are NaN; duplicate measurements are averaged.
    """

    for col in (feature_col, sample_col, value_col):
        if col not in table.columns:
            raise ConfigurationError(f"Column '{col}' not found in expression table")

    values = pd.to_numeric(table[value_col], errors='coerce')
    n_invalid = int(values.isna().sum() - table[value_col].isna().sum())
    if n_invalid > 0:
        logger.warning(f"Coerced {n_invalid} non-numeric values to missing")

    long_df = pd.DataFrame({
        feature_col: table[feature_col].astype(str),
        sample_col: table[sample_col].astype(str),
        value_col: values,
    })

    matrix = long_df.groupby([feature_col, sample_col])[value_col].mean().unstack(sample_col)
    matrix = matrix.sort_index().sort_index(axis=1)
    matrix.index.name = feature_col
    matrix.columns.name = sample_col

    logger.info(f"Pivoted expression matrix: {matrix.shape[0]} genes x {matrix.shape[1]} samples, "
                f"{int(matrix.isna().sum().sum())} missing cells")

    return matrix.astype(float)


def extract_sample_metadata(
    table: pd.DataFrame,
    sample_col: str = 'sample',
    metadata_cols: Optional[Iterable[str]] = None,
    exclude: Iterable[str] = ('gene', 'value')
) -> pd.DataFrame:
    """
    Collect per-sample metadata from a long expression table.

    Parameters:
    -----------
    table : pd.DataFrame
        Long expression table
    sample_col : str
        Column holding sample identifiers
    metadata_cols : Iterable[str], optional
        Metadata columns to keep. Defaults to every column except the
        sample column and the ``exclude`` columns.
    exclude : Iterable[str]
        Columns never treated as metadata

    Returns:
    --------
    pd.DataFrame
        One row per sample, indexed by sample identifier
    """

    if metadata_cols is None:
        skip = set(exclude) | {sample_col}
        metadata_cols = [col for col in table.columns if col not in skip]
    else:
        metadata_cols = list(metadata_cols)
        missing = [col for col in metadata_cols if col not in table.columns]
        if missing:
            raise ConfigurationError(f"Metadata columns not found: {missing}")

    metadata = (
        table[[sample_col] + metadata_cols]
        .drop_duplicates(subset=sample_col, keep='first')
        .assign(**{sample_col: lambda df: df[sample_col].astype(str)})
        .set_index(sample_col)
        .sort_index()
    )

    return metadata


def normalize_rows(matrix: pd.DataFrame) -> pd.DataFrame:
    """
    Center and scale every row of an expression matrix.

    Each row has its mean subtracted and is divided by its standard
    deviation (ddof=1), both computed over non-missing cells only.
    Rows with zero or undefined standard deviation (constant or
    single-valued rows) come back entirely NaN.

    Parameters:
    -----------
    matrix : pd.DataFrame
        Genes x samples matrix, missing cells as NaN

    Returns:
    --------
    pd.DataFrame
        New normalized matrix with the same index and columns
    """

    row_mean = matrix.mean(axis=1, skipna=True)
    row_std = matrix.std(axis=1, skipna=True, ddof=1)
    row_std = row_std.where(row_std > 0, np.nan)

    normalized = matrix.sub(row_mean, axis=0).div(row_std, axis=0)

    n_degenerate = int(row_std.isna().sum())
    if n_degenerate > 0:
        logger.warning(f"{n_degenerate} rows have zero or undefined variance and were set to NaN")

    return normalized
