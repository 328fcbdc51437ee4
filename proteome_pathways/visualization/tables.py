"""
Tabular rendering of pathway enrichment results.
"""

from typing import Optional

import pandas as pd

PVALUE_COLUMNS = ('pvalue', 'padj')


def format_results_table(results: pd.DataFrame, digits: int = 4) -> pd.DataFrame:
    """
    Prepare a results table for display.

    Numeric statistics are rounded to ``digits`` decimals and p-value
    columns are written in scientific notation.

    Parameters:
    -----------
    results : pd.DataFrame
        Pathway results, e.g. from results_to_frame
    digits : int
        Decimal places for non-p-value statistics

    Returns:
    --------
    pd.DataFrame
        Display copy of the table
    """

    table = results.copy()

    for col in table.columns:
        if col in PVALUE_COLUMNS:
            table[col] = table[col].map(lambda p: '' if pd.isna(p) else f'{p:.2e}')
        elif pd.api.types.is_float_dtype(table[col]):
            table[col] = table[col].round(digits)

    return table


def render_results_table(results: pd.DataFrame,
                         caption: Optional[str] = None,
                         digits: int = 4) -> str:
    """
    Render pathway results as an HTML table.

    Parameters:
    -----------
    results : pd.DataFrame
        Pathway results
    caption : str, optional
        Caption placed above the table
    digits : int
        Decimal places for non-p-value statistics

    Returns:
    --------
    str
        HTML fragment
    """

    html = format_results_table(results, digits=digits).to_html(
        index=False,
        classes='enrichment-results',
        border=0,
        na_rep='',
    )

    if caption:
        html = f'<h3>{caption}</h3>\n{html}'

    return html
