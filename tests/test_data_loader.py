"""
Tests for the data loading module.

Tests cover:
- In-memory and file-backed table sources
- Remote table fetching (mocked HTTP)
- Required column validation
- Synthetic cohort generation
"""

import pytest
from unittest.mock import patch, MagicMock

import numpy as np
import pandas as pd
import requests

from proteome_pathways.data.loaders import (
    DataFrameSource,
    FileTableSource,
    RemoteTableSource,
    load_expression_table,
    create_sample_data,
)
from proteome_pathways.exceptions import ConfigurationError


def _mock_response(text=None, payload=None, status_error=None):
    response = MagicMock()
    response.text = text
    response.json.return_value = payload
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    return response


class TestDataFrameSource:
    """Tests for DataFrameSource."""

    def test_fetch_returns_copy(self, mock_long_table):
        """Fetched table should be equal but not the same object."""
        source = DataFrameSource(mock_long_table)
        table = source.fetch()
        pd.testing.assert_frame_equal(table, mock_long_table)
        assert table is not mock_long_table


class TestFileTableSource:
    """Tests for FileTableSource."""

    def test_csv(self, tmp_path, mock_long_table):
        """CSV files are read by suffix."""
        path = tmp_path / "cohort.csv"
        mock_long_table.to_csv(path, index=False)
        table = FileTableSource(path).fetch()
        assert list(table.columns) == list(mock_long_table.columns)
        assert len(table) == len(mock_long_table)

    def test_tsv(self, tmp_path, mock_long_table):
        """TSV files are read with a tab separator."""
        path = tmp_path / "cohort.tsv"
        mock_long_table.to_csv(path, sep="\t", index=False)
        table = FileTableSource(path).fetch()
        assert table.shape == mock_long_table.shape

    def test_unsupported_format(self, tmp_path):
        """Unknown suffixes raise ConfigurationError."""
        path = tmp_path / "cohort.parquet"
        path.write_bytes(b"")
        with pytest.raises(ConfigurationError, match="Unsupported file format"):
            FileTableSource(path).fetch()


class TestRemoteTableSource:
    """Tests for RemoteTableSource."""

    def test_invalid_format(self):
        """Unknown payload formats are rejected at construction."""
        with pytest.raises(ConfigurationError, match="Unknown table format"):
            RemoteTableSource("https://example.org/table", format="xml")

    @patch("proteome_pathways.data.loaders.requests.get")
    def test_fetch_csv(self, mock_get, mock_long_table):
        """CSV payloads are parsed into a DataFrame."""
        mock_get.return_value = _mock_response(text=mock_long_table.to_csv(index=False))

        source = RemoteTableSource("https://example.org/table", params={"study": "aml"})
        table = source.fetch()

        assert table.shape == mock_long_table.shape
        args, kwargs = mock_get.call_args
        assert args[0] == "https://example.org/table"
        assert kwargs["params"] == {"study": "aml"}
        assert kwargs["timeout"] == 60

    @patch("proteome_pathways.data.loaders.requests.get")
    def test_fetch_json(self, mock_get, mock_long_table):
        """JSON record payloads are parsed into a DataFrame."""
        records = mock_long_table.to_dict(orient="records")
        mock_get.return_value = _mock_response(payload=records)

        table = RemoteTableSource("https://example.org/table", format="json").fetch()

        assert len(table) == len(records)
        assert "gene" in table.columns

    @patch("proteome_pathways.data.loaders.requests.get")
    def test_token_header(self, mock_get, monkeypatch, mock_long_table):
        """A token from the environment is sent as a header."""
        monkeypatch.setenv("PROTEOMICS_API_TOKEN", "secret")
        mock_get.return_value = _mock_response(text=mock_long_table.to_csv(index=False))

        RemoteTableSource("https://example.org/table", token_env="PROTEOMICS_API_TOKEN").fetch()

        headers = mock_get.call_args[1]["headers"]
        assert headers["X-API-TOKEN"] == "secret"

    @patch("proteome_pathways.data.loaders.requests.get")
    def test_missing_token_omits_header(self, mock_get, monkeypatch, mock_long_table):
        """Without the environment variable no token header is sent."""
        monkeypatch.delenv("PROTEOMICS_API_TOKEN", raising=False)
        mock_get.return_value = _mock_response(text=mock_long_table.to_csv(index=False))

        RemoteTableSource("https://example.org/table", token_env="PROTEOMICS_API_TOKEN").fetch()

        headers = mock_get.call_args[1]["headers"]
        assert "X-API-TOKEN" not in headers

    @patch("proteome_pathways.data.loaders.requests.get")
    def test_http_error_propagates(self, mock_get):
        """HTTP errors are raised, not swallowed."""
        mock_get.return_value = _mock_response(status_error=requests.HTTPError("404"))

        with pytest.raises(requests.HTTPError):
            RemoteTableSource("https://example.org/missing").fetch()


class TestLoadExpressionTable:
    """Tests for load_expression_table."""

    def test_valid_table(self, mock_long_table):
        """A table with all required columns is returned unchanged."""
        table = load_expression_table(DataFrameSource(mock_long_table))
        assert len(table) == len(mock_long_table)

    def test_missing_columns(self, mock_long_table):
        """Missing required columns raise ConfigurationError."""
        source = DataFrameSource(mock_long_table.drop(columns=["value"]))
        with pytest.raises(ConfigurationError, match="missing columns"):
            load_expression_table(source)

    def test_empty_table(self):
        """An empty table raises ConfigurationError."""
        source = DataFrameSource(pd.DataFrame(columns=["gene", "sample", "value"]))
        with pytest.raises(ConfigurationError, match="empty"):
            load_expression_table(source)


class TestCreateSampleData:
    """Tests for create_sample_data."""

    def test_shape(self):
        """One row per gene and sample, with metadata columns."""
        table = create_sample_data(n_samples=10, n_genes=20)
        assert len(table) == 200
        assert {"gene", "sample", "value", "subtype", "sex", "age"} <= set(table.columns)
        assert table["sample"].nunique() == 10

    def test_reproducible(self):
        """Same seed yields identical data."""
        a = create_sample_data(n_samples=8, n_genes=15, random_state=1)
        b = create_sample_data(n_samples=8, n_genes=15, random_state=1)
        pd.testing.assert_frame_equal(a, b)

    def test_gene_set_members_included(self, planted_gene_sets):
        """Genes named in gene sets are added to the cohort."""
        table = create_sample_data(n_samples=6, n_genes=60, gene_sets=planted_gene_sets)
        assert {"PLANT0", "PLANT5"} <= set(table["gene"])

    def test_planted_shift(self, planted_gene_sets):
        """Planted pathway members are higher in AML samples."""
        table = create_sample_data(
            n_samples=40, n_genes=60, gene_sets=planted_gene_sets,
            shifted_pathway="PLANTED", shift=3.0
        )
        planted = table[table["gene"].str.startswith("PLANT")]
        means = planted.groupby("subtype")["value"].mean()
        assert means["AML"] - means["ALL"] > 2.0

    def test_unknown_shifted_pathway(self, planted_gene_sets):
        """Shifting a pathway that is not supplied raises ConfigurationError."""
        with pytest.raises(ConfigurationError):
            create_sample_data(gene_sets=planted_gene_sets, shifted_pathway="NOPE")

    def test_missing_rate(self):
        """A missing rate drops measurements."""
        table = create_sample_data(n_samples=20, n_genes=50, missing_rate=0.2)
        assert len(table) < 1000
