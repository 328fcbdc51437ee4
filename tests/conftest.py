"""Shared pytest fixtures for proteome pathway tests."""
import matplotlib
matplotlib.use("Agg")

import pytest
import numpy as np
import pandas as pd


def _gene_names(n):
    return [f"G{i:03d}" for i in range(n)]


def _sample_names(n):
    return [f"PT{i:03d}" for i in range(n)]


@pytest.fixture
def mock_expression_matrix():
    """Random expression matrix (50 genes x 20 samples)."""
    np.random.seed(42)
    return pd.DataFrame(
        np.random.normal(0, 1, size=(50, 20)),
        index=_gene_names(50),
        columns=_sample_names(20),
    )


@pytest.fixture
def correlated_matrix():
    """10 genes x 20 samples; G000 and G001 perfectly correlated, the rest unrelated."""
    rng = np.random.default_rng(7)
    data = rng.normal(0, 1, size=(10, 20))
    data[1] = 2.0 * data[0] + 1.0
    return pd.DataFrame(data, index=_gene_names(10), columns=_sample_names(20))


@pytest.fixture
def shifted_matrix():
    """50 genes x 20 samples; G000-G004 shifted by +5 in the first 10 samples."""
    rng = np.random.default_rng(11)
    data = rng.normal(0, 1, size=(50, 20))
    data[:5, :10] += 5.0
    return pd.DataFrame(data, index=_gene_names(50), columns=_sample_names(20))


@pytest.fixture
def mock_gene_sets():
    """Small pathway database over the fixture gene names."""
    return {
        "PATHWAY_A": ["G000", "G001", "G002", "G003", "G004"],
        "PATHWAY_B": ["G010", "G011", "G012", "G013"],
        "PATHWAY_C": ["G020", "G021", "G022", "G030", "G031", "G032"],
        "PATHWAY_UNDERPOWERED": ["G040", "NOT_MEASURED"],
        "PATHWAY_ABSENT": ["X1", "X2", "X3"],
    }


@pytest.fixture
def mock_grouping():
    """First ten samples vs last ten samples."""
    from proteome_pathways.data.grouping import SampleGrouping
    samples = _sample_names(20)
    return SampleGrouping(
        primary=tuple(samples[:10]),
        secondary=tuple(samples[10:]),
        primary_label="AML",
        secondary_label="ALL",
    )


@pytest.fixture
def mock_long_table():
    """Long-format table with metadata columns (4 genes x 6 samples)."""
    rng = np.random.default_rng(3)
    genes = ["TP53", "MYC", "FLT3", "NPM1"]
    samples = _sample_names(6)
    rows = []
    for s_idx, sample in enumerate(samples):
        for gene in genes:
            rows.append({
                "gene": gene,
                "sample": sample,
                "value": float(rng.normal(10, 2)),
                "subtype": "AML" if s_idx % 2 == 0 else "ALL",
                "sex": "F" if s_idx < 3 else "M",
            })
    return pd.DataFrame(rows)


@pytest.fixture
def planted_gene_sets():
    """Gene sets for create_sample_data with one planted pathway."""
    return {
        "PLANTED": [f"PLANT{i}" for i in range(6)],
        "RANDOM_1": [f"GENE{i:04d}" for i in range(0, 10)],
        "RANDOM_2": [f"GENE{i:04d}" for i in range(10, 25)],
        "RANDOM_3": [f"GENE{i:04d}" for i in range(25, 33)],
        "RANDOM_4": [f"GENE{i:04d}" for i in range(40, 52)],
    }
