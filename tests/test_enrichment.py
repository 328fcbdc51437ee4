"""Tests for the pathway enrichment engine."""
import pytest
import numpy as np
import pandas as pd

from proteome_pathways.config import AnalysisConfig
from proteome_pathways.data.grouping import SampleGrouping
from proteome_pathways.data.preprocessing import normalize_rows
from proteome_pathways.enrichment.analysis import (
    EnrichmentEngine,
    PathwayResult,
    gene_zscores,
)
from proteome_pathways.enrichment.databases import GeneSetDatabase
from proteome_pathways.exceptions import ConfigurationError
from proteome_pathways.utils.ranking import results_to_frame


class TestPathwayResult:
    """Tests for PathwayResult."""

    def test_creation(self):
        """Should create a result container with unset padj."""
        result = PathwayResult(
            pathway="PID_P53_DOWNSTREAM_PATHWAY",
            ingroup_n=10,
            ingroup_mean=0.4,
            outgroup_n=1000,
            outgroup_mean=0.01,
            pvalue=0.001,
        )
        assert np.isnan(result.padj)
        assert result.zscore is None
        assert result.to_dict()["pathway"] == "PID_P53_DOWNSTREAM_PATHWAY"


class TestEngineConfiguration:
    """Tests for configuration errors."""

    def test_empty_gene_sets(self):
        """An empty gene-set database is a configuration error."""
        with pytest.raises(ConfigurationError, match="empty"):
            EnrichmentEngine({})

    def test_accepts_mapping(self, mock_gene_sets):
        """Plain mappings are wrapped in a GeneSetDatabase."""
        engine = EnrichmentEngine(mock_gene_sets)
        assert isinstance(engine.gene_sets, GeneSetDatabase)
        assert len(engine.gene_sets) == len(mock_gene_sets)

    def test_empty_matrix_rows(self, mock_gene_sets):
        """A matrix without rows is a configuration error."""
        engine = EnrichmentEngine(mock_gene_sets)
        with pytest.raises(ConfigurationError):
            engine.correlation_enrichment(pd.DataFrame(columns=["S1", "S2"], dtype=float))

    def test_empty_matrix_columns(self, mock_gene_sets, mock_grouping):
        """A matrix without columns is a configuration error."""
        engine = EnrichmentEngine(mock_gene_sets)
        with pytest.raises(ConfigurationError):
            engine.enrichment_comparison(pd.DataFrame(index=["G000"], dtype=float), mock_grouping)

    def test_invalid_config(self, mock_gene_sets):
        """Invalid settings are rejected."""
        with pytest.raises(ConfigurationError):
            EnrichmentEngine(mock_gene_sets, config=AnalysisConfig(min_genes=1))


class TestCorrelationEnrichment:
    """Tests for correlation enrichment."""

    def test_perfectly_correlated_pair(self, correlated_matrix):
        """Two perfectly correlated members among unrelated genes."""
        engine = EnrichmentEngine({"PAIR": ["G000", "G001"]})
        results = engine.correlation_enrichment(normalize_rows(correlated_matrix))

        assert len(results) == 1
        result = results[0]
        assert result.pathway == "PAIR"
        assert result.ingroup_n == 1
        assert result.ingroup_mean == pytest.approx(1.0)
        assert result.outgroup_n == 44
        assert result.pvalue < 0.05

    def test_outgroup_is_all_pairs_with_a_non_member(self):
        """Out-group holds every valid pair with at least one non-member gene."""
        rng = np.random.default_rng(0)
        matrix = pd.DataFrame(rng.normal(size=(4, 12)), index=["A", "B", "C", "D"])
        engine = EnrichmentEngine({"AB": ["A", "B"]})

        result = engine.correlation_enrichment(matrix)[0]

        corr = np.corrcoef(matrix.to_numpy())
        out_pairs = [(0, 2), (0, 3), (1, 2), (1, 3), (2, 3)]
        expected_out = np.mean([corr[i, j] for i, j in out_pairs])

        assert result.ingroup_n == 1
        assert result.ingroup_mean == pytest.approx(corr[0, 1])
        assert result.outgroup_n == 5
        assert result.outgroup_mean == pytest.approx(expected_out)

    def test_underpowered_pathways_skipped(self, mock_expression_matrix, mock_gene_sets):
        """Pathways with fewer than two present genes produce no record."""
        engine = EnrichmentEngine(mock_gene_sets)
        results = engine.correlation_enrichment(normalize_rows(mock_expression_matrix))

        names = [r.pathway for r in results]
        assert names == ["PATHWAY_A", "PATHWAY_B", "PATHWAY_C"]

    def test_zero_variance_gene_pairs_excluded(self, correlated_matrix):
        """Pairs involving a constant gene are left out of counts and means."""
        matrix = correlated_matrix.copy()
        matrix.loc["CONST"] = 3.0
        engine = EnrichmentEngine({"PAIR_PLUS_CONST": ["G000", "G001", "CONST"]})

        result = engine.correlation_enrichment(normalize_rows(matrix))[0]

        assert result.ingroup_n == 1
        assert result.ingroup_mean == pytest.approx(1.0)
        assert result.outgroup_n == 44

    def test_all_pairs_degenerate(self, correlated_matrix):
        """A pathway whose pairs are all NaN gets a NaN p-value, not an error."""
        matrix = correlated_matrix.copy()
        matrix.loc["CONST1"] = 1.0
        matrix.loc["CONST2"] = 2.0
        engine = EnrichmentEngine({"CONSTANTS": ["CONST1", "CONST2"]})

        result = engine.correlation_enrichment(normalize_rows(matrix))[0]

        assert result.ingroup_n == 0
        assert np.isnan(result.ingroup_mean)
        assert np.isnan(result.pvalue)

    def test_database_order_preserved(self, mock_expression_matrix):
        """Results follow the gene-set database order."""
        gene_sets = {"Z_LAST": ["G001", "G002"], "A_FIRST": ["G003", "G004"]}
        engine = EnrichmentEngine(gene_sets)
        results = engine.correlation_enrichment(mock_expression_matrix)
        assert [r.pathway for r in results] == ["Z_LAST", "A_FIRST"]

    def test_parallel_matches_serial(self, mock_expression_matrix, mock_gene_sets):
        """Parallel evaluation returns the same results as serial."""
        matrix = normalize_rows(mock_expression_matrix)
        serial = EnrichmentEngine(mock_gene_sets).correlation_enrichment(matrix)
        parallel = EnrichmentEngine(
            mock_gene_sets, config=AnalysisConfig(n_jobs=2)
        ).correlation_enrichment(matrix)
        pd.testing.assert_frame_equal(results_to_frame(serial), results_to_frame(parallel))


class TestGeneZscores:
    """Tests for gene_zscores."""

    def test_shift_detected(self, shifted_matrix, mock_grouping):
        """Shifted genes get large positive z-scores."""
        z = gene_zscores(shifted_matrix, mock_grouping)
        assert (z.iloc[:5] > 5).all()
        assert z.iloc[5:].abs().mean() < 2

    def test_constant_gene_is_nan(self, shifted_matrix, mock_grouping):
        """Zero standard error gives NaN."""
        matrix = shifted_matrix.copy()
        matrix.loc["CONST"] = 1.0
        z = gene_zscores(matrix, mock_grouping)
        assert np.isnan(z["CONST"])

    def test_too_few_values_is_nan(self, shifted_matrix, mock_grouping):
        """A group with fewer than two values gives NaN."""
        matrix = shifted_matrix.copy()
        matrix.loc["G010", list(mock_grouping.primary)[1:]] = np.nan
        z = gene_zscores(matrix, mock_grouping)
        assert np.isnan(z["G010"])

    def test_integer_sample_labels(self, shifted_matrix, mock_grouping):
        """Non-string column labels are matched by their string form."""
        matrix = shifted_matrix.copy()
        matrix.columns = range(matrix.shape[1])
        grouping = SampleGrouping(primary=tuple(range(10)), secondary=tuple(range(10, 20)))

        z = gene_zscores(matrix, grouping)
        expected = gene_zscores(shifted_matrix, mock_grouping)

        pd.testing.assert_series_equal(z, expected)

    def test_integer_labels_in_comparison(self):
        """Enrichment comparison runs on a numpy-built matrix with integer columns."""
        rng = np.random.default_rng(2)
        matrix = pd.DataFrame(rng.normal(size=(10, 8)), index=[f"G{i}" for i in range(10)])
        grouping = SampleGrouping(primary=(0, 1, 2, 3), secondary=(4, 5, 6, 7))

        results = EnrichmentEngine({"P": ["G0", "G1", "G2"]}).enrichment_comparison(
            matrix, grouping
        )

        assert len(results) == 1
        assert results[0].ingroup_n == 3
        assert results[0].outgroup_n == 7

    def test_unknown_sample_raises(self, shifted_matrix):
        """Grouped samples must exist in the matrix."""
        grouping = SampleGrouping(primary=["PT000"], secondary=["NOT_A_SAMPLE"])
        with pytest.raises(ConfigurationError):
            gene_zscores(shifted_matrix, grouping)


class TestEnrichmentComparison:
    """Tests for enrichment comparison."""

    def test_shifted_pathway(self, shifted_matrix, mock_grouping):
        """Members shifted by +5 give a large zscore and a low p-value."""
        engine = EnrichmentEngine({
            "SHIFTED": ["G000", "G001", "G002", "G003", "G004"],
            "UNCHANGED": ["G020", "G021", "G022", "G023", "G024"],
        })
        results = engine.enrichment_comparison(normalize_rows(shifted_matrix), mock_grouping)

        shifted, unchanged = results
        assert shifted.pathway == "SHIFTED"
        assert shifted.ingroup_n == 5
        assert shifted.outgroup_n == 45
        assert shifted.zscore > 5
        assert shifted.pvalue < 0.01
        assert shifted.oddsratio > 1
        assert shifted.ingroup_mean > unchanged.ingroup_mean
        assert unchanged.pvalue > shifted.pvalue

    def test_nan_genes_excluded(self, shifted_matrix, mock_grouping):
        """Genes without a finite statistic are not counted."""
        matrix = shifted_matrix.copy()
        matrix.loc["CONST"] = 2.0
        engine = EnrichmentEngine({"SHIFTED_PLUS_CONST": ["G000", "G001", "CONST"]})

        result = engine.enrichment_comparison(normalize_rows(matrix), mock_grouping)[0]

        assert result.ingroup_n == 2
        assert result.outgroup_n == 48

    def test_overlapping_grouping_rejected(self):
        """Overlapping groups fail before any computation."""
        with pytest.raises(ConfigurationError):
            SampleGrouping(primary=["PT000", "PT001"], secondary=["PT001"])

    def test_samples_outside_groups_ignored(self, shifted_matrix, mock_grouping):
        """Adding ungrouped samples does not change the statistics."""
        engine = EnrichmentEngine({"SHIFTED": ["G000", "G001", "G002"]})
        base = engine.enrichment_comparison(shifted_matrix, mock_grouping)[0]

        extended = shifted_matrix.copy()
        extended["EXTRA"] = 100.0
        again = engine.enrichment_comparison(extended, mock_grouping)[0]

        pd.testing.assert_frame_equal(results_to_frame([again]), results_to_frame([base]))
