#!/usr/bin/env python3
"""
Basic Analysis Example for Leukemia Proteome Pathway Enrichment

This example demonstrates how to use the proteome_pathways package to:
1. Generate a synthetic cohort with a planted co-regulated pathway
2. Run correlation enrichment
3. Compare AML and ALL samples with enrichment comparison
4. Render tables and charts of the ranked pathways
"""

import logging
import sys
import os

import matplotlib
matplotlib.use('Agg')

# Add the package to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from proteome_pathways import (
    AnalysisConfig,
    DataFrameSource,
    EnrichmentPipeline,
    GeneSetDatabase,
    create_sample_data,
)
from proteome_pathways.visualization import (
    plot_metadata_pie,
    plot_pathway_barplot,
    render_results_table,
    save_figure,
)


def main():
    """Run basic analysis example."""

    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s %(name)s %(levelname)s %(message)s')

    print("=== Leukemia Proteome Pathway Enrichment Example ===")
    print()

    # Step 1: Build a gene-set database and a synthetic cohort
    print("1. Generating synthetic proteomics cohort...")
    gene_sets = GeneSetDatabase.from_dict({
        'PID_MYC_ACTIV_PATHWAY': [f'MYC_T{i}' for i in range(8)],
        'PID_P53_DOWNSTREAM_PATHWAY': [f'GENE{i:04d}' for i in range(0, 20)],
        'PID_FLT3_PATHWAY': [f'GENE{i:04d}' for i in range(20, 32)],
        'PID_IL6_7_PATHWAY': [f'GENE{i:04d}' for i in range(40, 55)],
    })
    table = create_sample_data(
        n_samples=60,
        n_genes=400,
        gene_sets=dict(gene_sets.items()),
        shifted_pathway='PID_MYC_ACTIV_PATHWAY',
        shift=2.0,
        missing_rate=0.02,
        random_state=42
    )
    print(f"   Long table rows: {len(table)}")
    print(f"   Gene sets: {gene_sets.summary()}")
    print()

    # Step 2: Correlation enrichment
    print("2. Running correlation enrichment...")
    pipeline = EnrichmentPipeline(
        DataFrameSource(table),
        gene_sets,
        config=AnalysisConfig(top_k=10)
    )
    correlation = pipeline.run_correlation()
    print(f"   Summary: {correlation['summary']}")
    print(correlation['results'].to_string(index=False))
    print()

    # Step 3: Enrichment comparison between subtypes
    print("3. Comparing AML vs ALL...")
    grouping = pipeline.grouping_from_metadata('subtype', 'AML', 'ALL')
    comparison = pipeline.run_comparison(grouping)
    print(f"   Groups: {grouping.primary_label} (n={len(grouping.primary)}) vs "
          f"{grouping.secondary_label} (n={len(grouping.secondary)})")
    print(comparison['results'].to_string(index=False))
    print()

    # Step 4: Reports
    print("4. Writing reports...")
    output_dir = os.path.join(os.path.dirname(__file__), 'output')
    os.makedirs(output_dir, exist_ok=True)

    with open(os.path.join(output_dir, 'comparison.html'), 'w', encoding='utf-8') as fh:
        fh.write(render_results_table(comparison['results'],
                                      caption='AML vs ALL enrichment comparison'))

    if not correlation['results'].empty:
        fig, _ = plot_pathway_barplot(correlation['results'], value_col='ingroup_mean',
                                      title='Correlation enrichment')
        save_figure(fig, 'correlation_enrichment', output_dir=output_dir, formats=['png'])

    fig, _ = plot_metadata_pie(pipeline.metadata, 'subtype', title='Cohort subtypes')
    save_figure(fig, 'cohort_subtypes', output_dir=output_dir, formats=['png'])

    print(f"   Reports written to {output_dir}")
    print("\n=== Analysis Complete ===")


if __name__ == "__main__":
    main()
