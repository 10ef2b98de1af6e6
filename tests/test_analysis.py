# -*- coding: utf-8 -*-
import pandas as pd

from src.waterpoint.analysis import compare_tuning_impact, stratification_report


def test_stratification_report_covers_every_subset(clean_table, partition):
    report = stratification_report(clean_table, partition, verbose=False)

    assert report['subset'].tolist() == ['overall', 'train', 'test',
                                         'fold_1', 'fold_2', 'fold_3', 'fold_4', 'fold_5']
    assert report.loc[0, 'n_rows'] == len(clean_table)
    assert report.loc[0, 'max_deviation'] == 0
    assert (report['max_deviation'] <= 0.02).all()
    assert report[['functional', 'non functional']].sum(axis=1).round(9).eq(1).all()


def test_compare_tuning_impact_pairs_variants():
    results = pd.DataFrame([
        {'model_name': 'LightGBM', 'variant': 'default', 'test_auc': 0.80, 'best_params': None},
        {'model_name': 'LightGBM', 'variant': 'tuned', 'test_auc': 0.83,
         'best_params': {'model__num_leaves': 31}},
        {'model_name': 'Decision_Tree', 'variant': 'default', 'test_auc': 0.70, 'best_params': None},
    ])

    comparison = compare_tuning_impact(results, verbose=False)

    assert comparison['model'].tolist() == ['LightGBM']
    assert round(comparison.loc[0, 'improvement'], 6) == 0.03
    assert comparison.loc[0, 'best_params'] == {'model__num_leaves': 31}


def test_compare_tuning_impact_without_tuned_rows_is_empty():
    results = pd.DataFrame([
        {'model_name': 'LightGBM', 'variant': 'default', 'test_auc': 0.80, 'best_params': None},
    ])
    comparison = compare_tuning_impact(results, verbose=False)
    assert comparison.empty
    assert 'improvement' in comparison.columns
