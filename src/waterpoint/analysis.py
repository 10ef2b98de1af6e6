# -*- coding: utf-8 -*-
import pandas as pd
from .config import STATUS_FIELD


def stratification_report(table, partition, strata_field=STATUS_FIELD, verbose=True):
    """Status proportions per subset (overall, train, test, each fold) and their drift from overall"""
    levels = table[strata_field].astype(str)
    overall = levels.value_counts(normalize=True)

    subsets = [('overall', table.index.to_numpy()),
               ('train', partition.train()),
               ('test', partition.test())]
    subsets += [(f"fold_{i}", labels) for i, labels in enumerate(partition.folds(), 1)]

    rows = []
    for name, labels in subsets:
        proportions = levels.loc[labels].value_counts(normalize=True).reindex(overall.index, fill_value=0.0)
        row = {'subset': name, 'n_rows': len(labels)}
        row.update(proportions.to_dict())
        row['max_deviation'] = (proportions - overall).abs().max()
        rows.append(row)

    df_report = pd.DataFrame(rows)

    if verbose:
        print(f"\n[INFO] Stratification on '{strata_field}':")
        print("-" * 50)
        print(df_report.to_string(index=False, float_format=lambda v: f"{v:.4f}"))

    return df_report


def compare_tuning_impact(df_results, verbose=True):
    """Compare default vs tuned test AUC for every model that has both"""
    comparison_results = []

    for model_name, group in df_results.groupby('model_name', sort=False):
        variants = group.set_index('variant')
        if 'default' not in variants.index or 'tuned' not in variants.index:
            continue

        auc_default = variants.loc['default', 'test_auc']
        auc_tuned = variants.loc['tuned', 'test_auc']
        improvement = auc_tuned - auc_default

        if verbose:
            print(f"\n{model_name}:")
            print(f"  Default AUC: {auc_default:.4f}")
            print(f"  Tuned AUC:   {auc_tuned:.4f}")
            print(f"  Tuning improvement: {improvement:+.4f}")

        comparison_results.append({
            'model': model_name,
            'auc_default': auc_default,
            'auc_tuned': auc_tuned,
            'improvement': improvement,
            'best_params': variants.loc['tuned', 'best_params'],
        })

    df_comp = pd.DataFrame(comparison_results,
                           columns=['model', 'auc_default', 'auc_tuned', 'improvement', 'best_params'])

    if verbose and not df_comp.empty:
        print(f"\n[INFO] SUMMARY:")
        print(f"  Average improvement from tuning: {df_comp['improvement'].mean():+.4f}")
        best = df_comp.loc[df_comp['improvement'].idxmax()]
        print(f"  Best improvement: {best['improvement']:+.4f} ({best['model']})")

    return df_comp
