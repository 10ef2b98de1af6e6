# -*- coding: utf-8 -*-
import os
from typing import Optional
from .config import CleaningConfig, DEFAULT_SEED, N_FOLDS, TRAIN_FRACTION
from .errors import PipelineError
from .data_preprocessor import WaterPointPreprocessor
from .partition import build_partition
from .trainer import ModelBench
from .analysis import stratification_report, compare_tuning_impact


class WaterPointPipeline:
    """
    Water-point functionality pipeline: loading, cleaning, stratified
    partitioning, model fitting, tuning comparison and result export.
    """

    def __init__(self, config: Optional[CleaningConfig] = None, seed: int = DEFAULT_SEED,
                 train_fraction: float = TRAIN_FRACTION, k: int = N_FOLDS,
                 verbose: bool = True):
        self.config = config or CleaningConfig()
        self.seed = seed
        self.train_fraction = train_fraction
        self.k = k
        self.verbose = verbose
        self.preprocessor = WaterPointPreprocessor(self.config, verbose=verbose)
        self.clean_table = None
        self.partition = None

    def _banner(self, title: str, width: int = 60):
        if self.verbose:
            print("\n" + "="*width)
            print(title)
            print("="*width)

    def preprocess(self, values_path, labels_path=None):
        """Load raw records, clean them and build the stratified partition."""
        self._banner("STEP 1: DATA PREPARATION")
        raw = self.preprocessor.load_data(values_path, labels_path)
        self.clean_table = self.preprocessor.clean(raw)
        self.partition = build_partition(
            self.clean_table, seed=self.seed, strata_field=self.config.status_field,
            train_fraction=self.train_fraction, k=self.k, verbose=self.verbose
        )
        stratification_report(self.clean_table, self.partition,
                              self.config.status_field, verbose=self.verbose)
        return self.clean_table, self.partition

    def select_models(self, selection: Optional[str] = None, balance: bool = False,
                      save_models: bool = False):
        """Return a bench and its selected models."""
        bench = ModelBench(seed=self.seed, balance=balance, save_models=save_models,
                           verbose=self.verbose)
        selected = bench.select_models(selection)
        return bench, selected

    def train_models(self, bench, selected_models, tune: bool = False, param_grids=None):
        """Fit the selected models on the clean table and partition."""
        self._banner("STEP 2: MODEL BENCH")
        return bench.fit(self.clean_table, self.partition, selected_models,
                         tune=tune, param_grids=param_grids)

    def run(self, values_path, labels_path=None, selection: Optional[str] = None,
            tune: Optional[bool] = None, balance: Optional[bool] = None,
            save_models: bool = True, param_grids=None):
        """
        Execute the complete pipeline and return the results DataFrame.

        Args:
            values_path: CSV of raw water-point records
            labels_path: Optional CSV of status labels keyed by id
            selection: Non-interactive model selection string (e.g., '99')
            tune: Grid-search each model; defaults to env TUNE == 'y'
            balance: SMOTE inside training folds; defaults to env BALANCE == 'y'
            save_models: Persist fitted models with joblib
            param_grids: Optional per-model grid overrides
        """
        if tune is None:
            tune = os.getenv('TUNE', 'n').lower() == 'y'
        if balance is None:
            balance = os.getenv('BALANCE', 'n').lower() == 'y'

        self._banner("WATER-POINT FUNCTIONALITY PIPELINE", width=80)

        self.preprocess(values_path, labels_path)
        bench, selected_models = self.select_models(selection, balance=balance,
                                                    save_models=save_models)
        df_results = self.train_models(bench, selected_models, tune=tune,
                                       param_grids=param_grids)

        if df_results.empty:
            failed = ', '.join(bench.failures) or 'none selected'
            raise PipelineError(f"No model finished training (failed: {failed})", stage='bench')

        if tune:
            self._banner("TUNING IMPACT")
            compare_tuning_impact(df_results, verbose=self.verbose)

        self._banner("FINAL RESULTS", width=80)
        if self.verbose:
            print("\n[BEST] Model Performances:")
            print(df_results[['model_name', 'variant', 'cv_auc', 'test_auc', 'test_accuracy']].to_string())
            best_overall = df_results.iloc[0]
            print(f"\n[STAR] BEST MODEL: {best_overall['model_name']} ({best_overall['variant']})")
            print(f"   Test AUC: {best_overall['test_auc']:.4f}")
            print(f"   Test Accuracy: {best_overall['test_accuracy']:.2%}")
            for name, error in bench.failures.items():
                print(f"[ERROR] {name}: {error}")
        bench.save_results()

        return df_results
