# -*- coding: utf-8 -*-
"""
Model Bench for the Water-Point Pipeline

This module provides the ModelBench class that consumes the clean table and
its Partition and handles:
- Feature engineering (recorded year, pump age)
- Model-ready encoding (unknown and rare categories, one-hot, variance
  filter, skew correction, scaling)
- Interactive and non-interactive model selection
- Cross-validated scoring over the partition's folds
- Grid-search tuning over the same folds
- Optional SMOTE balancing inside each training fold
- Saving fitted models and results

The bench supports 6 classifiers:
- Linear: Logistic Regression
- Tree-based: Decision Tree, Random Forest, Gradient Boosting, LightGBM
- Other: Neural Network (MLP)
"""

import os
import gc
import warnings
import joblib
import numpy as np
import pandas as pd
from typing import Dict, Optional
from sklearn.compose import ColumnTransformer
from sklearn.ensemble import GradientBoostingClassifier, RandomForestClassifier
from sklearn.feature_selection import VarianceThreshold
from sklearn.impute import SimpleImputer
from sklearn.linear_model import LogisticRegression
from sklearn.metrics import accuracy_score, roc_auc_score
from sklearn.model_selection import GridSearchCV, cross_val_score
from sklearn.neural_network import MLPClassifier
from sklearn.pipeline import Pipeline as SklearnPipeline
from sklearn.preprocessing import OneHotEncoder, PowerTransformer, StandardScaler
from sklearn.tree import DecisionTreeClassifier
from imblearn.over_sampling import SMOTE
from imblearn.pipeline import Pipeline
from lightgbm import LGBMClassifier

from .config import (
    CONSTRUCTION_YEAR_FIELD, DATE_RECORDED_FIELD, DEFAULT_SEED, ID_FIELD,
    POSITIVE_STATUS, STATUS_FIELD
)
from .partition import Partition
from src.utils.paths import model_path, artifact_path

# Suppress convergence chatter from the linear and MLP models
warnings.filterwarnings('ignore')

QUICK_MODELS = ['LightGBM', 'Random_Forest', 'Logistic_Regression']

# Hyperparameter grids, keyed by model name. Parameters target the 'model'
# step of the bench pipeline.
PARAM_GRIDS = {
    'Logistic_Regression': {
        'model__C': [0.01, 0.1, 1.0, 10.0],
    },
    'Decision_Tree': {
        'model__max_depth': [5, 10, 20],
        'model__min_samples_leaf': [1, 5, 20],
    },
    'Random_Forest': {
        'model__n_estimators': [100, 300],
        'model__max_features': ['sqrt', 0.3],
    },
    'Gradient_Boosting': {
        'model__learning_rate': [0.05, 0.1],
        'model__max_depth': [3, 5],
    },
    'LightGBM': {
        'model__num_leaves': [15, 31, 63],
        'model__learning_rate': [0.05, 0.1],
    },
    'Neural_Network': {
        'model__hidden_layer_sizes': [(16,), (32,), (32, 16)],
        'model__alpha': [1e-4, 1e-2],
    },
}


def engineer_features(table: pd.DataFrame) -> pd.DataFrame:
    """
    Add recorded_year and pump_age, drop the raw date.

    pump_age is clipped at 0; rows recorded before their construction year
    are data-entry errors, not negative ages.
    """
    X = table.copy()

    if DATE_RECORDED_FIELD in X.columns:
        recorded = pd.to_datetime(X[DATE_RECORDED_FIELD].astype(str), errors='coerce')
        X['recorded_year'] = recorded.dt.year
        X = X.drop(columns=[DATE_RECORDED_FIELD])

    if 'recorded_year' in X.columns and CONSTRUCTION_YEAR_FIELD in X.columns:
        X['pump_age'] = (X['recorded_year'] - X[CONSTRUCTION_YEAR_FIELD]).clip(lower=0)

    return X


def prepare_features(table: pd.DataFrame):
    """
    Split a clean table into a feature frame and a 0/1 target.

    Returns:
        tuple: (X, y) where y is 1 for "non functional" and 0 for "functional".
               The id and status columns are not features. Categorical columns
               come back as plain object columns for the encoder.
    """
    y = (table[STATUS_FIELD].astype(str) == POSITIVE_STATUS).astype(int).to_numpy()
    X = engineer_features(table).drop(columns=[ID_FIELD, STATUS_FIELD], errors='ignore')

    for col in X.columns:
        if isinstance(X[col].dtype, pd.CategoricalDtype):
            X[col] = X[col].astype(object)

    return X, y


def encoder_steps(X: pd.DataFrame, rare_threshold=0.01):
    """
    Model-ready encoding for a feature frame, as a flat list of pipeline steps.

    Categorical columns: missing -> 'missing', categories rarer than
    ``rare_threshold`` collapse into one infrequent column, categories unseen
    at fit time map onto it (or to all zeros when nothing was infrequent).

    Numeric columns: median imputation, Yeo-Johnson skew correction,
    standard scaling.

    Zero-variance output columns are dropped last.
    """
    categorical_cols = X.select_dtypes(exclude=['number', 'bool']).columns.tolist()
    numeric_cols = X.select_dtypes(include=['number']).columns.tolist()

    categorical = SklearnPipeline([
        ('impute', SimpleImputer(strategy='constant', fill_value='missing')),
        ('onehot', OneHotEncoder(
            handle_unknown='infrequent_if_exist',
            min_frequency=rare_threshold,
            sparse_output=False
        )),
    ])
    numeric = SklearnPipeline([
        ('impute', SimpleImputer(strategy='median')),
        ('skew', PowerTransformer(method='yeo-johnson', standardize=False)),
        ('scale', StandardScaler()),
    ])

    columns = ColumnTransformer([
        ('categorical', categorical, categorical_cols),
        ('numeric', numeric, numeric_cols),
    ])
    return [
        ('columns', columns),
        ('variance', VarianceThreshold()),
    ]


def build_encoder(X: pd.DataFrame, rare_threshold=0.01):
    """Standalone encoder: the steps of ``encoder_steps`` as one Pipeline."""
    return SklearnPipeline(encoder_steps(X, rare_threshold))


class ModelBench:
    """
    Fits and compares classifiers on a clean table and its Partition.

    This class provides functionality for:
    - Interactive and non-interactive model selection
    - Cross-validated ROC AUC over the partition's folds
    - Test-set ROC AUC and accuracy after refitting on the training subset
    - Optional grid-search tuning over the same folds
    - Saving fitted models and results to disk

    Attributes:
        results (list): One dict per model/variant (default or tuned) from the
            last ``fit``.
        failures (dict): Model name -> error message for models that failed in
            the last ``fit``.
        all_models (dict): Model names mapped to unfitted estimators.

    Example:
        >>> bench = ModelBench(seed=42)
        >>> selected = bench.select_models('99')
        >>> scores = bench.fit(clean, partition, selected, tune=True)
    """

    def __init__(self, seed: int = DEFAULT_SEED, balance: bool = False,
                 rare_threshold=0.01, n_jobs: int = -1, save_models: bool = False,
                 verbose: bool = True):
        self.seed = seed
        self.balance = balance
        self.rare_threshold = rare_threshold
        self.n_jobs = n_jobs
        self.save_models = save_models
        self.verbose = verbose
        self.results = []
        self.failures = {}
        self.all_models = self.get_all_models()

    def _log(self, message: str):
        if self.verbose:
            print(message)

    def get_all_models(self):
        """
        Define all available classifiers.

        Returns:
            dict: Model names (str) mapped to unfitted estimators, all seeded
                  with the bench seed.
        """
        models = {
            # ============================================================
            # LINEAR MODELS
            # ============================================================
            'Logistic_Regression': LogisticRegression(
                max_iter=1000,
                random_state=self.seed
            ),

            # ============================================================
            # TREE-BASED MODELS
            # ============================================================
            'Decision_Tree': DecisionTreeClassifier(
                max_depth=10,
                random_state=self.seed
            ),
            'Random_Forest': RandomForestClassifier(
                n_estimators=100,
                max_depth=10,
                random_state=self.seed,
                n_jobs=self.n_jobs
            ),
            'Gradient_Boosting': GradientBoostingClassifier(
                n_estimators=100,
                max_depth=5,
                random_state=self.seed
            ),
            'LightGBM': LGBMClassifier(
                n_estimators=100,
                random_state=self.seed,
                verbose=-1
            ),

            # ============================================================
            # OTHER MODELS
            # ============================================================
            'Neural_Network': MLPClassifier(
                hidden_layer_sizes=(32,),
                max_iter=500,
                random_state=self.seed
            ),
        }
        return models

    def select_models(self, selection: Optional[str] = None):
        """
        Interactive or non-interactive model selection.

        Parameters:
            selection (str, optional): Pre-set selection string. Options:
                - '0': All 6 models
                - '99': Quick mode (LightGBM, Random_Forest, Logistic_Regression)
                - '1,3,5': Comma-separated model numbers
                - None: Use MODEL_SELECTION, otherwise prompt

        Returns:
            dict: Selected model names mapped to their estimators.
        """
        self._log("\n" + "="*60)
        self._log("MODEL SELECTION")
        self._log("="*60)

        if selection is None:
            selection = os.getenv('MODEL_SELECTION')

        model_list = list(self.all_models.keys())

        self._log("\n[LINEAR] LINEAR MODELS:")
        self._log("  1. Logistic_Regression  - Standard logistic regression")
        self._log("\n[TREE] TREE-BASED MODELS:")
        self._log("  2. Decision_Tree        - Single decision tree (interpretable)")
        self._log("  3. Random_Forest        - Ensemble of 100 decision trees")
        self._log("  4. Gradient_Boosting    - Sequential boosting with 100 estimators")
        self._log("  5. LightGBM             - Fast gradient boosting")
        self._log("\n[OTHER] OTHER MODELS:")
        self._log("  6. Neural_Network       - Small multi-layer perceptron")
        self._log("\n[MENU] QUICK OPTIONS:")
        self._log("  0  - All models (6)")
        self._log("  99 - Quick mode (LightGBM, Random_Forest, Logistic_Regression)")

        if selection is None:
            selection = input("\n[>>] Enter model numbers (e.g., 1,3,5) or quick option: ").strip()
        else:
            self._log(f"\nUsing non-interactive selection: {selection}")

        if selection == '0':
            selected_models = model_list
        elif selection == '99':
            selected_models = list(QUICK_MODELS)
        else:
            try:
                indices = [int(x.strip()) - 1 for x in selection.split(',')]
                selected_models = [model_list[i] for i in indices if 0 <= i < len(model_list)]
            except ValueError:
                selected_models = []
            if not selected_models:
                self._log("[WARN] Invalid selection. Using quick mode...")
                selected_models = list(QUICK_MODELS)

        self._log(f"\n[OK] Selected {len(selected_models)} models: {', '.join(selected_models)}")

        return {name: self.all_models[name] for name in selected_models}

    def build_pipeline(self, model, X: pd.DataFrame):
        """Encoder steps, optional SMOTE, then the model, in one flat Pipeline."""
        steps = encoder_steps(X, self.rare_threshold)
        if self.balance:
            steps.append(('balance', SMOTE(random_state=self.seed)))
        steps.append(('model', model))
        return Pipeline(steps)

    def _score(self, fitted, X_test, y_test) -> Dict:
        y_pred_proba = fitted.predict_proba(X_test)[:, 1]
        y_pred = fitted.predict(X_test)
        return {
            'test_auc': roc_auc_score(y_test, y_pred_proba),
            'test_accuracy': accuracy_score(y_test, y_pred),
            'n_features': int(fitted.named_steps['variance'].get_support().sum()),
        }

    def train_single_model(self, model_name, model, X_train, y_train, X_test, y_test,
                           cv_splits, tune=False, param_grid=None):
        """Cross-validate, refit and test one model; optionally tune it too."""
        self._log(f"\n{'='*50}")
        self._log(f"Training: {model_name}")
        self._log('='*50)

        model_results = []

        # Default hyperparameters
        pipe = self.build_pipeline(model.__class__(**model.get_params()), X_train)
        cv_scores = cross_val_score(pipe, X_train, y_train, cv=cv_splits,
                                    scoring='roc_auc', n_jobs=1)
        pipe.fit(X_train, y_train)
        metrics = self._score(pipe, X_test, y_test)
        self._log(f"  [OK] CV AUC: {cv_scores.mean():.4f} (+/- {cv_scores.std():.4f})")
        self._log(f"  [OK] Test AUC: {metrics['test_auc']:.4f} | Accuracy: {metrics['test_accuracy']:.2%}")

        model_results.append({
            'model_name': model_name,
            'variant': 'default',
            'cv_auc': cv_scores.mean(),
            'cv_auc_std': cv_scores.std(),
            'best_params': None,
            'model': pipe,
            **metrics
        })

        # Grid search over the same folds
        if tune:
            grid = param_grid if param_grid is not None else PARAM_GRIDS.get(model_name)
            if grid:
                search = GridSearchCV(
                    self.build_pipeline(model.__class__(**model.get_params()), X_train),
                    param_grid=grid,
                    cv=cv_splits,
                    scoring='roc_auc',
                    n_jobs=self.n_jobs,
                    refit=True
                )
                search.fit(X_train, y_train)
                tuned = search.best_estimator_
                metrics = self._score(tuned, X_test, y_test)
                best_std = search.cv_results_['std_test_score'][search.best_index_]
                self._log(f"  [OK] Tuned CV AUC: {search.best_score_:.4f} with {search.best_params_}")
                self._log(f"  [OK] Tuned Test AUC: {metrics['test_auc']:.4f} | Accuracy: {metrics['test_accuracy']:.2%}")

                model_results.append({
                    'model_name': model_name,
                    'variant': 'tuned',
                    'cv_auc': search.best_score_,
                    'cv_auc_std': best_std,
                    'best_params': search.best_params_,
                    'model': tuned,
                    **metrics
                })
            else:
                self._log(f"  [WARN] No parameter grid for {model_name}; skipping tuning")

        if self.save_models:
            for result in model_results:
                joblib.dump(result['model'],
                            model_path(f"{model_name}_{result['variant']}_model.pkl"))

        return model_results

    def fit(self, table: pd.DataFrame, partition: Partition, models=None,
            tune: bool = False, param_grids=None) -> pd.DataFrame:
        """
        Fit every model on the partition and return one score row per variant.

        Parameters:
            table (DataFrame): Clean Records.
            partition (Partition): Split and folds over ``table``.
            models (dict, optional): Name -> estimator. Defaults to all models.
            tune (bool): Also grid-search each model over the partition folds.
            param_grids (dict, optional): Per-model grid overrides.

        Returns:
            DataFrame: Sorted by test AUC, descending.
        """
        if models is None:
            models = self.all_models
        param_grids = param_grids or {}
        self.results = []
        self.failures = {}

        X, y = prepare_features(table)
        positions = table.index.get_indexer
        train_pos = positions(partition.train())
        test_pos = positions(partition.test())
        X_train, y_train = X.iloc[train_pos], y[train_pos]
        X_test, y_test = X.iloc[test_pos], y[test_pos]
        cv_splits = partition.fold_splits()

        self._log("\n" + "="*60)
        self._log(f"TRAINING {len(models)} SELECTED MODELS")
        self._log("="*60)
        self._log(f"  Training shape: {X_train.shape} | Test shape: {X_test.shape}")

        for idx, (model_name, model) in enumerate(models.items(), 1):
            self._log(f"\n[MODEL] MODEL {idx}/{len(models)}: {model_name}")
            try:
                model_results = self.train_single_model(
                    model_name, model, X_train, y_train, X_test, y_test,
                    cv_splits, tune=tune, param_grid=param_grids.get(model_name)
                )
            except Exception as e:
                self.failures[model_name] = str(e)
                self._log(f"  [ERROR] {model_name} failed: {e}")
                continue
            self.results.extend(model_results)
            gc.collect()

        return self.results_frame()

    def results_frame(self) -> pd.DataFrame:
        """Results of the last ``fit``, best test AUC first."""
        if not self.results:
            return pd.DataFrame(columns=['model_name', 'variant', 'cv_auc', 'cv_auc_std',
                                         'test_auc', 'test_accuracy', 'n_features',
                                         'best_params', 'model'])
        df = pd.DataFrame(self.results)
        return df.sort_values('test_auc', ascending=False).reset_index(drop=True)

    def save_results(self, filename: str = 'model_results.csv'):
        """Save all results (without fitted models) to CSV in the artifact directory."""
        df_results = self.results_frame().drop(columns=['model'])
        path = artifact_path(filename)
        df_results.to_csv(path, index=False)
        self._log(f"\n[SAVED] Results saved to '{path}'")
        return df_results
