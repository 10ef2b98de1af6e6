# -*- coding: utf-8 -*-
"""
Water-Point Functionality Pipeline - Main Entry Point

This script runs the complete pipeline:
1. Load the water-point values and status labels
2. Clean the records (sentinels, required fields, status, population)
3. Build a stratified train/test split with 5 cross-validation folds
4. Fit and compare classifiers, optionally with grid-search tuning
5. Save the results table and fitted models

Usage:
    python run.py                    # Interactive model selection

    # Non-interactive mode with environment variables:
    export MODEL_SELECTION=0         # 0=all, 99=quick mode, or e.g. 1,3,5
    export TUNE=y                    # y=grid-search every model
    export BALANCE=y                 # y=SMOTE inside training folds
    export WATERPOINT_SEED=42        # seed for split, folds and models
    export WATERPOINT_DATA_DIR=data  # where the CSV files live
    python run.py

Models (6 total):
    - Linear: Logistic Regression
    - Tree-based: Decision Tree, Random Forest, Gradient Boosting, LightGBM
    - Other: Neural Network (MLP)
"""

import os
import traceback
from src.waterpoint.config import DEFAULT_SEED, LABELS_FILE, VALUES_FILE
from src.waterpoint.pump_pipeline import WaterPointPipeline
from src.utils.paths import data_path


def main():
    """Run the water-point pipeline."""

    model_selection = os.getenv('MODEL_SELECTION', None)

    print("=" * 80)
    print("WATER-POINT FUNCTIONALITY ANALYSIS")
    print("=" * 80)
    print("\nThis pipeline predicts whether a water point is functional or non functional.")
    print("Models: 6 ML algorithms, default and tuned\n")

    values_path = data_path(VALUES_FILE)
    labels_path = data_path(LABELS_FILE)
    if not os.path.exists(labels_path):
        labels_path = None

    try:
        pipeline = WaterPointPipeline(seed=DEFAULT_SEED)
        pipeline.run(values_path, labels_path, selection=model_selection)

        print("\n" + "=" * 80)
        print("[OK] PIPELINE COMPLETED SUCCESSFULLY!")
        print("=" * 80)
        print("\nGenerated files:")
        print("  - artifact/model_results.csv : Model performance metrics")
        print("  - models/*.pkl               : Saved model files")

    except Exception as e:
        print(f"\n[ERROR] Pipeline failed: {str(e)}")
        traceback.print_exc()
        return 1

    return 0


if __name__ == "__main__":
    exit(main())
