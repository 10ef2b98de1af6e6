# -*- coding: utf-8 -*-
"""
Water-Point Functionality Pipeline Package

This package prepares water-pump installation records for classification and
compares off-the-shelf models on them:
- Data cleaning: sentinel normalization, row filters, column projection
- Stratified train/test split and cross-validation folds
- Model bench: encoding, cross-validated scoring and grid-search tuning
- Analysis of stratification quality and tuning impact

Main Components:
    WaterPointPipeline: Main orchestrator for the entire pipeline
    WaterPointPreprocessor: Loads and cleans raw records
    Partition: Train/test/fold row references into the clean table
    ModelBench: Fits and compares classifiers on a partition

Errors:
    SchemaError, DataInsufficientError, ValidationError
"""

from .config import CleaningConfig
from .errors import PipelineError, SchemaError, DataInsufficientError, ValidationError
from .data_preprocessor import WaterPointPreprocessor
from .partition import Partition, split, fold, build_partition
from .trainer import ModelBench
from .analysis import stratification_report, compare_tuning_impact
from .pump_pipeline import WaterPointPipeline

__all__ = [
    'CleaningConfig',
    'PipelineError',
    'SchemaError',
    'DataInsufficientError',
    'ValidationError',
    'WaterPointPreprocessor',
    'Partition',
    'split',
    'fold',
    'build_partition',
    'ModelBench',
    'stratification_report',
    'compare_tuning_impact',
    'WaterPointPipeline',
]
