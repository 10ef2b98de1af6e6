# -*- coding: utf-8 -*-
"""Utility modules"""
from .paths import (
    ROOT_DIR, DATA_DIR, ARTIFACT_DIR, MODEL_DIR,
    data_path, artifact_path, model_path, ensure_dirs
)
