# -*- coding: utf-8 -*-
"""
Project directory helpers.

Directories default to ``data/``, ``artifact/`` and ``models/`` under the
repository root; each can be moved with an environment variable
(WATERPOINT_DATA_DIR, WATERPOINT_ARTIFACT_DIR, WATERPOINT_MODEL_DIR).
"""
import os

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def _dir(env_var, default_name):
    return os.getenv(env_var, os.path.join(ROOT_DIR, default_name))


DATA_DIR = _dir('WATERPOINT_DATA_DIR', 'data')
ARTIFACT_DIR = _dir('WATERPOINT_ARTIFACT_DIR', 'artifact')
MODEL_DIR = _dir('WATERPOINT_MODEL_DIR', 'models')


def ensure_dirs(*dirs):
    """Create the given directories (default: artifact and model dirs)."""
    for d in dirs or (ARTIFACT_DIR, MODEL_DIR):
        os.makedirs(d, exist_ok=True)


def data_path(filename):
    return os.path.join(os.getenv('WATERPOINT_DATA_DIR', DATA_DIR), filename)


def artifact_path(filename):
    directory = os.getenv('WATERPOINT_ARTIFACT_DIR', ARTIFACT_DIR)
    ensure_dirs(directory)
    return os.path.join(directory, filename)


def model_path(filename):
    directory = os.getenv('WATERPOINT_MODEL_DIR', MODEL_DIR)
    ensure_dirs(directory)
    return os.path.join(directory, filename)
