# -*- coding: utf-8 -*-
"""
Stratified train/test split and cross-validation folds for Clean Records.

Everything here works on index labels of the clean table: a Partition holds
row references, never copies of the rows. Seeds are explicit arguments; no
process-wide random state is touched.
"""

import numpy as np
import pandas as pd
from typing import List, Optional, Sequence, Tuple
from sklearn.model_selection import StratifiedKFold, train_test_split

from .config import DEFAULT_SEED, N_FOLDS, STATUS_FIELD, STATUS_LEVELS, TRAIN_FRACTION
from .errors import DataInsufficientError, SchemaError


def _strata(records: pd.DataFrame, strata_field: str, stage: str) -> np.ndarray:
    if strata_field not in records.columns:
        raise SchemaError(strata_field, stage=stage)
    return records[strata_field].astype(str).to_numpy()


def _expected_levels(series: pd.Series, strata_field: str) -> List[str]:
    if isinstance(series.dtype, pd.CategoricalDtype):
        return [str(level) for level in series.cat.categories]
    observed = sorted(str(level) for level in series.dropna().unique())
    if strata_field == STATUS_FIELD:
        return list(STATUS_LEVELS) + [level for level in observed if level not in STATUS_LEVELS]
    return observed


def check_levels(records: pd.DataFrame, strata_field: str, minimum: int, stage: str):
    """
    Fail unless at least two levels exist and each has ``minimum`` records.

    Raises
    ------
    DataInsufficientError
        Naming the first level below the minimum.
    """
    levels = _expected_levels(records[strata_field], strata_field)
    if len(levels) < 2:
        raise DataInsufficientError(f"(second level of {strata_field})", minimum, 0, stage=stage)

    counts = records[strata_field].astype(str).value_counts()
    for level in levels:
        found = int(counts.get(level, 0))
        if found < minimum:
            raise DataInsufficientError(level, minimum, found, stage=stage)


def split(records: pd.DataFrame, seed: int, strata_field: str = STATUS_FIELD,
          train_fraction: float = TRAIN_FRACTION) -> Tuple[np.ndarray, np.ndarray]:
    """
    Stratified train/test split of ``records``.

    Parameters
    ----------
    records : DataFrame
        Clean Records.
    seed : int
        Random state for the shuffle. Same seed and input, same assignment.
    strata_field : str
        Column whose level proportions are preserved in both subsets.
    train_fraction : float
        Share of rows in the training subset (floored to a whole row).

    Returns
    -------
    tuple of (ndarray, ndarray)
        Sorted index labels of the training and test rows.
    """
    if not 0 < train_fraction < 1:
        raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")

    strata = _strata(records, strata_field, stage='split')
    check_levels(records, strata_field, minimum=2, stage='split')

    n_rows = len(records)
    n_train = int(np.floor(train_fraction * n_rows))
    n_test = n_rows - n_train
    n_levels = len(np.unique(strata))
    if min(n_train, n_test) < n_levels:
        counts = pd.Series(strata).value_counts()
        smallest = counts.idxmin()
        needed = int(np.ceil(n_levels / min(train_fraction, 1 - train_fraction)))
        raise DataInsufficientError(smallest, needed, int(counts.min()), stage='split')

    train_index, test_index = train_test_split(
        records.index.to_numpy(),
        train_size=n_train,
        test_size=n_test,
        stratify=strata,
        random_state=seed,
        shuffle=True
    )
    return np.sort(train_index), np.sort(test_index)


def fold(train_records: pd.DataFrame, seed: int, strata_field: str = STATUS_FIELD,
         k: int = N_FOLDS) -> List[np.ndarray]:
    """
    Stratified k-fold grouping of the training subset.

    Every row of ``train_records`` lands in exactly one fold; each fold keeps
    the training level proportions as closely as whole rows allow.

    Returns
    -------
    list of ndarray
        k sorted arrays of index labels, one per fold.
    """
    if k < 2:
        raise ValueError(f"k must be at least 2, got {k}")

    strata = _strata(train_records, strata_field, stage='fold')
    check_levels(train_records, strata_field, minimum=k, stage='fold')

    index = train_records.index.to_numpy()
    skf = StratifiedKFold(n_splits=k, shuffle=True, random_state=seed)
    return [np.sort(index[val_pos]) for _, val_pos in skf.split(index, strata)]


class Partition:
    """
    Train/test split plus training folds over one clean table.

    ``train()``, ``test()`` and ``folds()`` return index labels into ``table``.
    ``fold_splits()`` gives the same folds as positions relative to the
    training rows, in the form scikit-learn accepts as ``cv=``.

    Raises ValueError unless train and test cover the table exactly once and
    the folds cover the training rows exactly once.
    """

    def __init__(self, table: pd.DataFrame, train_index: Sequence, test_index: Sequence,
                 fold_index: Sequence[Sequence], seed: Optional[int] = None,
                 strata_field: str = STATUS_FIELD):
        self.table = table
        self.seed = seed
        self.strata_field = strata_field
        self._train_index = np.asarray(train_index)
        self._test_index = np.asarray(test_index)
        self._fold_index = [np.asarray(f) for f in fold_index]
        self._check_coverage()

    def _check_coverage(self):
        train = set(self._train_index.tolist())
        test = set(self._test_index.tolist())
        if len(train) != len(self._train_index) or len(test) != len(self._test_index):
            raise ValueError("train and test index labels must be unique")
        if train & test:
            raise ValueError(f"{len(train & test)} row(s) appear in both train and test")
        if train | test != set(self.table.index.tolist()):
            raise ValueError("train and test together must cover every row of the table exactly once")

        fold_labels = np.concatenate(self._fold_index) if self._fold_index else np.array([])
        if len(fold_labels) != len(train) or set(fold_labels.tolist()) != train:
            raise ValueError("folds must cover the training rows exactly once")

    def train(self) -> np.ndarray:
        return self._train_index.copy()

    def test(self) -> np.ndarray:
        return self._test_index.copy()

    def folds(self) -> List[np.ndarray]:
        return [f.copy() for f in self._fold_index]

    @property
    def n_folds(self) -> int:
        return len(self._fold_index)

    def train_table(self) -> pd.DataFrame:
        return self.table.loc[self._train_index]

    def test_table(self) -> pd.DataFrame:
        return self.table.loc[self._test_index]

    def fold_splits(self) -> List[Tuple[np.ndarray, np.ndarray]]:
        """(fit_positions, validation_positions) per fold, relative to ``train_table()``."""
        positions = pd.Index(self._train_index)
        all_positions = np.arange(len(positions))
        splits = []
        for fold_labels in self._fold_index:
            val_pos = positions.get_indexer(fold_labels)
            fit_pos = np.setdiff1d(all_positions, val_pos)
            splits.append((fit_pos, np.sort(val_pos)))
        return splits

    def __repr__(self):
        return (f"Partition(train={len(self._train_index)}, test={len(self._test_index)}, "
                f"folds={[len(f) for f in self._fold_index]}, seed={self.seed})")


def build_partition(table: pd.DataFrame, seed: int = DEFAULT_SEED,
                    strata_field: str = STATUS_FIELD,
                    train_fraction: float = TRAIN_FRACTION,
                    k: int = N_FOLDS, verbose: bool = True) -> Partition:
    """Split ``table`` then fold its training subset, both with ``seed``."""
    if verbose:
        print(f"Splitting train/test ({train_fraction:.0%} train, stratified on '{strata_field}')...")
    train_index, test_index = split(table, seed, strata_field, train_fraction)
    fold_index = fold(table.loc[train_index], seed, strata_field, k)

    partition = Partition(table, train_index, test_index, fold_index,
                          seed=seed, strata_field=strata_field)
    if verbose:
        print(f"  [OK] {partition}")
    return partition
