# -*- coding: utf-8 -*-
"""
Data Preprocessor Module for Water-Point Functionality Analysis
===============================================================

This module turns raw water-point records into a clean table ready for
feature encoding. It performs the following key operations:

1. Data Loading: Reads the values CSV and (optionally) the labels CSV, merged by id
2. Schema Validation: Confirms every configured column exists before anything runs
3. Sentinel Normalization: Literal 0 becomes missing in construction_year
4. Column Projection: Drops free-text, duplicate-code and sparse boolean columns
5. Sentinel Normalization: Literal 0 becomes missing in the broad numeric group
6. Required-Field Filter: Drops rows missing any required field
7. Status Filter: Keeps only "functional" and "non functional"
8. Population Filter: Keeps rows with population > 1
9. Categorical Normalization: Text columns become closed categorical domains

Data Flow:
----------
    Raw CSV -> Validate -> Year sentinels -> Project -> Sentinels -> Filter -> Categoricals

Output:
-------
    A pandas DataFrame with a fresh 0..n-1 index. Row counts dropped at every
    stage are kept in ``WaterPointPreprocessor.diagnostics``.
"""

# =============================================================================
# IMPORTS
# =============================================================================
import pandas as pd
from typing import Dict, List, Optional, Sequence, Tuple
from pandas.api.types import is_bool_dtype, is_numeric_dtype

from .config import CleaningConfig
from .errors import DataInsufficientError, SchemaError, ValidationError


def _missing_mask(series: pd.Series) -> pd.Series:
    """True where a value is missing; blank strings count as missing."""
    missing = series.isna()
    if not is_numeric_dtype(series) and not is_bool_dtype(series):
        missing |= series.astype(str).str.strip().eq('')
    return missing


# =============================================================================
# DATA PREPROCESSOR CLASS
# =============================================================================
class WaterPointPreprocessor:
    """
    Cleans raw water-point records into Clean Records.

    Every stage takes a DataFrame and returns a new one; the input frame is
    never modified. The preprocessor has no I/O apart from ``load_data`` and
    the console output switched by ``verbose``.

    Attributes
    ----------
    config : CleaningConfig
        Column groups and rules. All groups are resolved by column name.

    verbose : bool
        Print per-stage progress in the pipeline's console style.

    diagnostics : dict
        Filled by ``clean()``:
        - rows_in / rows_out: row counts before and after cleaning
        - dropped: rows dropped per stage (required, status, population)
        - sentinels: values replaced with missing, per field
        - ignored_drop_columns: configured drop columns absent from the input

    Example Usage
    -------------
    >>> from src.waterpoint.data_preprocessor import WaterPointPreprocessor
    >>> from src.utils.paths import data_path
    >>>
    >>> preprocessor = WaterPointPreprocessor()
    >>> raw = preprocessor.load_data(data_path('training_set_values.csv'),
    ...                              data_path('training_set_labels.csv'))
    >>> clean = preprocessor.clean(raw)
    >>> preprocessor.diagnostics['dropped']
    {'required': 21347, 'status': 3014, 'population': 5921}
    """

    def __init__(self, config: Optional[CleaningConfig] = None, verbose: bool = True):
        self.config = config or CleaningConfig()
        self.verbose = verbose
        self.diagnostics = self._empty_diagnostics()

    @staticmethod
    def _empty_diagnostics() -> Dict:
        return {
            'rows_in': 0,
            'rows_out': 0,
            'dropped': {},
            'sentinels': {},
            'ignored_drop_columns': [],
        }

    def _log(self, message: str):
        if self.verbose:
            print(message)

    def _record_drop(self, stage: str, before: int, after: int) -> int:
        dropped = before - after
        self.diagnostics['dropped'][stage] = self.diagnostics['dropped'].get(stage, 0) + dropped
        self._log(f"  [{stage}] dropped {dropped:,} rows ({before:,} -> {after:,})")
        return dropped


    def load_data(self, values_path: str, labels_path: Optional[str] = None) -> pd.DataFrame:
        """
        Load raw records from delimited text.

        Parameters
        ----------
        values_path : str
            CSV with one row per water point (id plus every feature column).
        labels_path : str, optional
            CSV with ``id`` and the status column. When given it is inner-joined
            onto the values by id; otherwise the values file must already carry
            the status column.

        Returns
        -------
        DataFrame
            Raw records. Only empty cells are missing values; labels such as
            "None" or "NA" stay as text.
        """
        id_field = self.config.id_field
        status_field = self.config.status_field

        self._log("Loading datasets...")
        values = pd.read_csv(values_path, keep_default_na=False, na_values=[''])
        self._log(f"  Values shape: {values.shape}")
        if id_field not in values.columns:
            raise SchemaError(id_field, stage='load')

        if labels_path is not None:
            labels = pd.read_csv(labels_path, keep_default_na=False, na_values=[''])
            self._log(f"  Labels shape: {labels.shape}")
            for field in (id_field, status_field):
                if field not in labels.columns:
                    raise SchemaError(field, stage='load')
            values = values.drop(columns=[status_field], errors='ignore')
            values = values.merge(labels[[id_field, status_field]], on=id_field, how='inner')
            self._log(f"  Merged shape: {values.shape}")

        return values


    def validate_schema(self, df: pd.DataFrame):
        """
        Confirm every configured column exists before any transformation runs.

        Year sentinel fields must exist in the raw schema. Required, status and
        population fields, and an explicit broad sentinel group, must survive
        column projection.

        Raises
        ------
        SchemaError
            Naming the first absent column.
        """
        columns = set(df.columns)
        projected = columns - set(self.config.drop_columns)

        for field in self.config.year_sentinel_fields:
            if field not in columns:
                raise SchemaError(field, stage='validate')

        expected = self.config.explicit_fields()
        if self.config.sentinel_fields is not None:
            excluded = set(self.config.sentinel_excluded_fields)
            expected += [f for f in self.config.sentinel_fields if f not in excluded]

        for field in expected:
            if field not in projected:
                raise SchemaError(field, stage='validate')


    def normalize_sentinels(self, df: pd.DataFrame, fields: Sequence[str],
                            sentinel=None, stage: str = 'sentinel') -> pd.DataFrame:
        """
        Replace the sentinel value with missing in the named fields.

        Numeric columns compare numerically (0 and 0.0 both match). Text
        columns compare against the sentinel's string form after stripping
        whitespace, so a funder recorded as "0" is caught. Boolean columns are
        left alone.

        Raises
        ------
        SchemaError
            If a named field is absent.
        """
        if sentinel is None:
            sentinel = self.config.sentinel

        out = df.copy()
        for field in fields:
            if field not in out.columns:
                raise SchemaError(field, stage=stage)

            series = out[field]
            if is_bool_dtype(series):
                continue
            if is_numeric_dtype(series):
                mask = series == sentinel
            else:
                mask = series.astype(str).str.strip() == str(sentinel)

            n_replaced = int(mask.sum())
            if n_replaced:
                out[field] = series.where(~mask)
            counts = self.diagnostics['sentinels']
            counts[field] = counts.get(field, 0) + n_replaced

        self._log(f"  [{stage}] sentinel {sentinel!r} -> missing in {len(fields)} fields")
        return out


    def resolve_sentinel_fields(self, df: pd.DataFrame) -> List[str]:
        """
        Names of the broad sentinel group for a projected frame.

        Uses the configured list when there is one, otherwise every numeric,
        non-boolean column. Excluded fields are removed in both cases.
        """
        excluded = set(self.config.sentinel_excluded_fields)
        if self.config.sentinel_fields is None:
            candidates = [col for col in df.columns
                          if is_numeric_dtype(df[col]) and not is_bool_dtype(df[col])]
        else:
            candidates = self.config.sentinel_fields
        return [col for col in candidates if col not in excluded]


    def filter_required(self, df: pd.DataFrame,
                        required_fields: Optional[Sequence[str]] = None) -> Tuple[pd.DataFrame, int]:
        """
        Drop rows with a missing value in any required field.

        Returns
        -------
        tuple of (DataFrame, int)
            The retained rows and the number of rows dropped.
        """
        if required_fields is None:
            required_fields = self.config.required_fields

        for field in required_fields:
            if field not in df.columns:
                raise SchemaError(field, stage='required')

        keep = pd.Series(True, index=df.index)
        for field in required_fields:
            keep &= ~_missing_mask(df[field])
        out = df[keep]
        dropped = self._record_drop('required', len(df), len(out))
        return out, dropped


    def filter_status(self, df: pd.DataFrame) -> pd.DataFrame:
        """Keep rows whose status is exactly one of the configured levels."""
        status_field = self.config.status_field
        if status_field not in df.columns:
            raise SchemaError(status_field, stage='status')

        out = df[df[status_field].isin(self.config.status_levels)]
        self._record_drop('status', len(df), len(out))
        return out


    def project_columns(self, df: pd.DataFrame,
                        drop_columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """Drop the configured columns; names absent from the frame are reported and ignored."""
        if drop_columns is None:
            drop_columns = self.config.drop_columns

        present = [col for col in drop_columns if col in df.columns]
        ignored = [col for col in drop_columns if col not in df.columns]
        if ignored:
            self.diagnostics['ignored_drop_columns'].extend(ignored)
            self._log(f"  [WARN] Drop columns not in input: {', '.join(ignored)}")

        self._log(f"  [projection] dropping {len(present)} columns")
        return df.drop(columns=present)


    def filter_population(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Keep rows with population strictly greater than 1.

        Population 0 or 1 is a data-entry artifact. A missing population does
        not pass the filter.

        Raises
        ------
        ValidationError
            If a non-missing population value is not numeric.
        """
        field = self.config.population_field
        if field not in df.columns:
            raise SchemaError(field, stage='population')

        raw = df[field]
        values = pd.to_numeric(raw, errors='coerce')
        unparseable = values.isna() & ~_missing_mask(raw)
        if unparseable.any():
            example = raw[unparseable].iloc[0]
            raise ValidationError(field, f"non-numeric value {example!r}", stage='population')

        out = df[values > 1]
        self._record_drop('population', len(df), len(out))
        return out


    def normalize_categoricals(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Turn every non-numeric column except the id into a closed categorical.

        The status column gets exactly the configured levels, in order. Unused
        categories are removed everywhere else. The id becomes an opaque
        string key.
        """
        id_field = self.config.id_field
        status_field = self.config.status_field

        out = df.copy()
        for col in out.columns:
            if col == id_field:
                out[col] = out[col].astype(str)
                continue
            if col == status_field:
                out[col] = pd.Categorical(out[col], categories=self.config.status_levels)
                continue
            if is_numeric_dtype(out[col]) or is_bool_dtype(out[col]):
                continue
            out[col] = out[col].astype('category').cat.remove_unused_categories()

        return out


    def check_status_levels(self, df: pd.DataFrame, minimum: int = 1):
        """
        Fail unless every status level has at least ``minimum`` rows.

        Raises
        ------
        DataInsufficientError
            Naming the first level below the minimum.
        """
        counts = df[self.config.status_field].value_counts()
        for level in self.config.status_levels:
            found = int(counts.get(level, 0))
            if found < minimum:
                raise DataInsufficientError(level, minimum, found, stage='clean')


    def clean(self, raw: pd.DataFrame) -> pd.DataFrame:
        """
        Main cleaning function that executes every stage in order.

        Parameters
        ----------
        raw : DataFrame
            Raw records; not modified.

        Returns
        -------
        DataFrame
            Clean Records with a fresh 0..n-1 index.

        Pipeline Steps
        --------------
        1. Validate the schema against the configuration
        2. Year sentinel normalization (must precede the required filter)
        3. Column projection
        4. Broad sentinel normalization on the projected schema
        5. Required-field filter
        6. Status filter
        7. Population filter
        8. Categorical normalization
        9. Check both status levels survived
        """
        self.diagnostics = self._empty_diagnostics()
        self.diagnostics['rows_in'] = len(raw)

        self._log("\n" + "="*60)
        self._log("DATA CLEANING")
        self._log("="*60)

        self.validate_schema(raw)

        df = self.normalize_sentinels(raw, self.config.year_sentinel_fields, stage='year_sentinel')
        df = self.project_columns(df)
        df = self.normalize_sentinels(df, self.resolve_sentinel_fields(df), stage='sentinel')

        df, _ = self.filter_required(df)
        df = self.filter_status(df)
        df = self.filter_population(df)

        df = self.normalize_categoricals(df)
        self.check_status_levels(df)

        df = df.reset_index(drop=True)
        self.diagnostics['rows_out'] = len(df)

        self._log(f"[OK] Cleaning complete: {len(raw):,} -> {len(df):,} rows, {df.shape[1]} columns")
        return df
