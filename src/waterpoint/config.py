# -*- coding: utf-8 -*-
"""
Configuration for the water-point functionality pipeline.

Column names, sentinel groups and label sets for the Tanzanian water-pump
dataset. Every group is addressed by column name; nothing here depends on
column order.
"""

import os
from typing import List, Optional, Sequence

# =============================================================================
# DATASET SCHEMA
# =============================================================================
ID_FIELD = 'id'
STATUS_FIELD = 'status_group'
POPULATION_FIELD = 'population'
DATE_RECORDED_FIELD = 'date_recorded'
CONSTRUCTION_YEAR_FIELD = 'construction_year'

# Only these two statuses take part in the analysis; "functional needs repair"
# and any other raw level are filtered out, never merged.
STATUS_LEVELS = ('functional', 'non functional')
POSITIVE_STATUS = 'non functional'

REQUIRED_FIELDS = (
    'status_group', 'installer', 'funder', 'quality_group', 'quantity',
    'management_group', 'source_class', 'id', 'construction_year',
)

# Zero is not a valid year
YEAR_SENTINEL_FIELDS = ('construction_year',)

# Applied after column projection
SENTINEL_FIELDS = (
    'funder', 'installer', 'longitude', 'latitude', 'num_private',
    'population', 'construction_year',
)

# Never subject to the sentinel rule: zero is a real value for these
SENTINEL_EXCLUDED_FIELDS = ('id', 'amount_tsh', 'gps_height')

DROP_COLUMNS = (
    # free text / location names
    'wpt_name', 'subvillage', 'scheme_name',
    # administrative codes duplicating region, constant recorder
    'region_code', 'district_code', 'lga', 'ward', 'recorded_by',
    # boolean flags with heavy missingness
    'public_meeting', 'permit',
)

SENTINEL = 0

# =============================================================================
# PARTITION DEFAULTS
# =============================================================================
TRAIN_FRACTION = 0.75
N_FOLDS = 5
DEFAULT_SEED = int(os.getenv('WATERPOINT_SEED', '42'))

# =============================================================================
# INPUT FILES
# =============================================================================
VALUES_FILE = 'training_set_values.csv'
LABELS_FILE = 'training_set_labels.csv'


class CleaningConfig:
    """
    Column groups and rules used by WaterPointPreprocessor.

    Every argument defaults to the module constant of the same name. Pass
    ``sentinel_fields=None`` explicitly through ``from_numeric_columns()`` to
    apply the broad sentinel rule to every numeric column of the projected
    schema instead of a fixed list.
    """

    def __init__(self,
                 required_fields: Sequence[str] = REQUIRED_FIELDS,
                 year_sentinel_fields: Sequence[str] = YEAR_SENTINEL_FIELDS,
                 sentinel_fields: Optional[Sequence[str]] = SENTINEL_FIELDS,
                 sentinel_excluded_fields: Sequence[str] = SENTINEL_EXCLUDED_FIELDS,
                 drop_columns: Sequence[str] = DROP_COLUMNS,
                 sentinel=SENTINEL,
                 status_field: str = STATUS_FIELD,
                 status_levels: Sequence[str] = STATUS_LEVELS,
                 population_field: str = POPULATION_FIELD,
                 id_field: str = ID_FIELD):
        self.required_fields = list(required_fields)
        self.year_sentinel_fields = list(year_sentinel_fields)
        self.sentinel_fields = None if sentinel_fields is None else list(sentinel_fields)
        self.sentinel_excluded_fields = list(sentinel_excluded_fields)
        self.drop_columns = list(drop_columns)
        self.sentinel = sentinel
        self.status_field = status_field
        self.status_levels = list(status_levels)
        self.population_field = population_field
        self.id_field = id_field

    @classmethod
    def from_numeric_columns(cls, **kwargs) -> 'CleaningConfig':
        """Config whose broad sentinel group is every numeric column left after projection."""
        kwargs['sentinel_fields'] = None
        return cls(**kwargs)

    def explicit_fields(self) -> List[str]:
        """Column names that must survive column projection."""
        fields = list(self.required_fields) + [self.status_field, self.population_field]
        return list(dict.fromkeys(fields))

    def __repr__(self):
        return (f"CleaningConfig(required={self.required_fields}, "
                f"sentinel_fields={self.sentinel_fields}, "
                f"excluded={self.sentinel_excluded_fields})")
