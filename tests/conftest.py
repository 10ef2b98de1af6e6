# -*- coding: utf-8 -*-
import numpy as np
import pandas as pd
import pytest

from src.waterpoint.data_preprocessor import WaterPointPreprocessor
from src.waterpoint.partition import build_partition

BASE_ROW = {
    'id': 69572, 'amount_tsh': 6000.0, 'date_recorded': '2011-03-14',
    'funder': 'Roman', 'gps_height': 1390, 'installer': 'Roman',
    'longitude': 34.938093, 'latitude': -9.856322, 'wpt_name': 'none',
    'num_private': 0, 'basin': 'Lake Nyasa', 'subvillage': 'Mnyusi B',
    'region': 'Iringa', 'region_code': 11, 'district_code': 5,
    'lga': 'Ludewa', 'ward': 'Mundindi', 'population': 109,
    'public_meeting': True, 'recorded_by': 'GeoData Consultants Ltd',
    'scheme_management': 'VWC', 'scheme_name': 'Roman', 'permit': False,
    'construction_year': 1999, 'extraction_type': 'gravity',
    'extraction_type_group': 'gravity', 'extraction_type_class': 'gravity',
    'management': 'vwc', 'management_group': 'user-group',
    'payment': 'pay annually', 'payment_type': 'annually',
    'water_quality': 'soft', 'quality_group': 'good', 'quantity': 'enough',
    'quantity_group': 'enough', 'source': 'spring', 'source_type': 'spring',
    'source_class': 'groundwater', 'waterpoint_type': 'communal standpipe',
    'waterpoint_type_group': 'communal standpipe', 'status_group': 'functional',
}


def make_raw(n=1500, seed=0):
    """Synthetic raw records with sentinels, gaps and all three raw statuses."""
    rng = np.random.RandomState(seed)

    quantity = rng.choice(['enough', 'insufficient', 'dry', 'seasonal'], n, p=[.5, .25, .15, .1])
    p_non_functional = np.where(quantity == 'dry', .9, np.where(quantity == 'enough', .25, .45))
    status = np.where(rng.rand(n) < p_non_functional, 'non functional', 'functional')
    status = np.where(rng.rand(n) < .08, 'functional needs repair', status)

    construction_year = np.where(rng.rand(n) < .15, 0, rng.randint(1960, 2011, n))
    population = np.where(rng.rand(n) < .12, rng.choice([0, 1], n), rng.randint(2, 3000, n))

    installer = rng.choice(['DWE', 'Government', 'RWE', 'Commu', 'DANIDA'], n).astype(object)
    installer[rng.rand(n) < .05] = np.nan

    public_meeting = rng.choice([True, False], n).astype(object)
    public_meeting[rng.rand(n) < .1] = np.nan

    return pd.DataFrame({
        'id': np.arange(1000, 1000 + n),
        'amount_tsh': np.where(rng.rand(n) < .7, 0.0, rng.choice([50.0, 500.0, 6000.0], n)),
        'date_recorded': rng.choice(['2011-03-14', '2013-02-04', '2012-10-10', '2011-07-13'], n),
        'funder': rng.choice(['Government Of Tanzania', 'Danida', 'Hesawa', 'Rwssp', 'World Bank', '0'],
                             n, p=[.3, .2, .15, .15, .15, .05]),
        'gps_height': np.where(rng.rand(n) < .3, 0, rng.randint(-50, 2500, n)),
        'installer': installer,
        'longitude': np.where(rng.rand(n) < .03, 0.0, rng.uniform(29.5, 40.3, n)),
        'latitude': rng.uniform(-11.6, -1.0, n),
        'wpt_name': rng.choice(['none', 'Shuleni', 'Zahanati', 'Msikitini'], n),
        'num_private': np.where(rng.rand(n) < .95, 0, rng.randint(1, 30, n)),
        'basin': rng.choice(['Lake Victoria', 'Pangani', 'Rufiji', 'Internal', 'Lake Nyasa'], n),
        'subvillage': rng.choice(['Madukani', 'Shuleni', 'Majengo', 'Kati'], n),
        'region': rng.choice(['Iringa', 'Shinyanga', 'Mbeya', 'Kilimanjaro', 'Morogoro'], n),
        'region_code': rng.randint(1, 21, n),
        'district_code': rng.randint(1, 8, n),
        'lga': rng.choice(['Njombe', 'Arusha Rural', 'Moshi Rural', 'Bariadi'], n),
        'ward': rng.choice(['Igosi', 'Imalinyi', 'Siha Kati', 'Mdandu'], n),
        'population': population,
        'public_meeting': public_meeting,
        'recorded_by': 'GeoData Consultants Ltd',
        'scheme_management': rng.choice(['VWC', 'WUG', 'Water authority', 'WUA'], n),
        'scheme_name': rng.choice(['K', 'None', 'Borehole', 'Chalinze wate'], n),
        'permit': rng.choice([True, False], n),
        'construction_year': construction_year,
        'extraction_type': rng.choice(['gravity', 'nira/tanira', 'submersible', 'swn 80'], n),
        'extraction_type_group': rng.choice(['gravity', 'nira/tanira', 'submersible', 'swn 80'], n),
        'extraction_type_class': rng.choice(['gravity', 'handpump', 'submersible', 'motorpump'], n),
        'management': rng.choice(['vwc', 'wug', 'water board', 'wua'], n),
        'management_group': rng.choice(['user-group', 'commercial', 'parastatal', 'other'], n,
                                       p=[.85, .07, .05, .03]),
        'payment': rng.choice(['never pay', 'pay per bucket', 'pay monthly', 'unknown'], n),
        'payment_type': rng.choice(['never pay', 'per bucket', 'monthly', 'unknown'], n),
        'water_quality': rng.choice(['soft', 'salty', 'unknown', 'milky'], n, p=[.85, .08, .04, .03]),
        'quality_group': rng.choice(['good', 'salty', 'unknown', 'milky'], n, p=[.85, .08, .04, .03]),
        'quantity': quantity,
        'quantity_group': quantity,
        'source': rng.choice(['spring', 'shallow well', 'machine dbh', 'river'], n),
        'source_type': rng.choice(['spring', 'shallow well', 'borehole', 'river/lake'], n),
        'source_class': rng.choice(['groundwater', 'surface', 'unknown'], n, p=[.75, .24, .01]),
        'waterpoint_type': rng.choice(['communal standpipe', 'hand pump', 'other'], n),
        'waterpoint_type_group': rng.choice(['communal standpipe', 'hand pump', 'other'], n),
        'status_group': status,
    })


@pytest.fixture
def make_row():
    """Factory for a single valid raw record with overrides."""
    def _make_row(**overrides):
        row = dict(BASE_ROW)
        row.update(overrides)
        return row
    return _make_row


@pytest.fixture
def raw_frame():
    return make_raw()


@pytest.fixture
def preprocessor():
    return WaterPointPreprocessor(verbose=False)


@pytest.fixture
def clean_table(raw_frame, preprocessor):
    return preprocessor.clean(raw_frame)


@pytest.fixture
def partition(clean_table):
    return build_partition(clean_table, seed=7, verbose=False)


@pytest.fixture
def raw_factory():
    return make_raw
