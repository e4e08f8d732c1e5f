"""
Download data from https://covid.ourworldindata.org/data/owid-covid-data.csv
and split it into case/death and vaccination records
"""

import polars as pl

from epiagg.get_records import DEATH_COLUMNS, VACCINATION_COLUMNS

URL = "https://covid.ourworldindata.org/data/owid-covid-data.csv"

data = pl.read_csv(URL, infer_schema_length=None).sort(["location", "date"])

data.select(DEATH_COLUMNS).write_parquet("data/deaths.parquet")
data.select(VACCINATION_COLUMNS).write_parquet("data/vaccinations.parquet")
