import logging
from typing import List

import polars as pl

from epiagg.filters import CountriesOnly, filter_records
from epiagg.utils import parse_int, percentage, require_columns

logger = logging.getLogger(__name__)

JOIN_KEYS = ["location", "date"]
DEATH_COLUMNS = ["continent", "location", "date", "population"]


def deduplicate(records: pl.DataFrame, keys: List[str], label: str) -> pl.DataFrame:
    """
    Keep the first record for each key, reporting how many were dropped.

    Parameters
    records: pl.DataFrame
        record stream that ought to be unique on `keys`
    keys: List[str]
        key columns
    label: str
        name of the stream, for the log

    Returns
    pl.DataFrame
        records unique on `keys`, in input order
    """
    unique = records.unique(subset=keys, keep="first", maintain_order=True)

    n_dropped = records.height - unique.height
    if n_dropped > 0:
        logger.warning(
            "Dropped %d duplicate %s record(s) on %s; kept the first of each",
            n_dropped,
            label,
            keys,
        )

    return unique


def join_countries(
    deaths: pl.DataFrame, vaccinations: pl.DataFrame, value_col: str
) -> pl.DataFrame:
    """
    Inner join of country case/death records to one vaccination column.

    Details
    Case/death records without a continent are dropped first. Records with
    no match on (location, date) in the other stream are dropped too.
    Duplicate keys are not resolved here.
    """
    require_columns(
        deaths,
        DEATH_COLUMNS,
        types={"location": pl.String, "date": pl.Date},
        label="case/death records",
    )
    require_columns(
        vaccinations,
        JOIN_KEYS + [value_col],
        types={"location": pl.String, "date": pl.Date},
        label="vaccination records",
    )

    countries = filter_records(deaths, CountriesOnly()).select(DEATH_COLUMNS)

    return countries.join(
        vaccinations.select(JOIN_KEYS + [value_col]), on=JOIN_KEYS, how="inner"
    )


def rolling_vaccinations(
    deaths: pl.DataFrame, vaccinations: pl.DataFrame
) -> pl.DataFrame:
    """
    Running total of new vaccinations per country, and the share of the
    population it represents.

    Parameters
    deaths: pl.DataFrame
        case/death records, giving continent and population
    vaccinations: pl.DataFrame
        vaccination records with new_vaccinations

    Returns
    pl.DataFrame
        continent, location, date, population, new_vaccinations,
        rolling_total and percent_vaccinated, sorted by location and date

    Details
    Each stream is first made unique on (location, date), keeping the first
    record, so a duplicated source row cannot be counted twice. Days with no
    reported vaccinations add nothing to the running total, which never
    resets within a location. The percentage is null where population is 0.
    """
    require_columns(deaths, JOIN_KEYS, label="case/death records")
    require_columns(vaccinations, JOIN_KEYS, label="vaccination records")

    joined = join_countries(
        deduplicate(deaths, JOIN_KEYS, "case/death"),
        deduplicate(vaccinations, JOIN_KEYS, "vaccination"),
        "new_vaccinations",
    )
    logger.debug("Joined %d country-day record(s)", joined.height)

    return (
        joined.sort(JOIN_KEYS)
        .with_columns(new_vaccinations=parse_int(pl.col("new_vaccinations")))
        .with_columns(
            rolling_total=pl.col("new_vaccinations")
            .fill_null(0)
            .cum_sum()
            .over("location")
        )
        .with_columns(
            percent_vaccinated=percentage(
                pl.col("rolling_total"), parse_int(pl.col("population"))
            )
        )
        .select(
            DEATH_COLUMNS
            + ["new_vaccinations", "rolling_total", "percent_vaccinated"]
        )
    )


def vaccination_progress(
    deaths: pl.DataFrame, vaccinations: pl.DataFrame
) -> pl.DataFrame:
    """
    Reported cumulative vaccinations per country and day.

    Details
    Duplicate vaccination records on a (location, date) collapse to their
    largest total; missing totals are skipped.
    """
    joined = join_countries(deaths, vaccinations, "total_vaccinations")

    return (
        joined.group_by(DEATH_COLUMNS, maintain_order=True)
        .agg(RollingPeopleVaccinated=parse_int(pl.col("total_vaccinations")).max())
        .sort(["continent", "location", "date"], maintain_order=True)
    )
