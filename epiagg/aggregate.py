from enum import Enum

import polars as pl

from epiagg.filters import AggregatesOnly, filter_records
from epiagg.utils import parse_int, percentage, require_columns


class Granularity(Enum):
    """
    Grouping keys for peak infection.
    """

    BY_LOCATION = ("location", "population")
    BY_LOCATION_AND_DATE = ("location", "population", "date")


def global_totals(records: pl.DataFrame) -> pl.DataFrame:
    """
    Total cases and deaths over all records, and the crude death percentage.

    Parameters
    records: pl.DataFrame
        case/death records with new_cases and new_deaths columns

    Returns
    pl.DataFrame
        a single row with total_cases, total_deaths and death_percentage

    Details
    Malformed or missing counts add nothing to the totals. The death
    percentage is null when there are no cases.
    """
    require_columns(records, ["new_cases", "new_deaths"])

    return records.select(
        total_cases=parse_int(pl.col("new_cases")).sum(),
        total_deaths=parse_int(pl.col("new_deaths")).sum(),
    ).with_columns(
        death_percentage=percentage(pl.col("total_deaths"), pl.col("total_cases"))
    )


def death_counts_by_aggregate_location(
    records: pl.DataFrame, exclude_income_groups: bool = True
) -> pl.DataFrame:
    """
    Total deaths per roll-up location, largest first.

    Parameters
    records: pl.DataFrame
        case/death records; country rows are dropped here
    exclude_income_groups: bool
        also drop the income-group buckets

    Returns
    pl.DataFrame
        location and TotalDeathCount, sorted descending; tied locations keep
        the order in which they first appear in the input
    """
    require_columns(records, ["location", "continent", "new_deaths"])

    aggregates = filter_records(records, AggregatesOnly(exclude_income_groups))

    return (
        aggregates.group_by("location", maintain_order=True)
        .agg(TotalDeathCount=parse_int(pl.col("new_deaths")).sum())
        .sort("TotalDeathCount", descending=True, maintain_order=True)
    )


def peak_infection(
    records: pl.DataFrame, granularity: Granularity = Granularity.BY_LOCATION
) -> pl.DataFrame:
    """
    Highest case count and highest share of the population infected.

    Parameters
    records: pl.DataFrame
        case/death records with total_cases and population columns
    granularity: Granularity
        group by location and population, or also by date

    Returns
    pl.DataFrame
        grouping keys, HighestInfectionCount and PercentPopulationInfected,
        sorted by the percentage descending (nulls last, ties in input order)

    Details
    The percentage is taken record by record and then maximized, so it stays
    right even if population were to change within a group. Missing case
    counts are skipped, and records with no population give no percentage.
    """
    keys = list(granularity.value)
    require_columns(records, keys + ["total_cases"])

    cases = parse_int(pl.col("total_cases"))

    return (
        records.group_by(keys, maintain_order=True)
        .agg(
            HighestInfectionCount=cases.max(),
            PercentPopulationInfected=percentage(
                cases, parse_int(pl.col("population"))
            ).max(),
        )
        .sort(
            "PercentPopulationInfected",
            descending=True,
            nulls_last=True,
            maintain_order=True,
        )
    )


def case_death_detail(records: pl.DataFrame) -> pl.DataFrame:
    """
    Daily detail table of cumulative cases and deaths, with population, for
    per-capita and line charts downstream.
    """
    require_columns(
        records, ["location", "date", "population", "total_cases", "total_deaths"]
    )

    return (
        records.select(
            "location",
            "date",
            "population",
            total_cases=parse_int(pl.col("total_cases")),
            total_deaths=parse_int(pl.col("total_deaths")),
        )
        .with_columns(
            death_percentage=percentage(pl.col("total_deaths"), pl.col("total_cases"))
        )
        .sort(["location", "date"], maintain_order=True)
    )
