import logging
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import polars as pl

from epiagg.utils import require_columns

logger = logging.getLogger(__name__)


class LocationKind(Enum):
    COUNTRY = "country"
    AGGREGATE = "aggregate"


class AggregateKind(Enum):
    """
    Kinds of roll-up pseudo-location, i.e. rows that sum over many countries.
    """

    WORLD = "world"
    UNION = "union"
    INTERNATIONAL = "international"
    INCOME_GROUP = "income_group"
    REGION = "region"


NAMED_AGGREGATES = {
    "World": AggregateKind.WORLD,
    "European Union": AggregateKind.UNION,
    "International": AggregateKind.INTERNATIONAL,
}

INCOME_PATTERN = "income"


@dataclass(frozen=True)
class CountriesOnly:
    """Keep true countries, i.e. records with a continent."""


@dataclass(frozen=True)
class AggregatesOnly:
    """
    Keep roll-up locations other than World, the European Union and
    International; optionally drop the income-group buckets too.
    """

    exclude_income_groups: bool = True


FilterMode = CountriesOnly | AggregatesOnly


def classify_location(
    location: str, continent: str | None
) -> Tuple[LocationKind, AggregateKind | None]:
    """
    Classify a single location.

    Parameters
    location: str
        location name, e.g. "France" or "High income"
    continent: str | None
        continent of the location; null for roll-ups

    Returns
    tuple
        (LocationKind, AggregateKind), where the aggregate kind is None for
        countries

    Details
    Any location with a continent is a country. Locations without one are
    matched first by exact name, then by the income pattern (case-insensitive);
    whatever remains is a regional roll-up such as a continent.
    """
    if continent is not None:
        return LocationKind.COUNTRY, None

    if location in NAMED_AGGREGATES:
        return LocationKind.AGGREGATE, NAMED_AGGREGATES[location]

    if INCOME_PATTERN in location.lower():
        return LocationKind.AGGREGATE, AggregateKind.INCOME_GROUP

    return LocationKind.AGGREGATE, AggregateKind.REGION


def aggregate_kind(
    location: pl.Expr = pl.col("location"), continent: pl.Expr = pl.col("continent")
) -> pl.Expr:
    """
    Vectorized `classify_location`, as polars expressions.

    Returns
    pl.Expr
        the `AggregateKind` value of each row as a string; null for countries
    """
    kind = pl.when(continent.is_not_null()).then(pl.lit(None, dtype=pl.String))

    for name, agg_kind in NAMED_AGGREGATES.items():
        kind = kind.when(location == pl.lit(name)).then(pl.lit(agg_kind.value))

    return (
        kind.when(
            location.str.to_lowercase().str.contains(INCOME_PATTERN, literal=True)
        )
        .then(pl.lit(AggregateKind.INCOME_GROUP.value))
        .otherwise(pl.lit(AggregateKind.REGION.value))
    )


def location_kind(continent: pl.Expr = pl.col("continent")) -> pl.Expr:
    # only roll-ups lack a continent
    return (
        pl.when(continent.is_not_null())
        .then(pl.lit(LocationKind.COUNTRY.value))
        .otherwise(pl.lit(LocationKind.AGGREGATE.value))
    )


def filter_records(records: pl.DataFrame, mode: FilterMode) -> pl.DataFrame:
    """
    Keep only the records of the locations selected by the filter mode.

    Parameters
    records: pl.DataFrame
        case/death records with location and continent columns
    mode: CountriesOnly | AggregatesOnly
        which locations to keep

    Returns
    pl.DataFrame
        the kept records, in input order
    """
    if isinstance(mode, CountriesOnly):
        require_columns(records, ["continent"])
        out = records.filter(location_kind() == pl.lit(LocationKind.COUNTRY.value))

    elif isinstance(mode, AggregatesOnly):
        require_columns(records, ["location", "continent"])
        excluded = set(NAMED_AGGREGATES.values())
        if mode.exclude_income_groups:
            excluded.add(AggregateKind.INCOME_GROUP)

        kept = [k.value for k in AggregateKind if k not in excluded]
        out = records.filter(aggregate_kind().is_in(kept))

    else:
        raise ValueError(f"Unknown filter mode {mode!r}")

    logger.debug("%s kept %d of %d records", mode, out.height, records.height)

    return out


def filter_mode_from_config(config: dict | None) -> FilterMode | None:
    """
    Build a filter mode from a config entry.

    Parameters
    config: dict | None
        e.g. {"mode": "aggregates_only", "exclude_income_groups": False};
        `None` or mode "all" means no filtering

    Returns
    CountriesOnly | AggregatesOnly | None
    """
    if config is None:
        return None

    mode = config.get("mode", "all")
    if mode == "all":
        return None
    elif mode == "countries_only":
        return CountriesOnly()
    elif mode == "aggregates_only":
        return AggregatesOnly(
            exclude_income_groups=config.get("exclude_income_groups", True)
        )
    else:
        raise ValueError(
            f"Unknown filter mode '{mode}'; "
            "expected 'all', 'countries_only' or 'aggregates_only'"
        )
