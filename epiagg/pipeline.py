import logging
from functools import partial
from pathlib import Path
from typing import Callable, NamedTuple

import polars as pl

from epiagg.aggregate import (
    Granularity,
    case_death_detail,
    death_counts_by_aggregate_location,
    global_totals,
    peak_infection,
)
from epiagg.filters import (
    CountriesOnly,
    FilterMode,
    filter_mode_from_config,
    filter_records,
)
from epiagg.rolling import rolling_vaccinations, vaccination_progress

logger = logging.getLogger(__name__)


class Query(NamedTuple):
    run: Callable[..., pl.DataFrame]
    needs_vaccinations: bool = False
    default_filter: FilterMode | None = None


QUERIES = {
    "global_totals": Query(global_totals, default_filter=CountriesOnly()),
    "death_counts_by_aggregate_location": Query(death_counts_by_aggregate_location),
    "peak_infection_by_location": Query(
        partial(peak_infection, granularity=Granularity.BY_LOCATION)
    ),
    "peak_infection_by_location_and_date": Query(
        partial(peak_infection, granularity=Granularity.BY_LOCATION_AND_DATE)
    ),
    "case_death_detail": Query(case_death_detail, default_filter=CountriesOnly()),
    "rolling_vaccinations": Query(rolling_vaccinations, needs_vaccinations=True),
    "vaccination_progress": Query(vaccination_progress, needs_vaccinations=True),
}

OUTPUT_FORMATS = ["parquet", "csv"]


def run_queries(
    config: dict,
    deaths: pl.DataFrame,
    vaccinations: pl.DataFrame | None = None,
) -> dict[str, pl.DataFrame]:
    """
    Run the queries selected in a config.

    Parameters
    config: dict
        "queries": names of the queries to run, from QUERIES (default: all);
        "filters": optional {query name: filter config}, see
        `filter_mode_from_config`, overriding the query's default filter
    deaths: pl.DataFrame
        case/death records
    vaccinations: pl.DataFrame | None
        vaccination records; only needed by the vaccination queries

    Returns
    dict
        { query name => result frame }, in the order the queries were given
    """
    if deaths is None:
        raise ValueError("Case/death records are required")

    names = config.get("queries") or list(QUERIES)
    filters = config.get("filters") or {}

    # check the whole selection before running anything
    unknown = [name for name in names if name not in QUERIES]
    if len(unknown) > 0:
        raise ValueError(f"Unknown queries {unknown}; expected some of {list(QUERIES)}")

    needing = [name for name in names if QUERIES[name].needs_vaccinations]
    if vaccinations is None and len(needing) > 0:
        raise ValueError(f"Vaccination records are required by {needing}")

    results = {}
    for name in names:
        query = QUERIES[name]

        if name in filters:
            mode = filter_mode_from_config(filters[name])
        else:
            mode = query.default_filter

        records = deaths if mode is None else filter_records(deaths, mode)

        if query.needs_vaccinations:
            result = query.run(records, vaccinations)
        else:
            result = query.run(records)

        logger.info("Query %s returned %d row(s)", name, result.height)
        results[name] = result

    return results


def write_results(
    results: dict[str, pl.DataFrame],
    output_dir: str | Path,
    output_format: str = "parquet",
    fail_on_empty: bool = False,
) -> list[Path]:
    """
    Write each result frame to `<output_dir>/<query name>.<format>`.

    Returns
    list
        paths of the written files
    """
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(
            f"Unknown output format '{output_format}'; expected one of {OUTPUT_FORMATS}"
        )

    if fail_on_empty:
        empty = [name for name, result in results.items() if result.height == 0]
        if len(empty) > 0:
            raise RuntimeError(f"No rows returned by {empty}")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for name, result in results.items():
        path = output_dir / f"{name}.{output_format}"
        if output_format == "parquet":
            result.write_parquet(path)
        else:
            result.write_csv(path)

        logger.debug("Wrote %s", path)
        paths.append(path)

    return paths
