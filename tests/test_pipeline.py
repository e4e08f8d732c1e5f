import polars as pl
import pytest

from epiagg.pipeline import QUERIES, run_queries, write_results


def test_run_queries_runs_all_by_default(deaths, vaccinations):
    output = run_queries({}, deaths, vaccinations)

    assert list(output.keys()) == list(QUERIES)
    assert all(isinstance(x, pl.DataFrame) for x in output.values())


def test_run_queries_applies_default_filters(deaths):
    """
    Global totals are taken over countries only, unless configured otherwise.
    """
    output = run_queries({"queries": ["global_totals"]}, deaths)

    assert list(output.keys()) == ["global_totals"]
    assert output["global_totals"]["total_cases"].to_list() == [200]

    output = run_queries(
        {"queries": ["global_totals"], "filters": {"global_totals": {"mode": "all"}}},
        deaths,
    )

    assert output["global_totals"]["total_cases"].to_list() == [640]


def test_run_queries_applies_configured_filters(deaths):
    output = run_queries(
        {
            "queries": ["peak_infection_by_location"],
            "filters": {"peak_infection_by_location": {"mode": "countries_only"}},
        },
        deaths,
    )

    assert sorted(output["peak_infection_by_location"]["location"].to_list()) == [
        "France",
        "Peru",
    ]


def test_run_queries_fails_fast(deaths, vaccinations):
    with pytest.raises(ValueError, match="Unknown queries"):
        run_queries({"queries": ["global_totals", "top_ten"]}, deaths, vaccinations)

    with pytest.raises(ValueError, match="Vaccination records are required"):
        run_queries({"queries": ["global_totals", "rolling_vaccinations"]}, deaths)

    with pytest.raises(ValueError, match="Case/death records are required"):
        run_queries({}, None, vaccinations)


def test_write_results(deaths, tmp_path):
    results = run_queries(
        {"queries": ["global_totals", "death_counts_by_aggregate_location"]}, deaths
    )

    paths = write_results(results, tmp_path / "out", output_format="csv")

    assert [p.name for p in paths] == [
        "global_totals.csv",
        "death_counts_by_aggregate_location.csv",
    ]
    assert pl.read_csv(paths[1])["location"].to_list() == ["Europe"]


def test_write_results_fails_on_empty(deaths, tmp_path):
    results = {"global_totals": deaths.clear()}

    with pytest.raises(RuntimeError, match="No rows"):
        write_results(results, tmp_path, fail_on_empty=True)

    with pytest.raises(ValueError, match="output format"):
        write_results(results, tmp_path, output_format="xlsx")
