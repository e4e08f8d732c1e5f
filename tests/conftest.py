import polars as pl
import pytest

import epiagg


@pytest.fixture
def deaths():
    """
    Make a mock frame of case/death records: two countries, two roll-ups.
    """
    frame = pl.DataFrame(
        {
            "location": [
                "France",
                "France",
                "Peru",
                "Peru",
                "World",
                "World",
                "Europe",
                "High income",
            ],
            "continent": [
                "Europe",
                "Europe",
                "South America",
                "South America",
                None,
                None,
                None,
                None,
            ],
            "date": [
                "2021-01-01",
                "2021-01-02",
                "2021-01-01",
                "2021-01-02",
                "2021-01-01",
                "2021-01-02",
                "2021-01-01",
                "2021-01-01",
            ],
            "population": [1000, 1000, 500, 500, 1500, 1500, 1000, 800],
            "new_cases": [100, 50, 20, 30, 120, 80, 150, 90],
            "new_deaths": ["10", "5", "2", None, "12", "7", "15", "9"],
            "total_cases": [100, 150, 20, 50, 120, 200, 150, 90],
            "total_deaths": [10, 15, 2, None, 12, 19, 15, 9],
        }
    ).with_columns(date=pl.col("date").str.strptime(pl.Date, "%Y-%m-%d"))

    return epiagg.CaseDeathRecords(frame)


@pytest.fixture
def vaccinations():
    """
    Make a mock frame of vaccination records for the two countries.
    """
    frame = pl.DataFrame(
        {
            "location": ["France", "France", "Peru", "Peru"],
            "date": ["2021-01-01", "2021-01-02", "2021-01-01", "2021-01-02"],
            "new_vaccinations": [10, 20, 5, None],
            "total_vaccinations": [10, 30, 5, None],
        }
    ).with_columns(date=pl.col("date").str.strptime(pl.Date, "%Y-%m-%d"))

    return epiagg.VaccinationRecords(frame)
