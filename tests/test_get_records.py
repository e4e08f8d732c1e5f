import datetime as dt

import polars as pl
import pytest

import epiagg
from epiagg import get_records


@pytest.fixture
def deaths_csv(tmp_path):
    """
    Write a small csv of case/death records, with mixed-case headers and an
    extra column, out of date order.
    """
    path = tmp_path / "deaths.csv"
    path.write_text(
        "Location,continent,date,Population,new_cases,new_deaths,"
        "total_cases,total_deaths,iso_code\n"
        "France,Europe,01/02/2021,1000,50,5,150,15,FRA\n"
        "France,Europe,01/01/2021,1000,100,10,100,10,FRA\n"
        "World,,01/01/2021,1500,120,,120,,OWID_WRL\n"
    )
    return path


def test_get_deaths(deaths_csv):
    output = get_records.get_deaths(deaths_csv, date_format="%m/%d/%Y")

    assert isinstance(output, epiagg.CaseDeathRecords)
    assert output.columns == get_records.DEATH_COLUMNS
    assert output.schema["date"] == pl.Date
    assert output.schema["continent"] == pl.String
    assert output["location"].to_list() == ["France", "France", "World"]
    assert output["date"].to_list() == [
        dt.date(2021, 1, 1),
        dt.date(2021, 1, 2),
        dt.date(2021, 1, 1),
    ]
    assert output["continent"].to_list() == ["Europe", "Europe", None]


def test_get_vaccinations_from_parquet(tmp_path):
    path = tmp_path / "vaccinations.parquet"
    pl.DataFrame(
        {
            "location": ["Peru", "Peru"],
            "date": [dt.datetime(2021, 1, 2, 12), dt.datetime(2021, 1, 1, 12)],
            "new_vaccinations": ["7", None],
            "total_vaccinations": [7.0, None],
        }
    ).write_parquet(path)

    output = get_records.get_vaccinations(path)

    assert isinstance(output, epiagg.VaccinationRecords)
    assert output["date"].to_list() == [dt.date(2021, 1, 1), dt.date(2021, 1, 2)]


def test_get_records_fails_on_missing_columns(tmp_path):
    path = tmp_path / "vaccinations.csv"
    path.write_text("location,date,new_vaccinations\nPeru,2021-01-01,5\n")

    with pytest.raises(RuntimeError, match="total_vaccinations"):
        get_records.get_vaccinations(path)


def test_get_records_fails_on_unknown_format(tmp_path):
    with pytest.raises(ValueError, match=".csv or .parquet"):
        get_records.read_table(tmp_path / "deaths.xlsx")


def test_records_validate_schema():
    with pytest.raises(RuntimeError, match="'date' has type"):
        epiagg.VaccinationRecords(
            {
                "location": ["Peru"],
                "date": ["2021-01-01"],
                "new_vaccinations": [1],
                "total_vaccinations": [1],
            }
        )

    with pytest.raises(RuntimeError, match="'population' not found"):
        epiagg.CaseDeathRecords(
            {
                "location": ["Peru"],
                "continent": ["South America"],
                "date": [dt.date(2021, 1, 1)],
            }
        )
