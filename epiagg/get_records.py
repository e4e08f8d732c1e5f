import logging
from pathlib import Path

import polars as pl

import epiagg

logger = logging.getLogger(__name__)

DEATH_COLUMNS = [
    "location",
    "continent",
    "date",
    "population",
    "new_cases",
    "new_deaths",
    "total_cases",
    "total_deaths",
]

VACCINATION_COLUMNS = ["location", "date", "new_vaccinations", "total_vaccinations"]


def read_table(file_name) -> pl.DataFrame:
    """
    Read a .csv or .parquet file, with lower-case column names.
    """
    suffix = Path(file_name).suffix.lower()
    if suffix == ".parquet":
        data = pl.read_parquet(file_name)
    elif suffix == ".csv":
        data = pl.read_csv(file_name, infer_schema_length=None)
    else:
        raise ValueError(f"Cannot read '{file_name}': expected a .csv or .parquet file")

    return data.rename({col: col.lower() for col in data.columns})


def format_records(data: pl.DataFrame, columns, date_format: str) -> pl.DataFrame:
    """
    Keep the contract columns and coerce the keys.

    Parameters
    data: pl.DataFrame
        raw records
    columns: List[str]
        columns to keep, including "location" and "date"
    date_format: str
        format of the dates, e.g. "%Y-%m-%d", if they are text

    Details
    Text dates are parsed with `date_format`; datetimes are truncated to
    dates. Numeric columns are kept as they are, since they are parsed where
    they are used. Records are sorted by location and date.
    """
    missing = [col for col in columns if col not in data.columns]
    if len(missing) > 0:
        raise RuntimeError(f"Columns {missing} not found")

    data = data.select(columns)

    date_type = data.schema["date"]
    if date_type == pl.String:
        data = data.with_columns(pl.col("date").str.to_date(format=date_format))
    elif date_type == pl.Datetime:
        data = data.with_columns(pl.col("date").cast(pl.Date))

    if "continent" in columns:
        data = data.with_columns(pl.col("continent").cast(pl.String))

    return data.with_columns(pl.col("location").cast(pl.String)).sort(
        ["location", "date"], maintain_order=True
    )


def get_deaths(file_name, date_format: str = "%Y-%m-%d") -> epiagg.CaseDeathRecords:
    """
    Import case/death records from a .csv or .parquet file.

    Parameters
    file_name : str
        Path to the file, or url of a .csv
    date_format : str
        Format of text dates

    Returns
    CaseDeathRecords
        one record per location and date
    """
    data = format_records(read_table(file_name), DEATH_COLUMNS, date_format)
    logger.info("Read %d case/death record(s) from %s", data.height, file_name)

    return epiagg.CaseDeathRecords(data)


def get_vaccinations(
    file_name, date_format: str = "%Y-%m-%d"
) -> epiagg.VaccinationRecords:
    """
    Import vaccination records from a .csv or .parquet file.

    Parameters
    file_name : str
        Path to the file, or url of a .csv
    date_format : str
        Format of text dates

    Returns
    VaccinationRecords
        one record per location and date
    """
    data = format_records(read_table(file_name), VACCINATION_COLUMNS, date_format)
    logger.info("Read %d vaccination record(s) from %s", data.height, file_name)

    return epiagg.VaccinationRecords(data)
