from typing import List

import polars as pl
from polars.datatypes.classes import DataTypeClass


class Data(pl.DataFrame):
    """
    Abstract class for record streams keyed by location and date.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.validate()

    def validate(self):
        raise NotImplementedError("Subclasses must implement this method.")

    def assert_in_schema(self, names_types: dict[str, DataTypeClass]):
        """
        Verify that column of the expected types are present in the data frame.

        Parameters
        names_types (dict[str, pl.DataType]):
            Column names and types
        """
        for name, type_ in names_types.items():
            if name not in self.schema.names():
                raise RuntimeError(f"Column '{name}' not found")
            elif (name, type_) not in self.schema.items():
                actual_type = self.schema[name]
                raise RuntimeError(
                    f"Column '{name}' has type {actual_type}, not {type_}"
                )

    def assert_columns_found(self, names: List[str]):
        """
        Verify that expected columns are found, whatever their type.

        Numeric columns are parsed where they are used, so a textual
        `new_deaths` column is as acceptable as an integer one.
        """
        for name in names:
            if name not in self.schema.names():
                raise RuntimeError(f"Column '{name}' not found")


class CaseDeathRecords(Data):
    def validate(self):
        """
        Must have location and date keys plus the case/death counts
        """
        self.assert_in_schema({"location": pl.String, "date": pl.Date})
        self.assert_columns_found(
            [
                "continent",
                "population",
                "new_cases",
                "new_deaths",
                "total_cases",
                "total_deaths",
            ]
        )


class VaccinationRecords(Data):
    def validate(self):
        """
        Must have location and date keys plus the vaccination counts
        """
        self.assert_in_schema({"location": pl.String, "date": pl.Date})
        self.assert_columns_found(["new_vaccinations", "total_vaccinations"])
