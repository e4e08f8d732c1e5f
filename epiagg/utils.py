from typing import List

import polars as pl
from polars.datatypes.classes import DataTypeClass


def parse_int(col: pl.Expr) -> pl.Expr:
    """
    Parse an integer-like column, as polars expressions.

    Parameters
    col: pl.Expr
        column of counts, of any type (integer, float or text)

    Returns
    pl.Expr
        Int64 column; null wherever the value is missing or malformed

    Details
    Text is stripped of surrounding whitespace before parsing. Floats (and
    float-like text, e.g. "12.0") are accepted only when they hold an integral,
    finite value. Whether a null then counts as zero (in a sum) or is skipped
    (in a max) is up to the caller.
    """
    text = col.cast(pl.String).str.strip_chars()
    as_float = text.cast(pl.Float64, strict=False)

    # integral floats, e.g. from a csv column inferred as f64
    from_float = (
        pl.when(as_float.is_finite() & (as_float == as_float.round(0)))
        .then(as_float)
        .otherwise(None)
        .cast(pl.Int64, strict=False)
    )

    return pl.coalesce(text.cast(pl.Int64, strict=False), from_float)


def percentage(numerator: pl.Expr, denominator: pl.Expr) -> pl.Expr:
    """
    Ratio of two columns as a percentage; null where the denominator is 0 or null.
    """
    return pl.when(denominator != 0).then(numerator / denominator * 100)


def require_columns(
    frame: pl.DataFrame,
    names: List[str],
    types: dict[str, DataTypeClass] | None = None,
    label: str = "records",
):
    """
    Fail fast when an input stream is missing or lacks a needed column.

    Parameters
    frame: pl.DataFrame
        input record stream
    names: List[str]
        columns the caller reads
    types: dict[str, pl.DataType] | None
        expected types for those columns whose type matters (join keys)
    label: str
        name of the stream, for error messages
    """
    if frame is None:
        raise ValueError(f"Input {label} are missing")

    for name in names:
        if name not in frame.columns:
            raise RuntimeError(f"Column '{name}' not found in {label}")

    if types is not None:
        for name, type_ in types.items():
            if frame.schema[name] != type_:
                raise RuntimeError(
                    f"Column '{name}' in {label} has type {frame.schema[name]}, "
                    f"not {type_}"
                )
