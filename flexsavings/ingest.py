from __future__ import annotations
import io
from os import PathLike
from typing import IO, Any, Iterable, List, Mapping

import pandas as pd

from . import canon
from .exceptions import IngestError
from .types import PricingSeries, UsageRecord


def _find_header(text: str) -> str:
    """Drop any account preamble above the 'TYPE,DATE,...' header row."""
    lines = text.splitlines()
    for i, line in enumerate(lines):
        if line.strip().upper().startswith("TYPE,") and "DATE" in line.upper():
            return "\n".join(lines[i:])
    raise IngestError(
        "No usage header found. Expected columns: " + ",".join(canon.CSV_COLUMNS)
    )


def read_usage_csv(source: str | PathLike[str] | IO[str]) -> List[UsageRecord]:
    """
    Parse a PG&E interval usage export
    (TYPE,DATE,START TIME,END TIME,USAGE (kWh),COST,NOTES) into UsageRecords.
    """
    if hasattr(source, "read"):
        text = source.read()  # type: ignore[union-attr]
    else:
        with open(source, encoding="utf-8-sig") as f:
            text = f.read()
    raw = pd.read_csv(
        io.StringIO(_find_header(text)),
        dtype=str,
        skipinitialspace=True,
        skip_blank_lines=True,
    )
    raw.columns = [c.strip() for c in raw.columns]
    return usage_from_dataframe(raw)


def _timestamps(df: pd.DataFrame) -> pd.Series:
    if "date" in df.columns and "start_time" in df.columns:
        text = (
            df["date"].astype(str).str.strip()
            + "T"
            + df["start_time"].astype(str).str.strip()
            + ":00"
        )
        return pd.to_datetime(text, errors="coerce", format="%Y-%m-%dT%H:%M:%S")

    cols = {c.lower(): c for c in df.columns}
    tcol = next((cols[k] for k in canon.COMMON_TIMESTAMP_NAMES if k in cols), None)
    if tcol is not None:
        return pd.to_datetime(df[tcol], errors="coerce")
    if isinstance(df.index, pd.DatetimeIndex):
        return pd.Series(df.index, index=df.index)
    raise IngestError(
        "No timestamp found. Expected DATE + START TIME columns, one of "
        f"{', '.join(canon.COMMON_TIMESTAMP_NAMES)}, or a DatetimeIndex."
    )


def _bad_rows(mask: pd.Series, limit: int = 5) -> str:
    rows = [str(i) for i in mask[mask].index[:limit]]
    more = int(mask.sum()) - len(rows)
    return ", ".join(rows) + (f" (+{more} more)" if more > 0 else "")


def _costs(df: pd.DataFrame) -> pd.Series:
    """COST as dollars ("$1,234.50" -> 1234.5); blank or unparseable -> NaN."""
    if "cost" not in df.columns:
        return pd.Series(float("nan"), index=df.index)
    raw = df["cost"]
    if not pd.api.types.is_numeric_dtype(raw):
        raw = raw.astype(str).str.strip().str.replace("$", "", regex=False)
        raw = raw.str.replace(",", "", regex=False)
    return pd.to_numeric(raw, errors="coerce")


def usage_from_dataframe(df: pd.DataFrame) -> List[UsageRecord]:
    """
    Normalise a usage frame into UsageRecords.

    Accepts the PG&E export headers or already-renamed columns. Unparseable
    timestamps or non-numeric usage are rejected rather than carried as NaN.
    """
    df = df.rename(columns=canon.CSV_RENAME)
    ucol = next((c for c in canon.USAGE_KEYS if c in df.columns), None)
    if ucol is None:
        raise IngestError(
            f"Missing usage column; expected one of: {', '.join(canon.USAGE_KEYS)}"
        )

    ts = _timestamps(df)
    bad_ts = ts.isna()
    if bad_ts.any():
        raise IngestError(f"Unparseable timestamps in rows: {_bad_rows(bad_ts)}")

    raw_usage = df[ucol]
    if not pd.api.types.is_numeric_dtype(raw_usage):
        raw_usage = raw_usage.astype(str).str.strip()
    usage = pd.to_numeric(raw_usage, errors="coerce")
    bad_usage = usage.isna()
    if bad_usage.any():
        raise IngestError(f"Non-numeric usage in rows: {_bad_rows(bad_usage)}")

    cost = _costs(df)
    return [
        UsageRecord(pd.Timestamp(t), float(u), None if pd.isna(c) else float(c))
        for t, u, c in zip(ts.to_numpy(), usage.to_numpy(), cost.to_numpy())
    ]


def usage_from_records(rows: Iterable[Mapping[str, Any]]) -> List[UsageRecord]:
    """Mappings with a 'timestamp' key and one of the usage keys."""
    rows = list(rows)
    if not rows:
        return []
    return usage_from_dataframe(pd.DataFrame.from_records(rows))


def pricing_from_payload(payload: Mapping[str, Any]) -> PricingSeries:
    """
    Flatten a day-grouped pricing response:

        {"data": [{"priceDetails": [{"startIntervalTimeStamp": ...,
                                     "intervalPrice": "0.1234"}, ...]}, ...]}

    Days without priceDetails are skipped. Order is preserved.
    """
    days = payload.get("data") if isinstance(payload, Mapping) else None
    if not isinstance(days, list):
        raise IngestError("Pricing payload must contain a 'data' list.")

    timestamps: list[str] = []
    prices: list[float] = []
    for day in days:
        details = day.get("priceDetails") if isinstance(day, Mapping) else None
        if not isinstance(details, list):
            continue
        for interval in details:
            try:
                ts = interval["startIntervalTimeStamp"]
                price = float(interval["intervalPrice"])
            except (KeyError, TypeError, ValueError) as e:
                raise IngestError(f"Malformed price interval {interval!r}: {e}") from e
            timestamps.append(ts)
            prices.append(price)
    return PricingSeries(tuple(timestamps), tuple(prices))
