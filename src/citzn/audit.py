"""Data-quality audit of the static ZIP table.

Compares each California table row against the range heuristic and,
optionally, the geocoder, so suspicious rows can be reviewed and corrected
through the overrides file.
"""
import logging
from pathlib import Path
from typing import Optional, Iterable, List, Dict

import pandas as pd

from citzn.errors import DistrictLookupError
from citzn.geocoding import GeocodioClient
from citzn.zip_prefix_fallback import guess_mapping
from citzn.zip_table import ZipTable, DISTRICT_KINDS

logger = logging.getLogger(__name__)

COLUMNS = ["zip_code", "city", "county", "level", "table", "other", "source", "agrees"]


def _rows_for(record, other, source: str) -> List[Dict]:
    rows = []
    for kind in DISTRICT_KINDS:
        table_value = getattr(record, kind)[0] if getattr(record, kind) else None
        other_values = getattr(other, kind) if other is not None else []
        other_value = other_values[0] if other_values else None
        rows.append({
            "zip_code": record.zip_code,
            "city": record.city,
            "county": record.county,
            "level": kind,
            "table": table_value,
            "other": other_value,
            "source": source,
            # Agreement means the table's primary district appears anywhere in the other answer
            "agrees": table_value is not None and table_value in other_values,
        })
    return rows


def compare_with_heuristic(table: ZipTable) -> pd.DataFrame:
    """One row per (ZIP, level) comparing the table to the range estimate."""
    rows = []
    for zip_code in table.zip_codes(state="CA"):
        record = table.lookup(zip_code)
        if not record.has_districts:
            continue
        rows.extend(_rows_for(record, guess_mapping(zip_code), "heuristic"))
    return pd.DataFrame(rows, columns=COLUMNS)


def compare_with_geocoder(
    table: ZipTable,
    client: GeocodioClient,
    zip_codes: Optional[Iterable[str]] = None,
) -> pd.DataFrame:
    """Same comparison against live geocoder answers. Failed lookups are skipped."""
    if zip_codes is None:
        zip_codes = table.zip_codes(state="CA")
    rows = []
    for zip_code in zip_codes:
        record = table.lookup(zip_code)
        if record is None or not record.has_districts:
            continue
        try:
            geocoded = client.lookup(zip_code)
        except DistrictLookupError as e:
            logger.warning(f"Skipping {zip_code} in geocoder audit: {e.code} {e.message}")
            continue
        rows.extend(_rows_for(record, geocoded, "geocoder"))
    return pd.DataFrame(rows, columns=COLUMNS)


def disagreements(df: pd.DataFrame, level: Optional[str] = None) -> pd.DataFrame:
    out = df[~df["agrees"].astype(bool)]
    if level is not None:
        out = out[out["level"] == level]
    return out.reset_index(drop=True)


def summarize(df: pd.DataFrame) -> pd.DataFrame:
    """Agreement counts and rate per (source, level)."""
    if df.empty:
        return pd.DataFrame(columns=["source", "level", "rows", "agreements", "agreement_rate"])
    grouped = df.groupby(["source", "level"]).agg(
        rows=("zip_code", "count"),
        agreements=("agrees", "sum"),
    ).reset_index()
    grouped["agreements"] = grouped["agreements"].astype(int)
    grouped["agreement_rate"] = (grouped["agreements"] / grouped["rows"]).round(3)
    return grouped


def export_csv(df: pd.DataFrame, path: str) -> Path:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out_path, index=False)
    logger.info(f"Wrote {len(df)} audit rows to {out_path}")
    return out_path


__all__ = [
    "compare_with_heuristic",
    "compare_with_geocoder",
    "disagreements",
    "summarize",
    "export_csv",
]
