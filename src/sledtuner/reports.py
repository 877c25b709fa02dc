"""Tabular views of snapshots for the CLI and diagnostics.

Both functions accept GenericValue snapshots or plain (JSON) snapshots
and render values with GenericValue.display so that numbers, vectors and
unsupported markers read the same everywhere.
"""

from typing import Any, Mapping

import polars as pl

from .parameters.types import GenericValue

SNAPSHOT_SCHEMA = {"component": pl.Utf8, "field": pl.Utf8, "kind": pl.Utf8, "value": pl.Utf8}
DIFF_SCHEMA = {"component": pl.Utf8, "field": pl.Utf8, "before": pl.Utf8, "after": pl.Utf8}


def snapshot_frame(snapshot: Mapping[str, Mapping[str, Any]]) -> pl.DataFrame:
    """One row per (component, field) with the value's kind and display text."""
    rows = []
    for component, fields in snapshot.items():
        for name, raw in fields.items():
            value = GenericValue.of(raw)
            rows.append({
                "component": component,
                "field": name,
                "kind": value.kind.value,
                "value": value.display(),
            })
    return pl.DataFrame(rows, schema=SNAPSHOT_SCHEMA)


def diff_frame(
    before: Mapping[str, Mapping[str, Any]],
    after: Mapping[str, Mapping[str, Any]],
    changed_only: bool = True,
) -> pl.DataFrame:
    """Compare two snapshots field by field.

    Args:
        before: Baseline snapshot
        after: Snapshot to compare against the baseline
        changed_only: Drop rows whose value is identical on both sides

    Returns:
        DataFrame with component, field, before, after (null when absent),
        sorted by component then field
    """
    left = snapshot_frame(before).select("component", "field", pl.col("value").alias("before"))
    right = snapshot_frame(after).select("component", "field", pl.col("value").alias("after"))
    joined = left.join(right, on=["component", "field"], how="full", coalesce=True)

    if changed_only:
        joined = joined.filter(
            pl.col("before").is_null()
            | pl.col("after").is_null()
            | (pl.col("before") != pl.col("after"))
        )
    return joined.select(list(DIFF_SCHEMA)).cast(DIFF_SCHEMA).sort(["component", "field"])
