from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np
import pandas as pd


def sum_votes(df: pd.DataFrame, column: str = "votes") -> int:
    if df.empty or column not in df.columns:
        return 0
    return int(pd.to_numeric(df[column], errors="coerce").fillna(0).sum())


def rank_within(
    df: pd.DataFrame,
    group_cols: Sequence[str],
    sub_key: str = "party",
    metric: str = "votes",
) -> pd.DataFrame:
    """Sum `metric` per (group, sub_key) and number the rows 1..N inside each group.

    Rows are ordered by the summed metric descending; equal totals are broken by
    `sub_key` ascending so the numbering is reproducible.
    """
    group_cols = list(group_cols)
    out_cols: List[str] = group_cols + [sub_key, metric, "rank"]
    if df.empty:
        return pd.DataFrame(columns=out_cols)

    base = df[group_cols + [sub_key]].copy()
    base[metric] = pd.to_numeric(df[metric], errors="coerce").fillna(0)
    agg = base.groupby(group_cols + [sub_key], dropna=False)[metric].sum().reset_index()
    agg[metric] = agg[metric].round().astype("int64")
    agg = agg.sort_values(
        group_cols + [metric, sub_key],
        ascending=[True] * len(group_cols) + [False, True],
        kind="mergesort",
    )
    if group_cols:
        agg["rank"] = agg.groupby(group_cols, dropna=False).cumcount() + 1
    else:
        agg["rank"] = np.arange(1, len(agg) + 1)
    return agg[out_cols].reset_index(drop=True)


def winners(ranked: pd.DataFrame) -> pd.DataFrame:
    if ranked.empty:
        return ranked
    return ranked[ranked["rank"] == 1].reset_index(drop=True)


def top_ranked(ranked: pd.DataFrame, n: Optional[int]) -> pd.DataFrame:
    if ranked.empty or n is None:
        return ranked
    return ranked[ranked["rank"] <= n].reset_index(drop=True)
