# panel_mediation/helpers/preparation.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .config import PanelSpec
from .errors import ConfigurationError


# ----------------------------
# Panel structure
# ----------------------------
def _has_columns(data: pd.DataFrame, *cols: Optional[str]) -> bool:
    if data is None or any(c is None or c == "" for c in cols):
        return False
    return all(c in data.columns for c in cols)


def is_panel(data: pd.DataFrame, id_col: Optional[str], time_col: Optional[str]) -> bool:
    """Heuristic panel check: more rows than distinct individuals or periods.

    Returns ``False`` (never raises) when either column is unset or absent.
    Passing is necessary but not sufficient for a genuine panel: a table
    with repeated ids and no real time dimension also passes.
    """
    if not _has_columns(data, id_col, time_col):
        return False
    n_obs = len(data)
    n_individuals = data[id_col].nunique()
    n_time = data[time_col].nunique()
    return bool(n_obs > max(n_individuals, n_time))


def panel_structure(data: pd.DataFrame, id_col: Optional[str], time_col: Optional[str]) -> Dict[str, Any]:
    """Counts behind :func:`is_panel` plus a balance flag."""
    if not _has_columns(data, id_col, time_col):
        return {
            "is_panel": False,
            "n_individuals": None,
            "n_time_periods": None,
            "n_obs": None if data is None else int(len(data)),
            "balanced": False,
        }
    n_individuals = int(data[id_col].nunique())
    n_time = int(data[time_col].nunique())
    n_obs = int(len(data))
    return {
        "is_panel": is_panel(data, id_col, time_col),
        "n_individuals": n_individuals,
        "n_time_periods": n_time,
        "n_obs": n_obs,
        "balanced": n_obs == n_individuals * n_time,
    }


# ----------------------------
# Indexing & balancing
# ----------------------------
def _check_index_columns(data: pd.DataFrame, id_col: str, time_col: str) -> None:
    for name, col in (("id_col", id_col), ("time_col", time_col)):
        if col is None or col not in data.columns:
            raise ConfigurationError(f"column {col!r} not found in data", field=name)


def _shared_individuals(panel: pd.DataFrame) -> Tuple[pd.DataFrame, List[Any]]:
    """Keep individuals observed in every period of the table."""
    ids = panel.index.get_level_values(0)
    n_periods = panel.index.get_level_values(1).nunique()
    counts = pd.Series(1, index=ids).groupby(level=0).sum()
    keep = counts[counts == n_periods].index
    dropped = sorted(set(counts.index) - set(keep), key=str)
    return panel[ids.isin(keep)], dropped


def prepare_panel_data(
    data: pd.DataFrame,
    id_col: str,
    time_col: str,
    balance: bool = True,
) -> pd.DataFrame:
    """Index a flat table by ``(id_col, time_col)`` and optionally balance it.

    Parameters
    ----------
    data : pandas.DataFrame
        Flat table with one row per individual and period.  Not mutated.
    id_col, time_col : str
        Names of the individual and time identifier columns.
    balance : bool, default True
        Drop individuals that are not observed in every time period
        ("shared individuals").  Time periods are never dropped.

    Returns
    -------
    pandas.DataFrame
        A copy indexed by the ``(id_col, time_col)`` MultiIndex, sorted.

    Raises
    ------
    ConfigurationError
        If a column is missing, ``(id, time)`` pairs repeat, or balancing
        leaves no individual.
    """
    _check_index_columns(data, id_col, time_col)

    df = data.copy()
    dup_mask = df.duplicated(subset=[id_col, time_col], keep=False)
    if dup_mask.any():
        dup = df.loc[dup_mask, [id_col, time_col]].drop_duplicates()
        raise ConfigurationError(
            f"duplicate ({id_col}, {time_col}) pairs in panel index; examples:\n"
            + dup.head(10).to_string(index=False),
            field="index",
        )

    panel = df.set_index([id_col, time_col]).sort_index()

    if balance:
        panel, dropped = _shared_individuals(panel)
        if dropped:
            print(f"[prepare] Dropped {len(dropped)} individuals without full time coverage.")
        if panel.empty:
            raise ConfigurationError(
                "balancing removed every individual; no individual is observed in all periods",
                field="balance",
            )
    return panel


def _period_steps(times: pd.Index) -> pd.Index:
    """Integer step of every row on the time axis.

    Whole-number times (years, quarters coded 1..n) step by value, so a
    missing year leaves a hole; any other time type steps by position in
    the sorted list of observed periods.
    """
    if pd.api.types.is_numeric_dtype(times) and not pd.api.types.is_bool_dtype(times):
        values = pd.Series(times, dtype="float64")
        if values.notna().all() and (values % 1 == 0).all():
            return pd.Index(values.astype("int64"))
    periods = pd.Index(times.unique()).sort_values()
    return pd.Index(periods.get_indexer(times))


def add_lags(panel: pd.DataFrame, columns: Sequence[str], lag: int) -> Tuple[pd.DataFrame, List[str]]:
    """Append within-individual lags ``lag{k}_{col}`` to an indexed panel.

    The lag is taken on the time axis, not by row: the value for period
    ``t`` is the same individual's value at ``t - lag``, NaN when that
    period is not observed.
    """
    if lag <= 0:
        return panel, []
    out = panel.copy()
    ids = panel.index.get_level_values(0)
    steps = _period_steps(panel.index.get_level_values(1))
    here = pd.MultiIndex.from_arrays([ids, steps])
    back = pd.MultiIndex.from_arrays([ids, steps - lag])
    names: List[str] = []
    for col in columns:
        name = f"lag{lag}_{col}"
        out[name] = pd.Series(panel[col].to_numpy(), index=here).reindex(back).to_numpy()
        names.append(name)
    return out, names


# ----------------------------
# Container
# ----------------------------
class PanelData:
    """
    Prepared panel plus the bookkeeping reported alongside the estimates.

    Attributes
    ----------
    panel : pandas.DataFrame
        The ``(id, time)``-indexed frame.
    info : dict
        ``n_individuals``, ``n_time_periods``, ``n_obs`` and
        ``dropped_individuals``.
    """

    def __init__(self, data: pd.DataFrame, spec: PanelSpec) -> None:
        self.spec = spec.validate()
        self.df_raw = data
        self.id_col = spec.id_col
        self.time_col = spec.time_col
        self.panel = prepare_panel_data(data, spec.id_col, spec.time_col, balance=spec.balance)

        n_raw = int(data[spec.id_col].nunique())
        self.info: Dict[str, Any] = {
            "n_individuals": int(self.panel.index.get_level_values(0).nunique()),
            "n_time_periods": int(self.panel.index.get_level_values(1).nunique()),
            "n_obs": int(len(self.panel)),
            "dropped_individuals": n_raw - int(self.panel.index.get_level_values(0).nunique()),
            "balanced": bool(spec.balance),
        }

    def flat(self) -> pd.DataFrame:
        """The prepared panel as a flat table (index restored as columns)."""
        return self.panel.reset_index()


__all__ = ["is_panel", "panel_structure", "prepare_panel_data", "add_lags", "PanelData"]
