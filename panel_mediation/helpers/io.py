"""Reading input tables and the bundled sample panel.

The loaders here sit between the outside world (uploaded files, files
exported by another statistical package) and the analysis core, which
only ever sees an in-memory :class:`pandas.DataFrame`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Union

import numpy as np
import pandas as pd
import statsmodels.api as sm

from .errors import DataFormatError

PathLike = Union[str, Path]


def _read_csv(path: Path) -> pd.DataFrame:
    return pd.read_csv(path)


def _read_tsv(path: Path) -> pd.DataFrame:
    return pd.read_csv(path, sep="\t")


def _read_txt(path: Path) -> pd.DataFrame:
    # delimiter is sniffed (comma, tab, semicolon, ...)
    return pd.read_csv(path, sep=None, engine="python")


def _read_dta(path: Path) -> pd.DataFrame:
    return pd.read_stata(path, convert_categoricals=False)


READERS: Dict[str, Callable[[Path], pd.DataFrame]] = {
    ".csv": _read_csv,
    ".tsv": _read_tsv,
    ".txt": _read_txt,
    ".dta": _read_dta,
}


def load_table(path: PathLike) -> pd.DataFrame:
    """Read a data file into a DataFrame based on its extension.

    Supported: ``.csv``, ``.tsv``, ``.txt`` (delimiter sniffed) and Stata
    ``.dta``.  Anything else raises :class:`DataFormatError` without
    touching the file.
    """
    p = Path(path)
    ext = p.suffix.lower()
    reader = READERS.get(ext)
    if reader is None:
        raise DataFormatError(
            f"Unsupported data format {ext or '(none)'!r} for {p.name}; "
            f"use one of {', '.join(sorted(READERS))}."
        )
    if not p.exists():
        raise FileNotFoundError(f"Input data file not found: {p}")
    try:
        df = reader(p)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, ValueError) as exc:
        raise DataFormatError(f"Could not read {p.name}: {exc}") from exc
    if df.empty or len(df.columns) == 0:
        raise DataFormatError(f"{p.name} contains no data rows.")
    return df


def load_sample_data(seed: int = 123) -> pd.DataFrame:
    """Grunfeld investment panel with two synthetic mediators.

    ``efficiency`` and ``innovation`` are linear in ``invest`` and
    ``capital`` plus Gaussian noise, so ``invest -> efficiency -> value``
    is a ready-made mediation example.
    """
    df = sm.datasets.grunfeld.load_pandas().data.copy()
    df["year"] = df["year"].astype(int)
    df["firm"] = df["firm"].astype(str)

    rng = np.random.default_rng(seed)
    n = len(df)
    df["efficiency"] = 0.3 * df["invest"] + 0.2 * df["capital"] + rng.normal(0.0, 50.0, n)
    df["innovation"] = 0.2 * df["invest"] + 0.1 * df["capital"] + rng.normal(0.0, 30.0, n)
    return df


__all__ = ["READERS", "load_table", "load_sample_data"]
