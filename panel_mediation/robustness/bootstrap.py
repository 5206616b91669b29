# panel_mediation/robustness/bootstrap.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..estimators.mediation import estimate_mediation
from ..helpers.config import ModelConfig
from ..helpers.errors import ConfigurationError, EstimationError
from ..helpers.preparation import prepare_panel_data


@dataclass
class BootstrapResult:
    """Percentile intervals from an individual-level (cluster) bootstrap."""
    estimate: Dict[str, float]
    lower: Dict[str, float]
    upper: Dict[str, float]
    se: Dict[str, float]
    draws: pd.DataFrame
    n_boot: int
    n_failed: int
    conf_level: float

    def interval(self, effect: str) -> Tuple[float, float]:
        return self.lower[effect], self.upper[effect]

    def to_frame(self) -> pd.DataFrame:
        """One row per effect: estimate, lower, upper, se."""
        out = pd.DataFrame(
            {"estimate": self.estimate, "lower": self.lower, "upper": self.upper, "se": self.se}
        )
        out.index.name = "effect"
        return out


def _print_header(X: str, M: Sequence[str], Y: str, config: ModelConfig, n_boot: int, conf_level: float, seed) -> None:
    print("=" * 72)
    print("[BOOTSTRAP] individual-level percentile bootstrap")
    print("=" * 72)
    print("Parameters:")
    print(f"  - X: {X}")
    print(f"  - M: {list(M)}")
    print(f"  - Y: {Y}")
    print(f"  - model: {config.panel_model}/{config.effect}")
    print(f"  - lag: {config.lag}")
    print(f"  - B: {n_boot}")
    print(f"  - conf_level: {conf_level}")
    print(f"  - seed: {seed}\n")


def _resample(flat: pd.DataFrame, positions: Sequence[np.ndarray], id_col: str, rng: np.random.Generator) -> pd.DataFrame:
    """Draw individuals with replacement; each draw gets a fresh id."""
    picks = rng.integers(0, len(positions), size=len(positions))
    pieces = []
    for new_id, k in enumerate(picks):
        piece = flat.iloc[positions[k]].copy()
        piece[id_col] = new_id
        pieces.append(piece)
    return pd.concat(pieces, ignore_index=True)


def panel_bootstrap_ci(
    X: str,
    M: Union[str, Sequence[str]],
    Y: str,
    id_col: str,
    time_col: str,
    data: pd.DataFrame,
    config: Optional[ModelConfig] = None,
    n_boot: int = 1000,
    conf_level: float = 0.95,
    seed: Optional[int] = None,
    balance: bool = True,
) -> BootstrapResult:
    """
    Bootstrap confidence intervals for the mediation effects.

    Individuals are resampled with replacement (whole time series kept
    together), the mediation model is re-estimated on every draw with
    ``robust_se=False`` and percentile intervals are taken over the
    successful draws.  Draws whose fit fails are counted in ``n_failed``
    and skipped.  ``balance`` is applied once to the full sample, so the
    point estimate and the resampled individuals match what
    :func:`estimate_mediation` saw with the same flag.

    Raises
    ------
    ConfigurationError
        For ``n_boot < 2`` or ``conf_level`` outside (0, 1).
    EstimationError
        If the full-sample fit fails or fewer than two draws succeed.
    """
    if isinstance(n_boot, bool) or not isinstance(n_boot, (int, np.integer)) or n_boot < 2:
        raise ConfigurationError(f"n_boot must be an integer >= 2, got {n_boot!r}", field="n_boot")
    if not 0.0 < float(conf_level) < 1.0:
        raise ConfigurationError(f"conf_level must lie in (0, 1), got {conf_level!r}", field="conf_level")
    config = (config or ModelConfig()).replace(robust_se=False)

    point = estimate_mediation(X, M, Y, id_col, time_col, data, config, balance=balance, verbose=False)
    _print_header(X, point.M, Y, config, n_boot, conf_level, seed)

    # prepare once, then resample complete individuals
    cols = [id_col, time_col, X, Y, *point.M]
    if config.moderator is not None:
        cols += list(config.moderator.names)
    flat = prepare_panel_data(
        data[list(dict.fromkeys(cols))], id_col, time_col, balance=balance
    ).reset_index()
    positions = list(flat.groupby(id_col, sort=False).indices.values())

    rng = np.random.default_rng(seed)
    rows = []
    n_failed = 0
    for b in range(int(n_boot)):
        sample = _resample(flat, positions, id_col, rng)
        try:
            res = estimate_mediation(
                X, point.M, Y, id_col, time_col, sample, config, balance=False, verbose=False
            )
        except EstimationError as exc:
            n_failed += 1
            print(f"[BOOTSTRAP] draw {b} failed: {exc}")
            continue
        rows.append(res.effects())

    if len(rows) < 2:
        raise EstimationError(
            f"only {len(rows)} of {n_boot} bootstrap draws could be estimated", model="bootstrap"
        )
    if n_failed:
        print(f"[BOOTSTRAP] {n_failed} of {n_boot} draws failed and were skipped.")

    draws = pd.DataFrame(rows)
    alpha = 1.0 - float(conf_level)
    estimate = point.effects()
    lower = {k: float(draws[k].quantile(alpha / 2.0)) for k in estimate}
    upper = {k: float(draws[k].quantile(1.0 - alpha / 2.0)) for k in estimate}
    se = {k: float(draws[k].std(ddof=1)) for k in estimate}

    return BootstrapResult(
        estimate=estimate,
        lower=lower,
        upper=upper,
        se=se,
        draws=draws,
        n_boot=int(n_boot),
        n_failed=n_failed,
        conf_level=float(conf_level),
    )


__all__ = ["BootstrapResult", "panel_bootstrap_ci"]
