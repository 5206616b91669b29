# panel_mediation/estimators/panel_fit.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import statsmodels.api as sm
from linearmodels.panel import BetweenOLS, PanelOLS, PooledOLS, RandomEffects
from scipy.stats import norm
from scipy.stats import t as tdist

from ..helpers.config import ModelConfig
from ..helpers.errors import ConfigurationError, EstimationError

ESTIMATOR_NAMES: Dict[str, str] = {
    "within": "PanelOLS",
    "random": "RandomEffects",
    "pooling": "PooledOLS",
    "between": "BetweenOLS",
}


@dataclass(frozen=True)
class FittedModel:
    """One linear panel regression, frozen after fitting."""
    label: str
    dependent: str
    regressors: Tuple[str, ...]
    formula: str
    estimator: str
    params: pd.Series
    default_cov: pd.DataFrame
    robust_cov: Optional[pd.DataFrame]
    df_resid: float
    nobs: int
    rsquared: float
    fitted_values: np.ndarray
    residuals: np.ndarray

    def coef(self, name: str) -> float:
        if name not in self.params.index:
            raise KeyError(f"{name!r} is not a coefficient of model {self.label!r}")
        return float(self.params[name])

    @property
    def cov(self) -> pd.DataFrame:
        """Covariance used for inference: robust when attached."""
        return self.robust_cov if self.robust_cov is not None else self.default_cov

    def coef_table(self) -> pd.DataFrame:
        """Coefficient tests (estimate, SE, t, two-sided p)."""
        cov = self.cov.loc[self.params.index, self.params.index]
        se = pd.Series(np.sqrt(np.clip(np.diag(cov.to_numpy(dtype=float)), 0.0, None)), index=self.params.index)
        with np.errstate(divide="ignore", invalid="ignore"):
            tstat = self.params / se
        if np.isfinite(self.df_resid) and self.df_resid > 0:
            p = 2.0 * tdist.sf(np.abs(tstat.to_numpy(dtype=float)), self.df_resid)
        else:
            p = 2.0 * norm.sf(np.abs(tstat.to_numpy(dtype=float)))
        return pd.DataFrame(
            {"estimate": self.params, "std_error": se, "t_value": tstat, "p_value": p},
            index=self.params.index,
        )


# ----------------------------
# Design helpers
# ----------------------------
def _coded_index(frame: pd.DataFrame, *, swap: bool) -> pd.DataFrame:
    """Integer-code both index levels; optionally make time the grouping level.

    linearmodels groups on the first level and needs a numeric second level.
    """
    ids = frame.index.get_level_values(0)
    times = frame.index.get_level_values(1)
    id_codes = pd.factorize(ids, sort=True)[0]
    time_codes = pd.factorize(times, sort=True)[0]
    levels = (time_codes, id_codes) if swap else (id_codes, time_codes)
    out = frame.copy()
    out.index = pd.MultiIndex.from_arrays(levels, names=("group", "period"))
    return out.sort_index()


def _time_dummies(frame: pd.DataFrame) -> pd.DataFrame:
    periods = frame.index.get_level_values(1)
    td = pd.get_dummies(periods, prefix="time", drop_first=True).astype(float)
    td.index = frame.index
    return td


def build_formula(dependent: str, regressors: Sequence[str], config: ModelConfig) -> str:
    """Human-readable formula describing the fit (linearmodels notation)."""
    rhs = list(regressors)
    model, effect = config.panel_model, config.effect
    if model == "within":
        if effect in ("individual", "twoways"):
            rhs.append("EntityEffects")
        if effect in ("time", "twoways"):
            rhs.append("TimeEffects")
    else:
        rhs.insert(0, "1")
        if model == "random" and effect == "twoways":
            rhs.append("C(time)")
    return f"{dependent} ~ " + " + ".join(rhs)


def _make_model(y: pd.Series, X: pd.DataFrame, config: ModelConfig):
    model, effect = config.panel_model, config.effect
    if model == "within":
        # time-invariant moderators are absorbed by the effects; their
        # product terms still vary and stay in the fit
        return PanelOLS(
            y,
            X,
            entity_effects=effect in ("individual", "twoways"),
            time_effects=effect in ("time", "twoways"),
            drop_absorbed=True,
        )
    X = sm.add_constant(X, has_constant="add")
    if model == "pooling":
        return PooledOLS(y, X)
    if model == "random":
        if effect == "twoways":
            X = pd.concat([X, _time_dummies(X)], axis=1)
        return RandomEffects(y, X)
    if model == "between":
        return BetweenOLS(y, X)
    raise ConfigurationError(f"unknown panel model {model!r}", field="panel_model")


# ----------------------------
# Public fit
# ----------------------------
def fit_panel_model(
    panel: pd.DataFrame,
    dependent: str,
    regressors: Sequence[str],
    config: ModelConfig,
    label: str,
    required: Optional[Sequence[str]] = None,
) -> FittedModel:
    """Fit ``dependent ~ regressors`` on an ``(id, time)``-indexed panel.

    The estimator family and effect structure come from ``config``.  Rows
    with a missing value in any used column are dropped for this fit only.
    ``required`` lists the regressors that must survive the fit (default:
    all); a fixed-effects fit may drop other, absorbed regressors.
    When ``config.robust_se`` is set, the heteroskedasticity-robust
    covariance (small-sample debiased) is attached as ``robust_cov``;
    ``params`` always come from the unadjusted fit.

    Raises
    ------
    EstimationError
        For any failure inside the panel library, for too few rows, and
        for non-finite coefficient estimates.
    """
    regressors = list(regressors)
    used = panel[[dependent] + regressors].dropna()
    if len(used) <= len(regressors):
        raise EstimationError(
            f"insufficient observations ({len(used)}) for {len(regressors)} regressors", model=label
        )

    # "time" effects in the one-way estimators group on periods
    swap = config.effect == "time" and config.panel_model in ("random", "between")
    used = _coded_index(used, swap=swap)
    y = used[dependent].astype(float)
    X = used[regressors].astype(float)
    formula = build_formula(dependent, regressors, config)

    try:
        mod = _make_model(y, X, config)
        res = mod.fit(cov_type="unadjusted")
        robust_cov = mod.fit(cov_type="robust").cov if config.robust_se else None
    except (ConfigurationError, EstimationError):
        raise
    except Exception as exc:
        raise EstimationError(f"{ESTIMATOR_NAMES[config.panel_model]} fit failed: {exc}", model=label) from exc

    params = res.params.copy()
    needed = list(required) if required is not None else regressors
    missing = [r for r in needed if r not in params.index]
    if missing:
        raise EstimationError(f"regressors absorbed or dropped from the fit: {missing}", model=label)
    if not np.all(np.isfinite(params.to_numpy(dtype=float))):
        raise EstimationError("non-finite coefficient estimates (degenerate design)", model=label)

    default_cov = res.cov.copy()
    if not np.all(np.isfinite(np.diag(default_cov.to_numpy(dtype=float)))):
        raise EstimationError("non-finite covariance estimate (degenerate design)", model=label)

    return FittedModel(
        label=label,
        dependent=dependent,
        regressors=tuple(regressors),
        formula=formula,
        estimator=ESTIMATOR_NAMES[config.panel_model],
        params=params,
        default_cov=default_cov,
        robust_cov=None if robust_cov is None else robust_cov.copy(),
        df_resid=float(getattr(res, "df_resid", np.nan)),
        nobs=int(res.nobs),
        rsquared=float(res.rsquared),
        fitted_values=np.asarray(res.fitted_values, dtype=float).ravel(),
        residuals=np.asarray(res.resids, dtype=float).ravel(),
    )


__all__ = ["ESTIMATOR_NAMES", "FittedModel", "build_formula", "fit_panel_model"]
