# panel_mediation/estimators/conditional.py
from __future__ import annotations

import warnings
from typing import List, Optional, Sequence

import pandas as pd

from ..helpers.errors import ConfigurationError
from .mediation import MediationResult
from .panel_fit import FittedModel


def _slope(model: FittedModel, name: str, term: str, w: float) -> float:
    """Coefficient on ``name`` plus its ``name:W`` interaction at W = w."""
    params = model.params
    return float(params[name]) + float(params.get(term, 0.0)) * w


def _default_values(result: MediationResult, moderator: str) -> List[float]:
    stats = result.moderator_stats.get(moderator)
    if stats is None:
        raise ConfigurationError(f"no summary statistics stored for {moderator!r}", field="moderator")
    mean, sd = float(stats["mean"]), float(stats["sd"])
    return [mean - sd, mean, mean + sd]


def conditional_effects(
    result: MediationResult,
    moderator: Optional[str],
    values: Optional[Sequence[float]] = None,
) -> pd.DataFrame:
    """
    Effects of X on Y evaluated at chosen values of a moderator W.

    Indirect effect through ``M_i`` at ``w``::

        (a_X + a_XW * w) * (b_M + b_MW * w)

    direct effect ``b_X + b_XW * w`` and total effect ``c_X + c_XW * w``.
    Interaction terms absent from a path count as zero, so a moderator
    acting only on ``a`` leaves the direct effect flat.

    Parameters
    ----------
    result : MediationResult
        A fit that was run with a moderator.
    moderator : str
        One of ``result.moderator.names``.
    values : sequence of float, optional
        Points at which to evaluate.  Defaults to mean - sd, mean and
        mean + sd of the moderator in the estimation panel.

    Returns
    -------
    pandas.DataFrame
        Long table with columns ``moderator_value``, ``effect``, ``value``.
    """
    if moderator is None:
        raise ConfigurationError("a moderator name is required", field="moderator")
    spec = result.moderator
    if spec is None or moderator not in spec.names:
        known = [] if spec is None else list(spec.names)
        raise ConfigurationError(
            f"{moderator!r} is not a moderator of this result; fitted moderators: {known}",
            field="moderator",
        )

    X, W = result.X, moderator
    if values is None:
        values = _default_values(result, W)

    # interaction terms requested but not in the fit were dropped as collinear
    sites = spec.sites[spec.names.index(W)]
    expected = []
    if "a" in sites:
        expected += [(m, f"{X}:{W}") for m in result.a_models.values()]
    if "b" in sites:
        expected += [(result.y_model, f"{med}:{W}") for med in result.M]
    if "c" in sites:
        expected += [(result.y_model, f"{X}:{W}"), (result.total_model, f"{X}:{W}")]
    lost = sorted({f"{m.label}:{term}" for m, term in expected if term not in m.params.index})
    if lost:
        warnings.warn(f"interaction terms missing from the fit, treated as zero: {lost}", stacklevel=2)

    rows = []
    for w in values:
        w = float(w)
        for i, med in enumerate(result.M, start=1):
            a = _slope(result.a_models[f"a{i}"], X, f"{X}:{W}", w)
            b = _slope(result.y_model, med, f"{med}:{W}", w)
            rows.append({"moderator_value": w, "effect": f"indirect_{med}", "value": a * b})
        rows.append(
            {"moderator_value": w, "effect": f"direct_{X}", "value": _slope(result.y_model, X, f"{X}:{W}", w)}
        )
        rows.append(
            {"moderator_value": w, "effect": f"total_{X}", "value": _slope(result.total_model, X, f"{X}:{W}", w)}
        )
    return pd.DataFrame(rows, columns=["moderator_value", "effect", "value"])


__all__ = ["conditional_effects"]
