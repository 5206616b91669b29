# panel_mediation/estimators/mediation.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from ..helpers.config import ModelConfig, ModeratorSpec
from ..helpers.errors import ConfigurationError
from ..helpers.preparation import add_lags, prepare_panel_data
from .panel_fit import FittedModel, fit_panel_model


@dataclass(frozen=True)
class MediationResult:
    """Outcome of one step-wise panel mediation run.

    ``a_models`` maps ``"a1", "a2", ...`` (mediator order) to the X -> M
    fits, ``y_model`` is the X + M -> Y fit and ``total_model`` the
    separate X -> Y fit.  Effects are keyed ``indirect_<M>``,
    ``direct_<X>`` and ``total_<X>``.  All mappings are read-only; use
    :meth:`with_changes` to derive a modified copy.
    """
    X: str
    M: Tuple[str, ...]
    Y: str
    a_models: Mapping[str, FittedModel]
    y_model: FittedModel
    total_model: FittedModel
    indirect_effects: Mapping[str, float]
    direct_effects: Mapping[str, float]
    total_effects: Mapping[str, float]
    panel_info: Mapping[str, Any]
    config: ModelConfig
    moderator_stats: Mapping[str, Mapping[str, float]] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def moderator(self) -> Optional[ModeratorSpec]:
        return self.config.moderator

    def with_changes(self, **changes: Any) -> "MediationResult":
        for key in ("a_models", "indirect_effects", "direct_effects", "total_effects", "panel_info", "moderator_stats"):
            if key in changes:
                changes[key] = MappingProxyType(dict(changes[key]))
        return replace(self, **changes)

    def effects(self) -> Dict[str, float]:
        """All point estimates in one flat dict (indirect, direct, total)."""
        out: Dict[str, float] = {}
        out.update(self.indirect_effects)
        out.update(self.direct_effects)
        out.update(self.total_effects)
        return out

    def __str__(self) -> str:
        from ..reporting.summary import format_result

        return format_result(self)


# ----------------------------
# Input checks
# ----------------------------
def _normalise_mediators(M: Union[str, Sequence[str]]) -> Tuple[str, ...]:
    if isinstance(M, str):
        M = [m.strip() for m in M.split(",")]
    meds = tuple(str(m) for m in M if str(m).strip())
    if not meds:
        raise ConfigurationError("at least one mediator is required", field="M")
    if len(set(meds)) != len(meds):
        raise ConfigurationError(f"duplicate mediators in {list(meds)}", field="M")
    return meds


def _check_columns(data: pd.DataFrame, roles: Sequence[Tuple[str, str]]) -> None:
    for role, col in roles:
        if not isinstance(col, str) or col not in data.columns:
            raise ConfigurationError(f"column {col!r} not found in data", field=role)


def _check_numeric(data: pd.DataFrame, roles: Sequence[Tuple[str, str]]) -> None:
    for role, col in roles:
        if not pd.api.types.is_numeric_dtype(data[col]) or pd.api.types.is_bool_dtype(data[col]):
            raise ConfigurationError(f"column {col!r} must be numeric", field=role)


def _log_step(label: str, formula: str, config: ModelConfig) -> None:
    print(f"[MEDIATION] {label}: {formula} ({config.panel_model}/{config.effect})")


# ----------------------------
# Estimation
# ----------------------------
def estimate_mediation(
    X: str,
    M: Union[str, Sequence[str]],
    Y: str,
    id_col: str,
    time_col: str,
    data: pd.DataFrame,
    config: Optional[ModelConfig] = None,
    moderator: Optional[Union[ModeratorSpec, Mapping[str, Any]]] = None,
    *,
    balance: bool = True,
    verbose: bool = True,
) -> MediationResult:
    """Step-wise panel mediation by product of coefficients.

    Three families of panel regressions share the estimator and effect
    structure of ``config``:

    1. a-paths, one per mediator: ``M_i ~ X`` (+ ``lag_k(X)``);
    2. the b/c' path: ``Y ~ X + M_1 + ... + M_k`` (+ lags of X and M);
    3. the total path: ``Y ~ X``, fitted separately.

    ``indirect_<M_i> = a_i[X] * b[M_i]``, ``direct_<X> = b[X]`` and
    ``total_<X> = c[X]``.  The total effect is not forced to equal
    direct + sum(indirect).

    A moderator ``W`` adds ``W`` and the product terms on its paths
    (``X:W`` for ``a`` and ``c``, ``M_i:W`` for ``b``).  Reported effects
    are then evaluated at ``W = 0``; see
    :func:`panel_mediation.estimators.conditional.conditional_effects`.

    The panel structure is assumed to have been checked by the caller.
    ``verbose=False`` silences the per-step formula log.

    Raises
    ------
    ConfigurationError
        Invalid options or missing / non-numeric columns, before any fit.
    EstimationError
        Any regression failing; no partial result is returned.
    """
    config = (config or ModelConfig()).validate()
    if moderator is not None:
        config = config.replace(moderator=ModeratorSpec.from_mapping(moderator))

    meds = _normalise_mediators(M)
    if X == Y or X in meds or Y in meds:
        raise ConfigurationError("X, Y and the mediators must be distinct variables", field="M")
    mods = config.moderator.names if config.moderator is not None else ()
    overlap = set(mods) & ({X, Y} | set(meds))
    if overlap:
        raise ConfigurationError(f"moderators overlap analysis variables: {sorted(overlap)}", field="moderator")

    roles = [("X", X), ("Y", Y)] + [("M", m) for m in meds] + [("moderator", w) for w in mods]
    _check_columns(data, [("id_col", id_col), ("time_col", time_col)] + roles)
    _check_numeric(data, roles)

    keep = [id_col, time_col, X, Y, *meds, *mods]
    panel = prepare_panel_data(data[list(dict.fromkeys(keep))], id_col, time_col, balance=balance)

    # dynamic terms
    lag = int(config.lag)
    panel, lag_names = add_lags(panel, [X, *meds], lag)
    lag_x = lag_names[:1]

    # moderation terms
    site_a = config.moderator.moderators_on("a") if config.moderator else ()
    site_b = config.moderator.moderators_on("b") if config.moderator else ()
    site_c = config.moderator.moderators_on("c") if config.moderator else ()

    def _product(left: str, w: str) -> str:
        name = f"{left}:{w}"
        if name not in panel.columns:
            panel[name] = panel[left] * panel[w]
        return name

    a_terms: List[str] = []
    for w in site_a:
        a_terms += [w, _product(X, w)]
    y_terms: List[str] = []
    for w in site_c:
        y_terms += [w, _product(X, w)]
    for w in site_b:
        if w not in y_terms:
            y_terms.append(w)
        y_terms += [_product(m, w) for m in meds]
    total_terms: List[str] = []
    for w in site_c:
        total_terms += [w, _product(X, w)]

    # 1) a-paths
    a_models: Dict[str, FittedModel] = {}
    for i, m in enumerate(meds, start=1):
        label = f"a{i}"
        regs = [X, *lag_x, *a_terms]
        fit = fit_panel_model(panel, m, regs, config, label=label, required=[X])
        if verbose:
            _log_step(label, fit.formula, config)
        a_models[label] = fit

    # 2) b / c' path
    y_regs = [X, *meds, *lag_names, *y_terms]
    y_model = fit_panel_model(panel, Y, list(dict.fromkeys(y_regs)), config, label="y", required=[X, *meds])
    if verbose:
        _log_step("y", y_model.formula, config)

    # 3) total path
    total_model = fit_panel_model(panel, Y, [X, *total_terms], config, label="total", required=[X])
    if verbose:
        _log_step("total", total_model.formula, config)

    indirect = {
        f"indirect_{m}": a_models[f"a{i}"].coef(X) * y_model.coef(m)
        for i, m in enumerate(meds, start=1)
    }
    direct = {f"direct_{X}": y_model.coef(X)}
    total = {f"total_{X}": total_model.coef(X)}

    ids = panel.index.get_level_values(0)
    times = panel.index.get_level_values(1)
    panel_info = {
        "id": id_col,
        "time": time_col,
        "model": config.panel_model,
        "effect": config.effect,
        "robust": bool(config.robust_se),
        "lag": lag,
        "n_individuals": int(ids.nunique()),
        "n_time_periods": int(times.nunique()),
        "n_obs": int(len(panel)),
    }
    moderator_stats = {
        w: MappingProxyType({"mean": float(panel[w].mean()), "sd": float(panel[w].std(ddof=1))})
        for w in mods
    }

    return MediationResult(
        X=X,
        M=meds,
        Y=Y,
        a_models=MappingProxyType(a_models),
        y_model=y_model,
        total_model=total_model,
        indirect_effects=MappingProxyType(indirect),
        direct_effects=MappingProxyType(direct),
        total_effects=MappingProxyType(total),
        panel_info=MappingProxyType(panel_info),
        config=config,
        moderator_stats=MappingProxyType(moderator_stats),
    )


__all__ = ["MediationResult", "estimate_mediation"]
