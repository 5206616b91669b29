# summary.py
from __future__ import annotations

from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

import numpy as np
import pandas as pd

from ..estimators.mediation import MediationResult
from ..estimators.panel_fit import FittedModel

# ================================
# Formatting helpers
# ================================

def _fmt_p(p: Optional[float]) -> str:
    if p is None or (isinstance(p, float) and (np.isnan(p) or np.isinf(p))):
        return "NA"
    return f"{p:.4f}" if p >= 0.0001 else "<0.0001"

def _stars(p: Optional[float]) -> str:
    if p is None or not np.isfinite(p):
        return ""
    if p < 0.001:
        return "***"
    if p < 0.01:
        return "**"
    if p < 0.05:
        return "*"
    if p < 0.1:
        return "."
    return ""

def _rule(title: str | None = None, char: str = "=") -> str:
    line = char * 78
    if title:
        return f"{line}\n{title}\n{line}"
    return line

def _effect_lines(effects: Mapping[str, float]) -> List[str]:
    return [f"- {name}: {value:.4f}" for name, value in effects.items()]


# ================================
# Short rendering
# ================================

def format_result(result: MediationResult) -> str:
    """Panel metadata and effects (4 decimals); the ``str()`` of a result."""
    info = result.panel_info
    lines = [
        "Panel Data Mediation Analysis",
        "=============================",
        "",
        "Panel Information:",
        f"- Model type: {info['model']}",
        f"- Effect type: {info['effect']}",
        f"- Number of individuals: {info['n_individuals']}",
        f"- Number of time periods: {info['n_time_periods']}",
        f"- Total observations: {info['n_obs']}",
        f"- Robust standard errors: {info['robust']}",
    ]
    if info.get("lag", 0) > 0:
        lines.append(f"- Lag periods: {info['lag']}")
    if result.moderator is not None:
        mods = ", ".join(
            f"{n} ({'/'.join(s)})" for n, s in zip(result.moderator.names, result.moderator.sites)
        )
        lines.append(f"- Moderators: {mods} (effects at moderator = 0)")

    lines += ["", "Indirect Effects:", *_effect_lines(result.indirect_effects)]
    lines += ["", "Direct Effects:", *_effect_lines(result.direct_effects)]
    lines += ["", "Total Effects:", *_effect_lines(result.total_effects)]
    return "\n".join(lines)


# ================================
# Detailed rendering
# ================================

def _coef_block(model: FittedModel) -> str:
    tab = model.coef_table()
    cov_kind = "robust (HC1)" if model.robust_cov is not None else "conventional"
    header = f"{'':<22}{'Estimate':>12}{'Std. Error':>12}{'t value':>10}{'Pr(>|t|)':>11}"
    rows = [
        f"Formula: {model.formula}",
        f"Estimator: {model.estimator} | n = {model.nobs} | df = {model.df_resid:.0f} | "
        f"R-squared = {model.rsquared:.4f} | SE: {cov_kind}",
        "",
        header,
    ]
    for name, r in tab.iterrows():
        p = float(r["p_value"])
        rows.append(
            f"{str(name)[:22]:<22}{r['estimate']:>12.4f}{r['std_error']:>12.4f}"
            f"{r['t_value']:>10.3f}{_fmt_p(p):>11} {_stars(p)}"
        )
    return "\n".join(rows)


def format_detailed(result: MediationResult) -> str:
    """Short rendering followed by coefficient tests for every sub-model."""
    parts = [
        "Panel Data Mediation Analysis - Detailed Results",
        "===============================================",
        "",
        format_result(result),
        "",
        _rule("Detailed Model Results"),
        "",
        "Step 1: X -> M relationships",
        "----------------------------",
    ]
    for label, model in result.a_models.items():
        parts += ["", f"Model {label} ({model.dependent}):", _coef_block(model)]
    parts += [
        "",
        "Step 2: X + M -> Y relationship",
        "-------------------------------",
        "",
        _coef_block(result.y_model),
        "",
        "Total Effects Model (X -> Y)",
        "----------------------------",
        "",
        _coef_block(result.total_model),
        "",
        "Signif. codes: 0 '***' 0.001 '**' 0.01 '*' 0.05 '.' 0.1 ' ' 1",
    ]
    return "\n".join(parts)


def print_result(result: MediationResult) -> None:
    print(format_result(result))


def print_detailed(result: MediationResult) -> None:
    print(format_detailed(result))


# ================================
# Front-end tables
# ================================

def effects_frame(result: MediationResult) -> pd.DataFrame:
    """Bar-chart data: one row per effect with its type."""
    rows = []
    for kind, effects in (
        ("indirect", result.indirect_effects),
        ("direct", result.direct_effects),
        ("total", result.total_effects),
    ):
        for name, value in effects.items():
            rows.append({"effect": name, "value": float(value), "type": kind})
    return pd.DataFrame(rows, columns=["effect", "value", "type"])


def residuals_frame(result: MediationResult) -> pd.DataFrame:
    """Fitted values and residuals of the X + M -> Y model."""
    return pd.DataFrame(
        {"fitted": result.y_model.fitted_values, "residual": result.y_model.residuals}
    )


# ================================
# Downloads
# ================================

def format_report(result: MediationResult, bootstrap: Optional[Any] = None) -> str:
    """Plain-text report: analysis settings, effects and detailed tables."""
    info = result.panel_info
    settings = [
        _rule("ANALYSIS SETTINGS"),
        f"X (independent): {result.X}",
        f"M (mediators): {', '.join(result.M)}",
        f"Y (dependent): {result.Y}",
        f"ID variable: {info['id']}",
        f"Time variable: {info['time']}",
        f"Panel model: {info['model']}",
        f"Effect type: {info['effect']}",
        f"Robust SE: {info['robust']}",
        f"Lag: {info['lag']}",
        "",
    ]
    parts = settings + [format_detailed(result)]
    if bootstrap is not None:
        tab = bootstrap.to_frame()
        level = int(round(100 * bootstrap.conf_level))
        parts += [
            "",
            _rule(f"BOOTSTRAP ({level}% percentile, B = {bootstrap.n_boot}, failed = {bootstrap.n_failed})"),
        ]
        for name, r in tab.iterrows():
            parts.append(
                f"- {name}: {r['estimate']:.4f} [{r['lower']:.4f}, {r['upper']:.4f}] (SE {r['se']:.4f})"
            )
    return "\n".join(parts) + "\n"


def write_report(result: MediationResult, path: Union[str, Path], bootstrap: Optional[Any] = None) -> Path:
    p = Path(path)
    p.write_text(format_report(result, bootstrap), encoding="utf-8")
    print(f"[REPORT] Wrote {p}")
    return p


def write_processed_data(data: pd.DataFrame, path: Union[str, Path]) -> Path:
    """CSV dump of the processed panel; a panel index is written as columns."""
    p = Path(path)
    out = data.reset_index() if isinstance(data.index, pd.MultiIndex) else data
    out.to_csv(p, index=False)
    print(f"[REPORT] Wrote {p}")
    return p


__all__ = [
    "format_result",
    "format_detailed",
    "format_report",
    "print_result",
    "print_detailed",
    "effects_frame",
    "residuals_frame",
    "write_report",
    "write_processed_data",
]
