from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt


# ================================
# Theme + Figure Finalizer
# ================================

@dataclass
class PlotTheme:
    """Styling shared by every mediation plot; drawing functions never style."""
    figsize: Tuple[float, float] = (9.0, 5.5)
    dpi: int = 120

    title_size: int = 16
    label_size: int = 13
    tick_size: int = 10
    legend_size: int = 10

    grid_alpha: float = 0.3
    zero_line: bool = True           # effects are read against 0

    # one colour per effect type first: indirect, direct, total
    palette: Sequence[str] = field(default_factory=lambda: [
        "#2563eb",
        "#10b981",
        "#f59e0b",
        "#ef4444",
        "#8b5cf6",
        "#14b8a6",
    ])


class FigFinalizer:
    """Decorator factory: creates the Axes, applies the theme, saves and shows.

    The decorated function only draws artists on ``ax`` and returns a dict
    of plot facts; the wrapper returns ``(fig, ax, info)``::

        @FIG(title="Mediation effects", ylabel="Effect")
        def plot_effects_bar(effects, ax, palette):
            ...

        fig, ax, info = plot_effects_bar(frame, show=False, save="effects.png")
    """
    def __init__(self, theme: Optional[PlotTheme] = None, show_default: bool = True):
        self.theme = theme or PlotTheme()
        self.show_default = show_default

    def _style(self, ax: plt.Axes, title: Optional[str], xlabel: Optional[str], ylabel: Optional[str], legend: bool) -> None:
        t = self.theme
        if title is not None:
            ax.set_title(title, fontsize=t.title_size)
        if xlabel is not None:
            ax.set_xlabel(xlabel, fontsize=t.label_size)
        if ylabel is not None:
            ax.set_ylabel(ylabel, fontsize=t.label_size)
        ax.grid(True, linestyle="--", alpha=t.grid_alpha)
        if t.zero_line:
            ax.axhline(0.0, color="0.25", linewidth=1, linestyle="--", alpha=0.6, zorder=0)
        ax.tick_params(labelsize=t.tick_size)
        if legend and ax.get_legend_handles_labels()[1]:
            ax.legend(fontsize=t.legend_size, frameon=False)

    def _finish(self, fig: plt.Figure, save: Optional[str], show: Optional[bool]) -> None:
        fig.tight_layout()
        if save:
            fig.savefig(str(save), dpi=self.theme.dpi, bbox_inches="tight")
        if self.show_default if show is None else show:
            plt.show()

    def __call__(self, **preset):
        """Presets give the default title/labels; call-site values win when given."""
        def decorator(plot_func: Callable[..., Dict[str, Any]]):
            def wrapper(
                *args,
                title: Optional[str] = None,
                xlabel: Optional[str] = None,
                ylabel: Optional[str] = None,
                legend: bool = True,
                save: Optional[str] = None,
                show: Optional[bool] = None,
                ax: Optional[plt.Axes] = None,
                figsize: Optional[Tuple[float, float]] = None,
                palette: Optional[Sequence[str]] = None,
                **kwargs,
            ) -> Tuple[plt.Figure, plt.Axes, Dict[str, Any]]:
                created = ax is None
                if created:
                    fig, ax = plt.subplots(figsize=figsize or self.theme.figsize, dpi=self.theme.dpi)
                else:
                    fig = ax.get_figure()

                out = plot_func(*args, ax=ax, palette=(palette or self.theme.palette), **kwargs) or {}

                self._style(
                    ax,
                    title if title is not None else preset.get("title"),
                    xlabel if xlabel is not None else preset.get("xlabel"),
                    ylabel if ylabel is not None else preset.get("ylabel"),
                    legend,
                )
                if created:
                    self._finish(fig, save, show)
                return fig, ax, out
            wrapper.__name__ = plot_func.__name__
            wrapper.__doc__ = plot_func.__doc__
            return wrapper
        return decorator


# Global instance used by the plotting functions below
FIG = FigFinalizer()

TYPE_ORDER = ("indirect", "direct", "total")


# ================================
# Data drawing functions
# ================================

@FIG(title="Mediation effects", xlabel=None, ylabel="Effect")
def plot_effects_bar(
    effects: pd.DataFrame,
    ax: plt.Axes,
    palette: Sequence[str],
    annotate: bool = True,
) -> Dict[str, Any]:
    """Bars per effect, coloured by type (indirect / direct / total)."""
    d = effects.reset_index(drop=True)
    colors = {kind: palette[i % len(palette)] for i, kind in enumerate(TYPE_ORDER)}
    x = np.arange(len(d))
    seen = set()
    for i, row in d.iterrows():
        kind = row["type"]
        ax.bar(
            x[i], float(row["value"]),
            color=colors.get(kind, "0.5"),
            label=kind if kind not in seen else None,
            alpha=0.9,
        )
        seen.add(kind)
        if annotate:
            ax.annotate(
                f"{float(row['value']):.4f}",
                (x[i], float(row["value"])),
                ha="center", va="bottom" if row["value"] >= 0 else "top", fontsize=9,
            )
    ax.set_xticks(x)
    ax.set_xticklabels(d["effect"].astype(str).tolist(), rotation=20, ha="right")
    return {"n": len(d)}


@FIG(title="Residuals vs fitted (X + M -> Y)", xlabel="Fitted values", ylabel="Residuals")
def plot_residuals_vs_fitted(
    resid: pd.DataFrame,
    ax: plt.Axes,
    palette: Sequence[str],
    smooth: bool = True,
) -> Dict[str, Any]:
    """Scatter of residuals against fitted values with a binned-mean trace."""
    fitted = resid["fitted"].astype(float).to_numpy()
    res = resid["residual"].astype(float).to_numpy()
    ax.scatter(fitted, res, s=14, alpha=0.6, color=palette[0])

    trace = None
    if smooth and len(fitted) >= 20:
        # mean residual in 10 quantile bins of the fitted values
        bins = pd.qcut(pd.Series(fitted), q=10, duplicates="drop")
        g = pd.DataFrame({"f": fitted, "r": res}).groupby(bins, observed=True).mean()
        ax.plot(g["f"], g["r"], color=palette[3], linewidth=2)
        trace = g
    return {"n": len(fitted), "trace": trace}


@FIG(title="Indirect effects by panel model", xlabel=None, ylabel="Indirect effect")
def plot_model_comparison(
    table: pd.DataFrame,
    ax: plt.Axes,
    palette: Sequence[str],
) -> Dict[str, Any]:
    """Grouped bars: one group per panel model, one bar per mediator."""
    models = list(dict.fromkeys(table["model"]))
    mediators = list(dict.fromkeys(table["mediator"]))
    width = 0.8 / max(len(mediators), 1)
    x = np.arange(len(models))
    for j, med in enumerate(mediators):
        sub = table[table["mediator"] == med].set_index("model")["indirect_effect"]
        vals = [float(sub.get(m, np.nan)) for m in models]
        ax.bar(x + (j - (len(mediators) - 1) / 2) * width, vals, width=width,
               color=palette[j % len(palette)], label=med, alpha=0.9)
    ax.set_xticks(x)
    ax.set_xticklabels(models)
    return {"models": models, "mediators": mediators}


@FIG(title="Conditional effects", xlabel="Moderator value", ylabel="Effect")
def plot_conditional_effects(
    cond: pd.DataFrame,
    ax: plt.Axes,
    palette: Sequence[str],
) -> Dict[str, Any]:
    """One line per effect across the evaluated moderator values."""
    effects = list(dict.fromkeys(cond["effect"]))
    for i, name in enumerate(effects):
        d = cond[cond["effect"] == name].sort_values("moderator_value")
        ax.plot(d["moderator_value"], d["value"], marker="o", linewidth=2,
                color=palette[i % len(palette)], label=name)
    return {"effects": effects}


__all__ = [
    "PlotTheme",
    "FigFinalizer",
    "FIG",
    "plot_effects_bar",
    "plot_residuals_vs_fitted",
    "plot_model_comparison",
    "plot_conditional_effects",
]
