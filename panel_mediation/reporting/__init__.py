"""Reporting utilities for the ``panel_mediation`` package.

:mod:`panel_mediation.reporting.summary` renders a
:class:`~panel_mediation.estimators.mediation.MediationResult` as text
(short and detailed), builds the tables behind the dashboard views and
writes the downloadable report and processed-data files.  The functions
in :mod:`panel_mediation.reporting.plotting` draw those tables with a
shared matplotlib theme.

Users may import these functions directly from this subpackage.  For
example::

    from panel_mediation.reporting import effects_frame, plot_effects_bar

"""

from .plotting import (
    FIG,
    FigFinalizer,
    PlotTheme,
    plot_conditional_effects,
    plot_effects_bar,
    plot_model_comparison,
    plot_residuals_vs_fitted,
)
from .summary import (
    effects_frame,
    format_detailed,
    format_report,
    format_result,
    print_detailed,
    print_result,
    residuals_frame,
    write_processed_data,
    write_report,
)

__all__ = [
    "FIG",
    "FigFinalizer",
    "PlotTheme",
    "plot_conditional_effects",
    "plot_effects_bar",
    "plot_model_comparison",
    "plot_residuals_vs_fitted",
    "effects_frame",
    "format_detailed",
    "format_report",
    "format_result",
    "print_detailed",
    "print_result",
    "residuals_frame",
    "write_processed_data",
    "write_report",
]
