"""
Robustness utilities for panel mediation estimates.

* :mod:`panel_mediation.robustness.bootstrap` resamples whole individuals
  with replacement and re-estimates the mediation model on every draw to
  obtain percentile confidence intervals for the indirect, direct and
  total effects.

Examples
--------
Bootstrap intervals for a single-mediator model::

    from panel_mediation.robustness import panel_bootstrap_ci
    boot = panel_bootstrap_ci('invest', 'efficiency', 'value', 'firm', 'year',
                              df, n_boot=500, seed=1)
    print(boot.to_frame())

"""

from .bootstrap import BootstrapResult, panel_bootstrap_ci

__all__ = ["BootstrapResult", "panel_bootstrap_ci"]
