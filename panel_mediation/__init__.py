"""
The :mod:`panel_mediation` package estimates mediation models on panel
(longitudinal) data: how much of the effect of an independent variable X
on an outcome Y runs through one or more mediators M, when every
individual is observed over several time periods.

Estimation is step-wise by the product of coefficients.  Each path is a
linear panel regression fitted with :mod:`linearmodels` (fixed effects,
random effects, pooled OLS or between estimator), so the individual and
time structure of the data is respected in every step.

The package exposes these core pieces:

``is_panel`` / ``prepare_panel_data``
    Heuristic panel check and preparation of a flat table into an
    ``(id, time)``-indexed, optionally balanced panel.

``estimate_mediation``
    The a-paths (X -> M_i), the joint X + M -> Y path and the separate
    total path, returned as an immutable :class:`MediationResult`.

``compare_models``
    Runs the same mediation model under several panel estimators.

``panel_bootstrap_ci``
    Individual-level percentile bootstrap for the effects.

``PanelMediationStudy``
    A high-level orchestrator that wires together validation, panel
    preparation, estimation and the optional comparison and bootstrap.

References
----------
* Baron and Kenny (1986) describe the causal-steps logic that the a/b/c
  paths follow.
* Hayes (2018) introduces the PROCESS conventions for multiple mediators,
  moderated paths and percentile bootstrap intervals of indirect effects.
* Cameron and Miller (2015) motivate resampling whole individuals
  (clusters) rather than single observations in panel bootstraps.
"""

from .helpers.config import ModelConfig, ModeratorSpec, PanelSpec
from .helpers.errors import (
    ConfigurationError,
    DataFormatError,
    EstimationError,
    PanelMediationError,
)
from .helpers.io import load_sample_data, load_table
from .helpers.preparation import PanelData, add_lags, is_panel, panel_structure, prepare_panel_data
from .estimators.conditional import conditional_effects
from .estimators.mediation import MediationResult, estimate_mediation
from .estimators.panel_fit import FittedModel
from .estimator import MediationEstimator
from .robustness.bootstrap import BootstrapResult, panel_bootstrap_ci
from .study import PanelMediationStudy, StudyResult, compare_models, comparison_table

__version__ = "0.1.0"

__all__ = [
    "ModelConfig",
    "ModeratorSpec",
    "PanelSpec",
    "ConfigurationError",
    "DataFormatError",
    "EstimationError",
    "PanelMediationError",
    "load_sample_data",
    "load_table",
    "PanelData",
    "add_lags",
    "is_panel",
    "panel_structure",
    "prepare_panel_data",
    "conditional_effects",
    "MediationResult",
    "estimate_mediation",
    "FittedModel",
    "MediationEstimator",
    "BootstrapResult",
    "panel_bootstrap_ci",
    "PanelMediationStudy",
    "StudyResult",
    "compare_models",
    "comparison_table",
]
