"""Public API for the estimators subpackage.

This module reexports the primary estimator functions and result
containers for convenience.  Users may import these names directly
from :mod:`panel_mediation.estimators`.
"""

from .conditional import conditional_effects
from .mediation import MediationResult, estimate_mediation
from .panel_fit import ESTIMATOR_NAMES, FittedModel, build_formula, fit_panel_model

__all__ = [
    "ESTIMATOR_NAMES",
    "FittedModel",
    "MediationResult",
    "build_formula",
    "conditional_effects",
    "estimate_mediation",
    "fit_panel_model",
]
