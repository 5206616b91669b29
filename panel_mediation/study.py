# panel_mediation/study.py

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import pandas as pd

from .helpers.config import ModelConfig, ModeratorSpec, PanelSpec, validate_model_list
from .helpers.errors import ConfigurationError, EstimationError
from .helpers.preparation import PanelData, panel_structure
from .estimator import MediationEstimator
from .estimators.conditional import conditional_effects
from .estimators.mediation import MediationResult, estimate_mediation
from .robustness.bootstrap import BootstrapResult, panel_bootstrap_ci

DEFAULT_COMPARISON = ("pooling", "within", "random")


# ----------------------------
# Model comparison
# ----------------------------
def compare_models(
    X: str,
    M: Union[str, Sequence[str]],
    Y: str,
    id_col: str,
    time_col: str,
    data: pd.DataFrame,
    model_list: Sequence[str] = DEFAULT_COMPARISON,
    config: Optional[ModelConfig] = None,
    **overrides: Any,
) -> Dict[str, MediationResult]:
    """
    Run the mediation model once per panel estimator.

    Every run uses ``robust_se=False``; the other options come from
    ``config`` and ``overrides`` (e.g. ``effect="time"``).  A label whose
    fit raises :class:`EstimationError` is reported with a warning and left
    out; the others keep the order of ``model_list``.

    Raises
    ------
    ConfigurationError
        For an empty list, unknown or repeated labels, or options that are
        invalid for one of the labels.  Checked before any fit.
    """
    labels = validate_model_list(model_list)
    base = config or ModelConfig()
    configs = {
        label: base.replace(**{**overrides, "panel_model": label, "robust_se": False})
        for label in labels
    }

    results: Dict[str, MediationResult] = {}
    for label, cfg in configs.items():
        print(f"[COMPARE] {label}/{cfg.effect}")
        try:
            results[label] = estimate_mediation(X, M, Y, id_col, time_col, data, cfg)
        except EstimationError as exc:
            print(f"[COMPARE] model {label!r} failed: {exc}")
            warnings.warn(f"panel model {label!r} could not be estimated: {exc}", stacklevel=2)
    return results


def comparison_table(results: Mapping[str, MediationResult]) -> pd.DataFrame:
    """Long table ``model, mediator, indirect_effect`` in result order."""
    rows = []
    for label, res in results.items():
        for med in res.M:
            rows.append(
                {"model": label, "mediator": med, "indirect_effect": float(res.indirect_effects[f"indirect_{med}"])}
            )
    return pd.DataFrame(rows, columns=["model", "mediator", "indirect_effect"])


# ----------------------------
# Orchestration
# ----------------------------
@dataclass
class StudyResult:
    """Container for all outputs of a PanelMediationStudy run."""
    config: ModelConfig
    data: PanelData
    structure: Dict[str, Any] = field(default_factory=dict)

    mediation: Optional[MediationResult] = None
    comparison: Dict[str, MediationResult] = field(default_factory=dict)
    bootstrap: Optional[BootstrapResult] = None
    conditional: Optional[pd.DataFrame] = None


class PanelMediationStudy:
    """Validates, prepares and estimates one mediation analysis end to end."""

    def __init__(
        self,
        data: pd.DataFrame,
        X: str,
        M: Union[str, Sequence[str]],
        Y: str,
        panel: PanelSpec,
        config: Optional[ModelConfig] = None,
        moderator: Optional[Union[ModeratorSpec, Mapping[str, Any]]] = None,
    ) -> None:
        self.data = data
        self.X = X
        self.M = M
        self.Y = Y
        self.panel_spec = panel.validate()
        config = (config or ModelConfig()).validate()
        if moderator is not None:
            config = config.replace(moderator=ModeratorSpec.from_mapping(moderator))
        self.config = config
        self._estimator: Optional[MediationEstimator] = None

    @property
    def estimator(self) -> MediationEstimator:
        if self._estimator is None:
            raise RuntimeError("Estimator not initialised yet. Call .run().")
        return self._estimator

    def run(
        self,
        *,
        run_comparison: bool = False,
        model_list: Sequence[str] = DEFAULT_COMPARISON,
        run_bootstrap: bool = False,
        n_boot: int = 1000,
        conf_level: float = 0.95,
        seed: Optional[int] = None,
    ) -> StudyResult:
        """
        Run the pipeline.

        Parameters
        ----------
        run_comparison : bool
            If True, also estimate the model under every label of
            ``model_list``.
        run_bootstrap : bool
            If True, attach individual-level bootstrap intervals.
        n_boot, conf_level, seed
            Bootstrap settings.

        Returns
        -------
        StudyResult
            Container with the panel, the estimates and the optional parts.
        """
        spec = self.panel_spec

        # 1) Structure check
        structure = panel_structure(self.data, spec.id_col, spec.time_col)
        if not structure["is_panel"]:
            raise ConfigurationError(
                f"data is not a panel for ({spec.id_col}, {spec.time_col}): {structure}", field="index"
            )

        # 2) Prepare panel
        panel = PanelData(self.data, spec)
        flat = panel.flat()
        print(
            f"[STUDY] {panel.info['n_individuals']} individuals x {panel.info['n_time_periods']} periods "
            f"({panel.info['n_obs']} obs, {panel.info['dropped_individuals']} dropped)"
        )

        # 3) Estimate
        self._estimator = MediationEstimator(self.config, self.X, self.M, self.Y, spec.id_col, spec.time_col)
        result = StudyResult(config=self.config, data=panel, structure=structure)
        result.mediation = self.estimator.estimate(flat, balance=False)

        # 4) Comparison
        if run_comparison:
            base = self.config.replace(moderator=None) if self.config.moderator is not None else self.config
            result.comparison = compare_models(
                self.X, self.M, self.Y, spec.id_col, spec.time_col, flat, model_list, base
            )

        # 5) Bootstrap
        if run_bootstrap:
            result.bootstrap = panel_bootstrap_ci(
                self.X, self.M, self.Y, spec.id_col, spec.time_col, flat, self.config,
                n_boot=n_boot, conf_level=conf_level, seed=seed, balance=spec.balance,
            )

        # 6) Conditional effects for the first moderator
        if self.config.moderator is not None:
            result.conditional = conditional_effects(result.mediation, self.config.moderator.names[0])

        return result


__all__ = [
    "DEFAULT_COMPARISON",
    "compare_models",
    "comparison_table",
    "StudyResult",
    "PanelMediationStudy",
]
