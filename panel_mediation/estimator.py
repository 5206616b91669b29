from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence, Union

import pandas as pd

from panel_mediation.helpers.config import ModelConfig, ModeratorSpec
from panel_mediation.estimators.base import BaseEstimator
from panel_mediation.estimators.conditional import conditional_effects
from panel_mediation.estimators.mediation import MediationResult, estimate_mediation
from panel_mediation.robustness.bootstrap import BootstrapResult, panel_bootstrap_ci


class MediationEstimator(BaseEstimator):
    """
    Thin façade over the estimator functions.

    Holds one validated :class:`ModelConfig` and a variable assignment so a
    front-end can run the point estimate, the bootstrap and the
    conditional effects without repeating arguments.
    """

    def __init__(
        self,
        config: ModelConfig,
        X: str,
        M: Union[str, Sequence[str]],
        Y: str,
        id_col: str,
        time_col: str,
    ) -> None:
        super().__init__(config)
        self.X = X
        self.M = M
        self.Y = Y
        self.id_col = id_col
        self.time_col = time_col

    # ---------------------------------------------------------
    # Point estimate
    # ---------------------------------------------------------
    def estimate(
        self,
        data: pd.DataFrame,
        moderator: Optional[Union[ModeratorSpec, Mapping[str, Any]]] = None,
        *,
        balance: bool = True,
    ) -> MediationResult:
        cfg = self.config
        self._log(
            f"Mediation {self.X} -> {self.M} -> {self.Y} "
            f"({cfg.panel_model}/{cfg.effect}, robust={cfg.robust_se}, lag={cfg.lag})"
        )
        res = estimate_mediation(
            self.X, self.M, self.Y, self.id_col, self.time_col, data, cfg, moderator, balance=balance
        )
        self._log_formula(res.y_model.formula, extra=res.y_model.estimator)
        return res

    # ---------------------------------------------------------
    # Bootstrap
    # ---------------------------------------------------------
    def bootstrap_ci(
        self,
        data: pd.DataFrame,
        n_boot: int = 1000,
        conf_level: float = 0.95,
        seed: Optional[int] = None,
        *,
        balance: bool = True,
    ) -> BootstrapResult:
        return panel_bootstrap_ci(
            self.X, self.M, self.Y, self.id_col, self.time_col, data, self.config,
            n_boot=n_boot, conf_level=conf_level, seed=seed, balance=balance,
        )

    # ---------------------------------------------------------
    # Conditional effects
    # ---------------------------------------------------------
    def conditional(
        self,
        result: MediationResult,
        moderator: Optional[str] = None,
        values: Optional[Sequence[float]] = None,
    ) -> pd.DataFrame:
        """Effects at moderator values; defaults to the first fitted moderator."""
        if moderator is None and result.moderator is not None:
            moderator = result.moderator.names[0]
        return conditional_effects(result, moderator, values)

    def describe(self) -> Dict[str, Any]:
        out = {"X": self.X, "M": self.M, "Y": self.Y, "id": self.id_col, "time": self.time_col}
        out.update(self.config.as_dict())
        return out


__all__ = [
    "MediationEstimator",
    "MediationResult",
    "BootstrapResult",
]
