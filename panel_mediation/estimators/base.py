from __future__ import annotations

from dataclasses import dataclass

from ..helpers.config import ModelConfig


@dataclass
class BaseEstimator:
    """
    Very small common base class for the estimators in this package.

    It stores the validated :class:`ModelConfig` and exposes tiny helpers
    for logging formulas, so every step of a run prints the same way.
    """

    config: ModelConfig

    def __post_init__(self) -> None:
        self.config = self.config.validate()

    def _log(self, message: str) -> None:
        print(f"[ESTIMATOR] {message}")

    def _log_formula(self, formula: str, extra: str = "") -> None:
        msg = f"Formula: {formula}"
        if extra:
            msg += f" ({extra})"
        self._log(msg)
