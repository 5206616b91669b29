# config.py
from __future__ import annotations

from dataclasses import dataclass, field, replace as _dc_replace
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from .errors import ConfigurationError

PANEL_MODELS: Tuple[str, ...] = ("within", "random", "pooling", "between")
EFFECTS: Tuple[str, ...] = ("individual", "time", "twoways")
MODERATOR_SITES: Tuple[str, ...] = ("a", "b", "c")


@dataclass(frozen=True)
class PanelSpec:
    # =========================
    # Panel index
    # =========================
    id_col: str
    time_col: str
    # "shared individuals" balancing: drop individuals missing any period
    balance: bool = True

    def validate(self) -> "PanelSpec":
        for name, value in (("id_col", self.id_col), ("time_col", self.time_col)):
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError("a column name is required", field=name)
        if self.id_col == self.time_col:
            raise ConfigurationError(
                f"id and time columns must differ (both {self.id_col!r})", field="time_col"
            )
        return self


@dataclass(frozen=True)
class ModeratorSpec:
    """Moderators and the paths they act on.

    ``sites[i]`` lists the paths moderated by ``names[i]``: ``"a"`` (X -> M),
    ``"b"`` (M -> Y) and/or ``"c"`` (X -> Y, direct and total).
    """

    names: Tuple[str, ...]
    sites: Tuple[Tuple[str, ...], ...] = ()

    def __post_init__(self) -> None:
        names = tuple(str(n) for n in self.names)
        sites = tuple(tuple(s) for s in self.sites) if self.sites else tuple(("a", "c") for _ in names)
        object.__setattr__(self, "names", names)
        object.__setattr__(self, "sites", sites)

    @classmethod
    def from_mapping(cls, spec: Optional[Mapping[str, Any]]) -> Optional["ModeratorSpec"]:
        """Build from the list-style form ``{"name": [...], "site": [[...], ...]}``."""
        if spec is None:
            return None
        if isinstance(spec, ModeratorSpec):
            return spec
        raw_names = spec.get("name", spec.get("names", ()))
        if isinstance(raw_names, str):
            raw_names = [raw_names]
        raw_sites = spec.get("site", spec.get("sites", ()))
        if raw_sites and all(isinstance(s, str) for s in raw_sites):
            # a flat list of sites applies to every moderator
            raw_sites = [list(raw_sites) for _ in raw_names]
        if not raw_names:
            return None
        return cls(names=tuple(raw_names), sites=tuple(tuple(s) for s in raw_sites))

    def validate(self) -> "ModeratorSpec":
        if not self.names:
            raise ConfigurationError("at least one moderator name is required", field="moderator")
        if len(self.sites) != len(self.names):
            raise ConfigurationError(
                f"{len(self.names)} moderators but {len(self.sites)} site lists", field="moderator"
            )
        for name, sites in zip(self.names, self.sites):
            if not name.strip():
                raise ConfigurationError("empty moderator name", field="moderator")
            if not sites:
                raise ConfigurationError(f"moderator {name!r} has no paths", field="moderator")
            bad = [s for s in sites if s not in MODERATOR_SITES]
            if bad:
                raise ConfigurationError(
                    f"moderator {name!r} has unknown paths {bad}; expected a subset of {list(MODERATOR_SITES)}",
                    field="moderator",
                )
        return self

    def moderators_on(self, site: str) -> Tuple[str, ...]:
        return tuple(n for n, s in zip(self.names, self.sites) if site in s)


@dataclass(frozen=True)
class ModelConfig:
    # =========================
    # Estimator family
    # =========================
    panel_model: str = "within"
    effect: str = "individual"

    # =========================
    # Inference
    # =========================
    # Attach an HC1-type covariance to each sub-model (display only)
    robust_se: bool = True

    # =========================
    # Dynamics & moderation
    # =========================
    lag: int = 0
    moderator: Optional[ModeratorSpec] = field(default=None)

    def validate(self) -> "ModelConfig":
        if self.panel_model not in PANEL_MODELS:
            raise ConfigurationError(
                f"unknown panel model {self.panel_model!r}; expected one of {list(PANEL_MODELS)}",
                field="panel_model",
            )
        if self.effect not in EFFECTS:
            raise ConfigurationError(
                f"unknown effect {self.effect!r}; expected one of {list(EFFECTS)}",
                field="effect",
            )
        if self.panel_model == "between" and self.effect == "twoways":
            raise ConfigurationError(
                "the between estimator is not available with two-way effects", field="effect"
            )
        if isinstance(self.lag, bool) or not isinstance(self.lag, int) or self.lag < 0:
            raise ConfigurationError(f"lag must be an integer >= 0, got {self.lag!r}", field="lag")
        if self.moderator is not None:
            self.moderator.validate()
        return self

    def replace(self, **changes: Any) -> "ModelConfig":
        if "moderator" in changes and not isinstance(changes["moderator"], (ModeratorSpec, type(None))):
            changes["moderator"] = ModeratorSpec.from_mapping(changes["moderator"])
        return _dc_replace(self, **changes).validate()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "panel_model": self.panel_model,
            "effect": self.effect,
            "robust_se": self.robust_se,
            "lag": self.lag,
            "moderator": None if self.moderator is None else list(self.moderator.names),
        }


def validate_model_list(model_list: Sequence[str]) -> Tuple[str, ...]:
    """Check a comparison list: recognised labels, no repeats."""
    labels = tuple(model_list or ())
    if not labels:
        raise ConfigurationError("no panel models to compare", field="model_list")
    unknown = [m for m in labels if m not in PANEL_MODELS]
    if unknown:
        raise ConfigurationError(
            f"unknown panel models {unknown}; expected labels from {list(PANEL_MODELS)}",
            field="model_list",
        )
    if len(set(labels)) != len(labels):
        raise ConfigurationError(f"duplicate labels in {list(labels)}", field="model_list")
    return labels


__all__ = [
    "PANEL_MODELS",
    "EFFECTS",
    "MODERATOR_SITES",
    "PanelSpec",
    "ModeratorSpec",
    "ModelConfig",
    "validate_model_list",
]
