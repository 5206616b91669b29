"""Exception hierarchy for the panel mediation toolkit.

Three failure families are distinguished so that callers (the dashboard,
the command-line bridge, the comparison driver) can react differently:

``ConfigurationError``
    Bad column names, unrecognised option values or a malformed panel
    index.  Raised before any regression is attempted.
``EstimationError``
    A numerical failure inside one of the panel fits (rank deficiency,
    absorbed regressors, non-finite estimates).
``DataFormatError``
    An input file that cannot be read (unsupported extension or
    malformed content).  Only the loader and the bridge raise it.
"""

from __future__ import annotations

from typing import Optional


class PanelMediationError(Exception):
    """Base class for every error raised by :mod:`panel_mediation`."""


class ConfigurationError(PanelMediationError, ValueError):
    """Invalid configuration; ``field`` names the offending option or column."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        self.field = field
        if field is not None and field not in message:
            message = f"{field}: {message}"
        super().__init__(message)


class EstimationError(PanelMediationError, RuntimeError):
    """A panel regression could not be estimated."""

    def __init__(self, message: str, model: Optional[str] = None) -> None:
        self.model = model
        if model is not None:
            message = f"[{model}] {message}"
        super().__init__(message)


class DataFormatError(PanelMediationError, ValueError):
    """Unsupported or unreadable input file."""


__all__ = [
    "PanelMediationError",
    "ConfigurationError",
    "EstimationError",
    "DataFormatError",
]
