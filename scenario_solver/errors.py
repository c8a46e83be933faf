"""Error taxonomy for the scenario decision engine."""

from __future__ import annotations

from typing import Optional


class ScenarioError(ValueError):
    """Base class for every failure raised by the engine."""


class ConfigurationError(ScenarioError):
    """Authored content is structurally invalid and cannot be presented.

    Raised once, at load time, never mid-attempt. `reason` is the short,
    stable category (e.g. "missing start step"); `detail` names the
    offending step or option.
    """

    def __init__(self, reason: str, detail: Optional[str] = None):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}" if detail else reason)


class InvalidSelectionError(ScenarioError):
    """The selected option does not belong to the current step."""


class SequencingError(ScenarioError):
    """An operation was called in a state that does not accept it."""
