"""Branching scenario decision engine for scenario-solver questions.

This package keeps the core logic (content model, state machine,
scoring, read model) pure and framework-agnostic so it can be exercised
from tests, the CLI and the FastAPI router alike.
"""

from .engine import DecisionEngine
from .errors import ConfigurationError, InvalidSelectionError, ScenarioError, SequencingError
from .graph import ScenarioGraph, ScenarioOption, ScenarioStep, load_graph, load_graph_json, validate_graph
from .path_recorder import PathEntry, PathRecorder
from .scoring import ScenarioResult, accumulate_score, classify_result, score_band
from .state_machine import AttemptState, AttemptStatus

__all__ = [
    "AttemptState",
    "AttemptStatus",
    "ConfigurationError",
    "DecisionEngine",
    "InvalidSelectionError",
    "PathEntry",
    "PathRecorder",
    "ScenarioError",
    "ScenarioGraph",
    "ScenarioOption",
    "ScenarioResult",
    "ScenarioStep",
    "SequencingError",
    "accumulate_score",
    "classify_result",
    "load_graph",
    "load_graph_json",
    "score_band",
    "validate_graph",
]
