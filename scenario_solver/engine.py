"""DecisionEngine: owns one learner attempt over one scenario graph."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from .config import get_default_pass_ratio
from .errors import ConfigurationError
from .graph import ScenarioGraph, validate_graph
from .scoring import ScenarioResult
from .state_machine import (
    AttemptState,
    Event,
    ScenarioCompleted,
    Transition,
    confirm_choice,
    continue_scenario,
    initialize_state,
    select_option,
)
from .view import ScenarioView, build_view

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[bool, int, int], None]


class DecisionEngine:
    """Drive the attempt state machine for a hosting quiz controller.

    The graph is validated on construction, before any attempt starts.
    `on_complete(passed, total_score, perfect_score)` fires exactly once,
    when the learner continues past a terminal option.

    The pass ratio is fixed here as well: an explicit `pass_ratio`, else
    the graph's own, else SCENARIO_PASS_RATIO. Later environment changes
    do not affect an engine that already exists.
    """

    def __init__(
        self,
        graph: ScenarioGraph,
        on_complete: Optional[CompletionCallback] = None,
        pass_ratio: Optional[float] = None,
    ):
        self.graph = graph
        self.on_complete = on_complete
        self._steps_by_id = validate_graph(graph)
        self.pass_ratio = _resolve_pass_ratio(graph, pass_ratio)
        self.reset()

    def reset(self) -> None:
        """Start a fresh attempt; every mutable field is reinitialised."""
        self._events: List[Event] = []
        self._completion_emitted = False
        self._state: AttemptState
        self._apply(initialize_state(self.graph))
        logger.info(f"Attempt started on scenario '{self.graph.title}' at step '{self._state.current_step_id}'")

    @property
    def state(self) -> AttemptState:
        return self._state

    @property
    def events(self) -> List[Event]:
        return list(self._events)

    @property
    def total_score(self) -> int:
        return self._state.total_score

    @property
    def is_finished(self) -> bool:
        return self._state.is_finished

    @property
    def result(self) -> Optional[ScenarioResult]:
        return self._state.result

    def select_option(self, option_id: str) -> AttemptState:
        return self._apply(select_option(self._steps_by_id, self._state, option_id))

    def confirm_choice(self) -> AttemptState:
        return self._apply(confirm_choice(self._steps_by_id, self._state))

    def continue_(self) -> AttemptState:
        return self._apply(continue_scenario(self.graph, self._steps_by_id, self._state, self.pass_ratio))

    def get_view(self) -> ScenarioView:
        return build_view(self.graph, self._steps_by_id, self._state)

    def _apply(self, transition: Transition) -> AttemptState:
        new_state, events = transition
        self._state = new_state
        self._events.extend(events)
        for event in events:
            logger.debug(f"Scenario '{self.graph.title}': {event}")
            if isinstance(event, ScenarioCompleted):
                self._emit_completion(event.result)
        return new_state

    def _emit_completion(self, result: ScenarioResult) -> None:
        if self._completion_emitted:
            return
        self._completion_emitted = True
        logger.info(
            f"Attempt finished on scenario '{self.graph.title}': "
            f"score {result.total_score}/{result.perfect_score}, passed={result.passed}"
        )
        if self.on_complete is not None:
            self.on_complete(*result.as_callback_args())


def _resolve_pass_ratio(graph: ScenarioGraph, pass_ratio: Optional[float]) -> float:
    if pass_ratio is None:
        pass_ratio = graph.pass_ratio
    if pass_ratio is None:
        return get_default_pass_ratio()
    if not 0.0 <= pass_ratio <= 1.0:
        logger.warning(f"Scenario '{graph.title}' rejected: pass ratio {pass_ratio} out of range")
        raise ConfigurationError("pass ratio out of range", str(pass_ratio))
    return float(pass_ratio)
