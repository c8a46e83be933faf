"""Finite state machine for one scenario attempt.

Every transition is a pure function `(graph, state, ...) -> (new_state,
events)`. Invalid calls raise and leave the caller holding the previous,
untouched state.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from .errors import InvalidSelectionError, SequencingError
from .graph import ScenarioGraph, ScenarioOption, ScenarioStep
from .path_recorder import PathEntry, PathRecorder
from .scoring import ScenarioResult, accumulate_score, classify_result


class AttemptStatus(str, Enum):
    AWAITING_SELECTION = "AWAITING_SELECTION"
    SELECTED = "SELECTED"
    CONSEQUENCE_SHOWN = "CONSEQUENCE_SHOWN"
    FINISHED = "FINISHED"


@dataclass(frozen=True)
class AttemptState:
    current_step_id: str
    selected_option_id: Optional[str] = None
    status: AttemptStatus = AttemptStatus.AWAITING_SELECTION
    path: PathRecorder = PathRecorder()
    result: Optional[ScenarioResult] = None

    @property
    def total_score(self) -> int:
        return accumulate_score(self.path)

    @property
    def is_finished(self) -> bool:
        return self.status is AttemptStatus.FINISHED


@dataclass(frozen=True)
class OptionSelected:
    step_id: str
    option_id: str


@dataclass(frozen=True)
class ChoiceConfirmed:
    entry: PathEntry
    total_score: int


@dataclass(frozen=True)
class StepEntered:
    step_id: str


@dataclass(frozen=True)
class ScenarioCompleted:
    result: ScenarioResult


Event = Union[OptionSelected, ChoiceConfirmed, StepEntered, ScenarioCompleted]
Transition = Tuple[AttemptState, List[Event]]


def initialize_state(graph: ScenarioGraph) -> Transition:
    """Create the initial attempt state at the graph's start step."""
    state = AttemptState(current_step_id=graph.start_step_id)
    return state, [StepEntered(graph.start_step_id)]


def _current_step(steps_by_id: Dict[str, ScenarioStep], state: AttemptState) -> ScenarioStep:
    step = steps_by_id.get(state.current_step_id)
    if step is None:
        # Only reachable if a state is paired with the wrong graph
        raise SequencingError(f"Current step '{state.current_step_id}' not found in scenario.")
    return step


def selected_option(steps_by_id: Dict[str, ScenarioStep], state: AttemptState) -> Optional[ScenarioOption]:
    if state.selected_option_id is None:
        return None
    return _current_step(steps_by_id, state).get_option(state.selected_option_id)


def select_option(
    steps_by_id: Dict[str, ScenarioStep],
    state: AttemptState,
    option_id: str,
) -> Transition:
    """Select (or re-select) an option on the current step. No scoring yet."""
    if state.status not in {AttemptStatus.AWAITING_SELECTION, AttemptStatus.SELECTED}:
        raise SequencingError(f"Cannot select an option while {state.status.value}.")

    step = _current_step(steps_by_id, state)
    if step.get_option(option_id) is None:
        raise InvalidSelectionError(f"Option '{option_id}' does not belong to step '{step.id}'.")

    new_state = replace(state, selected_option_id=option_id, status=AttemptStatus.SELECTED)
    return new_state, [OptionSelected(step.id, option_id)]


def confirm_choice(steps_by_id: Dict[str, ScenarioStep], state: AttemptState) -> Transition:
    """Lock in the selection: score it, record it, reveal its consequence.

    The only score-mutating transition.
    """
    if state.status is AttemptStatus.CONSEQUENCE_SHOWN:
        raise SequencingError("Choice already confirmed; continue before confirming again.")
    if state.status is not AttemptStatus.SELECTED:
        raise SequencingError(f"Cannot confirm while {state.status.value}; select an option first.")

    option = selected_option(steps_by_id, state)
    if option is None:
        raise SequencingError("No option selected.")

    entry = PathEntry(step_id=state.current_step_id, option_id=option.id, score=option.score)
    new_state = replace(
        state,
        path=state.path.append(entry),
        status=AttemptStatus.CONSEQUENCE_SHOWN,
    )
    return new_state, [ChoiceConfirmed(entry, new_state.total_score)]


def continue_scenario(
    graph: ScenarioGraph,
    steps_by_id: Dict[str, ScenarioStep],
    state: AttemptState,
    pass_ratio: Optional[float] = None,
) -> Transition:
    """Move past a revealed consequence to the next step, or finish.

    `pass_ratio` falls back to the graph's own ratio, then to the
    configured default.
    """
    if state.status is not AttemptStatus.CONSEQUENCE_SHOWN:
        raise SequencingError(f"Cannot continue while {state.status.value}; confirm a choice first.")

    option = selected_option(steps_by_id, state)
    if option is None:
        raise SequencingError("Confirmed option not found on current step.")

    if option.next_step_id:
        if option.next_step_id not in steps_by_id:
            raise SequencingError(f"Next step '{option.next_step_id}' not found in scenario.")
        new_state = replace(
            state,
            current_step_id=option.next_step_id,
            selected_option_id=None,
            status=AttemptStatus.AWAITING_SELECTION,
        )
        return new_state, [StepEntered(option.next_step_id)]

    # Terminal option
    ratio = pass_ratio if pass_ratio is not None else graph.pass_ratio
    result = classify_result(state.total_score, graph.perfect_score, ratio)
    new_state = replace(state, status=AttemptStatus.FINISHED, result=result)
    return new_state, [ScenarioCompleted(result)]
