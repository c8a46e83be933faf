"""Read-only projection of an attempt for the presentation layer."""

from __future__ import annotations

from string import ascii_uppercase
from typing import Dict, List, Optional

from pydantic import BaseModel

from .graph import ScenarioGraph, ScenarioStep
from .scoring import score_band
from .state_machine import AttemptState, AttemptStatus, selected_option


class OptionView(BaseModel):
    id: str
    label: str
    text: str


class StepView(BaseModel):
    id: str
    situation: str
    context: Optional[str] = None
    image: Optional[str] = None
    options: List[OptionView]


class ConsequenceView(BaseModel):
    option_id: str
    option_text: str
    consequence: str
    score: int
    is_correct: bool
    band: str
    leads_onward: bool


class PathEntryView(BaseModel):
    step_id: str
    option_id: str
    score: int
    situation: str
    option_text: str
    consequence: str
    band: str


class ResultView(BaseModel):
    passed: bool
    total_score: int
    perfect_score: int
    pass_ratio: float
    effectiveness_pct: int
    outcome: str


class ScenarioView(BaseModel):
    title: str
    description: str
    status: AttemptStatus
    step_number: int
    current_step: StepView
    selected_option_id: Optional[str] = None
    consequence: Optional[ConsequenceView] = None
    total_score: int
    path: List[PathEntryView]
    result: Optional[ResultView] = None


def _option_label(index: int) -> str:
    return ascii_uppercase[index] if index < len(ascii_uppercase) else str(index + 1)


def _step_view(step: ScenarioStep) -> StepView:
    return StepView(
        id=step.id,
        situation=step.situation,
        context=step.context,
        image=step.image,
        options=[OptionView(id=o.id, label=_option_label(i), text=o.text) for i, o in enumerate(step.options)],
    )


def build_view(graph: ScenarioGraph, steps_by_id: Dict[str, ScenarioStep], state: AttemptState) -> ScenarioView:
    """Project `state` into a view. Scores stay hidden until an option is confirmed."""
    step = steps_by_id[state.current_step_id]

    consequence = None
    if state.status in {AttemptStatus.CONSEQUENCE_SHOWN, AttemptStatus.FINISHED}:
        option = selected_option(steps_by_id, state)
        if option is not None:
            consequence = ConsequenceView(
                option_id=option.id,
                option_text=option.text,
                consequence=option.consequence,
                score=option.score,
                is_correct=option.is_correct,
                band=score_band(option.score),
                leads_onward=option.next_step_id is not None,
            )

    path_views = []
    for entry in state.path:
        entry_step = steps_by_id[entry.step_id]
        entry_option = entry_step.get_option(entry.option_id)
        path_views.append(
            PathEntryView(
                step_id=entry.step_id,
                option_id=entry.option_id,
                score=entry.score,
                situation=entry_step.situation,
                option_text=entry_option.text if entry_option else "",
                consequence=entry_option.consequence if entry_option else "",
                band=score_band(entry.score),
            )
        )

    # A confirmed decision already counts toward the current step
    if state.status in {AttemptStatus.CONSEQUENCE_SHOWN, AttemptStatus.FINISHED}:
        step_number = len(state.path)
    else:
        step_number = len(state.path) + 1

    return ScenarioView(
        title=graph.title,
        description=graph.description,
        status=state.status,
        step_number=step_number,
        current_step=_step_view(step),
        selected_option_id=state.selected_option_id,
        consequence=consequence,
        total_score=state.total_score,
        path=path_views,
        result=ResultView(**state.result.to_dict()) if state.result else None,
    )
