"""Authored scenario content: steps, options and load-time validation.

Steps reference each other by id (`next_step_id`) and are kept as a flat
tuple indexed by id, never as nested object graphs. A graph returned by
`load_graph` / `load_graph_json` has already passed `validate_graph`.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Set, Tuple

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Sentinel the course builder stores for "no next step"
_NO_NEXT_STEP = {"", "__NONE__"}


class _ContentModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class ScenarioOption(_ContentModel):
    id: str = Field(min_length=1)
    text: str
    consequence: str = ""
    is_correct: bool = False
    score: StrictInt
    next_step_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("nextStepId", "nextScenarioId", "next_step_id"),
    )

    @field_validator("next_step_id", mode="before")
    @classmethod
    def _blank_means_terminal(cls, v):
        if isinstance(v, str) and v.strip() in _NO_NEXT_STEP:
            return None
        return v

    @property
    def is_terminal(self) -> bool:
        return self.next_step_id is None


class ScenarioStep(_ContentModel):
    id: str = Field(min_length=1)
    situation: str
    context: Optional[str] = None
    image: Optional[str] = None
    is_endpoint: bool = False
    options: Tuple[ScenarioOption, ...] = ()

    @property
    def is_terminal(self) -> bool:
        """A step is terminal when none of its options lead onward."""
        return all(o.is_terminal for o in self.options)

    def get_option(self, option_id: str) -> Optional[ScenarioOption]:
        return next((o for o in self.options if o.id == option_id), None)


class ScenarioGraph(_ContentModel):
    title: str
    description: str = ""
    steps: Tuple[ScenarioStep, ...] = ()
    start_step_id: str
    perfect_score: StrictInt
    pass_ratio: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    def get_step(self, step_id: str) -> Optional[ScenarioStep]:
        return next((s for s in self.steps if s.id == step_id), None)


def index_steps(graph: ScenarioGraph) -> Dict[str, ScenarioStep]:
    return {step.id: step for step in graph.steps}


def _find_cycle(steps_by_id: Dict[str, ScenarioStep]) -> Optional[List[str]]:
    """Return one cycle as a list of step ids, or None if the graph is acyclic."""
    white, grey, black = 0, 1, 2
    color = {step_id: white for step_id in steps_by_id}

    for root in steps_by_id:
        if color[root] != white:
            continue
        # Iterative DFS: stack of (step_id, iterator over successors)
        trail: List[str] = [root]
        stack = [(root, iter(_successors(steps_by_id[root])))]
        color[root] = grey
        while stack:
            node, successors = stack[-1]
            nxt = next(successors, None)
            if nxt is None:
                color[node] = black
                stack.pop()
                trail.pop()
                continue
            if color[nxt] == grey:
                return trail[trail.index(nxt):] + [nxt]
            if color[nxt] == white:
                color[nxt] = grey
                trail.append(nxt)
                stack.append((nxt, iter(_successors(steps_by_id[nxt]))))
    return None


def _successors(step: ScenarioStep) -> List[str]:
    # dict.fromkeys keeps authored order while dropping repeats
    return list(dict.fromkeys(o.next_step_id for o in step.options if o.next_step_id))


def _reachable(steps_by_id: Dict[str, ScenarioStep], start_step_id: str) -> Set[str]:
    seen = {start_step_id}
    frontier = [start_step_id]
    while frontier:
        for nxt in _successors(steps_by_id[frontier.pop()]):
            if nxt not in seen:
                seen.add(nxt)
                frontier.append(nxt)
    return seen


def _fail(graph: ScenarioGraph, reason: str, detail: str) -> ConfigurationError:
    logger.warning(f"Scenario '{graph.title}' rejected: {reason} ({detail})")
    return ConfigurationError(reason, detail)


def validate_graph(graph: ScenarioGraph) -> Dict[str, ScenarioStep]:
    """Check structural integrity and return the id -> step index.

    Raises ConfigurationError on the first problem found. Cycles are
    rejected outright so every attempt is guaranteed to terminate.
    """
    if not graph.steps:
        raise _fail(graph, "no steps", "scenario has an empty step list")

    steps_by_id: Dict[str, ScenarioStep] = {}
    for step in graph.steps:
        if step.id in steps_by_id:
            raise _fail(graph, "duplicate step id", step.id)
        steps_by_id[step.id] = step

    if graph.start_step_id not in steps_by_id:
        raise _fail(graph, "missing start step", graph.start_step_id)

    for step in graph.steps:
        if not step.options:
            raise _fail(graph, "dead-end step", step.id)
        option_ids: Set[str] = set()
        for option in step.options:
            if option.id in option_ids:
                raise _fail(graph, "duplicate option id", f"{step.id}/{option.id}")
            option_ids.add(option.id)
            if option.next_step_id is None:
                continue
            if option.next_step_id not in steps_by_id:
                raise _fail(
                    graph,
                    "dangling step reference",
                    f"{step.id}/{option.id} -> {option.next_step_id}",
                )
            if step.is_endpoint:
                raise _fail(graph, "endpoint step links onward", f"{step.id}/{option.id}")

    cycle = _find_cycle(steps_by_id)
    if cycle:
        raise _fail(graph, "cyclic step reference", " -> ".join(cycle))

    reachable = _reachable(steps_by_id, graph.start_step_id)
    unreachable = [s.id for s in graph.steps if s.id not in reachable]
    if unreachable:
        logger.warning(f"Scenario '{graph.title}' has unreachable steps: {', '.join(unreachable)}")

    return steps_by_id


def load_graph(content: Mapping) -> ScenarioGraph:
    """Build and validate a graph from authored (camelCase or snake_case) content."""
    try:
        graph = ScenarioGraph.model_validate(content)
    except ValidationError as exc:
        raise ConfigurationError("malformed scenario content", str(exc)) from exc
    validate_graph(graph)
    return graph


def load_graph_json(raw: str | bytes) -> ScenarioGraph:
    """Like `load_graph`, for the JSON document embedded in a lesson."""
    try:
        graph = ScenarioGraph.model_validate_json(raw)
    except ValidationError as exc:
        raise ConfigurationError("malformed scenario content", str(exc)) from exc
    validate_graph(graph)
    return graph
