"""FastAPI router for scenario-solver attempts."""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Any, Dict, List, Tuple

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from scenario_solver import (
    ConfigurationError,
    DecisionEngine,
    InvalidSelectionError,
    SequencingError,
    load_graph,
)
from scenario_solver import templates
from scenario_solver.view import ScenarioView

logger = logging.getLogger(__name__)

router = APIRouter()


# Attempts live only as long as the learner is on the question; nothing
# is persisted, the hosting quiz controller stores the final result.
_IN_MEMORY_ATTEMPTS: Dict[str, DecisionEngine] = {}

# One lock per attempt; FastAPI runs these sync handlers on a thread pool
_ATTEMPT_LOCKS: Dict[str, threading.Lock] = {}


class ScenarioSummary(BaseModel):
    id: str
    title: str
    description: str
    step_count: int
    perfect_score: int


class ValidationSummary(BaseModel):
    title: str
    step_count: int
    perfect_score: int
    terminal_step_ids: List[str]


class AttemptResponse(BaseModel):
    attempt_id: str
    view: ScenarioView


class SelectRequest(BaseModel):
    option_id: str = Field(..., description="ID of the option chosen on the current step.")


def _get_attempt_or_404(attempt_id: str) -> Tuple[DecisionEngine, threading.Lock]:
    engine = _IN_MEMORY_ATTEMPTS.get(attempt_id)
    lock = _ATTEMPT_LOCKS.get(attempt_id)
    if engine is None or lock is None:
        raise HTTPException(status_code=404, detail="Scenario attempt not found")
    return engine, lock


def _discard(attempt_id: str) -> None:
    _IN_MEMORY_ATTEMPTS.pop(attempt_id, None)
    _ATTEMPT_LOCKS.pop(attempt_id, None)


def _respond(attempt_id: str, engine: DecisionEngine) -> AttemptResponse:
    response = AttemptResponse(attempt_id=attempt_id, view=engine.get_view())
    if engine.is_finished:
        # The final view carries the result; the attempt is over once it is read
        _discard(attempt_id)
        logger.info(f"Finished attempt {attempt_id} discarded")
    return response


@router.get("", response_model=List[ScenarioSummary])
def list_scenarios() -> List[ScenarioSummary]:
    """List the built-in scenario-solver questions."""
    return [ScenarioSummary(**t) for t in templates.get_all_summaries()]


@router.post("/validate", response_model=ValidationSummary)
def validate_scenario(content: Dict[str, Any]) -> ValidationSummary:
    """Validate authored content the way it would be checked before presentation."""
    try:
        graph = load_graph(content)
    except ConfigurationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return ValidationSummary(
        title=graph.title,
        step_count=len(graph.steps),
        perfect_score=graph.perfect_score,
        terminal_step_ids=[s.id for s in graph.steps if s.is_terminal],
    )


@router.post("/{scenario_id}/start", response_model=AttemptResponse)
def start_attempt(scenario_id: str) -> AttemptResponse:
    """Start a new attempt on a built-in scenario."""
    graph = templates.load_template(scenario_id)
    if graph is None:
        raise HTTPException(status_code=404, detail="Scenario not found")

    try:
        engine = DecisionEngine(graph)
    except ConfigurationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    attempt_id = str(uuid.uuid4())
    _ATTEMPT_LOCKS[attempt_id] = threading.Lock()
    _IN_MEMORY_ATTEMPTS[attempt_id] = engine
    logger.info(f"Started attempt {attempt_id} on scenario {scenario_id}")
    return _respond(attempt_id, engine)


@router.get("/attempts/{attempt_id}", response_model=AttemptResponse)
def get_attempt(attempt_id: str) -> AttemptResponse:
    engine, lock = _get_attempt_or_404(attempt_id)
    with lock:
        return _respond(attempt_id, engine)


@router.post("/attempts/{attempt_id}/select", response_model=AttemptResponse)
def select_option(attempt_id: str, req: SelectRequest) -> AttemptResponse:
    """Select (or change) the option on the current step."""
    engine, lock = _get_attempt_or_404(attempt_id)
    with lock:
        try:
            engine.select_option(req.option_id)
        except InvalidSelectionError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except SequencingError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _respond(attempt_id, engine)


@router.post("/attempts/{attempt_id}/confirm", response_model=AttemptResponse)
def confirm_choice(attempt_id: str) -> AttemptResponse:
    """Confirm the selection and reveal its consequence."""
    engine, lock = _get_attempt_or_404(attempt_id)
    with lock:
        try:
            engine.confirm_choice()
        except SequencingError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _respond(attempt_id, engine)


@router.post("/attempts/{attempt_id}/continue", response_model=AttemptResponse)
def continue_attempt(attempt_id: str) -> AttemptResponse:
    """Move to the next step, or finish and classify the attempt.

    The response that finishes the attempt carries the result, and the
    attempt is discarded once it has been sent.
    """
    engine, lock = _get_attempt_or_404(attempt_id)
    with lock:
        try:
            engine.continue_()
        except SequencingError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _respond(attempt_id, engine)


@router.delete("/attempts/{attempt_id}", status_code=204)
def abandon_attempt(attempt_id: str) -> None:
    """Discard an attempt; abandoning needs no cleanup beyond this."""
    _, lock = _get_attempt_or_404(attempt_id)
    with lock:
        _discard(attempt_id)
    logger.info(f"Abandoned attempt {attempt_id}")
