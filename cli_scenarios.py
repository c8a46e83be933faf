#!/usr/bin/env python3
"""CLI tool for checking and playing scenario-solver questions.

Usage:
    python cli_scenarios.py list                                # Built-in scenarios
    python cli_scenarios.py validate lesson.json                # Validate authored content
    python cli_scenarios.py play delayed-order                  # Play interactively
    python cli_scenarios.py replay delayed-order --choices=opt-1d,opt-2g
"""

import argparse
import logging
import sys
from pathlib import Path

from scenario_solver import (
    ConfigurationError,
    DecisionEngine,
    ScenarioError,
    ScenarioGraph,
    load_graph_json,
)
from scenario_solver import templates
from scenario_solver.config import get_log_level

logger = logging.getLogger(__name__)


def _resolve_graph(source: str) -> ScenarioGraph:
    """A built-in template id, or a path to a JSON scenario document."""
    graph = templates.load_template(source)
    if graph is not None:
        return graph
    path = Path(source)
    if not path.is_file():
        raise ConfigurationError("unknown scenario", source)
    return load_graph_json(path.read_text(encoding="utf-8"))


def _print_result(engine: DecisionEngine) -> None:
    view = engine.get_view()
    print("\n🧭 Your decision path:")
    for i, entry in enumerate(view.path, 1):
        sign = "+" if entry.score > 0 else ""
        print(f"   {i}. [{entry.band:9}] {sign}{entry.score:>4} pts  {entry.option_text}")
        print(f"   {'':22}{entry.consequence}")

    result = view.result
    if result is None:
        print("\n   Scenario not finished.\n")
        return
    verdict = "✅ PASSED" if result.passed else "❌ NOT PASSED"
    print(f"\n{verdict}  {result.total_score}/{result.perfect_score} ({result.effectiveness_pct}%) - {result.outcome}\n")


def cmd_list(args):
    """List built-in scenarios."""
    print("\n📚 Built-in scenarios\n")
    print(f"   {'ID':22} {'Steps':6} {'Perfect':8} Title")
    print(f"   {'-'*22} {'-'*6} {'-'*8} {'-'*30}")
    for s in templates.get_all_summaries():
        print(f"   {s['id']:22} {s['step_count']:<6} {s['perfect_score']:<8} {s['title']}")
    print()
    return 0


def cmd_validate(args):
    """Validate a scenario JSON document."""
    graph = load_graph_json(Path(args.file).read_text(encoding="utf-8"))
    terminal = [s.id for s in graph.steps if s.is_terminal]
    print(f"\n✅ '{graph.title}' is valid: {len(graph.steps)} steps, perfect score {graph.perfect_score}")
    print(f"   Terminal steps: {', '.join(terminal)}\n")
    return 0


def cmd_play(args):
    """Play a scenario interactively in the terminal."""
    engine = DecisionEngine(_resolve_graph(args.scenario))
    print(f"\n🎭 {engine.graph.title}\n   {engine.graph.description}\n")

    while not engine.is_finished:
        view = engine.get_view()
        step = view.current_step
        print(f"Step {view.step_number} | {view.total_score} points so far")
        print(f"  {step.situation}")
        if step.context:
            print(f"  {step.context}")
        for option in step.options:
            print(f"    {option.label}) {option.text}")

        labels = {o.label.lower(): o.id for o in step.options}
        answer = input("Your choice: ").strip().lower()
        if answer not in labels:
            print("  Please pick one of the listed letters.\n")
            continue

        engine.select_option(labels[answer])
        engine.confirm_choice()
        consequence = engine.get_view().consequence
        print(f"\n  → {consequence.consequence} ({consequence.score:+d} pts)\n")
        engine.continue_()

    _print_result(engine)
    return 0


def cmd_replay(args):
    """Replay a fixed sequence of choices and print the outcome."""
    engine = DecisionEngine(_resolve_graph(args.scenario))
    choices = [c.strip() for c in args.choices.split(",") if c.strip()]
    for option_id in choices:
        engine.select_option(option_id)
        engine.confirm_choice()
        engine.continue_()
    _print_result(engine)
    return 0 if engine.is_finished else 2


def main(argv=None):
    logging.basicConfig(
        level=get_log_level(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    parser = argparse.ArgumentParser(
        description="Scenario Solver CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli_scenarios.py list
  python cli_scenarios.py validate content/onboarding.json
  python cli_scenarios.py play suspicious-invoice
  python cli_scenarios.py replay delayed-order --choices=opt-1a,opt-2c
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("list", help="List built-in scenarios")

    validate_parser = subparsers.add_parser("validate", help="Validate a scenario JSON file")
    validate_parser.add_argument("file", help="Path to the scenario JSON document")

    play_parser = subparsers.add_parser("play", help="Play a scenario interactively")
    play_parser.add_argument("scenario", help="Built-in scenario id or JSON file path")

    replay_parser = subparsers.add_parser("replay", help="Replay a sequence of choices")
    replay_parser.add_argument("scenario", help="Built-in scenario id or JSON file path")
    replay_parser.add_argument(
        "--choices",
        required=True,
        help="Comma-separated option ids, one per step"
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        "list": cmd_list,
        "validate": cmd_validate,
        "play": cmd_play,
        "replay": cmd_replay,
    }

    try:
        return commands[args.command](args)
    except (ScenarioError, OSError) as e:
        print(f"\n❌ {e}\n")
        return 1
    except (EOFError, KeyboardInterrupt):
        print("\n⚠️ Scenario abandoned.\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())
