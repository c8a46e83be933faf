"""Unit tests for scenario content loading and validation."""

import json
import unittest

from scenario_solver import ConfigurationError, load_graph, load_graph_json
from scenario_solver.graph import ScenarioGraph


def _option(option_id, score=10, next_step_id=None, **extra):
    option = {
        "id": option_id,
        "text": f"Option {option_id}",
        "consequence": f"Consequence of {option_id}",
        "isCorrect": isinstance(score, int) and score > 0,
        "score": score,
    }
    if next_step_id is not None:
        option["nextStepId"] = next_step_id
    option.update(extra)
    return option


def _content(steps, start="a", perfect=20):
    return {
        "title": "Test scenario",
        "description": "Used by tests",
        "startStepId": start,
        "perfectScore": perfect,
        "steps": steps,
    }


class TestLoadGraph(unittest.TestCase):
    """Loading authored content into the graph model."""

    def test_loads_camel_case_content(self):
        """Should accept the course builder's camelCase keys."""
        graph = load_graph(_content([
            {"id": "a", "situation": "Start", "options": [_option("x", 10, "b")]},
            {"id": "b", "situation": "End", "context": "Wrap up", "options": [_option("y", 15)]},
        ], perfect=25))

        self.assertEqual(graph.start_step_id, "a")
        self.assertEqual(graph.perfect_score, 25)
        self.assertEqual(graph.get_step("a").options[0].next_step_id, "b")
        self.assertEqual(graph.get_step("b").context, "Wrap up")
        self.assertIsNone(graph.pass_ratio)

    def test_accepts_legacy_next_scenario_id(self):
        """Older lessons store the link as nextScenarioId."""
        graph = load_graph(_content([
            {"id": "a", "situation": "Start", "options": [_option("x", nextScenarioId="b")]},
            {"id": "b", "situation": "End", "options": [_option("y")]},
        ]))

        self.assertEqual(graph.get_step("a").get_option("x").next_step_id, "b")

    def test_none_sentinel_means_terminal(self):
        """The builder's '__NONE__' placeholder should not be treated as a link."""
        graph = load_graph(_content([
            {"id": "a", "situation": "Only", "options": [_option("x", nextStepId="__NONE__")]},
        ]))

        self.assertTrue(graph.get_step("a").is_terminal)

    def test_negative_scores_allowed(self):
        graph = load_graph(_content([
            {"id": "a", "situation": "Only", "options": [_option("bad", -20), _option("good", 20)]},
        ]))

        self.assertEqual(graph.get_step("a").get_option("bad").score, -20)

    def test_graph_is_immutable(self):
        """Authored content must not change at runtime."""
        graph = load_graph(_content([
            {"id": "a", "situation": "Only", "options": [_option("x")]},
        ]))

        with self.assertRaises(Exception):
            graph.perfect_score = 100

    def test_load_graph_json(self):
        raw = json.dumps(_content([
            {"id": "a", "situation": "Only", "options": [_option("x", 20)]},
        ]))

        graph = load_graph_json(raw)

        self.assertIsInstance(graph, ScenarioGraph)
        self.assertEqual(graph.title, "Test scenario")

    def test_per_scenario_pass_ratio(self):
        content = _content([{"id": "a", "situation": "Only", "options": [_option("x")]}])
        content["passRatio"] = 0.5

        self.assertEqual(load_graph(content).pass_ratio, 0.5)


class TestValidation(unittest.TestCase):
    """Structural checks that run once, at load time."""

    def assertRejected(self, content, reason):
        with self.assertRaises(ConfigurationError) as ctx:
            load_graph(content)
        self.assertEqual(ctx.exception.reason, reason)
        return ctx.exception

    def test_missing_start_step(self):
        self.assertRejected(
            _content([{"id": "a", "situation": "Only", "options": [_option("x")]}], start="zzz"),
            "missing start step",
        )

    def test_dangling_next_step(self):
        """A graph whose only option points nowhere fails before any attempt."""
        err = self.assertRejected(
            _content([{"id": "a", "situation": "Only", "options": [_option("x", 10, "ghost")]}]),
            "dangling step reference",
        )
        self.assertIn("ghost", str(err))

    def test_dead_end_step(self):
        self.assertRejected(
            _content([
                {"id": "a", "situation": "Start", "options": [_option("x", 10, "b")]},
                {"id": "b", "situation": "Nothing to do", "options": []},
            ]),
            "dead-end step",
        )

    def test_empty_scenario(self):
        self.assertRejected(_content([]), "no steps")

    def test_duplicate_step_id(self):
        self.assertRejected(
            _content([
                {"id": "a", "situation": "One", "options": [_option("x")]},
                {"id": "a", "situation": "Two", "options": [_option("y")]},
            ]),
            "duplicate step id",
        )

    def test_duplicate_option_id(self):
        self.assertRejected(
            _content([{"id": "a", "situation": "One", "options": [_option("x"), _option("x")]}]),
            "duplicate option id",
        )

    def test_cycle_rejected(self):
        """A -> B -> A would never terminate, so it is rejected."""
        err = self.assertRejected(
            _content([
                {"id": "a", "situation": "A", "options": [_option("to-b", 10, "b"), _option("end", 5)]},
                {"id": "b", "situation": "B", "options": [_option("to-a", 10, "a")]},
            ]),
            "cyclic step reference",
        )
        self.assertIn("a -> b -> a", str(err))

    def test_self_loop_rejected(self):
        self.assertRejected(
            _content([{"id": "a", "situation": "A", "options": [_option("again", 1, "a"), _option("end")]}]),
            "cyclic step reference",
        )

    def test_endpoint_step_linking_onward(self):
        self.assertRejected(
            _content([
                {"id": "a", "situation": "A", "isEndpoint": True, "options": [_option("x", 10, "b")]},
                {"id": "b", "situation": "B", "options": [_option("y")]},
            ]),
            "endpoint step links onward",
        )

    def test_diamond_is_not_a_cycle(self):
        """Two branches converging on one step are fine."""
        graph = load_graph(_content([
            {"id": "a", "situation": "A", "options": [_option("l", 10, "b"), _option("r", 5, "c")]},
            {"id": "b", "situation": "B", "options": [_option("b1", 10, "d")]},
            {"id": "c", "situation": "C", "options": [_option("c1", 10, "d")]},
            {"id": "d", "situation": "D", "options": [_option("end", 0)]},
        ]))

        self.assertEqual(len(graph.steps), 4)

    def test_unreachable_step_only_warns(self):
        with self.assertLogs("scenario_solver.graph", level="WARNING") as logs:
            load_graph(_content([
                {"id": "a", "situation": "A", "options": [_option("x")]},
                {"id": "draft", "situation": "Draft branch", "options": [_option("y")]},
            ]))

        self.assertTrue(any("draft" in line for line in logs.output))

    def test_malformed_content(self):
        """Schema problems surface as ConfigurationError, not pydantic errors."""
        bad = _content([{"id": "a", "situation": "A", "options": [_option("x", score="lots")]}])
        self.assertRejected(bad, "malformed scenario content")

    def test_missing_perfect_score(self):
        content = _content([{"id": "a", "situation": "A", "options": [_option("x")]}])
        del content["perfectScore"]
        self.assertRejected(content, "malformed scenario content")

    def test_pass_ratio_out_of_range(self):
        content = _content([{"id": "a", "situation": "A", "options": [_option("x")]}])
        content["passRatio"] = 1.5
        self.assertRejected(content, "malformed scenario content")

    def test_invalid_json(self):
        with self.assertRaises(ConfigurationError):
            load_graph_json("{not json")


if __name__ == "__main__":
    unittest.main()
