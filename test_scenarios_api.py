"""Tests for the scenario-solver HTTP router."""

import os
import unittest
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

from fastapi import HTTPException
from fastapi.testclient import TestClient

import scenarios
from scenario_solver.state_machine import ScenarioCompleted
from server import app


class TestScenarioApi(unittest.TestCase):

    def setUp(self):
        self.client = TestClient(app)
        scenarios._IN_MEMORY_ATTEMPTS.clear()
        scenarios._ATTEMPT_LOCKS.clear()

    def _start(self, scenario_id="delayed-order"):
        res = self.client.post(f"/api/scenarios/{scenario_id}/start")
        self.assertEqual(res.status_code, 200)
        return res.json()["attempt_id"]

    def _url(self, attempt_id, action=""):
        base = f"/api/scenarios/attempts/{attempt_id}"
        return f"{base}/{action}" if action else base

    def test_health(self):
        res = self.client.get("/health")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["status"], "healthy")

    def test_list_scenarios(self):
        res = self.client.get("/api/scenarios")

        self.assertEqual(res.status_code, 200)
        ids = [s["id"] for s in res.json()]
        self.assertIn("delayed-order", ids)
        self.assertIn("suspicious-invoice", ids)

    def test_start_unknown_scenario(self):
        res = self.client.post("/api/scenarios/nope/start")

        self.assertEqual(res.status_code, 404)

    def test_full_attempt(self):
        attempt_id = self._start()

        view = self.client.get(self._url(attempt_id)).json()["view"]
        self.assertEqual(view["current_step"]["id"], "step-1")
        self.assertEqual(view["status"], "AWAITING_SELECTION")

        for option_id in ("opt-1d", "opt-2g"):
            res = self.client.post(self._url(attempt_id, "select"), json={"option_id": option_id})
            self.assertEqual(res.status_code, 200)
            res = self.client.post(self._url(attempt_id, "confirm"))
            self.assertEqual(res.json()["view"]["consequence"]["option_id"], option_id)
            res = self.client.post(self._url(attempt_id, "continue"))
            self.assertEqual(res.status_code, 200)

        view = res.json()["view"]
        self.assertEqual(view["status"], "FINISHED")
        self.assertEqual(view["total_score"], 70)
        self.assertTrue(view["result"]["passed"])
        self.assertEqual(view["result"]["outcome"], "perfect")
        self.assertEqual(len(view["path"]), 2)

    def test_finished_attempt_is_discarded(self):
        """The response that finishes an attempt is its last read."""
        attempt_id = self._start("suspicious-invoice")
        self.client.post(self._url(attempt_id, "select"), json={"option_id": "pay-now"})
        self.client.post(self._url(attempt_id, "confirm"))

        res = self.client.post(self._url(attempt_id, "continue"))

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["view"]["status"], "FINISHED")
        self.assertFalse(res.json()["view"]["result"]["passed"])
        self.assertEqual(self.client.get(self._url(attempt_id)).status_code, 404)
        self.assertNotIn(attempt_id, scenarios._IN_MEMORY_ATTEMPTS)
        self.assertNotIn(attempt_id, scenarios._ATTEMPT_LOCKS)

    def test_concurrent_continue_finishes_once(self):
        """Racing continues on one attempt apply the finishing step exactly once."""
        attempt_id = self._start("suspicious-invoice")
        self.client.post(self._url(attempt_id, "select"), json={"option_id": "pay-now"})
        self.client.post(self._url(attempt_id, "confirm"))
        engine = scenarios._IN_MEMORY_ATTEMPTS[attempt_id]

        def _continue():
            try:
                return scenarios.continue_attempt(attempt_id).view.status
            except HTTPException as exc:
                return exc.status_code

        with ThreadPoolExecutor(max_workers=8) as pool:
            outcomes = list(pool.map(lambda _: _continue(), range(16)))

        self.assertEqual(outcomes.count("FINISHED"), 1)
        self.assertTrue(all(o in ("FINISHED", 404, 409) for o in outcomes), outcomes)
        completed = [e for e in engine.events if isinstance(e, ScenarioCompleted)]
        self.assertEqual(len(completed), 1)

    @patch.dict(os.environ, {"SCENARIO_PASS_RATIO": "2"})
    def test_start_with_bad_pass_ratio_is_422(self):
        res = self.client.post("/api/scenarios/delayed-order/start")

        self.assertEqual(res.status_code, 422)
        self.assertIn("SCENARIO_PASS_RATIO", res.json()["detail"])
        self.assertEqual(scenarios._IN_MEMORY_ATTEMPTS, {})

    def test_invalid_selection_is_422(self):
        attempt_id = self._start()

        res = self.client.post(self._url(attempt_id, "select"), json={"option_id": "opt-2g"})

        self.assertEqual(res.status_code, 422)

    def test_sequencing_errors_are_409(self):
        attempt_id = self._start()

        self.assertEqual(self.client.post(self._url(attempt_id, "confirm")).status_code, 409)
        self.assertEqual(self.client.post(self._url(attempt_id, "continue")).status_code, 409)

        view = self.client.get(self._url(attempt_id)).json()["view"]
        self.assertEqual(view["total_score"], 0)
        self.assertEqual(view["path"], [])

    def test_abandon_attempt(self):
        attempt_id = self._start()

        res = self.client.delete(self._url(attempt_id))

        self.assertEqual(res.status_code, 204)
        self.assertEqual(self.client.get(self._url(attempt_id)).status_code, 404)

    def test_validate_endpoint(self):
        content = {
            "title": "Posted",
            "startStepId": "a",
            "perfectScore": 10,
            "steps": [{"id": "a", "situation": "A", "options": [{"id": "x", "text": "X", "score": 10}]}],
        }

        res = self.client.post("/api/scenarios/validate", json=content)

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["terminal_step_ids"], ["a"])

    def test_validate_endpoint_rejects_dangling(self):
        content = {
            "title": "Broken",
            "startStepId": "a",
            "perfectScore": 10,
            "steps": [{"id": "a", "situation": "A", "options": [{"id": "x", "text": "X", "score": 10, "nextStepId": "b"}]}],
        }

        res = self.client.post("/api/scenarios/validate", json=content)

        self.assertEqual(res.status_code, 422)
        self.assertIn("dangling step reference", res.json()["detail"])


if __name__ == "__main__":
    unittest.main()
