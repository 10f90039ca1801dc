"""Test the console report."""

from unittest import TestCase

from rich.console import Console

from relaycheck.balances import AccountCheck
from relaycheck.constants import RunState
from relaycheck.relay_client import SubmissionOutcome
from relaycheck.report import render
from relaycheck.runner import RunResult
from relaycheck.scenarios import Scenario


def make_result(recipient_after: int) -> RunResult:
    return RunResult(
        scenario=Scenario.VALID_SINGLE,
        sender="S",
        recipients=["R"],
        state=RunState.PERSISTED,
        outcome=SubmissionOutcome.from_signatures(1, ["sig"]),
        expected_settled=1,
        checks=[
            AccountCheck("S", "sender", 100_000_000, 89_995_000, -10_005_000),
            AccountCheck("R", "recipient 1", 0, recipient_after, 10_000_000),
        ],
    )


class RenderTest(TestCase):
    def output(self, result: RunResult) -> str:
        console = Console(record=True, width=160, color_system=None)
        render(result, console)
        return console.export_text()

    def test_passing_run(self):
        result = make_result(10_000_000)
        self.assertTrue(result.passed)
        text = self.output(result)
        self.assertIn("-0.010005000 SOL", text)
        self.assertIn("all checks passed", text)
        self.assertNotIn("FAIL", text)

    def test_failing_run(self):
        result = make_result(0)
        self.assertFalse(result.passed)
        text = self.output(result)
        self.assertIn("FAIL", text)
        self.assertIn("1 check(s) failed", text)

    def test_unexpected_signatures_listed(self):
        result = make_result(10_000_000)
        result.outcome = SubmissionOutcome.from_signatures(2, ["sig", "extra"])
        result.unconfirmed = ["extra"]
        self.assertFalse(result.count_matched)
        text = self.output(result)
        self.assertIn("1 check(s) failed", text)
        self.assertIn("unexpected signature, not confirmed: extra", text)
