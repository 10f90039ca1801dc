"""Drives one scenario from fresh recipients to a persisted run artifact.

    INITIALIZED -> RECIPIENTS_CREATED -> TRANSACTIONS_BUILT -> SIGNED -> SUBMITTED
        -> CONFIRMED (only when a leg expected to settle was accepted) -> VERIFIED -> PERSISTED

A failed single submission stops the run at SIGNED. Balance and count mismatches never
stop it: signatures beyond the expected settled count are recorded as unconfirmed and
left for the after snapshot to judge.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import httpx
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction

from relaycheck.balances import AccountCheck, BalanceSnapshot, expected_deltas, snapshot, verify
from relaycheck.constants import STALE_BLOCKHASH, TXN_FEE_LAMPORTS, RelayMethod, RunState
from relaycheck.errors import RelayError, SubmissionRejected
from relaycheck.ledger import Gateway, fan_out
from relaycheck.recorder import RunRecorder
from relaycheck.relay_client import RelayClient, SubmissionOutcome
from relaycheck.scenarios import Scenario, ScenarioDescriptor, get_scenario
from relaycheck.txn_factory import build_transfer, is_signed, sign_transaction
from relaycheck.wallet import generate_recipients

log = logging.getLogger("relaycheck.runner")


@dataclass
class RunResult:
    scenario: Scenario
    sender: str
    recipients: list[str]
    state: RunState = RunState.INITIALIZED
    transactions: list[VersionedTransaction] = field(default_factory=list)
    outcome: SubmissionOutcome | None = None
    confirmed: list[str] = field(default_factory=list)
    unconfirmed: list[str] = field(default_factory=list)
    expected_settled: int = 0
    before: BalanceSnapshot | None = None
    after: BalanceSnapshot | None = None
    checks: list[AccountCheck] = field(default_factory=list)
    artifact: Path | None = None

    @property
    def count_matched(self) -> bool:
        return self.outcome is not None and self.outcome.accepted == self.expected_settled

    @property
    def passed(self) -> bool:
        return self.count_matched and bool(self.checks) and all(c.passed for c in self.checks)


class ScenarioRunner:
    def __init__(
        self,
        keypair: Keypair,
        relay: RelayClient,
        gateway: Gateway,
        recorder: RunRecorder,
        *,
        fee: int = TXN_FEE_LAMPORTS,
        recipient_factory: Callable[[int], list[Keypair]] = generate_recipients,
    ):
        self.keypair = keypair
        self.relay = relay
        self.gateway = gateway
        self.recorder = recorder
        self.fee = fee
        self.recipient_factory = recipient_factory
        self.state = RunState.INITIALIZED

    def _advance(self, result: RunResult, state: RunState) -> None:
        log.info("%s: %s -> %s", result.scenario, self.state, state)
        self.state = state
        result.state = state

    async def build(self, d: ScenarioDescriptor, sender: Pubkey, recipients: list[Pubkey]) -> list[VersionedTransaction]:
        live: Hash | None = None
        if any(not leg.stale for leg in d.legs):
            live = await self.gateway.latest_blockhash()
            log.info("Latest blockhash: %s", live)
        return [
            build_transfer(sender, recipient, leg.lamports, STALE_BLOCKHASH if leg.stale else live)
            for leg, recipient in zip(d.legs, recipients)
        ]

    async def confirm_all(self, signatures: tuple[str, ...]) -> list[str]:
        confirmed = await fan_out({sig: self.gateway.confirm(sig) for sig in signatures})
        return list(confirmed)

    async def run(self, scenario: Scenario | str) -> RunResult:
        d = get_scenario(scenario)
        self.state = RunState.INITIALIZED
        sender = self.keypair.pubkey()

        recipients = [kp.pubkey() for kp in self.recipient_factory(d.recipients)]
        result = RunResult(
            scenario=d.scenario,
            sender=str(sender),
            recipients=[str(r) for r in recipients],
            expected_settled=d.expected_settled,
        )
        self._advance(result, RunState.RECIPIENTS_CREATED)

        result.before = await snapshot(self.gateway, [sender, *recipients], "before")

        unsigned = await self.build(d, sender, recipients)
        self._advance(result, RunState.TRANSACTIONS_BUILT)

        result.transactions = [sign_transaction(tx, self.keypair) for tx in unsigned]
        if not all(is_signed(tx) for tx in result.transactions):
            raise ValueError(f"{d.name}: refusing to submit a partially signed transaction")
        self._advance(result, RunState.SIGNED)

        log.info("Testing %s with %s (%s)", d.method, d.name, d.description)
        try:
            result.outcome = await self.relay.submit(d.method, result.transactions)
        except (RelayError, httpx.HTTPError) as e:
            if d.method != RelayMethod.SINGLE:
                raise
            raise SubmissionRejected(d.name, e, expected=not d.expects_settlement) from e
        self._advance(result, RunState.SUBMITTED)
        log.info(
            "%s: relay accepted %s, should be %s: %s",
            d.name,
            result.outcome,
            d.expected_settled,
            result.outcome.accepted == d.expected_settled,
        )

        # An over-accepted stale leg never lands, so only the expected prefix is awaited.
        settling = min(result.outcome.accepted, d.expected_settled)
        awaited = result.outcome.signatures[:settling]
        result.unconfirmed = list(result.outcome.signatures[settling:])
        if result.unconfirmed:
            log.error("%s: relay accepted unexpected signature(s), not awaited: %s", d.name, result.unconfirmed)
        if awaited:
            log.info("Waiting for confirmation of %s signature(s)...", len(awaited))
            result.confirmed = await self.confirm_all(awaited)
            self._advance(result, RunState.CONFIRMED)

        result.after = await snapshot(self.gateway, [sender, *recipients], "after")
        expected = expected_deltas(sender, recipients, d.legs, d.expected_settled, self.fee)
        roles = {str(sender): "sender"}
        roles.update({str(r): f"recipient {i}" for i, r in enumerate(recipients, start=1)})
        result.checks = verify(result.before, result.after, expected, roles)
        self._advance(result, RunState.VERIFIED)

        result.artifact = self.recorder.record(d.name, result.transactions)
        self._advance(result, RunState.PERSISTED)
        return result
