"""Balance snapshots and the expected-versus-actual delta check.

All amounts are integer lamports. Nothing in here touches floats, including the
SOL rendering used for logs.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from solders.pubkey import Pubkey

from relaycheck.constants import LAMPORTS_PER_SOL
from relaycheck.ledger import Gateway, fan_out

log = logging.getLogger("relaycheck.balances")


def format_sol(lamports: int) -> str:
    sign = "-" if lamports < 0 else ""
    whole, frac = divmod(abs(lamports), LAMPORTS_PER_SOL)
    return f"{sign}{whole}.{frac:09d} SOL"


@dataclass(frozen=True, slots=True)
class BalanceSnapshot:
    label: str
    balances: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "balances", MappingProxyType(dict(self.balances)))

    def __getitem__(self, account: Pubkey | str) -> int:
        return self.balances[str(account)]

    def __contains__(self, account: Pubkey | str) -> bool:
        return str(account) in self.balances

    def accounts(self) -> list[str]:
        return list(self.balances)


async def snapshot(gateway: Gateway, accounts: Iterable[Pubkey], label: str) -> BalanceSnapshot:
    """Read every account's balance concurrently."""
    unique = list(dict.fromkeys(accounts))
    read = await fan_out({str(pk): gateway.get_balance(pk) for pk in unique})
    balances = {acct: int(bal) for acct, bal in read.items()}
    for acct, bal in balances.items():
        log.info("%s balance %s: %s", label, acct, format_sol(bal))
    return BalanceSnapshot(label=label, balances=balances)


def delta(before: BalanceSnapshot, after: BalanceSnapshot, account: Pubkey | str) -> int:
    return after[account] - before[account]


@dataclass(frozen=True, slots=True)
class Leg:
    """One transfer in a scenario."""

    lamports: int
    stale: bool = False


def expected_deltas(
    sender: Pubkey,
    recipients: Sequence[Pubkey],
    legs: Sequence[Leg],
    settled: int,
    fee: int,
) -> dict[str, int]:
    """Expected balance change per account when the first ``settled`` legs land.

    Leg ``i`` pays ``recipients[i]``. The sender pays amount plus fee for each
    settled leg; accounts with nothing settled expect zero.
    """
    if len(legs) != len(recipients):
        raise ValueError(f"{len(legs)} legs for {len(recipients)} recipients")
    if not 0 <= settled <= len(legs):
        raise ValueError(f"settled count {settled} out of range for {len(legs)} legs")

    expected = {str(sender): 0}
    expected.update({str(r): 0 for r in recipients})
    for leg, recipient in list(zip(legs, recipients))[:settled]:
        expected[str(sender)] -= leg.lamports + fee
        expected[str(recipient)] += leg.lamports
    return expected


@dataclass(frozen=True, slots=True)
class AccountCheck:
    account: str
    role: str
    before: int
    after: int
    expected: int

    @property
    def actual(self) -> int:
        return self.after - self.before

    @property
    def passed(self) -> bool:
        return self.actual == self.expected


def verify(
    before: BalanceSnapshot,
    after: BalanceSnapshot,
    expected: Mapping[str, int],
    roles: Mapping[str, str] | None = None,
) -> list[AccountCheck]:
    """Compare actual to expected deltas, one check per account.

    A mismatch is logged and recorded in the result, never raised.
    """
    roles = roles or {}
    checks = []
    for account, want in expected.items():
        check = AccountCheck(
            account=account,
            role=roles.get(account, "account"),
            before=before[account],
            after=after[account],
            expected=want,
        )
        level = logging.INFO if check.passed else logging.ERROR
        log.log(
            level,
            "%s %s change %s, expected %s: %s",
            check.role,
            account,
            format_sol(check.actual),
            format_sol(want),
            "matched" if check.passed else "MISMATCH",
        )
        checks.append(check)
    return checks
