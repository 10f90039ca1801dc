"""The five relay scenarios.

Each scenario is data: how many recipients, what each leg sends, which legs carry
the stale blockhash, how it reaches the relay and how many legs should settle.
Adding a scenario means adding a descriptor here, nothing else.
"""

from dataclasses import dataclass
from enum import StrEnum

from relaycheck.balances import Leg
from relaycheck.constants import LAMPORTS_PER_SOL, RelayMethod


class Scenario(StrEnum):
    VALID_SINGLE          = "valid-single"
    INVALID_SINGLE        = "invalid-single"
    VALID_BUNDLE          = "valid-bundle"
    INVALID_BUNDLE_FIRST  = "invalid-bundle-first"
    INVALID_BUNDLE_SECOND = "invalid-bundle-second"


@dataclass(frozen=True, slots=True)
class ScenarioDescriptor:
    scenario: Scenario
    legs: tuple[Leg, ...]
    method: RelayMethod
    expected_settled: int
    description: str

    def __post_init__(self):
        if not 0 <= self.expected_settled <= len(self.legs):
            raise ValueError(f"{self.scenario}: expected_settled out of range")
        if self.method == RelayMethod.SINGLE and len(self.legs) != 1:
            raise ValueError(f"{self.scenario}: single submission takes one leg")

    @property
    def name(self) -> str:
        return str(self.scenario)

    @property
    def recipients(self) -> int:
        return len(self.legs)

    @property
    def stale_legs(self) -> tuple[int, ...]:
        return tuple(i for i, leg in enumerate(self.legs) if leg.stale)

    @property
    def expects_settlement(self) -> bool:
        return self.expected_settled > 0


SCENARIOS: dict[Scenario, ScenarioDescriptor] = {}


def register_scenario(descriptor: ScenarioDescriptor) -> ScenarioDescriptor:
    if descriptor.scenario in SCENARIOS:
        raise ValueError(f"Scenario {descriptor.scenario} already registered")
    SCENARIOS[descriptor.scenario] = descriptor
    return descriptor


# 0.01, 0.02 and 0.03 SOL
_A1 = LAMPORTS_PER_SOL // 100
_A2 = 2 * LAMPORTS_PER_SOL // 100
_A3 = 3 * LAMPORTS_PER_SOL // 100

register_scenario(ScenarioDescriptor(
    scenario=Scenario.VALID_SINGLE,
    legs=(Leg(_A1),),
    method=RelayMethod.SINGLE,
    expected_settled=1,
    description="Test sending a single valid transaction",
))
register_scenario(ScenarioDescriptor(
    scenario=Scenario.INVALID_SINGLE,
    legs=(Leg(_A3, stale=True),),
    method=RelayMethod.SINGLE,
    expected_settled=0,
    description="Test sending a single stale transaction",
))
register_scenario(ScenarioDescriptor(
    scenario=Scenario.VALID_BUNDLE,
    legs=(Leg(_A1), Leg(_A2)),
    method=RelayMethod.BUNDLE,
    expected_settled=2,
    description="Test sending a bundle of valid transactions",
))
register_scenario(ScenarioDescriptor(
    scenario=Scenario.INVALID_BUNDLE_FIRST,
    legs=(Leg(_A1, stale=True), Leg(_A2)),
    method=RelayMethod.BUNDLE,
    expected_settled=0,
    description="Test sending a bundle with the first transaction stale",
))
register_scenario(ScenarioDescriptor(
    scenario=Scenario.INVALID_BUNDLE_SECOND,
    legs=(Leg(_A1), Leg(_A2, stale=True)),
    method=RelayMethod.BUNDLE,
    expected_settled=1,
    description="Test sending a bundle with the second transaction stale",
))


def get_scenario(name: str | Scenario) -> ScenarioDescriptor:
    """Look a scenario up by name. Unknown names raise ValueError."""
    try:
        return SCENARIOS[Scenario(name)]
    except ValueError:
        valid = ", ".join(s.value for s in Scenario)
        raise ValueError(f"Unknown scenario {name!r}; expected one of: {valid}") from None


def usage_text() -> str:
    width = max(len(s.value) for s in Scenario)
    lines = ["Please specify a test mode:"]
    lines.extend(f"  {d.name:<{width}}  {d.description}" for d in SCENARIOS.values())
    return "\n".join(lines)
