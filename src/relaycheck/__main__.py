import argparse
import asyncio
import logging
import sys

from relaycheck.config import HarnessConfig, load_config
from relaycheck.errors import ConfigurationError, SubmissionRejected
from relaycheck.ledger import LedgerGateway
from relaycheck.logging_config import setup_logging
from relaycheck.recorder import RunRecorder
from relaycheck.relay_client import RelayClient
from relaycheck.report import render
from relaycheck.runner import RunResult, ScenarioRunner
from relaycheck.scenarios import Scenario, usage_text
from relaycheck.wallet import load_keypair

log = logging.getLogger("relaycheck.main")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="relaycheck",
        description="Send valid and stale transfers through the relay and check what settles.",
        epilog=usage_text(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("scenario", nargs="?", help="Scenario to run.")
    parser.add_argument("-k", "--keypair", help="Sender keypair file (JSON array of secret key bytes).")
    parser.add_argument("-o", "--output", help="Where to write the run's transactions.")
    args = parser.parse_args(argv)

    if args.scenario not in {s.value for s in Scenario}:
        if args.scenario:
            print(f"Unknown test mode: {args.scenario}", file=sys.stderr)
        print(usage_text(), file=sys.stderr)
        sys.exit(1)
    return args


async def run_scenario(config: HarnessConfig, scenario: Scenario) -> RunResult:
    keypair = load_keypair(config.keypair_path)
    async with (
        RelayClient(config.relay_url, timeout=config.relay_timeout) as relay,
        LedgerGateway(config.rpc_url, commitment=config.commitment) as gateway,
    ):
        runner = ScenarioRunner(
            keypair,
            relay,
            gateway,
            RunRecorder(config.output_path),
            fee=config.txn_fee_lamports,
        )
        return await runner.run(scenario)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging()
    scenario = Scenario(args.scenario)

    try:
        config = load_config(keypair_path=args.keypair, output_path=args.output)
    except ConfigurationError as e:
        log.error("Configuration error: %s", e)
        return 1

    try:
        result = asyncio.run(run_scenario(config, scenario))
    except SubmissionRejected as e:
        if e.expected:
            log.warning("%s: relay rejected the stale transaction as expected: %s", scenario, e.cause)
        else:
            log.error("%s: relay rejected a valid transaction: %s", scenario, e.cause)
        return 1
    except Exception:
        log.exception("%s: run failed", scenario)
        return 1

    render(result)
    return 0 if result.passed else 1


if __name__ == "__main__":
    sys.exit(main())
