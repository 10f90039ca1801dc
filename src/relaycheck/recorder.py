import json
import logging
from collections.abc import Sequence
from pathlib import Path

from solders.transaction import VersionedTransaction

from relaycheck.txn_factory import parse, serialize

log = logging.getLogger("relaycheck.recorder")


class RunRecorder:
    """Keeps the last run's transactions on disk. Each run overwrites the previous one."""

    def __init__(self, path: str | Path = "test-transactions.json") -> None:
        self.path = Path(path)

    def record(self, scenario: str, transactions: Sequence[VersionedTransaction]) -> Path:
        data = {
            "transactions": [list(serialize(tx)) for tx in transactions],
            "mode": str(scenario),
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")
        log.info("Saved %s transaction(s) to %s", len(transactions), self.path)
        return self.path

    def load(self) -> tuple[str, list[VersionedTransaction]]:
        data = json.loads(self.path.read_text(encoding="utf-8"))
        return data["mode"], [parse(raw) for raw in data["transactions"]]
