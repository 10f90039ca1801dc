import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from relaycheck.constants import RELAY_TIMEOUT, TXN_FEE_LAMPORTS
from relaycheck.errors import ConfigurationError

pkg_root = Path(__file__).parent
config_file = pkg_root / "config.toml"

cfg = tomllib.loads(config_file.read_text())

RELAY_URL_VAR = "ATLAS_SERVICE_URL"
RPC_URL_VAR = "RPC_URL"

COMMITMENTS = ("processed", "confirmed", "finalized")


@dataclass(frozen=True, slots=True)
class HarnessConfig:
    relay_url: str
    rpc_url: str
    keypair_path: Path
    output_path: Path
    commitment: str = "finalized"
    txn_fee_lamports: int = TXN_FEE_LAMPORTS
    relay_timeout: float = RELAY_TIMEOUT


def _required(env: Mapping[str, str], name: str) -> str:
    value = (env.get(name) or "").strip()
    if not value:
        raise ConfigurationError(f"{name} must be set")
    return value


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return int(default)
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative")
    return value


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return float(default)
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive")
    return value


def load_config(
    environ: Mapping[str, str] | None = None,
    *,
    keypair_path: str | Path | None = None,
    output_path: str | Path | None = None,
) -> HarnessConfig:
    """Build the run configuration from the environment and packaged defaults.

    Both endpoint URLs are required. Everything else falls back to config.toml.
    Explicit path arguments (from the command line) win over the environment.
    """
    env = os.environ if environ is None else environ
    files = cfg["files"]
    ledger = cfg["ledger"]

    relay_url = _required(env, RELAY_URL_VAR)
    rpc_url = _required(env, RPC_URL_VAR)

    commitment = (env.get("COMMITMENT") or ledger["commitment"]).lower()
    if commitment not in COMMITMENTS:
        raise ConfigurationError(f"COMMITMENT must be one of {', '.join(COMMITMENTS)}, got {commitment!r}")

    return HarnessConfig(
        relay_url=relay_url,
        rpc_url=rpc_url,
        keypair_path=Path(keypair_path or env.get("KEYPAIR_PATH") or files["keypair"]),
        output_path=Path(output_path or env.get("OUTPUT_PATH") or files["output"]),
        commitment=commitment,
        txn_fee_lamports=_int(env, "TXN_FEE_LAMPORTS", ledger["txn_fee_lamports"]),
        relay_timeout=_float(env, "RELAY_TIMEOUT", cfg["relay"]["timeout"]),
    )
