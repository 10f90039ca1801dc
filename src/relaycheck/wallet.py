import json
import logging
from pathlib import Path

from solders.keypair import Keypair

from relaycheck.errors import KeypairError

log = logging.getLogger("relaycheck.wallet")

SECRET_KEY_LENGTH = 64


def load_keypair(path: str | Path) -> Keypair:
    """Read the sender keypair from a JSON array of secret key bytes.

    The file is only ever read here. Creating and funding it is somebody else's job.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise KeypairError(f"Keypair file {path} not found") from e
    except json.JSONDecodeError as e:
        raise KeypairError(f"Keypair file {path} is not valid JSON: {e}") from e

    if not isinstance(raw, list) or len(raw) != SECRET_KEY_LENGTH:
        raise KeypairError(f"Keypair file {path} must hold a JSON array of {SECRET_KEY_LENGTH} integers")
    if not all(isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in raw):
        raise KeypairError(f"Keypair file {path} holds values outside 0..255")

    try:
        keypair = Keypair.from_bytes(bytes(raw))
    except ValueError as e:
        raise KeypairError(f"Keypair file {path} is not a valid ed25519 keypair: {e}") from e
    log.info("Loaded keypair w/ public key: %s", keypair.pubkey())
    return keypair


def generate_recipients(n: int) -> list[Keypair]:
    recipients = [Keypair() for _ in range(n)]
    for i, r in enumerate(recipients, start=1):
        log.info("Recipient %s: %s", i, r.pubkey())
    return recipients
