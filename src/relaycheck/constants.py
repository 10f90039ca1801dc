from typing import Final
from enum import StrEnum

LAMPORTS_PER_SOL: Final = 1_000_000_000

# Every settled single-signature transfer costs this much on top of the amount
TXN_FEE_LAMPORTS: Final = 5_000

# Syntactically valid, never a live blockhash
STALE_BLOCKHASH: Final = "11111111111111111111111111111111"

U64_MAX: Final = 2**64 - 1

JSONRPC_VERSION: Final = "2.0"
JSONRPC_ID: Final = 1

RELAY_TIMEOUT = 30.0

class RelayMethod(StrEnum):
    SINGLE = "sendTransaction"
    BUNDLE = "sendTransactionBundle"

class RunState(StrEnum):
    INITIALIZED        = "INITIALIZED"
    RECIPIENTS_CREATED = "RECIPIENTS_CREATED"
    TRANSACTIONS_BUILT = "TRANSACTIONS_BUILT"
    SIGNED             = "SIGNED"
    SUBMITTED          = "SUBMITTED"
    CONFIRMED          = "CONFIRMED"
    VERIFIED           = "VERIFIED"
    PERSISTED          = "PERSISTED"


__all__ = [
    "JSONRPC_ID",
    "JSONRPC_VERSION",
    "LAMPORTS_PER_SOL",
    "RELAY_TIMEOUT",
    "STALE_BLOCKHASH",
    "TXN_FEE_LAMPORTS",
    "U64_MAX",

    ######
    "RelayMethod",
    "RunState",
]
