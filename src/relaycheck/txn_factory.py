"""Minimal system-program transfer transactions.

Only what the harness needs: one sender, one recipient, one transfer instruction,
bound to whichever blockhash the caller hands in. Wire encoding and signing are
solders' business; the helpers at the bottom just give them names.
"""

import logging

import base58
from solders.hash import Hash
from solders.instruction import CompiledInstruction
from solders.keypair import Keypair
from solders.message import MessageHeader, MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from solders.system_program import TransferParams, transfer
from solders.transaction import VersionedTransaction

from relaycheck.constants import U64_MAX

log = logging.getLogger("relaycheck.txn")

SENDER_INDEX = 0
RECIPIENT_INDEX = 1
PROGRAM_INDEX = 2

# sender signs, system program is the only read-only account
TRANSFER_HEADER = MessageHeader(
    num_required_signatures=1,
    num_readonly_signed_accounts=0,
    num_readonly_unsigned_accounts=1,
)


def _check_lamports(lamports) -> int:
    if isinstance(lamports, bool) or not isinstance(lamports, int):
        raise ValueError(f"lamports must be an int, got {type(lamports).__name__}")
    if not 0 <= lamports <= U64_MAX:
        raise ValueError(f"lamports out of range: {lamports}")
    return lamports


def _as_hash(blockhash: Hash | str) -> Hash:
    return blockhash if isinstance(blockhash, Hash) else Hash.from_string(blockhash)


def build_transfer(sender: Pubkey, recipient: Pubkey, lamports: int, blockhash: Hash | str) -> VersionedTransaction:
    """Build an unsigned v0 transfer of ``lamports`` from sender to recipient.

    The blockhash is used as given. A stale one is a fixture, not an error.
    The signature slot holds the all-zero default until ``sign_transaction``.
    """
    lamports = _check_lamports(lamports)
    ix = transfer(TransferParams(from_pubkey=sender, to_pubkey=recipient, lamports=lamports))
    message = MessageV0(
        TRANSFER_HEADER,
        [sender, recipient, SYSTEM_PROGRAM_ID],
        _as_hash(blockhash),
        [
            CompiledInstruction(
                program_id_index=PROGRAM_INDEX,
                data=bytes(ix.data),
                accounts=bytes([SENDER_INDEX, RECIPIENT_INDEX]),
            )
        ],
        [],
    )
    log.debug("Built transfer %s -> %s lamports=%s blockhash=%s", sender, recipient, lamports, message.recent_blockhash)
    return VersionedTransaction.populate(message, [Signature.default()])


def sign_transaction(tx: VersionedTransaction, keypair: Keypair) -> VersionedTransaction:
    """Return a signed copy; ``tx`` itself is left alone."""
    fee_payer = tx.message.account_keys[SENDER_INDEX]
    if keypair.pubkey() != fee_payer:
        raise ValueError(f"keypair {keypair.pubkey()} is not the fee payer {fee_payer}")
    return VersionedTransaction(tx.message, [keypair])


def is_signed(tx: VersionedTransaction) -> bool:
    return all(sig != Signature.default() for sig in tx.signatures)


def serialize(tx: VersionedTransaction) -> bytes:
    return bytes(tx)


def parse(data: bytes | bytearray | list[int]) -> VersionedTransaction:
    return VersionedTransaction.from_bytes(bytes(data))


def encode_b58(tx: VersionedTransaction) -> str:
    return base58.b58encode(serialize(tx)).decode("ascii")


def signature_of(tx: VersionedTransaction) -> str:
    return str(tx.signatures[0])


def transfer_lamports(tx: VersionedTransaction) -> int:
    """Read the amount back out of the transfer instruction data."""
    data = bytes(tx.message.instructions[0].data)
    # u32 instruction tag (2 = Transfer) followed by u64 lamports, little endian
    return int.from_bytes(data[4:12], "little")
