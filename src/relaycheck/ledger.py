"""Read-only view of the ledger: balances, latest blockhash, confirmations."""

import asyncio
import logging
from collections.abc import Awaitable, Mapping
from typing import Protocol, TypeVar

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.signature import Signature

log = logging.getLogger("relaycheck.ledger")

K = TypeVar("K")
T = TypeVar("T")


class Gateway(Protocol):
    async def get_balance(self, pubkey: Pubkey) -> int: ...
    async def latest_blockhash(self) -> Hash: ...
    async def confirm(self, signature: str) -> None: ...


class LedgerGateway:
    def __init__(self, url: str, *, commitment: str = "finalized", client: AsyncClient | None = None):
        self.url = url
        self.commitment = Commitment(commitment)
        self._client = client or AsyncClient(url, commitment=self.commitment)

    async def __aenter__(self) -> "LedgerGateway":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.close()

    async def get_balance(self, pubkey: Pubkey) -> int:
        resp = await self._client.get_balance(pubkey, commitment=self.commitment)
        return int(resp.value)

    async def latest_blockhash(self) -> Hash:
        resp = await self._client.get_latest_blockhash(commitment=self.commitment)
        return resp.value.blockhash

    async def confirm(self, signature: str) -> None:
        """Wait once for ``signature`` to reach the configured commitment.

        The wait is bounded by the latest block height, as the ledger sees it now.
        Whatever the RPC client raises goes straight to the caller.
        """
        latest = await self._client.get_latest_blockhash(commitment=self.commitment)
        resp = await self._client.confirm_transaction(
            Signature.from_string(signature),
            self.commitment,
            last_valid_block_height=latest.value.last_valid_block_height,
        )
        status = resp.value[0] if resp.value else None
        if status is not None and status.err is not None:
            log.warning("Transaction %s landed with error: %s", signature, status.err)
        else:
            log.info("Confirmed %s (%s)", signature, self.commitment)


async def fan_out(calls: Mapping[K, Awaitable[T]]) -> dict[K, T]:
    """Await every call concurrently and key the results like ``calls``.

    A single failing call re-raises its own exception rather than the
    ``ExceptionGroup`` the task group wraps it in.
    """
    try:
        async with asyncio.TaskGroup() as tg:
            tasks = {key: tg.create_task(call) for key, call in calls.items()}
    except ExceptionGroup as eg:
        if len(eg.exceptions) == 1:
            raise eg.exceptions[0] from None
        raise
    return {key: task.result() for key, task in tasks.items()}
