"""JSON-RPC client for the transaction relay.

Preflight simulation is always skipped so that stale transactions reach the
relay's own validation instead of being stopped on the way out.
"""

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError
from solders.transaction import VersionedTransaction

from relaycheck.constants import JSONRPC_ID, JSONRPC_VERSION, RELAY_TIMEOUT, RelayMethod
from relaycheck.errors import RelayResponseError, RelayRpcError
from relaycheck.txn_factory import encode_b58

log = logging.getLogger("relaycheck.relay")

SEND_OPTIONS = {"skipPreflight": True, "encoding": "base58"}


class JsonRpcError(BaseModel):
    code: int | None = None
    message: str = ""
    data: Any = None


class JsonRpcEnvelope(BaseModel):
    jsonrpc: str | None = None
    id: int | str | None = None
    result: Any = None
    error: JsonRpcError | None = None


class SingleResult(BaseModel):
    result: str


class BundleResult(BaseModel):
    result: list[str]


class Acceptance(StrEnum):
    REJECTED           = "REJECTED"
    PARTIALLY_ACCEPTED = "PARTIALLY_ACCEPTED"
    FULLY_ACCEPTED     = "FULLY_ACCEPTED"


@dataclass(frozen=True, slots=True)
class SubmissionOutcome:
    """What the relay did with a submission, independent of how it was sent."""

    kind: Acceptance
    submitted: int
    signatures: tuple[str, ...] = ()

    @property
    def accepted(self) -> int:
        return len(self.signatures)

    @classmethod
    def from_signatures(cls, submitted: int, signatures: Sequence[str]) -> "SubmissionOutcome":
        sigs = tuple(signatures)
        if len(sigs) > submitted:
            raise ValueError(f"{len(sigs)} signatures for {submitted} transactions")
        if not sigs:
            kind = Acceptance.REJECTED
        elif len(sigs) < submitted:
            kind = Acceptance.PARTIALLY_ACCEPTED
        else:
            kind = Acceptance.FULLY_ACCEPTED
        return cls(kind=kind, submitted=submitted, signatures=sigs)

    def __str__(self):
        return f"{self.kind} ({self.accepted}/{self.submitted})"


def rpc_payload(method: RelayMethod, encoded: str | list[str]) -> dict:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": JSONRPC_ID,
        "method": str(method),
        "params": [encoded, dict(SEND_OPTIONS)],
    }


class RelayClient:
    def __init__(self, url: str, *, timeout: float = RELAY_TIMEOUT, client: httpx.AsyncClient | None = None):
        self.url = url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "RelayClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _call(self, method: RelayMethod, encoded: str | list[str]) -> Any:
        payload = rpc_payload(method, encoded)
        log.info("Request data: %s", json.dumps(payload))
        resp = await self._client.post(self.url, json=payload)
        log.info("Transaction status: %s", resp.status_code)
        log.info("Response data: %s", resp.text)
        resp.raise_for_status()

        try:
            envelope = JsonRpcEnvelope.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise RelayResponseError(f"{method}: malformed response: {e}") from e
        if envelope.error is not None:
            err = envelope.error
            raise RelayRpcError(err.code, err.message, err.data)
        return envelope

    async def submit_single(self, tx: VersionedTransaction) -> str:
        envelope = await self._call(RelayMethod.SINGLE, encode_b58(tx))
        try:
            return SingleResult.model_validate(envelope.model_dump()).result
        except ValidationError as e:
            raise RelayResponseError(f"{RelayMethod.SINGLE}: expected a signature string: {e}") from e

    async def submit_bundle(self, txs: Sequence[VersionedTransaction]) -> list[str]:
        """Submit ``txs`` as one bundle and return the accepted signatures.

        The list can be shorter than ``txs``. How much shorter is up to the relay
        and is exactly what the caller is there to check.
        """
        envelope = await self._call(RelayMethod.BUNDLE, [encode_b58(tx) for tx in txs])
        try:
            signatures = BundleResult.model_validate(envelope.model_dump()).result
        except ValidationError as e:
            raise RelayResponseError(f"{RelayMethod.BUNDLE}: expected a list of signatures: {e}") from e
        if len(signatures) > len(txs):
            raise RelayResponseError(
                f"{RelayMethod.BUNDLE}: {len(signatures)} signatures returned for {len(txs)} transactions"
            )
        return signatures

    async def submit(self, method: RelayMethod, txs: Sequence[VersionedTransaction]) -> SubmissionOutcome:
        """Dispatch on ``method`` and normalize the reply into a SubmissionOutcome.

        A failed single submission raises, it does not become a REJECTED outcome.
        """
        if method == RelayMethod.SINGLE:
            if len(txs) != 1:
                raise ValueError(f"{method} takes exactly one transaction, got {len(txs)}")
            return SubmissionOutcome.from_signatures(1, [await self.submit_single(txs[0])])
        return SubmissionOutcome.from_signatures(len(txs), await self.submit_bundle(txs))
