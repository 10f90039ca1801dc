"""Test the ledger gateway adapter with a stubbed RPC client."""

from types import SimpleNamespace
from unittest import IsolatedAsyncioTestCase
from unittest.mock import AsyncMock

from solders.hash import Hash
from solders.keypair import Keypair
from solders.signature import Signature

from relaycheck.ledger import LedgerGateway, fan_out


class LedgerGatewayTest(IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.blockhash = Hash.new_unique()
        self.rpc = AsyncMock()
        self.rpc.get_balance.return_value = SimpleNamespace(value=1_500)
        self.rpc.get_latest_blockhash.return_value = SimpleNamespace(
            value=SimpleNamespace(blockhash=self.blockhash, last_valid_block_height=4242)
        )
        self.rpc.confirm_transaction.return_value = SimpleNamespace(value=[SimpleNamespace(err=None)])
        self.gateway = LedgerGateway("http://rpc.test/", commitment="confirmed", client=self.rpc)

    async def test_balance(self):
        pk = Keypair().pubkey()
        self.assertEqual(await self.gateway.get_balance(pk), 1_500)
        self.rpc.get_balance.assert_awaited_once_with(pk, commitment="confirmed")

    async def test_latest_blockhash(self):
        self.assertEqual(await self.gateway.latest_blockhash(), self.blockhash)

    async def test_confirm_waits_on_latest_height(self):
        sig = Signature.new_unique()
        await self.gateway.confirm(str(sig))
        args, kwargs = self.rpc.confirm_transaction.call_args
        self.assertEqual(args, (sig, "confirmed"))
        self.assertEqual(kwargs, {"last_valid_block_height": 4242})

    async def test_confirm_errors_propagate(self):
        self.rpc.confirm_transaction.side_effect = TimeoutError("never landed")
        with self.assertRaises(TimeoutError):
            await self.gateway.confirm(str(Signature.new_unique()))

    async def test_close(self):
        async with self.gateway:
            pass
        self.rpc.close.assert_awaited_once()


class FanOutTest(IsolatedAsyncioTestCase):
    async def test_results_keyed_like_calls(self):
        async def double(n):
            return n * 2

        self.assertEqual(await fan_out({"a": double(1), "b": double(2)}), {"a": 2, "b": 4})

    async def test_lone_failure_is_unwrapped(self):
        async def ok():
            return 1

        async def boom():
            raise KeyError("missing")

        with self.assertRaises(KeyError):
            await fan_out({"ok": ok(), "boom": boom()})
