"""Test building, signing and encoding transfer transactions."""

from unittest import TestCase

import base58
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import to_bytes_versioned
from solders.signature import Signature
from solders.system_program import ID as SYSTEM_PROGRAM_ID

from relaycheck.constants import STALE_BLOCKHASH, U64_MAX
from relaycheck.txn_factory import (
    build_transfer,
    encode_b58,
    is_signed,
    parse,
    serialize,
    sign_transaction,
    signature_of,
    transfer_lamports,
)


class BuildTransferTest(TestCase):
    def setUp(self):
        self.sender = Keypair()
        self.recipient = Keypair().pubkey()
        self.blockhash = Hash.new_unique()

    def test_three_accounts_one_instruction(self):
        tx = build_transfer(self.sender.pubkey(), self.recipient, 10_000_000, self.blockhash)
        msg = tx.message
        self.assertEqual(list(msg.account_keys), [self.sender.pubkey(), self.recipient, SYSTEM_PROGRAM_ID])
        self.assertEqual(msg.header.num_required_signatures, 1)
        self.assertEqual(msg.header.num_readonly_signed_accounts, 0)
        self.assertEqual(msg.header.num_readonly_unsigned_accounts, 1)
        self.assertEqual(len(msg.instructions), 1)
        ix = msg.instructions[0]
        self.assertEqual(ix.program_id_index, 2)
        self.assertEqual(list(bytes(ix.accounts)), [0, 1])
        self.assertEqual(msg.recent_blockhash, self.blockhash)
        self.assertEqual(transfer_lamports(tx), 10_000_000)

    def test_unsigned_until_signed(self):
        tx = build_transfer(self.sender.pubkey(), self.recipient, 1, self.blockhash)
        self.assertFalse(is_signed(tx))
        self.assertEqual(tx.signatures, [Signature.default()])

    def test_stale_blockhash_is_accepted(self):
        tx = build_transfer(self.sender.pubkey(), self.recipient, 1, STALE_BLOCKHASH)
        self.assertEqual(str(tx.message.recent_blockhash), STALE_BLOCKHASH)

    def test_zero_and_max_amounts(self):
        self.assertEqual(transfer_lamports(build_transfer(self.sender.pubkey(), self.recipient, 0, self.blockhash)), 0)
        tx = build_transfer(self.sender.pubkey(), self.recipient, U64_MAX, self.blockhash)
        self.assertEqual(transfer_lamports(tx), U64_MAX)

    def test_rejects_bad_amounts(self):
        for bad in (-1, U64_MAX + 1, 0.01, True, "100"):
            with self.subTest(bad=bad), self.assertRaises(ValueError):
                build_transfer(self.sender.pubkey(), self.recipient, bad, self.blockhash)


class SignAndSerializeTest(TestCase):
    def setUp(self):
        self.sender = Keypair()
        self.unsigned = build_transfer(self.sender.pubkey(), Keypair().pubkey(), 5_000, Hash.new_unique())

    def test_sign_returns_new_transaction(self):
        signed = sign_transaction(self.unsigned, self.sender)
        self.assertTrue(is_signed(signed))
        self.assertFalse(is_signed(self.unsigned))
        self.assertEqual(signed.message, self.unsigned.message)
        self.assertTrue(signed.signatures[0].verify(self.sender.pubkey(), to_bytes_versioned(signed.message)))

    def test_wrong_signer(self):
        with self.assertRaises(ValueError):
            sign_transaction(self.unsigned, Keypair())

    def test_round_trip(self):
        signed = sign_transaction(self.unsigned, self.sender)
        again = parse(serialize(signed))
        self.assertEqual(again.signatures, signed.signatures)
        self.assertEqual(bytes(again.message.instructions[0].data), bytes(signed.message.instructions[0].data))
        self.assertEqual(serialize(again), serialize(signed))

    def test_parse_accepts_byte_list(self):
        signed = sign_transaction(self.unsigned, self.sender)
        self.assertEqual(signature_of(parse(list(serialize(signed)))), signature_of(signed))

    def test_base58_encoding(self):
        signed = sign_transaction(self.unsigned, self.sender)
        self.assertEqual(base58.b58decode(encode_b58(signed)), serialize(signed))
