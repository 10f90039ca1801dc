"""Test reading the sender keypair file."""

import json
import tempfile
from pathlib import Path
from unittest import TestCase

from solders.keypair import Keypair

from relaycheck.errors import KeypairError
from relaycheck.wallet import generate_recipients, load_keypair


class LoadKeypairTest(TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "keypair.json"

    def tearDown(self):
        self.tmp.cleanup()

    def test_round_trip(self):
        kp = Keypair()
        self.path.write_text(json.dumps(list(bytes(kp))))
        loaded = load_keypair(self.path)
        self.assertEqual(loaded.pubkey(), kp.pubkey())
        self.assertEqual(self.path.read_text(), json.dumps(list(bytes(kp))))

    def test_missing_file(self):
        with self.assertRaises(KeypairError):
            load_keypair(self.path)

    def test_bad_contents(self):
        for contents in ("not json", json.dumps({"secret": []}), json.dumps([1, 2, 3]),
                         json.dumps([256] * 64), json.dumps([True] * 64)):
            self.path.write_text(contents)
            with self.subTest(contents=contents[:20]), self.assertRaises(KeypairError):
                load_keypair(self.path)


class RecipientsTest(TestCase):
    def test_fresh_and_distinct(self):
        recipients = generate_recipients(2)
        self.assertEqual(len(recipients), 2)
        self.assertNotEqual(recipients[0].pubkey(), recipients[1].pubkey())
