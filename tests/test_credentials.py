"""Tests for the scoped secret holder."""

import os
import unittest
from unittest import mock

from tests.helpers import SecretValue


class TestSecretValue(unittest.TestCase):

    def test_reveal_yields_plaintext(self):
        secret = SecretValue("s3cret!")
        with secret.reveal() as pw:
            self.assertEqual(pw, "s3cret!")

    def test_buffer_released_after_reveal(self):
        secret = SecretValue("s3cret!")
        buf = secret._buf
        with secret.reveal():
            pass
        self.assertTrue(secret.released)
        self.assertEqual(bytes(buf), b"\x00" * len("s3cret!"))
        self.assertEqual(len(secret), 0)

    def test_buffer_released_when_block_raises(self):
        secret = SecretValue("s3cret!")
        with self.assertRaises(ValueError):
            with secret.reveal():
                raise ValueError("boom")
        self.assertTrue(secret.released)

    def test_second_reveal_rejected(self):
        secret = SecretValue("s3cret!")
        with secret.reveal():
            pass
        with self.assertRaises(RuntimeError):
            with secret.reveal():
                pass

    def test_repr_is_redacted(self):
        secret = SecretValue("s3cret!")
        self.assertNotIn("s3cret", repr(secret))
        self.assertNotIn("s3cret", str(secret))
        secret.release()
        self.assertEqual(repr(secret), "SecretValue(released)")

    def test_non_ascii_round_trip(self):
        with SecretValue("pässwörd").reveal() as pw:
            self.assertEqual(pw, "pässwörd")

    def test_from_env(self):
        with mock.patch.dict(os.environ, {"TEST_SECRET": "from-env"}):
            secret = SecretValue.from_env("TEST_SECRET")
        with secret.reveal() as pw:
            self.assertEqual(pw, "from-env")

    def test_from_env_missing(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(KeyError):
                SecretValue.from_env("TEST_SECRET")


if __name__ == "__main__":
    unittest.main()
