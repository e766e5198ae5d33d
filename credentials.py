#!/usr/bin/env python3
"""
Credentials — VCSA Deploy Kit
==============================
Holds secret values (root, ESXi, SSO passwords) between the moment they are
collected and the moment they are written into the installer JSON.

Security model:
  - The value lives in a mutable bytearray, never in a long-lived str
  - Plaintext is only handed out inside `with secret.reveal() as pw:`
  - The buffer is zeroed when that block exits, success or failure
  - repr()/str() are redacted so secrets never leak into logs

Usage:
  from credentials import SecretValue
  root_pw = SecretValue.from_env("VCSA_ROOT_PASSWORD")
  with root_pw.reveal() as pw:
      doc["new_vcsa"]["os"]["password"] = pw
"""
import os
from contextlib import contextmanager
from typing import Iterator

REDACTED = "********"


class SecretValue:
    """One-shot secret holder. Reveal once, then it is gone."""

    def __init__(self, value: str):
        self._buf: bytearray | None = bytearray(value.encode("utf-8"))

    @classmethod
    def from_env(cls, env_var: str) -> "SecretValue":
        value = os.environ.get(env_var)
        if not value:
            raise KeyError(env_var)
        return cls(value)

    @property
    def released(self) -> bool:
        return self._buf is None

    def __len__(self) -> int:
        return 0 if self._buf is None else len(self._buf)

    def __repr__(self) -> str:
        state = "released" if self.released else REDACTED
        return f"SecretValue({state})"

    __str__ = __repr__

    @contextmanager
    def reveal(self) -> Iterator[str]:
        """Yield the plaintext and wipe the backing buffer on exit."""
        if self._buf is None:
            raise RuntimeError("secret has already been revealed and released")
        try:
            yield self._buf.decode("utf-8")
        finally:
            self.release()

    def release(self) -> None:
        if self._buf is None:
            return
        for i in range(len(self._buf)):
            self._buf[i] = 0
        self._buf = None
