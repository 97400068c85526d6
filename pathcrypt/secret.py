"""
Scoped holder for passphrases.

Python strings are immutable and cannot be cleared, so a passphrase is turned
into a mutable ``bytearray`` as soon as it is read. Callers never see that
buffer directly: ``borrow()`` lends out a short-lived copy for one key
derivation and zeroes it when the block exits, and ``wipe()`` clears the
holder itself once the batch is done.
"""

from __future__ import annotations

import getpass
import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union


class PassphraseUnavailable(RuntimeError):
    """Raised when no usable passphrase source exists."""


def wipe(buf: Optional[bytearray]) -> None:
    """Overwrite a mutable buffer with zeros in place."""
    if isinstance(buf, bytearray) and buf:
        buf[:] = bytes(len(buf))


class SecretPassphrase:
    """
    Passphrase bytes with guaranteed zeroing.

    The holder can be used as a context manager; leaving the block wipes it on
    both the normal and the error path.
    """

    ENV_VAR = "PATHCRYPT_PASSWORD"

    __slots__ = ("_buffer", "_wiped")

    def __init__(self, value: Union[str, bytes, bytearray, memoryview]) -> None:
        if isinstance(value, str):
            buffer = bytearray(value.encode("utf-8"))
        elif isinstance(value, (bytes, bytearray, memoryview)):
            buffer = bytearray(value)
        else:
            raise TypeError(f"Unsupported passphrase type: {type(value)!r}")
        if not buffer:
            raise PassphraseUnavailable("Passphrase must not be empty")
        self._buffer = buffer
        self._wiped = False

    # ---------- Sources ----------------------------------------------------

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "SecretPassphrase":
        """Read the first line of ``path``; the line terminator is not part of the secret."""
        raw = bytearray(Path(path).expanduser().read_bytes())
        try:
            end = raw.find(b"\n")
            line = raw if end < 0 else raw[:end]
            if line.endswith(b"\r"):
                line = line[:-1]
            try:
                return cls(line)
            finally:
                wipe(line)
        finally:
            wipe(raw)

    @classmethod
    def prompt(cls, *, confirm: bool = False) -> "SecretPassphrase":
        if not sys.stdin or not sys.stdin.isatty():
            raise PassphraseUnavailable(
                "No passphrase given and stdin is not interactive; "
                f"use --password, --password-file or {cls.ENV_VAR}"
            )
        secret = cls(getpass.getpass("Passphrase: "))
        if confirm:
            again = cls(getpass.getpass("Confirm passphrase: "))
            try:
                matches = again._buffer == secret._buffer
            finally:
                again.wipe()
            if not matches:
                secret.wipe()
                raise PassphraseUnavailable("Passphrases do not match")
        return secret

    @classmethod
    def resolve(
        cls,
        value: Optional[Union[str, bytes, bytearray]] = None,
        *,
        password_file: Optional[Union[str, Path]] = None,
        env_var: Optional[str] = None,
        interactive: bool = True,
        confirm: bool = False,
    ) -> "SecretPassphrase":
        """
        Pick the first available source: explicit value, password file,
        environment variable, interactive prompt.
        """
        if value is not None:
            return cls(value)
        if password_file is not None:
            return cls.from_file(password_file)
        env_value = os.environ.get(env_var or cls.ENV_VAR)
        if env_value:
            return cls(env_value)
        if not interactive:
            raise PassphraseUnavailable("No passphrase source available")
        return cls.prompt(confirm=confirm)

    # ---------- Access -----------------------------------------------------

    @property
    def wiped(self) -> bool:
        return self._wiped

    @contextmanager
    def borrow(self) -> Iterator[bytearray]:
        if self._wiped:
            raise RuntimeError("Passphrase has already been wiped")
        lent = bytearray(self._buffer)
        try:
            yield lent
        finally:
            wipe(lent)

    def wipe(self) -> None:
        wipe(self._buffer)
        self._wiped = True

    def __len__(self) -> int:
        return len(self._buffer)

    def __enter__(self) -> "SecretPassphrase":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __repr__(self) -> str:
        state = "wiped" if self._wiped else "***"
        return f"SecretPassphrase({state})"
