# PATHCRYPT FILE PROTECTION TOOLKIT ->

import os as _os_module

from . import secret as _secret


class pathcrypt:
    import concurrent.futures
    import dataclasses
    import enum
    import fnmatch
    import os
    import pathlib
    import secrets
    import shutil
    import socket
    import string
    import subprocess
    import sys
    import tempfile
    import threading
    import typing
    import colorama
    colorama.init()
    from cryptography.hazmat.primitives import hashes, padding
    from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
    from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

    SecretPassphrase = _secret.SecretPassphrase
    PassphraseUnavailable = _secret.PassphraseUnavailable

    @staticmethod
    def _env_int(name: str) -> "pathcrypt.typing.Optional[int]":
        value = _os_module.getenv(name)
        if not value:
            return None
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            return None
        if parsed <= 0:
            return None
        return parsed

    @staticmethod
    def _env_flag(name: str) -> bool:
        return _os_module.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}

    VERSION = "1.2.0"
    SALT_LEN = 32
    IV_LEN = 16
    KEY_LEN = 32  # AES-256
    PBKDF2_ITERATIONS = 100_000
    BLOCK_BITS = 128
    MIN_ENVELOPE_LEN = SALT_LEN + IV_LEN + BLOCK_BITS // 8
    ENC_SUFFIX = ".enc"
    DEC_SUFFIX = ".dec"
    TEMP_PREFIX = ".pathcrypt-"
    DECRYPT_FAILURE_MESSAGE = "decryption failed: invalid password or corrupted file"
    PASSWORD_ENV = _secret.SecretPassphrase.ENV_VAR
    WORKERS = _env_int("PATHCRYPT_WORKERS") or 1
    SILENT = _env_flag("PATHCRYPT_SILENT")
    FFMPEG_BINARY = os.getenv("PATHCRYPT_FFMPEG", "ffmpeg")
    BINARY_SNIFF_BYTES = 8 * 1024
    _CPU_COUNT = max(1, os.cpu_count() or 1)

    # ---------- Errors ----------------------------------------------------

    class PathcryptError(Exception):
        """Base class for errors raised by pathcrypt."""

    class MalformedEnvelope(PathcryptError, ValueError):
        """The byte stream is too short to hold salt, IV and one cipher block."""

    class DecryptionFailed(PathcryptError, ValueError):
        """Wrong passphrase or corrupted ciphertext. Carries no low-level detail."""

    class AllCharactersExcluded(PathcryptError, ValueError):
        """Every candidate character was disabled or excluded."""

    class TranscoderUnavailable(PathcryptError, RuntimeError):
        """The external video encoder could not be found."""

    class ErrorKind(enum.Enum):
        PATH_NOT_FOUND = "path-not-found"
        OUTPUT_EXISTS = "output-exists"
        OUTPUT_COLLISION = "output-collision"
        MALFORMED_ENVELOPE = "malformed-envelope"
        DECRYPTION_FAILED = "decryption-failed"
        IO_FAILURE = "io-failure"

    class Outcome(enum.Enum):
        SUCCESS = "success"
        SKIPPED_EXISTS = "skipped-exists"
        DRY_RUN = "dry-run"
        FAILED = "failed"

    # ---------- Records ---------------------------------------------------

    @dataclasses.dataclass(frozen=True)
    class Envelope:
        salt: bytes
        iv: bytes
        ciphertext: bytes

    @dataclasses.dataclass(frozen=True)
    class FileResult:
        """Outcome of one file in a protect/unprotect batch."""

        source: "pathcrypt.pathlib.Path"
        output: "pathcrypt.typing.Optional[pathcrypt.pathlib.Path]"
        outcome: "pathcrypt.Outcome"
        error: "pathcrypt.typing.Optional[pathcrypt.ErrorKind]" = None
        detail: "pathcrypt.typing.Optional[str]" = None

        @property
        def success(self) -> bool:
            return self.outcome is pathcrypt.Outcome.SUCCESS

        @property
        def failed(self) -> bool:
            return self.outcome is pathcrypt.Outcome.FAILED

        def status(self) -> str:
            if self.outcome is pathcrypt.Outcome.SUCCESS:
                return "SUCCESS!"
            if self.outcome is pathcrypt.Outcome.SKIPPED_EXISTS:
                return f"SKIPPED (exists: {self.output})"
            if self.outcome is pathcrypt.Outcome.DRY_RUN:
                return f"DRY-RUN -> {self.output}"
            return f"FAIL! {self.detail or self.error.value}"

    @dataclasses.dataclass(frozen=True)
    class LineEndingResult:
        path: "pathcrypt.pathlib.Path"
        changed: bool = False
        skipped_reason: "pathcrypt.typing.Optional[str]" = None
        error: "pathcrypt.typing.Optional[str]" = None

        def status(self) -> str:
            if self.error:
                return f"FAIL! {self.error}"
            if self.skipped_reason:
                return f"SKIPPED ({self.skipped_reason})"
            return "CONVERTED" if self.changed else "UNCHANGED"

    @dataclasses.dataclass(frozen=True)
    class PortResult:
        host: str
        port: int
        open: bool
        error: "pathcrypt.typing.Optional[str]" = None

    @dataclasses.dataclass(frozen=True)
    class _Target:
        source: "pathcrypt.pathlib.Path"
        base: "pathcrypt.typing.Optional[pathcrypt.pathlib.Path]" = None
        missing: bool = False
        error: "pathcrypt.typing.Optional[str]" = None

    # ---------- Status output ---------------------------------------------

    class _StatusReporter:
        """One line per processed file on stderr, plus a closing summary."""

        def __init__(self, silent: bool = False, stream=None):
            self.silent = silent
            self.stream = stream or pathcrypt.sys.stderr
            self._lock = pathcrypt.threading.Lock()
            self._is_tty = bool(getattr(self.stream, "isatty", lambda: False)())

        def _paint(self, text: str, color: str) -> str:
            if not self._is_tty:
                return text
            return f"{color}{text}{pathcrypt.colorama.Style.RESET_ALL}"

        def _emit(self, line: str) -> None:
            if self.silent:
                return
            with self._lock:
                try:
                    self.stream.write(line + "\n")
                    self.stream.flush()
                except (OSError, ValueError):
                    pass

        def record(self, result: "pathcrypt.FileResult") -> None:
            Fore = pathcrypt.colorama.Fore
            outcome = result.outcome
            if outcome is pathcrypt.Outcome.SUCCESS:
                tag = self._paint("[ok]", Fore.GREEN)
                self._emit(f"{tag} {result.source} -> {result.output}")
            elif outcome is pathcrypt.Outcome.SKIPPED_EXISTS:
                tag = self._paint("[skip]", Fore.YELLOW)
                self._emit(f"{tag} {result.source}: output exists ({result.output}), use force to overwrite")
            elif outcome is pathcrypt.Outcome.DRY_RUN:
                tag = self._paint("[dry-run]", Fore.CYAN)
                self._emit(f"{tag} {result.source} -> {result.output}")
            else:
                tag = self._paint("[fail]", Fore.RED)
                self._emit(f"{tag} {result.source}: {result.detail}")

        def warn(self, message: str) -> None:
            self._emit(f"{self._paint('[warn]', pathcrypt.colorama.Fore.YELLOW)} {message}")

        def summary(self, results: "pathcrypt.typing.Sequence[pathcrypt.FileResult]") -> None:
            succeeded = sum(1 for r in results if r.outcome is pathcrypt.Outcome.SUCCESS)
            skipped = sum(1 for r in results if r.outcome is pathcrypt.Outcome.SKIPPED_EXISTS)
            planned = sum(1 for r in results if r.outcome is pathcrypt.Outcome.DRY_RUN)
            failed = sum(1 for r in results if r.outcome is pathcrypt.Outcome.FAILED)
            line = f"{succeeded} succeeded, {skipped} skipped, {failed} failed"
            if planned:
                line += f", {planned} planned (dry run)"
            self._emit(line)

    # ---------- Key derivation, envelope, cipher ---------------------------

    @staticmethod
    def derive_key(
        passphrase: "pathcrypt.typing.Union[bytes, bytearray, memoryview]",
        salt: bytes,
        iterations: "pathcrypt.typing.Optional[int]" = None
    ) -> bytearray:
        """
        PBKDF2-HMAC-SHA256 -> 32-byte key.

        The iteration count and hash must match on both paths; a mismatch shows
        up later as a padding failure, not as a parameter error.
        """
        iterations = pathcrypt.PBKDF2_ITERATIONS if iterations is None else iterations
        if not salt:
            raise ValueError("salt must not be empty")
        if iterations < 1:
            raise ValueError("iterations must be positive")
        kdf = pathcrypt.PBKDF2HMAC(
            algorithm=pathcrypt.hashes.SHA256(),
            length=pathcrypt.KEY_LEN,
            salt=bytes(salt),
            iterations=iterations
        )
        return bytearray(kdf.derive(passphrase))

    @staticmethod
    def encode_envelope(salt: bytes, iv: bytes, ciphertext: bytes) -> bytes:
        if len(salt) != pathcrypt.SALT_LEN:
            raise ValueError(f"salt must be {pathcrypt.SALT_LEN} bytes")
        if len(iv) != pathcrypt.IV_LEN:
            raise ValueError(f"iv must be {pathcrypt.IV_LEN} bytes")
        return bytes(salt) + bytes(iv) + bytes(ciphertext)

    @staticmethod
    def decode_envelope(blob: bytes) -> "pathcrypt.Envelope":
        data = bytes(blob)
        if len(data) < pathcrypt.MIN_ENVELOPE_LEN:
            raise pathcrypt.MalformedEnvelope(
                f"encrypted data is {len(data)} bytes, minimum is {pathcrypt.MIN_ENVELOPE_LEN}"
            )
        iv_end = pathcrypt.SALT_LEN + pathcrypt.IV_LEN
        return pathcrypt.Envelope(
            salt=data[:pathcrypt.SALT_LEN],
            iv=data[pathcrypt.SALT_LEN:iv_end],
            ciphertext=data[iv_end:]
        )

    @staticmethod
    def encrypt_bytes(key: "pathcrypt.typing.Union[bytes, bytearray]", iv: bytes, plaintext: bytes) -> bytes:
        padder = pathcrypt.padding.PKCS7(pathcrypt.BLOCK_BITS).padder()
        padded = padder.update(bytes(plaintext)) + padder.finalize()
        encryptor = pathcrypt.Cipher(pathcrypt.algorithms.AES(key), pathcrypt.modes.CBC(iv)).encryptor()
        return encryptor.update(padded) + encryptor.finalize()

    @staticmethod
    def decrypt_bytes(key: "pathcrypt.typing.Union[bytes, bytearray]", iv: bytes, ciphertext: bytes) -> bytes:
        failed = False
        try:
            decryptor = pathcrypt.Cipher(pathcrypt.algorithms.AES(key), pathcrypt.modes.CBC(iv)).decryptor()
            padded = decryptor.update(bytes(ciphertext)) + decryptor.finalize()
            unpadder = pathcrypt.padding.PKCS7(pathcrypt.BLOCK_BITS).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
        except ValueError:
            failed = True
        # raised outside the handler so the padding error is not chained
        if failed:
            raise pathcrypt.DecryptionFailed(pathcrypt.DECRYPT_FAILURE_MESSAGE)
        return plaintext

    @staticmethod
    def _coerce_secret(
        passphrase
    ) -> "pathcrypt.typing.Tuple[pathcrypt.SecretPassphrase, bool]":
        if isinstance(passphrase, pathcrypt.SecretPassphrase):
            return passphrase, False
        return pathcrypt.SecretPassphrase(passphrase), True

    @staticmethod
    def protect_bytes(plaintext: bytes, passphrase) -> bytes:
        """Encrypt ``plaintext`` into a fresh salt || iv || ciphertext envelope."""
        secret, owned = pathcrypt._coerce_secret(passphrase)
        salt = pathcrypt.os.urandom(pathcrypt.SALT_LEN)
        iv = pathcrypt.os.urandom(pathcrypt.IV_LEN)
        key = None
        try:
            with secret.borrow() as pw:
                key = pathcrypt.derive_key(pw, salt)
            ciphertext = pathcrypt.encrypt_bytes(key, iv, plaintext)
        finally:
            _secret.wipe(key)
            if owned:
                secret.wipe()
        return pathcrypt.encode_envelope(salt, iv, ciphertext)

    @staticmethod
    def unprotect_bytes(blob: bytes, passphrase) -> bytes:
        envelope = pathcrypt.decode_envelope(blob)
        secret, owned = pathcrypt._coerce_secret(passphrase)
        key = None
        try:
            with secret.borrow() as pw:
                key = pathcrypt.derive_key(pw, envelope.salt)
            return pathcrypt.decrypt_bytes(key, envelope.iv, envelope.ciphertext)
        finally:
            _secret.wipe(key)
            if owned:
                secret.wipe()

    # ---------- Filesystem helpers ----------------------------------------

    @staticmethod
    def _normalize_path(path_like: "pathcrypt.typing.Union[str, pathcrypt.pathlib.Path]") -> "pathcrypt.pathlib.Path":
        if isinstance(path_like, pathcrypt.pathlib.Path):
            path = path_like
        else:
            path = pathcrypt.pathlib.Path(str(path_like))
        path = path.expanduser()
        try:
            return path.resolve(strict=False)
        except (OSError, RuntimeError):
            return path

    @staticmethod
    def _coerce_path_list(paths) -> "pathcrypt.typing.List[pathcrypt.pathlib.Path]":
        if isinstance(paths, (str, pathcrypt.pathlib.Path)):
            candidates = [paths]
        else:
            candidates = list(paths)
        if not candidates:
            raise ValueError("No paths provided")
        return [pathcrypt._normalize_path(item) for item in candidates]

    @staticmethod
    def _name_selected(
        name: str,
        include: "pathcrypt.typing.Optional[pathcrypt.typing.Sequence[str]]",
        exclude: "pathcrypt.typing.Optional[pathcrypt.typing.Sequence[str]]"
    ) -> bool:
        # case-insensitive on every platform, like the .enc suffix handling
        folded = name.lower()
        if include and not any(pathcrypt.fnmatch.fnmatchcase(folded, pat.lower()) for pat in include):
            return False
        if exclude and any(pathcrypt.fnmatch.fnmatchcase(folded, pat.lower()) for pat in exclude):
            return False
        return True

    @staticmethod
    def _collect_targets(
        paths,
        *,
        recurse: bool = False,
        include=None,
        exclude=None
    ) -> "pathcrypt.typing.List[pathcrypt._Target]":
        targets: "pathcrypt.typing.List[pathcrypt._Target]" = []
        for path in pathcrypt._coerce_path_list(paths):
            try:
                if not path.exists():
                    targets.append(pathcrypt._Target(path, missing=True))
                    continue
                if not path.is_dir():
                    targets.append(pathcrypt._Target(path))
                    continue
                found = []
                children = path.rglob("*") if recurse else path.iterdir()
                for child in sorted(children):
                    if not child.is_file() or child.name.startswith(pathcrypt.TEMP_PREFIX):
                        continue
                    if pathcrypt._name_selected(child.name, include, exclude):
                        found.append(pathcrypt._Target(child, base=path))
            except OSError as exc:
                targets.append(pathcrypt._Target(path, error=f"cannot read input: {exc}"))
                continue
            targets.extend(found)
        return targets

    @staticmethod
    def _encrypted_name(name: str) -> str:
        return name + pathcrypt.ENC_SUFFIX

    @staticmethod
    def _decrypted_name(name: str) -> str:
        suffix = pathcrypt.ENC_SUFFIX
        if name.lower().endswith(suffix) and len(name) > len(suffix):
            return name[:-len(suffix)]
        return name + pathcrypt.DEC_SUFFIX

    @staticmethod
    def _output_is_directory(output: "pathcrypt.typing.Optional[str]", targets) -> bool:
        if output is None:
            return False
        text = str(output)
        if text.endswith(("/", pathcrypt.os.sep)):
            return True
        if pathcrypt._normalize_path(output).is_dir():
            return True
        live = [t for t in targets if not t.missing and t.error is None]
        return len(live) > 1 or any(t.base is not None for t in live)

    @staticmethod
    def _output_path(
        target: "pathcrypt._Target",
        rename: "pathcrypt.typing.Callable[[str], str]",
        output=None,
        output_is_dir: bool = False
    ) -> "pathcrypt.pathlib.Path":
        source = target.source
        if output is None:
            return source.with_name(rename(source.name))
        out = pathcrypt._normalize_path(output)
        if not output_is_dir:
            return out
        if target.base is not None:
            rel = source.relative_to(target.base)
        else:
            rel = pathcrypt.pathlib.Path(source.name)
        return out / rel.parent / rename(rel.name)

    @staticmethod
    def _unlink_quiet(path: "pathcrypt.pathlib.Path") -> None:
        try:
            path.unlink()
        except OSError:
            pass

    @staticmethod
    def _atomic_write(
        path: "pathcrypt.pathlib.Path",
        data: bytes,
        *,
        overwrite: bool = False,
        mode_from: "pathcrypt.typing.Optional[pathcrypt.pathlib.Path]" = None
    ) -> None:
        """Write through a temp file in the target directory, then rename into place."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = pathcrypt.tempfile.mkstemp(
            prefix=pathcrypt.TEMP_PREFIX, suffix=".tmp", dir=str(path.parent)
        )
        tmp_path = pathcrypt.pathlib.Path(tmp_name)
        try:
            with pathcrypt.os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                pathcrypt.os.fsync(handle.fileno())
            if mode_from is not None:
                pathcrypt.shutil.copymode(mode_from, tmp_path)
            if not overwrite and path.exists():
                raise FileExistsError(f"Output already exists: {path}")
            pathcrypt.os.replace(tmp_path, path)
        except BaseException:
            pathcrypt._unlink_quiet(tmp_path)
            raise

    # ---------- File orchestration ----------------------------------------

    @staticmethod
    def _failed(source, output, kind: "pathcrypt.ErrorKind", detail: str) -> "pathcrypt.FileResult":
        return pathcrypt.FileResult(source, output, pathcrypt.Outcome.FAILED, kind, detail)

    @staticmethod
    def _process_file(
        source: "pathcrypt.pathlib.Path",
        output: "pathcrypt.pathlib.Path",
        transform: "pathcrypt.typing.Callable[[bytes], bytes]",
        *,
        force: bool,
        remove_source: bool,
        dry_run: bool
    ) -> "pathcrypt.FileResult":
        try:
            exists = output.exists()
        except OSError as exc:
            return pathcrypt._failed(
                source, output, pathcrypt.ErrorKind.IO_FAILURE, f"cannot check output: {exc}"
            )
        if exists and not force:
            return pathcrypt.FileResult(
                source, output, pathcrypt.Outcome.SKIPPED_EXISTS, pathcrypt.ErrorKind.OUTPUT_EXISTS,
                "output exists"
            )
        if dry_run:
            return pathcrypt.FileResult(source, output, pathcrypt.Outcome.DRY_RUN)
        try:
            data = source.read_bytes()
        except OSError as exc:
            return pathcrypt._failed(source, output, pathcrypt.ErrorKind.IO_FAILURE, f"read failed: {exc}")
        try:
            payload = transform(data)
        except pathcrypt.MalformedEnvelope as exc:
            return pathcrypt._failed(source, output, pathcrypt.ErrorKind.MALFORMED_ENVELOPE, str(exc))
        except pathcrypt.DecryptionFailed:
            return pathcrypt._failed(
                source, output, pathcrypt.ErrorKind.DECRYPTION_FAILED, pathcrypt.DECRYPT_FAILURE_MESSAGE
            )
        try:
            pathcrypt._atomic_write(output, payload, overwrite=force)
        except FileExistsError:
            return pathcrypt.FileResult(
                source, output, pathcrypt.Outcome.SKIPPED_EXISTS, pathcrypt.ErrorKind.OUTPUT_EXISTS,
                "output exists"
            )
        except OSError as exc:
            return pathcrypt._failed(source, output, pathcrypt.ErrorKind.IO_FAILURE, f"write failed: {exc}")
        if remove_source:
            try:
                source.unlink()
            except FileNotFoundError:
                pass
            except OSError as exc:
                return pathcrypt._failed(
                    source, output, pathcrypt.ErrorKind.IO_FAILURE,
                    f"output written but source could not be removed: {exc}"
                )
        return pathcrypt.FileResult(source, output, pathcrypt.Outcome.SUCCESS)

    @staticmethod
    def _run_batch(
        paths,
        passphrase,
        *,
        encrypt: bool,
        output=None,
        recurse: bool = False,
        force: bool = False,
        remove_source: bool = False,
        dry_run: bool = False,
        include=None,
        exclude=None,
        workers: "pathcrypt.typing.Optional[int]" = None,
        silent: "pathcrypt.typing.Optional[bool]" = None
    ) -> "pathcrypt.typing.List[pathcrypt.FileResult]":
        silent = pathcrypt.SILENT if silent is None else silent
        reporter = pathcrypt._StatusReporter(silent=silent)
        # directory walks pick up .enc files only on decrypt and skip them on encrypt
        enc_pattern = "*" + pathcrypt.ENC_SUFFIX
        if encrypt and exclude is None:
            exclude = [enc_pattern]
        if not encrypt and include is None:
            include = [enc_pattern]
        rename = pathcrypt._encrypted_name if encrypt else pathcrypt._decrypted_name
        targets = pathcrypt._collect_targets(paths, recurse=recurse, include=include, exclude=exclude)
        output_is_dir = pathcrypt._output_is_directory(output, targets)

        results: "pathcrypt.typing.List[pathcrypt.typing.Optional[pathcrypt.FileResult]]" = [None] * len(targets)
        jobs: "pathcrypt.typing.List[pathcrypt.typing.Tuple[int, pathcrypt.pathlib.Path, pathcrypt.pathlib.Path]]" = []
        claimed: "dict[pathcrypt.pathlib.Path, pathcrypt.pathlib.Path]" = {}
        sources = {t.source for t in targets if not t.missing and t.error is None}
        for idx, target in enumerate(targets):
            if target.missing:
                results[idx] = pathcrypt._failed(
                    target.source, None, pathcrypt.ErrorKind.PATH_NOT_FOUND, f"path not found: {target.source}"
                )
                continue
            if target.error is not None:
                results[idx] = pathcrypt._failed(
                    target.source, None, pathcrypt.ErrorKind.IO_FAILURE, target.error
                )
                continue
            out_path = pathcrypt._output_path(target, rename, output, output_is_dir)
            if out_path == target.source or (force and out_path in sources):
                results[idx] = pathcrypt._failed(
                    target.source, out_path, pathcrypt.ErrorKind.OUTPUT_COLLISION,
                    f"output path {out_path} is also an input of this run"
                )
                continue
            if out_path in claimed:
                results[idx] = pathcrypt._failed(
                    target.source, out_path, pathcrypt.ErrorKind.OUTPUT_COLLISION,
                    f"output path {out_path} already claimed by {claimed[out_path]}"
                )
                continue
            claimed[out_path] = target.source
            jobs.append((idx, target.source, out_path))

        secret = None
        owned = False
        if jobs and not dry_run:
            if isinstance(passphrase, pathcrypt.SecretPassphrase):
                secret = passphrase
            else:
                secret = pathcrypt.SecretPassphrase.resolve(passphrase, confirm=encrypt)
                owned = True

        def _transform(data: bytes) -> bytes:
            if encrypt:
                return pathcrypt.protect_bytes(data, secret)
            return pathcrypt.unprotect_bytes(data, secret)

        def _run(job) -> "pathcrypt.typing.Tuple[int, pathcrypt.FileResult]":
            idx, source, out_path = job
            result = pathcrypt._process_file(
                source, out_path, _transform, force=force, remove_source=remove_source, dry_run=dry_run
            )
            return idx, result

        try:
            max_workers = min(len(jobs), workers or pathcrypt.WORKERS, pathcrypt._CPU_COUNT * 4)
            if max_workers > 1:
                executor = pathcrypt.concurrent.futures.ThreadPoolExecutor(max_workers=max_workers)
                shutdown_now = False
                try:
                    futures = [executor.submit(_run, job) for job in jobs]
                    for future in pathcrypt.concurrent.futures.as_completed(futures):
                        idx, result = future.result()
                        results[idx] = result
                        reporter.record(result)
                except KeyboardInterrupt:
                    shutdown_now = True
                    raise
                finally:
                    executor.shutdown(wait=not shutdown_now, cancel_futures=True)
            else:
                for job in jobs:
                    idx, result = _run(job)
                    results[idx] = result
                    reporter.record(result)
        finally:
            if owned and secret is not None:
                secret.wipe()

        queued = {job[0] for job in jobs}
        for idx, result in enumerate(results):
            if idx not in queued and result is not None:
                reporter.record(result)
        final = [r for r in results if r is not None]
        if not final:
            reporter.warn("no matching files found")
        reporter.summary(final)
        return final

    @staticmethod
    def protect_path(
        paths,
        passphrase=None,
        *,
        output=None,
        recurse: bool = False,
        force: bool = False,
        remove_original: bool = False,
        dry_run: bool = False,
        include=None,
        exclude=None,
        workers: "pathcrypt.typing.Optional[int]" = None,
        silent: "pathcrypt.typing.Optional[bool]" = None
    ) -> "pathcrypt.typing.List[pathcrypt.FileResult]":
        """
        Encrypt every file under ``paths`` into ``<name>.enc``.

        One result per file; a failure never stops the rest of the batch. The
        source is only deleted when ``remove_original`` is set and the file
        was written successfully.
        """
        return pathcrypt._run_batch(
            paths,
            passphrase,
            encrypt=True,
            output=output,
            recurse=recurse,
            force=force,
            remove_source=remove_original,
            dry_run=dry_run,
            include=include,
            exclude=exclude,
            workers=workers,
            silent=silent
        )

    @staticmethod
    def unprotect_path(
        paths,
        passphrase=None,
        *,
        output=None,
        recurse: bool = False,
        force: bool = False,
        keep_encrypted: bool = False,
        dry_run: bool = False,
        include=None,
        exclude=None,
        workers: "pathcrypt.typing.Optional[int]" = None,
        silent: "pathcrypt.typing.Optional[bool]" = None
    ) -> "pathcrypt.typing.List[pathcrypt.FileResult]":
        """
        Decrypt ``.enc`` files. Outputs drop the ``.enc`` suffix (or gain
        ``.dec`` when there is none); the encrypted file is removed after a
        successful decrypt unless ``keep_encrypted`` is set.
        """
        return pathcrypt._run_batch(
            paths,
            passphrase,
            encrypt=False,
            output=output,
            recurse=recurse,
            force=force,
            remove_source=not keep_encrypted,
            dry_run=dry_run,
            include=include,
            exclude=exclude,
            workers=workers,
            silent=silent
        )

    # ---------- Random strings --------------------------------------------

    @staticmethod
    def generate_random_string(
        length: int = 16,
        *,
        lowercase: bool = True,
        uppercase: bool = True,
        digits: bool = True,
        symbols: bool = True,
        exclude: str = ""
    ) -> str:
        """Generates a random string of the specified length."""

        if length < 1:
            raise ValueError("length must be at least 1")
        pools = []
        if lowercase:
            pools.append(pathcrypt.string.ascii_lowercase)
        if uppercase:
            pools.append(pathcrypt.string.ascii_uppercase)
        if digits:
            pools.append(pathcrypt.string.digits)
        if symbols:
            pools.append(pathcrypt.string.punctuation)
        banned = set(exclude or "")
        alphabet = "".join(ch for ch in "".join(pools) if ch not in banned)
        if not alphabet:
            raise pathcrypt.AllCharactersExcluded("No characters left to choose from after exclusions")
        return ''.join(pathcrypt.secrets.choice(alphabet) for _ in range(length))

    # ---------- Line endings ----------------------------------------------

    class LineEndings:
        STYLES = {"lf": b"\n", "crlf": b"\r\n"}

        @staticmethod
        def looks_binary(data: bytes) -> bool:
            return b"\x00" in data[:pathcrypt.BINARY_SNIFF_BYTES]

        @staticmethod
        def rewrite(data: bytes, style: str) -> bytes:
            if style not in pathcrypt.LineEndings.STYLES:
                raise ValueError(f"Unsupported line ending style '{style}'")
            unified = data.replace(b"\r\n", b"\n")
            if style == "crlf":
                return unified.replace(b"\n", b"\r\n")
            return unified

        @staticmethod
        def convert(
            paths,
            style: str = "lf",
            *,
            recurse: bool = False,
            include=None,
            exclude=None,
            dry_run: bool = False
        ) -> "pathcrypt.typing.List[pathcrypt.LineEndingResult]":
            style = style.lower()
            if style not in pathcrypt.LineEndings.STYLES:
                raise ValueError(f"Unsupported line ending style '{style}'")
            results = []
            targets = pathcrypt._collect_targets(paths, recurse=recurse, include=include, exclude=exclude)
            for target in targets:
                path = target.source
                if target.missing:
                    results.append(pathcrypt.LineEndingResult(path, error=f"path not found: {path}"))
                    continue
                if target.error is not None:
                    results.append(pathcrypt.LineEndingResult(path, error=target.error))
                    continue
                try:
                    data = path.read_bytes()
                except OSError as exc:
                    results.append(pathcrypt.LineEndingResult(path, error=f"read failed: {exc}"))
                    continue
                if pathcrypt.LineEndings.looks_binary(data):
                    results.append(pathcrypt.LineEndingResult(path, skipped_reason="binary"))
                    continue
                converted = pathcrypt.LineEndings.rewrite(data, style)
                if converted == data:
                    results.append(pathcrypt.LineEndingResult(path))
                    continue
                if not dry_run:
                    try:
                        pathcrypt._atomic_write(path, converted, overwrite=True, mode_from=path)
                    except OSError as exc:
                        results.append(pathcrypt.LineEndingResult(path, error=f"write failed: {exc}"))
                        continue
                results.append(pathcrypt.LineEndingResult(path, changed=True))
            return results

    # ---------- Video transcoding -----------------------------------------

    class MediaTranscoder:
        # codec -> (ffmpeg encoder, default crf, default preset)
        CODECS = {
            "h264": ("libx264", 23, "medium"),
            "h265": ("libx265", 28, "medium"),
            "av1": ("libsvtav1", 30, "8"),
        }
        DEFAULT_AUDIO_BITRATE = "160k"

        @staticmethod
        def _ensure_ffmpeg(binary: "pathcrypt.typing.Optional[str]" = None) -> str:
            binary = binary or pathcrypt.FFMPEG_BINARY
            resolved = pathcrypt.shutil.which(binary)
            if not resolved:
                raise pathcrypt.TranscoderUnavailable(f"{binary} is required for video transcoding")
            return resolved

        @staticmethod
        def default_output(source, codec: str = "h265") -> "pathcrypt.pathlib.Path":
            path = pathcrypt._normalize_path(source)
            return path.with_name(f"{path.stem}.{codec}.mp4")

        @staticmethod
        def build_args(
            source,
            output,
            codec: str = "h265",
            *,
            crf: "pathcrypt.typing.Optional[int]" = None,
            preset: "pathcrypt.typing.Optional[str]" = None,
            audio_bitrate: "pathcrypt.typing.Optional[str]" = None,
            copy_audio: bool = True,
            overwrite: bool = False,
            binary: "pathcrypt.typing.Optional[str]" = None
        ) -> "list[str]":
            codec = codec.lower()
            if codec not in pathcrypt.MediaTranscoder.CODECS:
                raise ValueError(f"Unsupported codec '{codec}'")
            encoder, default_crf, default_preset = pathcrypt.MediaTranscoder.CODECS[codec]
            crf = default_crf if crf is None else int(crf)
            if not 0 <= crf <= 63:
                raise ValueError("crf must be between 0 and 63")
            cmd = [
                binary or pathcrypt.FFMPEG_BINARY, "-hide_banner",
                "-y" if overwrite else "-n",
                "-i", str(source),
                "-map", "0:v:0", "-map", "0:a?",
                "-c:v", encoder, "-crf", str(crf), "-preset", preset or default_preset,
            ]
            if codec == "h265":
                cmd += ["-tag:v", "hvc1"]
            if copy_audio and audio_bitrate is None:
                cmd += ["-c:a", "copy"]
            else:
                cmd += ["-c:a", "aac", "-b:a", audio_bitrate or pathcrypt.MediaTranscoder.DEFAULT_AUDIO_BITRATE]
            cmd += ["-movflags", "+faststart", str(output)]
            return cmd

        @staticmethod
        def transcode(
            source,
            output=None,
            codec: str = "h265",
            *,
            crf: "pathcrypt.typing.Optional[int]" = None,
            preset: "pathcrypt.typing.Optional[str]" = None,
            audio_bitrate: "pathcrypt.typing.Optional[str]" = None,
            copy_audio: bool = True,
            force: bool = False
        ) -> "pathcrypt.pathlib.Path":
            src = pathcrypt._normalize_path(source)
            if not src.is_file():
                raise FileNotFoundError(f"Input file not found: {src}")
            out = pathcrypt._normalize_path(output) if output else pathcrypt.MediaTranscoder.default_output(src, codec)
            if out == src:
                raise ValueError("Output must differ from the input file")
            if out.exists() and not force:
                raise FileExistsError(f"Output already exists: {out}")
            binary = pathcrypt.MediaTranscoder._ensure_ffmpeg()
            cmd = pathcrypt.MediaTranscoder.build_args(
                src, out, codec,
                crf=crf, preset=preset, audio_bitrate=audio_bitrate,
                copy_audio=copy_audio, overwrite=force, binary=binary
            )
            result = pathcrypt.subprocess.run(cmd, capture_output=True, text=True)
            if result.returncode != 0:
                pathcrypt._unlink_quiet(out)
                raise RuntimeError(result.stderr.strip() or "ffmpeg failed")
            return out

    # ---------- Network / system ------------------------------------------

    @staticmethod
    def _check_port(port: int) -> int:
        port = int(port)
        if not 1 <= port <= 65535:
            raise ValueError(f"Port out of range: {port}")
        return port

    @staticmethod
    def test_port(host: str, port: int, timeout: float = 2.0) -> "pathcrypt.PortResult":
        port = pathcrypt._check_port(port)
        try:
            with pathcrypt.socket.create_connection((host, port), timeout=timeout):
                return pathcrypt.PortResult(host, port, True)
        except pathcrypt.socket.gaierror as exc:
            return pathcrypt.PortResult(host, port, False, f"name resolution failed: {exc}")
        except OSError as exc:
            return pathcrypt.PortResult(host, port, False, str(exc) or type(exc).__name__)

    @staticmethod
    def tcp_request(
        host: str,
        port: int,
        payload: "pathcrypt.typing.Union[str, bytes]" = b"",
        timeout: float = 5.0,
        max_bytes: int = 65536
    ) -> bytes:
        port = pathcrypt._check_port(port)
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        chunks = []
        received = 0
        with pathcrypt.socket.create_connection((host, port), timeout=timeout) as sock:
            if payload:
                sock.sendall(payload)
            try:
                sock.shutdown(pathcrypt.socket.SHUT_WR)
            except OSError:
                pass
            while received < max_bytes:
                chunk = sock.recv(min(4096, max_bytes - received))
                if not chunk:
                    break
                chunks.append(chunk)
                received += len(chunk)
        return b"".join(chunks)

    @staticmethod
    def is_admin() -> bool:
        if pathcrypt.os.name == "nt":
            import ctypes
            try:
                return bool(ctypes.windll.shell32.IsUserAnAdmin())
            except (AttributeError, OSError):
                return False
        return pathcrypt.os.geteuid() == 0


def _add_batch_arguments(parser, *, encrypt: bool) -> None:
    parser.add_argument(
        "paths",
        nargs='+',
        help="One or more files or directories"
    )
    parser.add_argument(
        "-p", "--password",
        default=None,
        help=f"Passphrase text (falls back to --password-file, ${pathcrypt.PASSWORD_ENV}, then a prompt)"
    )
    parser.add_argument(
        "--password-file",
        default=None,
        help="Read the passphrase from the first line of this file"
    )
    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Output file (single input) or directory"
    )
    parser.add_argument(
        "-r", "--recurse",
        action="store_true",
        help="Descend into sub-directories"
    )
    parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Overwrite existing output files"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would happen without touching the filesystem"
    )
    parser.add_argument(
        "--include",
        action="append",
        default=None,
        help="Name pattern to include when walking directories (repeatable)"
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        help="Name pattern to exclude when walking directories (repeatable)"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of files processed in parallel"
    )
    parser.add_argument(
        "--silent",
        action="store_true",
        default=None,
        help="Suppress per-file status lines on stderr"
    )
    if encrypt:
        parser.add_argument(
            "--remove-original",
            action="store_true",
            help="Delete each source file after it was encrypted successfully"
        )
    else:
        parser.add_argument(
            "--keep-encrypted",
            action="store_true",
            help="Keep the .enc file after a successful decrypt"
        )


def _print_results(results) -> int:
    failures = 0
    for result in results:
        print(f"{result.source}: {result.status()}")
        if result.failed:
            failures += 1
    return 0 if failures == 0 else 1


def cli(argv=None) -> int:
    import argparse

    parser = argparse.ArgumentParser(prog="pathcrypt", description="Password-based file protection toolkit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {pathcrypt.VERSION}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    protect = subparsers.add_parser("protect", help="Encrypt files with a passphrase")
    _add_batch_arguments(protect, encrypt=True)
    unprotect = subparsers.add_parser("unprotect", help="Decrypt .enc files")
    _add_batch_arguments(unprotect, encrypt=False)

    rnd = subparsers.add_parser("random-string", help="Print random strings")
    rnd.add_argument("-n", "--length", type=int, default=16)
    rnd.add_argument("--count", type=int, default=1)
    rnd.add_argument("--no-lower", dest="lowercase", action="store_false")
    rnd.add_argument("--no-upper", dest="uppercase", action="store_false")
    rnd.add_argument("--no-digits", dest="digits", action="store_false")
    rnd.add_argument("--no-symbols", dest="symbols", action="store_false")
    rnd.add_argument("--exclude", default="", help="Characters never to use")

    eol = subparsers.add_parser("line-endings", help="Convert text files to LF or CRLF")
    eol.add_argument("paths", nargs='+')
    eol.add_argument("--style", choices=sorted(pathcrypt.LineEndings.STYLES), default="lf")
    eol.add_argument("-r", "--recurse", action="store_true")
    eol.add_argument("--include", action="append", default=None)
    eol.add_argument("--exclude", action="append", default=None)
    eol.add_argument("--dry-run", action="store_true")

    media = subparsers.add_parser("transcode", help="Re-encode a video with ffmpeg")
    media.add_argument("input")
    media.add_argument("-o", "--output", default=None)
    media.add_argument("--codec", choices=sorted(pathcrypt.MediaTranscoder.CODECS), default="h265")
    media.add_argument("--crf", type=int, default=None)
    media.add_argument("--preset", default=None)
    media.add_argument(
        "--audio-bitrate",
        default=None,
        help="Re-encode audio to AAC at this bitrate instead of copying the stream"
    )
    media.add_argument("-f", "--force", action="store_true")
    media.add_argument("--dry-run", action="store_true", help="Print the ffmpeg command only")

    port = subparsers.add_parser("test-port", help="Check whether TCP ports accept connections")
    port.add_argument("host")
    port.add_argument("ports", nargs='+', type=int)
    port.add_argument("--timeout", type=float, default=2.0)

    req = subparsers.add_parser("tcp-request", help="Send data to a TCP endpoint and print the reply")
    req.add_argument("host")
    req.add_argument("port", type=int)
    req.add_argument("--data", default="")
    req.add_argument("--timeout", type=float, default=5.0)

    subparsers.add_parser("is-admin", help="Exit 0 when running with administrator/root rights")

    args = parser.parse_args(argv)

    if args.command in ("protect", "unprotect"):
        passphrase = None
        try:
            if args.password_file:
                try:
                    passphrase = pathcrypt.SecretPassphrase.from_file(args.password_file)
                except OSError as exc:
                    print(f"Failed to read password file: {exc}", file=pathcrypt.sys.stderr)
                    return 2
            elif args.password:
                passphrase = pathcrypt.SecretPassphrase(args.password)
            options = dict(
                output=args.output,
                recurse=args.recurse,
                force=args.force,
                dry_run=args.dry_run,
                include=args.include,
                exclude=args.exclude,
                workers=args.workers,
                silent=args.silent
            )
            if args.command == "protect":
                results = pathcrypt.protect_path(
                    args.paths, passphrase, remove_original=args.remove_original, **options
                )
            else:
                results = pathcrypt.unprotect_path(
                    args.paths, passphrase, keep_encrypted=args.keep_encrypted, **options
                )
        except pathcrypt.PassphraseUnavailable as exc:
            print(f"Passphrase unavailable: {exc}", file=pathcrypt.sys.stderr)
            return 2
        finally:
            if passphrase is not None:
                passphrase.wipe()
        return _print_results(results)

    if args.command == "random-string":
        try:
            for _ in range(max(1, args.count)):
                print(pathcrypt.generate_random_string(
                    args.length,
                    lowercase=args.lowercase,
                    uppercase=args.uppercase,
                    digits=args.digits,
                    symbols=args.symbols,
                    exclude=args.exclude
                ))
        except ValueError as exc:
            print(f"FAIL! {exc}", file=pathcrypt.sys.stderr)
            return 1
        return 0

    if args.command == "line-endings":
        results = pathcrypt.LineEndings.convert(
            args.paths,
            args.style,
            recurse=args.recurse,
            include=args.include,
            exclude=args.exclude,
            dry_run=args.dry_run
        )
        failures = 0
        for result in results:
            print(f"{result.path}: {result.status()}")
            if result.error:
                failures += 1
        return 0 if failures == 0 else 1

    if args.command == "transcode":
        if args.dry_run:
            import shlex
            output = args.output or pathcrypt.MediaTranscoder.default_output(args.input, args.codec)
            cmd = pathcrypt.MediaTranscoder.build_args(
                pathcrypt._normalize_path(args.input), output, args.codec,
                crf=args.crf, preset=args.preset, audio_bitrate=args.audio_bitrate,
                overwrite=args.force
            )
            print(shlex.join(cmd))
            return 0
        try:
            out = pathcrypt.MediaTranscoder.transcode(
                args.input,
                args.output,
                args.codec,
                crf=args.crf,
                preset=args.preset,
                audio_bitrate=args.audio_bitrate,
                force=args.force
            )
        except (OSError, ValueError, RuntimeError) as exc:
            print(f"{args.input}: FAIL! {exc}")
            return 1
        print(f"{args.input}: SUCCESS! -> {out}")
        return 0

    if args.command == "test-port":
        all_open = True
        for number in args.ports:
            result = pathcrypt.test_port(args.host, number, timeout=args.timeout)
            state = "OPEN" if result.open else f"CLOSED ({result.error})"
            print(f"{result.host}:{result.port}: {state}")
            all_open = all_open and result.open
        return 0 if all_open else 1

    if args.command == "tcp-request":
        try:
            reply = pathcrypt.tcp_request(args.host, args.port, args.data, timeout=args.timeout)
        except OSError as exc:
            print(f"{args.host}:{args.port}: FAIL! {exc}", file=pathcrypt.sys.stderr)
            return 1
        pathcrypt.sys.stdout.write(reply.decode("utf-8", errors="replace"))
        return 0

    if args.command == "is-admin":
        elevated = pathcrypt.is_admin()
        print("admin" if elevated else "not admin")
        return 0 if elevated else 1

    return 0


def main(argv=None) -> int:
    return cli(argv)


if __name__ == "__main__":
    raise SystemExit(main())
