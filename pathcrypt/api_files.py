"""File-oriented convenience wrappers."""

from .main import pathcrypt


def protect(
    paths,
    password=None,
    *,
    output: str | None = None,
    recurse: bool = False,
    force: bool = False,
    remove_original: bool = False,
    dry_run: bool = False,
    include=None,
    exclude=None,
    workers: int | None = None,
    silent: bool | None = None,
):
    return pathcrypt.protect_path(
        paths,
        password,
        output=output,
        recurse=recurse,
        force=force,
        remove_original=remove_original,
        dry_run=dry_run,
        include=include,
        exclude=exclude,
        workers=workers,
        silent=silent,
    )


def unprotect(
    paths,
    password=None,
    *,
    output: str | None = None,
    recurse: bool = False,
    force: bool = False,
    keep_encrypted: bool = False,
    dry_run: bool = False,
    include=None,
    exclude=None,
    workers: int | None = None,
    silent: bool | None = None,
):
    return pathcrypt.unprotect_path(
        paths,
        password,
        output=output,
        recurse=recurse,
        force=force,
        keep_encrypted=keep_encrypted,
        dry_run=dry_run,
        include=include,
        exclude=exclude,
        workers=workers,
        silent=silent,
    )


def protect_bytes(plaintext: bytes, password):
    return pathcrypt.protect_bytes(plaintext, password)


def unprotect_bytes(blob: bytes, password):
    return pathcrypt.unprotect_bytes(blob, password)


def convert_line_endings(
    paths,
    style: str = "lf",
    *,
    recurse: bool = False,
    include=None,
    exclude=None,
    dry_run: bool = False,
):
    return pathcrypt.LineEndings.convert(
        paths,
        style,
        recurse=recurse,
        include=include,
        exclude=exclude,
        dry_run=dry_run,
    )


__all__ = [
    "convert_line_endings",
    "protect",
    "protect_bytes",
    "unprotect",
    "unprotect_bytes",
]
