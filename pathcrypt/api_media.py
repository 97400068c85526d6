"""Video transcoding wrappers around ffmpeg."""

import sys

from .main import pathcrypt


def _with_friendly_interrupt(fn, *args, **kwargs):
    try:
        return fn(*args, **kwargs)
    except KeyboardInterrupt:
        print("Transcoding interrupted", file=sys.stderr)
        raise KeyboardInterrupt("Exiting...") from None


def transcode(
    path: str,
    output: str | None = None,
    codec: str = "h265",
    *,
    crf: int | None = None,
    preset: str | None = None,
    audio_bitrate: str | None = None,
    force: bool = False,
):
    return _with_friendly_interrupt(
        pathcrypt.MediaTranscoder.transcode,
        path,
        output,
        codec,
        crf=crf,
        preset=preset,
        audio_bitrate=audio_bitrate,
        force=force,
    )


def transcode_args(path: str, output: str | None = None, codec: str = "h265", **options):
    target = output or pathcrypt.MediaTranscoder.default_output(path, codec)
    return pathcrypt.MediaTranscoder.build_args(path, target, codec, **options)


__all__ = ["transcode", "transcode_args"]
