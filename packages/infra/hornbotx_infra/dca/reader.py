# packages/infra/hornbotx_infra/dca/reader.py
"""
Reader for raw DCA clip files.

A DCA file is a plain sequence of records:

    2 bytes   frame length (int16, little-endian)
    N bytes   one pre-encoded Opus frame

The stream ends with a clean EOF on a record boundary. Files are produced by an
external encoder, e.g. ``dca-rs --raw -i input.wav > clip.dca``.
"""

from __future__ import annotations

from pathlib import Path
import struct
from typing import BinaryIO, Final

_LENGTH_PREFIX: Final = struct.Struct("<h")

# 3 x 1275 byte frames + 7 bytes of framing: the largest legal Opus packet.
MAX_FRAME_BYTES: Final = 3832


class ClipLoadError(Exception):
    """
    Raised when a clip file is missing, unreadable, truncated or malformed.

    Only the clip being read is affected; callers skip it and carry on.
    """


def read_frames(stream: BinaryIO, *, source: str = "<stream>") -> tuple[bytes, ...]:
    frames: list[bytes] = []

    while True:
        prefix = stream.read(_LENGTH_PREFIX.size)
        if not prefix:
            return tuple(frames)
        if len(prefix) < _LENGTH_PREFIX.size:
            raise ClipLoadError(f"{source}: truncated length prefix after frame {len(frames)}")

        (length,) = _LENGTH_PREFIX.unpack(prefix)
        if length < 0 or length > MAX_FRAME_BYTES:
            raise ClipLoadError(f"{source}: invalid frame length {length} at frame {len(frames)}")
        if length == 0:
            # Empty record: nothing to send.
            continue

        payload = stream.read(length)
        if len(payload) < length:
            raise ClipLoadError(
                f"{source}: truncated frame {len(frames)} ({len(payload)} of {length} bytes)"
            )
        frames.append(payload)


class DcaReader:
    def read_frames(self, path: Path) -> tuple[bytes, ...]:
        try:
            with path.open("rb") as handle:
                return read_frames(handle, source=str(path))
        except OSError as exc:
            raise ClipLoadError(f"Failed to open {path}: {exc}") from exc
