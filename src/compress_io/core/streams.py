"""Callback contracts between the codecs and the transport layer above.

  - sink(data) -> bytes accepted        (e.g. a binary file's ``write``)
  - source(size_hint) -> bytes          (e.g. a binary file's ``read``); b"" = EOF
  - consume(data) -> None | int         decoded bytes, delivered downstream

A zero-length chunk is the end-of-data marker of the container format, so the
codecs never hand one to the sink.
"""

from __future__ import annotations

from typing import Protocol

from compress_io.errors import DEFAULT_CONTEXT, ShortWrite

# Output buffer handed to the codec, and read size requested from the source.
OUT_SIZE_DEFAULT = 4096
IN_SIZE_DEFAULT = 4096


class ByteSink(Protocol):
    def __call__(self, data: bytes, /) -> int: ...


class ByteSource(Protocol):
    def __call__(self, size_hint: int, /) -> bytes: ...


class Consumer(Protocol):
    def __call__(self, data: bytes, /) -> int | None: ...


def write_chunk(sink: ByteSink, data: bytes, *, context: str = DEFAULT_CONTEXT) -> None:
    """Hand one non-empty chunk to the sink; anything short of all of it is fatal."""
    n = len(data)
    try:
        accepted = sink(data)
    except OSError as err:
        raise ShortWrite(
            f"could not write to output file: {err.strerror or err}", context=context
        ) from err
    if accepted != n:
        raise ShortWrite(
            f"could not write to output file: accepted {accepted} of {n} bytes",
            context=context,
        )


def forward_chunk(consume: Consumer, data: bytes, *, context: str = DEFAULT_CONTEXT) -> int:
    """Deliver decoded bytes downstream. Consumers may return None (bytearray.extend)."""
    try:
        res = consume(data)
    except OSError as err:
        raise ShortWrite(
            f"could not write decoded data: {err.strerror or err}", context=context
        ) from err
    if res is not None and res != len(data):
        raise ShortWrite(
            f"could not write decoded data: accepted {res} of {len(data)} bytes",
            context=context,
        )
    return len(data)
