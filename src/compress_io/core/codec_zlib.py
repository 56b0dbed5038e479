"""zlib/DEFLATE streaming codec.

Write side: a CompressorZlib session keeps a zlib compression object and an
output buffer of ``out_size`` bytes. Only full buffers go to the sink while
data is being written; end() finishes the stream and hands over the rest.

Read side: read_zlib() pulls chunks from the source until b"", inflates each
one at most ``out_size`` bytes per step, then drains the decoder until the
zlib stream reports its end.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from compress_io.core.codec_base import Codec, Compressor
from compress_io.core.params import Z_DEFAULT_COMPRESSION
from compress_io.core.streams import (
    IN_SIZE_DEFAULT,
    OUT_SIZE_DEFAULT,
    ByteSink,
    ByteSource,
    Consumer,
    forward_chunk,
    write_chunk,
)
from compress_io.errors import (
    DEFAULT_CONTEXT,
    AllocationFailure,
    CodecError,
    CodecInitError,
    UnsupportedCodec,
)

try:
    import zlib
except Exception:  # pragma: no cover
    zlib = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


def zlib_available() -> bool:
    return zlib is not None


def _require(context: str) -> None:
    if zlib is None:
        raise UnsupportedCodec("not built with zlib support", context=context)


def _init_codec(factory: Callable[..., Any], *args: Any, context: str) -> Any:
    try:
        return factory(*args)
    except MemoryError as err:
        raise AllocationFailure("out of memory", context=context) from err
    except (zlib.error, ValueError) as err:
        raise CodecInitError(
            f"could not initialize compression library: {err}", context=context
        ) from err


class CompressorZlib(Compressor):
    codec_id = "zlib"

    def __init__(
        self,
        sink: ByteSink,
        level: int = Z_DEFAULT_COMPRESSION,
        *,
        out_size: int = OUT_SIZE_DEFAULT,
        context: str = DEFAULT_CONTEXT,
        compressobj: Callable[..., Any] | None = None,
    ) -> None:
        _require(context)
        if out_size < 1:
            raise ValueError(f"out_size must be >= 1, got {out_size}")
        super().__init__(sink, context=context)
        self.level = int(level)
        self.out_size = int(out_size)

        try:
            self._out: bytearray | None = bytearray()
        except MemoryError as err:
            raise AllocationFailure("out of memory", context=context) from err
        self._zp: Any = _init_codec(compressobj or zlib.compressobj, self.level, context=context)

    def _emit(self, chunk: bytes) -> None:
        write_chunk(self.sink, chunk, context=self.context)
        self.bytes_out += len(chunk)
        self.chunks_out += 1

    def _deflate(self, data: bytes, *, finish: bool) -> None:
        self._check_open()
        try:
            if finish:
                produced = self._zp.flush(zlib.Z_FINISH)
            else:
                produced = self._zp.compress(data)
        except zlib.error as err:
            raise CodecError(f"could not compress data: {err}", context=self.context) from err

        out = self._out
        out += produced

        while len(out) >= self.out_size:
            self._emit(bytes(out[: self.out_size]))
            del out[: self.out_size]

        # never an empty chunk: b"" is the end-of-data marker one layer up
        if finish and out:
            self._emit(bytes(out))
            out.clear()

    def write(self, data: bytes) -> int:
        self._check_open()
        n = len(data)
        if n == 0:
            return 0
        try:
            self._deflate(bytes(data), finish=False)
        except Exception:
            self.close()
            raise
        self.bytes_in += n
        return n

    def end(self) -> None:
        if self.closed:
            return
        try:
            self._deflate(b"", finish=True)
        finally:
            self.close()
        logger.debug(
            "%s: zlib compressor ended (level=%d in=%d out=%d chunks=%d)",
            self.context,
            self.level,
            self.bytes_in,
            self.bytes_out,
            self.chunks_out,
        )

    def close(self) -> None:
        self._zp = None
        self._out = None
        super().close()


def _inflate(zp: Any, data: bytes, out_size: int, context: str) -> bytes:
    try:
        return zp.decompress(data, out_size)
    except zlib.error as err:
        raise CodecError(f"could not uncompress data: {err}", context=context) from err


def read_zlib(
    source: ByteSource,
    consume: Consumer,
    *,
    in_size: int = IN_SIZE_DEFAULT,
    out_size: int = OUT_SIZE_DEFAULT,
    context: str = DEFAULT_CONTEXT,
    decompressobj: Callable[..., Any] | None = None,
) -> int:
    """Decompress everything the source yields and forward it to ``consume``."""
    _require(context)
    if out_size < 1:
        raise ValueError(f"out_size must be >= 1, got {out_size}")

    zp: Any = _init_codec(decompressobj or zlib.decompressobj, context=context)
    total = 0
    while True:
        buf = source(in_size)
        if not buf:
            break
        data = bytes(buf)
        while data:
            if zp.eof:
                raise CodecError(
                    "could not uncompress data: trailing data after end of compressed stream",
                    context=context,
                )
            out = _inflate(zp, data, out_size, context)
            data = zp.unconsumed_tail
            if out:
                total += forward_chunk(consume, out, context=context)
        if zp.unused_data:
            raise CodecError(
                "could not uncompress data: trailing data after end of compressed stream",
                context=context,
            )

    # input exhausted: the decoder may still hold output it could not fit
    while not zp.eof:
        out = _inflate(zp, b"", out_size, context)
        if out:
            total += forward_chunk(consume, out, context=context)
        elif not zp.eof:
            raise CodecError(
                "could not uncompress data: compressed stream is truncated",
                context=context,
            )

    logger.debug("%s: zlib read done (%d bytes decoded)", context, total)
    return total


class CodecZlib(Codec):
    codec_id = "zlib"

    def available(self) -> bool:
        return zlib_available()

    def compressor(
        self,
        sink: ByteSink,
        level: int = Z_DEFAULT_COMPRESSION,
        *,
        out_size: int = OUT_SIZE_DEFAULT,
        context: str = DEFAULT_CONTEXT,
    ) -> CompressorZlib:
        return CompressorZlib(sink, level, out_size=out_size, context=context)

    def read(
        self,
        source: ByteSource,
        consume: Consumer,
        *,
        in_size: int = IN_SIZE_DEFAULT,
        out_size: int = OUT_SIZE_DEFAULT,
        context: str = DEFAULT_CONTEXT,
    ) -> int:
        return read_zlib(source, consume, in_size=in_size, out_size=out_size, context=context)
