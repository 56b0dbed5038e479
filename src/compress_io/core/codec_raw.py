from __future__ import annotations

from compress_io.core.codec_base import Codec, Compressor
from compress_io.core.streams import (
    IN_SIZE_DEFAULT,
    OUT_SIZE_DEFAULT,
    ByteSink,
    ByteSource,
    Consumer,
    forward_chunk,
    write_chunk,
)
from compress_io.errors import DEFAULT_CONTEXT


class CompressorRaw(Compressor):
    """
    Passthrough session: every write goes to the sink as-is.
    """

    codec_id = "none"

    def write(self, data: bytes) -> int:
        self._check_open()
        n = len(data)
        if n == 0:
            # b"" would read as the end-of-data marker
            return 0
        try:
            write_chunk(self.sink, bytes(data), context=self.context)
        except Exception:
            self.close()
            raise
        self.bytes_in += n
        self.bytes_out += n
        self.chunks_out += 1
        return n

    def end(self) -> None:
        self.close()


def read_raw(
    source: ByteSource,
    consume: Consumer,
    *,
    in_size: int = IN_SIZE_DEFAULT,
    context: str = DEFAULT_CONTEXT,
) -> int:
    total = 0
    while True:
        buf = source(in_size)
        if not buf:
            break
        total += forward_chunk(consume, bytes(buf), context=context)
    return total


class CodecRaw(Codec):
    """Codec identity (compression = 0)."""

    codec_id = "none"

    def compressor(
        self,
        sink: ByteSink,
        level: int = 0,
        *,
        out_size: int = OUT_SIZE_DEFAULT,
        context: str = DEFAULT_CONTEXT,
    ) -> CompressorRaw:
        return CompressorRaw(sink, context=context)

    def read(
        self,
        source: ByteSource,
        consume: Consumer,
        *,
        in_size: int = IN_SIZE_DEFAULT,
        out_size: int = OUT_SIZE_DEFAULT,
        context: str = DEFAULT_CONTEXT,
    ) -> int:
        return read_raw(source, consume, in_size=in_size, context=context)
