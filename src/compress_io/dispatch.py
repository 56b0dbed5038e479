"""Public entrypoints for archivers.

Writing: allocate_compressor(), then write_data() as many times as needed,
then end_compressor(). Each of them may call the sink for each chunk of
compressed data.

Reading: read_data() pulls the whole stream from the source until it returns
b"", decompresses it and hands the decoded bytes to ``consume``.

The interface is the same for compressed and uncompressed streams; the codec
is picked from the numeric compression value (see core.params).
"""

from __future__ import annotations

import logging

from compress_io.core.codec_base import Codec, Compressor
from compress_io.core.codec_raw import CodecRaw
from compress_io.core.codec_zlib import CodecZlib
from compress_io.core.params import (
    CompressionAlgorithm,
    CompressionConfig,
    parse_compression_option,
)
from compress_io.core.streams import ByteSink, ByteSource, Consumer
from compress_io.errors import DEFAULT_CONTEXT, UnsupportedCodec
from compress_io.settings import CompressSettings

logger = logging.getLogger(__name__)

CODECS: dict[CompressionAlgorithm, Codec] = {
    CompressionAlgorithm.NONE: CodecRaw(),
    CompressionAlgorithm.ZLIB: CodecZlib(),
}


def codec_available(algorithm: CompressionAlgorithm) -> bool:
    codec = CODECS.get(algorithm)
    return codec is not None and codec.available()


def require_codec(algorithm: CompressionAlgorithm, *, context: str = DEFAULT_CONTEXT) -> Codec:
    codec = CODECS.get(algorithm)
    if codec is None or not codec.available():
        raise UnsupportedCodec(f"not built with {algorithm.value} support", context=context)
    return codec


def _resolve(
    compression: int | None, settings: CompressSettings | None
) -> tuple[CompressSettings, CompressionConfig]:
    # loaded settings carry their own compression value and take precedence
    if settings is None:
        s = CompressSettings()
        if compression is not None:
            return s, parse_compression_option(compression, context=s.context)
        return s, s.config()
    if compression is not None and compression != settings.compression:
        logger.warning(
            "%s: compression=%r overridden by settings (compression=%d)",
            settings.context,
            compression,
            settings.compression,
        )
    return settings, settings.config()


def allocate_compressor(
    compression: int | None, sink: ByteSink, *, settings: CompressSettings | None = None
) -> Compressor:
    """Allocate a new compressor session writing to ``sink``.

    With ``settings`` their compression value is used; ``compression`` only
    applies when no settings are passed (None means the zlib default level).
    """
    s, cfg = _resolve(compression, settings)
    codec = require_codec(cfg.algorithm, context=s.context)

    cs = codec.compressor(sink, cfg.level, out_size=s.out_size, context=s.context)
    logger.debug("%s: allocated %s compressor (level=%d)", s.context, codec.codec_id, cfg.level)
    return cs


def write_data(cs: Compressor, data: bytes) -> int:
    """Compress and write ``data``; returns len(data) (failures raise)."""
    return cs.write(data)


def end_compressor(cs: Compressor) -> None:
    """Terminate the codec context and flush its buffers."""
    cs.end()


def read_data(
    compression: int | None,
    source: ByteSource,
    consume: Consumer,
    *,
    settings: CompressSettings | None = None,
) -> int:
    """Read the whole stream from ``source`` and pass decoded bytes to ``consume``."""
    s, cfg = _resolve(compression, settings)
    codec = require_codec(cfg.algorithm, context=s.context)
    return codec.read(
        source, consume, in_size=s.in_size, out_size=s.out_size, context=s.context
    )
