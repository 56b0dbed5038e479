from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from compress_io.errors import DEFAULT_CONTEXT, InvalidParameter

# zlib's own "default level" sentinel (Z_DEFAULT_COMPRESSION).
Z_DEFAULT_COMPRESSION = -1
COMPRESSION_NONE = 0
LEVEL_MIN = 1
LEVEL_MAX = 9


class CompressionAlgorithm(Enum):
    NONE = "none"
    ZLIB = "zlib"


@dataclass(frozen=True, slots=True)
class CompressionConfig:
    """Result of parsing a numeric compression value.

    ``level`` only means something for ``ZLIB``; it is 0 for ``NONE``.
    """

    algorithm: CompressionAlgorithm
    level: int


def parse_compression_option(
    compression: int, *, context: str = DEFAULT_CONTEXT
) -> CompressionConfig:
    """Interpret a numeric 'compression' value.

    - ``Z_DEFAULT_COMPRESSION`` or 1..9 -> zlib at that level
    - 0 -> no compression
    - anything else -> InvalidParameter
    """
    if isinstance(compression, bool) or not isinstance(compression, int):
        raise InvalidParameter(f"invalid compression code: {compression!r}", context=context)

    if compression == Z_DEFAULT_COMPRESSION or LEVEL_MIN <= compression <= LEVEL_MAX:
        return CompressionConfig(CompressionAlgorithm.ZLIB, compression)
    if compression == COMPRESSION_NONE:
        return CompressionConfig(CompressionAlgorithm.NONE, COMPRESSION_NONE)

    raise InvalidParameter(f"invalid compression code: {compression}", context=context)
