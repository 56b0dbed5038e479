from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType

from compress_io.core.streams import ByteSink, ByteSource, Consumer
from compress_io.errors import DEFAULT_CONTEXT


class Compressor(ABC):
    """
    Write-side session: write() any number of times, then end().

    A session is owned by one caller. After end(), close() or a fatal error it
    is closed: write() raises RuntimeError, end()/close() do nothing.

    Used as a context manager, a clean exit ends the session (final flush) and
    an exception only releases it.
    """

    codec_id: str

    def __init__(self, sink: ByteSink, *, context: str = DEFAULT_CONTEXT) -> None:
        self.sink = sink
        self.context = context
        self.bytes_in = 0
        self.bytes_out = 0
        self.chunks_out = 0
        self.closed = False

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Consume all of ``data``; return len(data) or raise."""
        raise NotImplementedError

    @abstractmethod
    def end(self) -> None:
        """Flush everything still buffered (trailer included) and release."""
        raise NotImplementedError

    def close(self) -> None:
        """Release without flushing (abort path)."""
        self.closed = True

    def _check_open(self) -> None:
        if self.closed:
            raise RuntimeError(f"{self.context}: {self.codec_id} compressor session is closed")

    def __enter__(self) -> Compressor:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.end()
        else:
            self.close()


class Codec(ABC):
    """
    One variant per compression algorithm.

    Adding an algorithm means adding a Codec subclass and registering it in the
    dispatcher; callers are unaffected.
    """

    codec_id: str

    def available(self) -> bool:
        return True

    @abstractmethod
    def compressor(
        self, sink: ByteSink, level: int, *, out_size: int, context: str
    ) -> Compressor:
        raise NotImplementedError

    @abstractmethod
    def read(
        self,
        source: ByteSource,
        consume: Consumer,
        *,
        in_size: int,
        out_size: int,
        context: str,
    ) -> int:
        """Run the whole decode loop; return the number of decoded bytes."""
        raise NotImplementedError
