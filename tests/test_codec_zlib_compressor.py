from __future__ import annotations

import zlib

import pytest

from compress_io.core.codec_zlib import CompressorZlib
from compress_io.errors import (
    AllocationFailure,
    CodecError,
    CodecInitError,
    ShortWrite,
)

OUT = 64


def _compress(payload: bytes, sink, *, out_size: int = OUT, level: int = 6) -> CompressorZlib:
    cs = CompressorZlib(sink, level, out_size=out_size)
    assert cs.write(payload) == len(payload)
    cs.end()
    return cs


@pytest.mark.parametrize("payload", [b"", b"x", b"hello world" * 100])
def test_output_is_a_complete_zlib_stream(payload: bytes, sink) -> None:
    _compress(payload, sink)
    d = zlib.decompressobj()
    assert d.decompress(sink.joined()) == payload
    assert d.eof
    assert d.unused_data == b""


@pytest.mark.parametrize("n", [OUT - 1, OUT, OUT + 1, 2 * OUT, 10 * OUT - 1, 10 * OUT + 1])
def test_buffer_boundaries(n: int, sink, noise) -> None:
    payload = noise(n)
    _compress(payload, sink, level=1)
    assert zlib.decompress(sink.joined()) == payload
    assert all(len(c) == OUT for c in sink.chunks[:-1])
    assert 0 < len(sink.chunks[-1]) <= OUT


@pytest.mark.parametrize("out_size", [1, 2, 3, 7])
def test_tiny_buffers_never_emit_empty_chunks(out_size: int, sink) -> None:
    payload = b"abcabcabd" * 30
    cs = _compress(payload, sink, out_size=out_size)
    assert sink.chunks
    assert all(0 < len(c) <= out_size for c in sink.chunks)
    assert cs.chunks_out == len(sink.chunks)
    assert cs.bytes_out == len(sink.joined())
    assert zlib.decompress(sink.joined()) == payload


def test_partial_buffer_is_held_until_end(sink) -> None:
    cs = CompressorZlib(sink, 6, out_size=4096)
    cs.write(b"a little data")
    assert sink.chunks == []
    cs.end()
    assert len(sink.chunks) == 1
    assert zlib.decompress(sink.chunks[0]) == b"a little data"


def test_many_small_writes(sink) -> None:
    cs = CompressorZlib(sink, 9, out_size=16)
    expected = bytearray()
    for i in range(500):
        piece = f"row {i}\n".encode()
        expected += piece
        assert cs.write(piece) == len(piece)
    assert cs.write(b"") == 0
    cs.end()
    assert cs.bytes_in == len(expected)
    assert zlib.decompress(sink.joined()) == bytes(expected)


def test_end_is_idempotent_and_write_after_end_fails(sink) -> None:
    cs = CompressorZlib(sink)
    cs.write(b"data")
    cs.end()
    n = len(sink.chunks)
    cs.end()
    assert len(sink.chunks) == n
    with pytest.raises(RuntimeError):
        cs.write(b"more")


def test_closed_session_never_touches_released_codec(sink) -> None:
    cs = CompressorZlib(sink)
    cs.write(b"data")
    cs.close()
    with pytest.raises(RuntimeError, match="compressor session is closed"):
        cs._deflate(b"", finish=True)
    assert sink.chunks == []


def test_context_manager_ends_on_success(sink) -> None:
    with CompressorZlib(sink, out_size=32) as cs:
        cs.write(b"payload" * 20)
    assert cs.closed
    assert zlib.decompress(sink.joined()) == b"payload" * 20


def test_context_manager_releases_without_flush_on_error(sink) -> None:
    with pytest.raises(KeyError):
        with CompressorZlib(sink, out_size=4096) as cs:
            cs.write(b"buffered only")
            raise KeyError("archiver failed")
    assert cs.closed
    assert sink.chunks == []


def test_short_write_is_fatal_and_stops_output(make_sink, noise) -> None:
    sink = make_sink(short_from=2)
    cs = CompressorZlib(sink, 1, out_size=OUT)
    with pytest.raises(ShortWrite):
        cs.write(noise(200_000))
    assert len(sink.chunks) == 3
    assert cs.closed
    cs.end()
    assert len(sink.chunks) == 3


def test_codec_init_error() -> None:
    def bad_factory(level: int):
        raise zlib.error("bad compression level")

    with pytest.raises(CodecInitError) as ei:
        CompressorZlib(lambda b: len(b), 6, compressobj=bad_factory)
    assert "could not initialize compression library: bad compression level" in str(ei.value)


def test_allocation_failure() -> None:
    def oom(level: int):
        raise MemoryError

    with pytest.raises(AllocationFailure) as ei:
        CompressorZlib(lambda b: len(b), 6, compressobj=oom)
    assert str(ei.value) == "compress_io: out of memory"


class _FailingCompressObj:
    def compress(self, data: bytes) -> bytes:
        raise zlib.error("stream state inconsistent")

    def flush(self, mode: int = zlib.Z_FINISH) -> bytes:
        raise zlib.error("stream state inconsistent")


def test_codec_step_error_is_fatal(sink) -> None:
    cs = CompressorZlib(sink, 6, compressobj=lambda level: _FailingCompressObj())
    with pytest.raises(CodecError) as ei:
        cs.write(b"x")
    assert "could not compress data: stream state inconsistent" in str(ei.value)
    assert cs.closed
    assert sink.chunks == []


def test_codec_finish_error_still_releases(sink) -> None:
    cs = CompressorZlib(sink, 6, compressobj=lambda level: _FailingCompressObj())
    with pytest.raises(CodecError):
        cs.end()
    assert cs.closed


def test_bad_out_size() -> None:
    with pytest.raises(ValueError):
        CompressorZlib(lambda b: len(b), out_size=0)
