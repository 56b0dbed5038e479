from __future__ import annotations

import random
from collections.abc import Callable

import pytest


class ChunkSink:
    """Sink that records every chunk; optionally accepts fewer bytes from call N on."""

    def __init__(self, short_from: int | None = None) -> None:
        self.chunks: list[bytes] = []
        self.short_from = short_from

    def __call__(self, data: bytes) -> int:
        self.chunks.append(bytes(data))
        if self.short_from is not None and len(self.chunks) > self.short_from:
            return max(0, len(data) - 1)
        return len(data)

    def joined(self) -> bytes:
        return b"".join(self.chunks)


class ChunkSource:
    """Source replaying ``data`` in pieces of ``step`` bytes, then b"" forever."""

    def __init__(self, data: bytes, step: int) -> None:
        self.data = data
        self.step = step
        self.pos = 0
        self.hints: list[int] = []

    def __call__(self, size_hint: int) -> bytes:
        self.hints.append(size_hint)
        piece = self.data[self.pos : self.pos + self.step]
        self.pos += len(piece)
        return piece


class Collector:
    def __init__(self) -> None:
        self.chunks: list[bytes] = []

    def __call__(self, data: bytes) -> None:
        self.chunks.append(bytes(data))

    def joined(self) -> bytes:
        return b"".join(self.chunks)


@pytest.fixture
def sink() -> ChunkSink:
    return ChunkSink()


@pytest.fixture
def collector() -> Collector:
    return Collector()


@pytest.fixture
def make_sink() -> Callable[..., ChunkSink]:
    return ChunkSink


@pytest.fixture
def make_source() -> Callable[[bytes, int], ChunkSource]:
    return ChunkSource


@pytest.fixture
def noise() -> Callable[[int], bytes]:
    """Deterministic incompressible bytes."""

    def _noise(n: int) -> bytes:
        return random.Random(1234 + n).randbytes(n)

    return _noise
