"""Typed errors for compress-io.

Single source of truth for exit codes lives here.

Policy:
- Every failure is fatal: errors propagate to the caller of the public
  operation, nothing is retried.
- Messages are prefixed with the diagnostic context of the caller
  (e.g. ``compress_io: could not compress data: ...``).
- An embedding archiver maps errors to stable exit codes via ``exit_code``.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_CONTEXT = "compress_io"

# -------------------------
# Exit codes (single source)
# -------------------------

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_CODEC = 10
EXIT_UNSUPPORTED_CODEC = 11
EXIT_OUT_OF_MEMORY = 12
EXIT_CODEC_INIT = 13
EXIT_SHORT_WRITE = 14


@dataclass(frozen=True, slots=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str


EXIT_CODES: tuple[ExitCodeInfo, ...] = (
    ExitCodeInfo(EXIT_OK, "OK", "Success"),
    ExitCodeInfo(EXIT_USAGE, "USAGE", "Invalid compression code or invalid settings"),
    ExitCodeInfo(EXIT_CODEC, "CODEC", "Codec failure while compressing/decompressing (corrupt data, etc.)"),
    ExitCodeInfo(EXIT_UNSUPPORTED_CODEC, "UNSUPPORTED_CODEC", "Requested codec is not available"),
    ExitCodeInfo(EXIT_OUT_OF_MEMORY, "OUT_OF_MEMORY", "Buffer or codec state allocation failed"),
    ExitCodeInfo(EXIT_CODEC_INIT, "CODEC_INIT", "Codec library could not be initialized"),
    ExitCodeInfo(EXIT_SHORT_WRITE, "SHORT_WRITE", "Sink or consumer accepted fewer bytes than given"),
)

_EXIT_CODE_BY_CODE: dict[int, ExitCodeInfo] = {e.code: e for e in EXIT_CODES}


def exit_code_info(code: int) -> ExitCodeInfo | None:
    return _EXIT_CODE_BY_CODE.get(int(code))


# ---------------
# Typed exceptions
# ---------------


class CompressIOError(Exception):
    """Base error for compress-io."""

    exit_code: int = EXIT_CODEC

    def __init__(self, message: str, *, context: str | None = DEFAULT_CONTEXT) -> None:
        self.message = message
        self.context = context
        super().__init__(f"{context}: {message}" if context else message)


class UsageError(CompressIOError):
    exit_code = EXIT_USAGE


class InvalidParameter(UsageError):
    pass


class UnsupportedCodec(CompressIOError):
    exit_code = EXIT_UNSUPPORTED_CODEC


class AllocationFailure(CompressIOError):
    exit_code = EXIT_OUT_OF_MEMORY


class CodecInitError(CompressIOError):
    exit_code = EXIT_CODEC_INIT


class CodecError(CompressIOError):
    exit_code = EXIT_CODEC


class ShortWrite(CompressIOError):
    exit_code = EXIT_SHORT_WRITE
