"""Settings (v1) for compress-io.

Goal: let an archiver keep its compression knobs in one reproducible place
(buffer sizes, compression code, diagnostic context).

This module intentionally stays *small* and strict:
  - JSON only
  - explicit schema id
  - unknown keys are rejected
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from compress_io.core.params import (
    Z_DEFAULT_COMPRESSION,
    CompressionConfig,
    parse_compression_option,
)
from compress_io.core.streams import IN_SIZE_DEFAULT, OUT_SIZE_DEFAULT
from compress_io.errors import DEFAULT_CONTEXT, UsageError

SPEC_ID_V1 = "compress-io.settings.v1"


class SettingsError(UsageError):
    def __init__(self, message: str) -> None:
        super().__init__(message, context="settings")


def _load_json_arg(settings_arg: str) -> dict[str, Any]:
    s = settings_arg.strip()
    if not s:
        raise SettingsError("empty argument")

    if s.startswith("@"):
        p = Path(s[1:]).expanduser()
        if not p.exists() or not p.is_file():
            raise SettingsError(f"file not found: {p}")
        raw = p.read_text(encoding="utf-8")
        try:
            obj = json.loads(raw)
        except json.JSONDecodeError as e:
            raise SettingsError(f"invalid JSON in {p}: {e}") from e
        if not isinstance(obj, dict):
            raise SettingsError(f"JSON in {p} must be an object")
        return obj

    try:
        obj = json.loads(s)
    except json.JSONDecodeError as e:
        raise SettingsError(f"invalid inline JSON: {e}") from e
    if not isinstance(obj, dict):
        raise SettingsError("inline JSON must be an object")
    return obj


def _optional_int(obj: dict[str, Any], key: str, default: int) -> int:
    if key not in obj:
        return default
    v = obj.get(key)
    if isinstance(v, bool) or not isinstance(v, int):
        raise SettingsError(f"field '{key}' must be an integer")
    return v


def _optional_size(obj: dict[str, Any], key: str, default: int) -> int:
    v = _optional_int(obj, key, default)
    if v < 1:
        raise SettingsError(f"field '{key}' must be >= 1, got {v}")
    return v


@dataclass(frozen=True)
class CompressSettings:
    """Knobs shared by the write and read paths."""

    compression: int = Z_DEFAULT_COMPRESSION
    out_size: int = OUT_SIZE_DEFAULT
    in_size: int = IN_SIZE_DEFAULT
    context: str = DEFAULT_CONTEXT

    def config(self) -> CompressionConfig:
        return parse_compression_option(self.compression, context=self.context)


def load_settings(settings_arg: str) -> CompressSettings:
    """Load and validate settings.

    settings_arg:
      - '@file.json'
      - inline JSON object
    """
    obj = _load_json_arg(settings_arg)

    allowed = {"spec", "compression", "out_size", "in_size", "context"}
    extra = sorted(set(obj.keys()) - allowed)
    if extra:
        raise SettingsError(f"unsupported keys: {', '.join(extra)}")

    spec_id = obj.get("spec")
    if spec_id != SPEC_ID_V1:
        raise SettingsError(f"unsupported spec: {spec_id!r} (expected {SPEC_ID_V1!r})")

    context = obj.get("context", DEFAULT_CONTEXT)
    if not isinstance(context, str) or not context.strip():
        raise SettingsError("field 'context' must be a non-empty string")

    settings = CompressSettings(
        compression=_optional_int(obj, "compression", Z_DEFAULT_COMPRESSION),
        out_size=_optional_size(obj, "out_size", OUT_SIZE_DEFAULT),
        in_size=_optional_size(obj, "in_size", IN_SIZE_DEFAULT),
        context=context.strip(),
    )
    # the compression code is validated eagerly
    settings.config()
    return settings
