# envdiag/buildinfo.py
from __future__ import annotations

import sys
import tracemalloc
from dataclasses import dataclass
from enum import Enum


class BuildConfiguration(str, Enum):
    DEBUG = "Debug"
    RELEASE = "Release (Optimized)"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DebugMetadata:
    """Отладочные признаки исполняемого кода (аналог атрибута Debuggable)."""

    tracking_enabled: bool
    optimizer_disabled: bool


def current_debug_metadata() -> DebugMetadata | None:
    """
    Метаданные есть только если включено хоть одно отладочное средство:
    debug-сборка интерпретатора, `-X dev` или `-d`.
    На обычном release-интерпретаторе возвращает None.
    """
    debug_build = hasattr(sys, "gettotalrefcount")
    if not (debug_build or sys.flags.dev_mode or sys.flags.debug):
        return None
    tracking = debug_build or sys.gettrace() is not None or tracemalloc.is_tracing()
    return DebugMetadata(
        tracking_enabled=tracking,
        optimizer_disabled=sys.flags.optimize == 0,
    )


def is_debug_build(metadata: DebugMetadata | None) -> bool:
    if metadata is None:
        return False
    return metadata.tracking_enabled and metadata.optimizer_disabled


def is_optimized_build(metadata: DebugMetadata | None) -> bool:
    # no metadata => release
    if metadata is None:
        return True
    return not metadata.optimizer_disabled


def classify_build(metadata: DebugMetadata | None) -> BuildConfiguration:
    """Debug only when both flags are set; everything else is an optimized release."""
    if is_debug_build(metadata):
        return BuildConfiguration.DEBUG
    return BuildConfiguration.RELEASE
