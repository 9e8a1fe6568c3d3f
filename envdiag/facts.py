# envdiag/facts.py
"""
Источники фактов о хосте: ОС, процесс, интерпретатор.

Каждый метод провайдера — запрос без аргументов. Если факт на этом хосте
недоступен, метод бросает FactUnavailable; любое другое исключение считается
сбоем источника. Провайдеры ничего не меняют, только читают состояние.
"""

from __future__ import annotations

import gc
import os
import platform
import sys
from typing import Protocol

from envdiag.buildinfo import DebugMetadata, current_debug_metadata
from envdiag.capabilities import (
    CapabilityLevel,
    detect_capability_level,
    is_64bit_architecture,
    normalize_architecture,
    os_family,
    process_architecture_for,
    runtime_identifier_for,
    runtime_switch,
)

TIERED_COMPILATION_SWITCH = "tiered_compilation"


class FactUnavailable(Exception):
    """Факт не поддерживается текущим хостом."""


class FactProvider(Protocol):
    def capability_level(self) -> CapabilityLevel: ...

    def os_description(self) -> str: ...

    def os_architecture(self) -> str: ...

    def is_64bit_os(self) -> bool: ...

    def processor_count(self) -> int: ...

    def process_architecture(self) -> str: ...

    def is_64bit_process(self) -> bool: ...

    def process_id(self) -> int: ...

    def process_path(self) -> str: ...

    def runtime_description(self) -> str: ...

    def runtime_version(self) -> str: ...

    def runtime_directory(self) -> str: ...

    def runtime_identifier(self) -> str: ...

    def core_library_version(self) -> str: ...

    def core_library_location(self) -> str: ...

    def debug_metadata(self) -> DebugMetadata | None: ...

    def tiered_compilation_enabled(self) -> bool: ...

    def gc_max_generation(self) -> int: ...

    def is_server_gc(self) -> bool: ...


class HostFacts:
    """FactProvider for the interpreter running this code."""

    def capability_level(self) -> CapabilityLevel:
        return detect_capability_level()

    # --- machine ---

    def os_description(self) -> str:
        parts = [platform.system(), platform.release(), platform.version()]
        desc = " ".join(p for p in parts if p).strip()
        if not desc:
            raise FactUnavailable("platform reports no OS name")
        return desc

    def os_architecture(self) -> str:
        return normalize_architecture(platform.machine())

    def is_64bit_os(self) -> bool:
        return is_64bit_architecture(self.os_architecture())

    def processor_count(self) -> int:
        count = os.cpu_count()
        if not count:
            raise FactUnavailable("os.cpu_count() returned nothing")
        return count

    # --- process ---

    def process_architecture(self) -> str:
        return process_architecture_for(self.os_architecture(), self.is_64bit_process())

    def is_64bit_process(self) -> bool:
        return sys.maxsize > 2**32

    def process_id(self) -> int:
        return os.getpid()

    def process_path(self) -> str:
        return sys.executable

    # --- runtime ---

    def runtime_description(self) -> str:
        return f"{platform.python_implementation()} {platform.python_version()}"

    def runtime_version(self) -> str:
        return platform.python_version()

    def runtime_directory(self) -> str:
        return sys.base_prefix

    def runtime_identifier(self) -> str:
        return runtime_identifier_for(os_family(), self.os_architecture())

    def core_library_version(self) -> str:
        v = sys.version_info
        return f"{v.major}.{v.minor}.{v.micro}.{v.serial}"

    def core_library_location(self) -> str:
        # у замороженных однофайловых сборок файла у stdlib может не быть
        return getattr(os, "__file__", None) or ""

    # --- build / optimization ---

    def debug_metadata(self) -> DebugMetadata | None:
        return current_debug_metadata()

    def tiered_compilation_enabled(self) -> bool:
        switch = runtime_switch(TIERED_COMPILATION_SWITCH)
        return switch is None or switch

    def gc_max_generation(self) -> int:
        return len(gc.get_threshold()) - 1

    def is_server_gc(self) -> bool:
        gil_enabled = getattr(sys, "_is_gil_enabled", None)
        if gil_enabled is None:
            raise FactUnavailable("interpreter has no free-threading support")
        return not gil_enabled()
