# envdiag/capabilities.py
from __future__ import annotations

import platform
import sys
from enum import IntEnum


class CapabilityLevel(IntEnum):
    """Introspection feature set of the running interpreter."""

    LEGACY = 0
    MODERN = 1  # process id, runtime identifier
    CURRENT = 2  # + process path


UNKNOWN = "Unknown"

# platform.machine() -> architecture names used in reports
_ARCH_ALIASES: dict[str, str] = {
    "x86_64": "X64",
    "amd64": "X64",
    "x64": "X64",
    "i386": "X86",
    "i486": "X86",
    "i586": "X86",
    "i686": "X86",
    "x86": "X86",
    "aarch64": "Arm64",
    "arm64": "Arm64",
    "armv8l": "Arm",
    "armv7l": "Arm",
    "armv7": "Arm",
    "armv6l": "Armv6",
    "s390x": "S390x",
    "ppc64le": "Ppc64le",
    "loongarch64": "LoongArch64",
    "riscv64": "RiscV64",
    "wasm32": "Wasm",
}

_64BIT_ARCHS = {"X64", "Arm64", "S390x", "Ppc64le", "LoongArch64", "RiscV64"}

# 64-bit architecture -> what a 32-bit process runs as on it
_32BIT_COUNTERPART = {"X64": "X86", "Arm64": "Arm"}


def detect_capability_level() -> CapabilityLevel:
    if hasattr(sys, "orig_argv"):
        return CapabilityLevel.CURRENT
    if hasattr(sys, "platlibdir"):
        return CapabilityLevel.MODERN
    return CapabilityLevel.LEGACY


def runtime_switch(name: str, options: dict[str, object] | None = None) -> bool | None:
    """
    Значение переключателя `-X name[=value]`.

    None — переключатель не задан; `-X name` без значения считается включённым.
    """
    opts = sys._xoptions if options is None else options
    if name not in opts:
        return None
    raw = opts[name]
    if raw is True:
        return True
    return str(raw).strip().lower() not in {"0", "false", "no", "off"}


def os_family(system: str | None = None) -> str:
    """Windows / Linux / macOS / Unknown."""
    name = (system if system is not None else platform.system()).lower()
    if name.startswith("win") or name.startswith("cygwin"):
        return "Windows"
    if name == "linux":
        return "Linux"
    if name == "darwin":
        return "macOS"
    return UNKNOWN


def normalize_architecture(machine: str) -> str:
    m = (machine or "").strip().lower()
    if not m:
        return UNKNOWN
    return _ARCH_ALIASES.get(m, m.capitalize())


def is_64bit_architecture(arch: str) -> bool:
    return arch in _64BIT_ARCHS or arch.endswith("64")


def process_architecture_for(os_arch: str, is_64bit_process: bool) -> str:
    if os_arch == UNKNOWN or is_64bit_process:
        return os_arch
    return _32BIT_COUNTERPART.get(os_arch, os_arch)


def runtime_identifier_for(family: str, arch: str) -> str:
    """Platform+arch tag in the `linux-x64` / `win-arm64` / `osx-x64` form."""
    prefix = {"Windows": "win", "Linux": "linux", "macOS": "osx"}.get(family, sys.platform)
    return f"{prefix}-{arch.lower()}"
