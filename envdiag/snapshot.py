# envdiag/snapshot.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from envdiag.buildinfo import DebugMetadata, classify_build, is_optimized_build
from envdiag.capabilities import UNKNOWN, CapabilityLevel
from envdiag.facts import FactProvider, FactUnavailable, HostFacts

log = logging.getLogger(__name__)

CORE_LIBRARY_LOCATION_PLACEHOLDER = (
    "Core library location is not available when packaged as a single file"
)

# поля, которые есть только начиная с определённого уровня возможностей
VERSION_GATED: dict[str, CapabilityLevel] = {
    "process_id": CapabilityLevel.MODERN,
    "runtime_identifier": CapabilityLevel.MODERN,
    "process_path": CapabilityLevel.CURRENT,
}


@dataclass(frozen=True)
class RuntimeSnapshot:
    # machine
    os_description: str
    os_architecture: str
    is_64bit_os: bool
    processor_count: int
    # process
    process_architecture: str
    is_64bit_process: bool
    # runtime
    runtime_description: str
    runtime_version: str
    runtime_directory: str
    core_library_version: str
    core_library_location: str
    # build / optimization
    build_configuration: str
    is_jit_optimized: bool
    tiered_compilation_enabled: bool
    gc_max_generation: int
    is_server_gc: bool
    is_modern_runtime: bool
    # version-gated: None means the host generation does not expose it
    process_id: int | None = None
    process_path: str | None = None
    runtime_identifier: str | None = None

    def fields(self) -> list[tuple[str, Any]]:
        """(name, value) for every populated field; absent version-gated ones are skipped."""
        pairs: list[tuple[str, Any]] = [
            ("os_description", self.os_description),
            ("os_architecture", self.os_architecture),
            ("is_64bit_os", self.is_64bit_os),
            ("processor_count", self.processor_count),
            ("process_architecture", self.process_architecture),
            ("is_64bit_process", self.is_64bit_process),
            ("process_id", self.process_id),
            ("process_path", self.process_path),
            ("runtime_description", self.runtime_description),
            ("runtime_version", self.runtime_version),
            ("runtime_directory", self.runtime_directory),
            ("runtime_identifier", self.runtime_identifier),
            ("core_library_version", self.core_library_version),
            ("core_library_location", self.core_library_location),
            ("build_configuration", self.build_configuration),
            ("is_jit_optimized", self.is_jit_optimized),
            ("tiered_compilation_enabled", self.tiered_compilation_enabled),
            ("gc_max_generation", self.gc_max_generation),
            ("is_server_gc", self.is_server_gc),
            ("is_modern_runtime", self.is_modern_runtime),
        ]
        return [(name, value) for name, value in pairs if value is not None]


class SnapshotBuilder:
    """
    Собирает RuntimeSnapshot из провайдера фактов.

    Каждый запрос к провайдеру делается не более одного раза. Недоступный или
    упавший факт заменяется задокументированным значением по умолчанию, так что
    build() никогда не бросает исключений.
    """

    def __init__(self, provider: FactProvider | None = None) -> None:
        self.provider: FactProvider = provider if provider is not None else HostFacts()

    def _query(self, name: str, fallback: Any = None, *, allow_none: bool = False) -> Any:
        try:
            value = getattr(self.provider, name)()
        except FactUnavailable as err:
            log.debug("Fact %s unavailable: %s", name, err)
            return fallback
        except Exception:
            log.debug("Fact %s failed, using fallback %r", name, fallback, exc_info=True)
            return fallback
        if value is None and not allow_none:
            log.debug("Fact %s returned nothing, using fallback %r", name, fallback)
            return fallback
        if isinstance(value, str) and not value.strip() and fallback is not None:
            return fallback
        return value

    def _count(self, name: str, fallback: int, *, minimum: int) -> int:
        value = self._query(name, fallback)
        try:
            return max(minimum, int(value))
        except (TypeError, ValueError, OverflowError):
            log.debug("Fact %s is not a number: %r", name, value)
            return fallback

    def _gated(self, name: str, level: CapabilityLevel, fallback: Any = None) -> Any:
        if level < VERSION_GATED[name]:
            log.debug(
                "Fact %s skipped: needs %s, host is %s", name, VERSION_GATED[name].name, level.name
            )
            return None
        value = self._query(name, fallback)
        if isinstance(value, str) and not value.strip():
            log.debug("Fact %s is blank, omitting", name)
            return fallback
        return value

    def build(self) -> RuntimeSnapshot:
        level = self._query("capability_level", CapabilityLevel.LEGACY)
        try:
            level = CapabilityLevel(level)
        except ValueError:
            log.debug("Unknown capability level %r, treating as LEGACY", level)
            level = CapabilityLevel.LEGACY

        metadata = self._query("debug_metadata", None, allow_none=True)
        if metadata is not None and not isinstance(metadata, DebugMetadata):
            log.debug("Debug metadata has unexpected type %s, ignoring", type(metadata).__name__)
            metadata = None

        snapshot = RuntimeSnapshot(
            os_description=self._query("os_description", UNKNOWN),
            os_architecture=self._query("os_architecture", UNKNOWN),
            is_64bit_os=bool(self._query("is_64bit_os", False)),
            processor_count=self._count("processor_count", 1, minimum=1),
            process_architecture=self._query("process_architecture", UNKNOWN),
            is_64bit_process=bool(self._query("is_64bit_process", False)),
            process_id=self._gated("process_id", level),
            process_path=self._gated("process_path", level, UNKNOWN),
            runtime_description=self._query("runtime_description", UNKNOWN),
            runtime_version=self._query("runtime_version", UNKNOWN),
            runtime_directory=self._query("runtime_directory", UNKNOWN),
            runtime_identifier=self._gated("runtime_identifier", level),
            core_library_version=self._query("core_library_version", UNKNOWN),
            core_library_location=self._query(
                "core_library_location", CORE_LIBRARY_LOCATION_PLACEHOLDER
            ),
            build_configuration=classify_build(metadata).value,
            is_jit_optimized=is_optimized_build(metadata),
            tiered_compilation_enabled=bool(self._query("tiered_compilation_enabled", True)),
            gc_max_generation=self._count("gc_max_generation", 0, minimum=0),
            is_server_gc=bool(self._query("is_server_gc", False)),
            is_modern_runtime=level > CapabilityLevel.LEGACY,
        )
        log.debug("Runtime snapshot built at capability level %s", level.name)
        return snapshot


def build_snapshot(provider: FactProvider | None = None) -> RuntimeSnapshot:
    return SnapshotBuilder(provider).build()
