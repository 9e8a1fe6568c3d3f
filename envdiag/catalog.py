# envdiag/catalog.py
"""
Каталог переменных окружения .NET, сгруппированных по разделам.

Порядок разделов, категорий и ключей задаёт порядок вывода в отчёте.
Ничего не сортируем: операторы опираются на группировку (все GC-ключи рядом).
"""

from __future__ import annotations

from dataclasses import dataclass

PLATFORM_PLACEHOLDER = "{platform}"


@dataclass(frozen=True)
class Entry:
    key: str
    masked: bool = False  # скрывать значение, если оно задано


@dataclass(frozen=True)
class Category:
    title: str
    entries: tuple[Entry, ...]

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for e in self.entries:
            if e.key in seen:
                raise ValueError(f"Duplicate key {e.key!r} in category {self.title!r}")
            seen.add(e.key)

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(e.key for e in self.entries)

    def heading(self, platform_name: str) -> str:
        return self.title.replace(PLATFORM_PLACEHOLDER, platform_name)


@dataclass(frozen=True)
class Section:
    header: str
    categories: tuple[Category, ...]


def _plain(*keys: str) -> tuple[Entry, ...]:
    return tuple(Entry(k) for k in keys)


# -------------------- Core runtime --------------------

CORE_RUNTIME = Category(
    "Essential Runtime Configuration:",
    _plain(
        "DOTNET_ADDITIONAL_DEPS",
        "DOTNET_DefaultDiagnosticPortSuspend",
        "DOTNET_DiagnosticPorts",
        "DOTNET_EnableEventPipe",
        "DOTNET_EventPipeOutputPath",
        "DOTNET_HOST_TRACE",
        "DOTNET_HOST_TRACEFILE",
        "DOTNET_HOST_TRACE_VERBOSITY",
        "DOTNET_MULTILEVEL_LOOKUP",
        "DOTNET_PerfMapEnabled",
        "DOTNET_ReadyToRun",
        "DOTNET_ROLL_FORWARD",
        "DOTNET_ROLL_FORWARD_TO_PRERELEASE",
        "DOTNET_ROOT",
        "DOTNET_SHARED_STORE",
        "DOTNET_STARTUP_HOOKS",
        "DOTNET_TieredCompilation",
    ),
)

GARBAGE_COLLECTION = Category(
    "Garbage Collection Configuration:",
    _plain(
        "DOTNET_GCConserveMemory",
        "DOTNET_GCHeapCount",
        "DOTNET_GCRetainVM",
        "DOTNET_gcServer",
    ),
)

THREADING_PERFORMANCE = Category(
    "Threading & Performance:",
    _plain(
        "DOTNET_SYSTEM_NET_SOCKETS_INLINE_COMPLETIONS",
        "DOTNET_ThreadPool_UnfairSemaphoreSpinLimit",
    ),
)

# -------------------- ASP.NET Core --------------------

HOSTING = Category(
    "Core Environment Configuration:",
    _plain(
        "ASPNETCORE_CONTENTROOT",
        "ASPNETCORE_DETAILEDERRORS",
        "ASPNETCORE_ENVIRONMENT",
        "ASPNETCORE_FORWARDEDHEADERS_ENABLED",
        "ASPNETCORE_HOSTINGSTARTUPASSEMBLIES",
        "ASPNETCORE_HTTPS_PORT",
        "ASPNETCORE_SHUTDOWNTIMEOUTSECONDS",
        "ASPNETCORE_URLS",
        "ASPNETCORE_WEBROOT",
        "DOTNET_ENVIRONMENT",
    ),
)

SECURITY = Category(
    "SSL/TLS & Security Configuration:",
    (
        Entry("ASPNETCORE_Kestrel__Certificates__Default__Password", masked=True),
        Entry("ASPNETCORE_Kestrel__Certificates__Default__Path"),
    ),
)

DATA_PROTECTION = Category(
    "Authentication & Data Protection:",
    _plain("ASPNETCORE_DATAPROTECTION_APPLICATIONNAME"),
)

# -------------------- Networking --------------------

NETWORKING = Category(
    "HTTP Client & Protocol Support:",
    _plain(
        "DOTNET_SYSTEM_NET_DISABLEIPV6",
        "DOTNET_SYSTEM_NET_HTTP_SOCKETSHTTPHANDLER_HTTP2SUPPORT",
        "DOTNET_SYSTEM_NET_HTTP_SOCKETSHTTPHANDLER_HTTP3SUPPORT",
        "DOTNET_SYSTEM_NET_HTTP_USESOCKETSHTTPHANDLER",
        "DOTNET_SYSTEM_NET_HTTP_USEPORTSINURLS",
    ),
)

# -------------------- Platform / container --------------------

PLATFORM_SPECIFIC = Category(
    f"Platform-Specific Configuration (Current: {PLATFORM_PLACEHOLDER}):",
    _plain(
        "DOTNET_SYSTEM_GLOBALIZATION_INVARIANT",
        "DOTNET_SYSTEM_GLOBALIZATION_PREDEFINED_CULTURES_ONLY",
        "DOTNET_LegacyNullReferenceExceptionPolicy",
        "DOTNET_USE_POLLING_FILE_WATCHER",
        "DOTNET_SYSTEM_NET_HTTP_USEKESTREL",
    ),
)

CONTAINER = Category(
    "Container Detection & Optimization:",
    _plain(
        "DOTNET_RUNNING_IN_CONTAINER",
        "DOTNET_RUNNING_IN_CONTAINERS",
        "DOTNET_SYSTEM_CONSOLE_ALLOW_ANSI_COLOR_REDIRECTION",
    ),
)

# -------------------- SDK / packages --------------------

SDK = Category(
    "Essential Customer Configuration:",
    _plain(
        "DOTNET_CLI_TELEMETRY_OPTOUT",
        "DOTNET_CLI_UI_LANGUAGE",
        "DOTNET_NOLOGO",
        "DOTNET_SKIP_FIRST_TIME_EXPERIENCE",
    ),
)

PACKAGE_MANAGEMENT = Category(
    "Package Management (Customer Impact):",
    _plain(
        "NUGET_FALLBACK_PACKAGES",
        "NUGET_HTTP_CACHE_PATH",
        "NUGET_PACKAGES",
        "NUGET_SCRATCH",
    ),
)

# -------------------- Legacy --------------------

LEGACY_COREHOST = Category(
    "COREHOST_* Variables (Still Supported):",
    _plain("COREHOST_TRACE", "COREHOST_TRACEFILE"),
)

LEGACY_COMPLUS = Category(
    "COMPlus_* Variables (Deprecated but Functional):",
    _plain(
        "COMPlus_EnableEventPipe",
        "COMPlus_gcServer",
        "COMPlus_GCConserveMemory",
        "COMPlus_ReadyToRun",
        "COMPlus_TieredCompilation",
    ),
)


CATALOG: tuple[Section, ...] = (
    Section(
        "CORE RUNTIME ENVIRONMENT VARIABLES",
        (CORE_RUNTIME, GARBAGE_COLLECTION, THREADING_PERFORMANCE),
    ),
    Section(
        "ASP.NET CORE ENVIRONMENT VARIABLES",
        (HOSTING, SECURITY, DATA_PROTECTION),
    ),
    Section("NETWORKING & HTTP CONFIGURATION", (NETWORKING,)),
    Section("PLATFORM-SPECIFIC VARIABLES", (PLATFORM_SPECIFIC,)),
    Section("CONTAINER & CLOUD ENVIRONMENT VARIABLES", (CONTAINER,)),
    Section("CUSTOMER-RELEVANT SDK VARIABLES", (SDK, PACKAGE_MANAGEMENT)),
    Section("LEGACY VARIABLE COMPATIBILITY", (LEGACY_COREHOST, LEGACY_COMPLUS)),
)


def iter_categories(catalog: tuple[Section, ...] = CATALOG):
    for section in catalog:
        yield from section.categories


def all_keys(catalog: tuple[Section, ...] = CATALOG) -> list[str]:
    """Все ключи каталога в порядке отчёта."""
    return [key for cat in iter_categories(catalog) for key in cat.keys]
