# envdiag/report.py
"""
Текстовые отчёты: снимок рантайма и переменные окружения .NET по категориям.

Отчёт пишется построчно в любой текстовый приёмник с методом write()
(sys.stdout, открытый файл, io.StringIO). Приёмник открывает и закрывает
вызывающий код; ошибки записи пробрасываются как есть.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TextIO

from envdiag.capabilities import os_family as detect_os_family
from envdiag.catalog import CATALOG, Category, Entry, Section
from envdiag.snapshot import RuntimeSnapshot, build_snapshot

log = logging.getLogger(__name__)

NOT_SET = "(not set)"
MASKED = "***MASKED***"
NOT_FOUND = "Not found"
NO_ENTRY_LOCATION = "No entry assembly location found"

DEFAULT_LAUNCHER = "dotnet"
DEFAULT_PATH_VARIABLE = "PATH"

RUNTIME_HEADER = "==================== Runtime Information ===================="
RUNTIME_FOOTER = "=" * 58
ENV_HEADER = "==================== .NET Environment Variables ===================="
ENV_FOOTER = "=" * 68
SECTION_RULE = "-" * 70


@dataclass(frozen=True)
class ResolvedVariable:
    key: str
    raw: str | None
    display: str


@dataclass(frozen=True)
class HostPaths:
    from_args: str | None
    from_process: str | None
    from_entry_module: str | None
    on_path: str | None


def _require_sink(sink: TextIO | None) -> TextIO:
    if sink is None:
        raise ValueError("output sink must not be None")
    return sink


def _line(sink: TextIO, text: str = "") -> None:
    sink.write(text + "\n")


# -------------------- Переменные окружения --------------------


def resolve_variable(entry: Entry, environ: Mapping[str, str] | None = None) -> ResolvedVariable:
    env = os.environ if environ is None else environ
    raw = env.get(entry.key)
    if raw is None:
        display = NOT_SET
    elif entry.masked and raw:
        display = MASKED
    else:
        display = raw
    return ResolvedVariable(key=entry.key, raw=raw, display=display)


def resolve_category(
    category: Category, environ: Mapping[str, str] | None = None
) -> list[ResolvedVariable]:
    return [resolve_variable(e, environ) for e in category.entries]


# -------------------- Пути хоста --------------------


def launcher_file_name(family: str, launcher_name: str = DEFAULT_LAUNCHER) -> str:
    return f"{launcher_name}.exe" if family == "Windows" else launcher_name


def find_launcher_on_path(
    environ: Mapping[str, str] | None = None,
    *,
    family: str | None = None,
    launcher_name: str = DEFAULT_LAUNCHER,
    path_variable: str = DEFAULT_PATH_VARIABLE,
) -> str | None:
    """Первая директория из PATH, где лежит исполняемый файл лаунчера; иначе None."""
    env = os.environ if environ is None else environ
    search = env.get(path_variable)
    if not search:
        return None
    file_name = launcher_file_name(family or detect_os_family(), launcher_name)
    for directory in search.split(os.pathsep):
        if not directory.strip():
            continue
        candidate = os.path.join(directory, file_name)
        if os.path.isfile(candidate):
            return candidate
    return None


def _first_command_line_arg() -> str | None:
    argv = getattr(sys, "orig_argv", None) or sys.argv
    return argv[0] if argv and argv[0] else None


def _entry_module_location() -> str | None:
    main = sys.modules.get("__main__")
    path = getattr(main, "__file__", None)
    return os.path.abspath(path) if path else None


def probe_host_paths(
    environ: Mapping[str, str] | None = None,
    *,
    family: str | None = None,
    launcher_name: str = DEFAULT_LAUNCHER,
    path_variable: str = DEFAULT_PATH_VARIABLE,
) -> HostPaths:
    return HostPaths(
        from_args=_first_command_line_arg(),
        from_process=sys.executable or None,
        from_entry_module=_entry_module_location(),
        on_path=find_launcher_on_path(
            environ, family=family, launcher_name=launcher_name, path_variable=path_variable
        ),
    )


# -------------------- Снимок рантайма --------------------


def render_snapshot(snapshot: RuntimeSnapshot) -> str:
    """`name: value` по всем полям снимка, по алфавиту, через ', '."""
    pairs = sorted(snapshot.fields(), key=lambda kv: kv[0])
    return ", ".join(f"{name}: {value}" for name, value in pairs)


def write_runtime_information(sink: TextIO, snapshot: RuntimeSnapshot | None = None) -> None:
    out = _require_sink(sink)
    snap = snapshot if snapshot is not None else build_snapshot()
    _line(out)
    _line(out, RUNTIME_HEADER)
    _line(out)
    _line(out, f"\t{render_snapshot(snap)}")
    _line(out, RUNTIME_FOOTER)
    _line(out)


# -------------------- Отчёт по переменным --------------------


def _write_host_paths(out: TextIO, paths: HostPaths) -> None:
    _line(out, "\tHOST PATH INFORMATION")
    _line(out, SECTION_RULE)
    _line(out, f"\tdotnet host path (from args): {paths.from_args or NOT_FOUND}")
    _line(out, f"\tdotnet host path (from process): {paths.from_process or NOT_FOUND}")
    _line(
        out,
        f"\tdotnet host path (from entry assembly): {paths.from_entry_module or NO_ENTRY_LOCATION}",
    )
    _line(out, f"\tdotnet executable found on PATH: {paths.on_path or NOT_FOUND}")
    _line(out)


def _write_category(
    out: TextIO, category: Category, environ: Mapping[str, str], platform_name: str
) -> int:
    _line(out, f"\t{category.heading(platform_name)}")
    set_count = 0
    for var in resolve_category(category, environ):
        if var.raw is not None:
            set_count += 1
        _line(out, f"\t\t{var.key}: {var.display}")
    _line(out)
    return set_count


def write_environment_report(
    sink: TextIO,
    *,
    environ: Mapping[str, str] | None = None,
    os_family: str | None = None,
    host_paths: HostPaths | None = None,
    launcher_name: str = DEFAULT_LAUNCHER,
    path_variable: str = DEFAULT_PATH_VARIABLE,
    catalog: tuple[Section, ...] = CATALOG,
) -> None:
    """
    Выводит пути хоста и все категории каталога в фиксированном порядке.

    environ / os_family / host_paths по умолчанию берутся из текущего процесса.
    """
    out = _require_sink(sink)
    env = os.environ if environ is None else environ
    family = os_family or detect_os_family()
    paths = host_paths or probe_host_paths(
        env, family=family, launcher_name=launcher_name, path_variable=path_variable
    )

    _line(out, ENV_HEADER)
    _write_host_paths(out, paths)

    set_count = 0
    for idx, section in enumerate(catalog):
        if idx:
            _line(out)
        _line(out, f"\t{section.header}")
        _line(out, SECTION_RULE)
        for category in section.categories:
            set_count += _write_category(out, category, env, family)

    _line(out)
    _line(out, ENV_FOOTER)
    _line(out)
    log.debug(
        "Environment report written: %d catalog variables set, platform=%s", set_count, family
    )


def write_full_report(
    sink: TextIO,
    *,
    snapshot: RuntimeSnapshot | None = None,
    environ: Mapping[str, str] | None = None,
    os_family: str | None = None,
    launcher_name: str = DEFAULT_LAUNCHER,
    path_variable: str = DEFAULT_PATH_VARIABLE,
) -> None:
    out = _require_sink(sink)
    write_runtime_information(out, snapshot)
    write_environment_report(
        out,
        environ=environ,
        os_family=os_family,
        launcher_name=launcher_name,
        path_variable=path_variable,
    )
