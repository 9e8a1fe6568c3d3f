import io
import os
import sys
from pathlib import Path

import pytest

from envdiag.catalog import SECURITY, all_keys
from envdiag.report import (
    ENV_FOOTER,
    ENV_HEADER,
    MASKED,
    NOT_SET,
    RUNTIME_FOOTER,
    RUNTIME_HEADER,
    SECTION_RULE,
    HostPaths,
    find_launcher_on_path,
    probe_host_paths,
    render_snapshot,
    resolve_variable,
    write_environment_report,
    write_full_report,
    write_runtime_information,
)
from envdiag.snapshot import build_snapshot

PASSWORD_KEY = "ASPNETCORE_Kestrel__Certificates__Default__Password"

FIXED_PATHS = HostPaths(
    from_args="/usr/bin/python3",
    from_process="/usr/bin/python3",
    from_entry_module=None,
    on_path=None,
)


def _env_report(environ, os_family="Linux", host_paths=FIXED_PATHS) -> str:
    buf = io.StringIO()
    write_environment_report(buf, environ=environ, os_family=os_family, host_paths=host_paths)
    return buf.getvalue()


class BrokenSink:
    def write(self, text):
        raise OSError("disk full")


# ---------------- Resolution / masking ----------------


def test_password_masked_when_set():
    entry = SECURITY.entries[0]
    var = resolve_variable(entry, {PASSWORD_KEY: "hunter2"})
    assert var.raw == "hunter2"
    assert var.display == MASKED


def test_password_not_masked_when_absent():
    var = resolve_variable(SECURITY.entries[0], {})
    assert var.raw is None
    assert var.display == NOT_SET


def test_password_set_to_empty_shows_empty():
    var = resolve_variable(SECURITY.entries[0], {PASSWORD_KEY: ""})
    assert var.raw == ""
    assert var.display == ""
    text = _env_report({PASSWORD_KEY: ""})
    assert f"\t\t{PASSWORD_KEY}: \n" in text
    assert MASKED not in text


def test_unmasked_entry_shows_value():
    var = resolve_variable(SECURITY.entries[1], {SECURITY.entries[1].key: "/certs/site.pfx"})
    assert var.display == "/certs/site.pfx"


# ---------------- Environment report ----------------


def test_nothing_set_renders_not_set_everywhere():
    text = _env_report({})
    for key in all_keys():
        assert f"\t\t{key}: {NOT_SET}\n" in text
    assert text.count(f": {NOT_SET}\n") == len(all_keys())


def test_masked_password_line():
    text = _env_report({PASSWORD_KEY: "hunter2"})
    assert f"\t\t{PASSWORD_KEY}: ***MASKED***\n" in text
    assert "hunter2" not in text


def test_set_value_shown():
    text = _env_report({"DOTNET_gcServer": "1", "NUGET_PACKAGES": "/nuget"})
    assert "\t\tDOTNET_gcServer: 1\n" in text
    assert "\t\tNUGET_PACKAGES: /nuget\n" in text


def test_report_layout():
    lines = _env_report({}).split("\n")
    assert lines[0] == ENV_HEADER
    assert lines[1] == "\tHOST PATH INFORMATION"
    assert lines[2] == SECTION_RULE
    assert lines[3] == "\tdotnet host path (from args): /usr/bin/python3"
    assert lines[4] == "\tdotnet host path (from process): /usr/bin/python3"
    assert lines[5] == "\tdotnet host path (from entry assembly): No entry assembly location found"
    assert lines[6] == "\tdotnet executable found on PATH: Not found"
    assert lines[7] == ""
    assert lines[8] == "\tCORE RUNTIME ENVIRONMENT VARIABLES"
    assert lines[9] == SECTION_RULE
    assert lines[10] == "\tEssential Runtime Configuration:"
    assert lines[11] == "\t\tDOTNET_ADDITIONAL_DEPS: (not set)"


def test_report_footer():
    text = _env_report({})
    assert text.endswith(
        "\t\tCOMPlus_TieredCompilation: (not set)\n\n\n" + ENV_FOOTER + "\n\n"
    )


def test_sections_separated_by_blank_line():
    text = _env_report({})
    assert "\n\n\tASP.NET CORE ENVIRONMENT VARIABLES\n" + SECTION_RULE + "\n" in text
    assert "\n\n\tLEGACY VARIABLE COMPATIBILITY\n" + SECTION_RULE + "\n" in text


def test_category_order_in_report():
    text = _env_report({})
    positions = [text.index(f"\t\t{key}: ") for key in all_keys()]
    assert positions == sorted(positions)


@pytest.mark.parametrize("family", ["Windows", "Linux", "macOS", "Unknown"])
def test_platform_header(family):
    text = _env_report({}, os_family=family)
    assert f"\tPlatform-Specific Configuration (Current: {family}):\n" in text


def test_environment_report_is_stable():
    env = {PASSWORD_KEY: "x", "DOTNET_ROOT": "/opt/dotnet"}
    assert _env_report(env) == _env_report(env)


# ---------------- Host paths ----------------


def test_launcher_found_on_path(tmp_path: Path):
    empty = tmp_path / "empty"
    empty.mkdir()
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    (bin_dir / "dotnet").write_text("#!/bin/sh\n", encoding="utf-8")
    env = {"PATH": os.pathsep.join(["", "  ", str(empty), str(bin_dir)])}

    found = find_launcher_on_path(env, family="Linux")
    assert found == os.path.join(str(bin_dir), "dotnet")

    text = _env_report(env, host_paths=None)
    assert f"\tdotnet executable found on PATH: {found}\n" in text


def test_launcher_exe_name_on_windows(tmp_path: Path):
    (tmp_path / "dotnet").write_text("", encoding="utf-8")
    env = {"PATH": str(tmp_path)}
    # на Windows ищем dotnet.exe, голый dotnet не подходит
    assert find_launcher_on_path(env, family="Windows") is None
    (tmp_path / "dotnet.exe").write_text("", encoding="utf-8")
    assert find_launcher_on_path(env, family="Windows") == os.path.join(str(tmp_path), "dotnet.exe")


def test_first_match_wins(tmp_path: Path):
    first = tmp_path / "a"
    second = tmp_path / "b"
    for d in (first, second):
        d.mkdir()
        (d / "dotnet").write_text("", encoding="utf-8")
    env = {"PATH": os.pathsep.join([str(first), str(second)])}
    assert find_launcher_on_path(env, family="Linux") == os.path.join(str(first), "dotnet")


def test_directory_named_like_launcher_ignored(tmp_path: Path):
    (tmp_path / "dotnet").mkdir()
    assert find_launcher_on_path({"PATH": str(tmp_path)}, family="Linux") is None


def test_no_path_variable():
    assert find_launcher_on_path({}, family="Linux") is None
    text = _env_report({}, host_paths=None)
    assert "\tdotnet executable found on PATH: Not found\n" in text


def test_custom_launcher_and_path_variable(tmp_path: Path):
    (tmp_path / "dnx").write_text("", encoding="utf-8")
    env = {"SEARCH_DIRS": str(tmp_path)}
    found = find_launcher_on_path(
        env, family="Linux", launcher_name="dnx", path_variable="SEARCH_DIRS"
    )
    assert found == os.path.join(str(tmp_path), "dnx")


def test_probe_host_paths_current_process():
    paths = probe_host_paths({}, family="Linux")
    assert paths.from_process == (sys.executable or None)
    assert paths.from_args
    assert paths.on_path is None


# ---------------- Runtime information ----------------


def test_runtime_information_block():
    snap = build_snapshot()
    buf = io.StringIO()
    write_runtime_information(buf, snap)
    assert buf.getvalue() == (
        "\n" + RUNTIME_HEADER + "\n\n\t" + render_snapshot(snap) + "\n" + RUNTIME_FOOTER + "\n\n"
    )


def test_runtime_information_idempotent():
    snap = build_snapshot()
    a, b = io.StringIO(), io.StringIO()
    write_runtime_information(a, snap)
    write_runtime_information(b, snap)
    assert a.getvalue() == b.getvalue()


def test_full_report_has_both_blocks():
    buf = io.StringIO()
    write_full_report(buf, environ={}, os_family="Linux")
    text = buf.getvalue()
    assert text.index(RUNTIME_HEADER) < text.index(ENV_HEADER)


# ---------------- Sink errors ----------------


@pytest.mark.parametrize(
    "write",
    [
        lambda s: write_runtime_information(s),
        lambda s: write_environment_report(s, environ={}),
        lambda s: write_full_report(s, environ={}),
    ],
)
def test_none_sink_rejected(write):
    with pytest.raises(ValueError):
        write(None)


def test_sink_failure_propagates():
    with pytest.raises(OSError, match="disk full"):
        write_environment_report(BrokenSink(), environ={}, host_paths=FIXED_PATHS)
    with pytest.raises(OSError, match="disk full"):
        write_runtime_information(BrokenSink())
