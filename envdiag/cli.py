from __future__ import annotations

import contextlib
import logging
import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Annotated, TextIO

import typer

from envdiag.config import load_config, save_config
from envdiag.logs import LogLevel, setup_logging
from envdiag.report import write_environment_report, write_full_report, write_runtime_information
from envdiag.snapshot import build_snapshot

logger = logging.getLogger(__name__)

# -------------------- Typer app --------------------

app = typer.Typer(
    add_completion=False,
    help="Диагностика процесса: снимок рантайма и переменные окружения .NET",
)

# Typer defaults as module-level constants to avoid B008 in function signature
OPT_OUT = typer.Option(None, "--out", "-o", help="Записать отчёт в файл вместо stdout")


@app.callback()
def main() -> None:
    cfg = load_config()
    setup_logging(cfg["log_level"])


@contextlib.contextmanager
def _open_sink(out: Path | None) -> Iterator[TextIO]:
    if out is None:
        yield sys.stdout
        return
    with out.open("w", encoding="utf-8") as f:
        yield f


def _emit(out: Path | None, write: Callable[[TextIO], None]) -> None:
    try:
        with _open_sink(out) as sink:
            write(sink)
    except OSError as err:
        logger.error("Report write failed: %s", err)
        typer.secho(f"Не удалось записать отчёт: {err}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2) from err
    if out is not None:
        typer.secho(f"Отчёт сохранён: {out}", fg=typer.colors.GREEN, err=True)


# -------------------- Отчёты --------------------


@app.command("runtime")
def runtime(out: Path | None = OPT_OUT) -> None:
    """Снимок рантайма: ОС, процесс, интерпретатор, сборка."""
    snapshot = build_snapshot()
    _emit(out, lambda sink: write_runtime_information(sink, snapshot))


@app.command("env")
def env(out: Path | None = OPT_OUT) -> None:
    """Переменные окружения .NET по категориям (секреты маскируются)."""
    cfg = load_config()
    _emit(
        out,
        lambda sink: write_environment_report(
            sink, launcher_name=cfg["launcher_name"], path_variable=cfg["path_variable"]
        ),
    )


@app.command("report")
def report(out: Path | None = OPT_OUT) -> None:
    """Оба отчёта подряд: снимок рантайма и переменные окружения."""
    cfg = load_config()
    snapshot = build_snapshot()
    _emit(
        out,
        lambda sink: write_full_report(
            sink,
            snapshot=snapshot,
            launcher_name=cfg["launcher_name"],
            path_variable=cfg["path_variable"],
        ),
    )


# -------------------- Конфиг --------------------


@app.command("config")
def configure(
    launcher_name: Annotated[
        str | None, typer.Option(help="Имя лаунчера для поиска в PATH (без .exe)")
    ] = None,
    path_variable: Annotated[
        str | None, typer.Option(help="Переменная окружения со списком директорий поиска")
    ] = None,
    log_level: Annotated[
        LogLevel | None, typer.Option(case_sensitive=False, help="Уровень логирования")
    ] = None,
) -> None:
    """Сохранить настройки в ~/.envdiag/config.json."""
    cfg = load_config()
    if launcher_name is not None:
        cfg["launcher_name"] = launcher_name
    if path_variable is not None:
        cfg["path_variable"] = path_variable
    if log_level is not None:
        cfg["log_level"] = log_level.value
    path = save_config(cfg)
    typer.echo(f"Конфиг сохранён: {path}")


# -------------------- Entry --------------------


def run():
    app()


if __name__ == "__main__":
    run()
