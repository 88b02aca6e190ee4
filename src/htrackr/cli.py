from contextlib import contextmanager
from typing import Iterator, Optional

import typer
from loguru import logger

from . import dates
from .errors import HabitError
from .grid import render_month
from .logging_setup import setup_logger
from .repositories import Repository, get_repository
from .settings import Settings, get_settings

app = typer.Typer(
    name="htrackr",
    help="Track daily habits and view a monthly grid of completions.",
    no_args_is_help=True,
    add_completion=False,
)


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Turn any HabitError into a one-line message on stderr and exit code 1."""
    try:
        yield
    except HabitError as e:
        logger.debug("command failed with {}: {}", e.kind, e)
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1) from e


class _LazyRepository:
    """Opens storage on first use so --help and usage errors never touch the database."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._repo: Optional[Repository] = None

    def get(self) -> Repository:
        if self._repo is None:
            self._repo = get_repository(self._settings)
        return self._repo

    def close(self) -> None:
        if self._repo is not None:
            self._repo.close()


def _repo(ctx: typer.Context) -> Repository:
    return ctx.obj.get()


def _date_or_today(value: Optional[str]) -> dates.Date:
    return dates.parse(value) if value is not None else dates.today()


@app.callback()
def main_callback(
    ctx: typer.Context,
    db: Optional[str] = typer.Option(None, "--db", help="Path of the habits database (overrides HTRACKR_DB_PATH)"),
) -> None:
    """
    Share one storage handle, opened on first use, with the subcommand.
    """
    settings = get_settings().with_db_path(db)
    setup_logger(settings.log_level, settings.log_file)
    storage = _LazyRepository(settings)
    ctx.obj = storage
    ctx.call_on_close(storage.close)


# PUBLIC_INTERFACE
@app.command("list")
def list_habits(
    ctx: typer.Context,
    date: Optional[str] = typer.Argument(None, metavar="[DATE]", help="Month in YYYY-MM format, default current month"),
    compact: bool = typer.Option(False, "--compact", "-c", help="Compact print (reserved)"),
) -> None:
    """List habits for a month."""
    with _handle_errors():
        month = dates.parse_month(date) if date is not None else dates.today()
        if compact:
            logger.debug("--compact has no effect yet")
        for line in render_month(_repo(ctx), month.year, month.month):
            typer.echo(line)


# PUBLIC_INTERFACE
@app.command()
def create(ctx: typer.Context, name: str = typer.Argument(..., help="Name of the new habit")) -> None:
    """Create a new habit."""
    with _handle_errors():
        _repo(ctx).create_habit(name)


# PUBLIC_INTERFACE
@app.command()
def delete(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Habit to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete a habit and all of its completion entries."""
    with _handle_errors():
        repo = _repo(ctx)
        repo.get_habit_id(name)
        if not yes:
            try:
                answer = typer.prompt(
                    f"Delete habit '{name}' and all of its entries? [y/N]",
                    default="",
                    show_default=False,
                )
            except typer.Abort:
                # Closed stdin counts as any answer other than y
                answer = ""
            if answer.strip() != "y":
                typer.echo("aborted")
                return
        repo.delete_habit(name)


# PUBLIC_INTERFACE
@app.command()
def rename(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Current habit name"),
    new_name: str = typer.Argument(..., help="New habit name"),
) -> None:
    """Rename a habit, keeping its id and completion entries."""
    with _handle_errors():
        _repo(ctx).rename_habit(name, new_name)


# PUBLIC_INTERFACE
@app.command("id")
def habit_id(ctx: typer.Context, name: str = typer.Argument(..., help="Habit name")) -> None:
    """Print the identifier of a habit."""
    with _handle_errors():
        typer.echo(_repo(ctx).get_habit_id(name))


# PUBLIC_INTERFACE
@app.command()
def mark(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Habit name"),
    date: Optional[str] = typer.Argument(None, metavar="[DATE]", help="YYYY-MM-DD, 'yesterday' or 'y'; default today"),
) -> None:
    """Mark a habit as complete for a date."""
    with _handle_errors():
        _repo(ctx).mark(name, _date_or_today(date))


# PUBLIC_INTERFACE
@app.command()
def unmark(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Habit name"),
    date: Optional[str] = typer.Argument(None, metavar="[DATE]", help="YYYY-MM-DD, 'yesterday' or 'y'; default today"),
) -> None:
    """Remove the completion mark of a habit for a date."""
    with _handle_errors():
        _repo(ctx).unmark(name, _date_or_today(date))


def main() -> None:
    """Console script entry point."""
    app(prog_name="htrackr")
