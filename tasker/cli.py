"""Command-line interface for the task tracker."""

import logging
import sys
from typing import Iterable, Iterator, List, Optional

import click
from rich.console import Console
from rich.markup import escape

from tasker.errors import NotFoundError, TaskerError, UsageError
from tasker.logging_setup import setup_logging
from tasker.store import DEFAULT_DATA_FILE, TaskStore, next_id
from tasker.task import Task

logger = logging.getLogger(__name__)

USAGE = """tasker: simple todo CLI

Usage:
  tasker add <title>
  tasker list
  tasker done <id>
  tasker rm <id>"""

EMPTY_NOTICE = "No tasks yet."

console = Console(emoji=False, highlight=False)


def _echo(text: str) -> None:
    """Print plain text; brackets and colons are not rich markup."""
    console.print(text, markup=False, soft_wrap=True)


def _print_error(message: str) -> None:
    console.print(f"[red]Error:[/red] {escape(message)}", soft_wrap=True)


def _parse_id(raw: Optional[str]) -> int:
    if raw is None:
        raise UsageError("Missing id.")
    try:
        return int(raw)
    except ValueError:
        raise UsageError("Invalid id.") from None


def _find_task(tasks: List[Task], task_id: int) -> Optional[Task]:
    """Return the first task with the given id."""
    return next((task for task in tasks if task.id == task_id), None)


def iter_task_lines(tasks: Iterable[Task]) -> Iterator[str]:
    """Yield one checkbox line per task, in stored order."""
    for task in tasks:
        yield str(task)


@click.group(
    invoke_without_command=True,
    context_settings={"token_normalize_func": str.lower},
)
@click.option(
    "-f", "--file", "data_file",
    default=DEFAULT_DATA_FILE,
    help="Path to the task data file",
    show_default=True,
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Log debug output to stderr",
)
@click.pass_context
def cli(ctx, data_file, verbose):
    """tasker: simple todo CLI."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    if ctx.obj.get("store") is None:
        ctx.obj["store"] = TaskStore(data_file)
    if ctx.invoked_subcommand is None:
        raise UsageError("Missing command.", show_usage=True)
    logger.debug("Running %r against %s", ctx.invoked_subcommand, ctx.obj["store"])


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("words", nargs=-1)
@click.pass_obj
def add(obj, words):
    """Append a new task; the words form its title."""
    title = " ".join(words)
    if not title.strip():
        raise UsageError("Missing title.")

    store = obj["store"]
    tasks = store.load()
    task = Task.create(next_id(tasks), title)
    tasks.append(task)
    store.save(tasks)

    _echo(f"Added #{task.id}: {task.title}")


@cli.command(name="list")
@click.pass_obj
def list_cmd(obj):
    """Print all tasks."""
    tasks = obj["store"].load()
    if not tasks:
        _echo(EMPTY_NOTICE)
        return
    for line in iter_task_lines(tasks):
        _echo(line)


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("task_id", metavar="ID", required=False)
@click.pass_obj
def done(obj, task_id):
    """Mark a task as complete."""
    task_id = _parse_id(task_id)

    store = obj["store"]
    tasks = store.load()
    task = _find_task(tasks, task_id)
    if task is None:
        raise NotFoundError()

    task.complete()
    store.save(tasks)
    logger.debug("Task #%d done at %s", task.id, task.done_at)

    _echo(f"Marked done: {task_id}")


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("task_id", metavar="ID", required=False)
@click.pass_obj
def rm(obj, task_id):
    """Delete a task."""
    task_id = _parse_id(task_id)

    store = obj["store"]
    tasks = store.load()
    remaining = [task for task in tasks if task.id != task_id]
    if len(remaining) == len(tasks):
        raise NotFoundError()

    store.save(remaining)

    _echo(f"Removed: {task_id}")


def main(argv: Optional[list[str]] = None, store=None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Arguments without the program name (defaults to sys.argv[1:])
        store: Task store to use instead of the JSON file named by --file

    Returns:
        Process exit code: 0 on success, 1 on any failure
    """
    try:
        cli.main(args=argv, prog_name="tasker", obj={"store": store}, standalone_mode=False)
        return 0
    except TaskerError as e:
        _print_error(str(e))
        if getattr(e, "show_usage", False):
            _echo(USAGE)
        return e.exit_code
    except click.UsageError as e:
        _print_error(e.format_message())
        _echo(USAGE)
        return 1
    except click.ClickException as e:
        _print_error(e.format_message())
        return 1
    except click.Abort:
        return 1
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        console.print(f"[red]Unexpected error:[/red] {escape(str(e))}", soft_wrap=True)
        return 1


def run() -> None:
    """Console-script entry point; exits with the code from main()."""
    sys.exit(main())


if __name__ == "__main__":
    run()
