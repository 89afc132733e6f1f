"""Console prompts, import progress and table output for the importer app."""

import contextlib
import sys
import termios
import threading
from collections.abc import Iterator
from io import UnsupportedOperation
from pathlib import Path
from typing import Any, Literal, cast

import questionary
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.key_binding.key_bindings import merge_key_bindings
from questionary.prompts.path import GreatUXPathCompleter
from questionary.question import Question
from tabulate import tabulate

from trade_history_importer.config import ImportResult, TradeImportError
from trade_history_importer.importer import SAMPLE_TEMPLATE
from trade_history_importer.validators import validate_import_path

MainMenuAction = Literal["import_file", "show", "errors", "template", "exit_app"]
BackAction = Literal["__back__"]
BACK: BackAction = "__back__"

_SPINNER_FRAMES = "|/-\\"
_TRADE_TABLE_COLUMNS = [
    "symbol",
    "type",
    "status",
    "entry_date",
    "entry_price",
    "quantity",
    "exit_date",
    "exit_price",
    "pnl",
]


def _stdin_tty_fd() -> int | None:
    """Return stdin descriptor when it is an interactive terminal."""
    try:
        fd = sys.stdin.fileno()
    except (AttributeError, OSError, UnsupportedOperation):
        return None
    return fd if sys.stdin.isatty() else None


@contextlib.contextmanager
def _hidden_keystrokes() -> Iterator[None]:
    """Keep keys typed during an import from breaking the progress line."""
    if (fd := _stdin_tty_fd()) is None:
        yield
        return
    saved = termios.tcgetattr(fd)
    quiet = list(saved)
    quiet[3] = saved[3] & ~(termios.ECHO | termios.ICANON)
    termios.tcsetattr(fd, termios.TCSADRAIN, quiet)
    try:
        yield
    finally:
        # TCSAFLUSH also discards whatever was typed meanwhile.
        termios.tcsetattr(fd, termios.TCSAFLUSH, saved)


def _ask(question: Question, escape_back: bool = True) -> Any:
    """Ask one question; ESC answers with the back sentinel unless disabled."""
    application = question.application
    if escape_back:
        bindings = KeyBindings()
        bindings.add("escape", eager=True)(lambda event: event.app.exit(result=BACK))
        application.key_bindings = merge_key_bindings([bindings, application.key_bindings])
    application.ttimeoutlen = 0
    application.timeoutlen = 0
    return question.unsafe_ask()


def clear_screen() -> None:
    """Wipe screen and scrollback before the menu is redrawn."""
    sys.stdout.write("\x1b[3J\x1b[2J\x1b[H")
    sys.stdout.flush()


def prompt_for_main_menu_action(has_import_result: bool) -> MainMenuAction:
    """Prompt for one main-menu action and return selected command key."""
    disabled_result = None if has_import_result else "No import in this session"
    question = questionary.select(
        "Trade History Importer",
        choices=[
            questionary.Choice("Import trade history file", "import_file"),
            questionary.Choice("Show imported trades", "show", disabled=disabled_result),
            questionary.Choice("Show import errors", "errors", disabled=disabled_result),
            questionary.Choice("Show sample template", "template"),
            questionary.Choice("Exit", "exit_app"),
        ],
        erase_when_done=True,
    )
    return cast(MainMenuAction, _ask(question, escape_back=False))


def _file_filter(raw: str) -> bool:
    """Show directories and importable files in path completions."""
    path = Path(raw).expanduser().resolve()
    return path.is_dir() or (path.is_file() and validate_import_path(str(path)) is True)


def prompt_for_import_path() -> Path | BackAction:
    """Prompt for export file path and return resolved path or '__back__'."""
    question = questionary.text(
        "Trade history file [esc to back]:",
        validate=validate_import_path,
        completer=GreatUXPathCompleter(file_filter=_file_filter, expanduser=True),
        erase_when_done=True,
    )
    answer = _ask(question)
    if answer == BACK:
        return BACK
    return Path(str(answer).strip()).expanduser().resolve()


def _spin(done: threading.Event, label: str) -> None:
    tick = 0
    while not done.is_set():
        sys.stdout.write(f"\r{label} {_SPINNER_FRAMES[tick % len(_SPINNER_FRAMES)]}")
        sys.stdout.flush()
        tick += 1
        done.wait(0.12)


@contextlib.contextmanager
def import_progress(label: str = "Importing trades...") -> Iterator[None]:
    """Show a spinner next to `label` while the enclosed import runs."""
    done = threading.Event()
    spinner = threading.Thread(target=_spin, args=(done, label), daemon=True)
    with _hidden_keystrokes():
        spinner.start()
        try:
            yield
        finally:
            done.set()
            spinner.join()
            sys.stdout.write("\r\x1b[2K")
            sys.stdout.flush()


def pause() -> None:
    """Keep current output on screen until any key is pressed."""
    question = questionary.press_any_key_to_continue("Press any key to return to the menu...")
    _ask(question, escape_back=False)


def print_import_summary(result: ImportResult) -> None:
    """Print green summary for successful imports and red one otherwise."""
    color = "32" if result.success else "31"
    print(f"\x1b[{color}m{result.summary()}\x1b[0m", flush=True)


def print_trades(result: ImportResult) -> None:
    """Render imported trades as one table."""
    df = result.to_dataframe()[_TRADE_TABLE_COLUMNS]
    table = tabulate(
        df.astype(object).where(df.notna(), ""),
        headers="keys",
        tablefmt="simple_outline",
        showindex=False,
        disable_numparse=True,
    )
    print(table, flush=True)


def print_import_errors(errors: list[TradeImportError], limit: int) -> None:
    """Render first `limit` import errors and a count of the remaining ones."""
    if not errors:
        print("No import errors.", flush=True)
        return
    table = tabulate(
        [[error.row, error.message] for error in errors[:limit]],
        headers=["Row", "Message"],
        tablefmt="simple_outline",
        disable_numparse=True,
    )
    lines = [table]
    if len(errors) > limit:
        lines.append(f"... and {len(errors) - limit} more errors.")
    print("\n".join(lines), flush=True)


def print_sample_template() -> None:
    """Print sample export accepted by the importer."""
    print(SAMPLE_TEMPLATE.rstrip("\n"), flush=True)
