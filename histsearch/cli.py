"""
cli.py - Command line entry point

    histsearch [--shell NAME] [--history-file PATH] [--output-file PATH] [--debug]

Loads the shell's history, runs the interactive search, and prints the chosen
command (or writes it to --output-file). Nothing is printed on cancel. The TUI
draws on stderr, so `cmd=$(histsearch)` works from a shell widget.

Exit status: 0 on selection or cancel, 1 on any fatal error.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.markup import escape

from histsearch import __version__
from histsearch.config import Config
from histsearch.console import console_print, setup_logging
from histsearch.errors import HistSearchError, HistSearchIOError
from histsearch.history import load_history

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="histsearch",
        description="Interactive shell history search with up to 5 nested filters",
    )
    ap.add_argument("-s", "--shell", help="Shell type (bash, zsh, fish); auto-detected if omitted")
    ap.add_argument("-f", "--history-file", help="History file path; the shell's default if omitted")
    ap.add_argument("-o", "--output-file", help="Write the selected command here instead of stdout")
    ap.add_argument("-d", "--debug", action="store_true", help="Log diagnostics to stderr")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap


def emit_selection(command: str, output_file: Path | None = None) -> None:
    """→ Writes the command plus one newline to the output file, or stdout"""
    line = command + "\n"
    if output_file is None:
        try:
            sys.stdout.write(line)
            sys.stdout.flush()
        except OSError as e:
            raise HistSearchIOError(f"Error writing to stdout: {e}") from e
        return
    try:
        with output_file.open("w", encoding="utf-8") as f:
            f.write(line)
    except OSError as e:
        raise HistSearchIOError(f"Error writing to output file {output_file}: {e}") from e
    logger.debug("Wrote selection to %s", output_file)


def run(config: Config) -> str | None:
    """→ Loads history, runs the search, emits the result; returns the selection"""
    # Deferred so --help and --version don't pay for Textual's import
    from histsearch.app import run_search

    history = load_history(config.history_file, config.history_format)
    selected = run_search(history, max_dimensions=config.max_dimensions)
    if selected is None:
        logger.debug("Search cancelled")
        return None
    emit_selection(selected, config.output_file)
    return selected


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.debug)
    logger.info("Starting histsearch %s", __version__)

    try:
        config = Config.create(
            shell=args.shell,
            history_file=args.history_file,
            output_file=args.output_file,
            debug=args.debug,
        )
        run(config)
    except HistSearchError as e:
        logger.debug("Fatal error", exc_info=True)
        console_print(f"[error]Error: {escape(str(e))}[/error]", highlight=False)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
