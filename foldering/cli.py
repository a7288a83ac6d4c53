"""Command-line front door for foldering.

Parses CLI options, resolves the confinement root from the argument or the
persisted start path, configures logging, and runs the terminal explorer.
"""

from __future__ import annotations

import argparse
import locale
import logging
import os
from pathlib import Path

from . import config
from .app import ExplorerApp, run_explorer
from .context import ExplorerContext
from .file_ops import LocalFileOps
from .preview import normalize_style
from .session import ExplorerSession
from .tasks import ThreadedTaskRunner
from .ui_theme import available_theme_names, resolve_theme

LOGGER = logging.getLogger(__name__)

DEBUG_ENV_VAR = "FOLDERING_DEBUG"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="foldering",
        description="Browse and manage files below one folder in a terminal tree view.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Folder to open as the root. Defaults to the saved start folder, then the current directory.",
    )
    case = parser.add_mutually_exclusive_group()
    case.add_argument("--case-sensitive", dest="case_sensitive", action="store_true", default=None)
    case.add_argument("--case-insensitive", dest="case_sensitive", action="store_false")
    hidden = parser.add_mutually_exclusive_group()
    hidden.add_argument("--show-hidden", dest="show_hidden", action="store_true", default=None)
    hidden.add_argument("--hide-hidden", dest="show_hidden", action="store_false")
    parser.add_argument("--style", default=None, help="Pygments style for the file preview.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--log-file", default=None, help="Write debug logs to this file.")
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Do not remember the opened folder as the next start folder.",
    )
    return parser


def configure_logging(log_file: str | None) -> None:
    """Send logs to ``log_file`` or, with ``FOLDERING_DEBUG`` set, to stderr.

    Nothing is configured otherwise: the terminal is in raw mode while the
    explorer runs.
    """
    debug = bool(os.environ.get(DEBUG_ENV_VAR))
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=logging.DEBUG if debug else logging.INFO,
            format=LOG_FORMAT,
        )
    elif debug:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)


def configure_collation() -> None:
    """Sort entry names by the user's locale rather than by code point."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as exc:
        LOGGER.warning("Keeping default collation: %s", exc)


def resolve_start_path(argument: str | None, default_path: Path | None = None) -> Path:
    """Pick the root: explicit argument, then saved start path, then cwd."""
    if argument is not None:
        path = Path(argument).expanduser()
        if not path.exists():
            raise SystemExit(f"Path not found: {path}")
        if not path.is_dir():
            raise SystemExit(f"Not a directory: {path}")
        return path
    saved = config.load_start_path()
    if saved is not None:
        return saved
    return default_path if default_path is not None else Path.cwd()


def main(default_path: Path | None = None) -> None:
    """Parse CLI arguments and launch the explorer.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is the last fallback.
    """
    args = build_parser().parse_args()
    configure_logging(args.log_file)
    configure_collation()

    root = resolve_start_path(args.path, default_path)
    show_hidden = args.show_hidden if args.show_hidden is not None else config.load_show_hidden()
    case_sensitive = args.case_sensitive if args.case_sensitive is not None else config.load_case_sensitive()
    theme = resolve_theme(args.theme or config.load_theme_name(), no_color=args.no_color)
    style = normalize_style(args.style or config.load_preview_style())

    context = ExplorerContext.for_root(root, case_sensitive=case_sensitive, show_hidden=show_hidden)
    if not args.no_save:
        config.save_start_path(context.root)
    LOGGER.info("Opening %s (case_sensitive=%s)", context.root, context.boundary.case_sensitive)

    runner = ThreadedTaskRunner()
    session = ExplorerSession(context, gateway=LocalFileOps(show_hidden=show_hidden), runner=runner)
    app = ExplorerApp(
        session,
        hotkeys=config.load_hotkey_overrides(),
        theme=theme,
        preview_style=style,
        no_color=args.no_color,
        on_show_hidden_changed=config.save_show_hidden,
    )
    try:
        run_explorer(app)
    finally:
        runner.close()


if __name__ == "__main__":
    main()
