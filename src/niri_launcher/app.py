"""niri-launcher - command line entry point."""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from niri_launcher.config import (
    DEFAULT_KITTY_SOCKET,
    DEFAULT_PIXELS_PER_SYMBOL,
    DEFAULT_WIDTH_COEFFICIENT,
    LauncherConfig,
)
from niri_launcher.errors import LauncherError
from niri_launcher.launch import (
    editor_command,
    exec_command,
    get_launching_data,
    kitty_command,
    require_pid,
    resolve_base_window,
)
from niri_launcher.niri import NiriSocket
from niri_launcher.sync import SyncSession

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for every launcher command."""
    parser = argparse.ArgumentParser(
        prog="niri-launcher",
        description="Simple utility to smartly launch several tools within niri.",
    )
    parser.add_argument("-p", "--path", type=Path, help="Path to niri socket")
    parser.add_argument(
        "-k",
        "--kitty-socket",
        default=DEFAULT_KITTY_SOCKET,
        help="Template of kitty socket; ${ENV} and {pid} are substituted",
    )
    parser.add_argument(
        "-f",
        "--fresh",
        action="store_true",
        help="Launch with default cwd and environment regardless of focused window",
    )
    parser.add_argument("-w", "--window", type=int, help="niri window id to base on instead of focused")
    parser.add_argument(
        "--width-coefficient",
        type=float,
        default=DEFAULT_WIDTH_COEFFICIENT,
        help="Editor columns per text-wrap column (default: %(default)s)",
    )
    parser.add_argument(
        "--pixels-per-symbol",
        type=float,
        default=DEFAULT_PIXELS_PER_SYMBOL,
        help="Estimated editor glyph width in pixels (default: %(default)s)",
    )
    parser.add_argument("--editor-runtime-dir", type=Path, help="Directory holding editor sockets")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("test", help="Check niri availability")
    commands.add_parser("kitty", help="Run new kitty instance")
    commands.add_parser("env", help="Print environment for launching command")
    vim = commands.add_parser("vim", help="Editor related commands")
    vim_commands = vim.add_subparsers(dest="vim_command")
    vim_commands.add_parser("run", help="Run new editor instance")
    vim_commands.add_parser("sync", help="Synchronise editor window width with its content")
    vim.set_defaults(vim_command="run")
    return parser


def config_from_args(args: argparse.Namespace) -> LauncherConfig:
    """Build the launcher configuration from parsed arguments."""
    return LauncherConfig(
        niri_socket=args.path,
        kitty_socket=args.kitty_socket,
        fresh=args.fresh,
        window=args.window,
        width_coefficient=args.width_coefficient,
        pixels_per_symbol=args.pixels_per_symbol,
        editor_runtime_dir=args.editor_runtime_dir,
        verbose=args.verbose,
    )


def print_report(session: SyncSession, console: Console) -> None:
    """Print clustered columns together with desired and current widths."""
    table = Table(title=f"Num columns: {session.num_columns}")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Textwidth", justify="right")
    for column in session.columns:
        table.add_row(str(column.start), str(column.end), str(column.text_wrap_column))
    console.print(table)
    console.print(
        f"Desired width: sym {session.desired_symbol_width}/ pix {session.desired_pixel_width}"
    )
    console.print(
        f"Current width: sym {session.current_symbol_width}/ pix {session.current_pixel_width}"
    )


def run_test(config: LauncherConfig, niri: NiriSocket, console: Console) -> None:
    """Check niri answers requests."""
    niri.focused_window()
    console.print(f"niri is available at {niri.path}")


def run_kitty(config: LauncherConfig, niri: NiriSocket, console: Console) -> None:
    """Replace this process with kitty."""
    exec_command(kitty_command(get_launching_data(niri, config)))


def print_env(config: LauncherConfig, niri: NiriSocket, console: Console) -> None:
    """Print the environment a launched tool would get."""
    for name, value in get_launching_data(niri, config).env.items():
        console.print(f'{name}="{value}"', markup=False, emoji=False, highlight=False, soft_wrap=True)


def run_vim(config: LauncherConfig, niri: NiriSocket, console: Console) -> None:
    """Replace this process with neovide."""
    exec_command(editor_command(get_launching_data(niri, config)))


def sync_vim(config: LauncherConfig, niri: NiriSocket, console: Console) -> None:
    """Resize the base window to fit its editor layout."""
    window = resolve_base_window(niri, config.window)
    with SyncSession.for_pid(
        require_pid(window),
        config.user_id,
        width_coefficient=config.width_coefficient,
        pixels_per_symbol=config.pixels_per_symbol,
        runtime_dir=config.editor_runtime_dir,
    ) as session:
        print_report(session, console)
        session.sync_width(window.id, niri)


def select_runner(args: argparse.Namespace):
    """Return the function running the selected command."""
    if args.command == "vim":
        return sync_vim if args.vim_command == "sync" else run_vim
    return {"test": run_test, "kitty": run_kitty, "env": print_env}[args.command]


def main(argv: list[str] | None = None) -> int:
    """Entry point for niri-launcher."""
    args = build_parser().parse_args(argv)
    config = config_from_args(args)
    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    console = Console()
    runner = select_runner(args)
    try:
        runner(config, NiriSocket(config.niri_socket), console)
    except (LauncherError, OSError) as err:
        logger.debug("Command %s failed", args.command, exc_info=True)
        Console(stderr=True).print(f"[bold red]error:[/bold red] {escape(str(err))}", highlight=False, soft_wrap=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
