"""emu-dbg CLI entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Sequence, Tuple

from .commands import CommandRegistry, build_registry
from .config import DEFAULT_LOAD_ADDRESS, DEFAULT_MEMORY_SIZE, MonitorConfig, default_log_level
from .context import DebuggerContext
from .errors import FatalError, MemoryAccessError
from .machine import Machine, Memory, X86RegisterFile
from .repl import DebuggerREPL, dispatch_line

LOG = logging.getLogger("emu_dbg.cli")

EXIT_FATAL = 3


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _int_arg(text: str) -> int:
    try:
        return int(text, 0)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}") from exc


def _register_arg(text: str) -> Tuple[str, int]:
    name, sep, value = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {text!r}")
    return name.lstrip("$"), _int_arg(value)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Expression and watchpoint monitor for an emulated machine")
    parser.add_argument("--image", type=Path, help="Raw memory image to load")
    parser.add_argument("--load-address", type=_int_arg, default=DEFAULT_LOAD_ADDRESS, help="Image load address")
    parser.add_argument("--memory-size", type=_int_arg, default=DEFAULT_MEMORY_SIZE, help="Emulated memory size in bytes")
    parser.add_argument(
        "--reg",
        type=_register_arg,
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Initial register value (repeatable)",
    )
    parser.add_argument("--watch-capacity", type=_int_arg, default=MonitorConfig.watch_capacity, help="Watchpoint pool size")
    parser.add_argument("--json", action="store_true", help="Emit JSON output when supported")
    parser.add_argument("--log-level", default=default_log_level(), help="Logging level (default WARNING)")
    parser.add_argument(
        "-c",
        "--command",
        help="Execute a single command non-interactively (quote the command string)",
    )
    parser.add_argument("--script", type=Path, help="Execute commands from a file, one per line")
    parser.add_argument(
        "--history",
        type=Path,
        default=Path.home() / ".emu-dbg-history",
        help="Path to command history file",
    )
    return parser


def build_context(args: argparse.Namespace) -> DebuggerContext:
    config = MonitorConfig(
        watch_capacity=args.watch_capacity,
        memory_size=args.memory_size,
        load_address=args.load_address,
    )
    registers = X86RegisterFile(dict(args.reg))
    memory = Memory(config.memory_size)
    if args.image:
        memory.load_file(args.image, config.load_address)
        if not any(name == "eip" for name, _ in args.reg):
            registers.set("eip", config.load_address)
    return DebuggerContext(json_output=args.json, config=config, machine=Machine(registers, memory))


def main(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    try:
        ctx = build_context(args)
    except (OSError, KeyError, ValueError, MemoryAccessError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    registry = build_registry()
    try:
        if args.command:
            return _run_single_command(ctx, registry, args.command)
        if args.script:
            return _run_script(ctx, registry, str(args.script))
        repl = DebuggerREPL(ctx, registry, history_path=str(args.history))
        return repl.run()
    except FatalError as exc:
        LOG.critical("fatal: %s", exc)
        print(f"fatal: {exc}", file=sys.stderr)
        return EXIT_FATAL
    except KeyboardInterrupt:
        print()
        return 0


def _run_single_command(ctx: DebuggerContext, registry: CommandRegistry, command_line: str) -> int:
    try:
        return dispatch_line(ctx, registry, command_line)
    except SystemExit as exc:
        return int(exc.code or 0)


def _run_script(ctx: DebuggerContext, registry: CommandRegistry, path: str) -> int:
    """Run each non-blank, non-comment line of *path*; stop at the first failure."""
    try:
        lines: Sequence[str] = Path(path).read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        print(f"error: cannot read script {path}: {exc}")
        return 1
    for lineno, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        try:
            rc = dispatch_line(ctx, registry, stripped)
        except SystemExit as exc:
            return int(exc.code or 0)
        if rc != 0:
            LOG.warning("script %s stopped at line %d: %s", path, lineno, stripped)
            return rc
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
