"""CLI parser builder for iecs.

Global options are accepted before or after the command so that
``iecs --theme dracula exec`` and ``iecs exec --theme dracula`` agree.
"""

from __future__ import annotations

import argparse

from .. import __version__

__all__ = ["create_parser", "parse_bool"]

_TRUE = {"1", "true", "t", "yes", "y", "on"}
_FALSE = {"0", "false", "f", "no", "n", "off"}


def parse_bool(value: str) -> bool:
    lowered = str(value).strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise argparse.ArgumentTypeError(f"expected a boolean, got '{value}'")


def _epilog() -> str:
    return (
        "Quick examples:\n"
        "  # Shell into a container (pick cluster/service/task/container)\n"
        "  iecs exec\n\n"
        "  # Run a one-off command without a TTY\n"
        "  iecs exec -c 'env' -i false\n\n"
        "  # Narrow the pickers with regular expressions\n"
        "  iecs --cluster prod --service '^api' ssh\n\n"
        "  # Follow container logs\n"
        "  iecs logs --no-timestamps\n\n"
        "Tips:\n"
        "  • exec needs session-manager-plugin on PATH.\n"
        "  • Credentials and region come from the usual AWS sources.\n"
    )


def add_global_args(parser: argparse.ArgumentParser, *, suppress: bool) -> None:
    """Add options shared by every command.

    With ``suppress`` the options leave no default on the namespace, so a
    value given before the command is not reset by the sub-parser.
    """

    def default(value):
        return argparse.SUPPRESS if suppress else value

    g = parser.add_argument_group("Global")
    g.add_argument(
        "--theme",
        default=default(None),
        help="Prompt theme: base, base16, catppuccin, dracula, charm (default: charm)",
    )
    g.add_argument(
        "--cluster",
        default=default(None),
        metavar="REGEX",
        help="Only offer clusters whose name matches REGEX",
    )
    g.add_argument(
        "--service",
        default=default(None),
        metavar="REGEX",
        help="Only offer services whose name matches REGEX",
    )
    g.add_argument(
        "--form",
        action="store_true",
        default=default(False),
        help="Select everything in one cascading form",
    )

    aws = parser.add_argument_group("AWS")
    aws.add_argument("--region", default=default(None), help="AWS region")
    aws.add_argument("--profile", default=default(None), help="AWS profile")

    diag = parser.add_argument_group("Diagnostics")
    diag.add_argument(
        "--config",
        default=default(None),
        metavar="PATH",
        help="Config file (default: ./iecs.yaml)",
    )
    diag.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=default(False),
        help="Also write logs to stderr",
    )
    diag.add_argument(
        "--log-dir",
        default=default(None),
        metavar="DIR",
        help="Directory for iecs.jsonl (default: ~/.iecs/logs)",
    )


def _add_exec_parser(subparsers) -> None:
    p = subparsers.add_parser(
        "exec",
        aliases=["ssh"],
        help="Open a shell (or run a command) inside a container",
        description="Open a shell (or run a command) inside a running container.",
    )
    p.add_argument(
        "--command",
        "-c",
        default=None,
        help="Command to run (default: /bin/bash)",
    )
    p.add_argument(
        "--interactive",
        "-i",
        type=parse_bool,
        default=None,
        metavar="BOOL",
        help="Run the command interactively (default: true)",
    )
    add_global_args(p, suppress=True)
    p.set_defaults(command_name="exec")


def _add_logs_parser(subparsers) -> None:
    p = subparsers.add_parser(
        "logs",
        aliases=["tail"],
        help="Follow container logs in near real time",
        description="Follow the CloudWatch log streams of running containers.",
    )
    p.add_argument(
        "--no-timestamps",
        dest="timestamps",
        action="store_false",
        default=None,
        help="Print only the log messages",
    )
    add_global_args(p, suppress=True)
    p.set_defaults(command_name="logs")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="iecs",
        description="Interactive shells and live logs for ECS containers.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=_epilog(),
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    add_global_args(parser, suppress=False)
    subparsers = parser.add_subparsers(dest="subcommand", metavar="COMMAND")
    _add_exec_parser(subparsers)
    _add_logs_parser(subparsers)
    parser.set_defaults(command_name=None)
    return parser
