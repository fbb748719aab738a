"""
Command-line interface for dockerpipe.

Sub-commands map one-to-one onto orchestrator operations, plus a pure
`bump-tag` helper. Status lines from the external tool are printed to stdout
as they arrive; the exit status is 0 on success and 1 on failure.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ..config import get_config, set_config_path
from ..executor import CommandRunner, check_executable_available
from ..models.command import CommandResult
from ..orchestration import CommandOrchestrator, increment_tag
from ..validation import DockerPipeError, handle_cli_error

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


def _print_status(line: str) -> None:
    print(line, flush=True)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one sub-parser per operation."""
    parser = argparse.ArgumentParser(
        prog="dockerpipe",
        description="Build, push and log in to container registries with streamed status output.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to config.toml (defaults to conf/config.toml in the project root).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every streamed line and other debug information.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "check",
        help="Write the Dockerfile template if absent and probe the tool version.",
    )

    for name, help_text in (
        ("build", "Build and tag <registry>/<repo>:<tag> from the current directory."),
        ("push", "Push <registry>/<repo>:<tag>."),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("registry", help="Registry host, e.g. registry.example.com")
        sub.add_argument("image_repo", help="Repository within the registry")
        sub.add_argument("tag", help="Image tag")
        if name == "build":
            sub.add_argument(
                "--context",
                type=Path,
                default=None,
                help="Build context directory (defaults to the working directory).",
            )

    login = subparsers.add_parser("login", help="Log in to a container registry.")
    login.add_argument("registry_url", help="Registry URL, e.g. registry.example.com")
    login.add_argument("-u", "--username", required=True, help="Registry username")
    login.add_argument(
        "-p",
        "--password",
        required=True,
        help="Registry password or token (visible in process listings).",
    )

    bump = subparsers.add_parser("bump-tag", help="Print the tag with its trailing number incremented.")
    bump.add_argument("tag", help="Current tag")

    return parser


async def _run_command(args: argparse.Namespace, orchestrator: CommandOrchestrator) -> CommandResult:
    if args.command == "check":
        return await orchestrator.check_installation(_print_status)
    if args.command == "build":
        return await orchestrator.build(
            args.registry, args.image_repo, args.tag, _print_status, context_dir=args.context
        )
    if args.command == "push":
        return await orchestrator.push(args.registry, args.image_repo, args.tag, _print_status)
    if args.command == "login":
        return await orchestrator.login(
            args.registry_url, args.username, args.password, _print_status
        )
    raise ValueError(f"Unhandled command: {args.command}")


def main_cli(argv: Optional[List[str]] = None) -> int:
    """
    Main command-line entry point.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Process exit status
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.command == "bump-tag":
        print(increment_tag(args.tag))
        return 0

    if args.config is not None:
        set_config_path(args.config)

    try:
        app_config = get_config()
    except (FileNotFoundError, ValueError, DockerPipeError) as e:
        handle_cli_error(error=e, context="configuration loading", exit_code=1, logger=logger)

    executable = (
        app_config.docker.version_check_executable
        if args.command == "check"
        else app_config.docker.executable
    )
    if not check_executable_available(executable):
        logger.warning(f"'{executable}' was not found on PATH")

    orchestrator = CommandOrchestrator(
        docker_config=app_config.docker,
        runner=CommandRunner.from_config(app_config.runner),
    )

    try:
        result = asyncio.run(_run_command(args, orchestrator))
    except DockerPipeError as e:
        # LaunchFailure, CommandTimeout and parameter validation errors.
        handle_cli_error(error=e, context=args.command, exit_code=1, logger=logger)
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130

    if not result.succeeded:
        print(f"{args.command} failed: {result.error_message}", file=sys.stderr)
        return 1

    logger.info(f"{args.command} completed in {result.duration_seconds:.1f}s")
    return 0


def main() -> None:
    sys.exit(main_cli())


if __name__ == "__main__":
    main()
