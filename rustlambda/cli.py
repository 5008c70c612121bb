"""Command line interface for running the Rust build step outside the host."""
from __future__ import annotations

from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Any, Dict, Iterable, List
import sys

import yaml

from core.command_runner import RecordingCommandRunner, SubprocessCommandRunner
from core.config_loader import collect_config_files, load_config_file

from .console import Console
from .errors import BuildExecutionError, RustPluginError
from .hooks import hook_names, parse_version
from .plugin import RustPlugin
from .validation import validate_service

SERVICE_CONFIG_STEM = "serverless"


def _make_runner(dry_run: bool) -> SubprocessCommandRunner | RecordingCommandRunner:
    return RecordingCommandRunner() if dry_run else SubprocessCommandRunner()


def _locate_service_file(workspace: Path, config: str | None) -> Path:
    if config:
        path = Path(config)
        if not path.is_absolute():
            path = workspace / path
        if not path.is_file():
            raise FileNotFoundError(f"Service configuration '{path}' does not exist")
        return path

    files = collect_config_files(workspace)
    path = files.get(SERVICE_CONFIG_STEM)
    if path is None:
        raise FileNotFoundError(f"No {SERVICE_CONFIG_STEM}.yml/.yaml/.json/.toml found in {workspace}")
    return path


def _load_service(args: Namespace, workspace: Path) -> tuple[Dict[str, Any], Path]:
    path = _locate_service_file(workspace, getattr(args, "config", None))
    data = dict(load_config_file(path))
    return data, path.parent.resolve()


def _parse_arguments(argv: Iterable[str]) -> Namespace:
    parser = ArgumentParser(prog="rust-lambda", description="Build Rust functions for AWS Lambda")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser("build", help="Build every Rust function of the service")
    build_parser.add_argument("-c", "--config", help="Service configuration file (default: ./serverless.*)")
    build_parser.add_argument("-f", "--function", help="Only consider a single function")
    build_parser.add_argument("-n", "--dry-run", action="store_true", help="Print the build command without running it")
    build_parser.add_argument(
        "--log-level",
        choices=list(Console.LEVELS),
        default="info",
        help="Console verbosity",
    )
    build_parser.add_argument("--host-version", help="Host pipeline version used to pick lifecycle hooks")

    hooks_parser = subparsers.add_parser("hooks", help="List lifecycle hooks registered for a host version")
    hooks_parser.add_argument("--host-version", help="Host pipeline version (MAJOR.MINOR[.PATCH])")

    validate_parser = subparsers.add_parser("validate", help="Validate the service configuration")
    validate_parser.add_argument("-c", "--config", help="Service configuration file (default: ./serverless.*)")

    return parser.parse_args(list(argv))


def main(argv: Iterable[str] | None = None) -> int:
    args = _parse_arguments(sys.argv[1:] if argv is None else argv)
    workspace = Path.cwd()

    if args.command == "build":
        return _handle_build(args, workspace)
    if args.command == "hooks":
        return _handle_hooks(args)
    if args.command == "validate":
        return _handle_validate(args, workspace)
    raise ValueError(f"Unknown command: {args.command}")


def _handle_build(args: Namespace, workspace: Path) -> int:
    try:
        data, service_path = _load_service(args, workspace)
    except (OSError, ValueError, TypeError, yaml.YAMLError) as exc:
        print(f"Error: {exc}")
        return 2

    runner = _make_runner(args.dry_run)
    console = Console(level=args.log_level, dry_run=args.dry_run)
    options = {"function": args.function} if args.function else {}
    try:
        plugin = RustPlugin(
            data,
            options,
            service_path=service_path,
            host_version=args.host_version,
            command_runner=runner,
            console=console,
        )
        units = plugin.build()
    except BuildExecutionError as exc:
        print(f"Error: {exc}")
        return 1
    except (RustPluginError, ValueError) as exc:
        print(f"Error: {exc}")
        return 2

    if isinstance(runner, RecordingCommandRunner):
        for line in runner.iter_formatted(workspace=service_path):
            print(line)

    if not units:
        print("No Rust build required")
        return 0
    for unit in units:
        print(f"{unit.name}: {unit.package_artifact} (runtime {unit.effective_runtime})")
    return 0


def _handle_hooks(args: Namespace) -> int:
    try:
        version = parse_version(args.host_version) if args.host_version else None
    except ValueError as exc:
        print(f"Error: {exc}")
        return 2
    for name in hook_names(version):
        print(name)
    return 0


def _handle_validate(args: Namespace, workspace: Path) -> int:
    try:
        data, service_path = _load_service(args, workspace)
    except (OSError, ValueError, TypeError, yaml.YAMLError) as exc:
        print(f"Error: {exc}")
        return 2

    errors: List[str] = validate_service(data, service_path=service_path)
    if errors:
        print("Validation failed:")
        for message in errors:
            print(f"  {message}")
        return 1

    print("Validation successful")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
