"""Synchronous execution of the Rust build, containerized or local."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Sequence
import os
import zipfile

from core.command_runner import CommandRunner, RunningCommand

from .artifacts import artifact_dir_name, artifact_path
from .config import BuildConfiguration
from .console import Console
from .docker import BuildInvocation, docker_invocation
from .errors import BuildExecutionError
from .units import BuildUnit

MUSL_TARGET = "x86_64-unknown-linux-musl"
BOOTSTRAP_NAME = "bootstrap"


@dataclass(frozen=True, slots=True)
class BuildOutcome:
    exit_status: int | None
    spawn_error: OSError | None = None

    @property
    def succeeded(self) -> bool:
        if self.spawn_error is not None:
            return False
        return not (self.exit_status is not None and self.exit_status > 0)


def local_build_command(config: BuildConfiguration) -> List[str]:
    command = ["cargo", "build", "--target", MUSL_TARGET]
    if config.profile != "dev":
        command.append("--release")
    command.extend(config.cargo_flags.split())
    if config.cargo_package:
        command.extend(["-p", config.cargo_package])
    return command


def bundle_binary(binary_path: Path, zip_path: Path) -> Path:
    """Zip ``binary_path`` as the ``bootstrap`` entry the custom runtime expects."""

    zip_path.parent.mkdir(parents=True, exist_ok=True)
    info = zipfile.ZipInfo(BOOTSTRAP_NAME)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = 0o755 << 16
    with zipfile.ZipFile(zip_path, "w") as archive:
        archive.writestr(info, binary_path.read_bytes())
    return zip_path


class BuildExecutor:
    def __init__(
        self,
        *,
        command_runner: CommandRunner,
        console: Console,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._command_runner = command_runner
        self._console = console
        self._env = dict(os.environ) if env is None else dict(env)
        self._current: RunningCommand | None = None

    def cancel(self) -> None:
        """Terminate the running build, if any."""

        if self._current is not None:
            self._current.cancel()

    def _run(self, command: Sequence[str], *, cwd: Path | None, note: str) -> BuildOutcome:
        self._console.debug(self._command_runner.format_command(command))
        self._current = self._command_runner.start(command, cwd=cwd, note=note)
        try:
            result = self._current.wait()
        finally:
            self._current = None
        return BuildOutcome(exit_status=result.returncode, spawn_error=result.error)

    def run_docker(self, invocation: BuildInvocation) -> BuildOutcome:
        self._console.info("Running containerized build")
        return self._run(invocation.command, cwd=None, note="Containerized build")

    def run_local(
        self,
        config: BuildConfiguration,
        src_path: Path,
        units: Sequence[BuildUnit],
    ) -> BuildOutcome:
        self._console.info("Running local build")
        outcome = self._run(local_build_command(config), cwd=src_path, note="Local cargo build")
        if not outcome.succeeded:
            return outcome

        profile_dir = artifact_dir_name(config.profile)
        for unit in units:
            binary_path = src_path / "target" / MUSL_TARGET / profile_dir / str(unit.binary)
            zip_path = artifact_path(src_path, config.profile, str(unit.binary))
            if self._console.dry_run:
                self._console.dry(f"bundle {binary_path} -> {zip_path}")
                continue
            try:
                bundle_binary(binary_path, zip_path)
            except OSError as exc:
                return BuildOutcome(exit_status=outcome.exit_status, spawn_error=exc)
        return outcome

    def execute(
        self,
        config: BuildConfiguration,
        src_path: Path,
        units: Sequence[BuildUnit],
    ) -> BuildOutcome:
        if config.dockerless:
            return self.run_local(config, src_path, units)
        return self.run_docker(docker_invocation(config, src_path, self._env))

    def check(self, outcome: BuildOutcome) -> None:
        if outcome.succeeded:
            return
        self._console.error(
            f"Rust build encountered an error: {outcome.spawn_error} {outcome.exit_status}."
        )
        raise BuildExecutionError(outcome.spawn_error, outcome.exit_status)


__all__ = [
    "BOOTSTRAP_NAME",
    "BuildExecutor",
    "BuildOutcome",
    "MUSL_TARGET",
    "bundle_binary",
    "local_build_command",
]
