"""Utilities for executing shell commands with optional dry-run support."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence
import os
import shlex
import subprocess


@dataclass
class CommandResult:
    """Represents the outcome of an executed command.

    ``returncode`` is ``None`` when the process could not be spawned; the
    operating system error is kept in ``error``.
    """

    command: Sequence[str]
    returncode: int | None
    stdout: str
    stderr: str
    streamed: bool = False
    error: OSError | None = None


class CommandError(RuntimeError):
    """Raised when a command fails."""

    def __init__(self, result: CommandResult):
        if result.error is not None:
            message = f"Command could not be started ({result.error}): {' '.join(map(shlex.quote, result.command))}"
        else:
            message = f"Command failed with exit code {result.returncode}: {' '.join(map(shlex.quote, result.command))}"
        if result.streamed:
            message = f"{message}\nstdout/stderr already streamed above."
        elif result.error is None:
            message = (
                f"{message}\n"
                f"stdout: {result.stdout}\n"
                f"stderr: {result.stderr}"
            )
        super().__init__(message)
        self.result = result


class RunningCommand:
    """A spawned streaming command that can be waited on or cancelled.

    ``returncode`` stands in for the process when the command was only
    recorded.
    """

    def __init__(
        self,
        command: Sequence[str],
        process: subprocess.Popen | None,
        error: OSError | None = None,
        *,
        returncode: int | None = None,
    ) -> None:
        self.command = command
        self._process = process
        self._error = error
        self._returncode = returncode
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def wait(self) -> CommandResult:
        if self._process is None:
            return CommandResult(
                command=self.command,
                returncode=self._returncode,
                stdout="",
                stderr="",
                streamed=True,
                error=self._error,
            )
        returncode = self._process.wait()
        return CommandResult(
            command=self.command,
            returncode=returncode,
            stdout="",
            stderr="",
            streamed=True,
        )

    def cancel(self) -> None:
        if self._process is None or self._process.poll() is not None:
            return
        self._cancelled = True
        self._process.terminate()


class CommandRunner:
    """Abstract command runner interface."""

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
        stream: bool = False,
    ) -> CommandResult:
        raise NotImplementedError

    def start(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        note: str | None = None,
    ) -> RunningCommand:
        """Begin a streamed run of ``command`` and return its handle."""

        raise NotImplementedError

    def format_command(self, command: Sequence[str]) -> str:
        return " ".join(shlex.quote(part) for part in command)


class SubprocessCommandRunner(CommandRunner):
    """Command runner that executes commands via :mod:`subprocess`."""

    @staticmethod
    def _merge_environment(env: Mapping[str, str] | None) -> Dict[str, str] | None:
        if env is None:
            return None
        merged = os.environ.copy()
        merged.update(env)
        return merged

    def _finalize(self, result: CommandResult, *, check: bool) -> CommandResult:
        if check and (result.error is not None or result.returncode != 0):
            raise CommandError(result)
        return result

    def start(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        note: str | None = None,
    ) -> RunningCommand:
        """Spawn ``command`` with inherited stdout/stderr and no stdin."""

        try:
            process = subprocess.Popen(
                list(command),
                cwd=str(cwd) if cwd else None,
                env=self._merge_environment(env),
                stdin=subprocess.DEVNULL,
            )
        except OSError as exc:
            return RunningCommand(command, None, exc)
        return RunningCommand(command, process)

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
        stream: bool = False,
    ) -> CommandResult:
        if stream:
            return self._finalize(self.start(command, cwd=cwd, env=env).wait(), check=check)

        try:
            process = subprocess.run(
                list(command),
                cwd=str(cwd) if cwd else None,
                env=self._merge_environment(env),
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            return self._finalize(
                CommandResult(command=command, returncode=None, stdout="", stderr="", error=exc),
                check=check,
            )
        return self._finalize(
            CommandResult(
                command=command,
                returncode=process.returncode,
                stdout=process.stdout,
                stderr=process.stderr,
            ),
            check=check,
        )


@dataclass(slots=True)
class RecordedCommand:
    command: List[str]
    cwd: str | None
    env: Dict[str, str]
    note: str | None
    stream: bool


class RecordingCommandRunner(CommandRunner):
    """Command runner that records commands instead of executing them.

    ``returncode`` lets tests simulate failing commands.
    """

    def __init__(self, returncode: int = 0) -> None:
        self.commands: List[RecordedCommand] = []
        self.returncode = returncode

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
        stream: bool = False,
    ) -> CommandResult:
        self.commands.append(
            RecordedCommand(
                command=list(command),
                cwd=str(cwd) if cwd else None,
                env=dict(env) if env else {},
                note=note,
                stream=stream,
            )
        )
        result = CommandResult(command=command, returncode=self.returncode, stdout="", stderr="", streamed=stream)
        if check and self.returncode != 0:
            raise CommandError(result)
        return result

    def start(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        note: str | None = None,
    ) -> RunningCommand:
        self.run(command, cwd=cwd, env=env, check=False, note=note, stream=True)
        return RunningCommand(command, None, returncode=self.returncode)

    def iter_commands(self) -> Iterable[RecordedCommand]:
        return iter(self.commands)

    def iter_formatted(self, *, workspace: Path | None = None) -> Iterable[str]:
        default_cwd = str(workspace) if workspace else None
        for record in self.commands:
            cmd = self.format_command(record.command)
            cwd = record.cwd or default_cwd
            parts: List[str] = ["[dry-run]"]
            if record.note:
                parts.append(record.note)
            if cwd:
                parts.append(f"(cwd={cwd})")
            parts.append(cmd)
            yield " ".join(parts)
