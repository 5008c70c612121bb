"""Host-facing entry point that wires selection, build and rewrite together."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, MutableMapping

from core.command_runner import CommandRunner, SubprocessCommandRunner

from .artifacts import rewrite_units
from .config import BuildConfiguration
from .console import Console
from .executor import BuildExecutor
from .hooks import hook_names, parse_version
from .units import BuildUnit, ServiceDescriptor, select_units


class RustPlugin:
    """Builds the Rust functions of a service before the host packages them.

    Assumes ``docker`` is on the path for containerized builds and
    ``cargo`` for local builds.
    """

    def __init__(
        self,
        service: MutableMapping[str, Any],
        options: Mapping[str, Any] | None = None,
        *,
        service_path: Path,
        host_version: str | None = None,
        command_runner: CommandRunner | None = None,
        console: Console | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.service = ServiceDescriptor(service)
        self.options: Dict[str, Any] = dict(options or {})
        self.console = console or Console()
        self.config = BuildConfiguration.from_mapping(self.service.custom_section("rust"))
        self.src_path = self.config.source_path(Path(service_path))

        version = parse_version(host_version) if host_version else None
        self.hooks: Dict[str, Callable[[], List[BuildUnit]]] = {
            name: self.build for name in hook_names(version)
        }

        # node_modules only holds the host and plugins, never function code
        self.service.disable_dev_dependency_filtering()

        self._executor = BuildExecutor(
            command_runner=command_runner or SubprocessCommandRunner(),
            console=self.console,
            env=env,
        )
        self._built: List[BuildUnit] | None = None

    @property
    def executor(self) -> BuildExecutor:
        return self._executor

    def build(self) -> List[BuildUnit]:
        """The entry point for building functions.

        Several hooks may fire in one host run; only the first one builds.
        """

        if self._built is not None:
            return self._built

        units = select_units(self.service, function=self.options.get("function"))
        if units is None:
            self.console.debug(
                f"Skipping Rust build for provider '{self.service.provider_name}'"
            )
            self._built = []
            return self._built

        outcome = self._executor.execute(self.config, self.src_path, units)
        self._executor.check(outcome)

        self._built = rewrite_units(
            self.service,
            units,
            src_path=self.src_path,
            profile=self.config.profile,
        )
        for unit in self._built:
            self.console.debug(f"{unit.name}: {unit.package_artifact}")
        return self._built


__all__ = ["RustPlugin"]
