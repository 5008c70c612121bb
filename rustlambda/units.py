"""Typed view over the host service descriptor and Rust unit selection."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, MutableMapping

from .config import AWS_PROVIDER, RUST_RUNTIME
from .errors import ConfigurationError, NoMatchingUnitsError


@dataclass(slots=True)
class BuildUnit:
    name: str
    declared_runtime: str | None
    effective_runtime: str | None
    package_artifact: str | None = None
    binary: str | None = None

    @classmethod
    def from_mapping(
        cls,
        name: str,
        data: Mapping[str, Any],
        *,
        default_runtime: str | None,
    ) -> "BuildUnit":
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Function '{name}' definition must be a mapping")
        declared = data.get("runtime")
        declared_runtime = str(declared) if declared else None
        package_section = data.get("package")
        artifact = None
        if isinstance(package_section, Mapping) and package_section.get("artifact"):
            artifact = str(package_section["artifact"])
        return cls(
            name=name,
            declared_runtime=declared_runtime,
            effective_runtime=declared_runtime or default_runtime,
            package_artifact=artifact,
            binary=cls._resolve_binary(data),
        )

    @staticmethod
    def _resolve_binary(data: Mapping[str, Any]) -> str | None:
        # rust.binary wins; otherwise the handler is "<package>.<binary>" or "<binary>"
        rust_section = data.get("rust")
        if isinstance(rust_section, Mapping):
            explicit = rust_section.get("binary")
            if isinstance(explicit, str) and explicit.strip():
                return explicit.strip()
        handler = data.get("handler")
        if isinstance(handler, str) and handler.strip():
            return handler.strip().rsplit(".", 1)[-1] or None
        return None

    def targets(self, runtime: str) -> bool:
        return self.effective_runtime == runtime


class ServiceDescriptor:
    """Adapter over the host pipeline's native service mapping.

    Reads produce :class:`BuildUnit` instances; writes go straight back into
    the wrapped mapping so downstream packaging sees them.
    """

    def __init__(self, data: MutableMapping[str, Any]) -> None:
        if not isinstance(data, MutableMapping):
            raise ConfigurationError("Service configuration must be a mapping")
        self._data = data

    @property
    def raw(self) -> MutableMapping[str, Any]:
        return self._data

    def _provider(self, *, create: bool = False) -> MutableMapping[str, Any]:
        provider = self._data.get("provider")
        if isinstance(provider, MutableMapping):
            return provider
        if isinstance(provider, str):
            provider = {"name": provider}
        else:
            provider = {}
        if create:
            self._data["provider"] = provider
        return provider

    @property
    def provider_name(self) -> str | None:
        name = self._provider().get("name")
        return str(name) if name else None

    @property
    def provider_runtime(self) -> str | None:
        runtime = self._provider().get("runtime")
        return str(runtime) if runtime else None

    @provider_runtime.setter
    def provider_runtime(self, value: str) -> None:
        self._provider(create=True)["runtime"] = value

    def custom_section(self, name: str) -> Any:
        custom = self._data.get("custom")
        if isinstance(custom, Mapping):
            return custom.get(name)
        return None

    def _functions(self) -> MutableMapping[str, Any]:
        functions = self._data.get("functions")
        if functions is None:
            return {}
        if not isinstance(functions, MutableMapping):
            raise ConfigurationError("functions must be a mapping of function names to definitions")
        return functions

    def function_names(self) -> List[str]:
        return [str(name) for name in self._functions().keys()]

    def get_function(self, name: str, *, create: bool = False) -> MutableMapping[str, Any]:
        """Return the definition of ``name``; ``create`` stores an empty one in place of ``None``."""

        functions = self._functions()
        if name not in functions:
            available = ", ".join(sorted(functions)) or "<none>"
            raise ConfigurationError(f"Function '{name}' not found. Available functions: {available}")
        definition = functions[name]
        if definition is None:
            definition = {}
            if create:
                functions[name] = definition
        return definition

    def unit(self, name: str) -> BuildUnit:
        return BuildUnit.from_mapping(name, self.get_function(name), default_runtime=self.provider_runtime)

    def units(self, names: Iterable[str] | None = None) -> List[BuildUnit]:
        selected = list(names) if names is not None else self.function_names()
        return [self.unit(name) for name in selected]

    def disable_dev_dependency_filtering(self) -> None:
        package = self._data.get("package")
        if not isinstance(package, MutableMapping):
            package = {}
            self._data["package"] = package
        package["excludeDevDependencies"] = False

    def apply(self, unit: BuildUnit) -> None:
        """Write ``unit``'s artifact and runtime back to its descriptor."""

        definition = self.get_function(unit.name, create=True)
        if unit.package_artifact is not None:
            package = definition.get("package")
            if not isinstance(package, MutableMapping):
                package = {}
                definition["package"] = package
            package["artifact"] = unit.package_artifact
        if unit.declared_runtime is not None:
            definition["runtime"] = unit.declared_runtime


def select_units(
    service: ServiceDescriptor,
    *,
    function: str | None = None,
    runtime: str = RUST_RUNTIME,
    provider: str = AWS_PROVIDER,
) -> List[BuildUnit] | None:
    """Return the units that need the Rust toolchain.

    ``None`` means the service targets another provider and the build step
    should be skipped. A matching provider without any Rust unit raises
    :class:`NoMatchingUnitsError`.
    """

    if service.provider_name != provider:
        return None

    names = [function] if function else None
    selected = [unit for unit in service.units(names) if unit.targets(runtime)]
    if not selected:
        raise NoMatchingUnitsError(runtime)

    missing = [unit.name for unit in selected if not unit.binary]
    if missing:
        joined = ", ".join(missing)
        raise ConfigurationError(
            f"Cannot determine the binary for function(s): {joined}. "
            "Set 'handler' or 'rust.binary' on each Rust function."
        )
    return selected


__all__ = ["BuildUnit", "ServiceDescriptor", "select_units"]
