"""Configuration validation helpers."""
from __future__ import annotations

from pathlib import Path
from typing import Any, MutableMapping

from .config import AWS_PROVIDER, RUST_RUNTIME, BuildConfiguration, unknown_keys
from .errors import ConfigurationError
from .units import ServiceDescriptor


def validate_service(data: MutableMapping[str, Any], *, service_path: Path) -> list[str]:
    """Return a list of problems in the Rust build configuration of ``data``."""

    errors: list[str] = []
    try:
        service = ServiceDescriptor(data)
        section = service.custom_section("rust")
        config = BuildConfiguration.from_mapping(section)
    except ConfigurationError as exc:
        return [str(exc)]

    ignored = unknown_keys(section)
    if ignored:
        errors.append(f"custom.rust contains unknown keys: {', '.join(ignored)}")
    errors.extend(config.validate_structure(service_path))

    if service.provider_name != AWS_PROVIDER:
        errors.append(
            f"provider.name is '{service.provider_name or '<unset>'}'; Rust builds only run for '{AWS_PROVIDER}'"
        )
        return errors

    try:
        units = service.units()
    except ConfigurationError as exc:
        errors.append(str(exc))
        return errors

    rust_units = [unit for unit in units if unit.targets(RUST_RUNTIME)]
    if not rust_units:
        errors.append(
            f"no function uses 'runtime: {RUST_RUNTIME}' (set it globally under provider or per function)"
        )
    for unit in rust_units:
        if not unit.binary:
            errors.append(f"function '{unit.name}' needs a 'handler' or 'rust.binary' to name its binary")
    return errors


__all__ = ["validate_service"]
