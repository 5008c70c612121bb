"""Artifact locations and post-build metadata rewriting."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from .config import BASE_RUNTIME, RUST_RUNTIME
from .units import BuildUnit, ServiceDescriptor


def artifact_dir_name(profile: str | None) -> str:
    return "debug" if profile == "dev" else "release"


def artifact_path(src_path: Path, profile: str | None, binary: str) -> Path:
    return src_path / "target" / "lambda" / artifact_dir_name(profile) / f"{binary}.zip"


def rewrite_units(
    service: ServiceDescriptor,
    units: Iterable[BuildUnit],
    *,
    src_path: Path,
    profile: str | None,
    runtime: str = RUST_RUNTIME,
    base_runtime: str = BASE_RUNTIME,
) -> List[BuildUnit]:
    """Point each unit at its prebuilt zip and normalize Rust runtimes.

    The custom runtime requires the executable to be named ``bootstrap``, so
    every function gets its own zip and declares it as its package artifact;
    packaging then uses the zip verbatim instead of building one.
    """

    rewritten: List[BuildUnit] = []
    for unit in units:
        unit.package_artifact = str(artifact_path(src_path, profile, str(unit.binary)))
        if unit.declared_runtime == runtime:
            unit.declared_runtime = base_runtime
        if unit.effective_runtime == runtime:
            unit.effective_runtime = base_runtime
        service.apply(unit)
        rewritten.append(unit)

    if service.provider_runtime == runtime:
        service.provider_runtime = base_runtime
    return rewritten


__all__ = ["artifact_dir_name", "artifact_path", "rewrite_units"]
