"""Assembly of the containerized ``lambda-rust`` build invocation."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Sequence
import os

from .config import BuildConfiguration

DOCKER_ARGS_ENV = "SLS_DOCKER_ARGS"
DOCKER_CLI_ENV = "SLS_DOCKER_CLI"
CARGO_HOME_ENV = "CARGO_HOME"
DEFAULT_DOCKER_CLI = "docker"

CONTAINER_CODE_PATH = "/code"
CONTAINER_REGISTRY_PATH = "/cargo/registry"
CONTAINER_GIT_PATH = "/cargo/git"


@dataclass(frozen=True, slots=True)
class BuildInvocation:
    executable: str
    arguments: tuple[str, ...]
    source_path: Path
    cargo_registry: Path
    cargo_downloads: Path

    @property
    def command(self) -> List[str]:
        return [self.executable, *self.arguments]


def cargo_cache_paths(env: Mapping[str, str]) -> tuple[Path, Path]:
    """Return the host registry and git download caches shared with the container."""

    cargo_home_value = env.get(CARGO_HOME_ENV)
    cargo_home = Path(cargo_home_value) if cargo_home_value else Path.home() / ".cargo"
    return cargo_home / "registry", cargo_home / "git"


def cargo_flags_with_package(cargo_flags: str, cargo_package: str | None) -> str:
    if cargo_package is None:
        return cargo_flags
    if cargo_flags:
        return f"{cargo_flags} -p {cargo_package}"
    return f" -p {cargo_package}"


def docker_build_args(
    config: BuildConfiguration,
    cargo_package: str | None,
    profile: str | None,
    src_path: Path | str,
    cargo_registry: Path | str,
    cargo_downloads: Path | str,
    env: Mapping[str, str],
) -> List[str]:
    default_args = [
        "run",
        "--rm",
        "-t",
        "-e",
        "PACKAGE=true",
        "-v",
        f"{src_path}:{CONTAINER_CODE_PATH}",
        "-v",
        f"{cargo_registry}:{CONTAINER_REGISTRY_PATH}",
        "-v",
        f"{cargo_downloads}:{CONTAINER_GIT_PATH}",
    ]
    custom_args = (env.get(DOCKER_ARGS_ENV) or "").split()
    if profile:
        custom_args.extend(["-e", f"PROFILE={profile}"])
    cargo_flags = cargo_flags_with_package(config.cargo_flags, cargo_package)
    if cargo_flags:
        # e.g. --features awesome-feature
        custom_args.extend(["-e", f"CARGO_FLAGS={cargo_flags}"])

    args = [*default_args, *custom_args, config.image_reference]
    return [arg for arg in args if arg]


def docker_invocation(
    config: BuildConfiguration,
    src_path: Path,
    env: Mapping[str, str] | None = None,
) -> BuildInvocation:
    environment: Mapping[str, str] = os.environ if env is None else env
    cargo_registry, cargo_downloads = cargo_cache_paths(environment)
    arguments: Sequence[str] = docker_build_args(
        config,
        config.cargo_package,
        config.profile,
        src_path,
        cargo_registry,
        cargo_downloads,
        environment,
    )
    return BuildInvocation(
        executable=environment.get(DOCKER_CLI_ENV) or DEFAULT_DOCKER_CLI,
        arguments=tuple(arguments),
        source_path=src_path,
        cargo_registry=cargo_registry,
        cargo_downloads=cargo_downloads,
    )


__all__ = [
    "BuildInvocation",
    "cargo_cache_paths",
    "cargo_flags_with_package",
    "docker_build_args",
    "docker_invocation",
]
