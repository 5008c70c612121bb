"""Lifecycle hooks the build step registers with the host pipeline."""
from __future__ import annotations

from typing import List, Tuple

BUILD_HOOKS: Tuple[str, ...] = (
    "before:package:createDeploymentArtifacts",
    "before:deploy:function:packageFunction",
    "before:offline:start",
    "before:offline:start:init",
)
INVOKE_LOCAL_HOOK = "before:invoke:local:invoke"

# host 1.x releases in [38, 40) run local invocations through the build hook
_INVOKE_HOOK_MINOR_RANGE = (38, 40)


def parse_version(version: str) -> tuple[int, int]:
    """Return the ``(major, minor)`` pair of a dotted version string."""

    parts = str(version).strip().split(".")
    if len(parts) < 2:
        raise ValueError(f"Invalid host version '{version}': expected MAJOR.MINOR[.PATCH]")
    try:
        return int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise ValueError(f"Invalid host version '{version}': {exc}") from exc


def include_invoke_hook(major: int, minor: int) -> bool:
    low, high = _INVOKE_HOOK_MINOR_RANGE
    return major == 1 and low <= minor < high


def hook_names(version: tuple[int, int] | None) -> List[str]:
    """Hook names to register for a host at ``version`` (``None`` if unknown)."""

    names = list(BUILD_HOOKS)
    if version is not None and include_invoke_hook(*version):
        names.append(INVOKE_LOCAL_HOOK)
    return names


__all__ = ["BUILD_HOOKS", "INVOKE_LOCAL_HOOK", "hook_names", "include_invoke_hook", "parse_version"]
