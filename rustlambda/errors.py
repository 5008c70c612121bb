"""Exception types raised by the Rust build orchestration."""
from __future__ import annotations


class RustPluginError(RuntimeError):
    """Base class for fatal build step failures."""


class ConfigurationError(RustPluginError):
    """Raised when ``custom.rust`` or a function descriptor is malformed."""


class NoMatchingUnitsError(RustPluginError):
    """Raised when the provider matches but no function uses the Rust runtime."""

    def __init__(self, runtime: str) -> None:
        super().__init__(
            f"no Rust functions found. "
            f"Use 'runtime: {runtime}' in global or "
            f"function configuration to use this plugin."
        )
        self.runtime = runtime


class BuildExecutionError(RustPluginError):
    """Raised when the build process could not be spawned or exited non-zero."""

    def __init__(self, error: OSError | None, status: int | None) -> None:
        super().__init__(f"Rust build failed: {error} (exit status {status})")
        self.error = error
        self.status = status


__all__ = [
    "BuildExecutionError",
    "ConfigurationError",
    "NoMatchingUnitsError",
    "RustPluginError",
]
