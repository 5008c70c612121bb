"""Build Rust functions for AWS Lambda ahead of serverless packaging."""
from __future__ import annotations

from .config import BASE_RUNTIME, RUST_RUNTIME, BuildConfiguration
from .errors import BuildExecutionError, ConfigurationError, NoMatchingUnitsError, RustPluginError
from .plugin import RustPlugin
from .units import BuildUnit, ServiceDescriptor

__all__ = [
    "BASE_RUNTIME",
    "RUST_RUNTIME",
    "BuildConfiguration",
    "BuildExecutionError",
    "BuildUnit",
    "ConfigurationError",
    "NoMatchingUnitsError",
    "RustPlugin",
    "RustPluginError",
    "ServiceDescriptor",
]
