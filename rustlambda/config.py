"""Plugin configuration read from the ``custom.rust`` section of a service."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping

from core.config_loader import merge_mappings

from .errors import ConfigurationError

DEFAULT_DOCKER_TAG = "latest"
DEFAULT_DOCKER_IMAGE = "softprops/lambda-rust"
RUST_RUNTIME = "rust"
BASE_RUNTIME = "provided.al2"
AWS_PROVIDER = "aws"

DEFAULTS: Dict[str, Any] = {
    "cargoFlags": "",
    "dockerTag": DEFAULT_DOCKER_TAG,
    "dockerImage": DEFAULT_DOCKER_IMAGE,
    "dockerless": False,
}

KNOWN_KEYS = frozenset({
    "cargoFlags",
    "dockerTag",
    "dockerImage",
    "dockerless",
    "dockerPath",
    "cargoPackage",
    "profile",
})


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True, slots=True)
class BuildConfiguration:
    cargo_flags: str = ""
    docker_tag: str = DEFAULT_DOCKER_TAG
    docker_image: str = DEFAULT_DOCKER_IMAGE
    dockerless: bool = False
    docker_path: str | None = None
    cargo_package: str | None = None
    profile: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "BuildConfiguration":
        """Merge caller overrides onto :data:`DEFAULTS`.

        Keys outside :data:`KNOWN_KEYS` are ignored. Empty tag or image
        values fall back to the defaults so the image reference is always
        complete.
        """

        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ConfigurationError("custom.rust must be a mapping")
        merged = merge_mappings(DEFAULTS, data)
        cargo_flags = merged.get("cargoFlags")
        return cls(
            cargo_flags=str(cargo_flags) if cargo_flags else "",
            docker_tag=_optional_str(merged.get("dockerTag")) or DEFAULT_DOCKER_TAG,
            docker_image=_optional_str(merged.get("dockerImage")) or DEFAULT_DOCKER_IMAGE,
            dockerless=bool(merged.get("dockerless")),
            docker_path=_optional_str(merged.get("dockerPath")),
            cargo_package=_optional_str(merged.get("cargoPackage")),
            profile=_optional_str(merged.get("profile")),
        )

    @property
    def image_reference(self) -> str:
        return f"{self.docker_tag}:{self.docker_image}"

    def source_path(self, service_path: Path) -> Path:
        """Directory mounted into the build container.

        Docker cannot reach files outside the mounted directory, so
        ``dockerPath`` lets a service inside a cargo workspace mount the
        workspace root instead.
        """

        if self.docker_path:
            candidate = Path(self.docker_path).expanduser()
            if not candidate.is_absolute():
                candidate = service_path / candidate
            return candidate.resolve()
        return service_path.resolve()

    def validate_structure(self, service_path: Path) -> list[str]:
        errors: list[str] = []
        if self.profile is not None and self.profile not in {"dev", "release"}:
            errors.append(
                f"custom.rust.profile '{self.profile}' is not recognized (expected 'dev' or 'release')"
            )
        if self.docker_path and not self.source_path(service_path).is_dir():
            errors.append(f"custom.rust.dockerPath '{self.docker_path}' is not a directory")
        return errors


def unknown_keys(data: Mapping[str, Any] | None) -> list[str]:
    """Return the keys of a ``custom.rust`` section that have no effect."""

    if not isinstance(data, Mapping):
        return []
    return sorted(str(key) for key in data.keys() if str(key) not in KNOWN_KEYS)


__all__ = [
    "AWS_PROVIDER",
    "BASE_RUNTIME",
    "BuildConfiguration",
    "DEFAULTS",
    "DEFAULT_DOCKER_IMAGE",
    "DEFAULT_DOCKER_TAG",
    "KNOWN_KEYS",
    "RUST_RUNTIME",
    "unknown_keys",
]
