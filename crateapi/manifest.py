"""Package manifest information merged into an extracted API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from crateapi.api import Api, Feature, OptionalDependency
from crateapi.versionreq import VersionReq


@dataclass
class ManifestFeature:
    """A feature flag declared in the manifest."""

    name: str
    dependencies: list[str] = field(default_factory=list)

    def to_api(self) -> Feature:
        return Feature(self.name, list(self.dependencies))

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "dependencies": list(self.dependencies)}


@dataclass
class Dependency:
    """A dependency declared in the manifest; ``rename`` is the name it is used under."""

    name: str
    version: VersionReq
    rename: str | None = None

    @classmethod
    def from_metadata(cls, data: dict[str, Any]) -> Dependency:
        """Build from one entry of a package's ``dependencies`` in cargo metadata."""
        return cls(data["name"], VersionReq.parse(data["req"]), data.get("rename"))

    def to_api(self) -> OptionalDependency:
        if self.rename is not None:
            return OptionalDependency(self.rename, package=self.name)
        return OptionalDependency(self.name)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "version": str(self.version), "rename": self.rename}


ManifestEntry = Union[ManifestFeature, Dependency]


def _entry_to_dict(entry: ManifestEntry) -> dict[str, Any]:
    tag = "feature" if isinstance(entry, ManifestFeature) else "dependency"
    return {tag: entry.to_dict()}


@dataclass
class Manifest:
    """Name, version, dependencies and features of a package."""

    name: str
    version: str
    dependencies: list[Dependency] = field(default_factory=list)
    features: dict[str, ManifestEntry] = field(default_factory=dict)

    @classmethod
    def from_package(cls, package: dict[str, Any]) -> Manifest:
        """Build from a package entry of cargo metadata.

        Optional dependencies become features unless a feature of that name exists.
        """
        features: dict[str, ManifestEntry] = {
            name: ManifestFeature(name, list(deps))
            for name, deps in package.get("features", {}).items()
        }
        dependencies = []
        for raw in package.get("dependencies", []):
            dependency = Dependency.from_metadata(raw)
            if raw.get("optional", False):
                features.setdefault(dependency.name, dependency)
            dependencies.append(dependency)
        return cls(str(package["name"]), str(package["version"]), dependencies, features)

    def into_api(self, api: Api) -> None:
        """Record dependency requirements on the API's crates and add the features.

        A requirement is only applied when exactly one crate in the API has the
        dependency's name; dependencies absent from the API are ignored.
        """
        crate_ids: dict[str, list[int]] = {}
        for ident, crate in api.crates:
            crate_ids.setdefault(crate.name, []).append(ident)
        for dependency in self.dependencies:
            matches = crate_ids.get(dependency.name, [])
            if len(matches) == 1:
                api.crates.get(matches[0]).version = dependency.version
        api.features.update((name, entry.to_api()) for name, entry in self.features.items())

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "dependencies": [dependency.to_dict() for dependency in self.dependencies],
            "features": {
                name: _entry_to_dict(self.features[name]) for name in sorted(self.features)
            },
        }