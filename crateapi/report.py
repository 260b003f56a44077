"""Report structures and markdown rendering of APIs and API diffs."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from typing import Any, Iterable, TextIO

from crateapi.api import Api, Feature, OptionalDependency, PathKind
from crateapi.diff import DEPENDENCY_REQUIREMENT, Category, Diff, Location, Severity
from crateapi.manifest import Manifest
from crateapi.rawdoc import RawCrate


class SourceKind(enum.Enum):
    """Where a baseline version of a package comes from."""

    GIT = "git"
    PATH = "path"
    REGISTRY = "registry"


@dataclass(frozen=True)
class Source:
    """A baseline: a git revision, a manifest path or a registry package."""

    kind: SourceKind
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {self.kind.value: self.value}


@dataclass
class RawReport:
    """Raw rustdoc output for a package together with its manifest data."""

    manifest_path: str | os.PathLike[str]
    rustdoc: RawCrate | None = None
    manifest: Manifest | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "manifest_path": os.fspath(self.manifest_path),
            "rustdoc": None if self.rustdoc is None else self.rustdoc.source,
            "manifest": None if self.manifest is None else self.manifest.to_dict(),
        }


@dataclass
class ApiReport:
    """The extracted API of one package."""

    manifest_path: str | os.PathLike[str]
    api: Api

    def to_dict(self) -> dict[str, Any]:
        return {"manifest_path": os.fspath(self.manifest_path), "api": self.api.to_dict()}


@dataclass
class DiffReport:
    """The APIs of a package at two points and the changes between them."""

    manifest_path: str | os.PathLike[str]
    against: Source
    before: Api
    after: Api
    diffs: list[Diff] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "manifest_path": os.fspath(self.manifest_path),
            "against": self.against.to_dict(),
            "before": self.before.to_dict(),
            "after": self.after.to_dict(),
            "diffs": [change.to_dict() for change in self.diffs],
        }


def _lookup(arena: Any, ident: int, what: str) -> Any:
    value = arena.get(ident)
    if value is None:
        raise ValueError(f"unknown {what} id {ident}")
    return value


def _line(writer: TextIO, text: str = "") -> None:
    writer.write(f"{text}\n")


def render_api_markdown(writer: TextIO, api: Api) -> None:
    """Write a markdown description of an API: paths, features and public dependencies."""
    if api.root_id is None:
        return

    root = _lookup(api.paths, api.root_id, "path")
    _line(writer, f"# `{root.path}`")
    _line(writer)

    def sort_key(path_id: int) -> tuple[PathKind, str]:
        path = _lookup(api.paths, path_id, "path")
        return path.kind, path.path

    def crate_note(crate_id: int | None) -> None:
        if crate_id is not None:
            crate = _lookup(api.crates, crate_id, "crate")
            _line(writer, f"*from crate `{crate.name}`*")
            _line(writer)

    stack: list[int] = list(reversed(root.children))
    while stack:
        path = _lookup(api.paths, stack.pop(), "path")
        if path.kind is PathKind.MODULE:
            _line(writer, "#" * (path.path.count("::") + 1) + f" `{path.path}`")
            _line(writer)
            crate_note(path.crate_id)

            modules = sorted(
                (c for c in path.children if _lookup(api.paths, c, "path").kind is PathKind.MODULE),
                key=sort_key,
            )
            others = sorted(
                (
                    c
                    for c in path.children
                    if _lookup(api.paths, c, "path").kind is not PathKind.MODULE
                ),
                key=sort_key,
            )
            stack.extend(reversed(modules))
            stack.extend(reversed(others))
        else:
            _line(writer, f"**`{path.path}`** *({path.kind.title})*")
            _line(writer)
            crate_note(path.crate_id)
            stack.extend(reversed(sorted(path.children, key=sort_key)))

    if api.features:
        _line(writer, "## Feature Flags")
        _line(writer)
        for name in sorted(api.features):
            details = api.features[name]
            if isinstance(details, Feature):
                _line(writer, f"`{details.name}`")
                for dependency in details.dependencies:
                    _line(writer, f"- `{dependency}`")
                _line(writer)
            elif isinstance(details, OptionalDependency):
                if details.package is not None:
                    _line(writer, f"`{details.name}` *(dependency `{details.package}`)*")
                else:
                    _line(writer, f"`{details.name}` *(dependency)*")
                _line(writer)

    if len(api.crates):
        _line(writer, "## Public Dependencies")
        _line(writer)
        for _, crate in api.crates:
            version = "unknown" if crate.version is None else str(crate.version)
            _line(writer, f"- `{crate.name}` (version {version})")
        _line(writer)


_SEVERITY_HEADINGS = {
    Severity.REPORT: "## Changes",
    Severity.WARN: "## Breaking Changes",
}

_CATEGORY_HEADINGS = {
    Category.ADDED: "**Added**",
    Category.REMOVED: "**Removed**",
    Category.CHANGED: "**Changed**",
}


def render_diff_markdown(
    writer: TextIO, before: Api, after: Api, diffs: Iterable[Diff]
) -> None:
    """Write a markdown summary of diffs, grouped by severity and category."""
    ordered = sorted(diffs, key=lambda d: (d.severity, d.id.category, d.id.name))

    last_severity = Severity.ALLOW
    last_category: Category | None = None
    for change in ordered:
        if change.severity != last_severity:
            heading = _SEVERITY_HEADINGS.get(change.severity)
            if heading is None:
                raise ValueError(f"unexpected severity {change.severity!r}")
            _line(writer, heading)
            _line(writer)
            last_severity = change.severity
        if change.id.category != last_category:
            heading = _CATEGORY_HEADINGS.get(change.id.category)
            if heading is not None:
                _line(writer, heading)
            last_category = change.id.category

        if change.id == DEPENDENCY_REQUIREMENT:
            if change.before is None or change.after is None:
                raise ValueError("a requirement change needs both locations")
            before_crate = _lookup(before.crates, change.before.crate_id, "crate")
            after_crate = _lookup(after.crates, change.after.crate_id, "crate")
            _line(
                writer,
                f"- `{after_crate.name}` (public dependency): changed version requirement "
                f"from {before_crate.version} to {after_crate.version}",
            )
        else:
            if change.after is not None:
                name = location_name(after, change.after)
            elif change.before is not None:
                name = location_name(before, change.before)
            else:
                raise ValueError("a diff needs at least a before or an after location")
            _line(writer, f"- `{name}`: {change.id.explanation}")


def location_name(api: Api, location: Location) -> str:
    """Human readable name of what a location points at."""
    if location.path_id is not None:
        return _lookup(api.paths, location.path_id, "path").path
    if location.item_id is not None:
        name = _lookup(api.items, location.item_id, "item").name
        if name is None:
            raise ValueError(f"item {location.item_id} has no name")
        return name
    if location.crate_id is not None:
        return _lookup(api.crates, location.crate_id, "crate").name
    raise ValueError(f"{location!r} had no location")