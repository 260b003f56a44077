"""In-memory model of a crate's public API."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Iterator, TypeVar

from crateapi.versionreq import VersionReq

T = TypeVar("T")


class PathKind(enum.IntEnum):
    """Kind of a public path; ordered by declaration."""

    MODULE = enum.auto()
    EXTERN_CRATE = enum.auto()
    IMPORT = enum.auto()
    STRUCT = enum.auto()
    UNION = enum.auto()
    ENUM = enum.auto()
    VARIANT = enum.auto()
    FUNCTION = enum.auto()
    TYPEDEF = enum.auto()
    OPAQUE_TY = enum.auto()
    CONSTANT = enum.auto()
    TRAIT = enum.auto()
    TRAIT_ALIAS = enum.auto()
    METHOD = enum.auto()
    IMPL = enum.auto()
    STATIC = enum.auto()
    FOREIGN_TYPE = enum.auto()
    MACRO = enum.auto()
    PROC_ATTRIBUTE = enum.auto()
    PROC_DERIVE = enum.auto()
    ASSOC_CONST = enum.auto()
    ASSOC_TYPE = enum.auto()
    PRIMITIVE = enum.auto()
    KEYWORD = enum.auto()

    @property
    def label(self) -> str:
        """The snake_case name used in JSON."""
        return self.name.lower()

    @property
    def title(self) -> str:
        """The CamelCase name used in human output."""
        return "".join(part.capitalize() for part in self.name.split("_"))

    @classmethod
    def from_label(cls, label: str) -> PathKind:
        try:
            return cls[label.upper()]
        except KeyError:
            raise ValueError(f"unknown path kind {label!r}") from None


def _pair(value: Iterable[int]) -> tuple[int, int]:
    line, column = value
    return int(line), int(column)


@dataclass
class Span:
    """Source location: file plus zero indexed (line, column) of first and last character."""

    filename: str
    begin: tuple[int, int]
    end: tuple[int, int]

    def to_dict(self) -> dict[str, Any]:
        return {"filename": self.filename, "begin": list(self.begin), "end": list(self.end)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Span:
        return cls(str(data["filename"]), _pair(data["begin"]), _pair(data["end"]))


def _span_from(data: dict[str, Any] | None) -> Span | None:
    return None if data is None else Span.from_dict(data)


@dataclass
class Path:
    """A public path, such as ``krate::module::Struct``."""

    kind: PathKind
    path: str
    crate_id: int | None = None
    span: Span | None = None
    item_id: int | None = None
    children: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "crate_id": self.crate_id,
            "path": self.path,
            "kind": self.kind.label,
            "span": None if self.span is None else self.span.to_dict(),
            "item_id": self.item_id,
            "children": list(self.children),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Path:
        return cls(
            kind=PathKind.from_label(data["kind"]),
            path=data["path"],
            crate_id=data.get("crate_id"),
            span=_span_from(data.get("span")),
            item_id=data.get("item_id"),
            children=list(data["children"]),
        )


@dataclass
class Item:
    """A concrete API item (function, struct, constant, ...)."""

    crate_id: int | None = None
    name: str | None = None
    span: Span | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "crate_id": self.crate_id,
            "name": self.name,
            "span": None if self.span is None else self.span.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Item:
        return cls(data.get("crate_id"), data.get("name"), _span_from(data.get("span")))


@dataclass
class Crate:
    """A crate that appears in the public API, with its version requirement if known."""

    name: str
    version: VersionReq | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": None if self.version is None else str(self.version),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Crate:
        version = data.get("version")
        return cls(data["name"], None if version is None else VersionReq.parse(version))


@dataclass
class Feature:
    """A cargo feature flag and what it enables."""

    name: str
    dependencies: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "feature", "name": self.name, "dependencies": list(self.dependencies)}


@dataclass
class OptionalDependency:
    """An optional dependency acting as a feature; ``package`` is set when renamed."""

    name: str
    package: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "optional_dependency", "name": self.name, "package": self.package}


AnyFeature = Feature | OptionalDependency


def feature_from_dict(data: dict[str, Any]) -> AnyFeature:
    """Build a feature from its tagged JSON form."""
    kind = data.get("kind")
    if kind == "feature":
        return Feature(data["name"], list(data["dependencies"]))
    if kind == "optional_dependency":
        return OptionalDependency(data["name"], data.get("package"))
    raise ValueError(f"unknown feature kind {kind!r}")


class Arena(Generic[T]):
    """Append-only store handing out sequential integer ids."""

    def __init__(self, values: Iterable[T] = ()) -> None:
        self._values: list[T] = list(values)

    def push(self, value: T) -> int:
        self._values.append(value)
        return len(self._values) - 1

    def get(self, ident: int) -> T | None:
        if 0 <= ident < len(self._values):
            return self._values[ident]
        return None

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[tuple[int, T]]:
        return iter(enumerate(self._values))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Arena):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"Arena({self._values!r})"


def _arena_to(arena: Arena[Any]) -> list[list[Any]]:
    return [[ident, value.to_dict()] for ident, value in arena]


def _arena_from(entries: list[Any], loader: Callable[[dict[str, Any]], T]) -> Arena[T]:
    arena: Arena[T] = Arena()
    for ident, value in entries:
        if arena.push(loader(value)) != ident:
            raise ValueError(f"id {ident} out of sequence")
    return arena


@dataclass
class Api:
    """A crate's public API: paths, items, public dependencies and features."""

    root_id: int | None = None
    paths: Arena[Path] = field(default_factory=Arena)
    items: Arena[Item] = field(default_factory=Arena)
    crates: Arena[Crate] = field(default_factory=Arena)
    features: dict[str, AnyFeature] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "root_id": self.root_id,
            "paths": {"paths": _arena_to(self.paths)},
            "items": {"items": _arena_to(self.items)},
            "crates": {"crates": _arena_to(self.crates)},
            "features": {name: self.features[name].to_dict() for name in sorted(self.features)},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Api:
        return cls(
            root_id=data.get("root_id"),
            paths=_arena_from(data["paths"]["paths"], Path.from_dict),
            items=_arena_from(data["items"]["items"], Item.from_dict),
            crates=_arena_from(data["crates"]["crates"], Crate.from_dict),
            features={name: feature_from_dict(value) for name, value in data["features"].items()},
        )

    def to_json(self, pretty: bool = False) -> str:
        if pretty:
            return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> Api:
        return cls.from_dict(json.loads(text))