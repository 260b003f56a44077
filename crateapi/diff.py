"""Compare two APIs and report changes to their public dependencies."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from typing import Any, Iterable

from crateapi.api import Api
from crateapi.versionreq import Comparator, Op, VersionReq

U64_MAX = 2**64 - 1

Triple = tuple[int, int, int]
Bounds = tuple[Triple | None, Triple | None]


class Category(enum.IntEnum):
    UNKNOWN = enum.auto()
    ADDED = enum.auto()
    REMOVED = enum.auto()
    CHANGED = enum.auto()

    @property
    def label(self) -> str:
        return self.name.lower()


class Severity(enum.IntEnum):
    ALLOW = enum.auto()
    REPORT = enum.auto()
    WARN = enum.auto()

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class Id:
    """Identity of a kind of change, with its explanation and default severity."""

    name: str
    explanation: str
    category: Category
    default_severity: Severity

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "explanation": self.explanation,
            "category": self.category.label,
            "default_severity": self.default_severity.label,
        }


@dataclass(frozen=True)
class Location:
    """Where in an API a change applies."""

    crate_id: int | None = None
    path_id: int | None = None
    item_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"crate_id": self.crate_id, "path_id": self.path_id, "item_id": self.item_id}


@dataclass(frozen=True)
class Diff:
    """One detected change between two APIs."""

    severity: Severity
    id: Id
    before: Location | None
    after: Location | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity.label,
            "id": self.id.to_dict(),
            "before": None if self.before is None else self.before.to_dict(),
            "after": None if self.after is None else self.after.to_dict(),
        }


DEPENDENCY_REMOVED = Id(
    name="dependency-removed",
    explanation="Public dependency removed because of an API change",
    category=Category.REMOVED,
    # A side effect of an API change rather than an API change in itself.
    default_severity=Severity.ALLOW,
)

DEPENDENCY_ADDED = Id(
    name="dependency-added",
    explanation="Public dependency removed because of an API change",
    category=Category.ADDED,
    # In case people weren't aware they added a dependency to their public API.
    default_severity=Severity.REPORT,
)

DEPENDENCY_AMBIGUOUS = Id(
    name="dependency-ambiguous",
    explanation="Could not determine the dependency version to check it",
    category=Category.UNKNOWN,
    default_severity=Severity.ALLOW,
)

DEPENDENCY_REQUIREMENT = Id(
    name="dependency-requirement",
    explanation="Changing the major version requirements breaks compatibility",
    category=Category.CHANGED,
    default_severity=Severity.WARN,
)

ALL_IDS = (DEPENDENCY_REMOVED, DEPENDENCY_ADDED, DEPENDENCY_AMBIGUOUS, DEPENDENCY_REQUIREMENT)


def diff(before: Api, after: Api) -> list[Diff]:
    """All changes between two APIs."""
    return public_dependencies(before, after)


def _make(id_: Id, before: int | None, after: int | None) -> Diff:
    return Diff(
        severity=id_.default_severity,
        id=id_,
        before=None if before is None else Location(crate_id=before),
        after=None if after is None else Location(crate_id=after),
    )


def public_dependencies(before: Api, after: Api) -> list[Diff]:
    """Changes to the set of public dependencies and their version requirements."""
    before_by_name = {crate.name: ident for ident, crate in before.crates}
    after_by_name = {crate.name: ident for ident, crate in after.crates}
    changes: list[Diff] = []

    for name, ident in before_by_name.items():
        if name not in after_by_name:
            changes.append(_make(DEPENDENCY_REMOVED, ident, None))

    for name, ident in after_by_name.items():
        if name not in before_by_name:
            changes.append(_make(DEPENDENCY_ADDED, None, ident))

    for name, after_id in after_by_name.items():
        if name not in before_by_name:
            continue
        before_id = before_by_name[name]
        before_version = before.crates.get(before_id).version
        after_version = after.crates.get(after_id).version

        if before_version is None or after_version is None:
            changes.append(_make(DEPENDENCY_AMBIGUOUS, before_id, after_id))
        elif before_version != after_version:
            before_lower, before_upper = _filled(breaking(before_version))
            after_lower, after_upper = _filled(breaking(after_version))
            if before_lower < after_lower or after_upper < before_upper:
                changes.append(_make(DEPENDENCY_REQUIREMENT, before_id, after_id))

    return changes


def _filled(bounds: Bounds) -> tuple[Triple, Triple]:
    lower, upper = bounds
    return (
        lower if lower is not None else (0, 0, 0),
        upper if upper is not None else (U64_MAX, U64_MAX, U64_MAX),
    )


def breaking(version: VersionReq) -> Bounds:
    """Lowest and highest breaking-change boundary a requirement allows, when known."""
    if version.is_star():
        return None, None

    lower: Triple | None = None
    upper: Triple | None = None
    for comparator in version.comparators:
        current_lower, current_upper = _breaking_comparator(comparator)
        if current_lower is not None:
            lower = current_lower if lower is None else max(lower, current_lower)
        if current_upper is not None:
            upper = current_upper if upper is None else min(upper, current_upper)
    return lower, upper


def _exact_break(c: Comparator) -> Triple | None:
    if c.major >= 1:
        return (c.major, 0, 0)
    if c.minor is None:
        return None
    if c.minor >= 1:
        return (0, c.minor, 0)
    if c.patch is None:
        return None
    return (0, 0, c.patch)


def _breaking_comparator(c: Comparator) -> Bounds:
    match c.op:
        case Op.GREATER:
            if c.major >= 1:
                return (c.major + (1 if c.minor is None else 0), 0, 0), None
            if c.minor is None:
                return None, None
            if c.minor >= 1:
                return (0, c.minor + (1 if c.patch is None else 0), 0), None
            if c.patch is None:
                return None, None
            return (0, 0, c.patch + 1), None
        case Op.LESS:
            if c.major >= 1:
                return None, (c.major - (1 if c.minor is None else 0), 0, 0)
            if c.minor is None:
                return None, None
            if c.minor >= 1:
                return None, (0, c.minor - (1 if c.patch is None else 0), 0)
            if c.patch is None:
                return None, None
            return None, (0, 0, max(c.patch - 1, 0))
        case Op.GREATER_EQ:
            return _exact_break(c), None
        case Op.LESS_EQ:
            return None, _exact_break(c)
        case Op.EXACT | Op.TILDE | Op.CARET | Op.WILDCARD:
            bound = _exact_break(c)
            return bound, bound
    return None, None


def diffs_to_json(diffs: Iterable[Diff], pretty: bool = False) -> str:
    """Serialise a list of diffs as JSON."""
    data = [change.to_dict() for change in diffs]
    if pretty:
        return json.dumps(data, indent=2, ensure_ascii=False)
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)