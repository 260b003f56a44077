"""Cargo-style semantic version requirements."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass


class Op(enum.Enum):
    """Comparison operator of a single comparator."""

    EXACT = "="
    GREATER = ">"
    GREATER_EQ = ">="
    LESS = "<"
    LESS_EQ = "<="
    TILDE = "~"
    CARET = "^"
    WILDCARD = "*"


_OP_PREFIXES = (
    (">=", Op.GREATER_EQ),
    ("<=", Op.LESS_EQ),
    (">", Op.GREATER),
    ("<", Op.LESS),
    ("=", Op.EXACT),
    ("~", Op.TILDE),
    ("^", Op.CARET),
)

_WILDCARDS = frozenset({"*", "x", "X"})
_NUMBER = re.compile(r"0|[1-9][0-9]*")
_PRE_IDENT = re.compile(r"[0-9A-Za-z-]+")


@dataclass(frozen=True)
class Comparator:
    """One ``op major[.minor[.patch[-pre]]]`` clause of a requirement."""

    op: Op
    major: int
    minor: int | None = None
    patch: int | None = None
    pre: str = ""

    def __str__(self) -> str:
        prefix = "" if self.op is Op.WILDCARD else self.op.value
        text = f"{prefix}{self.major}"
        if self.minor is not None:
            text += f".{self.minor}"
            if self.patch is not None:
                text += f".{self.patch}"
                if self.pre:
                    text += f"-{self.pre}"
            elif self.op is Op.WILDCARD:
                text += ".*"
        elif self.op is Op.WILDCARD:
            text += ".*"
        return text


def _number(text: str, original: str) -> int:
    if not _NUMBER.fullmatch(text):
        raise ValueError(f"invalid version number {text!r} in {original!r}")
    return int(text)


def _parse_comparator(text: str) -> Comparator:
    original = text
    text = text.strip()
    op: Op | None = None
    for prefix, candidate in _OP_PREFIXES:
        if text.startswith(prefix):
            op = candidate
            text = text[len(prefix):].lstrip()
            break
    if not text:
        raise ValueError(f"expected a version in {original!r}")
    if "+" in text:
        raise ValueError(f"unexpected build metadata in {original!r}")

    version, has_pre, pre = text.partition("-")
    parts = version.split(".")
    if len(parts) > 3:
        raise ValueError(f"too many version components in {original!r}")

    major = _number(parts[0], original)
    numbers: list[int | None] = []
    wildcard = False
    for part in parts[1:]:
        if part in _WILDCARDS:
            wildcard = True
            numbers.append(None)
        elif wildcard:
            raise ValueError(f"unexpected number after wildcard in {original!r}")
        else:
            numbers.append(_number(part, original))
    numbers.extend([None] * (2 - len(numbers)))
    minor, patch = numbers

    if has_pre:
        if patch is None:
            raise ValueError(f"pre-release requires a full version in {original!r}")
        if not all(_PRE_IDENT.fullmatch(ident) for ident in pre.split(".")):
            raise ValueError(f"invalid pre-release {pre!r} in {original!r}")

    if op is None:
        op = Op.WILDCARD if wildcard else Op.CARET
    return Comparator(op, major, minor, patch, pre)


@dataclass(frozen=True)
class VersionReq:
    """A comma separated list of comparators; no comparators means ``*``."""

    comparators: tuple[Comparator, ...] = ()

    @classmethod
    def parse(cls, text: str) -> VersionReq:
        """Parse a requirement such as ``">=1.2, <2"``; raise ValueError if invalid."""
        stripped = text.strip()
        if stripped in _WILDCARDS:
            return cls()
        if not stripped:
            raise ValueError("empty version requirement")
        return cls(tuple(_parse_comparator(piece) for piece in stripped.split(",")))

    def is_star(self) -> bool:
        """Whether this requirement matches every version."""
        return not self.comparators

    def __str__(self) -> str:
        if not self.comparators:
            return "*"
        return ", ".join(str(comparator) for comparator in self.comparators)