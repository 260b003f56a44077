"""Reader for the JSON document rustdoc emits with ``--output-format json``.

Only the parts needed to walk a crate's public items are modelled; every
item keeps its raw ``inner`` payload, and the crate keeps the whole document.
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import Any

FORMAT_VERSION = 9

# Item kinds whose payload lists further item ids, and the field holding them.
_CHILD_FIELDS = {
    "module": "items",
    "trait": "items",
    "impl": "items",
    "enum": "variants",
}


class ItemKind(enum.Enum):
    """Kind of an item as given in the ``paths`` summary table."""

    MODULE = "module"
    EXTERN_CRATE = "extern_crate"
    IMPORT = "import"
    STRUCT = "struct"
    STRUCT_FIELD = "struct_field"
    UNION = "union"
    ENUM = "enum"
    VARIANT = "variant"
    FUNCTION = "function"
    TYPEDEF = "typedef"
    OPAQUE_TY = "opaque_ty"
    CONSTANT = "constant"
    TRAIT = "trait"
    TRAIT_ALIAS = "trait_alias"
    METHOD = "method"
    IMPL = "impl"
    STATIC = "static"
    FOREIGN_TYPE = "foreign_type"
    MACRO = "macro"
    PROC_ATTRIBUTE = "proc_attribute"
    PROC_DERIVE = "proc_derive"
    ASSOC_CONST = "assoc_const"
    ASSOC_TYPE = "assoc_type"
    PRIMITIVE = "primitive"
    KEYWORD = "keyword"


@dataclass(frozen=True)
class RawSpan:
    """Source location relative to where rustdoc was invoked."""

    filename: str
    begin: tuple[int, int]
    end: tuple[int, int]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RawSpan:
        begin_line, begin_column = data["begin"]
        end_line, end_column = data["end"]
        return cls(
            str(data["filename"]),
            (int(begin_line), int(begin_column)),
            (int(end_line), int(end_column)),
        )


@dataclass(frozen=True)
class ExternalCrate:
    """A crate other than the documented one."""

    name: str
    html_root_url: str | None = None


@dataclass(frozen=True)
class ItemSummary:
    """Fully qualified path and kind of an item, local or external."""

    crate_id: int
    path: tuple[str, ...]
    kind: ItemKind

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ItemSummary:
        return cls(int(data["crate_id"]), tuple(data["path"]), ItemKind(data["kind"]))


@dataclass
class RawItem:
    """One entry of the crate's ``index``."""

    id: str
    crate_id: int
    kind: str
    name: str | None = None
    span: RawSpan | None = None
    docs: str | None = None
    inner: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RawItem:
        span = data.get("span")
        return cls(
            id=str(data["id"]),
            crate_id=int(data["crate_id"]),
            kind=str(data["kind"]),
            name=data.get("name"),
            span=None if span is None else RawSpan.from_dict(span),
            docs=data.get("docs"),
            inner=data.get("inner"),
        )

    def children(self) -> list[str]:
        """Ids this item leads to: module, trait and impl members, enum variants,
        or the target of an import."""
        if not isinstance(self.inner, dict):
            return []
        if self.kind == "import":
            target = self.inner.get("id")
            return [] if target is None else [str(target)]
        key = _CHILD_FIELDS.get(self.kind)
        if key is None:
            return []
        return [str(ident) for ident in self.inner[key]]


@dataclass
class RawCrate:
    """Root of a rustdoc JSON document."""

    root: str
    crate_version: str | None
    includes_private: bool
    index: dict[str, RawItem]
    paths: dict[str, ItemSummary]
    external_crates: dict[int, ExternalCrate]
    format_version: int
    source: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RawCrate:
        return cls(
            root=str(data["root"]),
            crate_version=data.get("crate_version"),
            includes_private=bool(data["includes_private"]),
            index={str(k): RawItem.from_dict(v) for k, v in data["index"].items()},
            paths={str(k): ItemSummary.from_dict(v) for k, v in data["paths"].items()},
            external_crates={
                int(k): ExternalCrate(v["name"], v.get("html_root_url"))
                for k, v in data["external_crates"].items()
            },
            format_version=int(data["format_version"]),
            source=data,
        )


def load_crate(text: str) -> RawCrate:
    """Parse rustdoc JSON text; raise ValueError if it is not a valid document."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object at the top level")
    try:
        return RawCrate.from_dict(data)
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"malformed rustdoc document: {exc!r}") from exc