import json

import pytest

from crateapi.api import (
    Api,
    Arena,
    Crate,
    Feature,
    Item,
    OptionalDependency,
    Path,
    PathKind,
    Span,
    feature_from_dict,
)
from crateapi.versionreq import VersionReq


def _sample_api():
    api = Api()
    dep = api.crates.push(Crate("serde", VersionReq.parse("^1.0")))
    root = api.paths.push(Path(PathKind.MODULE, "demo"))
    api.root_id = root
    item = api.items.push(Item(crate_id=dep, name="Thing", span=Span("src/lib.rs", (1, 0), (1, 15))))
    child = api.paths.push(Path(PathKind.STRUCT, "demo::Thing", crate_id=dep, item_id=item))
    api.paths.get(root).children.append(child)
    api.features["zeta"] = Feature("zeta", ["serde"])
    api.features["alpha"] = OptionalDependency("alpha", "real-alpha")
    return api


def test_arena_ids_are_sequential():
    arena = Arena()
    ids = [arena.push(name) for name in ["a", "b", "c"]]
    assert ids == list(range(len(arena)))
    assert [value for _, value in arena] == ["a", "b", "c"]


def test_arena_get_out_of_range():
    arena = Arena(["only"])
    assert arena.get(0) == "only"
    assert arena.get(1) is None
    assert arena.get(-1) is None


def test_json_round_trip():
    api = _sample_api()
    assert Api.from_json(api.to_json()) == api
    assert Api.from_json(api.to_json(pretty=True)) == api


def test_dict_layout():
    api = _sample_api()
    data = api.to_dict()
    assert data["root_id"] == api.root_id
    first_id, first_path = data["paths"]["paths"][0]
    assert first_id == api.root_id
    assert first_path["path"] == "demo"
    assert data["crates"]["crates"][0][1]["version"] == "^1.0"
    assert list(data["features"]) == sorted(api.features)


def test_feature_tags():
    api = _sample_api()
    data = api.to_dict()
    assert data["features"]["zeta"]["kind"] == "feature"
    assert data["features"]["alpha"]["kind"] == "optional_dependency"
    assert feature_from_dict(data["features"]["alpha"]) == api.features["alpha"]


def test_unknown_feature_kind():
    with pytest.raises(ValueError):
        feature_from_dict({"kind": "mystery", "name": "x"})


def test_path_kind_labels():
    assert PathKind.OPAQUE_TY.label == "opaque_ty"
    assert PathKind.from_label("extern_crate") is PathKind.EXTERN_CRATE
    assert PathKind.PROC_ATTRIBUTE.title == "ProcAttribute"
    with pytest.raises(ValueError):
        PathKind.from_label("struct_field")


def test_path_kind_order_follows_declaration():
    labels = ["keyword", "struct", "module", "impl"]
    kinds = sorted(PathKind.from_label(label) for label in labels)
    assert [kind.label for kind in kinds] == ["module", "struct", "impl", "keyword"]


def test_span_round_trip():
    span = Span("src/lib.rs", (3, 4), (5, 6))
    assert Span.from_dict(json.loads(json.dumps(span.to_dict()))) == span


def test_missing_optional_fields_default_to_none():
    item = Item.from_dict({})
    assert (item.crate_id, item.name, item.span) == (None, None, None)
    crate = Crate.from_dict({"name": "log"})
    assert crate.version is None


def test_out_of_sequence_ids_rejected():
    data = Api().to_dict()
    data["items"]["items"] = [[5, {"crate_id": None, "name": "x", "span": None}]]
    with pytest.raises(ValueError):
        Api.from_dict(data)