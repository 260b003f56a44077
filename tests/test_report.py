import io

import pytest

from crateapi.api import Api, Crate, Feature, Item, OptionalDependency, Path, PathKind
from crateapi.diff import DEPENDENCY_ADDED, Diff, Location, diff
from crateapi.manifest import Manifest
from crateapi.rawdoc import load_crate
from crateapi.report import (
    ApiReport,
    DiffReport,
    RawReport,
    Source,
    SourceKind,
    location_name,
    render_api_markdown,
    render_diff_markdown,
)
from crateapi.versionreq import VersionReq


def _sample_api() -> Api:
    api = Api()
    root = api.paths.push(Path(PathKind.MODULE, "demo"))
    api.root_id = root
    module = api.paths.push(Path(PathKind.MODULE, "demo::m"))
    func = api.paths.push(Path(PathKind.FUNCTION, "demo::f"))
    struct = api.paths.push(Path(PathKind.STRUCT, "demo::A"))
    inner = api.paths.push(Path(PathKind.STRUCT, "demo::m::S"))
    api.paths.get(root).children.extend([module, func, struct])
    api.paths.get(module).children.append(inner)
    return api


def _render(api: Api) -> list[str]:
    out = io.StringIO()
    render_api_markdown(out, api)
    return out.getvalue().splitlines()


def test_render_api_empty_without_root():
    out = io.StringIO()
    render_api_markdown(out, Api())
    assert out.getvalue() == ""


def test_render_api_features_and_dependencies():
    api = _sample_api()
    serde = api.crates.push(Crate("serde", VersionReq.parse("1")))
    api.crates.push(Crate("rand"))
    api.paths.get(1).crate_id = serde
    api.features["std"] = Feature("std", ["alloc"])
    api.features["json"] = OptionalDependency("json", package="serde_json")
    api.features["log"] = OptionalDependency("log")
    lines = _render(api)
    assert "*from crate `serde`*" in lines
    assert "## Feature Flags" in lines
    assert "- `alloc`" in lines
    assert "`json` *(dependency `serde_json`)*" in lines
    assert "`log` *(dependency)*" in lines
    assert lines.index("`json` *(dependency `serde_json`)*") < lines.index("`std`")
    assert f"- `serde` (version {VersionReq.parse('1')})" in lines
    assert "- `rand` (version unknown)" in lines


def _crate_api(*crates: Crate) -> Api:
    api = Api()
    for crate in crates:
        api.crates.push(crate)
    return api


def test_render_diff_markdown_groups():
    before = _crate_api(Crate("serde", VersionReq.parse("1")))
    after = _crate_api(Crate("serde", VersionReq.parse("2")), Crate("rand"))
    out = io.StringIO()
    render_diff_markdown(out, before, after, diff(before, after))
    lines = [line for line in out.getvalue().splitlines() if line]
    assert lines == [
        "## Changes",
        "**Added**",
        f"- `rand`: {DEPENDENCY_ADDED.explanation}",
        "## Breaking Changes",
        "**Changed**",
        "- `serde` (public dependency): changed version requirement from "
        f"{VersionReq.parse('1')} to {VersionReq.parse('2')}",
    ]


def test_render_diff_markdown_nothing_for_no_diffs():
    out = io.StringIO()
    render_diff_markdown(out, Api(), Api(), [])
    assert out.getvalue() == ""


def test_location_name_variants():
    api = _sample_api()
    item = api.items.push(Item(name="thing"))
    crate = api.crates.push(Crate("serde"))
    assert location_name(api, Location(path_id=1)) == "demo::m"
    assert location_name(api, Location(item_id=item)) == "thing"
    assert location_name(api, Location(crate_id=crate)) == "serde"
    with pytest.raises(ValueError):
        location_name(api, Location())


def test_location_name_prefers_path():
    api = _sample_api()
    crate = api.crates.push(Crate("serde"))
    assert location_name(api, Location(crate_id=crate, path_id=0)) == "demo"


def test_source_to_dict():
    assert Source(SourceKind.GIT, "v1.0").to_dict() == {"git": "v1.0"}
    assert Source(SourceKind.REGISTRY, "serde").to_dict() == {"registry": "serde"}


def test_api_report_round_trip():
    api = _sample_api()
    data = ApiReport("Cargo.toml", api).to_dict()
    assert data["manifest_path"] == "Cargo.toml"
    assert Api.from_dict(data["api"]) == api


def test_diff_report_to_dict():
    before = _crate_api(Crate("serde", VersionReq.parse("1")))
    after = _crate_api(Crate("serde", VersionReq.parse("2")))
    changes = diff(before, after)
    report = DiffReport("a/Cargo.toml", Source(SourceKind.PATH, "b/Cargo.toml"), before, after, changes)
    data = report.to_dict()
    assert data["against"] == {"path": "b/Cargo.toml"}
    assert data["diffs"] == [change.to_dict() for change in changes]
    assert Api.from_dict(data["after"]) == after


def test_raw_report_keeps_document():
    text = (
        '{"root": "0:0", "crate_version": null, "includes_private": false, '
        '"index": {}, "paths": {}, "external_crates": {}, "format_version": 9}'
    )
    raw = load_crate(text)
    manifest = Manifest("demo", "0.1.0")
    data = RawReport("Cargo.toml", raw, manifest).to_dict()
    assert data["rustdoc"] == raw.source
    assert data["manifest"] == manifest.to_dict()
    assert RawReport("Cargo.toml").to_dict()["rustdoc"] is None


def test_render_diff_uses_before_when_no_after():
    before = _crate_api(Crate("gone"))
    changes = diff(before, Api())
    change = changes[0]
    forced = Diff(DEPENDENCY_ADDED.default_severity, change.id, change.before, None)
    out = io.StringIO()
    render_diff_markdown(out, before, Api(), [forced])
    assert f"- `gone`: {change.id.explanation}" in out.getvalue().splitlines()