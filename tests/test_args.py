import pytest

from crateapi.args import ApiArgs, Format, Mode, build_parser, parse_args
from crateapi.report import Source, SourceKind


def test_format_parse_variants():
    for name in Format.variants():
        assert str(Format.parse(name)) == name


def test_format_parse_markdown_alias():
    assert Format.parse("markdown") is Format.MD


def test_format_parse_invalid():
    with pytest.raises(ValueError, match="valid values: silent, pretty, md, json"):
        Format.parse("xml")


def test_defaults():
    args = parse_args(["api"])
    assert args.mode() is Mode.API
    assert args.format is Format.PRETTY
    assert args.base() is None
    assert args.verbosity == 0


@pytest.mark.parametrize(
    "flag, mode",
    [("--dump-raw", Mode.DUMP_RAW), ("--api", Mode.API), ("-d", Mode.DIFF), ("--diff", Mode.DIFF)],
)
def test_modes(flag, mode):
    assert parse_args(["api", flag]).mode() is mode


def test_modes_are_exclusive():
    with pytest.raises(SystemExit):
        parse_args(["api", "--api", "--diff"])


def test_base_requires_diff():
    with pytest.raises(SystemExit):
        parse_args(["api", "--git", "v1"])


def test_bases_are_exclusive():
    with pytest.raises(SystemExit):
        parse_args(["api", "--diff", "--git", "v1", "--registry", "serde"])


def test_base_git():
    args = parse_args(["api", "--diff", "--git", "v1"])
    assert args.base() == Source(SourceKind.GIT, "v1")


def test_base_path_and_registry():
    assert ApiArgs(diff=True, path="old/Cargo.toml").base() == Source(
        SourceKind.PATH, "old/Cargo.toml"
    )
    assert ApiArgs(diff=True, registry="serde").base() == Source(SourceKind.REGISTRY, "serde")


def test_format_option():
    assert parse_args(["api", "-f", "json"]).format is Format.JSON
    assert parse_args(["api", "--format", "md"]).format is Format.MD


def test_format_option_rejects_alias():
    with pytest.raises(SystemExit):
        parse_args(["api", "--format", "markdown"])


def test_workspace_options():
    args = parse_args(
        ["api", "-p", "a", "--package", "b", "--all", "--exclude", "c", "--manifest-path", "x.toml"]
    )
    assert args.package == ["a", "b"]
    assert args.workspace is True
    assert args.exclude == ["c"]
    assert args.manifest_path == "x.toml"


def test_verbosity_counts():
    assert parse_args(["api", "-vv", "-q"]).verbosity == 1
    assert parse_args(["api", "-qq"]).verbosity == -2


def test_subcommand_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])