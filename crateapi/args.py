"""Command line arguments of the ``cargo api`` command."""

from __future__ import annotations

import argparse
import enum
from dataclasses import dataclass, field
from typing import Sequence

from crateapi.report import Source, SourceKind


class Mode(enum.Enum):
    """What the command produces."""

    DUMP_RAW = "dump_raw"
    API = "api"
    DIFF = "diff"


class Format(enum.Enum):
    """Output format."""

    SILENT = "silent"
    PRETTY = "pretty"
    MD = "md"
    JSON = "json"

    @classmethod
    def variants(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)

    @classmethod
    def parse(cls, text: str) -> Format:
        """Parse a format name; ``markdown`` is accepted for ``md``."""
        if text == "markdown":
            return cls.MD
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"valid values: {', '.join(cls.variants())}") from None

    def __str__(self) -> str:
        return self.value


@dataclass
class ApiArgs:
    """Parsed options of ``cargo api``."""

    dump_raw: bool = False
    api: bool = False
    diff: bool = False
    git: str | None = None
    path: str | None = None
    registry: str | None = None
    format: Format = Format.PRETTY
    manifest_path: str | None = None
    package: list[str] = field(default_factory=list)
    workspace: bool = False
    exclude: list[str] = field(default_factory=list)
    color: str = "auto"
    verbosity: int = 0

    def mode(self) -> Mode:
        if self.dump_raw:
            return Mode.DUMP_RAW
        if self.api:
            return Mode.API
        if self.diff:
            return Mode.DIFF
        return Mode.API

    def base(self) -> Source | None:
        if self.git is not None:
            return Source(SourceKind.GIT, self.git)
        if self.path is not None:
            return Source(SourceKind.PATH, self.path)
        if self.registry is not None:
            return Source(SourceKind.REGISTRY, self.registry)
        return None


def build_parser() -> argparse.ArgumentParser:
    """The ``cargo`` parser with its ``api`` subcommand."""
    parser = argparse.ArgumentParser(prog="cargo")
    commands = parser.add_subparsers(dest="command", required=True)
    api = commands.add_parser("api", description="Extract and compare a crate's public API")

    mode = api.add_mutually_exclusive_group()
    mode.add_argument("--dump-raw", action="store_true")
    mode.add_argument("--api", action="store_true")
    mode.add_argument("-d", "--diff", action="store_true")

    base = api.add_mutually_exclusive_group()
    base.add_argument("--git", metavar="REF")
    base.add_argument("--path", metavar="TOML")
    base.add_argument("--registry", metavar="PKG")

    api.add_argument("-f", "--format", choices=Format.variants(), default="pretty")
    api.add_argument("--manifest-path", metavar="PATH")
    api.add_argument("-p", "--package", action="append", default=[], metavar="SPEC")
    api.add_argument("--workspace", "--all", dest="workspace", action="store_true")
    api.add_argument("--exclude", action="append", default=[], metavar="SPEC")
    api.add_argument("--color", choices=("auto", "always", "never"), default="auto")
    api.add_argument("-v", "--verbose", action="count", default=0)
    api.add_argument("-q", "--quiet", action="count", default=0)
    return parser


def parse_args(argv: Sequence[str] | None = None) -> ApiArgs:
    """Parse arguments such as ``["api", "--diff"]``; exits with a message when invalid."""
    parser = build_parser()
    ns = parser.parse_args(argv)
    if (ns.git or ns.path or ns.registry) is not None and not ns.diff:
        parser.error("--git, --path and --registry require --diff")
    return ApiArgs(
        dump_raw=ns.dump_raw,
        api=ns.api,
        diff=ns.diff,
        git=ns.git,
        path=ns.path,
        registry=ns.registry,
        format=Format.parse(ns.format),
        manifest_path=ns.manifest_path,
        package=list(ns.package),
        workspace=ns.workspace,
        exclude=list(ns.exclude),
        color=ns.color,
        verbosity=ns.verbose - ns.quiet,
    )