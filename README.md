# crateapi

A Python library for working with the public API of a cargo package. It models the API as paths, items, public dependencies and feature flags. It compares two such models and reports changes to public dependencies. It can also render an API or a list of changes as Markdown.

## Installation

```
pip install .
```

It needs Python 3.11 or later and has no third-party dependencies.

## Modules

- `crateapi.api`: the API model.
  - `Api` holds `root_id`, `paths`, `items`, `crates` and `features`.
  - `Path`, `Item`, `Crate`, `Span`, `Feature` and `OptionalDependency` are its parts. `PathKind` gives the kind of a path.
  - `Arena` is an append-only store. It hands out sequential integer ids through `push`, `get`, `len()` and iteration.
  - `Api.to_json(pretty)` and `Api.from_json(text)` save and load an API as JSON. `to_dict` and `from_dict` do the same with plain dictionaries.
- `crateapi.versionreq`: cargo version requirements.
  - `VersionReq.parse(">=1.2, <2")` parses a requirement and raises `ValueError` when the text is invalid.
  - `str()` writes the requirement back out, and `is_star()` tells whether it matches every version.
- `crateapi.diff`: comparing two APIs.
  - `diff(before, after)` returns a list of `Diff` objects, one per change.
  - `breaking(version)` gives the lowest and highest breaking-version boundary that a requirement allows.
  - `diffs_to_json(diffs, pretty)` serialises the list of changes.
- `crateapi.manifest`: package data from `cargo metadata`.
  - `Manifest.from_package(package)` takes one package entry of the metadata JSON, as a dict. Optional dependencies become features unless a feature with the same name already exists.
  - `Manifest.into_api(api)` records each dependency's version requirement on the matching crate. It only does this when exactly one crate has that name. It also adds the feature flags.
- `crateapi.rawdoc`: reading rustdoc JSON.
  - `load_crate(text)` reads a document produced with `--output-format json` into a `RawCrate` (format version 9). It raises `ValueError` for malformed input.
  - `RawItem.children()` lists the ids that a module, trait, impl, enum or import leads to.
- `crateapi.report`: reports and Markdown output.
  - `RawReport`, `ApiReport` and `DiffReport` are serialisable reports. `Source` names a baseline, which is a git revision, a path or a registry package.
  - `render_api_markdown(writer, api)` and `render_diff_markdown(writer, before, after, diffs)` write Markdown to a text stream.
- `crateapi.args`: argument parsing for an `api` subcommand.
  - `parse_args(["api", "--diff", "--git", "v1.0.0"])` returns an `ApiArgs` object, and `build_parser()` returns the underlying `argparse` parser.
  - `Format.parse` accepts `silent`, `pretty`, `md`, `markdown` and `json`.
- `crateapi.log`: logging setup.
  - `init_logging(verbosity, colored)` installs a stderr handler on the root logger.
  - Info messages are printed bare, and other levels are printed as `LEVEL: message`.

## Example

```python
from crateapi.api import Api
from crateapi.diff import diff, diffs_to_json
from crateapi.report import render_diff_markdown
import sys

with open("old-api.json") as f:
    before = Api.from_json(f.read())
with open("new-api.json") as f:
    after = Api.from_json(f.read())

changes = diff(before, after)
print(diffs_to_json(changes, pretty=True))
render_diff_markdown(sys.stdout, before, after, changes)
```

## Changes detected

| Name                     | Category | Default severity |
|--------------------------|----------|------------------|
| `dependency-removed`     | removed  | allow            |
| `dependency-added`       | added    | report           |
| `dependency-ambiguous`   | unknown  | allow            |
| `dependency-requirement` | changed  | warn             |

A requirement change is reported when the new requirement moves the range of compatible breaking versions of a public dependency. An ambiguous change is reported when either side has no known version requirement.

## What it does not do

- The package does not run `cargo doc` or `cargo metadata`. You have to produce rustdoc JSON and metadata yourself and pass them in.
- It does not build an `Api` from a `RawCrate`. `Api` objects are made in code or loaded with `Api.from_json`.
- It installs no command. `crateapi.args` and `crateapi.log` only parse options and set up logging. They do not check out git revisions and do not print reports.