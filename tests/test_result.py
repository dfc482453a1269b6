import io
import json
from pathlib import Path

import cbor2

from rbuild.result import BuildLibrary, BuildResult, LibraryType, LinkSearchKind


def test_cargo_lines_cover_paths_libraries_and_emits() -> None:
    result = BuildResult()
    result.add_library_path("/out/lib", LinkSearchKind.NATIVE)
    result.add_library("libfoo.a", LibraryType.STATIC)
    result.add_library("libbar.so", LibraryType.SHARED)
    result.add_library("z")
    result.add_emit("rustc-cfg=has_foo")

    assert result.cargo_lines() == [
        "cargo:rustc-link-search=native=/out/lib",
        "cargo:rustc-link-lib=static=foo",
        "cargo:rustc-link-lib=dylib=bar",
        "cargo:rustc-link-lib=z",
        "cargo:rustc-cfg=has_foo",
    ]


def test_search_path_without_kind_is_emitted_bare() -> None:
    result = BuildResult().add_library_path(Path("/opt/lib"))

    assert result.cargo_lines() == ["cargo:rustc-link-search=/opt/lib"]


def test_duplicate_search_paths_are_recorded_once() -> None:
    result = BuildResult()
    result.add_library_path("/out/lib", LinkSearchKind.NATIVE)
    result.add_library_path("/out/lib", LinkSearchKind.NATIVE)
    result.add_library_path("/out/lib", LinkSearchKind.ALL)

    assert len(result.library_paths) == 2


def test_link_name_strips_prefix_and_extension() -> None:
    assert BuildLibrary("libfoo.a").link_name == "foo"
    assert BuildLibrary("foo.lib").link_name == "foo"
    assert BuildLibrary("lib").link_name == "lib"
    assert BuildLibrary("ssl").link_name == "ssl"


def test_emit_cargo_writes_one_directive_per_line() -> None:
    result = BuildResult().add_library("libfoo.a", LibraryType.STATIC)
    stream = io.StringIO()

    result.emit_cargo(stream)

    assert stream.getvalue() == "cargo:rustc-link-lib=static=foo\n"


def test_report_exports_match(tmp_path: Path) -> None:
    result = BuildResult()
    result.add_library("libfoo.a", LibraryType.STATIC)
    result.add_library_path("/out/lib", LinkSearchKind.NATIVE)

    encoded = result.to_json(tmp_path / "result.json")
    payload = json.loads((tmp_path / "result.json").read_text(encoding="utf-8"))

    assert json.loads(encoded) == payload
    assert payload["libraries"] == [{"name": "libfoo.a", "kind": "static"}]
    assert payload["library_paths"] == [{"path": "/out/lib", "kind": "native"}]
    assert cbor2.loads(result.to_cbor()) == payload
