import shutil
from pathlib import Path

import pytest

from rbuild import Build, BuildConfig, DirectorySource, LibraryType, LinkSearchKind, MesonBuild

pytestmark = pytest.mark.skipif(
    any(shutil.which(tool) is None for tool in ("meson", "ninja", "cc")),
    reason="meson, ninja and a C compiler are required.",
)


def test_static_meson_project_builds_and_reports_library(tmp_path: Path) -> None:
    source = _write_project(tmp_path / "project")
    prefix = tmp_path / "out"
    step = MesonBuild(options={"opt": "false", "libdir": "lib"})

    with Build.create(
        BuildConfig(
            name="demo",
            source=DirectorySource(source),
            steps=(step,),
            library_type=LibraryType.STATIC,
            install_prefix=prefix,
            build_dir=tmp_path / "work",
        ),
        environ={},
    ) as build:
        result = build.execute()

    assert [(library.name, library.kind) for library in result.libraries] == [
        ("libfoo.a", LibraryType.STATIC)
    ]
    assert [(entry.path, entry.kind) for entry in result.library_paths] == [
        (prefix / "lib", LinkSearchKind.NATIVE)
    ]
    assert (prefix / "lib" / "libfoo.a").exists()


def test_repeated_build_reuses_working_directory(tmp_path: Path) -> None:
    source = _write_project(tmp_path / "project")
    config = BuildConfig(
        name="demo",
        source=DirectorySource(source),
        steps=(MesonBuild(options={"libdir": "lib"}),),
        library_type=LibraryType.STATIC,
        install_prefix=tmp_path / "out",
        build_dir=tmp_path / "work",
        remove_build_dir=False,
    )
    with Build.create(config, environ={}) as first:
        first.execute()
        first_path = first.build_path

    repeated = BuildConfig(
        name="demo",
        source=DirectorySource(source),
        steps=(MesonBuild(options={"libdir": "lib"}),),
        library_type=LibraryType.STATIC,
        install_prefix=tmp_path / "out",
        build_dir=tmp_path / "work",
        remove_build_dir=False,
    )
    with Build.create(repeated, environ={}) as second:
        result = second.execute()

    assert second.build_path == first_path
    assert [library.name for library in result.libraries] == ["libfoo.a"]


def _write_project(path: Path) -> Path:
    path.mkdir(parents=True)
    (path / "meson.build").write_text(
        "project('demo', 'c')\n"
        "if get_option('opt')\n"
        "  add_project_arguments('-DOPT=1', language: 'c')\n"
        "endif\n"
        "static_library('foo', 'foo.c', install: true)\n",
        encoding="utf-8",
    )
    (path / "meson_options.txt").write_text(
        "option('opt', type: 'boolean', value: true)\n",
        encoding="utf-8",
    )
    (path / "foo.c").write_text("int foo(void) { return 42; }\n", encoding="utf-8")
    return path
