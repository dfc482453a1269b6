"""Build a local meson project, promoting nested wraps when meson asks for it."""

import sys
from pathlib import Path

from rbuild import Build, BuildConfig, DirectorySource, MesonBuild


def promote_nested_wraps(subproject: str) -> list[str]:
    return [str(Path(subproject).with_suffix(".wrap"))]


def build_local(project: Path) -> None:
    meson = MesonBuild(options={"libdir": "lib"}).on_promote(promote_nested_wraps)
    config = BuildConfig(
        name=project.name,
        source=DirectorySource(project),
        steps=(meson,),
        remove_build_dir=False,
    )
    with Build.create(config) as build:
        result = build.execute()
        result.to_json(build.build_path / "result.json")

    result.emit_cargo(sys.stdout)


if __name__ == "__main__":
    build_local(Path(sys.argv[1] if len(sys.argv) > 1 else "."))
