"""Build libsrtp from git with meson and print cargo link directives."""

import sys

from rbuild import Build, BuildConfig, BuildError, GitSource, LibraryType, MesonBuild


def build_libsrtp() -> int:
    source = GitSource("https://github.com/cisco/libsrtp.git", revision="v2.6.0")
    meson = MesonBuild().option("crypto-library", "none").option("tests", "disabled")

    config = BuildConfig(
        name="libsrtp",
        source=source,
        steps=(meson,),
        library_type=LibraryType.STATIC,
    )
    with Build.create(config) as build:
        try:
            result = build.execute()
        except BuildError as exc:
            print(exc.pretty_format(), file=sys.stderr)
            return 1

    result.emit_cargo(sys.stdout)
    return 0


if __name__ == "__main__":
    raise SystemExit(build_libsrtp())
