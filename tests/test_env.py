from pathlib import Path

import pytest

from rbuild.env import (
    build_dir_from_env,
    install_prefix_from_env,
    library_type_from_env,
    remove_build_dir_from_env,
)
from rbuild.errors import BuildCreateError
from rbuild.result import LibraryType


def test_per_build_library_type_wins_over_general() -> None:
    environ = {
        "rbuild_libfoo_library_type": "static",
        "rbuild_library_type": "shared",
    }

    assert library_type_from_env("libfoo", environ) is LibraryType.STATIC
    assert library_type_from_env("other", environ) is LibraryType.SHARED


def test_library_type_is_case_insensitive() -> None:
    assert library_type_from_env("x", {"rbuild_library_type": "StAtIc"}) is LibraryType.STATIC
    assert library_type_from_env("x", {"rbuild_library_type": "SHARED"}) is LibraryType.SHARED


def test_library_type_absent_returns_none() -> None:
    assert library_type_from_env("x", {}) is None


def test_invalid_library_type_is_a_construction_error() -> None:
    with pytest.raises(BuildCreateError) as excinfo:
        library_type_from_env("x", {"rbuild_x_library_type": "dynamic"})

    assert excinfo.value.code == "E_BUILD_CREATE"
    assert excinfo.value.context["variable"] == "rbuild_x_library_type"
    assert excinfo.value.context["value"] == "dynamic"


def test_install_prefix_falls_back_to_host_output_dir() -> None:
    assert install_prefix_from_env("x", {"OUT_DIR": "/host/out"}) == Path("/host/out")
    assert install_prefix_from_env(
        "x",
        {"rbuild_install_prefix": "/general", "OUT_DIR": "/host/out"},
    ) == Path("/general")
    assert install_prefix_from_env(
        "x",
        {"rbuild_x_install_prefix": "/specific", "rbuild_install_prefix": "/general"},
    ) == Path("/specific")
    assert install_prefix_from_env("x", {}) is None


def test_empty_per_build_value_falls_through_to_general() -> None:
    environ = {
        "rbuild_x_install_prefix": "",
        "rbuild_install_prefix": "/general",
        "OUT_DIR": "/host/out",
    }

    assert install_prefix_from_env("x", environ) == Path("/general")
    assert library_type_from_env(
        "x", {"rbuild_x_library_type": "", "rbuild_library_type": "static"}
    ) is LibraryType.STATIC


def test_build_dir_uses_same_fallback_chain() -> None:
    assert build_dir_from_env("x", {"rbuild_x_build_path": "/work"}) == Path("/work")
    assert build_dir_from_env("x", {"OUT_DIR": "/host/out"}) == Path("/host/out")
    assert build_dir_from_env("x", {}) is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [("1", True), ("true", True), ("Yes", True), ("0", False), ("off", False), ("FALSE", False)],
)
def test_remove_build_dir_parses_boolean_words(value: str, expected: bool) -> None:
    assert remove_build_dir_from_env("x", {"rbuild_remove_build_dir": value}) is expected


def test_remove_build_dir_rejects_unknown_words() -> None:
    with pytest.raises(BuildCreateError):
        remove_build_dir_from_env("x", {"rbuild_x_remove_build_dir": "maybe"})
