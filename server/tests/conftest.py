"""
Shared fixtures for dartlint tests.
"""

import pytest

from dartlint.registry import build_registry


@pytest.fixture(scope="session")
def registry():
    """The bundled rule registry, compiled once per session."""
    return build_registry()


@pytest.fixture
def dart_project(tmp_path):
    """A small Dart project with one file per kind of issue."""
    lib = tmp_path / "lib"
    lib.mkdir()
    (lib / "main.dart").write_text(
        "void main() {\n"
        "  print('hello');\n"
        "}\n"
    )
    (lib / "errors.dart").write_text(
        "void risky() {\n"
        "  try {\n"
        "    risky();\n"
        "  } catch (e) {}\n"
        "}\n"
    )
    (lib / "clean.dart").write_text(
        "int add(int a, int b) {\n"
        "  return a + b;\n"
        "}\n"
    )
    build = tmp_path / "build"
    build.mkdir()
    (build / "generated.dart").write_text("class generated {}\n")
    return tmp_path
