from pathlib import Path

import toml

from oicp import __version__ as pkg_init_version


def test_versions_are_in_sync():
    """Checks if the pyproject.toml and package.__init__.py __version__ are in sync."""
    path = Path(__file__).resolve().parents[1] / "pyproject.toml"
    pyproject = toml.loads(path.read_text())
    pyproject_version = pyproject["tool"]["poetry"]["version"]

    assert pkg_init_version == pyproject_version
