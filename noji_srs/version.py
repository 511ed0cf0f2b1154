"""Single source of truth for the application version.

Reads the installed distribution metadata, falling back to pyproject.toml
for source checkouts (tomllib, Python 3.11+).
"""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def get_version() -> str:
    """Return the project version string."""
    try:
        return version("noji-srs")
    except PackageNotFoundError:
        pyproject_path = _PROJECT_ROOT / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
        return data["project"]["version"]


__version__: str = get_version()
