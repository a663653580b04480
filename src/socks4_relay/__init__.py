"""SOCKS4 proxy server with a threaded bidirectional relay."""

import pathlib
import tomllib
from importlib import metadata


def get_version() -> str:
    """Read version from pyproject.toml, falling back to installed metadata."""
    current_dir = pathlib.Path(__file__).parent
    for parent in current_dir.parents:
        pyproject_path = parent / "pyproject.toml"
        if pyproject_path.exists():
            with pyproject_path.open("rb") as f:
                project = tomllib.load(f).get("project", {})
            if project.get("name") == "socks4-relay":
                return project["version"]

    try:
        return metadata.version("socks4-relay")
    except metadata.PackageNotFoundError:
        return "0.0.0"


__version__ = get_version()
