"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path


class ConfigError(Exception):
    """Error in livevars configuration."""


@dataclass(slots=True, frozen=True)
class LivevarsConfig:
    """Configuration loaded from the ``[tool.livevars]`` table of pyproject.toml.

    All relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    variables: Path | None = None
    strict: bool = False
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def load_config(pyproject_path: Path) -> LivevarsConfig:
    """Load and validate [tool.livevars] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed LivevarsConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("livevars", {})
    if not section:
        return LivevarsConfig(project_root=project_root)

    variables_path: Path | None = None
    if "variables" in section:
        variables_value = section["variables"]
        if not isinstance(variables_value, str):
            msg = "Invalid [tool.livevars].variables: expected string path"
            raise ConfigError(msg)
        variables_path = Path(variables_value)
        if not variables_path.is_absolute():
            variables_path = project_root / variables_path

    strict = section.get("strict", False)
    if not isinstance(strict, bool):
        msg = "Invalid [tool.livevars].strict: expected boolean"
        raise ConfigError(msg)

    return LivevarsConfig(variables=variables_path, strict=strict, project_root=project_root)


def get_config() -> LivevarsConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        LivevarsConfig (may be empty if no pyproject.toml or no [tool.livevars] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return LivevarsConfig()
    return load_config(pyproject_path)
