"""pyproject.toml manifest parsing (PEP 621, PEP 735, Poetry, uv, PDM, Hatch)."""

from pathlib import Path
from typing import Any, Iterable, Union

import tomllib

from ..exceptions import FileProcessingError, InputNotFoundError
from ..logging_config import logger
from ..models import LockBundle, ModeFlags, ParentComponent
from .models import make_pypi_purl, requirement_name


def _requirement_names(requirements: Any) -> list[str]:
    """Names from a list of PEP 508 strings; tables such as include-group are skipped."""
    names = []
    if not isinstance(requirements, list):
        return names
    for requirement in requirements:
        if not isinstance(requirement, str):
            continue
        name = requirement_name(requirement)
        if name:
            names.append(name)
    return names


def _table(parent: dict[str, Any], key: str, where: str) -> dict[str, Any]:
    """A sub-table of a TOML document, empty when absent.

    Raises:
        ValueError: If the key holds something other than a table.
    """
    value = parent.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"{where} must be a table, got {type(value).__name__}")
    return value


def _table_keys(table: Any, exclude: Iterable[str] = ()) -> list[str]:
    if not isinstance(table, dict):
        return []
    return [key for key in table if key not in exclude]


class _GroupIndex:
    """Accumulates dependency name -> set of groups."""

    def __init__(self) -> None:
        self._groups: dict[str, set[str]] = {}

    def add(self, names: Iterable[str], group: str) -> None:
        for name in names:
            self._groups.setdefault(name, set()).add(group)

    def freeze(self) -> dict[str, tuple[str, ...]]:
        return {name: tuple(sorted(groups)) for name, groups in self._groups.items()}


def _parent_component(project: dict, poetry: dict) -> ParentComponent | None:
    name = project.get("name") or poetry.get("name")
    if not name:
        return None
    name = str(name)
    version = str(project.get("version") or poetry.get("version") or "")
    purl = make_pypi_purl(name, version)
    description = project.get("description") or poetry.get("description")
    return ParentComponent(
        name=name,
        version=version,
        bom_ref=purl,
        purl=purl,
        type="application",
        description=description if isinstance(description, str) else None,
    )


def parse_pyproject_data(data: dict[str, Any], pyproject_file: str | None = None) -> LockBundle:
    """
    Build a manifest-only bundle from decoded pyproject.toml content.

    Args:
        data: Decoded TOML document
        pyproject_file: Originating path, recorded on the bundle

    Returns:
        LockBundle with parent component, direct/group dependency names,
        workspace paths and mode flags. Package and edge lists are empty.

    Raises:
        ValueError: If a known table or array has the wrong TOML type
    """
    project = _table(data, "project", "[project]")
    tool = _table(data, "tool", "[tool]")
    poetry = _table(tool, "poetry", "[tool.poetry]")
    uv = _table(tool, "uv", "[tool.uv]")
    pdm = _table(tool, "pdm", "[tool.pdm]")

    direct: list[str] = []
    direct += _requirement_names(project.get("dependencies"))
    direct += _table_keys(poetry.get("dependencies"), exclude=("python",))

    groups = _GroupIndex()

    # PEP 621 extras
    for extra, requirements in _table(project, "optional-dependencies", "[project.optional-dependencies]").items():
        groups.add(_requirement_names(requirements), extra)

    # PEP 735 dependency groups
    for group, requirements in _table(data, "dependency-groups", "[dependency-groups]").items():
        groups.add(_requirement_names(requirements), group)

    # Poetry >= 1.2 groups, and the legacy dev-dependencies table
    for group, group_table in _table(poetry, "group", "[tool.poetry.group]").items():
        if isinstance(group_table, dict):
            groups.add(_table_keys(group_table.get("dependencies"), exclude=("python",)), group)
    groups.add(_table_keys(poetry.get("dev-dependencies"), exclude=("python",)), "dev")

    groups.add(_requirement_names(uv.get("dev-dependencies")), "dev")

    pdm_dev = pdm.get("dev-dependencies", {})
    if isinstance(pdm_dev, dict):
        for group, requirements in pdm_dev.items():
            groups.add(_requirement_names(requirements), group)

    workspace_paths = _table(uv, "workspace", "[tool.uv.workspace]").get("members", [])
    if not isinstance(workspace_paths, list):
        raise ValueError(f"tool.uv.workspace.members must be an array, got {type(workspace_paths).__name__}")

    bundle = LockBundle(
        parent_component=_parent_component(project, poetry),
        direct_deps_keys=tuple(dict.fromkeys(direct)),
        group_deps_keys=groups.freeze(),
        workspace_paths=tuple(str(p) for p in workspace_paths),
        modes=ModeFlags(
            poetry_mode="poetry" in tool,
            uv_mode="uv" in tool,
            hatch_mode="hatch" in tool,
        ),
        pyproject_file=pyproject_file,
    )

    logger.debug(
        f"Parsed pyproject: {len(bundle.direct_deps_keys)} direct, "
        f"{len(bundle.group_deps_keys)} grouped, {len(bundle.workspace_paths)} workspace path(s)"
    )
    return bundle


def parse_pyproject_toml_file(pyproject_file: Union[str, Path]) -> LockBundle:
    """
    Parse a pyproject.toml file into a manifest-only bundle.

    Args:
        pyproject_file: Path to pyproject.toml

    Returns:
        LockBundle (see ``parse_pyproject_data``)

    Raises:
        InputNotFoundError: If the file does not exist
        FileProcessingError: If the file is not UTF-8 TOML or its tables have the wrong shape
    """
    path = Path(pyproject_file)
    if not path.is_file():
        raise InputNotFoundError(path, label="pyproject.toml")

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise FileProcessingError(f"Failed to parse {path}: {e}") from e
    except OSError as e:
        raise FileProcessingError(f"Failed to read {path}: {e}") from e

    try:
        return parse_pyproject_data(data, pyproject_file=str(path))
    except ValueError as e:
        raise FileProcessingError(f"Invalid pyproject.toml {path}: {e}") from e
