"""
Canonical output for bundles, query results and summaries.

Two independent axes: the shape (full bundle, one dependency node, summary)
and the sink (a stream or a file). JSON output is always indented by two
spaces and ends with a newline so that repeated runs over unchanged input are
byte-for-byte identical.
"""

import json
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from .exceptions import FileProcessingError
from .logging_config import logger
from .models import LockBundle
from .summary import build_summary

JSON_INDENT = 2

# ============================================================================
# JSON
# ============================================================================


def _to_jsonable(obj: Any) -> Any:
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return obj


def to_canonical_json(obj: Any) -> str:
    """
    Serialize to canonical JSON text.

    Args:
        obj: A dict/list/None, or any model exposing ``to_dict()``

    Returns:
        Indented JSON followed by a single trailing newline

    Examples:
        >>> to_canonical_json({"ref": "pkg:pypi/django@4.2", "dependsOn": []})
        '{\\n  "ref": "pkg:pypi/django@4.2",\\n  "dependsOn": []\\n}\\n'
    """
    return json.dumps(_to_jsonable(obj), indent=JSON_INDENT, ensure_ascii=False) + "\n"


def write_json(obj: Any, path: Union[str, Path]) -> Path:
    """
    Write canonical JSON to a file.

    The file is fully written and closed before this returns.

    Args:
        obj: Object to serialize (see ``to_canonical_json``)
        path: Destination file

    Returns:
        Resolved destination path

    Raises:
        FileProcessingError: If the file cannot be written
    """
    out_path = Path(path).resolve()
    text = to_canonical_json(obj)
    try:
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(text)
    except OSError as e:
        raise FileProcessingError(f"Failed to write JSON to {out_path}: {e}") from e
    logger.info(f"Wrote {len(text)} bytes of JSON to {out_path}")
    return out_path


# ============================================================================
# Text report
# ============================================================================


def _summary_lines(bundle: LockBundle, title: str) -> List[str]:
    summary = build_summary(bundle)
    parent = summary["parentComponent"]
    modes = summary["modes"]
    counts = summary["counts"]

    lines = [f"=== {title} ==="]
    if summary["lock"]:
        lines.append(f"lock: {summary['lock']}")
    if summary["pyproject"]:
        lines.append(f"pyproject: {summary['pyproject']}")
    if parent:
        lines.append(f"parentComponent: {parent['name'] or '(none)'}@{parent['version']}")
    else:
        lines.append("parentComponent: (none)")
    lines.append(f"modes: poetry={modes['poetryMode']} uv={modes['uvMode']} hatch={modes['hatchMode']}")
    lines.append(f"pkgList.length: {counts['pkgList']}")
    lines.append(f"rootList.length: {counts['rootList']}")
    lines.append(f"dependenciesList.length: {counts['dependenciesList']}")
    lines.append(
        f"counts: workspacePaths={counts['workspacePaths']} "
        f"directDepsKeys={counts['directDepsKeys']} groupDepsKeys={counts['groupDepsKeys']}"
    )
    return lines


def _section(title: str, body: Iterable[str]) -> List[str]:
    return ["", f"=== {title} ===", *body]


def render_text_report(
    bundle: LockBundle,
    show_pkgs: bool = False,
    show_deps: bool = False,
    show_direct: bool = False,
    show_groups: bool = False,
    show_workspace_paths: bool = False,
    title: Optional[str] = None,
) -> List[str]:
    """
    Render the line-oriented human report for a bundle.

    Sections appear in a fixed order. Names in the direct and group
    sections are sorted; packages and dependency nodes keep bundle order.

    Args:
        bundle: Parsed bundle
        show_pkgs: Append ``name@version  ref=<bom-ref>`` lines
        show_deps: Append ``<ref> -> <count>`` lines
        show_direct: Append direct dependency names
        show_groups: Append ``name -> group, group`` lines
        show_workspace_paths: Append workspace glob patterns
        title: Header title

    Returns:
        Report lines without trailing newlines
    """
    lines = _summary_lines(bundle, title or "result summary")

    if show_workspace_paths:
        lines += _section("workspacePaths", bundle.workspace_paths)
    if show_direct:
        lines += _section("directDepsKeys", sorted(bundle.direct_deps_keys))
    if show_groups:
        lines += _section(
            "groupDepsKeys",
            (f"{name} -> {', '.join(bundle.group_deps_keys[name])}" for name in sorted(bundle.group_deps_keys)),
        )
    if show_pkgs:
        lines += _section("pkgList", (f"{c.name}@{c.version}  ref={c.bom_ref}" for c in bundle.pkg_list))
    if show_deps:
        lines += _section("dependenciesList", (f"{d.ref} -> {len(d.depends_on)}" for d in bundle.dependencies_list))

    return lines
