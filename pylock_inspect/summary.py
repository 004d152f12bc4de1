"""Aggregate summary of a parsed bundle for human-facing reports."""

from typing import Any, Dict

from .models import LockBundle


def build_summary(bundle: LockBundle) -> Dict[str, Any]:
    """
    Summarize a bundle.

    Pure and deterministic: the same bundle always yields an equal dict with
    the same key order. A missing parent component is reported as None.

    Args:
        bundle: Parsed bundle

    Returns:
        Dict with ``lock``, ``pyproject``, ``modes``, ``parentComponent`` and
        ``counts`` keys.
    """
    parent = bundle.parent_component
    return {
        "lock": bundle.lock_file,
        "pyproject": bundle.pyproject_file,
        "modes": bundle.modes.to_dict(),
        "parentComponent": (
            {
                "name": parent.name,
                "version": parent.version,
                "bom-ref": parent.bom_ref,
                "purl": parent.purl,
                "type": parent.type,
            }
            if parent
            else None
        ),
        "counts": {
            "pkgList": len(bundle.pkg_list),
            "rootList": len(bundle.root_list),
            "dependenciesList": len(bundle.dependencies_list),
            "directDepsKeys": len(bundle.direct_deps_keys),
            "groupDepsKeys": len(bundle.group_deps_keys),
            "workspacePaths": len(bundle.workspace_paths),
        },
    }
