"""Pytest configuration and shared fixtures for all tests."""

from pathlib import Path

import pytest

from pylock_inspect.models import Component, DependencyEdgeSet, LockBundle

PYLOCK_TEST_DATA = Path(__file__).parent / "test-data" / "pylock"


@pytest.fixture
def test_data() -> Path:
    """Directory holding the lock file and pyproject.toml fixtures."""
    return PYLOCK_TEST_DATA


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Keep CLI environment fallbacks from leaking into tests."""
    monkeypatch.delenv("PYLOCK_LOCK_FILE", raising=False)
    monkeypatch.delenv("PYLOCK_PYPROJECT_FILE", raising=False)
    monkeypatch.delenv("PYLOCK_INSPECT_LOG_LEVEL", raising=False)


@pytest.fixture
def django_bundle() -> LockBundle:
    """One root, no dependencies."""
    return LockBundle(
        pkg_list=(Component(name="django", version="4.2", bom_ref="pkg:pypi/django@4.2"),),
        dependencies_list=(DependencyEdgeSet(ref="pkg:pypi/django@4.2"),),
        root_list=("pkg:pypi/django@4.2",),
    )


@pytest.fixture
def three_component_bundle() -> LockBundle:
    """One root with two transitive dependencies."""
    return LockBundle(
        pkg_list=(
            Component(name="Django", version="4.2", bom_ref="pkg:pypi/django@4.2"),
            Component(name="asgiref", version="3.8.1", bom_ref="pkg:pypi/asgiref@3.8.1"),
            Component(name="sqlparse", version="0.5.0", bom_ref="pkg:pypi/sqlparse@0.5.0"),
        ),
        dependencies_list=(
            DependencyEdgeSet(
                ref="pkg:pypi/django@4.2",
                depends_on=("pkg:pypi/asgiref@3.8.1", "pkg:pypi/sqlparse@0.5.0"),
            ),
            DependencyEdgeSet(ref="pkg:pypi/asgiref@3.8.1"),
            DependencyEdgeSet(ref="pkg:pypi/sqlparse@0.5.0"),
        ),
        root_list=("pkg:pypi/django@4.2",),
    )
