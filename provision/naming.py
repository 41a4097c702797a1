"""Database name resolution from project configuration."""

from typing import Optional

TEST_SUFFIX = '_test'


def derive_name(project_identifier: str) -> str:
    """Turn a project identifier into a database name ('my.app-x' -> 'my_app_x')."""
    return (project_identifier or '').replace('.', '_').replace('-', '_')


def resolve_primary(configured_name: Optional[str], project_identifier: str) -> str:
    """Return the configured primary name, or derive it from the project."""
    if configured_name:
        return configured_name
    return derive_name(project_identifier)


def resolve_test(
    configured_test_name: Optional[str],
    resolved_primary_name: Optional[str],
    project_identifier: str
) -> str:
    """Return the configured test name, or the primary name plus '_test'."""
    if configured_test_name:
        return configured_test_name
    return resolve_primary(resolved_primary_name, project_identifier) + TEST_SUFFIX
