"""Global pytest configuration for rulework.

Tests are marked after the top-level folder they live in (`unit`, `contract`,
`integration`, `e2e`) unless they already carry that mark.
"""

from __future__ import annotations

from pathlib import Path

import pytest

# pylint: disable=unused-argument

TESTS_ROOT = Path(__file__).parent.resolve()
FOLDER_MARKERS = {"unit", "contract", "integration", "e2e"}

pytest_plugins = [
    "tests.fixtures.counters",
    "tests.fixtures.sqlite",
]


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Add the default folder mark to every collected item."""
    for item in items:
        path = item.path.resolve()  # pytest>=8: pathlib.Path
        if TESTS_ROOT not in path.parents:
            continue
        folder = path.relative_to(TESTS_ROOT).parts[0]
        if folder not in FOLDER_MARKERS:
            continue
        if not any(marker.name == folder for marker in item.iter_markers()):
            item.add_marker(getattr(pytest.mark, folder))
