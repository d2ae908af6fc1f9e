"""Pytest fixtures for the runnable moustache examples.

Every example directory holds an ``app.py`` that builds an Engine and renders
at import time. ``example_app`` runs that script fresh for each test and
exposes its globals as attributes, so no engine or template cache is shared
between tests.
"""

import runpy
from pathlib import Path
from types import SimpleNamespace

import pytest


@pytest.fixture
def example_app(request: pytest.FixtureRequest) -> SimpleNamespace:
    """Run the app.py next to the requesting test and return its globals."""
    app_path = Path(request.path).with_name("app.py")
    if not app_path.is_file():
        pytest.fail(f"{request.path.name} has no sibling app.py")
    # Not "__main__", so the script's main() is not run.
    run_name = f"moustache_example_{app_path.parent.name}"
    namespace = runpy.run_path(str(app_path), run_name=run_name)
    return SimpleNamespace(**namespace)
