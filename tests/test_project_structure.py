"""Basic project scaffolding tests."""

import importlib


def test_package_importable() -> None:
    """Verify the top-level package is importable."""
    import battleships  # noqa: F401  (import used to ensure availability)

    assert battleships.__version__


def test_submodules_exist() -> None:
    """All primary submodules should be importable."""
    modules = [
        "battleships.engine",
        "battleships.service",
        "battleships.telemetry",
        "battleships.settings",
        "battleships.cli",
    ]

    for module in modules:
        assert importlib.import_module(module) is not None
