"""Tests that source directories are installable packages."""

import importlib
from pathlib import Path

import pytest


REPO_ROOT = Path(__file__).resolve().parents[2]


@pytest.mark.parametrize("top", ["swbrowser", "app"])
def test_source_directories_have_init(top):
    root = REPO_ROOT / top
    missing = [
        str(path.relative_to(REPO_ROOT))
        for path in [root, *root.rglob("*")]
        if path.is_dir()
        and path.name != "__pycache__"
        and any(path.glob("*.py"))
        and not (path / "__init__.py").exists()
    ]

    assert missing == []


@pytest.mark.parametrize("module", ["app.cli", "app.api.main", "swbrowser.utils.logger"])
def test_modules_import_from_regular_packages(module):
    package = importlib.import_module(module.rsplit(".", 1)[0])

    assert package.__file__ is not None
    assert importlib.import_module(module)
