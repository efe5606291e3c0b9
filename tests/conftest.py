"""Shared pytest fixtures for openframe tests."""

import pytest

from openframe.layout import Axis, Child, LayoutStore, NestedContent, Section, WidgetContent


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config dir at a temp directory so tests never touch real layouts."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("OPENFRAME_CONFIG_DIR", str(config_dir))
    monkeypatch.delenv("OPENFRAME_PROFILE", raising=False)
    monkeypatch.delenv("OPENFRAME_LOG_LEVEL", raising=False)
    return config_dir


@pytest.fixture
def store(isolated_config):
    """A layout store writing under the temp config dir."""
    return LayoutStore()


@pytest.fixture
def single_tree():
    """Root row with one empty pane, with predictable ids."""
    return Section("root", Axis.ROW, (Child("a", 1.0),))


@pytest.fixture
def nested_tree():
    """Root row: a clock pane and a column of two empty panes.

    root (row)
    ├── clock-slot  flex 2   widget "clock-1"
    └── right       flex 1   section "col" (column)
        ├── top     flex 1
        └── bottom  flex 3
    """
    column = Section("col", Axis.COLUMN, (Child("top", 1.0), Child("bottom", 3.0)))
    return Section(
        "root",
        Axis.ROW,
        (
            Child("clock-slot", 2.0, WidgetContent("clock-1")),
            Child("right", 1.0, NestedContent(column)),
        ),
    )
