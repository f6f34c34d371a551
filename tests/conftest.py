import pytest
from rich.console import Console

from gincli import App, DispatchConfig


@pytest.fixture
def console():
    return Console(width=70, force_terminal=True, highlight=False, color_system=None, legacy_windows=False)


@pytest.fixture
def app(console):
    return App("prog", console=console, error_console=console)


@pytest.fixture
def config():
    """Dispatch settings isolated from the process environment."""
    return DispatchConfig(environ={})


@pytest.fixture
def calls():
    """Records the order in which hooks and actions are invoked."""
    return []
