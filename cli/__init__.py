"""Command line interface for the calibration setpoint builder."""

from importlib import import_module
from types import ModuleType

_SUBMODULES = {"app", "client", "clipboard", "config", "render"}


def __getattr__(name: str) -> ModuleType:
    if name in _SUBMODULES:
        return import_module(f"cli.{name}")
    raise AttributeError(name)

# ``cli.app`` must stay the module, not the Typer instance: tests patch
# ``cli.app.ApiClient`` and ``cli.app.copy_text`` through that path.

__all__ = []
