"""Command-line entry points for the price and funding monitors."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)


# Leave ``cli.app`` bound to the module so its names stay patchable.
__all__ = []
