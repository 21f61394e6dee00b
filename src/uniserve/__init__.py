"""uniserve: declare tools once, serve them to every AI assistant provider."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from uniserve.core.app import App as App
    from uniserve.core.app import create_app as create_app

_APP_EXPORTS = {
    "App": "uniserve.core.app",
    "create_app": "uniserve.core.app",
}


def __getattr__(name: str) -> object:
    module_path = _APP_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'uniserve' has no attribute {name!r}")
