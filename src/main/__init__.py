"""
Main module - Composition Root

Loads settings, builds the dependency container and exposes the two entry
points: the FastAPI app factory and the ``plan``/``serve`` CLI.
"""

from .config import AppSettings, get_settings
from .container import AppContainer, get_container, init_container

__all__ = [
    "AppContainer",
    "AppSettings",
    "get_container",
    "get_settings",
    "init_container",
]
