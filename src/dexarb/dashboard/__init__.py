"""Dashboard HTTP API."""

from dexarb.dashboard.server import AppState, build_state, create_app, main


__all__ = [
    "AppState",
    "build_state",
    "create_app",
    "main",
]
