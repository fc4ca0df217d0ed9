"""
UI package for the Matchday live-match tracker.

This package contains the Flask web server that drives the sideline screen.
"""
from .web_app import WebAppState, create_app, run_web_app

__all__ = ["WebAppState", "create_app", "run_web_app"]
