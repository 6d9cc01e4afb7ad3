"""
User interface package for the Kampfgericht scorer application.

This package contains the Flask web API used by the scorer screen.
"""
from .web_app import create_app, run_web_app, ScorerRegistry

__all__ = ["create_app", "run_web_app", "ScorerRegistry"]
