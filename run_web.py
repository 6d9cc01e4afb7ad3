#!/usr/bin/env python3
"""
Main entry point for the Kampfgericht scorer web application.

This script launches the Flask-based web server. Configuration comes from
the environment (see kampfgericht/config.py).
"""
from kampfgericht.ui.web_app import run_web_app

if __name__ == "__main__":
    run_web_app()
