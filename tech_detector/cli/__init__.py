"""CLI module for tech-detector.

This module provides the command-line interface. Options fall back to
environment variables where noted in --help.
"""

from .main import (
    build_config,
    cli,
    main,
    render_output,
    run_detection,
)

__all__ = [
    "cli",
    "main",
    "build_config",
    "run_detection",
    "render_output",
]
