"""Rich console utilities for tech-detector.

Everything is printed to stderr; stdout is reserved for the JSON result.
"""

import os
from typing import Mapping

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from .result import FINAL_RESULT_ORDER, DetectionResult

IS_CI = os.getenv("CI") == "true" or os.getenv("GITHUB_ACTIONS") == "true"

custom_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "highlight": "magenta",
    }
)

# Shared console instance
console = Console(
    theme=custom_theme,
    stderr=True,
    force_terminal=IS_CI or None,
    color_system="auto",
)


def _format_entries(result: DetectionResult) -> str:
    names = []
    for entry in result.final_result:
        if entry.name in result.languages and entry.version is None:
            continue
        names.append(f"{entry.name} {entry.version}" if entry.version else entry.name)
    return ", ".join(names)


def print_scan_summary(results: Mapping[str, DetectionResult], title: str = "Technology Detection") -> None:
    """
    Print one table row per scanned project.

    Args:
        results: Mapping of project label to finalized result
        title: Table title
    """
    if not results:
        console.print("[warning]No projects were scanned.[/warning]")
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Project", style="cyan")
    table.add_column("Languages", style="highlight")
    table.add_column("Technologies")
    table.add_column("Items", justify="right")

    for label, result in results.items():
        counts = result.summary()
        total = sum(counts[category.value] for category in FINAL_RESULT_ORDER)
        table.add_row(
            label,
            ", ".join(sorted(result.languages)) or "-",
            _format_entries(result) or "-",
            str(total),
        )

    console.print(table)
