"""Pretty formatting utilities for CLI output."""

import json
import shutil
import sys
from typing import IO, Optional


def header(text: str, use_emoji: bool = True) -> str:
    """Create a boxed header with optional emoji."""
    width = max(shutil.get_terminal_size(fallback=(80, 24)).columns, len(text) + 8)

    h_line = "─" * (width - 2)
    emoji = "📚 " if use_emoji else ""
    # The emoji renders two columns wide
    label_width = len(text) + (3 if use_emoji else 0)

    return "\n".join([
        f"┌{h_line}┐",
        f"│ {emoji}{text}{' ' * (width - label_width - 3)}│",
        f"└{h_line}┘",
    ])


def print_json(data: object, file: Optional[IO[str]] = None) -> None:
    """Print JSON data to file (default stdout), keeping emoji and warnings readable."""
    print(json.dumps(data, indent=2, ensure_ascii=False), file=file or sys.stdout)


def print_header(text: str, use_emoji: bool = True, file: Optional[IO[str]] = None) -> None:
    """Print a header to file (default stdout)."""
    print(header(text, use_emoji), file=file or sys.stdout)
