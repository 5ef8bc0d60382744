"""Prompt templating helpers."""
from __future__ import annotations
from pathlib import Path

DEFAULT_TEMPLATE = Path(__file__).resolve().parent / "prompts" / "rewrite_system.txt"

def load_template(path: str | Path = DEFAULT_TEMPLATE) -> str:
    """
    Load a prompt template file.

    Args:
        path: Path to template.
    """
    return Path(path).read_text(encoding="utf-8").strip()

def render_prompt(template: str, phrases: str) -> str:
    """
    Render the relevant-phrases hint into the template.

    Args:
        template: Template content containing {{phrases}}.
        phrases: Comma-separated terminology hint, possibly empty.

    Returns:
        Rendered system prompt.
    """
    return template.replace("{{phrases}}", phrases)
