"""Text helpers shared by the shell export and the describe output."""

import logging
import math
import shlex
import textwrap
from typing import Any

logger = logging.getLogger(__name__)


def shell_value(value: Any) -> str:
    """Render a resolved value as a shell word.

    Strings and lists are quoted when needed (lists joined with commas),
    booleans are written as ``true``/``false`` and numbers bare. Scalars and
    non-empty lists of trimmed, comma-free strings parse back to the same
    value when read as an override; other lists are logged and rendered
    as is.

    Args:
        value: A resolved configuration value.

    Returns:
        A string safe to place after ``NAME=`` in a POSIX shell.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        if isinstance(value, float):
            if math.isnan(value):
                return "NaN"
            if math.isinf(value):
                return "Infinity" if value > 0 else "-Infinity"
            return repr(value)
        return str(value)
    if isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
        if not items or any("," in item or item != item.strip() for item in items):
            logger.warning(f"List {items!r} will not read back unchanged from a comma-separated value")
        return shlex.quote(",".join(items))
    return shlex.quote(str(value))


def wrap_text(text: str, width: int = 75) -> str:
    """Word-wrap text to ``width`` columns, keeping existing line breaks."""
    if not text:
        return text
    return "\n".join(
        textwrap.fill(line, width=width) if line else line
        for line in text.splitlines()
    )
