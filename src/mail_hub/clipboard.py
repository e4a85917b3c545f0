"""Best-effort clipboard copy through the platform's clipboard command."""

from __future__ import annotations

import logging
import subprocess

from mail_hub.exceptions import ClipboardError

logger = logging.getLogger(__name__)

CLIPBOARD_COMMANDS = (
    ["pbcopy"],
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["clip"],
)


def _run_clipboard(text: str, timeout: int = 5) -> list[str]:
    """Pipe ``text`` into the first clipboard command that accepts it."""
    for command in CLIPBOARD_COMMANDS:
        try:
            result = subprocess.run(
                command,
                input=text,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired):
            continue
        if result.returncode == 0:
            return command
        logger.debug(f"{command[0]} failed: {result.stderr.strip()}")
    raise ClipboardError("No clipboard command available")


def copy_to_clipboard(text: str) -> bool:
    """Copy ``text``; returns ``False`` instead of raising on any failure."""
    try:
        command = _run_clipboard(text)
    except (ClipboardError, OSError) as e:
        logger.debug(f"Clipboard copy failed: {e}")
        return False
    logger.debug(f"Copied {len(text)} chars via {command[0]}")
    return True
