"""Clipboard support through the platform's command line tools."""

import logging
import shutil
import subprocess


CLIPBOARD_COMMANDS = [
    ["pbcopy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
    ["wl-copy"],
]


def copy_to_clipboard(text: str) -> bool:
    """Copy text to the clipboard. Returns True on success."""
    logger = logging.getLogger(__name__)

    for command in CLIPBOARD_COMMANDS:
        if shutil.which(command[0]) is None:
            continue
        try:
            proc = subprocess.run(command, input=text.encode('utf-8'), check=False)
        except OSError as e:
            logger.warning(f"Failed to run {command[0]}: {e}")
            continue
        if proc.returncode == 0:
            return True
        logger.warning(f"{command[0]} exited with status {proc.returncode}")

    return False
