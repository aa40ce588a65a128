import logging

import pyperclip

logger = logging.getLogger(__name__)


class ClipboardError(Exception):
    """Raised when no clipboard mechanism is available."""
    pass


def copy_to_clipboard(text: str) -> None:
    logger.debug(f"Copying {len(text)} characters to the clipboard")
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        raise ClipboardError(f"Could not copy to clipboard: {e}")
