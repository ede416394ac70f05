from __future__ import annotations

import logging

from rapflow.core.errors import ClipboardError

logger = logging.getLogger(__name__)


def copy_to_clipboard(text: str, clipboard) -> None:
    """Put ``text`` on a QClipboard-like object and check it landed there."""
    if not text:
        return
    if clipboard is None:
        raise ClipboardError("Clipboard is not available.")

    try:
        clipboard.setText(text)
        copied = clipboard.text()
    except Exception as e:
        logger.error("Clipboard write failed: %s", e)
        raise ClipboardError("Could not copy lyrics to the clipboard.", detail=str(e)) from e

    if copied != text:
        logger.error("Clipboard write was not accepted (%d of %d chars read back)", len(copied or ""), len(text))
        raise ClipboardError("Could not copy lyrics to the clipboard.")
