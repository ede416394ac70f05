import pytest

from rapflow.core.clipboard import copy_to_clipboard
from rapflow.core.errors import ClipboardError


class FakeClipboard:
    def __init__(self, accept=True, broken=False):
        self.accept = accept
        self.broken = broken
        self._text = ""

    def setText(self, text):
        if self.broken:
            raise RuntimeError("clipboard owned by another process")
        if self.accept:
            self._text = text

    def text(self):
        return self._text


def test_copies_text():
    clipboard = FakeClipboard()
    copy_to_clipboard("bar one\nbar two", clipboard)
    assert clipboard.text() == "bar one\nbar two"


def test_empty_text_is_a_noop():
    copy_to_clipboard("", None)


def test_missing_clipboard():
    with pytest.raises(ClipboardError):
        copy_to_clipboard("bars", None)


def test_rejected_write():
    with pytest.raises(ClipboardError):
        copy_to_clipboard("bars", FakeClipboard(accept=False))


def test_write_error_is_wrapped():
    with pytest.raises(ClipboardError) as info:
        copy_to_clipboard("bars", FakeClipboard(broken=True))
    assert "another process" in info.value.detail
