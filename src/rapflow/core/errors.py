"""Exceptions raised across RapFlow."""
from __future__ import annotations


class RapFlowError(Exception):
    """Base exception for RapFlow."""

    def __init__(self, message: str = "", detail: str | None = None):
        super().__init__(message)
        self.detail = detail


class ValidationError(RapFlowError):
    """Missing or invalid generation request fields."""
    pass


class ConcurrentRequestError(RapFlowError):
    """A generation was submitted while another one is still running."""
    pass


class ConfigurationError(RapFlowError):
    """Backend credentials or setup are missing."""
    pass


class UpstreamError(RapFlowError):
    """The lyrics backend failed or answered with a non-success status."""
    pass


class EmptyResponseError(RapFlowError):
    """The lyrics backend returned no usable text."""
    pass


class ExportError(RapFlowError):
    """Rasterizing or encoding the lyric card produced no output."""
    pass


class ClipboardError(RapFlowError):
    """Copying text to the system clipboard failed."""
    pass
