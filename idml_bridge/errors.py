"""Exceptions raised by the IDML extraction and rewrite pipeline."""


class IDMLBridgeError(Exception):
    """Base exception for all idml_bridge errors."""


class FormatError(IDMLBridgeError):
    """Raised when an archive or an XML entry is malformed."""


class NotFoundError(IDMLBridgeError):
    """Raised when a requested package entry (or input file) is absent."""


class EmptyResultError(IDMLBridgeError):
    """Raised when extraction yields no text units at all."""
