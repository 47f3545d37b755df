"""Custom exceptions for request batch construction."""

from __future__ import annotations


class RequestError(Exception):
    """Base exception for request-building failures."""


class InvalidArgumentError(RequestError, ValueError):
    """Raised when an argument cannot be turned into a request.

    Covers malformed fact triples, annotation values that are neither a
    string nor a list of strings, and evidence without a target.
    """


class InvalidOperationError(RequestError, ValueError):
    """Raised when an operation or target name is not recognized."""


class WireFormatError(RequestError):
    """Raised when a serialized batch cannot be decoded or validated."""
