"""Exceptions raised by the ean-search client."""


class EANSearchError(Exception):
    """Base class for errors raised by this package."""


class ResponseFormatError(EANSearchError):
    """The service returned a body that could not be decoded or unwrapped."""
