"""Exceptions raised by the footprint pipeline."""


class InvalidImageError(ValueError):
    """The input photo is missing, empty or not a decodable image."""


class ExternalAnalysisFailure(RuntimeError):
    """The remote vision analysis failed (transport, timeout, HTTP error or empty reply)."""
