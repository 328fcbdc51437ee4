"""
Exception types raised by the proteome pathway analysis package.
"""


class ProteomePathwaysError(Exception):
    """Base class for all package errors."""


class ConfigurationError(ProteomePathwaysError, ValueError):
    """
    Raised when an analysis cannot start because its inputs are malformed.

    Covers empty expression matrices, empty gene-set databases, invalid
    sample groupings, missing table columns and out-of-range settings.
    """

