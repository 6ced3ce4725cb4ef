"""Typed exceptions for unionpep."""


class UnionPepError(Exception):
    """Base exception for unionpep failures."""


class PathMappingError(UnionPepError):
    """Raised when a path argument cannot be safely mapped."""


class DocumentReadError(UnionPepError):
    """Raised when the proposal document cannot be read or decoded."""


class DocumentWriteError(UnionPepError):
    """Raised when a serialized document cannot be written."""


class DocumentStructureError(UnionPepError):
    """Raised when the heading hierarchy of a document is inconsistent."""


class GrammarSyntaxError(UnionPepError):
    """Raised when a grammar listing holds a line that is not a production."""


class ConfigError(ValueError, UnionPepError):
    """Document contract validation errors."""


class UsageError(ValueError, UnionPepError):
    """Command usage or user-input errors."""
