"""
Defines custom exception classes for the application.
"""

class ConflictScopeException(Exception):
    """Base exception class for conflictscope application."""
    pass

class ClassificationError(ConflictScopeException):
    """Raised when a file path cannot be mapped to components."""
    pass

class MaterializationError(ConflictScopeException):
    """Raised when a revision cannot be checked out into the working tree."""
    pass

class ReportError(ConflictScopeException):
    """Raised when the change report cannot be read or written."""
    pass

class SourceError(ConflictScopeException):
    """Raised when an error occurs while reading changes from the hosting API."""
    pass

class FormatterError(ConflictScopeException):
    """Raised when an error occurs during summary formatting."""
    pass

class ConfigError(ConflictScopeException):
    """Raised when there is a configuration error."""
    pass
