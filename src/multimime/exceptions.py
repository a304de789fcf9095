"""Custom exceptions for multimime."""


class MultiMimeException(Exception):
    """Base exception for multimime."""
    pass


class SniffingError(MultiMimeException):
    """Exception raised when a file's content type cannot be sniffed."""
    pass
