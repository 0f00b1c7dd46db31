"""Custom exceptions for docforest."""


class DocforestError(Exception):
    """Base exception for all docforest errors."""

    pass


class ParseError(DocforestError):
    """Raised when an entity record payload cannot be decoded."""

    pass


class ValidationError(ParseError):
    """Raised when a decoded payload does not match the record schema."""

    pass


class ConfigError(DocforestError):
    """Raised when a configuration file is missing or invalid."""

    pass
