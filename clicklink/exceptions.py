"""Exceptions raised by clicklink.

Business outcomes of the link lifecycle (unknown code, wrong owner, exhausted
link) are return values, not exceptions. Only the conditions below escape.

Classes:
    ClickLinkError:
        Generic base class for clicklink exceptions.

    ConfigLoadError:
        Raised when the configuration file is missing or holds invalid values.

    CodeGenerationError:
        Raised when no unused short code could be generated.

Example:
    >>> from clicklink.exceptions import ConfigLoadError
    >>> raise ConfigLoadError("config.properties not found")
    Traceback (most recent call last):
        ...
    clicklink.exceptions.ConfigLoadError: config.properties not found
"""


class ClickLinkError(Exception):
    """Generic base class for clicklink exceptions."""

    pass


class ConfigLoadError(ClickLinkError):
    """Exception raised when configuration cannot be read. Fatal at startup."""

    pass


class CodeGenerationError(ClickLinkError):
    """Exception raised when every generated short code collided with a stored one."""

    pass
