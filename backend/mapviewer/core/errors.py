"""Errors raised while turning a layer entry into a map layer.

Loaders raise one of the ``LoadError`` subclasses below. The dispatcher
passes them through untouched and the registry driver is the only place
they are caught, reported and skipped.

Example:
    Handle a failed load:
        >>> from mapviewer.core import errors
        >>> try:
        ...     await dispatcher.dispatch(layer_config)
        ... except errors.LoadError as e:
        ...     print(f"Could not load layer: {e}")
"""


class LoadError(RuntimeError):
    """Base class for every failure of a single layer load."""


class FetchError(LoadError):
    """The asset could not be retrieved.

    Raised for transport failures, non-success HTTP statuses and local
    files that are missing or unreadable.
    """


class DecodeError(LoadError):
    """The retrieved bytes could not be parsed as the expected format."""


class ConfigError(LoadError):
    """A layer entry is missing a required field or is otherwise invalid.

    Also raised for duplicate layer names and for a layer configuration
    file that cannot be read or validated.
    """
