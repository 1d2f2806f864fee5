class CodesphereError(Exception):
    """Base class for errors raised by codesphere."""


class GenerationError(CodesphereError):
    """The generation backend failed. Callers treat it as opaque."""


class CommandError(CodesphereError):
    """A slash-command was misused or its file operation failed."""
