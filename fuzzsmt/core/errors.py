"""Exception hierarchy for FuzzSMT.

``ConfigurationError`` is raised before any output is produced and is
reported to the user by the CLI. ``GenerationError`` signals a broken
invariant inside a layer; it is never caught inside the generator.
"""


class FuzzSMTError(Exception):
    """Base class for all FuzzSMT errors."""


class ConfigurationError(FuzzSMTError):
    """Invalid logic name, option value or bound combination."""


class GenerationError(FuzzSMTError):
    """A generation layer could not satisfy one of its invariants."""
