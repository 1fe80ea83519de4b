"""Exceptions raised while setting up a validation run."""


class SimpSigsError(Exception):
    """Base class for all simpsigs errors."""


class ConfigurationError(SimpSigsError):
    """Raised when a run cannot start: bad target directory, a missing or
    ambiguous trust-anchor RPM, or a keyring that yields no keys."""
