# errors.py


class ConfigurationError(ValueError):
    """A game or initialization parameter is out of range or malformed."""


class InvariantViolation(RuntimeError):
    """The engine reached a state its own contract forbids."""
