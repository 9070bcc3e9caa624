"""Exceptions raised by metric sources and recorders."""


class ProcrecError(Exception):
    """Base class for all procrec errors."""


class UnsupportedStatError(ProcrecError):
    """A stat group cannot be collected on this platform.

    Metric sources raise this instead of a free-text error so that capability
    probing can tell "never available here" apart from a transient failure.
    """

    def __init__(self, group: str, reason: str = "not implemented on this platform"):
        self.group = group
        self.reason = reason
        super().__init__(f"{group}: {reason}")


class CollectionError(ProcrecError):
    """A single read of a stat group failed."""

    def __init__(self, group: str, message: str):
        self.group = group
        super().__init__(f"failed to collect {group}: {message}")


__all__ = ["ProcrecError", "UnsupportedStatError", "CollectionError"]
