"""Exceptions raised by parasect."""


class ParasectError(Exception):
    """Base class for every error parasect raises on purpose."""


class ConfigurationError(ParasectError, ValueError):
    """Invalid input detected before any probe is spawned."""


class SpawnError(ParasectError, RuntimeError):
    """A probe's command could not be started or was killed by a signal."""

    def __init__(self, index: int, detail: str):
        super().__init__(f"Probe x={index} failed: {detail}")
        self.index = index
        self.detail = detail


class InvariantViolation(ParasectError, RuntimeError):
    """The search window became inconsistent."""
