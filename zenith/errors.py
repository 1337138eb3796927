"""
Error taxonomy for the session engine.

Sensor and advice failures are recovered at the boundary (API / report) and
turned into status text. Session state violations are programming errors.
"""


class ZenithError(RuntimeError):
    """Base class for engine errors."""


class SensorUnavailable(ZenithError):
    """A sensor is missing or access was denied; blocks session start."""


class SessionStateError(ZenithError):
    """Lifecycle transition attempted from the wrong state."""


class PreconditionViolation(SessionStateError):
    """Recording or stopping while no session is active."""


class EmptySessionError(ZenithError):
    """A session was stopped without any recorded ticks."""


class AdviceGenerationFailure(ZenithError):
    """The external advice call failed or timed out."""
