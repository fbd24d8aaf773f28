class SignalControlError(Exception):
    """Base class for all errors raised by the signal control core."""


class InvalidConfiguration(SignalControlError):
    """Timing parameters violate the cycle/min/max invariant."""


class InvalidInput(SignalControlError):
    """Malformed reading set, bad speed, unknown lane id, etc."""


class InvalidStateTransition(InvalidInput):
    """Playback operation not allowed in the current state."""


class ProgrammingGuard(InvalidConfiguration):
    """
    Defensive re-validation failed inside the allocation engine.
    Configs are validated on update, so reaching this is a bug.
    """
