"""Error taxonomy for the signal core.

Every error is a caller contract violation; nothing here is retried.
"""

from __future__ import annotations


class SignalError(ValueError):
    """Base class for all signal-core errors."""


class InvalidConfiguration(SignalError):
    """A tracker or config object was built with an unusable window."""


class EmptyBarSequence(SignalError):
    """A run was evaluated without any bars (no data, as opposed to no signal)."""


class OutOfOrderBar(SignalError):
    """A bar arrived with a timestamp not strictly after the previous one."""


class InvalidInput(SignalError):
    """Malformed numeric input (non-positive price, negative cash, NaN)."""
