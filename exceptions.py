"""Exception classes for the slide tuner.

The simulation itself never raises: every physical quantity is clamped.
These are raised at the trial runner and optimizer boundary instead.
"""


class SlideTunerError(Exception):
    """Base exception class for all slide tuner errors."""

    pass


class ConfigurationError(SlideTunerError, ValueError):
    """Invalid tuner configuration.

    Raised when:
    - A gain range is NaN, infinite, reversed or outside the global bounds
    - A trial, sub-simulation or generation count is not positive
    - The search window or shrink factor is unusable
    """

    pass


class TrialError(SlideTunerError):
    """A worker failed while evaluating a gain triple.

    The whole trial batch fails so a missing sample cannot skew the ranking.
    """

    pass
