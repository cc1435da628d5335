"""
Custom exceptions for the weight insights engine.

Insufficient data and degenerate numeric cases are not errors; the
analyzers resolve those to sentinel results. Only the conditions below
are signalled to the caller.
"""


class AnalysisCancelledError(Exception):
    """
    Raised when an analysis is cancelled through its CancellationToken.

    This is a cooperative stop signal, not a computation failure. A
    cancelled analysis never populates the result cache.
    """
    pass


class ConfigurationError(Exception):
    """
    Raised when a configuration file or override cannot be applied.

    This covers unknown sections or keys and values that would make the
    analyzers meaningless (for example a non-positive window size).
    """
    pass
