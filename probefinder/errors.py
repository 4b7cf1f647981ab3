"""
Exceptions raised by the fingerprinting core.

A probe missing from the index is not an error (it simply casts no votes),
and a query without any votes is reported as ``None`` rather than raised.
"""


class ProbeFinderError(Exception):
    """Base class for every error raised by probefinder."""


class TransformFailure(ProbeFinderError, ValueError):
    """The signal is shorter than one analysis frame, so no spectrum exists."""


class InvalidSignal(TransformFailure):
    """The signal has no samples (or is not a 1-D sample sequence)."""


class UnknownTrack(ProbeFinderError, KeyError):
    """A track id that the catalog never assigned."""
