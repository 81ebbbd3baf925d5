class AnalysisError(Exception):
    """Base class for every failure raised by the scoring engine."""


class DecodeError(AnalysisError):
    """Image bytes could not be interpreted as pixel data."""


class InvalidInput(AnalysisError):
    """Image is missing, has degenerate dimensions or an unsupported channel count."""


class DetectionFailure(AnalysisError):
    """The face detector itself errored. "No face found" is not a failure."""
