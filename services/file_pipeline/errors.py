"""Failures raised by the post-download file pipeline."""


class PipelineError(RuntimeError):
    """Base error for file pipeline failures."""


class ContentUnavailable(PipelineError):
    """The completed transfer's content path could not be resolved locally."""


class NoEligibleFiles(PipelineError):
    """The completed transfer contains no supported audio files."""


class FileMoveError(PipelineError):
    """A discovered file could not be moved into the intake directory."""
