"""Exception hierarchy for Polykit."""


class PolykitError(Exception):
    """Base exception for all Polykit errors."""

    pass


class GeometryError(PolykitError):
    """Errors in geometric data or calculations."""

    pass


class SplineError(GeometryError):
    """Malformed spline control data."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class OutputBufferError(GeometryError):
    """A factory was asked to write into a missing output buffer.

    This indicates a caller bug rather than bad input data.
    """

    def __init__(self, factory: str) -> None:
        self.factory = factory
        super().__init__(f"{factory}: destination buffer is None")


class JobError(PolykitError):
    """Errors related to batch job files."""

    pass


class JobLoadError(JobError):
    """Error loading a job file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load job file '{path}': {reason}")


class JobFormatError(JobError):
    """Job file contents do not describe valid jobs."""

    def __init__(self, path: str, details: str) -> None:
        self.path = path
        self.details = details
        super().__init__(f"Invalid job file '{path}': {details}")


class JobProcessingError(JobError):
    """Error processing a specific job."""

    def __init__(self, job_name: str, reason: str) -> None:
        self.job_name = job_name
        self.reason = reason
        super().__init__(f"Error processing job '{job_name}': {reason}")


class ResultSaveError(PolykitError):
    """Error saving a result file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to save results '{path}': {reason}")


class ProcessingCancelledError(PolykitError):
    """Processing was cancelled by user."""

    def __init__(self, processed_count: int, pending_count: int) -> None:
        self.processed_count = processed_count
        self.pending_count = pending_count
        super().__init__(
            f"Processing cancelled: {processed_count} completed, {pending_count} pending"
        )
